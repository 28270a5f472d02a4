import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("BOOKING_DB")

if not DATABASE_URL:
    raise RuntimeError("BOOKING_DB environment variable is not set")

DB_ECHO = (os.getenv("DB_ECHO") or "false").lower() == "true"

# dev only: create tables on startup instead of running alembic
DB_CREATE_ALL = (os.getenv("BOOKING_DB_CREATE_ALL") or "false").lower() == "true"

JWT_SECRET = os.getenv("JWT_SECRET")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM") or "HS256"

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET environment variable is not set")

ALLOWED_ORIGINS = [
    o.strip()
    for o in (os.getenv("ALLOWED_ORIGINS") or "http://localhost:5173,http://localhost:3000").split(",")
    if o.strip()
]

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").upper()
