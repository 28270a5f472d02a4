from fastapi import HTTPException, status


def require_user_type(payload: dict, allowed_types: list[str], detail: str | None = None):
    user_type = payload.get("user_type")

    if not isinstance(user_type, str) or not user_type:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User type missing in token",
        )

    allowed = {t.lower() for t in allowed_types}

    if user_type.lower() not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail or "Access forbidden for this user type",
        )
