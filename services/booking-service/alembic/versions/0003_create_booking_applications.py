from alembic import op
import sqlalchemy as sa

revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "booking_applications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("booking_id", sa.Uuid(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("worker_id", sa.Uuid(), sa.ForeignKey("workers.id"), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("proposed_price", sa.Float(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("booking_id", "worker_id", name="uq_booking_applications_booking_worker"),
    )
    op.create_index("ix_booking_applications_booking_id", "booking_applications", ["booking_id"], unique=False)
    op.create_index("ix_booking_applications_worker_id", "booking_applications", ["worker_id"], unique=False)
    op.create_index("ix_booking_applications_status", "booking_applications", ["status"], unique=False)

def downgrade():
    op.drop_index("ix_booking_applications_status", table_name="booking_applications")
    op.drop_index("ix_booking_applications_worker_id", table_name="booking_applications")
    op.drop_index("ix_booking_applications_booking_id", table_name="booking_applications")
    op.drop_table("booking_applications")
