"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the classroom booking service:
users, classrooms, operating_settings, bookings, booking_slot_claims.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("student", "admin", "super_admin", name="userrole")
classroom_permission = sa.Enum("student", "admin_only", name="classroompermission")
booking_status = sa.Enum("pending", "confirmed", "cancelled", name="bookingstatus")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", user_role, nullable=False, server_default="student"),
        sa.Column("assigned_classrooms", sa.JSON, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- classrooms ---
    op.create_table(
        "classrooms",
        sa.Column("classroom_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("permission", classroom_permission, nullable=False, server_default="student"),
        sa.Column("requires_approval", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("daily_cap_minutes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("assigned_admins", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- operating_settings ---
    op.create_table(
        "operating_settings",
        sa.Column("settings_id", sa.String(36), primary_key=True),
        sa.Column("operating_start_minute", sa.Integer, nullable=False),
        sa.Column("operating_end_minute", sa.Integer, nullable=False),
        sa.Column("default_daily_cap_minutes", sa.Integer, nullable=False),
        sa.Column("slot_granularity_minutes", sa.Integer, nullable=False),
        sa.Column("updated_by", sa.String(36), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- bookings ---
    op.create_table(
        "bookings",
        sa.Column("booking_id", sa.String(36), primary_key=True),
        sa.Column("classroom_id", sa.String(36), sa.ForeignKey("classrooms.classroom_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("user_name", sa.String(100), nullable=False),
        sa.Column("user_email", sa.String(255), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("start_minute", sa.Integer, nullable=False),
        sa.Column("end_minute", sa.Integer, nullable=False),
        sa.Column("status", booking_status, nullable=False, server_default="pending"),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_by_user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("start_minute < end_minute", name="ck_bookings_interval"),
    )
    op.create_index("ix_bookings_classroom_date", "bookings", ["classroom_id", "date"])
    op.create_index("ix_bookings_user", "bookings", ["user_id"])

    # --- booking_slot_claims ---
    op.create_table(
        "booking_slot_claims",
        sa.Column("classroom_id", sa.String(36), primary_key=True),
        sa.Column("date", sa.String(10), primary_key=True),
        sa.Column("minute", sa.Integer, primary_key=True),
        sa.Column("booking_id", sa.String(36), sa.ForeignKey("bookings.booking_id"), nullable=False),
    )
    op.create_index("ix_booking_slot_claims_booking_id", "booking_slot_claims", ["booking_id"])


def downgrade() -> None:
    op.drop_index("ix_booking_slot_claims_booking_id", table_name="booking_slot_claims")
    op.drop_table("booking_slot_claims")
    op.drop_index("ix_bookings_user", table_name="bookings")
    op.drop_index("ix_bookings_classroom_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("operating_settings")
    op.drop_table("classrooms")
    op.drop_table("users")
    booking_status.drop(op.get_bind(), checkfirst=True)
    classroom_permission.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
