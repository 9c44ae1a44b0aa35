"""Initial schema: users, slots, swap_requests.

slots.status: BUSY | SWAPPABLE | SWAP_PENDING. swap_requests.status: PENDING | ACCEPTED | REJECTED.
Swap requests are history; their slot references are never rewritten, so referenced slots cannot be deleted.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="BUSY"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('BUSY', 'SWAPPABLE', 'SWAP_PENDING')", name="ck_slots_status"),
        sa.CheckConstraint("start_time < end_time", name="ck_slots_time_order"),
    )
    op.create_index("ix_slots_owner_id", "slots", ["owner_id"], unique=False)
    op.create_index("ix_slots_status_start_time", "slots", ["status", "start_time"], unique=False)

    op.create_table(
        "swap_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("requester_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("responder_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("requester_slot_id", sa.Integer(), sa.ForeignKey("slots.id"), nullable=False),
        sa.Column("responder_slot_id", sa.Integer(), sa.ForeignKey("slots.id"), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('PENDING', 'ACCEPTED', 'REJECTED')", name="ck_swap_requests_status"),
        sa.CheckConstraint("requester_id <> responder_id", name="ck_swap_requests_distinct_users"),
        sa.CheckConstraint("requester_slot_id <> responder_slot_id", name="ck_swap_requests_distinct_slots"),
    )
    op.create_index("ix_swap_requests_requester_slot_id", "swap_requests", ["requester_slot_id"], unique=False)
    op.create_index("ix_swap_requests_responder_slot_id", "swap_requests", ["responder_slot_id"], unique=False)
    op.create_index("ix_swap_requests_responder_status", "swap_requests", ["responder_id", "status"], unique=False)
    op.create_index("ix_swap_requests_requester_created", "swap_requests", ["requester_id", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_swap_requests_requester_created", table_name="swap_requests")
    op.drop_index("ix_swap_requests_responder_status", table_name="swap_requests")
    op.drop_index("ix_swap_requests_responder_slot_id", table_name="swap_requests")
    op.drop_index("ix_swap_requests_requester_slot_id", table_name="swap_requests")
    op.drop_table("swap_requests")
    op.drop_index("ix_slots_status_start_time", table_name="slots")
    op.drop_index("ix_slots_owner_id", table_name="slots")
    op.drop_table("slots")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
