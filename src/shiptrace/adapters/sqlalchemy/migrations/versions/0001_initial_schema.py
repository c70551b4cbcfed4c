"""Initial schema: source documents and consignment numbering.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 00:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from shiptrace.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

DOCUMENT_TABLE_NAMES = ("tracking_document", "medicine_booking", "customer_booking")


def upgrade() -> None:
    for name in DOCUMENT_TABLE_NAMES:
        op.create_table(
            name,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("consignment_number", sa.BigInteger(), nullable=False),
            sa.Column("booking_reference", sa.String(length=64), nullable=True),
            sa.Column("current_status", sa.String(length=64), nullable=True),
            sa.Column("payload", sa.JSON(), nullable=False),
            sa.Column("created_at", UTCDateTime(), nullable=False),
            sa.Column("updated_at", UTCDateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id", name=op.f(f"pk_{name}")),
        )
        op.create_index(
            op.f(f"ix_{name}_consignment_number"), name, ["consignment_number"], unique=False
        )

    op.create_table(
        "consignment_sequence",
        sa.Column("key", sa.String(length=32), nullable=False),
        sa.Column("current_number", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("key", name=op.f("pk_consignment_sequence")),
    )
    op.create_table(
        "consignment_usage",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("consignment_number", sa.BigInteger(), nullable=False),
        sa.Column("used_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_consignment_usage")),
    )
    op.create_index(
        op.f("ix_consignment_usage_consignment_number"),
        "consignment_usage",
        ["consignment_number"],
        unique=False,
    )
    op.create_table(
        "consignment_assignment",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("start_number", sa.BigInteger(), nullable=False),
        sa.Column("end_number", sa.BigInteger(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("assigned_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_consignment_assignment")),
    )


def downgrade() -> None:
    op.drop_table("consignment_assignment")
    op.drop_index(op.f("ix_consignment_usage_consignment_number"), table_name="consignment_usage")
    op.drop_table("consignment_usage")
    op.drop_table("consignment_sequence")
    for name in reversed(DOCUMENT_TABLE_NAMES):
        op.drop_index(op.f(f"ix_{name}_consignment_number"), table_name=name)
        op.drop_table(name)
