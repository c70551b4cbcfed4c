"""SQLAlchemy table metadata for stored shipment documents and the consignment sequence."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    false,
)

from shiptrace.domain.model import SourceKind


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def _document_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("consignment_number", BigInteger, nullable=False, index=True),
        Column("booking_reference", String(64), nullable=True),
        Column("current_status", String(64), nullable=True),
        Column("payload", JSON, nullable=False),
        Column("created_at", UTCDateTime(), nullable=False),
        Column("updated_at", UTCDateTime(), nullable=False),
    )


# Source documents -------------------------------------------------------------

tracking_document_table = _document_table("tracking_document")
medicine_booking_table = _document_table("medicine_booking")
customer_booking_table = _document_table("customer_booking")

DOCUMENT_TABLES: Final[dict[SourceKind, Table]] = {
    SourceKind.TRACKING: tracking_document_table,
    SourceKind.MEDICINE: medicine_booking_table,
    SourceKind.CUSTOMER: customer_booking_table,
}

# Consignment numbering ----------------------------------------------------------

consignment_sequence_table = Table(
    "consignment_sequence",
    metadata,
    Column("key", String(32), primary_key=True),
    Column("current_number", BigInteger, nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

consignment_usage_table = Table(
    "consignment_usage",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("consignment_number", BigInteger, nullable=False, index=True),
    Column("used_at", UTCDateTime(), nullable=True),
)

consignment_assignment_table = Table(
    "consignment_assignment",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("start_number", BigInteger, nullable=False),
    Column("end_number", BigInteger, nullable=False),
    Column("is_active", Boolean, nullable=False, server_default=false()),
    Column("assigned_at", UTCDateTime(), nullable=True),
)