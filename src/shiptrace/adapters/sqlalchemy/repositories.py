"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import func, insert, select, update

from shiptrace.adapters.documents import extract_events, parse_source_document
from shiptrace.adapters.sqlalchemy.mappings import (
    DOCUMENT_TABLES,
    consignment_assignment_table,
    consignment_sequence_table,
    consignment_usage_table,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import CursorResult, Table
    from sqlalchemy.orm import Session

    from shiptrace.domain.model import RawEventSet, SourceKind

log = getLogger(__name__)


class SqlAlchemyShipmentSourceRepository:
    """Store of one source document shape, kept as validated JSON payloads."""

    def __init__(self, session: Session, kind: SourceKind) -> None:
        self.session = session
        self._kind = kind
        self._table: Table = DOCUMENT_TABLES[kind]

    @property
    def kind(self) -> SourceKind:
        return self._kind

    def find(self, consignment_number: int) -> RawEventSet | None:
        stmt = (
            select(self._table.c.payload)
            .where(self._table.c.consignment_number == consignment_number)
            .order_by(self._table.c.id.desc())
            .limit(1)
        )
        payload = self.session.execute(stmt).scalar_one_or_none()
        if payload is None:
            return None
        document = parse_source_document(cast("Mapping[str, object]", payload), self._kind)
        return extract_events(document)

    def add(self, document: Mapping[str, object]) -> int:
        """Validate and store ``document``; return its consignment number."""

        parsed = parse_source_document(document, self._kind)
        now = datetime.now(UTC)
        status = extract_events(parsed).current_status
        payload = {key: value for key, value in document.items() if key != "kind"}
        self.session.execute(
            insert(self._table).values(
                consignment_number=parsed.consignment_number,
                booking_reference=parsed.booking_reference,
                current_status=status,
                payload=payload,
                created_at=parsed.created_at or now,
                updated_at=parsed.updated_at or now,
            )
        )
        log.debug("Stored %s document %s", self._kind, parsed.consignment_number)
        return parsed.consignment_number


class SqlAlchemyConsignmentSequenceRepository:
    """Process-wide consignment counter row plus the collections that bound it."""

    def __init__(self, session: Session, key: str = "global") -> None:
        self.session = session
        self.key = key

    def current_number(self) -> int | None:
        stmt = select(consignment_sequence_table.c.current_number).where(
            consignment_sequence_table.c.key == self.key
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def recorded_maxima(self) -> tuple[int, ...]:
        statements = [
            select(func.max(table.c.consignment_number)) for table in DOCUMENT_TABLES.values()
        ]
        statements.append(select(func.max(consignment_usage_table.c.consignment_number)))
        statements.append(
            select(func.max(consignment_assignment_table.c.end_number)).where(
                consignment_assignment_table.c.is_active.is_(True)
            )
        )
        maxima = (self.session.execute(stmt).scalar_one_or_none() for stmt in statements)
        return tuple(value for value in maxima if value is not None)

    def raise_floor(self, minimum: int) -> None:
        now = datetime.now(UTC)
        stmt = (
            update(consignment_sequence_table)
            .where(consignment_sequence_table.c.key == self.key)
            .where(consignment_sequence_table.c.current_number < minimum)
            .values(current_number=minimum, updated_at=now)
        )
        result = cast("CursorResult[tuple[()]]", self.session.execute(stmt))
        if result.rowcount:
            return
        if self.current_number() is None:
            self.session.execute(
                insert(consignment_sequence_table).values(
                    key=self.key, current_number=minimum, updated_at=now
                )
            )

    def increment(self) -> int | None:
        stmt = (
            update(consignment_sequence_table)
            .where(consignment_sequence_table.c.key == self.key)
            .values(
                current_number=consignment_sequence_table.c.current_number + 1,
                updated_at=datetime.now(UTC),
            )
            .returning(consignment_sequence_table.c.current_number)
        )
        return self.session.execute(stmt).scalar_one_or_none()
