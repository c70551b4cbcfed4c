"""Normalized raw event model shared by every source kind.

Adapters translate their stored document shapes into a ``RawEventSet``; the
classifier, deduplicator and timeline builder only ever see this form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import EventGroup, SourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class RawEvent:
    """One timestamped fact recorded by an operational action."""

    group: EventGroup
    status: str
    timestamp: datetime | None = None
    location: str | None = None
    note: str | None = None
    actor: str | None = None
    actor_phone: str | None = None
    meta: Mapping[str, object] = field(default_factory=dict[str, object])


@dataclass(frozen=True, slots=True, kw_only=True)
class LogEntry:
    """Entry of the combined ``statusHistory`` + ``history`` log."""

    status: str
    timestamp: datetime | None = None
    notes: str = ""
    meta: Mapping[str, object] = field(default_factory=dict[str, object])


@dataclass(frozen=True, slots=True, kw_only=True)
class UnreachableAttempt:
    """Failed delivery attempt recorded by a courier."""

    at: datetime | None = None
    reason: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    courier_name: str | None = None

    @property
    def location_label(self) -> str | None:
        if self.address:
            return self.address
        if self.latitude is not None and self.longitude is not None:
            return f"{self.latitude}, {self.longitude}"
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class UnreachableLog:
    count: int | None = None
    attempts: tuple[UnreachableAttempt, ...] = ()

    @property
    def last_attempt(self) -> UnreachableAttempt | None:
        return self.attempts[-1] if self.attempts else None

    @property
    def total_attempts(self) -> int:
        if self.count:
            return self.count
        return len(self.attempts)


@dataclass(frozen=True, slots=True, kw_only=True)
class PaymentTerms:
    label: str
    collect_on_delivery: bool = False
    amount_due: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ShipmentFacts:
    """Descriptive data about a shipment used to render step fields and metadata."""

    consignment_number: int
    booking_reference: str = ""
    origin_label: str = "Origin"
    destination_label: str = "Destination"
    recipient_name: str | None = None
    delivery_address: str | None = None
    service_type: str | None = None
    package_count: int | None = None
    weight: str | None = None
    transit_mode: str | None = None
    payment: PaymentTerms = field(default_factory=lambda: PaymentTerms(label="Prepaid"))
    special_instructions: str | None = None
    estimated_delivery: datetime | None = None
    last_updated: datetime | None = None
    package_images: tuple[str, ...] = ()
    delivery_proof_images: tuple[str, ...] = ()

    @property
    def route_summary(self) -> str:
        return f"{self.origin_label} → {self.destination_label}".strip()


@dataclass(frozen=True, slots=True, kw_only=True)
class RawEventSet:
    """Every status fact known about one shipment, in normalized form."""

    source_kind: SourceKind
    current_status: str
    facts: ShipmentFacts
    events: tuple[RawEvent, ...] = ()
    log: tuple[LogEntry, ...] = ()
    unreachable: UnreachableLog = field(default_factory=UnreachableLog)

    @property
    def normalized_status(self) -> str:
        return self.current_status.strip().lower()

    def event(self, group: EventGroup) -> RawEvent | None:
        for event in self.events:
            if event.group is group:
                return event
        return None

    def timestamp_for(self, group: EventGroup) -> datetime | None:
        event = self.event(group)
        return event.timestamp if event is not None else None

    def log_entry(self, *statuses: str) -> LogEntry | None:
        """Return the earliest timestamped log entry, trying ``statuses`` in priority order."""

        for status in statuses:
            for entry in self.log:
                if entry.status == status and entry.timestamp is not None:
                    return entry
        return None

    def log_timestamp(self, *statuses: str) -> datetime | None:
        entry = self.log_entry(*statuses)
        return entry.timestamp if entry is not None else None
