"""Read-side tracking projection returned to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import CanonicalStep, SourceKind


type Payload = dict[str, object]

DATETIME_FORMAT = "datetime"


def isoformat_utc(value: datetime | None) -> str | None:
    """Serialize ``value`` as ISO-8601 UTC with a ``Z`` suffix and millisecond precision."""

    if value is None:
        return None
    normalized = value if value.tzinfo else value.replace(tzinfo=UTC)
    normalized = normalized.astimezone(UTC)
    return normalized.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class StepField:
    label: str
    value: str
    format: str | None = None

    @classmethod
    def timestamp(cls, label: str, value: datetime) -> StepField:
        return cls(label=label, value=isoformat_utc(value) or "", format=DATETIME_FORMAT)

    def to_payload(self) -> Payload:
        payload: Payload = {"label": self.label, "value": self.value}
        if self.format is not None:
            payload["format"] = self.format
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class Step:
    """One lifecycle step as displayed in a tracking timeline."""

    key: CanonicalStep
    title: str
    completed: bool
    timestamp: datetime | None
    description: str
    fields: tuple[StepField, ...] = ()

    def to_payload(self) -> Payload:
        return {
            "key": str(self.key),
            "title": self.title,
            "completed": self.completed,
            "timestamp": isoformat_utc(self.timestamp),
            "description": self.description,
            "fields": [step_field.to_payload() for step_field in self.fields],
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class MovementEvent:
    """A single labelled, timestamped fact in the shipment's movement history."""

    status: str
    label: str
    timestamp: datetime | None
    location: str | None = None
    description: str | None = None

    def to_payload(self) -> Payload:
        return {
            "status": self.status,
            "label": self.label,
            "timestamp": isoformat_utc(self.timestamp),
            "location": self.location,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class TrackingMetadata:
    consignment_number: str
    booking_reference: str
    service_type: str
    package_count: int | None
    payment_method: str
    route_summary: str
    booking_date: datetime | None
    status_label: str
    current_step_key: CanonicalStep
    estimated_delivery: datetime | None
    last_updated: datetime | None

    def to_payload(self) -> Payload:
        return {
            "consignmentNumber": self.consignment_number,
            "bookingReference": self.booking_reference,
            "serviceType": self.service_type,
            "packageCount": self.package_count,
            "paymentMethod": self.payment_method,
            "routeSummary": self.route_summary,
            "bookingDate": isoformat_utc(self.booking_date),
            "statusLabel": self.status_label,
            "currentStepKey": str(self.current_step_key),
            "estimatedDelivery": isoformat_utc(self.estimated_delivery),
            "lastUpdated": isoformat_utc(self.last_updated),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class Attachments:
    package_images: tuple[str, ...] = ()
    delivery_proof_images: tuple[str, ...] = ()

    def to_payload(self) -> Payload:
        return {
            "packageImages": list(self.package_images),
            "deliveryProofImages": list(self.delivery_proof_images),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class TrackingSummary:
    """Complete tracking view for one consignment."""

    source: SourceKind
    status: str
    metadata: TrackingMetadata
    steps: tuple[Step, ...]
    movement_history: tuple[MovementEvent, ...]
    attachments: Attachments = field(default_factory=Attachments)

    def to_payload(self) -> Payload:
        return {
            "source": str(self.source),
            "status": self.status,
            "metadata": self.metadata.to_payload(),
            "steps": [step.to_payload() for step in self.steps],
            "movementHistory": [event.to_payload() for event in self.movement_history],
            "attachments": self.attachments.to_payload(),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class MovementHistory:
    """Narrow polling view: only the movement feed of one consignment."""

    consignment_number: str
    movement_history: tuple[MovementEvent, ...]

    def to_payload(self) -> Payload:
        return {
            "consignmentNumber": self.consignment_number,
            "movementHistory": [event.to_payload() for event in self.movement_history],
        }
