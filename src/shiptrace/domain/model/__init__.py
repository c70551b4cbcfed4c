"""Shipment tracking domain model."""

from __future__ import annotations

from .enums import CanonicalStep, EventGroup, SourceKind, TimelineFlow
from .events import (
    LogEntry,
    PaymentTerms,
    RawEvent,
    RawEventSet,
    ShipmentFacts,
    UnreachableAttempt,
    UnreachableLog,
)
from .timeline import (
    Attachments,
    MovementEvent,
    MovementHistory,
    Step,
    StepField,
    TrackingMetadata,
    TrackingSummary,
    isoformat_utc,
)

__all__ = [
    "Attachments",
    "CanonicalStep",
    "EventGroup",
    "LogEntry",
    "MovementEvent",
    "MovementHistory",
    "PaymentTerms",
    "RawEvent",
    "RawEventSet",
    "ShipmentFacts",
    "SourceKind",
    "Step",
    "StepField",
    "TimelineFlow",
    "TrackingMetadata",
    "TrackingSummary",
    "UnreachableAttempt",
    "UnreachableLog",
    "isoformat_utc",
]
