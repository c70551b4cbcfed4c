"""Orchestrator for the tracking subsystem.

The engine composes pure stages over a normalized ``RawEventSet``; it never
sees source-specific document shapes and performs no I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shiptrace.domain.errors import ShipmentNotFoundError
from shiptrace.domain.model import (
    Attachments,
    MovementHistory,
    SourceKind,
    TimelineFlow,
    TrackingSummary,
)

from .deduplicate import DEFAULT_DUPLICATE_WINDOW
from .evidence import resolve_evidence
from .movement import compose_movement_history
from .timeline import build_metadata, build_timeline

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import timedelta

    from shiptrace.domain.model import RawEventSet
    from shiptrace.domain.ports import ShipmentSourceRepository

log = logging.getLogger(__name__)

LOOKUP_ORDER: tuple[SourceKind, ...] = (
    SourceKind.TRACKING,
    SourceKind.MEDICINE,
    SourceKind.CUSTOMER,
)


@dataclass(slots=True)
class TrackingEngine:
    """Project a shipment's raw event set into its tracking views."""

    flow: TimelineFlow = TimelineFlow.STANDARD
    window: timedelta = field(default=DEFAULT_DUPLICATE_WINDOW)

    def summarize(self, event_set: RawEventSet) -> TrackingSummary:
        """Run every stage for ``event_set`` and return the full tracking view."""

        evidence = resolve_evidence(event_set)
        movement = compose_movement_history(event_set, evidence, window=self.window)
        steps = build_timeline(
            event_set,
            evidence=evidence,
            movement=movement,
            flow=self.flow,
        )
        metadata = build_metadata(event_set, evidence=evidence, flow=self.flow)
        facts = event_set.facts
        return TrackingSummary(
            source=event_set.source_kind,
            status=event_set.current_status or "booked",
            metadata=metadata,
            steps=steps,
            movement_history=movement,
            attachments=Attachments(
                package_images=_unique(facts.package_images),
                delivery_proof_images=_unique(facts.delivery_proof_images),
            ),
        )

    def movement(self, event_set: RawEventSet) -> MovementHistory:
        evidence = resolve_evidence(event_set)
        return MovementHistory(
            consignment_number=str(event_set.facts.consignment_number),
            movement_history=compose_movement_history(event_set, evidence, window=self.window),
        )


def locate_shipment(
    consignment_number: int,
    sources: Iterable[ShipmentSourceRepository],
) -> RawEventSet:
    """Return the event set from the first source holding ``consignment_number``."""

    for source in sources:
        event_set = source.find(consignment_number)
        if event_set is not None:
            log.debug("Found consignment %s in %s source", consignment_number, source.kind)
            return event_set
    raise ShipmentNotFoundError(consignment_number)


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(value for value in values if value))
