"""Layered timestamp evidence for each lifecycle step.

Different booking flows populate different subsets of fields, so each step's
timestamp is looked up through an ordered chain of sources: the explicit event
group first, then the combined log, then related groups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shiptrace.domain.model import CanonicalStep, EventGroup

if TYPE_CHECKING:
    from datetime import datetime

    from shiptrace.domain.model import RawEventSet


@dataclass(frozen=True, slots=True, kw_only=True)
class StepEvidence:
    """Best known timestamp for every lifecycle step of one shipment."""

    booked: datetime | None = None
    received: datetime | None = None
    in_transit: datetime | None = None
    out_for_delivery: datetime | None = None
    delivered: datetime | None = None
    undelivered: datetime | None = None

    def for_step(self, step: CanonicalStep) -> datetime | None:
        match step:
            case CanonicalStep.BOOKED:
                return self.booked
            case CanonicalStep.RECEIVED_AT_OCL:
                return self.received
            case CanonicalStep.IN_TRANSIT:
                return self.in_transit
            case CanonicalStep.OUT_FOR_DELIVERY:
                return self.out_for_delivery
            case CanonicalStep.DELIVERED:
                return self.delivered
            case CanonicalStep.UNDELIVERED:
                return self.undelivered

    def latest_step(self) -> CanonicalStep | None:
        """Most advanced step backed by a timestamp, excluding ``booked``."""

        if self.delivered is not None:
            return CanonicalStep.DELIVERED
        if self.out_for_delivery is not None:
            return CanonicalStep.OUT_FOR_DELIVERY
        if self.in_transit is not None:
            return CanonicalStep.IN_TRANSIT
        if self.received is not None:
            return CanonicalStep.RECEIVED_AT_OCL
        return None


def resolve_evidence(event_set: RawEventSet) -> StepEvidence:
    """Resolve per-step timestamps for ``event_set`` using the fallback chains."""

    return StepEvidence(
        booked=event_set.timestamp_for(EventGroup.BOOKED),
        received=_first_present(
            event_set.timestamp_for(EventGroup.RECEIVED),
            event_set.timestamp_for(EventGroup.PICKUP),
            event_set.log_timestamp("received", "pickup", "picked"),
        ),
        in_transit=_first_present(
            event_set.timestamp_for(EventGroup.IN_TRANSIT),
            event_set.log_timestamp("intransit", "in_transit"),
            event_set.timestamp_for(EventGroup.REACHED_HUB),
            event_set.log_timestamp("reached-hub", "reachedhub"),
        ),
        out_for_delivery=_first_present(
            event_set.timestamp_for(EventGroup.OUT_FOR_DELIVERY),
            event_set.log_timestamp("ofp", "out_for_delivery"),
        ),
        delivered=_delivered_timestamp(event_set),
        undelivered=(
            event_set.timestamp_for(EventGroup.UNDELIVERED)
            if event_set.normalized_status == "undelivered"
            else None
        ),
    )


def _delivered_timestamp(event_set: RawEventSet) -> datetime | None:
    # a stored delivery time only counts when the current status agrees
    if event_set.normalized_status != "delivered":
        return None
    return _first_present(
        event_set.timestamp_for(EventGroup.DELIVERED),
        event_set.log_timestamp("delivered"),
    )


def _first_present(*candidates: datetime | None) -> datetime | None:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
