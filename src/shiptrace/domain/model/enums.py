"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class SourceKind(StrEnum):
    """Document shape currently holding the authoritative record for a shipment."""

    TRACKING = "tracking"
    MEDICINE = "medicine"
    CUSTOMER = "customer"


class CanonicalStep(StrEnum):
    """Lifecycle stage of a shipment, independent of source vocabulary."""

    BOOKED = "booked"
    RECEIVED_AT_OCL = "received_at_ocl"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    UNDELIVERED = "undelivered"

    @property
    def ordinal(self) -> int:
        return _STEP_ORDINALS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (CanonicalStep.DELIVERED, CanonicalStep.UNDELIVERED)

    @property
    def timeline_step(self) -> CanonicalStep:
        """Step rendered in a timeline; the failure variant shares the delivered slot."""

        if self is CanonicalStep.UNDELIVERED:
            return CanonicalStep.DELIVERED
        return self


_STEP_ORDINALS: Final[dict[CanonicalStep, int]] = {
    CanonicalStep.BOOKED: 0,
    CanonicalStep.RECEIVED_AT_OCL: 1,
    CanonicalStep.IN_TRANSIT: 2,
    CanonicalStep.OUT_FOR_DELIVERY: 3,
    CanonicalStep.DELIVERED: 4,
    CanonicalStep.UNDELIVERED: 4,
}


class EventGroup(StrEnum):
    """Kind of operational action that recorded a raw event."""

    BOOKED = "booked"
    PICKUP = "pickup"
    RECEIVED = "received"
    REACHED_HUB = "reached_hub"
    ASSIGNED = "assigned"
    COURIER_ASSIGNED = "courier_assigned"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    UNDELIVERED = "undelivered"


class TimelineFlow(StrEnum):
    """Ordered set of steps displayed for a shipment."""

    STANDARD = "standard"
    DETAILED = "detailed"

    @property
    def steps(self) -> tuple[CanonicalStep, ...]:
        return _FLOW_STEPS[self]

    def fold(self, step: CanonicalStep) -> CanonicalStep:
        """Map ``step`` onto the nearest step of this flow at or before its ordinal."""

        target = step.timeline_step
        folded = self.steps[0]
        for candidate in self.steps:
            if candidate.ordinal <= target.ordinal:
                folded = candidate
        return folded


_FLOW_STEPS: Final[dict[TimelineFlow, tuple[CanonicalStep, ...]]] = {
    TimelineFlow.STANDARD: (
        CanonicalStep.BOOKED,
        CanonicalStep.IN_TRANSIT,
        CanonicalStep.OUT_FOR_DELIVERY,
        CanonicalStep.DELIVERED,
    ),
    TimelineFlow.DETAILED: (
        CanonicalStep.BOOKED,
        CanonicalStep.RECEIVED_AT_OCL,
        CanonicalStep.IN_TRANSIT,
        CanonicalStep.OUT_FOR_DELIVERY,
        CanonicalStep.DELIVERED,
    ),
}
