"""Timeline construction: ordered lifecycle steps with completion state.

Each step is rendered from its own evidence, then clamped against the
shipment's current step so that information recorded for a later step never
appears on the timeline before the shipment actually reaches it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from shiptrace.domain.model import (
    CanonicalStep,
    EventGroup,
    Step,
    StepField,
    TimelineFlow,
    TrackingMetadata,
)

from .classify import classify
from .movement import count_transit_events

if TYPE_CHECKING:
    from datetime import datetime

    from shiptrace.domain.model import MovementEvent, RawEvent, RawEventSet

    from .evidence import StepEvidence

log = logging.getLogger(__name__)

STEP_TITLES: Final[dict[CanonicalStep, str]] = {
    CanonicalStep.BOOKED: "Booked",
    CanonicalStep.RECEIVED_AT_OCL: "Received at OCL",
    CanonicalStep.IN_TRANSIT: "In Transit",
    CanonicalStep.OUT_FOR_DELIVERY: "Out for Delivery",
    CanonicalStep.DELIVERED: "Delivered",
    CanonicalStep.UNDELIVERED: "Not Delivered",
}

UNDELIVERED_STATUS_LABEL: Final[str] = "Not delivered"


def resolve_current_step(
    event_set: RawEventSet,
    evidence: StepEvidence,
    flow: TimelineFlow = TimelineFlow.STANDARD,
) -> CanonicalStep:
    """Return the flow step the shipment currently sits on.

    The classified status is escalated by the most advanced timestamped
    evidence but never demoted by it.
    """

    current = classify(event_set.current_status, event_set.source_kind)
    escalated = evidence.latest_step()
    if escalated is not None and escalated.ordinal > current.ordinal:
        log.debug(
            "Escalating consignment %s from %s to %s",
            event_set.facts.consignment_number,
            current,
            escalated,
        )
        current = escalated
    return flow.fold(current)


def build_timeline(
    event_set: RawEventSet,
    *,
    evidence: StepEvidence,
    movement: tuple[MovementEvent, ...],
    flow: TimelineFlow = TimelineFlow.STANDARD,
) -> tuple[Step, ...]:
    current = resolve_current_step(event_set, evidence, flow)
    renderer = _StepRenderer(event_set, evidence, movement)
    return tuple(_clamp(renderer.render(step), current) for step in flow.steps)


def build_metadata(
    event_set: RawEventSet,
    *,
    evidence: StepEvidence,
    flow: TimelineFlow = TimelineFlow.STANDARD,
) -> TrackingMetadata:
    facts = event_set.facts
    current = resolve_current_step(event_set, evidence, flow)
    if event_set.normalized_status == "undelivered":
        status_label = UNDELIVERED_STATUS_LABEL
    else:
        status_label = STEP_TITLES[current]
    return TrackingMetadata(
        consignment_number=str(facts.consignment_number),
        booking_reference=facts.booking_reference,
        service_type=facts.service_type or "",
        package_count=facts.package_count,
        payment_method=facts.payment.label,
        route_summary=facts.route_summary,
        booking_date=evidence.booked,
        status_label=status_label,
        current_step_key=current,
        estimated_delivery=evidence.delivered or facts.estimated_delivery,
        last_updated=facts.last_updated or _last_logged(event_set) or evidence.booked,
    )


def _last_logged(event_set: RawEventSet) -> datetime | None:
    stamps = [entry.timestamp for entry in event_set.log if entry.timestamp is not None]
    return max(stamps) if stamps else None


def _clamp(step: Step, current: CanonicalStep) -> Step:
    if step.key.ordinal > current.ordinal:
        return Step(
            key=step.key,
            title=step.title,
            completed=False,
            timestamp=None,
            description=step.description,
            fields=(),
        )
    completed = step.key is current or step.timestamp is not None
    return Step(
        key=step.key,
        title=step.title,
        completed=completed,
        timestamp=step.timestamp,
        description=step.description,
        fields=step.fields,
    )


def _compact(*fields: StepField | None) -> tuple[StepField, ...]:
    return tuple(step_field for step_field in fields if step_field is not None)


def _text(label: str, value: object | None) -> StepField | None:
    if value is None or value == "":
        return None
    return StepField(label, str(value))


def _when(label: str, value: datetime | None) -> StepField | None:
    if value is None:
        return None
    return StepField.timestamp(label, value)


class _StepRenderer:
    """Renders unclamped steps for one shipment."""

    def __init__(
        self,
        event_set: RawEventSet,
        evidence: StepEvidence,
        movement: tuple[MovementEvent, ...],
    ) -> None:
        self.event_set = event_set
        self.facts = event_set.facts
        self.evidence = evidence
        self.movement = movement
        self.courier = event_set.event(EventGroup.COURIER_ASSIGNED)

    def render(self, step: CanonicalStep) -> Step:
        match step:
            case CanonicalStep.BOOKED:
                return self._booked()
            case CanonicalStep.RECEIVED_AT_OCL:
                return self._received()
            case CanonicalStep.IN_TRANSIT:
                return self._in_transit()
            case CanonicalStep.OUT_FOR_DELIVERY:
                return self._out_for_delivery()
            case CanonicalStep.DELIVERED | CanonicalStep.UNDELIVERED:
                return self._terminal()

    def _step(
        self,
        key: CanonicalStep,
        timestamp: datetime | None,
        description: str,
        fields: tuple[StepField, ...],
        *,
        title: str | None = None,
    ) -> Step:
        return Step(
            key=key,
            title=title or STEP_TITLES[key],
            completed=timestamp is not None,
            timestamp=timestamp,
            description=description,
            fields=fields,
        )

    def _booked(self) -> Step:
        facts = self.facts
        booked = self.evidence.booked
        return self._step(
            CanonicalStep.BOOKED,
            booked,
            "Shipment created and awaiting handover.",
            _compact(
                _when("Booking Date & Time", booked),
                _text("Consignment Number", facts.consignment_number),
                _text("Booking Reference", facts.booking_reference),
                _text("Route", facts.route_summary),
                _text("Service Type", facts.service_type),
                _text("Package Count", facts.package_count),
                _text("Weight", f"{facts.weight} kg" if facts.weight else None),
                _text("Payment Method", facts.payment.label),
                _text("Transit Mode", facts.transit_mode),
            ),
        )

    def _received(self) -> Step:
        facts = self.facts
        received = self.evidence.received
        pickup = self.event_set.event(EventGroup.PICKUP)
        origin = facts.origin_label
        return self._step(
            CanonicalStep.RECEIVED_AT_OCL,
            received,
            "Shipment verified at OCL." if received else "Awaiting receipt at OCL.",
            _compact(
                _when("Received Time", received),
                _text("Received / Picked By", pickup.actor if pickup else None),
                _text("Courier Assigned", self.courier.actor if self.courier else None),
                StepField("Current Location", f"OCL {origin} Hub" if origin else "OCL Hub"),
                StepField(
                    "Scan Status",
                    "Shipment verified & processed" if received else "Pending scan",
                ),
                _text("Special Instructions", facts.special_instructions),
            ),
        )

    def _in_transit(self) -> Step:
        facts = self.facts
        in_transit = self.evidence.in_transit
        hub = self.event_set.event(EventGroup.REACHED_HUB)
        transit_events = count_transit_events(self.movement)
        return self._step(
            CanonicalStep.IN_TRANSIT,
            in_transit,
            "Shipment is moving between hubs." if in_transit else "Preparing for line haul.",
            _compact(
                _when("Last Hub Update", hub.timestamp if hub else None),
                _text("Processed By", (hub.actor or "OCL Operations") if hub else None),
                _text("Next Hub", facts.destination_label),
                _text("From", facts.origin_label),
                StepField(
                    "Movement Updates",
                    f"{transit_events} recorded events" if transit_events else "No updates yet",
                ),
            ),
        )

    def _out_for_delivery(self) -> Step:
        facts = self.facts
        dispatched = self.evidence.out_for_delivery
        ofd = self.event_set.event(EventGroup.OUT_FOR_DELIVERY)
        agent = (ofd.actor if ofd else None) or (self.courier.actor if self.courier else None)
        phone = (ofd.actor_phone if ofd else None) or (
            self.courier.actor_phone if self.courier else None
        )
        payment = facts.payment
        to_collect = None
        if payment.amount_due:
            to_collect = f"₹{payment.amount_due}" if payment.collect_on_delivery else "No payment due"
        return self._step(
            CanonicalStep.OUT_FOR_DELIVERY,
            dispatched,
            (
                "Your shipment is out for delivery today."
                if dispatched
                else "Awaiting delivery assignment."
            ),
            _compact(
                _when("Dispatch Time", dispatched),
                _text("Delivery Agent", agent),
                _text("Agent Phone", phone),
                _text("Delivery City", facts.destination_label),
                _text("Delivery Address", facts.delivery_address),
                _text("Payment to Collect", to_collect),
            ),
        )

    def _terminal(self) -> Step:
        match self.event_set.normalized_status:
            case "delivered":
                return self._delivered()
            case "undelivered":
                return self._undelivered()
            case _:
                return self._step(
                    CanonicalStep.DELIVERED, None, "Awaiting delivery confirmation.", ()
                )

    def _delivered(self) -> Step:
        facts = self.facts
        delivered = self.evidence.delivered
        entry = self.event_set.log_entry("delivered")
        event = self.event_set.event(EventGroup.DELIVERED)
        received_by = (entry.meta.get("receivedBy") if entry else None) or (
            event.meta.get("receivedBy") if event else None
        )
        return self._step(
            CanonicalStep.DELIVERED,
            delivered,
            "Shipment delivered successfully." if delivered else "Awaiting delivery confirmation.",
            _compact(
                _when("Delivered At", delivered),
                _text("Received By", received_by or facts.recipient_name or "Recipient"),
                _text("Delivery Location", facts.destination_label),
                _text("Payment Collected", self._payment_collected(event)),
            ),
        )

    def _payment_collected(self, event: RawEvent | None) -> str | None:
        amount = event.meta.get("amountCollected") if event else None
        if _positive(amount):
            return f"₹{amount}"
        payment = self.facts.payment
        if payment.collect_on_delivery and payment.amount_due:
            return f"₹{payment.amount_due}"
        return None

    def _undelivered(self) -> Step:
        facts = self.facts
        failed_at = self.evidence.undelivered
        unreachable = self.event_set.unreachable
        attempt = unreachable.last_attempt
        agent = (attempt.courier_name if attempt else None) or (
            self.courier.actor if self.courier else None
        )
        step = self._step(
            CanonicalStep.DELIVERED,
            failed_at,
            "Shipment could not be delivered after multiple attempts.",
            _compact(
                _when("Undelivered At", failed_at),
                _text("Total Attempts", unreachable.total_attempts or None),
                _text("Reason for Delivery Failure", attempt.reason if attempt else None),
                _text("Last Attempt Location", attempt.location_label if attempt else None),
                _text("Delivery Agent", agent),
                _text("Delivery Location", facts.destination_label),
            ),
            title=STEP_TITLES[CanonicalStep.UNDELIVERED],
        )
        return Step(
            key=step.key,
            title=step.title,
            completed=True,
            timestamp=step.timestamp,
            description=step.description,
            fields=step.fields,
        )


def _positive(amount: object) -> bool:
    try:
        return float(str(amount)) > 0
    except (TypeError, ValueError):
        return False
