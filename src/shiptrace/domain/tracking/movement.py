"""Movement history composition."""

from __future__ import annotations

from datetime import timedelta
from operator import itemgetter
from typing import TYPE_CHECKING, Final

from shiptrace.domain.model import EventGroup, MovementEvent

from .classify import canonical_movement_status
from .deduplicate import DEFAULT_DUPLICATE_WINDOW, dedupe, dedupe_exact

if TYPE_CHECKING:
    from datetime import datetime

    from shiptrace.domain.model import RawEventSet

    from .evidence import StepEvidence


HISTORY_LABELS: Final[dict[str, str]] = {
    "booked": "Shipment booked",
    "pickup": "Picked by courier",
    "received": "Received at OCL hub",
    "assigned": "Assigned for transit",
    "reached-hub": "Reached hub",
    "courierboy": "Courier assigned",
    "in_transit": "In transit",
    "out_for_delivery": "Out for delivery",
}

TRANSIT_STATUSES: Final[frozenset[str]] = frozenset({"in_transit", "reached-hub"})


def compose_movement_history(
    event_set: RawEventSet,
    evidence: StepEvidence,
    *,
    window: timedelta = DEFAULT_DUPLICATE_WINDOW,
) -> tuple[MovementEvent, ...]:
    """Return deduplicated, timestamped events sorted ascending by time."""

    direct = _direct_events(event_set, evidence)
    seen = {canonical_movement_status(event.status) for event in direct}
    fallback = _history_events(event_set, seen=seen)

    collapsed = dedupe_exact(dedupe([*direct, *fallback], window=window))
    timed = [(event.timestamp, event) for event in collapsed if event.timestamp is not None]
    timed.sort(key=itemgetter(0))
    return tuple(event for _, event in timed)


def count_transit_events(events: tuple[MovementEvent, ...]) -> int:
    return sum(
        1 for event in events if canonical_movement_status(event.status) in TRANSIT_STATUSES
    )


def _direct_events(event_set: RawEventSet, evidence: StepEvidence) -> list[MovementEvent]:
    facts = event_set.facts
    origin = facts.origin_label
    destination = facts.destination_label
    events: list[MovementEvent] = []

    def push(
        status: str,
        label: str,
        timestamp: datetime | None,
        location: str | None,
        description: str | None = None,
    ) -> None:
        if timestamp is not None:
            events.append(
                MovementEvent(
                    status=status,
                    label=label,
                    timestamp=timestamp,
                    location=location,
                    description=description,
                )
            )

    push("booked", "Shipment booked", evidence.booked, origin)

    pickup = event_set.event(EventGroup.PICKUP)
    if pickup is not None:
        courier = pickup.actor or "assigned courier"
        push("pickup", f"Picked by {courier}", pickup.timestamp, origin)

    push("received", "Received at OCL hub", event_set.timestamp_for(EventGroup.RECEIVED), origin)
    push(
        "courierboy",
        "Courier assigned",
        event_set.timestamp_for(EventGroup.COURIER_ASSIGNED),
        origin,
    )
    push(
        "in_transit",
        "In transit",
        event_set.timestamp_for(EventGroup.IN_TRANSIT)
        or event_set.log_timestamp("intransit", "in_transit"),
        destination,
    )
    hub = event_set.event(EventGroup.REACHED_HUB)
    if hub is not None:
        push("reached-hub", "Reached hub", hub.timestamp, hub.location or destination)
    push("out_for_delivery", "Out for delivery", evidence.out_for_delivery, destination)

    if evidence.delivered is not None:
        push("delivered", "Delivered", evidence.delivered, destination)
    elif evidence.undelivered is not None:
        failure = event_set.event(EventGroup.UNDELIVERED)
        push(
            "not_delivered",
            "Not delivered",
            evidence.undelivered,
            destination,
            failure.note if failure else None,
        )
    return events


def _history_events(event_set: RawEventSet, *, seen: set[str]) -> list[MovementEvent]:
    facts = event_set.facts
    events: list[MovementEvent] = []
    for entry in event_set.log:
        if entry.timestamp is None:
            continue
        status = canonical_movement_status(entry.status)
        label = HISTORY_LABELS.get(status)
        if label is None or status in seen:
            continue
        location = facts.destination_label if "reached" in entry.status else facts.origin_label
        events.append(
            MovementEvent(
                status=status,
                label=label,
                timestamp=entry.timestamp,
                location=location,
                description=entry.notes or None,
            )
        )
        seen.add(status)
    return events
