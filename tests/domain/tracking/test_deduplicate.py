from __future__ import annotations

from datetime import timedelta

from shiptrace.domain.model import MovementEvent
from shiptrace.domain.tracking import dedupe, dedupe_exact
from shiptrace.domain.tracking.deduplicate import is_duplicate
from tests.helpers.documents import at


def movement(status: str, label: str, hours: float = 10, *, seconds: int = 0) -> MovementEvent:
    return MovementEvent(status=status, label=label, timestamp=at(hours, seconds=seconds))


def test_picked_and_pickup_inside_window_collapse_to_one() -> None:
    first = movement("picked", "Picked up")
    second = movement("pickup", "Picked by courier", seconds=30)

    result = dedupe([first, second])

    assert result == [second]


def test_shorter_later_label_keeps_the_first_event() -> None:
    first = movement("picked", "Picked by Ravi Kumar")
    second = movement("pickup", "Picked up", seconds=30)

    result = dedupe([first, second])

    assert result == [first]
    assert result[0].timestamp == at(10)


def test_equal_labels_keep_the_first_seen() -> None:
    first = movement("in_transit", "In transit")
    second = movement("intransit", "In transit", seconds=5)

    assert dedupe([first, second]) == [first]


def test_window_boundary_is_exclusive() -> None:
    first = movement("received", "Received at OCL hub")
    edge = movement("received", "Received at OCL hub", seconds=120)
    inside = movement("received", "Received at OCL hub", seconds=119)

    assert len(dedupe([first, edge])) == 2
    assert len(dedupe([first, inside])) == 1


def test_different_statuses_are_never_merged() -> None:
    received = movement("received", "Received at OCL hub")
    transit = movement("in_transit", "In transit", seconds=10)

    assert dedupe([received, transit]) == [received, transit]


def test_custom_window_is_respected() -> None:
    first = movement("received", "Received")
    later = movement("received", "Received", seconds=300)

    assert len(dedupe([first, later], window=timedelta(minutes=10))) == 1


def test_replacement_that_lands_near_another_event_is_merged_again() -> None:
    early = movement("pickup", "aa")
    late = movement("pickup", "b", seconds=200)
    middle = movement("pickup", "Picked by courier", seconds=100)

    result = dedupe([early, late, middle])

    assert result == [middle]


def test_dedupe_is_idempotent() -> None:
    events = [
        movement("pickup", "Picked up"),
        movement("picked", "Picked by courier", seconds=45),
        movement("received", "Received at OCL hub", 11),
        movement("received", "Received", 11, seconds=90),
        movement("in_transit", "In transit", 12),
        movement("in_transit", "In transit", 14),
    ]

    once = dedupe(events)

    assert dedupe(once) == once
    assert len(once) == 4


def test_events_without_timestamps_only_match_each_other() -> None:
    untimed = MovementEvent(status="booked", label="Shipment booked", timestamp=None)
    timed = movement("booked", "Shipment booked")

    assert is_duplicate(untimed, untimed)
    assert not is_duplicate(untimed, timed)


def test_dedupe_exact_drops_double_insertions() -> None:
    event = movement("booked", "Shipment booked")
    other = movement("booked", "Booked", seconds=1)

    assert dedupe_exact([event, event, other, event]) == [event, other]
