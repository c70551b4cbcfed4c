"""Movement event deduplication.

Responsibilities of this stage:
- collapse near-duplicate events that describe the same real-world action
  (same canonical movement status, timestamps inside a short window)
- prefer the more descriptive label of a duplicate pair
- remove exact double insertions as a final safety net
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Final, Protocol

from .classify import canonical_movement_status

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shiptrace.domain.model import MovementEvent

DEFAULT_DUPLICATE_WINDOW: Final[timedelta] = timedelta(seconds=120)


class DeduplicateEvents(Protocol):
    """Collapse duplicate movement events."""

    def __call__(
        self,
        events: Iterable[MovementEvent],
        *,
        window: timedelta = DEFAULT_DUPLICATE_WINDOW,
    ) -> list[MovementEvent]: ...


def is_duplicate(
    first: MovementEvent,
    second: MovementEvent,
    *,
    window: timedelta = DEFAULT_DUPLICATE_WINDOW,
) -> bool:
    """Return whether two events record the same action."""

    if canonical_movement_status(first.status) != canonical_movement_status(second.status):
        return False
    if first.timestamp is None or second.timestamp is None:
        return first.timestamp is None and second.timestamp is None
    return abs(first.timestamp - second.timestamp) < window


def dedupe(
    events: Iterable[MovementEvent],
    *,
    window: timedelta = DEFAULT_DUPLICATE_WINDOW,
) -> list[MovementEvent]:
    """Collapse near duplicates, keeping the longer label (first seen on ties).

    Replacing a kept event can move its timestamp next to another kept event,
    so passes repeat until one completes without merging anything.
    """

    current = list(events)
    while True:
        merged, changed = _dedupe_pass(current, window=window)
        if not changed:
            return merged
        current = merged


def _dedupe_pass(
    events: list[MovementEvent],
    *,
    window: timedelta,
) -> tuple[list[MovementEvent], bool]:
    kept: list[MovementEvent] = []
    changed = False
    for event in events:
        index = _find_duplicate(kept, event, window=window)
        if index is None:
            kept.append(event)
            continue
        changed = True
        if len(event.label) > len(kept[index].label):
            kept[index] = event
    return kept, changed


def _find_duplicate(
    kept: list[MovementEvent],
    event: MovementEvent,
    *,
    window: timedelta,
) -> int | None:
    for index, candidate in enumerate(kept):
        if is_duplicate(candidate, event, window=window):
            return index
    return None


def dedupe_exact(events: Iterable[MovementEvent]) -> list[MovementEvent]:
    """Drop events whose label, timestamp and status repeat an earlier event."""

    seen: set[tuple[str, object, str]] = set()
    unique: list[MovementEvent] = []
    for event in events:
        key = (event.label, event.timestamp, event.status)
        if key in seen:
            continue
        seen.add(key)
        unique.append(event)
    return unique
