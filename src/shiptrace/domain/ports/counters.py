"""Ports for the global consignment number sequence."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ConsignmentSequenceRepository(Protocol):
    """Persistence contract for the process-wide consignment counter."""

    def current_number(self) -> int | None: ...

    def recorded_maxima(self) -> tuple[int, ...]:
        """Highest number stored by every collection holding consignment numbers."""
        ...

    def raise_floor(self, minimum: int) -> None:
        """Set the counter to ``minimum`` unless it already holds a larger value."""
        ...

    def increment(self) -> int | None:
        """Atomically add one to the counter and return the new value."""
        ...
