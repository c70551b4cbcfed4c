"""Global consignment number allocation.

Numbers are issued by a single counter. Before each increment the counter is
raised to the highest number recorded anywhere (legacy collections, active
range assignments, usages), so a number handed out by an older flow is never
issued again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from shiptrace.domain.errors import ConsignmentAllocationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from shiptrace.domain.ports import AllocationUnitOfWork, ConsignmentSequenceRepository

log = logging.getLogger(__name__)

BASE_CONSIGNMENT_NUMBER: Final[int] = 871026571


@dataclass(frozen=True, slots=True)
class ConsignmentSummary:
    highest_number: int
    next_start_number: int

    def to_payload(self) -> dict[str, int]:
        return {
            "highestNumber": self.highest_number,
            "nextStartNumber": self.next_start_number,
        }


@dataclass(slots=True)
class ConsignmentAllocator:
    """Issue globally unique, increasing consignment numbers."""

    unit_of_work_factory: Callable[[], AllocationUnitOfWork]
    base_number: int = BASE_CONSIGNMENT_NUMBER

    def highest_reserved(self) -> int:
        with self.unit_of_work_factory() as uow:
            return self._floor(uow.repositories.consignment_sequence)

    def next_id(self) -> int:
        """Return a fresh consignment number.

        The floor raise and the increment run in separate transactions; only
        the increment needs to be atomic for the result to be unique.
        """

        with self.unit_of_work_factory() as uow:
            sequence = uow.repositories.consignment_sequence
            floor = self._floor(sequence)
            sequence.raise_floor(floor)
            uow.commit()

        with self.unit_of_work_factory() as uow:
            number = uow.repositories.consignment_sequence.increment()
            if number is None:
                raise ConsignmentAllocationError("Unable to generate next consignment number")
            uow.commit()

        log.info("Allocated consignment number %s (floor %s)", number, floor)
        return number

    def summary(self) -> ConsignmentSummary:
        highest = self.highest_reserved()
        return ConsignmentSummary(highest_number=highest, next_start_number=highest + 1)

    def _floor(self, sequence: ConsignmentSequenceRepository) -> int:
        current = sequence.current_number()
        candidates = [self.base_number, *sequence.recorded_maxima()]
        if current is not None:
            candidates.append(current)
        return max(candidates)
