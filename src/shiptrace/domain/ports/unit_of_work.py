"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from shiptrace.domain.model import SourceKind
    from shiptrace.domain.ports.counters import ConsignmentSequenceRepository
    from shiptrace.domain.ports.sources import ShipmentSourceRepository


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class TrackingRepositories(RepositoryCollection):
    """Source stores consulted when tracking a consignment."""

    trackings: ShipmentSourceRepository
    medicine_bookings: ShipmentSourceRepository
    customer_bookings: ShipmentSourceRepository

    def in_lookup_order(self) -> tuple[ShipmentSourceRepository, ...]:
        return (self.trackings, self.medicine_bookings, self.customer_bookings)

    def for_kind(self, kind: SourceKind) -> ShipmentSourceRepository:
        for repository in self.in_lookup_order():
            if repository.kind == kind:
                return repository
        raise KeyError(kind)


@dataclass(slots=True)
class AllocationRepositories(RepositoryCollection):
    """Repositories required to issue consignment numbers."""

    consignment_sequence: ConsignmentSequenceRepository


type TrackingUnitOfWork = UnitOfWork[TrackingRepositories]
type AllocationUnitOfWork = UnitOfWork[AllocationRepositories]
