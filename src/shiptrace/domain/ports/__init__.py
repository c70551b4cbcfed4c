"""Domain port definitions for adapters."""

from __future__ import annotations

from .counters import ConsignmentSequenceRepository
from .sources import ShipmentSourceRepository
from .unit_of_work import (
    AllocationRepositories,
    AllocationUnitOfWork,
    RepositoryCollection,
    TrackingRepositories,
    TrackingUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "AllocationRepositories",
    "AllocationUnitOfWork",
    "ConsignmentSequenceRepository",
    "RepositoryCollection",
    "ShipmentSourceRepository",
    "TrackingRepositories",
    "TrackingUnitOfWork",
    "UnitOfWork",
]
