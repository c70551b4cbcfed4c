"""Ports for reading shipment source documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from shiptrace.domain.model import RawEventSet, SourceKind


@runtime_checkable
class ShipmentSourceRepository(Protocol):
    """One document store that may hold the record of a consignment."""

    @property
    def kind(self) -> SourceKind: ...

    def find(self, consignment_number: int) -> RawEventSet | None: ...

    def add(self, document: Mapping[str, object]) -> int: ...
