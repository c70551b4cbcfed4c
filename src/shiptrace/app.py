"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from shiptrace.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAllocationUnitOfWork,
    SqlAlchemyTrackingUnitOfWork,
    is_started,
    startup,
)
from shiptrace.config import get_tracking_config
from shiptrace.domain.allocation import ConsignmentAllocator
from shiptrace.domain.errors import parse_consignment_number
from shiptrace.domain.model import SourceKind
from shiptrace.domain.ports.unit_of_work import AllocationUnitOfWork, TrackingUnitOfWork
from shiptrace.domain.tracking import TrackingEngine, locate_shipment

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from shiptrace.config import TrackingConfig
    from shiptrace.domain.allocation import ConsignmentSummary
    from shiptrace.domain.model import MovementHistory, TrackingSummary

TrackingUnitOfWorkFactory = Callable[[], TrackingUnitOfWork]
AllocationUnitOfWorkFactory = Callable[[], AllocationUnitOfWork]


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def _engine(config: TrackingConfig) -> TrackingEngine:
    return TrackingEngine(flow=config.flow, window=config.duplicate_window)


def track_consignment(
    consignment_number: str | int,
    *,
    unit_of_work_factory: TrackingUnitOfWorkFactory | None = None,
    config: TrackingConfig | None = None,
) -> TrackingSummary:
    """Look up a consignment across every source and build its tracking view."""

    number = parse_consignment_number(consignment_number)
    effective_config = config or get_tracking_config()
    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyTrackingUnitOfWork

    with unit_of_work_factory() as uow:
        event_set = locate_shipment(number, uow.repositories.in_lookup_order())

    summary = _engine(effective_config).summarize(event_set)
    log.info(
        "Tracked consignment %s from %s source: step=%s, movements=%s",
        number,
        summary.source,
        summary.metadata.current_step_key,
        len(summary.movement_history),
    )
    return summary


def consignment_movement_history(
    consignment_number: str | int,
    *,
    unit_of_work_factory: TrackingUnitOfWorkFactory | None = None,
    config: TrackingConfig | None = None,
) -> MovementHistory:
    """Return only the deduplicated movement history of a consignment."""

    number = parse_consignment_number(consignment_number)
    effective_config = config or get_tracking_config()
    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyTrackingUnitOfWork

    with unit_of_work_factory() as uow:
        event_set = locate_shipment(number, uow.repositories.in_lookup_order())
    return _engine(effective_config).movement(event_set)


def _allocator(
    unit_of_work_factory: AllocationUnitOfWorkFactory | None,
    config: TrackingConfig | None,
) -> ConsignmentAllocator:
    effective_config = config or get_tracking_config()
    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = partial(
            SqlAlchemyAllocationUnitOfWork, sequence_key=effective_config.sequence_key
        )

    return ConsignmentAllocator(
        unit_of_work_factory=unit_of_work_factory,
        base_number=effective_config.base_consignment_number,
    )


def allocate_consignment_number(
    *,
    unit_of_work_factory: AllocationUnitOfWorkFactory | None = None,
    config: TrackingConfig | None = None,
) -> int:
    """Issue the next globally unique consignment number."""

    return _allocator(unit_of_work_factory, config).next_id()


def consignment_number_summary(
    *,
    unit_of_work_factory: AllocationUnitOfWorkFactory | None = None,
    config: TrackingConfig | None = None,
) -> ConsignmentSummary:
    """Report the highest reserved consignment number and the next start number."""

    return _allocator(unit_of_work_factory, config).summary()


def load_source_documents(
    documents: Iterable[Mapping[str, object]],
    *,
    unit_of_work_factory: TrackingUnitOfWorkFactory | None = None,
) -> dict[SourceKind, int]:
    """Store raw source documents, each tagged with its ``kind``.

    All documents are written in one transaction; a document that fails
    validation rolls back the whole batch.
    """

    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyTrackingUnitOfWork

    counts = dict.fromkeys(SourceKind, 0)
    with unit_of_work_factory() as uow:
        for document in documents:
            kind = SourceKind(str(document.get("kind", "")))
            uow.repositories.for_kind(kind).add(document)
            counts[kind] += 1
        uow.commit()

    log.info(
        "Loaded source documents: %s",
        ", ".join(f"{kind}={count}" for kind, count in counts.items()),
    )
    return counts
