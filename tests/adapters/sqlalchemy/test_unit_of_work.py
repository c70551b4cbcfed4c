from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, insert

from shiptrace.adapters.sqlalchemy.mappings import consignment_usage_table
from shiptrace.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAllocationUnitOfWork,
    SqlAlchemyTrackingUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from shiptrace.domain.allocation import ConsignmentAllocator
from shiptrace.domain.model import SourceKind
from tests.helpers.documents import medicine_document, tracking_document

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyTrackingUnitOfWork()
    assert not is_started()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_startup_uses_configured_database_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    startup()

    engine = configured_engine()
    assert engine is not None
    assert str(engine.url) == "sqlite+pysqlite:///:memory:"


def test_repositories_require_an_open_session(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyTrackingUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_tracking_unit_of_work_persists_documents(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyTrackingUnitOfWork() as uow:
        uow.repositories.for_kind(SourceKind.MEDICINE).add(medicine_document(871026600))
        uow.commit()

    with SqlAlchemyTrackingUnitOfWork() as uow:
        repos = uow.repositories
        assert repos.trackings.find(871026600) is None
        event_set = repos.medicine_bookings.find(871026600)
        assert event_set is not None
        assert event_set.source_kind is SourceKind.MEDICINE


def test_tracking_unit_of_work_rolls_back_on_error(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyTrackingUnitOfWork() as uow:
        uow.repositories.trackings.add(tracking_document(871026601))
        raise RuntimeError("boom")

    with SqlAlchemyTrackingUnitOfWork() as uow:
        assert uow.repositories.trackings.find(871026601) is None


def test_repositories_follow_lookup_order(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyTrackingUnitOfWork() as uow:
        kinds = [repo.kind for repo in uow.repositories.in_lookup_order()]

    assert kinds == [SourceKind.TRACKING, SourceKind.MEDICINE, SourceKind.CUSTOMER]


def test_allocator_over_sqlalchemy_skips_numbers_already_in_use(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    with SqlAlchemyTrackingUnitOfWork() as uow:
        uow.repositories.trackings.add(tracking_document(871026700))
        uow.commit()
    with sqlite_engine.begin() as connection:
        connection.execute(insert(consignment_usage_table).values(consignment_number=871026710))

    allocator = ConsignmentAllocator(unit_of_work_factory=SqlAlchemyAllocationUnitOfWork)

    assert allocator.next_id() == 871026711
    assert allocator.next_id() == 871026712
    assert allocator.summary().next_start_number == 871026713


def test_allocator_over_sqlalchemy_starts_from_base(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    allocator = ConsignmentAllocator(unit_of_work_factory=SqlAlchemyAllocationUnitOfWork)

    assert allocator.next_id() == 871026572
