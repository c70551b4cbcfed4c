from __future__ import annotations

from dataclasses import replace

import pytest

from shiptrace.domain.errors import ShipmentNotFoundError
from shiptrace.domain.model import EventGroup, RawEventSet, SourceKind
from shiptrace.domain.tracking import LOOKUP_ORDER, TrackingEngine, locate_shipment
from tests.helpers.event_sets import event, make_event_set, make_facts


class FakeSource:
    def __init__(self, kind: SourceKind, event_set: RawEventSet | None = None) -> None:
        self._kind = kind
        self.event_set = event_set
        self.lookups: list[int] = []

    @property
    def kind(self) -> SourceKind:
        return self._kind

    def find(self, consignment_number: int) -> RawEventSet | None:
        self.lookups.append(consignment_number)
        return self.event_set

    def add(self, document: object) -> int:
        raise NotImplementedError


def test_lookup_order_prefers_tracking_store() -> None:
    assert LOOKUP_ORDER == (SourceKind.TRACKING, SourceKind.MEDICINE, SourceKind.CUSTOMER)


def test_locate_shipment_stops_at_first_match() -> None:
    medicine_set = make_event_set("booked", source_kind=SourceKind.MEDICINE)
    tracking = FakeSource(SourceKind.TRACKING)
    medicine = FakeSource(SourceKind.MEDICINE, medicine_set)
    customer = FakeSource(SourceKind.CUSTOMER, make_event_set("booked"))

    result = locate_shipment(42, [tracking, medicine, customer])

    assert result is medicine_set
    assert tracking.lookups == [42]
    assert customer.lookups == []


def test_locate_shipment_raises_when_no_source_has_it() -> None:
    sources = [FakeSource(kind) for kind in LOOKUP_ORDER]

    with pytest.raises(ShipmentNotFoundError) as excinfo:
        locate_shipment(871026999, sources)

    assert excinfo.value.consignment_number == 871026999
    assert "871026999" in str(excinfo.value)


def test_summary_defaults_missing_status_to_booked() -> None:
    summary = TrackingEngine().summarize(make_event_set(""))

    assert summary.status == "booked"
    assert summary.steps[0].completed


def test_summary_attachments_are_unique_and_ordered() -> None:
    facts = make_facts(
        package_images=("a.jpg", "b.jpg", "a.jpg", ""),
        delivery_proof_images=("proof.jpg", "proof.jpg"),
    )
    event_set = replace(make_event_set("booked"), facts=facts)

    attachments = TrackingEngine().summarize(event_set).attachments

    assert attachments.package_images == ("a.jpg", "b.jpg")
    assert attachments.delivery_proof_images == ("proof.jpg",)


def test_movement_view_matches_full_summary() -> None:
    event_set = make_event_set(
        "in_transit",
        event(EventGroup.RECEIVED, 11),
        event(EventGroup.IN_TRANSIT, 13, status="in_transit"),
    )
    engine = TrackingEngine()

    movement = engine.movement(event_set)

    assert movement.movement_history == engine.summarize(event_set).movement_history
    payload = movement.to_payload()
    assert payload["consignmentNumber"] == "871026572"
    assert [item.status for item in movement.movement_history] == [
        "booked",
        "received",
        "in_transit",
    ]
    assert len(payload["movementHistory"]) == 3  # pyright: ignore[reportArgumentType]
