from __future__ import annotations

import pytest

from shiptrace.adapters.documents import (
    combined_log,
    extract_events,
    latest_entry,
    location_label,
    parse_source_document,
)
from shiptrace.adapters.documents.schema import HistoryEntry, LocationPayload, StatusHistoryEntry
from shiptrace.domain.model import CanonicalStep, EventGroup, RawEventSet, SourceKind
from shiptrace.domain.tracking import TrackingEngine
from tests.helpers.documents import (
    at,
    customer_document,
    iso,
    medicine_document,
    tracking_document,
)


def _extract(payload: dict[str, object]) -> RawEventSet:
    return extract_events(parse_source_document(payload))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ([], None),
        ([1, 2, 3], 3),
        ([1, None], 1),
        ([None], None),
        ("single", "single"),
    ],
)
def test_latest_entry(value: object, expected: object) -> None:
    assert latest_entry(value) == expected


def test_location_label() -> None:
    assert location_label(LocationPayload(city="Guwahati", state="Assam"), "Origin") == (
        "Guwahati, Assam"
    )
    assert location_label(LocationPayload(state="Assam"), "Origin") == "Assam"
    assert location_label(LocationPayload(), "Origin") == "Origin"
    assert location_label(None, "Destination") == "Destination"


def test_tracking_document_events_and_facts() -> None:
    event_set = _extract(
        tracking_document(
            status="OFP",
            pickup=[{"pickedUpAt": iso(at(10)), "courierName": "Ravi"}],
            received={"scannedAt": iso(at(11)), "adminName": "Desk 3"},
            reachedHub={"timestamp": iso(at(14)), "location": "Shillong Hub"},
            intransit={"completedAt": iso(at(13)), "courierBoyName": "Line haul"},
            OFD={"assignedAt": iso(at(16)), "courierBoyName": "Mina", "courierBoyPhone": 9800},
        )
    )

    assert event_set.source_kind is SourceKind.TRACKING
    assert event_set.current_status == "OFP"
    assert event_set.timestamp_for(EventGroup.BOOKED) == at(9)
    assert event_set.event(EventGroup.PICKUP).actor == "Ravi"  # pyright: ignore[reportOptionalMemberAccess]
    assert event_set.timestamp_for(EventGroup.RECEIVED) == at(11)
    assert event_set.timestamp_for(EventGroup.IN_TRANSIT) == at(13)
    assert event_set.timestamp_for(EventGroup.REACHED_HUB) == at(14)
    assert event_set.event(EventGroup.REACHED_HUB).location == "Shillong Hub"  # pyright: ignore[reportOptionalMemberAccess]
    ofd = event_set.event(EventGroup.OUT_FOR_DELIVERY)
    assert ofd is not None
    assert ofd.actor_phone == "9800"

    facts = event_set.facts
    assert facts.origin_label == "Guwahati, Assam"
    assert facts.destination_label == "Shillong, Meghalaya"
    assert facts.recipient_name == "R. Das"
    assert facts.payment.label == "To Pay (COD)"
    assert facts.payment.collect_on_delivery
    assert facts.payment.amount_due == "450"
    assert facts.package_count == 2
    assert facts.weight == "3.5"


def test_tracking_prepaid_falls_back_to_declared_value() -> None:
    payload = tracking_document(payment_type="FP")
    booked = payload["booked"][0]  # pyright: ignore[reportIndexIssue, reportUnknownVariableType]
    booked["invoiceData"] = {}
    booked["shipmentData"]["declaredValue"] = 999

    payment = _extract(payload).facts.payment

    assert payment.label == "Prepaid (Corporate Credit)"
    assert not payment.collect_on_delivery
    assert payment.amount_due == "999"


def test_booked_time_falls_back_to_created_at() -> None:
    event_set = _extract(tracking_document(booked=[]))

    assert event_set.timestamp_for(EventGroup.BOOKED) == at(8.5)
    assert event_set.facts.origin_label == "Origin"


def test_delivery_time_is_dropped_while_status_disagrees() -> None:
    event_set = _extract(
        tracking_document(status="in_transit", delivered={"deliveredAt": iso(at(17))})
    )

    assert event_set.event(EventGroup.DELIVERED) is None


def test_delivered_status_recovers_time_from_status_history() -> None:
    event_set = _extract(
        tracking_document(
            status="delivered",
            delivered={"receivedBy": "R. Das"},
            statusHistory=[
                {"status": "booked", "timestamp": iso(at(9))},
                {"status": "delivered", "timestamp": iso(at(17))},
            ],
        )
    )

    summary = TrackingEngine().summarize(event_set)

    terminal = summary.steps[-1]
    assert terminal.key is CanonicalStep.DELIVERED
    assert terminal.completed
    assert terminal.timestamp == at(17)
    assert summary.movement_history[-1].status == "delivered"


def test_undelivered_time_falls_back_to_last_attempt() -> None:
    event_set = _extract(
        customer_document(
            status="undelivered",
            unreachable={
                "count": 2,
                "attempts": [
                    {"at": iso(at(15)), "reason": "Door locked"},
                    {
                        "at": iso(at(18)),
                        "reason": "No answer",
                        "location": {"latitude": 25.57, "longitude": 91.88},
                    },
                ],
            },
        )
    )

    failed = event_set.event(EventGroup.UNDELIVERED)
    assert failed is not None
    assert failed.timestamp == at(18)
    assert failed.note == "No answer"
    assert event_set.unreachable.total_attempts == 2
    assert event_set.unreachable.last_attempt.location_label == "25.57, 91.88"  # pyright: ignore[reportOptionalMemberAccess]


def test_medicine_document_events() -> None:
    event_set = _extract(
        medicine_document(
            status="Delivered",
            arrivedAtHubScanAt=iso(at(11)),
            manifest={"createdAt": iso(at(12)), "dispatchedAt": iso(at(13))},
            arrivedMedicineScannedAt=iso(at(15)),
            assignedCourierBoyAt=iso(at(16)),
            deliveredAt=iso(at(17)),
        )
    )

    assert event_set.source_kind is SourceKind.MEDICINE
    assert [item.group for item in event_set.events] == [
        EventGroup.BOOKED,
        EventGroup.RECEIVED,
        EventGroup.IN_TRANSIT,
        EventGroup.REACHED_HUB,
        EventGroup.OUT_FOR_DELIVERY,
        EventGroup.DELIVERED,
    ]
    assert event_set.facts.payment.label == "To Pay (COD)"
    assert event_set.facts.payment.amount_due == "120"


def test_medicine_delivery_time_requires_delivered_status() -> None:
    event_set = _extract(medicine_document(status="Arrived", deliveredAt=iso(at(17))))

    assert event_set.event(EventGroup.DELIVERED) is None


def test_medicine_status_defaults_to_booked() -> None:
    payload = medicine_document()
    del payload["status"]

    assert _extract(payload).current_status == "Booked"


def test_customer_document_prefers_current_status() -> None:
    event_set = _extract(customer_document(status="intransit", status_legacy="ignored"))
    legacy = customer_document()
    del legacy["currentStatus"]
    legacy["status"] = "received"

    assert event_set.current_status == "intransit"
    assert _extract(legacy).current_status == "received"


def test_customer_document_facts() -> None:
    facts = _extract(customer_document(PickedUpAt=iso(at(10)))).facts

    assert facts.booking_reference == "CB-871026572"
    assert facts.payment.label == "To Pay (COD)"
    assert facts.payment.amount_due == "250"
    assert facts.service_type == "Standard"
    assert facts.transit_mode == "Surface"


def test_combined_log_merges_and_orders_entries() -> None:
    log = combined_log(
        [
            StatusHistoryEntry(status="Received", timestamp=at(11)),
            StatusHistoryEntry(status=None, timestamp=at(12)),
        ],
        [
            HistoryEntry(status="booked", timestamp=at(9)),
            HistoryEntry(meta={"status": "ofp", "timestamp": iso(at(16))}),
            HistoryEntry(status="pickup"),
        ],
    )

    assert [entry.status for entry in log] == ["booked", "received", "ofp", "pickup"]
    assert log[2].timestamp == at(16)
    assert log[-1].timestamp is None
