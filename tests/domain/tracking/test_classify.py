from __future__ import annotations

import pytest

from shiptrace.domain.model import CanonicalStep, SourceKind, TimelineFlow
from shiptrace.domain.tracking import ALIAS_TABLES, canonical_movement_status, classify


@pytest.mark.parametrize(
    ("raw_status", "source_kind", "expected"),
    [
        ("OFP", SourceKind.TRACKING, CanonicalStep.OUT_FOR_DELIVERY),
        ("out_for_delivery", SourceKind.CUSTOMER, CanonicalStep.OUT_FOR_DELIVERY),
        ("picked", SourceKind.TRACKING, CanonicalStep.RECEIVED_AT_OCL),
        ("pickup", SourceKind.CUSTOMER, CanonicalStep.RECEIVED_AT_OCL),
        ("picked_up", SourceKind.TRACKING, CanonicalStep.RECEIVED_AT_OCL),
        ("intransit", SourceKind.CUSTOMER, CanonicalStep.IN_TRANSIT),
        ("reached-hub", SourceKind.TRACKING, CanonicalStep.IN_TRANSIT),
        ("  Delivered ", SourceKind.MEDICINE, CanonicalStep.DELIVERED),
        ("Ready  To Dispatch", SourceKind.MEDICINE, CanonicalStep.RECEIVED_AT_OCL),
        ("courierboy", SourceKind.TRACKING, CanonicalStep.BOOKED),
        ("assigned_completed", SourceKind.TRACKING, CanonicalStep.BOOKED),
        ("UNDELIVERED", SourceKind.CUSTOMER, CanonicalStep.UNDELIVERED),
    ],
)
def test_classify_uses_source_alias_table(
    raw_status: str, source_kind: SourceKind, expected: CanonicalStep
) -> None:
    assert classify(raw_status, source_kind) is expected


@pytest.mark.parametrize("raw_status", [None, "", "   ", "teleported", "42"])
@pytest.mark.parametrize("source_kind", list(SourceKind))
def test_classify_defaults_unknown_status_to_booked(
    raw_status: str | None, source_kind: SourceKind
) -> None:
    assert classify(raw_status, source_kind) is CanonicalStep.BOOKED


def test_every_source_recognizes_both_terminal_statuses() -> None:
    for table in ALIAS_TABLES.values():
        assert table.lookup("delivered") is CanonicalStep.DELIVERED
        assert table.lookup("undelivered") is CanonicalStep.UNDELIVERED


def test_undelivered_shares_the_delivered_position() -> None:
    assert CanonicalStep.UNDELIVERED.ordinal == CanonicalStep.DELIVERED.ordinal
    assert CanonicalStep.UNDELIVERED.is_terminal
    assert TimelineFlow.STANDARD.fold(CanonicalStep.UNDELIVERED) is CanonicalStep.DELIVERED


def test_standard_flow_folds_received_into_booked() -> None:
    assert TimelineFlow.STANDARD.fold(CanonicalStep.RECEIVED_AT_OCL) is CanonicalStep.BOOKED
    assert TimelineFlow.DETAILED.fold(CanonicalStep.RECEIVED_AT_OCL) is (
        CanonicalStep.RECEIVED_AT_OCL
    )


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        ("Picked", "pickup"),
        ("picked_up", "pickup"),
        ("intransit", "in_transit"),
        ("OFP", "out_for_delivery"),
        ("reachedhub", "reached-hub"),
        ("received", "received"),
    ],
)
def test_canonical_movement_status_folds_spellings(status: str, expected: str) -> None:
    assert canonical_movement_status(status) == expected
