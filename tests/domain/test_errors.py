from __future__ import annotations

import pytest

from shiptrace.domain.errors import InvalidConsignmentNumberError, parse_consignment_number


@pytest.mark.parametrize(
    ("value", "expected"),
    [("871026572", 871026572), (" 42 ", 42), (7, 7), ("007", 7)],
)
def test_parse_consignment_number_accepts_digits(value: str | int, expected: int) -> None:
    assert parse_consignment_number(value) == expected


@pytest.mark.parametrize("value", ["", "12a", "-5", "1.5", "١٢٣", -1, True])
def test_parse_consignment_number_rejects_non_digits(value: str | int) -> None:
    with pytest.raises(InvalidConsignmentNumberError):
        parse_consignment_number(value)


def test_invalid_number_is_a_value_error() -> None:
    assert issubclass(InvalidConsignmentNumberError, ValueError)
