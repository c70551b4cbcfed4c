"""Domain-level errors raised by tracking and allocation."""

from __future__ import annotations


class InvalidConsignmentNumberError(ValueError):
    """Raised when a consignment number is not a string of digits."""


class ShipmentNotFoundError(LookupError):
    """Raised when no source holds a record for a consignment number."""

    def __init__(self, consignment_number: int) -> None:
        super().__init__(f"Consignment number {consignment_number} not found")
        self.consignment_number = consignment_number


class ConsignmentAllocationError(RuntimeError):
    """Raised when the sequence counter cannot produce a new number."""


def parse_consignment_number(value: str | int) -> int:
    """Return ``value`` as an integer consignment number."""

    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise InvalidConsignmentNumberError("Consignment number must be positive")
        return value
    text = str(value).strip()
    if not text.isascii() or not text.isdigit():
        raise InvalidConsignmentNumberError(f"Invalid consignment number: {value!r}")
    return int(text)
