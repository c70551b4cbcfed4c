"""Builders for stored shipment documents as they arrive from the data store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

CONSIGNMENT_NUMBER = 871026572
DAY = datetime(2025, 3, 1, tzinfo=UTC)


def at(hours: float, *, seconds: int = 0) -> datetime:
    """Return a UTC timestamp ``hours`` after the start of the test day."""

    return DAY + timedelta(hours=hours, seconds=seconds)


def iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def tracking_document(
    consignment_number: int = CONSIGNMENT_NUMBER,
    *,
    status: str = "booked",
    payment_type: str = "TP",
    **overrides: object,
) -> dict[str, object]:
    document: dict[str, object] = {
        "kind": "tracking",
        "consignmentNumber": consignment_number,
        "bookingReference": str(consignment_number),
        "currentStatus": status,
        "createdAt": iso(at(8.5)),
        "booked": [
            {
                "bookingDate": iso(at(9)),
                "originData": {"name": "Acme Pharma", "city": "Guwahati", "state": "Assam"},
                "destinationData": {
                    "name": "R. Das",
                    "city": "Shillong",
                    "state": "Meghalaya",
                    "address": "12 Laitumkhrah Road",
                },
                "shipmentData": {
                    "services": "Express",
                    "packagesCount": 2,
                    "actualWeight": 3.5,
                    "mode": "Surface",
                    "packageImages": ["https://img.example/p1.jpg", "https://img.example/p1.jpg"],
                },
                "invoiceData": {"finalPrice": 450},
                "paymentData": {"paymentType": payment_type},
            }
        ],
    }
    document.update(overrides)
    return document


def medicine_document(
    consignment_number: int = CONSIGNMENT_NUMBER,
    *,
    status: str = "Booked",
    **overrides: object,
) -> dict[str, object]:
    document: dict[str, object] = {
        "kind": "medicine",
        "consignmentNumber": consignment_number,
        "bookingReference": str(consignment_number),
        "status": status,
        "createdAt": iso(at(9)),
        "origin": {"name": "City Chemists", "city": "Guwahati", "state": "Assam"},
        "destination": {"name": "Dr. Sen", "city": "Tezpur", "state": "Assam"},
        "shipment": {"services": "Medicine", "actualWeight": "1.2", "mode": "Air"},
        "package": {"totalPackages": 1},
        "invoice": {"finalPrice": "120"},
        "payment": {"deliveryType": "COD"},
    }
    document.update(overrides)
    return document


def customer_document(
    consignment_number: int = CONSIGNMENT_NUMBER,
    *,
    status: str = "booked",
    **overrides: object,
) -> dict[str, object]:
    document: dict[str, object] = {
        "kind": "customer",
        "consignmentNumber": consignment_number,
        "bookingReference": f"CB-{consignment_number}",
        "currentStatus": status,
        "createdAt": iso(at(9)),
        "BookedAt": iso(at(9)),
        "origin": {"name": "Anita", "city": "Jorhat", "state": "Assam"},
        "destination": {"name": "Bikash", "city": "Dibrugarh", "state": "Assam"},
        "shipment": {"packagesCount": 1, "weight": "2"},
        "serviceType": "Standard",
        "shippingMode": "Surface",
        "paymentMethod": "cod",
        "totalAmount": 250,
    }
    document.update(overrides)
    return document
