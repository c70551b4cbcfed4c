"""Pydantic models describing the stored shipment documents.

Three document shapes hold shipment records: corporate tracking records,
medicine-delivery bookings and direct customer bookings. The models are
lenient on purpose: stored data was written by several generations of the
portal, so timestamps arrive as ISO strings, epoch numbers or extended-JSON
``{"$date": ...}`` objects, and malformed values decay to ``None``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Annotated, Literal, cast

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter

# Epoch values above this are milliseconds rather than seconds.
_EPOCH_MILLIS_THRESHOLD = 10**11


def parse_timestamp(value: object) -> datetime | None:
    """Return ``value`` as an aware UTC datetime, or ``None`` when unusable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Mapping):
        return parse_timestamp(cast(Mapping[str, object], value).get("$date"))
    if isinstance(value, datetime):
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
    if isinstance(value, int | float):
        seconds = value / 1000 if abs(value) >= _EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return parse_timestamp(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _stringify(value: object) -> object:
    if isinstance(value, bool | Mapping | list | tuple):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, int | float):
        return str(value)
    return _blank_to_none(value)


def _lenient_int(value: object) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = _lenient_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _lenient_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _is_record(value: object) -> bool:
    return isinstance(value, Mapping | BaseModel)


def _record_or_none(value: object) -> object:
    return value if _is_record(value) else None


def _record_or_empty(value: object) -> object:
    return value if _is_record(value) else {}


def _records(value: object) -> list[object]:
    if isinstance(value, list | tuple):
        return [item for item in cast(list[object], value) if _is_record(item)]
    return [value] if _is_record(value) else []


def _grouped(value: object) -> object:
    if isinstance(value, list | tuple):
        return _records(value)
    return _record_or_none(value)


def _image_list(value: object) -> list[object]:
    items = cast(list[object], value) if isinstance(value, list | tuple) else [value]
    references: list[object] = []
    for item in items:
        if isinstance(item, str):
            references.append({"url": item})
        elif _is_record(item):
            references.append(item)
    return references


Timestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
Text = Annotated[str | None, BeforeValidator(_stringify)]
Count = Annotated[int | None, BeforeValidator(_lenient_int)]
Coordinate = Annotated[float | None, BeforeValidator(_lenient_float)]
Meta = Annotated[dict[str, object], BeforeValidator(_record_or_empty)]


class DocumentModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ImageReference(DocumentModel):
    url: Text = None


Images = Annotated[list[ImageReference], BeforeValidator(_image_list)]


def image_urls(images: list[ImageReference]) -> tuple[str, ...]:
    return tuple(image.url for image in images if image.url)


class LocationPayload(DocumentModel):
    name: Text = None
    company_name: Text = Field(default=None, alias="companyName")
    city: Text = None
    state: Text = None
    address: Text = None
    locality: Text = None

    @property
    def contact_name(self) -> str | None:
        return self.name or self.company_name


Location = Annotated[LocationPayload, BeforeValidator(_record_or_empty)]


class StatusHistoryEntry(DocumentModel):
    status: Text = None
    timestamp: Timestamp = None
    notes: Text = None


class HistoryEntry(DocumentModel):
    status: Text = None
    timestamp: Timestamp = None
    notes: Text = None
    meta: Meta = Field(default_factory=dict)


class PickupEntry(DocumentModel):
    picked_up_at: Timestamp = Field(default=None, alias="pickedUpAt")
    courier_name: Text = Field(default=None, alias="courierName")


class ScanEntry(DocumentModel):
    scanned_at: Timestamp = Field(default=None, alias="scannedAt")
    admin_name: Text = Field(default=None, alias="adminName")


class HubEntry(DocumentModel):
    timestamp: Timestamp = None
    admin_name: Text = Field(default=None, alias="adminName")
    location: Text = None


class AssignmentEntry(DocumentModel):
    assigned_at: Timestamp = Field(default=None, alias="assignedAt")
    completed_at: Timestamp = Field(default=None, alias="completedAt")
    courier_name: Text = Field(default=None, alias="courierBoyName")
    courier_phone: Text = Field(default=None, alias="courierBoyPhone")
    proof_images: Images = Field(default_factory=list, alias="proofImages")
    delivery_proof_images: Images = Field(default_factory=list, alias="deliveryProofImages")


# Groups are stored either as an array of entries or as a single entry.
PickupGroup = Annotated[list[PickupEntry] | PickupEntry | None, BeforeValidator(_grouped)]
ScanGroup = Annotated[list[ScanEntry] | ScanEntry | None, BeforeValidator(_grouped)]
HubGroup = Annotated[list[HubEntry] | HubEntry | None, BeforeValidator(_grouped)]
AssignmentGroup = Annotated[
    list[AssignmentEntry] | AssignmentEntry | None, BeforeValidator(_grouped)
]


class AttemptLocation(DocumentModel):
    address: Text = None
    latitude: Coordinate = None
    longitude: Coordinate = None


class UnreachableAttemptPayload(DocumentModel):
    at: Timestamp = None
    reason: Text = None
    location: Annotated[AttemptLocation | None, BeforeValidator(_record_or_none)] = None
    courier_name: Text = Field(default=None, alias="courierBoyName")


class UnreachablePayload(DocumentModel):
    count: Count = None
    attempts: Annotated[list[UnreachableAttemptPayload], BeforeValidator(_records)] = Field(
        default_factory=list
    )


class DeliveredPayload(DocumentModel):
    delivered_at: Timestamp = Field(default=None, alias="deliveredAt")
    amount_collected: Text = Field(default=None, alias="amountCollected")
    received_by: Text = Field(default=None, alias="receivedBy")
    last_unreachable_attempt: Timestamp = Field(default=None, alias="lastUnreachableAttempt")
    delivery_proof_images: Images = Field(default_factory=list, alias="deliveryProofImages")


Delivered = Annotated[DeliveredPayload | None, BeforeValidator(_record_or_none)]
Unreachable = Annotated[UnreachablePayload | None, BeforeValidator(_record_or_none)]


class _LoggedDocument(DocumentModel):
    consignment_number: int = Field(alias="consignmentNumber")
    booking_reference: Text = Field(default=None, alias="bookingReference")
    created_at: Timestamp = Field(default=None, alias="createdAt")
    updated_at: Timestamp = Field(default=None, alias="updatedAt")
    status_history: Annotated[list[StatusHistoryEntry], BeforeValidator(_records)] = Field(
        default_factory=list, alias="statusHistory"
    )
    history: Annotated[list[HistoryEntry], BeforeValidator(_records)] = Field(
        default_factory=list
    )


# --- corporate tracking records ----------------------------------------------


class TrackingShipmentData(DocumentModel):
    services: Text = None
    packages_count: Count = Field(default=None, alias="packagesCount")
    total_packages: Count = Field(default=None, alias="totalPackages")
    actual_weight: Text = Field(default=None, alias="actualWeight")
    chargeable_weight: Text = Field(default=None, alias="chargeableWeight")
    mode: Text = None
    declared_value: Text = Field(default=None, alias="declaredValue")
    special_instructions: Text = Field(default=None, alias="specialInstructions")
    estimated_delivery_date: Timestamp = Field(default=None, alias="estimatedDeliveryDate")
    package_images: Images = Field(default_factory=list, alias="packageImages")
    uploaded_files: Images = Field(default_factory=list, alias="uploadedFiles")


class InvoiceData(DocumentModel):
    final_price: Text = Field(default=None, alias="finalPrice")
    service_type: Text = Field(default=None, alias="serviceType")
    estimated_delivery_date: Timestamp = Field(default=None, alias="estimatedDeliveryDate")


class TrackingPaymentData(DocumentModel):
    payment_type: Text = Field(default=None, alias="paymentType")


class BookedEntry(DocumentModel):
    booking_date: Timestamp = Field(default=None, alias="bookingDate")
    origin: Location = Field(default_factory=LocationPayload, alias="originData")
    destination: Location = Field(default_factory=LocationPayload, alias="destinationData")
    shipment: Annotated[TrackingShipmentData, BeforeValidator(_record_or_empty)] = Field(
        default_factory=TrackingShipmentData, alias="shipmentData"
    )
    invoice: Annotated[InvoiceData, BeforeValidator(_record_or_empty)] = Field(
        default_factory=InvoiceData, alias="invoiceData"
    )
    payment: Annotated[TrackingPaymentData, BeforeValidator(_record_or_empty)] = Field(
        default_factory=TrackingPaymentData, alias="paymentData"
    )


class TrackingDocument(_LoggedDocument):
    kind: Literal["tracking"] = "tracking"
    current_status: Text = Field(default=None, alias="currentStatus")
    booked: Annotated[list[BookedEntry], BeforeValidator(_records)] = Field(
        default_factory=list
    )
    pickup: PickupGroup = None
    received: ScanGroup = None
    reached_hub: HubGroup = Field(default=None, alias="reachedHub")
    assigned: AssignmentGroup = None
    courierboy: AssignmentGroup = None
    intransit: AssignmentGroup = None
    out_for_delivery: AssignmentGroup = Field(default=None, alias="OFD")
    delivered: Delivered = None
    unreachable: Unreachable = None


# --- medicine-delivery bookings ----------------------------------------------


class MedicineShipment(DocumentModel):
    services: Text = None
    actual_weight: Text = Field(default=None, alias="actualWeight")
    mode: Text = None


class MedicinePackage(DocumentModel):
    total_packages: Count = Field(default=None, alias="totalPackages")
    package_images: Images = Field(default_factory=list, alias="packageImages")


class MedicinePayment(DocumentModel):
    delivery_type: Text = Field(default=None, alias="deliveryType")


class MedicineManifest(DocumentModel):
    created_at: Timestamp = Field(default=None, alias="createdAt")
    dispatched_at: Timestamp = Field(default=None, alias="dispatchedAt")


class MedicineBookingDocument(_LoggedDocument):
    kind: Literal["medicine"] = "medicine"
    status: Text = None
    arrived_at_hub_scan_at: Timestamp = Field(default=None, alias="arrivedAtHubScanAt")
    arrived_medicine_scanned_at: Timestamp = Field(default=None, alias="arrivedMedicineScannedAt")
    assigned_courier_boy_at: Timestamp = Field(default=None, alias="assignedCourierBoyAt")
    delivered_at: Timestamp = Field(default=None, alias="deliveredAt")
    manifest: Annotated[MedicineManifest | None, BeforeValidator(_record_or_none)] = None
    origin: Location = Field(default_factory=LocationPayload)
    destination: Location = Field(default_factory=LocationPayload)
    shipment: Annotated[MedicineShipment, BeforeValidator(_record_or_empty)] = Field(
        default_factory=MedicineShipment
    )
    package: Annotated[MedicinePackage, BeforeValidator(_record_or_empty)] = Field(
        default_factory=MedicinePackage
    )
    invoice: Annotated[InvoiceData, BeforeValidator(_record_or_empty)] = Field(
        default_factory=InvoiceData
    )
    payment: Annotated[MedicinePayment, BeforeValidator(_record_or_empty)] = Field(
        default_factory=MedicinePayment
    )


# --- direct customer bookings ------------------------------------------------


class CustomerShipment(DocumentModel):
    packages_count: Count = Field(default=None, alias="packagesCount")
    weight: Text = None
    special_instructions: Text = Field(default=None, alias="specialInstructions")
    package_images: Images = Field(default_factory=list, alias="packageImages")


class CustomerBookingDocument(_LoggedDocument):
    kind: Literal["customer"] = "customer"
    current_status: Text = Field(default=None, alias="currentStatus")
    status: Text = None
    booked_at: Timestamp = Field(default=None, alias="BookedAt")
    picked_up_at: Timestamp = Field(default=None, alias="PickedUpAt")
    received_at: Timestamp = Field(default=None, alias="ReceivedAt")
    reached_hub: HubGroup = Field(default=None, alias="reachedHub")
    assigned: AssignmentGroup = None
    courierboy: AssignmentGroup = None
    intransit: AssignmentGroup = None
    out_for_delivery: AssignmentGroup = Field(default=None, alias="OutForDelivery")
    delivered: Delivered = None
    unreachable: Unreachable = None
    origin: Location = Field(default_factory=LocationPayload)
    destination: Location = Field(default_factory=LocationPayload)
    shipment: Annotated[CustomerShipment, BeforeValidator(_record_or_empty)] = Field(
        default_factory=CustomerShipment
    )
    service_type: Text = Field(default=None, alias="serviceType")
    actual_weight: Text = Field(default=None, alias="actualWeight")
    shipping_mode: Text = Field(default=None, alias="shippingMode")
    payment_method: Text = Field(default=None, alias="paymentMethod")
    total_amount: Text = Field(default=None, alias="totalAmount")


SourceDocument = Annotated[
    TrackingDocument | MedicineBookingDocument | CustomerBookingDocument,
    Field(discriminator="kind"),
]

SOURCE_DOCUMENT_ADAPTER: TypeAdapter[
    TrackingDocument | MedicineBookingDocument | CustomerBookingDocument
] = TypeAdapter(SourceDocument)

SourceDocumentInput = (
    TrackingDocument | MedicineBookingDocument | CustomerBookingDocument | Mapping[str, object]
)
