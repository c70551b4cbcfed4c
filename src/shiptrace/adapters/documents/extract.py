"""Translate stored shipment documents into normalized raw event sets."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from shiptrace.domain.model import (
    EventGroup,
    LogEntry,
    PaymentTerms,
    RawEvent,
    RawEventSet,
    ShipmentFacts,
    SourceKind,
    UnreachableAttempt,
    UnreachableLog,
)

from .schema import (
    SOURCE_DOCUMENT_ADAPTER,
    CustomerBookingDocument,
    MedicineBookingDocument,
    TrackingDocument,
    image_urls,
    parse_timestamp,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from .schema import (
        AssignmentEntry,
        DeliveredPayload,
        HistoryEntry,
        HubEntry,
        LocationPayload,
        SourceDocumentInput,
        StatusHistoryEntry,
        UnreachablePayload,
    )

    type Document = TrackingDocument | MedicineBookingDocument | CustomerBookingDocument


log = getLogger(__name__)

COD_PAYMENT_LABEL: Final[str] = "To Pay (COD)"


def latest_entry[T](value: list[T] | T | None) -> T | None:
    """Return the most recent entry of a group stored as an array or single object."""

    if value is None:
        return None
    if isinstance(value, list):
        present = [entry for entry in value if entry is not None]
        return present[-1] if present else None
    return value


def location_label(location: LocationPayload | None, fallback: str) -> str:
    if location is None:
        return fallback
    city = (location.city or "").strip()
    state = (location.state or "").strip()
    if city and state:
        return f"{city}, {state}"
    return city or state or fallback


def parse_source_document(
    payload: SourceDocumentInput,
    kind: SourceKind | None = None,
) -> Document:
    """Validate ``payload`` as a source document.

    Without ``kind`` the payload must carry its own ``kind`` tag.
    """

    if isinstance(payload, TrackingDocument | MedicineBookingDocument | CustomerBookingDocument):
        return payload
    if kind is None:
        return SOURCE_DOCUMENT_ADAPTER.validate_python(payload)
    return SOURCE_DOCUMENT_ADAPTER.validate_python({**payload, "kind": str(kind)})


def extract_events(document: Document) -> RawEventSet:
    match document:
        case TrackingDocument():
            return extract_tracking_events(document)
        case MedicineBookingDocument():
            return extract_medicine_events(document)
        case CustomerBookingDocument():
            return extract_customer_events(document)


def extract_tracking_events(document: TrackingDocument) -> RawEventSet:
    status = document.current_status or "booked"
    booked = document.booked[0] if document.booked else None
    shipment = booked.shipment if booked else None
    invoice = booked.invoice if booked else None
    destination = booked.destination if booked else None

    pickup = latest_entry(document.pickup)
    received = latest_entry(document.received)
    courier = latest_entry(document.courierboy)
    intransit = latest_entry(document.intransit)

    events = [
        RawEvent(
            group=EventGroup.BOOKED,
            status="booked",
            timestamp=(booked.booking_date if booked else None) or document.created_at,
        )
    ]
    if pickup is not None:
        events.append(
            RawEvent(
                group=EventGroup.PICKUP,
                status="pickup",
                timestamp=pickup.picked_up_at,
                actor=pickup.courier_name,
            )
        )
    if received is not None:
        events.append(
            RawEvent(
                group=EventGroup.RECEIVED,
                status="received",
                timestamp=received.scanned_at,
                actor=received.admin_name,
            )
        )
    events.extend(_hub_events(document.reached_hub))
    events.extend(_assignment_events(EventGroup.ASSIGNED, "assigned", document.assigned))
    events.extend(_assignment_events(EventGroup.COURIER_ASSIGNED, "courierboy", courier))
    if intransit is not None:
        events.append(
            RawEvent(
                group=EventGroup.IN_TRANSIT,
                status="in_transit",
                timestamp=intransit.completed_at,
                actor=intransit.courier_name,
            )
        )
    events.extend(
        _assignment_events(
            EventGroup.OUT_FOR_DELIVERY, "out_for_delivery", document.out_for_delivery
        )
    )
    events.extend(_terminal_events(status, document.delivered, document.unreachable))

    cod = booked is not None and (booked.payment.payment_type or "").upper() == "TP"
    amount_due = None
    if invoice is not None and invoice.final_price:
        amount_due = invoice.final_price
    elif shipment is not None:
        amount_due = shipment.declared_value

    facts = ShipmentFacts(
        consignment_number=document.consignment_number,
        booking_reference=document.booking_reference or "",
        origin_label=location_label(booked.origin if booked else None, "Origin"),
        destination_label=location_label(destination, "Destination"),
        recipient_name=destination.contact_name if destination else None,
        delivery_address=(destination.address or destination.locality) if destination else None,
        service_type=(shipment.services if shipment else None)
        or (invoice.service_type if invoice else None),
        package_count=(shipment.packages_count or shipment.total_packages) if shipment else None,
        weight=(shipment.actual_weight or shipment.chargeable_weight) if shipment else None,
        transit_mode=shipment.mode if shipment else None,
        payment=PaymentTerms(
            label=COD_PAYMENT_LABEL if cod else "Prepaid (Corporate Credit)",
            collect_on_delivery=cod,
            amount_due=amount_due,
        ),
        special_instructions=shipment.special_instructions if shipment else None,
        estimated_delivery=(shipment.estimated_delivery_date if shipment else None)
        or (invoice.estimated_delivery_date if invoice else None),
        last_updated=document.updated_at or document.created_at,
        package_images=(
            image_urls(shipment.package_images) + image_urls(shipment.uploaded_files)
            if shipment
            else ()
        ),
        delivery_proof_images=_proof_images(courier, intransit, document.delivered),
    )
    return RawEventSet(
        source_kind=SourceKind.TRACKING,
        current_status=status,
        facts=facts,
        events=tuple(events),
        log=combined_log(document.status_history, document.history),
        unreachable=_unreachable_log(document.unreachable),
    )


def extract_medicine_events(document: MedicineBookingDocument) -> RawEventSet:
    status = document.status or "Booked"
    delivered = status.strip().lower() == "delivered"
    manifest = document.manifest
    candidates = (
        (EventGroup.RECEIVED, "received", document.arrived_at_hub_scan_at),
        (EventGroup.IN_TRANSIT, "in_transit", manifest.dispatched_at if manifest else None),
        (EventGroup.REACHED_HUB, "reached-hub", document.arrived_medicine_scanned_at),
        (EventGroup.OUT_FOR_DELIVERY, "out_for_delivery", document.assigned_courier_boy_at),
        (EventGroup.DELIVERED, "delivered", document.delivered_at if delivered else None),
    )
    events = [RawEvent(group=EventGroup.BOOKED, status="booked", timestamp=document.created_at)]
    events.extend(
        RawEvent(group=group, status=raw_status, timestamp=timestamp)
        for group, raw_status, timestamp in candidates
        if timestamp is not None
    )

    cod = (document.payment.delivery_type or "").upper() == "COD"
    destination = document.destination
    facts = ShipmentFacts(
        consignment_number=document.consignment_number,
        booking_reference=document.booking_reference or "",
        origin_label=location_label(document.origin, "Origin"),
        destination_label=location_label(destination, "Destination"),
        recipient_name=destination.contact_name,
        delivery_address=destination.locality or destination.address,
        service_type=document.shipment.services,
        package_count=document.package.total_packages,
        weight=document.shipment.actual_weight,
        transit_mode=document.shipment.mode,
        payment=PaymentTerms(
            label=COD_PAYMENT_LABEL if cod else "Prepaid",
            collect_on_delivery=cod,
            amount_due=document.invoice.final_price,
        ),
        estimated_delivery=document.invoice.estimated_delivery_date,
        last_updated=document.updated_at or document.created_at,
        package_images=image_urls(document.package.package_images),
    )
    return RawEventSet(
        source_kind=SourceKind.MEDICINE,
        current_status=status,
        facts=facts,
        events=tuple(events),
        log=combined_log(document.status_history, document.history),
    )


def extract_customer_events(document: CustomerBookingDocument) -> RawEventSet:
    status = document.current_status or document.status or "booked"
    courier = latest_entry(document.courierboy)

    events = [
        RawEvent(
            group=EventGroup.BOOKED,
            status="booked",
            timestamp=document.booked_at or document.created_at,
        )
    ]
    if document.picked_up_at is not None:
        events.append(
            RawEvent(group=EventGroup.PICKUP, status="pickup", timestamp=document.picked_up_at)
        )
    if document.received_at is not None:
        events.append(
            RawEvent(group=EventGroup.RECEIVED, status="received", timestamp=document.received_at)
        )
    events.extend(_hub_events(document.reached_hub))
    events.extend(_assignment_events(EventGroup.ASSIGNED, "assigned", document.assigned))
    events.extend(_assignment_events(EventGroup.COURIER_ASSIGNED, "courierboy", courier))
    events.extend(_assignment_events(EventGroup.IN_TRANSIT, "in_transit", document.intransit))
    events.extend(
        _assignment_events(
            EventGroup.OUT_FOR_DELIVERY, "out_for_delivery", document.out_for_delivery
        )
    )
    events.extend(_terminal_events(status, document.delivered, document.unreachable))

    cod = (document.payment_method or "").lower() == "cod"
    shipment = document.shipment
    destination = document.destination
    facts = ShipmentFacts(
        consignment_number=document.consignment_number,
        booking_reference=document.booking_reference or "",
        origin_label=location_label(document.origin, "Origin"),
        destination_label=location_label(destination, "Destination"),
        recipient_name=destination.contact_name,
        delivery_address=destination.locality or destination.address,
        service_type=document.service_type,
        package_count=shipment.packages_count,
        weight=shipment.weight or document.actual_weight,
        transit_mode=document.shipping_mode,
        payment=PaymentTerms(
            label=COD_PAYMENT_LABEL if cod else "Prepaid",
            collect_on_delivery=cod,
            amount_due=document.total_amount,
        ),
        special_instructions=shipment.special_instructions,
        last_updated=document.updated_at or document.created_at,
        package_images=image_urls(shipment.package_images),
        delivery_proof_images=_proof_images(courier, None, document.delivered),
    )
    return RawEventSet(
        source_kind=SourceKind.CUSTOMER,
        current_status=status,
        facts=facts,
        events=tuple(events),
        log=combined_log(document.status_history, document.history),
        unreachable=_unreachable_log(document.unreachable),
    )


def combined_log(
    status_history: list[StatusHistoryEntry],
    history: list[HistoryEntry],
) -> tuple[LogEntry, ...]:
    """Merge both status logs ascending by time; entries without a time go last."""

    entries = [
        LogEntry(status=entry.status.lower(), timestamp=entry.timestamp, notes=entry.notes or "")
        for entry in status_history
        if entry.status
    ]
    for entry in history:
        status = entry.status or _meta_text(entry.meta, "status")
        if not status:
            continue
        entries.append(
            LogEntry(
                status=status.lower(),
                timestamp=entry.timestamp or parse_timestamp(entry.meta.get("timestamp")),
                notes=entry.notes or "",
                meta=entry.meta,
            )
        )
    return tuple(sorted(entries, key=_log_sort_key))


def _log_sort_key(entry: LogEntry) -> tuple[bool, datetime | None]:
    return (entry.timestamp is None, entry.timestamp)


def _meta_text(meta: Mapping[str, object], key: str) -> str | None:
    value = meta.get(key)
    if isinstance(value, str):
        return value.strip() or None
    return None


def _hub_events(value: list[HubEntry] | HubEntry | None) -> list[RawEvent]:
    hub = latest_entry(value)
    if hub is None:
        return []
    return [
        RawEvent(
            group=EventGroup.REACHED_HUB,
            status="reached-hub",
            timestamp=hub.timestamp,
            location=hub.location,
            actor=hub.admin_name,
        )
    ]


def _assignment_events(
    group: EventGroup,
    status: str,
    value: list[AssignmentEntry] | AssignmentEntry | None,
) -> list[RawEvent]:
    entry = latest_entry(value)
    if entry is None:
        return []
    return [
        RawEvent(
            group=group,
            status=status,
            timestamp=entry.assigned_at,
            actor=entry.courier_name,
            actor_phone=entry.courier_phone,
        )
    ]


def _terminal_events(
    status: str,
    delivered: DeliveredPayload | None,
    unreachable: UnreachablePayload | None,
) -> list[RawEvent]:
    # a terminal event exists only while the current status agrees with it
    match status.strip().lower():
        case "delivered" if delivered is not None:
            meta: dict[str, object] = {}
            if delivered.amount_collected is not None:
                meta["amountCollected"] = delivered.amount_collected
            if delivered.received_by is not None:
                meta["receivedBy"] = delivered.received_by
            return [
                RawEvent(
                    group=EventGroup.DELIVERED,
                    status="delivered",
                    timestamp=delivered.delivered_at,
                    meta=meta,
                )
            ]
        case "undelivered":
            last_attempt = latest_entry(unreachable.attempts) if unreachable else None
            failed_at = delivered.last_unreachable_attempt if delivered else None
            if failed_at is None and last_attempt is not None:
                failed_at = last_attempt.at
            return [
                RawEvent(
                    group=EventGroup.UNDELIVERED,
                    status="undelivered",
                    timestamp=failed_at,
                    note=last_attempt.reason if last_attempt else None,
                )
            ]
        case _:
            if delivered is not None and delivered.delivered_at is not None:
                log.debug("Ignoring delivery time recorded under status %r", status)
            return []


def _unreachable_log(unreachable: UnreachablePayload | None) -> UnreachableLog:
    if unreachable is None:
        return UnreachableLog()
    attempts = tuple(
        UnreachableAttempt(
            at=attempt.at,
            reason=attempt.reason,
            address=attempt.location.address if attempt.location else None,
            latitude=attempt.location.latitude if attempt.location else None,
            longitude=attempt.location.longitude if attempt.location else None,
            courier_name=attempt.courier_name,
        )
        for attempt in unreachable.attempts
    )
    return UnreachableLog(count=unreachable.count, attempts=attempts)


def _proof_images(
    courier: AssignmentEntry | None,
    intransit: AssignmentEntry | None,
    delivered: DeliveredPayload | None,
) -> tuple[str, ...]:
    images: list[str] = []
    if courier is not None:
        images.extend(image_urls(courier.delivery_proof_images))
    if intransit is not None:
        images.extend(image_urls(intransit.proof_images))
    if delivered is not None:
        images.extend(image_urls(delivered.delivery_proof_images))
    return tuple(images)
