"""Public interface for the stored shipment document adapter."""

from __future__ import annotations

from .extract import (
    combined_log,
    extract_customer_events,
    extract_events,
    extract_medicine_events,
    extract_tracking_events,
    latest_entry,
    location_label,
    parse_source_document,
)
from .schema import (
    CustomerBookingDocument,
    MedicineBookingDocument,
    SourceDocumentInput,
    TrackingDocument,
    parse_timestamp,
)

__all__ = [
    "CustomerBookingDocument",
    "MedicineBookingDocument",
    "SourceDocumentInput",
    "TrackingDocument",
    "combined_log",
    "extract_customer_events",
    "extract_events",
    "extract_medicine_events",
    "extract_tracking_events",
    "latest_entry",
    "location_label",
    "parse_source_document",
    "parse_timestamp",
]
