"""SQLAlchemy adapter package for shiptrace."""

from __future__ import annotations

from .mappings import DOCUMENT_TABLES, metadata
from .repositories import (
    SqlAlchemyConsignmentSequenceRepository,
    SqlAlchemyShipmentSourceRepository,
)

__all__ = [
    "DOCUMENT_TABLES",
    "SqlAlchemyConsignmentSequenceRepository",
    "SqlAlchemyShipmentSourceRepository",
    "metadata",
]
