"""Tracking core: consolidate raw status facts into a delivery timeline.

Layered flow:
1) classify the current raw status into a canonical step
2) resolve per-step timestamp evidence through fallback chains
3) compose and deduplicate the movement history
4) build the clamped step timeline and metadata
"""

from __future__ import annotations

from .classify import ALIAS_TABLES, StatusAliasTable, canonical_movement_status, classify
from .deduplicate import DEFAULT_DUPLICATE_WINDOW, dedupe, dedupe_exact
from .engine import LOOKUP_ORDER, TrackingEngine, locate_shipment
from .evidence import StepEvidence, resolve_evidence
from .movement import compose_movement_history
from .timeline import build_metadata, build_timeline, resolve_current_step

__all__ = [
    "ALIAS_TABLES",
    "DEFAULT_DUPLICATE_WINDOW",
    "LOOKUP_ORDER",
    "StatusAliasTable",
    "StepEvidence",
    "TrackingEngine",
    "build_metadata",
    "build_timeline",
    "canonical_movement_status",
    "classify",
    "compose_movement_history",
    "dedupe",
    "dedupe_exact",
    "locate_shipment",
    "resolve_current_step",
    "resolve_evidence",
]
