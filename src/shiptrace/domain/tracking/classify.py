"""Status classification: raw, source-specific status tokens to canonical steps.

Every source kind spells the same lifecycle concept differently ("picked" vs
"pickup", "OFP" vs "out_for_delivery"), so each one owns a versioned alias
table. Classification is total: anything unrecognized maps to ``booked``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Protocol

from shiptrace.domain.model import CanonicalStep, SourceKind

log = logging.getLogger(__name__)

ALIAS_TABLE_VERSION: Final[int] = 1


@dataclass(frozen=True, slots=True)
class StatusAliasTable:
    """Alias table mapping normalized status tokens of one source kind to steps."""

    version: int
    source_kind: SourceKind
    aliases: Mapping[str, CanonicalStep]
    default: CanonicalStep = CanonicalStep.BOOKED

    def lookup(self, token: str) -> CanonicalStep | None:
        return self.aliases.get(token)


def _table(
    source_kind: SourceKind,
    groups: dict[CanonicalStep, tuple[str, ...]],
) -> StatusAliasTable:
    aliases: dict[str, CanonicalStep] = {}
    for step, tokens in groups.items():
        for token in tokens:
            aliases[token] = step
    return StatusAliasTable(
        version=ALIAS_TABLE_VERSION,
        source_kind=source_kind,
        aliases=MappingProxyType(aliases),
    )


TRACKING_ALIASES: Final[StatusAliasTable] = _table(
    SourceKind.TRACKING,
    {
        CanonicalStep.UNDELIVERED: ("undelivered",),
        CanonicalStep.DELIVERED: ("delivered",),
        CanonicalStep.OUT_FOR_DELIVERY: ("ofp", "out_for_delivery"),
        CanonicalStep.IN_TRANSIT: (
            "in_transit",
            "intransit",
            "reached-hub",
            "reachedhub",
        ),
        CanonicalStep.RECEIVED_AT_OCL: ("picked", "pickup", "picked_up", "received"),
        CanonicalStep.BOOKED: ("booked", "assigned", "courierboy", "assigned_completed"),
    },
)

MEDICINE_ALIASES: Final[StatusAliasTable] = _table(
    SourceKind.MEDICINE,
    {
        CanonicalStep.UNDELIVERED: ("undelivered",),
        CanonicalStep.DELIVERED: ("delivered",),
        CanonicalStep.OUT_FOR_DELIVERY: ("out_for_delivery", "ofp"),
        CanonicalStep.IN_TRANSIT: ("in_transit", "intransit", "arrived"),
        CanonicalStep.RECEIVED_AT_OCL: ("arrived at hub", "ready to dispatch"),
        CanonicalStep.BOOKED: ("booked",),
    },
)

CUSTOMER_ALIASES: Final[StatusAliasTable] = _table(
    SourceKind.CUSTOMER,
    {
        CanonicalStep.UNDELIVERED: ("undelivered",),
        CanonicalStep.DELIVERED: ("delivered",),
        CanonicalStep.OUT_FOR_DELIVERY: ("out_for_delivery", "ofp"),
        CanonicalStep.IN_TRANSIT: ("intransit", "in_transit", "reached-hub", "reachedhub"),
        CanonicalStep.RECEIVED_AT_OCL: ("received", "pickup", "picked"),
        CanonicalStep.BOOKED: ("booked", "courierboy", "assigned"),
    },
)

ALIAS_TABLES: Final[Mapping[SourceKind, StatusAliasTable]] = MappingProxyType(
    {
        SourceKind.TRACKING: TRACKING_ALIASES,
        SourceKind.MEDICINE: MEDICINE_ALIASES,
        SourceKind.CUSTOMER: CUSTOMER_ALIASES,
    }
)

# Folding used to compare movement events recorded under different spellings.
MOVEMENT_STATUS_ALIASES: Final[Mapping[str, str]] = MappingProxyType(
    {
        "picked": "pickup",
        "picked_up": "pickup",
        "intransit": "in_transit",
        "ofp": "out_for_delivery",
        "reachedhub": "reached-hub",
        "assigned_completed": "reached-hub",
    }
)


class ClassifyStatus(Protocol):
    """Map a raw status token of a source kind to a canonical step."""

    def __call__(self, raw_status: str | None, source_kind: SourceKind) -> CanonicalStep: ...


def normalize_status(raw_status: str | None) -> str:
    if raw_status is None:
        return ""
    return " ".join(str(raw_status).split()).lower()


def classify(raw_status: str | None, source_kind: SourceKind) -> CanonicalStep:
    """Return the canonical step for ``raw_status``; never raises."""

    table = ALIAS_TABLES[source_kind]
    token = normalize_status(raw_status)
    step = table.lookup(token)
    if step is None:
        if token:
            log.debug(
                "Unrecognized status %r for source=%s; defaulting to %s",
                raw_status,
                source_kind,
                table.default,
            )
        return table.default
    return step


def canonical_movement_status(status: str | None) -> str:
    token = normalize_status(status)
    return MOVEMENT_STATUS_ALIASES.get(token, token)
