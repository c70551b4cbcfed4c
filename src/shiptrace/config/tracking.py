"""Tracking engine and consignment allocation settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from shiptrace.domain.allocation import BASE_CONSIGNMENT_NUMBER
from shiptrace.domain.model import TimelineFlow
from shiptrace.domain.tracking import DEFAULT_DUPLICATE_WINDOW

from .env import optional_int
from .errors import ConfigurationError

DEFAULT_SEQUENCE_KEY: Final[str] = "global"


@dataclass(frozen=True, slots=True)
class TrackingConfig:
    duplicate_window: timedelta = DEFAULT_DUPLICATE_WINDOW
    flow: TimelineFlow = TimelineFlow.STANDARD
    base_consignment_number: int = BASE_CONSIGNMENT_NUMBER
    sequence_key: str = DEFAULT_SEQUENCE_KEY


def get_tracking_config() -> TrackingConfig:
    window_seconds = optional_int(
        "SHIPTRACE_DUPLICATE_WINDOW_SECONDS",
        int(DEFAULT_DUPLICATE_WINDOW.total_seconds()),
    )
    if window_seconds < 0:
        raise ConfigurationError("SHIPTRACE_DUPLICATE_WINDOW_SECONDS must not be negative")

    flow_name = (os.getenv("SHIPTRACE_TIMELINE_FLOW") or TimelineFlow.STANDARD).strip().lower()
    try:
        flow = TimelineFlow(flow_name)
    except ValueError as exc:
        choices = ", ".join(member.value for member in TimelineFlow)
        raise ConfigurationError(
            f"SHIPTRACE_TIMELINE_FLOW must be one of {choices}, got {flow_name!r}"
        ) from exc

    base = optional_int("SHIPTRACE_BASE_CONSIGNMENT_NUMBER", BASE_CONSIGNMENT_NUMBER)
    if base < 0:
        raise ConfigurationError("SHIPTRACE_BASE_CONSIGNMENT_NUMBER must not be negative")

    return TrackingConfig(
        duplicate_window=timedelta(seconds=window_seconds),
        flow=flow,
        base_consignment_number=base,
    )
