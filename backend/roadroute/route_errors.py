from __future__ import annotations

from dataclasses import dataclass
from typing import Any

FROZEN_REASON_CODES: frozenset[str] = frozenset(
    {
        "catalogue_unavailable",
        "catalogue_invalid",
        "invalid_request",
        "unknown_point",
        "hidden_point",
        "too_many_via_points",
        "no_roads",
        "disconnected_point",
        "no_route",
    }
)

# Reason codes that describe a bad request rather than a missing route.
REQUEST_REASON_CODES: frozenset[str] = frozenset(
    {"invalid_request", "unknown_point", "hidden_point", "too_many_via_points"}
)


@dataclass
class RoutePlanningError(ValueError):
    reason_code: str
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


def normalize_reason_code(reason_code: str, *, default: str = "invalid_request") -> str:
    code = str(reason_code or "").strip()
    if code in FROZEN_REASON_CODES:
        return code
    return default
