"""Coerce upstream metric payloads to numbers.

The analytics API reports metrics as ``{"value": ...}`` objects and returns the
literal string ``"NA"`` for anything not yet computed. Everything that is not
a usable number becomes 0.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional


def to_float(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def to_int(raw: Any) -> int:
    return int(to_float(raw))


def metric_value(metrics: Optional[Mapping[str, Any]], name: str) -> float:
    """Read ``metrics[name]["value"]`` as a float, 0.0 when absent or unusable."""
    if not metrics:
        return 0.0
    metric = metrics.get(name)
    if not isinstance(metric, Mapping):
        return 0.0
    return to_float(metric.get("value"))
