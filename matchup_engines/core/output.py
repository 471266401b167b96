from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import math
from datetime import date
from enum import Enum
from typing import Any, Tuple

import numpy as np


def to_jsonable(obj: Any) -> Any:
    """Convert engine output into plain JSON-compatible values."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, float) and math.isnan(obj):
        return None
    return obj


class JsonMixin:
    def to_dict(self) -> dict:
        return to_jsonable(self)


@dataclass(frozen=True)
class Adjustment(JsonMixin):
    rule: str
    delta: float


@dataclass(frozen=True)
class Recommendation(JsonMixin):
    pitch_name: str
    confidence: int
    target: str
    rationale: Tuple[str, ...] = ()
    adjustments: Tuple[Adjustment, ...] = ()
    # Clamped base score before rule deltas.
    base_score: float = 0.0


def empty_recommendation() -> Recommendation:
    return Recommendation(
        pitch_name="N/A",
        confidence=0,
        target="N/A",
        rationale=("No arsenal data available",),
        adjustments=(),
    )
