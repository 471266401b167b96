from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional

import numpy as np


def _is_bad(x: Any) -> bool:
    return x is None or (isinstance(x, float) and np.isnan(x))


def safe_float(v: Any) -> Optional[float]:
    """Coerce to float, mapping None/NaN/garbage to None."""
    if _is_bad(v):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return None if np.isnan(f) else f


def _clean(values: Iterable[Any]) -> List[float]:
    out = []
    for v in values:
        f = safe_float(v)
        if f is not None:
            out.append(f)
    return out


def safe_mean(values: Iterable[Any]) -> Optional[float]:
    """Mean of the non-null values, or None when there are none."""
    clean = _clean(values)
    if not clean:
        return None
    return float(np.mean(clean))


def safe_max(values: Iterable[Any], default: float = 0.0) -> float:
    clean = _clean(values)
    if not clean:
        return default
    return float(np.max(clean))


def clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, float(x)))


def round_half_up(x: float) -> int:
    """Round .5 away from -inf (Math.round semantics), not to even."""
    return int(math.floor(float(x) + 0.5))


def fmt_fixed(x: float, digits: int = 0) -> str:
    """Fixed-point text with ties rounded away from zero (32.5 -> "33")."""
    x = float(x)
    scale = 10 ** digits
    scaled = round_half_up(abs(x) * scale)
    sign = "-" if x < 0 and scaled else ""
    return f"{sign}{scaled / scale:.{digits}f}"


def fmt_number(x: float) -> str:
    """Shortest text for a number; integral values drop the ".0"."""
    x = float(x)
    if x.is_integer():
        return str(int(x))
    return repr(x)


def round1(x: Optional[float]) -> Optional[float]:
    if x is None:
        return None
    return round_half_up(x * 10) / 10


def percentile(values: Iterable[float], p: float) -> float:
    """Linear-interpolated percentile between order statistics.

    idx = p/100 * (n-1); the result interpolates between sorted[floor(idx)]
    and sorted[ceil(idx)].  Raises ValueError on empty input; callers supply
    their own fallback.
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        raise ValueError("percentile of empty sequence")
    return float(np.percentile(arr, p, method="linear"))
