"""Build engine snapshots from API payloads, record lists or DataFrames.

Rows arrive the way the stats API serves them: snake_case column names, rate
stats as floats or "42.8%" strings, nulls as None/NaN.  Payload sections may
use either the camelCase API key (``batterZones``) or its snake_case twin.
Rows missing their identifying key, or carrying an unknown chase quadrant,
are dropped with a warning; unparseable numbers become None.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, List, Mapping, Optional, Tuple, TypeVar

import pandas as pd

from matchup_engines.config import CHASE_QUADRANTS
from matchup_engines.core.models import (
    ArsenalEntry,
    ChaseRegion,
    CountProfile,
    GameLogRow,
    H2HRecord,
    InningVeloRow,
    MatchupData,
    RecentPitch,
    TransitionRow,
    VeloTrendPoint,
    ZoneStat,
)
from matchup_engines.core.state import AtBatState, Count
from matchup_engines.core.stats import safe_float

logger = logging.getLogger(__name__)

T = TypeVar("T")

Records = Any  # DataFrame | Iterable[Mapping] | None


# ──────────────────────────────────────────────
# Coercion helpers
# ──────────────────────────────────────────────

def _safe_float(v) -> Optional[float]:
    """'42.8%' -> 42.8; None/NaN/garbage -> None."""
    if isinstance(v, str):
        v = v.strip().rstrip("%")
    return safe_float(v)


def _opt_int(v) -> Optional[int]:
    f = _safe_float(v)
    if f is None or not math.isfinite(f):
        return None
    return int(f)


def _safe_int(v, default: int = 0) -> int:
    n = _opt_int(v)
    return default if n is None else n


def _safe_bool(v) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "t", "yes", "y")
    f = safe_float(v)
    return bool(f) if f is not None else False


def _safe_str(v) -> Optional[str]:
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return None
    s = str(v).strip()
    return s or None


def _date(v):
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return None
    try:
        ts = pd.Timestamp(v)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def _records(data: Records) -> List[Mapping[str, Any]]:
    if data is None:
        return []
    if isinstance(data, pd.DataFrame):
        return data.to_dict("records")
    return list(data)


def _build(kind: str, data: Records, row_fn: Callable[[Mapping[str, Any]], Optional[T]]) -> Tuple[T, ...]:
    out = []
    dropped = 0
    for row in _records(data):
        item = row_fn(row)
        if item is None:
            dropped += 1
        else:
            out.append(item)
    if dropped:
        logger.warning("dropped %d %s row(s) with missing or invalid identifying fields", dropped, kind)
    return tuple(out)


def _section(payload: Mapping[str, Any], *keys: str) -> Records:
    for k in keys:
        if k in payload and payload[k] is not None:
            return payload[k]
    return None


# ──────────────────────────────────────────────
# Row builders
# ──────────────────────────────────────────────

def _arsenal_row(r: Mapping[str, Any]) -> Optional[ArsenalEntry]:
    name = _safe_str(r.get("pitch_name"))
    if name is None:
        return None
    return ArsenalEntry(
        pitch_name=name,
        usage_pct=_safe_float(r.get("usage_pct")) or 0.0,
        avg_velo=_safe_float(r.get("avg_velo")),
        whiff_pct=_safe_float(r.get("whiff_pct")),
        zone_pct=_safe_float(r.get("zone_pct")),
        chase_pct=_safe_float(r.get("chase_pct")),
        csw_pct=_safe_float(r.get("csw_pct")),
        avg_xwoba=_safe_float(r.get("avg_xwoba")),
        pitch_count=_safe_int(r.get("pitches", r.get("pitch_count"))),
        pitch_type=_safe_str(r.get("pitch_type")),
        avg_spin=_safe_float(r.get("avg_spin")),
    )


def _velo_row(r: Mapping[str, Any]) -> Optional[VeloTrendPoint]:
    d = _date(r.get("game_date"))
    if d is None:
        return None
    return VeloTrendPoint(
        game_date=d,
        avg_velo=_safe_float(r.get("avg_velo")),
        pitch_count=_safe_int(r.get("pitches", r.get("pitch_count"))),
    )


def _zone_row(r: Mapping[str, Any]) -> Optional[ZoneStat]:
    zone = _opt_int(r.get("zone"))
    if zone is None:
        return None
    return ZoneStat(
        zone=zone,
        avg_ev=_safe_float(r.get("avg_ev")),
        hard_hit_pct=_safe_float(r.get("hard_hit_pct")),
        barrel_pct=_safe_float(r.get("barrel_pct")),
        xwoba=_safe_float(r.get("xwoba")),
        pitch_count=_safe_int(r.get("pitches", r.get("pitch_count"))),
    )


def _chase_row(r: Mapping[str, Any]) -> Optional[ChaseRegion]:
    quadrant = (_safe_str(r.get("quadrant")) or "").lower()
    if quadrant not in CHASE_QUADRANTS:
        return None
    return ChaseRegion(
        quadrant=quadrant,
        swing_pct=_safe_float(r.get("swing_pct")),
        whiff_pct=_safe_float(r.get("whiff_pct")),
        pitch_count=_safe_int(r.get("pitches", r.get("pitch_count"))),
    )


def _count_row(r: Mapping[str, Any]) -> Optional[CountProfile]:
    balls, strikes = _opt_int(r.get("balls")), _opt_int(r.get("strikes"))
    if balls is None or strikes is None:
        return None
    return CountProfile(
        balls=balls,
        strikes=strikes,
        pitch_count=_safe_int(r.get("pitches", r.get("pitch_count"))),
        swing_pct=_safe_float(r.get("swing_pct")),
        avg_ev=_safe_float(r.get("avg_ev")),
        xwoba=_safe_float(r.get("xwoba")),
    )


def _h2h_row(r: Mapping[str, Any]) -> Optional[H2HRecord]:
    name = _safe_str(r.get("pitch_name"))
    if name is None:
        return None
    return H2HRecord(
        pitch_name=name,
        pitch_count=_safe_int(r.get("pitches", r.get("pitch_count"))),
        whiff_pct=_safe_float(r.get("whiff_pct")),
        xwoba=_safe_float(r.get("xwoba")),
        avg_ev=_safe_float(r.get("avg_ev")),
        ba=_safe_float(r.get("ba")),
    )


def _transition_row(r: Mapping[str, Any]) -> Optional[TransitionRow]:
    src, dst = _safe_str(r.get("from_pitch")), _safe_str(r.get("to_pitch"))
    if src is None or dst is None:
        return None
    return TransitionRow(
        from_pitch=src,
        to_pitch=dst,
        freq=_safe_int(r.get("freq")),
        whiff_pct=_safe_float(r.get("whiff_pct")),
        xwoba=_safe_float(r.get("xwoba")),
    )


def _recent_row(r: Mapping[str, Any]) -> Optional[RecentPitch]:
    d = _date(r.get("game_date"))
    name = _safe_str(r.get("pitch_name"))
    game_pk, ab = _opt_int(r.get("game_pk")), _opt_int(r.get("at_bat_number"))
    if d is None or name is None or game_pk is None or ab is None:
        return None
    return RecentPitch(
        game_date=d,
        game_pk=game_pk,
        at_bat_number=ab,
        pitch_number=_safe_int(r.get("pitch_number")),
        pitch_name=name,
        description=_safe_str(r.get("description")) or "",
        balls=_safe_int(r.get("balls")),
        strikes=_safe_int(r.get("strikes")),
        release_speed=_safe_float(r.get("release_speed")),
    )


def _game_log_row(r: Mapping[str, Any]) -> Optional[GameLogRow]:
    d = _date(r.get("game_date"))
    if d is None:
        return None
    return GameLogRow(
        game_date=d,
        game_pk=_safe_int(r.get("game_pk")),
        pitches=_safe_int(r.get("pitches")),
        avg_fb_velo=_safe_float(r.get("avg_fb_velo")),
        max_fb_velo=_safe_float(r.get("max_fb_velo")),
        avg_spin=_safe_float(r.get("avg_spin")),
        innings=_safe_int(r.get("innings")),
        batters_faced=_safe_int(r.get("batters_faced")),
        csw=_safe_int(r.get("csw")),
        late_inning=_safe_bool(r.get("late_inning")),
        had_runners=_safe_bool(r.get("had_runners")),
        close_game=_safe_bool(r.get("close_game")),
    )


def _inning_velo_row(r: Mapping[str, Any]) -> Optional[InningVeloRow]:
    d = _date(r.get("game_date"))
    inning = _opt_int(r.get("inning"))
    velo = _safe_float(r.get("avg_velo"))
    if d is None or inning is None or velo is None:
        return None
    return InningVeloRow(game_date=d, inning=inning, avg_velo=velo, pitches=_safe_int(r.get("pitches")))


# ──────────────────────────────────────────────
# Public loaders
# ──────────────────────────────────────────────

def arsenal_from_records(data: Records) -> Tuple[ArsenalEntry, ...]:
    return _build("arsenal", data, _arsenal_row)


def velo_trend_from_records(data: Records) -> Tuple[VeloTrendPoint, ...]:
    """Per-game velocity, sorted chronologically."""
    rows = _build("velo trend", data, _velo_row)
    return tuple(sorted(rows, key=lambda p: p.game_date))


def zones_from_records(data: Records) -> Tuple[ZoneStat, ...]:
    return _build("batter zone", data, _zone_row)


def chase_profile_from_records(data: Records) -> Tuple[ChaseRegion, ...]:
    return _build("chase region", data, _chase_row)


def count_profile_from_records(data: Records) -> Tuple[CountProfile, ...]:
    return _build("count profile", data, _count_row)


def h2h_from_records(data: Records) -> Tuple[H2HRecord, ...]:
    return _build("h2h", data, _h2h_row)


def transitions_from_records(data: Records) -> Tuple[TransitionRow, ...]:
    return _build("transition", data, _transition_row)


def recent_pitches_from_records(data: Records) -> Tuple[RecentPitch, ...]:
    return _build("recent pitch", data, _recent_row)


def game_log_from_records(data: Records) -> Tuple[GameLogRow, ...]:
    return _build("game log", data, _game_log_row)


def inning_velo_from_records(data: Records) -> Tuple[InningVeloRow, ...]:
    return _build("inning velo", data, _inning_velo_row)


def matchup_from_payload(payload: Mapping[str, Any]) -> MatchupData:
    """Assemble a `MatchupData` from a matchup / game-call API response."""
    return MatchupData(
        arsenal=arsenal_from_records(_section(payload, "arsenal")),
        velo_trend=velo_trend_from_records(_section(payload, "veloTrend", "velo_trend")),
        batter_zones=zones_from_records(_section(payload, "batterZones", "batter_zones")),
        chase_profile=chase_profile_from_records(_section(payload, "chaseProfile", "chase_profile")),
        count_profile=count_profile_from_records(_section(payload, "countProfile", "count_profile")),
        h2h=h2h_from_records(_section(payload, "h2h")),
        transitions=transitions_from_records(_section(payload, "transitions")),
        recent_pitches=recent_pitches_from_records(_section(payload, "recentABs", "recent_abs", "recent_pitches")),
    )


def state_from_payload(payload: Mapping[str, Any]) -> AtBatState:
    """Count / TTO / current sequence from a request body.

    An out-of-range count raises ValueError from `Count`.
    """
    count = payload.get("count") or {}
    seq = _section(payload, "currentSequence", "current_sequence") or ()
    return AtBatState(
        count=Count(_safe_int(count.get("balls")), _safe_int(count.get("strikes"))),
        tto=_safe_int(payload.get("tto"), default=1),
        current_sequence=tuple(str(p) for p in seq if _safe_str(p)),
    )


def risk_inputs_from_payload(payload: Mapping[str, Any]) -> Tuple[Tuple[GameLogRow, ...], Tuple[InningVeloRow, ...]]:
    return (
        game_log_from_records(_section(payload, "gameLog", "game_log")),
        inning_velo_from_records(_section(payload, "inningVelo", "inning_velo")),
    )


__all__ = [
    "arsenal_from_records",
    "chase_profile_from_records",
    "count_profile_from_records",
    "game_log_from_records",
    "h2h_from_records",
    "inning_velo_from_records",
    "matchup_from_payload",
    "recent_pitches_from_records",
    "risk_inputs_from_payload",
    "state_from_payload",
    "transitions_from_records",
    "velo_trend_from_records",
    "zones_from_records",
]
