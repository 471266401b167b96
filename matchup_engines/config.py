"""
Matchup Engines — Configuration & Constants.

Zone geometry labels, pitch-class mappings, chase reach and tunnel groups,
plus the tunable thresholds shared by the scoring engines.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

# ── Zone geometry (Statcast zones 1-14) ─────────────────────────────────────
# Zones 1-9 = strike zone grid (3x3), 11-14 = outside corners / chase.
ZONE_LABELS: Mapping[int, str] = MappingProxyType({
    1: "Up-In", 2: "Up-Mid", 3: "Up-Away",
    4: "Mid-In", 5: "Middle", 6: "Mid-Away",
    7: "Low-In", 8: "Low-Mid", 9: "Low-Away",
    11: "High-In", 12: "High-Away", 13: "Low-In (chase)", 14: "Low-Away (chase)",
})

DEFAULT_TARGET = "Down and away"

CHASE_QUADRANTS: Tuple[str, ...] = ("up-left", "up-right", "down-left", "down-right")

# ── Pitch classes ───────────────────────────────────────────────────────────
FASTBALLS: FrozenSet[str] = frozenset({
    "4-Seam Fastball", "FF", "Sinker", "SI", "Fastball", "FA",
})

# Quadrants each pitch type typically finishes in when thrown out of the zone.
PITCH_CHASE_REACH: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "Slider": ("down-right", "down-left"),
    "SL": ("down-right", "down-left"),
    "Sweeper": ("down-right", "down-left"),
    "ST": ("down-right", "down-left"),
    "Curveball": ("down-left", "down-right"),
    "CU": ("down-left", "down-right"),
    "Changeup": ("down-left", "down-right"),
    "CH": ("down-left", "down-right"),
    "Splitter": ("down-left", "down-right"),
    "FS": ("down-left", "down-right"),
    "Cutter": ("down-right", "up-right"),
    "FC": ("down-right", "up-right"),
    "4-Seam Fastball": ("up-left", "up-right"),
    "FF": ("up-left", "up-right"),
    "Sinker": ("down-left", "down-right"),
    "SI": ("down-left", "down-right"),
})

# Break trajectory family per pitch; differing groups off a shared release
# are what sells a tunnel.
TUNNEL_GROUPS: Mapping[str, str] = MappingProxyType({
    "4-Seam Fastball": "high", "Sinker": "high",
    "Cutter": "high", "Slider": "low",
    "Sweeper": "low", "Curveball": "drop",
    "Knuckle Curve": "drop", "Changeup": "low",
    "Splitter": "low",
})

# ── Count tables ────────────────────────────────────────────────────────────
AGGRESSIVE_COUNTS: FrozenSet[str] = frozenset({"1-0", "2-0", "2-1", "3-0", "3-1"})
PROTECTIVE_COUNTS: FrozenSet[str] = frozenset({"0-1", "0-2", "1-2", "2-2", "3-2"})

# ── Workload thresholds ─────────────────────────────────────────────────────
STARTER_AVG_PITCHES = 60
PITCH_THRESHOLD = MappingProxyType({"starter": 100, "reliever": 35})


def zone_name(zone: int) -> str:
    return ZONE_LABELS.get(zone, f"Zone {zone}")


def is_fastball(pitch_name: str) -> bool:
    return pitch_name in FASTBALLS


@dataclass(frozen=True)
class EngineConfig:
    """Thresholds shared by the zone classifier and the fatigue detector."""

    danger_pctl: float = 70.0
    cold_pctl: float = 30.0
    # Percentile fallbacks when a matchup has no zone data at all.
    empty_high: float = 50.0
    empty_low: float = 30.0
    fatigue_window: int = 3
    fatigue_drop_mph: float = 1.0


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_engine_config() -> EngineConfig:
    """Build an EngineConfig, honoring environment overrides."""
    base = EngineConfig()
    return EngineConfig(
        danger_pctl=_env_float("MATCHUP_DANGER_PCTL", base.danger_pctl),
        cold_pctl=_env_float("MATCHUP_COLD_PCTL", base.cold_pctl),
        empty_high=base.empty_high,
        empty_low=base.empty_low,
        fatigue_window=int(_env_float("MATCHUP_FATIGUE_WINDOW", base.fatigue_window)),
        fatigue_drop_mph=_env_float("MATCHUP_FATIGUE_DROP_MPH", base.fatigue_drop_mph),
    )
