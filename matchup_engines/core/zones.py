"""Percentile-based zone classification.

A zone's damage score is compared against the 70th/30th percentiles of all
zone scores in the same matchup.  The same statistical tier reads differently
depending on who is looking at it: a "danger" zone for the pitcher is an
"attack" zone for the hitter.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from matchup_engines.config import EngineConfig
from matchup_engines.core.models import ZoneStat
from matchup_engines.core.stats import percentile


class ZoneTier(str, Enum):
    HIGH = "high"
    NEUTRAL = "neutral"
    LOW = "low"


class Perspective(str, Enum):
    PITCHER = "pitcher"
    HITTER = "hitter"


_TIER_LABELS = {
    Perspective.PITCHER: {ZoneTier.HIGH: "danger", ZoneTier.NEUTRAL: "neutral", ZoneTier.LOW: "cold"},
    Perspective.HITTER: {ZoneTier.HIGH: "attack", ZoneTier.NEUTRAL: "neutral", ZoneTier.LOW: "avoid"},
}


def tier_label(tier: ZoneTier, perspective: Perspective) -> str:
    return _TIER_LABELS[perspective][tier]


@dataclass(frozen=True)
class ZoneClassification:
    zone: int
    score: float
    tier: ZoneTier
    label: str


def score_zone(z: ZoneStat) -> float:
    ev = z.avg_ev if z.avg_ev is not None else 80.0
    barrel = z.barrel_pct if z.barrel_pct is not None else 0.0
    xwoba = z.xwoba if z.xwoba is not None else 0.250
    return (ev * 0.3) + (barrel * 0.4) + (xwoba * 300 * 0.3)


def mean_zone_score(zones: Sequence[ZoneStat]) -> float:
    if not zones:
        return 50.0
    return sum(score_zone(z) for z in zones) / len(zones)


def zone_thresholds(scores: Sequence[float], cfg: Optional[EngineConfig] = None) -> Tuple[float, float]:
    """Return (high, low) cut points; fixed fallbacks when there are no scores."""
    cfg = cfg or EngineConfig()
    if not scores:
        return cfg.empty_high, cfg.empty_low
    return percentile(scores, cfg.danger_pctl), percentile(scores, cfg.cold_pctl)


def classify_score(score: float, high: float, low: float) -> ZoneTier:
    # High check first: a score sitting on both thresholds lands HIGH.
    if score >= high:
        return ZoneTier.HIGH
    if score <= low:
        return ZoneTier.LOW
    return ZoneTier.NEUTRAL


def classify_zones(
    zones: Iterable[ZoneStat],
    perspective: Perspective = Perspective.PITCHER,
    cfg: Optional[EngineConfig] = None,
) -> Tuple[ZoneClassification, ...]:
    zones = tuple(zones)
    scores = [score_zone(z) for z in zones]
    high, low = zone_thresholds(scores, cfg)
    out = []
    for z, s in zip(zones, scores):
        tier = classify_score(s, high, low)
        out.append(ZoneClassification(zone=z.zone, score=s, tier=tier, label=tier_label(tier, perspective)))
    return tuple(out)


def zones_with_tier(classified: Iterable[ZoneClassification], tier: ZoneTier) -> Tuple[ZoneClassification, ...]:
    return tuple(c for c in classified if c.tier == tier)
