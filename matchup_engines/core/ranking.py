from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from matchup_engines.config import zone_name
from matchup_engines.core.models import ArsenalEntry, ZoneStat
from matchup_engines.core.output import JsonMixin, Recommendation, empty_recommendation
from matchup_engines.core.stats import fmt_fixed
from matchup_engines.core.zones import ZoneClassification, ZoneTier

AVOID_EV_THRESHOLD = 90.0
MAX_AVOID = 4


@dataclass(frozen=True)
class RankedRecommendations:
    primary: Recommendation
    secondary: Recommendation
    candidates: Tuple[Recommendation, ...]

    @property
    def single_option(self) -> bool:
        return self.primary is self.secondary


@dataclass(frozen=True)
class AvoidEntry(JsonMixin):
    pitch_name: str
    zone: str
    reason: str


def rank_candidates(recs: Iterable[Recommendation]) -> RankedRecommendations:
    """Sort by confidence, high first; ties keep arsenal order."""
    ordered = tuple(sorted(recs, key=lambda r: r.confidence, reverse=True))
    if not ordered:
        empty = empty_recommendation()
        return RankedRecommendations(primary=empty, secondary=empty, candidates=())
    primary = ordered[0]
    secondary = ordered[1] if len(ordered) > 1 else primary
    return RankedRecommendations(primary=primary, secondary=secondary, candidates=ordered)


def _fmt(v, digits: int) -> str:
    return fmt_fixed(v, digits) if v is not None else "-"


def build_avoid_list(
    arsenal: Sequence[ArsenalEntry],
    zones: Sequence[ZoneStat],
    classified: Sequence[ZoneClassification],
) -> Tuple[AvoidEntry, ...]:
    """Pitch/zone pairs where the batter does loud damage (danger + EV > 90).

    One entry per zone (first pitch wins), at most four.
    """
    danger = [c for c in classified if c.tier == ZoneTier.HIGH]
    avoid: List[AvoidEntry] = []
    seen = set()
    for p in arsenal:
        for c in danger:
            bz = next((z for z in zones if z.zone == c.zone), None)
            if bz is None or (bz.avg_ev or 0.0) <= AVOID_EV_THRESHOLD:
                continue
            label = zone_name(c.zone)
            if label in seen:
                continue
            seen.add(label)
            avoid.append(AvoidEntry(
                pitch_name=p.pitch_name,
                zone=label,
                reason=f"EV: {_fmt(bz.avg_ev, 1)}, Barrel: {_fmt(bz.barrel_pct, 0)}%",
            ))
    return tuple(avoid[:MAX_AVOID])
