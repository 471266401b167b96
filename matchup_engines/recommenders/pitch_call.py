"""Pitch selection (PAIE): rank the pitcher's arsenal for the next pitch."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from matchup_engines.config import PITCH_CHASE_REACH, DEFAULT_TARGET, EngineConfig, is_fastball, zone_name
from matchup_engines.core.fatigue import FatigueReport, detect_fatigue
from matchup_engines.core.models import ArsenalEntry, ChaseRegion, MatchupData
from matchup_engines.core.output import JsonMixin, Recommendation, empty_recommendation
from matchup_engines.core.ranking import AvoidEntry, build_avoid_list, rank_candidates
from matchup_engines.core.rules import NO_EFFECT, Rule, RuleResult, base_score, effect, evaluate_rules, note
from matchup_engines.core.state import AtBatState
from matchup_engines.core.stats import fmt_fixed, round_half_up, safe_max
from matchup_engines.core.zones import (
    Perspective,
    ZoneClassification,
    ZoneTier,
    classify_zones,
    mean_zone_score,
    zones_with_tier,
)

logger = logging.getLogger(__name__)

CHASE_SWING_MIN = 30.0
CHASE_WHIFF_MIN = 35.0
CHASE_BOOST_CAP = 20
H2H_DAMAGE_XWOBA = 0.380


@dataclass(frozen=True)
class PitchCallContext:
    matchup: MatchupData
    state: AtBatState
    zones: Tuple[ZoneClassification, ...]
    fatigue: FatigueReport
    # Highest-usage pitch (first one on ties) and arsenal-wide best whiff%.
    primary_pitch: Optional[str]
    max_whiff: float


@dataclass(frozen=True)
class PitchCallOutput(JsonMixin):
    primary: Recommendation
    secondary: Recommendation
    avoid: Tuple[AvoidEntry, ...]
    zone_scores: Tuple[ZoneClassification, ...]
    all_pitches: Tuple[Recommendation, ...]
    fatigue_detected: bool
    season_baseline_velo: Optional[float]
    recent_velo: Optional[float]


# ── Helpers ─────────────────────────────────────────────────────────────────

def _chase_hits(pitch_name: str, chase_profile: Sequence[ChaseRegion]):
    reach = PITCH_CHASE_REACH.get(pitch_name, ())
    for region in chase_profile:
        if region.quadrant not in reach:
            continue
        swing = region.swing_pct or 0.0
        whiff = region.whiff_pct or 0.0
        if swing > CHASE_SWING_MIN and whiff > CHASE_WHIFF_MIN:
            yield region, swing, whiff


def chase_boost(pitch_name: str, chase_profile: Sequence[ChaseRegion]) -> int:
    """0-20 boost for chase quadrants this pitch can reach and the batter expands into."""
    boost = 0
    for _, swing, whiff in _chase_hits(pitch_name, chase_profile):
        excess = (swing - CHASE_SWING_MIN) * 0.5 + (whiff - CHASE_WHIFF_MIN) * 0.5
        boost += min(CHASE_BOOST_CAP, round_half_up(excess))
    return min(CHASE_BOOST_CAP, boost)


def target_label(zones: Sequence[ZoneClassification]) -> str:
    cold = sorted(zones_with_tier(zones, ZoneTier.LOW), key=lambda z: z.score)
    if not cold:
        return DEFAULT_TARGET
    return zone_name(cold[0].zone)


def primary_pitch_by_usage(arsenal: Sequence[ArsenalEntry]) -> Optional[str]:
    if not arsenal:
        return None
    return sorted(arsenal, key=lambda a: a.usage_pct or 0.0, reverse=True)[0].pitch_name


# ── Rules (evaluated in this order) ─────────────────────────────────────────

def _fatigue(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    if not ctx.fatigue.detected:
        return NO_EFFECT
    if is_fastball(p.pitch_name):
        return effect(-15, f"Velo down {fmt_fixed(ctx.fatigue.velo_drop, 1)} mph vs season avg")
    return effect(10, "Offspeed favored due to velo decline")


def _zone_notes(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    reasons = []
    cold = zones_with_tier(ctx.zones, ZoneTier.LOW)
    danger = zones_with_tier(ctx.zones, ZoneTier.HIGH)
    if cold:
        reasons.append(f"{len(cold)} cold zones available to target")
    if len(danger) > 3:
        reasons.append(f"{len(danger)} danger zones — locate carefully")
    return note(*reasons)


def _chase_zones(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    boost = chase_boost(p.pitch_name, ctx.matchup.chase_profile)
    if boost <= 0:
        return NO_EFFECT
    best = next(_chase_hits(p.pitch_name, ctx.matchup.chase_profile), None)
    if best is None:
        return effect(boost)
    region, swing, whiff = best
    return effect(boost, f"Chases {region.quadrant} at {fmt_fixed(swing)}% swing, {fmt_fixed(whiff)}% whiff")


def _exposure(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    if ctx.state.tto < 3:
        return NO_EFFECT
    if p.pitch_name == ctx.primary_pitch:
        return effect(-10, "Primary pitch penalized — 3rd time through")
    return effect(5)


def _h2h_damage(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    if ctx.state.tto < 3:
        return NO_EFFECT
    rec = ctx.matchup.h2h_for(p.pitch_name)
    if rec is None or rec.xwoba is None or rec.xwoba <= H2H_DAMAGE_XWOBA:
        return NO_EFFECT
    return effect(-15, f"H2H xwOBA {fmt_fixed(rec.xwoba, 3)} — batter owns this pitch")


def _hitter_count(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    if not ctx.state.count.is_hitter_count:
        return NO_EFFECT
    if is_fastball(p.pitch_name):
        return effect(-10, "Hitter count — batter sitting fastball")
    return effect(10, "Hitter count — offspeed has advantage")


def _pitcher_count(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    if not ctx.state.count.is_putaway_count:
        return NO_EFFECT
    whiff = p.whiff_pct or 0.0
    # Exact equality: every pitch tied for the top whiff% gets the boost.
    if whiff == ctx.max_whiff and ctx.max_whiff > 0:
        return effect(10, f"Best whiff pitch at {fmt_fixed(whiff)}% — put-away count")
    return NO_EFFECT


def _whiff_note(ctx: PitchCallContext, p: ArsenalEntry) -> RuleResult:
    whiff = p.whiff_pct or 0.0
    if whiff > 30:
        return note(f"{fmt_fixed(whiff)}% whiff rate")
    return NO_EFFECT


PITCH_CALL_RULES: Tuple[Rule, ...] = (
    Rule("Fatigue", _fatigue),
    Rule("Zone context", _zone_notes),
    Rule("Chase zones", _chase_zones),
    Rule("Exposure (3rd TTO)", _exposure),
    Rule("H2H damage", _h2h_damage),
    Rule("Hitter count", _hitter_count),
    Rule("Pitcher count", _pitcher_count),
    Rule("Whiff rate", _whiff_note),
)


# ── Main engine ─────────────────────────────────────────────────────────────

def recommend_pitch_call(
    matchup: MatchupData,
    state: AtBatState,
    cfg: Optional[EngineConfig] = None,
) -> PitchCallOutput:
    """Score every arsenal pitch for the current count / TTO and rank them."""
    if not matchup.arsenal:
        empty = empty_recommendation()
        return PitchCallOutput(
            primary=empty, secondary=empty, avoid=(), zone_scores=(), all_pitches=(),
            fatigue_detected=False, season_baseline_velo=None, recent_velo=None,
        )

    zones = classify_zones(matchup.batter_zones, Perspective.PITCHER, cfg)
    fatigue = detect_fatigue(matchup.velo_trend, cfg)
    ctx = PitchCallContext(
        matchup=matchup,
        state=state,
        zones=zones,
        fatigue=fatigue,
        primary_pitch=primary_pitch_by_usage(matchup.arsenal),
        max_whiff=safe_max(a.whiff_pct or 0.0 for a in matchup.arsenal),
    )
    avg_damage = mean_zone_score(matchup.batter_zones)
    target = target_label(zones)

    recs = []
    for p in matchup.arsenal:
        card = evaluate_rules(PITCH_CALL_RULES, ctx, p, base_score(p.whiff_pct, avg_damage, p.usage_pct))
        recs.append(Recommendation(
            pitch_name=p.pitch_name,
            confidence=card.confidence,
            target=target,
            rationale=card.rationale,
            adjustments=card.adjustments,
            base_score=card.base,
        ))

    ranked = rank_candidates(recs)
    logger.debug(
        "pitch call %s tto=%d: %d candidates, primary=%s (%d)",
        state.count, state.tto, len(recs), ranked.primary.pitch_name, ranked.primary.confidence,
    )
    return PitchCallOutput(
        primary=ranked.primary,
        secondary=ranked.secondary,
        avoid=build_avoid_list(matchup.arsenal, matchup.batter_zones, zones),
        zone_scores=zones,
        all_pitches=ranked.candidates,
        fatigue_detected=fatigue.detected,
        season_baseline_velo=fatigue.season_baseline,
        recent_velo=fatigue.recent_avg,
    )
