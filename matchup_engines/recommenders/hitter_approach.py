"""Hitter approach (HAIE): one plan per count, not a ranked pitch list.

The batter gets an approach mode from the count, the zones to hunt, the pitch
to sit on, a take rule, chase warnings, and a two-strike card.  Confidence
starts at 50 and moves through the same additive rule evaluator as the
pitch-side engines.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from matchup_engines.config import PITCH_CHASE_REACH, EngineConfig, is_fastball, zone_name
from matchup_engines.core.fatigue import FatigueReport, detect_fatigue
from matchup_engines.core.models import ArsenalEntry, ChaseRegion, MatchupData
from matchup_engines.core.output import Adjustment, JsonMixin
from matchup_engines.core.rules import NO_EFFECT, Rule, RuleResult, effect, evaluate_rules
from matchup_engines.core.stats import fmt_fixed
from matchup_engines.core.state import ApproachMode, AtBatState
from matchup_engines.core.zones import Perspective, ZoneClassification, ZoneTier, classify_zones

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 50.0
CHASE_SWING_MIN = 25.0
CHASE_WHIFF_MIN = 35.0
SEVERE_CHASE = 15.0


@dataclass(frozen=True)
class SitOnZone(JsonMixin):
    zone: int
    zone_name: str
    avg_ev: Optional[float]
    barrel_pct: Optional[float]
    xwoba: Optional[float]
    score: float


@dataclass(frozen=True)
class ChaseWarning(JsonMixin):
    quadrant: str
    swing_pct: float
    whiff_pct: float
    severity: float
    exploited_by: Tuple[str, ...]
    tip: str


@dataclass(frozen=True)
class TwoStrikeMode(JsonMixin):
    expect_pitch: str
    protect_against: str
    strategy: str


@dataclass(frozen=True)
class CountAdvantage(JsonMixin):
    count: str
    xwoba: Optional[float]
    label: str  # "hitter" | "pitcher" | "neutral"


@dataclass(frozen=True)
class HitterApproachOutput(JsonMixin):
    approach_mode: ApproachMode
    confidence: int
    sit_on_pitch: str
    sit_on_zones: Tuple[SitOnZone, ...]
    take_until_rule: str
    chase_warnings: Tuple[ChaseWarning, ...]
    two_strike_mode: Optional[TwoStrikeMode]
    hitter_zone_scores: Tuple[ZoneClassification, ...]
    rationale: Tuple[str, ...]
    fatigue_detected: bool
    fatigue_message: Optional[str]
    season_baseline_velo: Optional[float]
    recent_velo: Optional[float]
    count_advantage: CountAdvantage
    adjustments: Tuple[Adjustment, ...]


@dataclass(frozen=True)
class ApproachContext:
    matchup: MatchupData
    state: AtBatState
    mode: ApproachMode
    fatigue: FatigueReport
    sit_on_zones: Tuple[SitOnZone, ...]
    chase_warnings: Tuple[ChaseWarning, ...]
    count_xwoba: Optional[float]


# ── Approach pieces ─────────────────────────────────────────────────────────

def pitches_reaching(quadrant: str, arsenal: Sequence[ArsenalEntry]) -> Tuple[str, ...]:
    return tuple(p.pitch_name for p in arsenal if quadrant in PITCH_CHASE_REACH.get(p.pitch_name, ()))


def sit_on_zones(matchup: MatchupData, classified: Sequence[ZoneClassification]) -> Tuple[SitOnZone, ...]:
    attack = sorted((c for c in classified if c.tier == ZoneTier.HIGH), key=lambda c: c.score, reverse=True)[:3]
    out = []
    for c in attack:
        bz = matchup.zone_stat(c.zone)
        out.append(SitOnZone(
            zone=c.zone,
            zone_name=zone_name(c.zone),
            avg_ev=bz.avg_ev if bz else None,
            barrel_pct=bz.barrel_pct if bz else None,
            xwoba=bz.xwoba if bz else None,
            score=c.score,
        ))
    return tuple(out)


def sit_on_pitch(mode: ApproachMode, fatigue: FatigueReport, arsenal: Sequence[ArsenalEntry]) -> str:
    if fatigue.detected or mode == ApproachMode.AGGRESSIVE:
        return "Fastball"
    if mode == ApproachMode.PROTECTIVE:
        return "Any in zone"
    by_usage = sorted(arsenal, key=lambda a: a.usage_pct or 0.0, reverse=True)
    return by_usage[0].pitch_name if by_usage else "Fastball"


def take_until_rule(state: AtBatState, mode: ApproachMode, pitch: str, zones: Sequence[SitOnZone]) -> str:
    count = str(state.count)
    names = "/".join(z.zone_name for z in zones[:3])
    if count in ("3-0", "3-1"):
        return f"Green light — sit {pitch} in {names or 'damage zone'}, take everything else"
    if mode == ApproachMode.AGGRESSIVE:
        return f"Look for {pitch} in {names or 'damage zone'} — take if it's not there"
    if state.count.strikes == 2:
        return "Expand zone, protect the plate — fight off tough pitches"
    # Unreachable while 3-2 also counts as two strikes; kept in cascade order.
    if count == "3-2":
        return "Full count — shorten up, anything close put in play"
    if mode == ApproachMode.NEUTRAL:
        return f"Hunt {pitch} in {names or 'zones'} — take borderline pitches"
    return "Expand zone, protect the plate — fight off tough pitches"


def _chase_tip(quadrant: str, exploited_by: Sequence[str]) -> str:
    side = "away" if "right" in quadrant else "inside"
    if quadrant.startswith("down"):
        return f"Lay off pitches below the zone {side} — pitcher has {', '.join(exploited_by) or 'offspeed'} to exploit this"
    return f"Don't chase elevated pitches {side} — spit on {', '.join(exploited_by) or 'fastballs'} up there"


def chase_warnings(chase_profile: Sequence[ChaseRegion], arsenal: Sequence[ArsenalEntry]) -> Tuple[ChaseWarning, ...]:
    warnings = []
    for r in chase_profile:
        swing = r.swing_pct or 0.0
        whiff = r.whiff_pct or 0.0
        if not (swing > CHASE_SWING_MIN and whiff > CHASE_WHIFF_MIN):
            continue
        exploited = pitches_reaching(r.quadrant, arsenal)
        warnings.append(ChaseWarning(
            quadrant=r.quadrant,
            swing_pct=swing,
            whiff_pct=whiff,
            severity=swing * whiff / 100,
            exploited_by=exploited,
            tip=_chase_tip(r.quadrant, exploited),
        ))
    warnings.sort(key=lambda w: w.severity, reverse=True)
    return tuple(warnings[:3])


def two_strike_mode(state: AtBatState, arsenal: Sequence[ArsenalEntry]) -> Optional[TwoStrikeMode]:
    if state.count.strikes != 2:
        return None
    by_whiff = sorted(arsenal, key=lambda a: a.whiff_pct or 0.0, reverse=True)
    expect = by_whiff[0].pitch_name if by_whiff else "Breaking ball"
    offspeed = sorted(
        (a for a in arsenal if not is_fastball(a.pitch_name)),
        key=lambda a: a.usage_pct or 0.0, reverse=True,
    )
    protect = offspeed[0].pitch_name if offspeed else "Offspeed"
    return TwoStrikeMode(
        expect_pitch=expect,
        protect_against=protect,
        strategy=f"Expect {expect}, protect against {protect}, shorten swing, put ball in play",
    )


def count_advantage(matchup: MatchupData, state: AtBatState) -> CountAdvantage:
    b, s = state.count.as_tuple()
    row = next((c for c in matchup.count_profile if c.balls == b and c.strikes == s), None)
    xwoba = row.xwoba if row else None
    if xwoba is None:
        label = "neutral"
    elif xwoba > 0.340:
        label = "hitter"
    elif xwoba < 0.280:
        label = "pitcher"
    else:
        label = "neutral"
    return CountAdvantage(count=str(state.count), xwoba=xwoba, label=label)


def h2h_weighted_xwoba(matchup: MatchupData) -> Optional[float]:
    total = sum(r.pitch_count for r in matchup.h2h)
    if total <= 0:
        return None
    return sum((r.xwoba or 0.0) * r.pitch_count for r in matchup.h2h) / total


# ── Confidence rules ────────────────────────────────────────────────────────

def _zone_rules(zones: Sequence[SitOnZone]) -> List[Rule]:
    rules = []
    for z in zones:
        rules.append(Rule(f"Zone {z.zone} EV", lambda ctx, _, z=z: effect(5) if (z.avg_ev or 0) > 90 else NO_EFFECT))
        rules.append(Rule(f"Zone {z.zone} barrel", lambda ctx, _, z=z: effect(3) if (z.barrel_pct or 0) > 10 else NO_EFFECT))
        rules.append(Rule(f"Zone {z.zone} xwOBA", lambda ctx, _, z=z: effect(4) if (z.xwoba or 0) > 0.400 else NO_EFFECT))
    return rules


def _chase_rules(warnings: Sequence[ChaseWarning]) -> List[Rule]:
    return [
        Rule(f"Chase {w.quadrant}", lambda ctx, _, w=w: effect(-8 if w.severity > SEVERE_CHASE else -4))
        for w in warnings
    ]


def _count_mode(ctx: ApproachContext, _) -> RuleResult:
    count = str(ctx.state.count)
    if ctx.mode == ApproachMode.AGGRESSIVE:
        return effect(10, f"Hitter's count ({count}) — sit on pitch and drive it", label="Hitter count")
    if ctx.mode == ApproachMode.PROTECTIVE:
        return effect(-10, f"Pitcher's count ({count}) — protect the plate", label="Pitcher count")
    return effect(0, f"Neutral count ({count}) — hunt the right pitch")


def _fatigue(ctx: ApproachContext, _) -> RuleResult:
    if not ctx.fatigue.detected:
        return NO_EFFECT
    return effect(10, f"Pitcher velo down {fmt_fixed(ctx.fatigue.velo_drop, 1)} mph — sit fastball")


def _h2h(ctx: ApproachContext, _) -> RuleResult:
    x = h2h_weighted_xwoba(ctx.matchup)
    if x is None:
        return NO_EFFECT
    if x > 0.370:
        return effect(8, f"H2H xwOBA {fmt_fixed(x, 3)} — hitter owns this pitcher", label="H2H advantage")
    if x < 0.250:
        return effect(-8, f"H2H xwOBA {fmt_fixed(x, 3)} — pitcher dominates this matchup", label="H2H disadvantage")
    return NO_EFFECT


def _count_xwoba(ctx: ApproachContext, _) -> RuleResult:
    x = ctx.count_xwoba
    if x is None:
        return NO_EFFECT
    if x > 0.370:
        return effect(5)
    if x < 0.250:
        return effect(-5)
    return NO_EFFECT


def _summary(ctx: ApproachContext, _) -> RuleResult:
    reasons = []
    zones = ctx.sit_on_zones
    if zones:
        plural = "s" if len(zones) > 1 else ""
        reasons.append(f"{len(zones)} attack zone{plural}: {', '.join(z.zone_name for z in zones)}")
    if ctx.chase_warnings:
        plural = "es" if len(ctx.chase_warnings) > 1 else ""
        reasons.append(f"{len(ctx.chase_warnings)} chase weakness{plural} to avoid")
    return effect(0, *reasons)


def approach_rules(zones: Sequence[SitOnZone], warnings: Sequence[ChaseWarning]) -> List[Rule]:
    return [
        *_zone_rules(zones),
        *_chase_rules(warnings),
        Rule("Count mode", _count_mode),
        Rule("Fatigue exploit", _fatigue),
        Rule("H2H", _h2h),
        Rule("Count xwOBA", _count_xwoba),
        Rule("Summary", _summary),
    ]


# ── Main engine ─────────────────────────────────────────────────────────────

def recommend_hitter_approach(
    matchup: MatchupData,
    state: AtBatState,
    cfg: Optional[EngineConfig] = None,
) -> HitterApproachOutput:
    mode = state.count.approach_mode
    fatigue = detect_fatigue(matchup.velo_trend, cfg)
    classified = classify_zones(matchup.batter_zones, Perspective.HITTER, cfg)
    zones = sit_on_zones(matchup, classified)
    pitch = sit_on_pitch(mode, fatigue, matchup.arsenal)
    warnings = chase_warnings(matchup.chase_profile, matchup.arsenal)
    advantage = count_advantage(matchup, state)

    ctx = ApproachContext(
        matchup=matchup,
        state=state,
        mode=mode,
        fatigue=fatigue,
        sit_on_zones=zones,
        chase_warnings=warnings,
        count_xwoba=advantage.xwoba,
    )
    card = evaluate_rules(approach_rules(zones, warnings), ctx, None, BASE_CONFIDENCE)
    logger.debug("hitter approach %s: mode=%s confidence=%d", state.count, mode.value, card.confidence)

    return HitterApproachOutput(
        approach_mode=mode,
        confidence=card.confidence,
        sit_on_pitch=pitch,
        sit_on_zones=zones,
        take_until_rule=take_until_rule(state, mode, pitch, zones),
        chase_warnings=warnings,
        two_strike_mode=two_strike_mode(state, matchup.arsenal),
        hitter_zone_scores=classified,
        rationale=card.rationale,
        fatigue_detected=fatigue.detected,
        fatigue_message=fatigue.message,
        season_baseline_velo=fatigue.season_baseline,
        recent_velo=fatigue.recent_avg,
        count_advantage=advantage,
        adjustments=card.adjustments,
    )
