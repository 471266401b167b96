"""Sequence-aware game calling (CGCIE).

Scores the arsenal against what has already been thrown in this at-bat:
repetition, velocity separation and tunneling off the last pitch, the
historical transition table, and the pitcher's habits in prior at-bats
against this batter.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from matchup_engines.config import DEFAULT_TARGET, TUNNEL_GROUPS, EngineConfig, is_fastball, zone_name
from matchup_engines.core.history import AtBatSequence, group_at_bats, pitches_at_number
from matchup_engines.core.models import ArsenalEntry, MatchupData, ZoneStat
from matchup_engines.core.output import JsonMixin, Recommendation, empty_recommendation
from matchup_engines.core.ranking import rank_candidates
from matchup_engines.core.rules import NO_EFFECT, Rule, RuleResult, base_score, effect, evaluate_rules
from matchup_engines.core.state import AtBatState
from matchup_engines.core.stats import fmt_fixed, fmt_number, round_half_up, safe_max
from matchup_engines.core.zones import mean_zone_score, score_zone
from matchup_engines.recommenders.insights import SequenceInsight, generate_sequence_insights, velo_map

logger = logging.getLogger(__name__)

PATTERN_MIN_AT_BATS = 3
PATTERN_SHARE = 0.6


@dataclass(frozen=True)
class GameCallContext:
    matchup: MatchupData
    state: AtBatState
    at_bats: Tuple[AtBatSequence, ...]
    velos: Dict[str, float]
    max_whiff: float


@dataclass(frozen=True)
class GameCallOutput(JsonMixin):
    recommended: Recommendation
    secondary: Recommendation
    all_pitches: Tuple[Recommendation, ...]
    insights: Tuple[SequenceInsight, ...]


def cold_target(zones: Sequence[ZoneStat]) -> str:
    if not zones:
        return DEFAULT_TARGET
    coldest = sorted(zones, key=score_zone)[0]
    return zone_name(coldest.zone)


# ── Rules ───────────────────────────────────────────────────────────────────

def _repetition(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    if ctx.state.last_pitch and p.pitch_name == ctx.state.last_pitch:
        return effect(-12, "Same pitch as last thrown — batter adjusts")
    return NO_EFFECT


def _double_repetition(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    last, prev = ctx.state.last_pitch, ctx.state.second_last_pitch
    if last and prev and p.pitch_name == last and p.pitch_name == prev:
        return effect(-25, "3rd consecutive — highly predictable")
    return NO_EFFECT


def _recency(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    n = ctx.state.occurrences(p.pitch_name)
    if n <= 0:
        return NO_EFFECT
    return effect(-5 * n, f"Thrown {n}x already this AB")


def speed_diff_delta(gap: float) -> int:
    if gap <= 8:
        return 0
    if gap > 12:
        return 15
    return round_half_up(8 + (gap - 8) * 1.75)


def _speed_diff(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    last = ctx.state.last_pitch
    if not last or last not in ctx.velos or p.pitch_name not in ctx.velos:
        return NO_EFFECT
    gap = abs(ctx.velos[last] - ctx.velos[p.pitch_name])
    delta = speed_diff_delta(gap)
    if not delta:
        return NO_EFFECT
    return effect(delta, f"{fmt_fixed(gap)} mph gap from {last}")


def _tunnel(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    last = ctx.state.last_pitch
    if not last:
        return NO_EFFECT
    last_group = TUNNEL_GROUPS.get(last)
    this_group = TUNNEL_GROUPS.get(p.pitch_name)
    if last_group and this_group and last_group != this_group:
        return effect(8, f"Different break trajectory from {last}")
    return NO_EFFECT


def transition_whiff_delta(whiff_pct: float) -> int:
    return min(12, round_half_up(5 + (whiff_pct - 25) * 0.35))


def _transition_whiff(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    last = ctx.state.last_pitch
    if not last:
        return NO_EFFECT
    t = ctx.matchup.transition(last, p.pitch_name)
    if t is None or t.whiff_pct is None or t.whiff_pct <= 25:
        return NO_EFFECT
    return effect(
        transition_whiff_delta(t.whiff_pct),
        f"{last} → {p.pitch_name} has {fmt_number(t.whiff_pct)}% whiff rate",
    )


def _transition_damage(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    last = ctx.state.last_pitch
    if not last:
        return NO_EFFECT
    t = ctx.matchup.transition(last, p.pitch_name)
    if t is None or t.xwoba is None or t.xwoba <= 0.380:
        return NO_EFFECT
    return effect(-10, f"{last} → {p.pitch_name} xwOBA {fmt_fixed(t.xwoba, 3)}")


def _pattern_break(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    seq_len = len(ctx.state.current_sequence)
    if len(ctx.at_bats) < PATTERN_MIN_AT_BATS or seq_len >= 3:
        return NO_EFFECT
    thrown = pitches_at_number(ctx.at_bats, seq_len + 1)
    if len(thrown) < PATTERN_MIN_AT_BATS:
        return NO_EFFECT
    for pitch_name, ct in Counter(thrown).items():
        if ct / len(thrown) >= PATTERN_SHARE and p.pitch_name != pitch_name:
            return effect(8, f"Breaks pattern — usually {pitch_name} here")
    return NO_EFFECT


def _first_pitch(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    usage = p.usage_pct or 0.0
    if ctx.state.current_sequence or usage <= 60:
        return NO_EFFECT
    return effect(-8, f"{fmt_fixed(usage)}% usage — too predictable as opener")


def _h2h_damage(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    rec = ctx.matchup.h2h_for(p.pitch_name)
    if rec is None or rec.xwoba is None or rec.xwoba <= 0.380:
        return NO_EFFECT
    return effect(-12, f"Batter xwOBA {fmt_fixed(rec.xwoba, 3)} vs {p.pitch_name}")


def _h2h_whiff(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    rec = ctx.matchup.h2h_for(p.pitch_name)
    if rec is None or rec.whiff_pct is None or rec.whiff_pct <= 30:
        return NO_EFFECT
    return effect(8, f"Batter whiffs {fmt_fixed(rec.whiff_pct)}% vs {p.pitch_name}")


def _putaway(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    if not ctx.state.count.is_putaway_count:
        return NO_EFFECT
    whiff = p.whiff_pct or 0.0
    if whiff == ctx.max_whiff and ctx.max_whiff > 0:
        return effect(10, f"Best whiff pitch at {fmt_fixed(whiff)}% — 2-strike count")
    return NO_EFFECT


def _hitter_count(ctx: GameCallContext, p: ArsenalEntry) -> RuleResult:
    if ctx.state.count.is_hitter_count and is_fastball(p.pitch_name):
        return effect(-8, "Hitter count — batter sitting fastball")
    return NO_EFFECT


GAME_CALL_RULES: Tuple[Rule, ...] = (
    Rule("Repetition", _repetition),
    Rule("Double repetition", _double_repetition),
    Rule("Recency", _recency),
    Rule("Speed diff", _speed_diff),
    Rule("Tunnel", _tunnel),
    Rule("Transition whiff", _transition_whiff),
    Rule("Transition damage", _transition_damage),
    Rule("Pattern break", _pattern_break),
    Rule("1st pitch predictable", _first_pitch),
    Rule("H2H damage", _h2h_damage),
    Rule("H2H whiff", _h2h_whiff),
    Rule("Put-away count", _putaway),
    Rule("Hitter count", _hitter_count),
)


# ── Main engine ─────────────────────────────────────────────────────────────

def recommend_game_call(
    matchup: MatchupData,
    state: AtBatState,
    cfg: Optional[EngineConfig] = None,
) -> GameCallOutput:
    """Recommend the next pitch of the at-bat given the sequence so far."""
    if not matchup.arsenal:
        empty = empty_recommendation()
        return GameCallOutput(recommended=empty, secondary=empty, all_pitches=(), insights=())

    at_bats = group_at_bats(matchup.recent_pitches)
    ctx = GameCallContext(
        matchup=matchup,
        state=state,
        at_bats=at_bats,
        velos=velo_map(matchup.arsenal),
        max_whiff=safe_max(a.whiff_pct or 0.0 for a in matchup.arsenal),
    )
    avg_damage = mean_zone_score(matchup.batter_zones)
    target = cold_target(matchup.batter_zones)

    recs = []
    for p in matchup.arsenal:
        card = evaluate_rules(GAME_CALL_RULES, ctx, p, base_score(p.whiff_pct, avg_damage, p.usage_pct))
        recs.append(Recommendation(
            pitch_name=p.pitch_name,
            confidence=card.confidence,
            target=target,
            rationale=card.rationale,
            adjustments=card.adjustments,
            base_score=card.base,
        ))

    insights = generate_sequence_insights(
        matchup.arsenal, state.current_sequence, matchup.transitions, at_bats,
    )
    ranked = rank_candidates(recs)
    logger.debug(
        "game call seq=%s count=%s: recommended=%s (%d), %d insights",
        list(state.current_sequence), state.count, ranked.primary.pitch_name,
        ranked.primary.confidence, len(insights),
    )
    return GameCallOutput(
        recommended=ranked.primary,
        secondary=ranked.secondary,
        all_pitches=ranked.candidates,
        insights=insights,
    )
