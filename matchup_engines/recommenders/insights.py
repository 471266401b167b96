"""Candidate-independent sequencing observations for the catcher."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from matchup_engines.config import TUNNEL_GROUPS
from matchup_engines.core.history import AtBatSequence, pitches_at_number
from matchup_engines.core.models import ArsenalEntry, TransitionRow
from matchup_engines.core.output import JsonMixin
from matchup_engines.core.stats import fmt_fixed, fmt_number

SPEED_GAP_MIN = 10.0
FIRST_PITCH_MIN_AT_BATS = 4
FIRST_PITCH_SHARE = 0.75
TRANSITION_WHIFF_MIN = 30.0


class InsightType(str, Enum):
    REPETITION = "repetition"
    TUNNEL = "tunnel"
    SPEED_DIFF = "speed-diff"
    PATTERN = "pattern"
    TRANSITION = "transition"


class InsightLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class SequenceInsight(JsonMixin):
    type: InsightType
    level: InsightLevel
    message: str


def velo_map(arsenal: Sequence[ArsenalEntry]) -> Dict[str, float]:
    return {p.pitch_name: p.avg_velo for p in arsenal if p.avg_velo}


def _repetition(seq: Sequence[str]) -> Optional[SequenceInsight]:
    if not seq:
        return None
    last = seq[-1]
    if len(seq) > 1 and seq[-2] == last:
        return SequenceInsight(
            InsightType.REPETITION, InsightLevel.WARNING,
            f"Repetition warning: 2 consecutive {last}s — batter timing likely adjusted",
        )
    n = sum(1 for s in seq if s == last)
    if n >= 2:
        return SequenceInsight(InsightType.REPETITION, InsightLevel.INFO, f"{last} thrown {n}x this AB")
    return None


def _tunnel(arsenal: Sequence[ArsenalEntry], last: str) -> Optional[SequenceInsight]:
    last_group = TUNNEL_GROUPS.get(last)
    if not last_group:
        return None
    options = [
        p for p in arsenal
        if TUNNEL_GROUPS.get(p.pitch_name) and TUNNEL_GROUPS[p.pitch_name] != last_group and p.pitch_name != last
    ]
    if not options:
        return None
    best = sorted(options, key=lambda p: p.whiff_pct or 0.0, reverse=True)[0]
    return SequenceInsight(
        InsightType.TUNNEL, InsightLevel.INFO,
        f"Tunnel opportunity: {best.pitch_name} after {last} exploits similar release trajectory",
    )


def _speed_diff(arsenal: Sequence[ArsenalEntry], last: str) -> Optional[SequenceInsight]:
    velos = velo_map(arsenal)
    if last not in velos:
        return None
    last_velo = velos[last]
    gaps = [
        (abs(velos[p.pitch_name] - last_velo), p.pitch_name)
        for p in arsenal
        if p.pitch_name in velos and abs(velos[p.pitch_name] - last_velo) > SPEED_GAP_MIN
    ]
    if not gaps:
        return None
    gap, name = sorted(gaps, key=lambda g: g[0], reverse=True)[0]
    return SequenceInsight(
        InsightType.SPEED_DIFF, InsightLevel.INFO,
        f"Speed differential: {fmt_fixed(gap)} mph gap from {last} ({fmt_fixed(last_velo)}) → {name} ({fmt_fixed(velos[name])})",
    )


def _first_pitch_pattern(at_bats: Sequence[AtBatSequence]) -> List[SequenceInsight]:
    if len(at_bats) < FIRST_PITCH_MIN_AT_BATS:
        return []
    firsts = pitches_at_number(at_bats, 1)
    out = []
    for name, ct in Counter(firsts).items():
        if ct / len(firsts) >= FIRST_PITCH_SHARE:
            out.append(SequenceInsight(
                InsightType.PATTERN, InsightLevel.WARNING,
                f"Pattern alert: First-pitch {name} in {ct} of last {len(firsts)} ABs vs this batter",
            ))
    return out


def _best_transition(transitions: Sequence[TransitionRow], last: str) -> Optional[SequenceInsight]:
    cands = [
        t for t in transitions
        if t.from_pitch == last and t.whiff_pct is not None and t.whiff_pct > TRANSITION_WHIFF_MIN
    ]
    if not cands:
        return None
    t = sorted(cands, key=lambda r: r.whiff_pct, reverse=True)[0]
    return SequenceInsight(
        InsightType.TRANSITION, InsightLevel.INFO,
        f"Strong transition: {t.from_pitch} → {t.to_pitch} generates {fmt_number(t.whiff_pct)}% whiff rate ({t.freq} occurrences)",
    )


def generate_sequence_insights(
    arsenal: Sequence[ArsenalEntry],
    current_sequence: Sequence[str],
    transitions: Sequence[TransitionRow],
    at_bats: Sequence[AtBatSequence],
) -> Tuple[SequenceInsight, ...]:
    insights: List[SequenceInsight] = []
    last = current_sequence[-1] if current_sequence else None

    rep = _repetition(current_sequence)
    if rep:
        insights.append(rep)
    if last:
        for found in (_tunnel(arsenal, last), _speed_diff(arsenal, last)):
            if found:
                insights.append(found)
    if not current_sequence:
        insights.extend(_first_pitch_pattern(at_bats))
    if last:
        trans = _best_transition(transitions, last)
        if trans:
            insights.append(trans)
    return tuple(insights)
