"""Additive rule scoring shared by every engine.

A rule is a named function `(ctx, candidate) -> RuleResult`.  Engines hand an
ordered list of rules to `evaluate_rules`; each non-zero delta is recorded as
an `Adjustment` under the rule's name (or the label the rule returned), and
the rule's reasons are appended to the rationale in evaluation order.  Deltas
are summed, so order only changes how the rationale reads.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

from matchup_engines.core.output import Adjustment
from matchup_engines.core.stats import clamp, round_half_up

C = TypeVar("C")


@dataclass(frozen=True)
class RuleResult:
    delta: float = 0.0
    reasons: Tuple[str, ...] = ()
    # Overrides the rule name in the adjustment record (e.g. "H2H disadvantage").
    label: Optional[str] = None


NO_EFFECT = RuleResult()


def effect(delta: float, *reasons: str, label: Optional[str] = None) -> RuleResult:
    return RuleResult(delta=delta, reasons=tuple(r for r in reasons if r), label=label)


def note(*reasons: str) -> RuleResult:
    """Rationale-only result; never produces an adjustment."""
    return RuleResult(delta=0.0, reasons=tuple(r for r in reasons if r))


@dataclass(frozen=True)
class Rule(Generic[C]):
    name: str
    fn: Callable[[C, Any], RuleResult]

    def apply(self, ctx: C, candidate: Any) -> RuleResult:
        return self.fn(ctx, candidate)


@dataclass(frozen=True)
class ScoreCard:
    base: float
    adjustments: Tuple[Adjustment, ...] = ()
    rationale: Tuple[str, ...] = ()

    @property
    def total(self) -> float:
        """Pre-clamp score: base plus every recorded delta."""
        return self.base + sum(a.delta for a in self.adjustments)

    @property
    def confidence(self) -> int:
        return round_half_up(clamp(self.total, 0.0, 100.0))


def base_score(whiff_pct: Optional[float], avg_zone_score: float, usage_pct: Optional[float]) -> float:
    """PAIE/CGCIE starting confidence before any situational rule."""
    whiff = whiff_pct or 0.0
    usage = usage_pct or 0.0
    raw = (whiff * 0.4) + ((100 - avg_zone_score / 1.5) * 0.3) + (usage * 0.3)
    return clamp(raw, 0.0, 100.0)


def evaluate_rules(rules: Iterable[Rule[C]], ctx: C, candidate: Any, base: float) -> ScoreCard:
    adjustments: List[Adjustment] = []
    rationale: List[str] = []
    for rule in rules:
        res = rule.apply(ctx, candidate)
        if res.delta != 0:
            adjustments.append(Adjustment(rule=res.label or rule.name, delta=res.delta))
        rationale.extend(res.reasons)
    return ScoreCard(base=base, adjustments=tuple(adjustments), rationale=tuple(rationale))
