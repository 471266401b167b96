"""Pitcher usage risk (PURI): additive injury-risk index over a game log.

Scores a pitcher's recent usage pattern rather than a pitch: acute:chronic
workload, fastball velocity trend, rest, leverage, within-game fade and the
size of the last outing each add to (or, for a healthy workload, subtract
from) a baseline of 20.  Every component that fires also emits an alert.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from matchup_engines.config import PITCH_THRESHOLD, STARTER_AVG_PITCHES
from matchup_engines.core.models import GameLogRow, InningVeloRow
from matchup_engines.core.output import Adjustment, JsonMixin
from matchup_engines.core.stats import clamp, fmt_fixed, round1, round_half_up, safe_mean

logger = logging.getLogger(__name__)

BASE_RISK = 20


@dataclass(frozen=True)
class RiskAlert(JsonMixin):
    level: str  # "info" | "warning" | "danger"
    title: str
    message: str


@dataclass(frozen=True)
class GameLogEntry(JsonMixin):
    game_date: date
    game_pk: int
    pitches: int
    avg_fb_velo: Optional[float]
    max_fb_velo: Optional[float]
    avg_spin: Optional[float]
    innings: int
    batters_faced: int
    rest_days: Optional[int]
    velo_fade: Optional[float]
    high_leverage: bool
    pitch_flag: bool


@dataclass(frozen=True)
class WorkloadMetrics(JsonMixin):
    acute_load: int = 0
    chronic_load: int = 0
    acwr: float = 0.0
    acwr_label: str = "sweet-spot"
    role: str = "starter"
    season_baseline_velo: Optional[float] = None
    recent_velo: Optional[float] = None
    velo_drop: Optional[float] = None
    avg_velo_fade: Optional[float] = None
    high_lev_count_7d: int = 0
    last_rest_days: Optional[int] = None


@dataclass(frozen=True)
class WorkloadRiskOutput(JsonMixin):
    risk_score: int
    risk_level: str
    alerts: Tuple[RiskAlert, ...]
    workload: WorkloadMetrics
    # Most recent appearance first.
    enriched_log: Tuple[GameLogEntry, ...]
    adjustments: Tuple[Adjustment, ...]


def as_date(v: Any) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return pd.Timestamp(v).date()


def days_between(a: date, b: date) -> int:
    return abs((as_date(b) - as_date(a)).days)


def velo_fade(game_date: date, inning_velo: Sequence[InningVeloRow]) -> Optional[float]:
    """First-inning minus last-inning fastball velo for one game."""
    rows = sorted((r for r in inning_velo if as_date(r.game_date) == game_date), key=lambda r: r.inning)
    if len(rows) < 2:
        return None
    return round1(rows[0].avg_velo - rows[-1].avg_velo)


def acwr_label(acwr: float) -> str:
    if acwr > 1.5:
        return "spike"
    if acwr > 1.3:
        return "caution"
    if acwr < 0.8:
        return "underwork"
    return "sweet-spot"


def risk_level(score: float) -> str:
    if score > 75:
        return "high"
    if score > 50:
        return "elevated"
    if score > 25:
        return "moderate"
    return "low"


def enrich_game_log(
    game_log: Iterable[GameLogRow],
    inning_velo: Sequence[InningVeloRow],
) -> Tuple[Tuple[GameLogEntry, ...], str, int]:
    """Chronological enriched log plus detected role and its pitch threshold."""
    ordered = sorted(game_log, key=lambda g: as_date(g.game_date))
    if not ordered:
        return (), "starter", PITCH_THRESHOLD["starter"]
    avg_pitches = sum(int(g.pitches) for g in ordered) / len(ordered)
    role = "starter" if avg_pitches > STARTER_AVG_PITCHES else "reliever"
    threshold = PITCH_THRESHOLD[role]

    out: List[GameLogEntry] = []
    prev: Optional[date] = None
    for g in ordered:
        gd = as_date(g.game_date)
        out.append(GameLogEntry(
            game_date=gd,
            game_pk=int(g.game_pk),
            pitches=int(g.pitches),
            avg_fb_velo=g.avg_fb_velo,
            max_fb_velo=g.max_fb_velo,
            avg_spin=g.avg_spin,
            innings=int(g.innings),
            batters_faced=int(g.batters_faced),
            rest_days=days_between(prev, gd) if prev is not None else None,
            velo_fade=velo_fade(gd, inning_velo),
            high_leverage=bool(g.late_inning and g.close_game and g.had_runners),
            pitch_flag=int(g.pitches) > threshold,
        ))
        prev = gd
    return tuple(out), role, threshold


def assess_workload_risk(
    game_log: Iterable[GameLogRow],
    inning_velo: Iterable[InningVeloRow] = (),
    current_date: Any = None,
) -> WorkloadRiskOutput:
    inning_velo = tuple(inning_velo)
    log, role, threshold = enrich_game_log(game_log, inning_velo)
    if not log:
        return WorkloadRiskOutput(
            risk_score=0, risk_level="low", alerts=(), workload=WorkloadMetrics(),
            enriched_log=(), adjustments=(),
        )
    today = as_date(current_date) if current_date is not None else date.today()

    # ── Acute:chronic workload ──────────────────────────────────────────────
    acute_games = [g for g in log if g.game_date >= today - timedelta(days=7)]
    chronic_games = [g for g in log if g.game_date >= today - timedelta(days=28)]
    acute = sum(g.pitches for g in acute_games)
    chronic = sum(g.pitches for g in chronic_games) / 4
    acwr = round_half_up(acute / chronic * 100) / 100 if chronic > 0 else 0.0
    label = acwr_label(acwr)

    # ── Velocity ────────────────────────────────────────────────────────────
    velos = [g.avg_fb_velo for g in log if g.avg_fb_velo is not None]
    baseline = round1(safe_mean(velos))
    recent = round1(safe_mean(velos[-3:]))
    drop = round1(baseline - recent) if baseline is not None and recent is not None else None
    fades = [g.velo_fade for g in log if g.velo_fade is not None][-5:]
    avg_fade = round1(safe_mean(fades))

    high_lev_7d = sum(1 for g in acute_games if g.high_leverage)
    last_rest = days_between(log[-1].game_date, today)
    latest = log[-1]

    score = BASE_RISK
    adjustments: List[Adjustment] = []
    alerts: List[RiskAlert] = []

    def add(rule: str, delta: int, alert: Optional[RiskAlert] = None) -> None:
        nonlocal score
        score += delta
        adjustments.append(Adjustment(rule=rule, delta=delta))
        if alert is not None:
            alerts.append(alert)

    if acwr > 1.5:
        add("Workload spike", 25, RiskAlert(
            "danger", "Workload Spike",
            f"ACWR of {fmt_fixed(acwr, 2)} indicates a significant workload spike. "
            f"Acute load ({acute} pitches/7d) far exceeds chronic rate.",
        ))
    elif acwr > 1.3:
        add("Workload caution", 12, RiskAlert(
            "warning", "Elevated Workload",
            f"ACWR of {fmt_fixed(acwr, 2)} is in the caution zone. Monitor closely for additional stress indicators.",
        ))
    elif acwr < 0.8 and chronic > 0:
        add("Workload underwork", 8, RiskAlert(
            "info", "Underwork / Detraining",
            f"ACWR of {fmt_fixed(acwr, 2)} suggests reduced activity. Sudden ramp-up from this state increases injury risk.",
        ))

    if drop is not None and drop > 1.5:
        add("Velo alarm", 20, RiskAlert(
            "danger", "Velocity Alarm",
            f"FB velocity dropped {fmt_fixed(drop, 1)} mph vs season average ({fmt_fixed(baseline, 1)} → {fmt_fixed(recent, 1)}).",
        ))
    elif drop is not None and drop > 1.0:
        add("Velo concern", 10, RiskAlert(
            "warning", "Velocity Decline",
            f"FB velocity down {fmt_fixed(drop, 1)} mph from season baseline. Worth monitoring for fatigue.",
        ))

    # Rest before the most recent appearance (None with a single game).
    rest = latest.rest_days
    if rest is not None and role == "starter" and rest < 3:
        add("Short rest", 15, RiskAlert(
            "warning", "Short Rest",
            f"Last appearance was on {rest} day(s) rest. Standard rest for starters is 4-5 days.",
        ))
    if rest == 0:
        add("Back-to-back", 10, RiskAlert(
            "danger", "Back-to-Back", "Pitched in consecutive games. Elevated soft tissue risk.",
        ))

    if high_lev_7d >= 3:
        add("High-leverage load", 10, RiskAlert(
            "warning", "High-Leverage Load",
            f"{high_lev_7d} high-leverage appearances in the last 7 days (late inning, close game, runners on).",
        ))

    if avg_fade is not None and avg_fade > 2.0:
        add("Avg velo fade", 10, RiskAlert(
            "warning", "In-Game Velocity Fade",
            f"Average within-game velo fade of {fmt_fixed(avg_fade, 1)} mph across recent starts.",
        ))

    if latest.pitch_flag:
        add("Heavy recent game", 8, RiskAlert(
            "info", "Heavy Workload",
            f"Most recent outing: {latest.pitches} pitches (above {threshold} threshold for {role}).",
        ))

    if label == "sweet-spot" and (drop is None or drop <= 0.5):
        add("Low workload (sweet spot)", -10)

    score = int(clamp(score, 0, 100))
    logger.debug("workload risk: score=%d acwr=%.2f role=%s alerts=%d", score, acwr, role, len(alerts))

    return WorkloadRiskOutput(
        risk_score=score,
        risk_level=risk_level(score),
        alerts=tuple(alerts),
        workload=WorkloadMetrics(
            acute_load=acute,
            chronic_load=round_half_up(chronic),
            acwr=acwr,
            acwr_label=label,
            role=role,
            season_baseline_velo=baseline,
            recent_velo=recent,
            velo_drop=drop,
            avg_velo_fade=avg_fade,
            high_lev_count_7d=high_lev_7d,
            last_rest_days=last_rest,
        ),
        enriched_log=tuple(reversed(log)),
        adjustments=tuple(adjustments),
    )
