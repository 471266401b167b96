from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from matchup_engines.config import EngineConfig
from matchup_engines.core.models import VeloTrendPoint
from matchup_engines.core.stats import fmt_fixed, safe_float, safe_mean


@dataclass(frozen=True)
class FatigueReport:
    season_baseline: Optional[float] = None
    recent_avg: Optional[float] = None
    detected: bool = False
    velo_drop: float = 0.0

    @property
    def message(self) -> Optional[str]:
        if not self.detected:
            return None
        return f"Pitcher velo down {fmt_fixed(self.velo_drop, 1)} mph — sit fastball, expect location mistakes."


def detect_fatigue(velo_trend: Iterable[VeloTrendPoint], cfg: Optional[EngineConfig] = None) -> FatigueReport:
    """Compare the trailing per-game velo against the season baseline.

    `velo_trend` must be chronological.  Non-positive / missing velocities
    are ignored for both averages.
    """
    cfg = cfg or EngineConfig()
    valid = [v for v in (safe_float(p.avg_velo) for p in velo_trend) if v is not None and v > 0]
    baseline = safe_mean(valid)
    recent = safe_mean(valid[-cfg.fatigue_window:]) if cfg.fatigue_window > 0 else None
    if baseline is None or recent is None:
        return FatigueReport(season_baseline=baseline, recent_avg=recent)
    drop = baseline - recent
    detected = drop > cfg.fatigue_drop_mph
    return FatigueReport(
        season_baseline=baseline,
        recent_avg=recent,
        detected=detected,
        velo_drop=drop if detected else 0.0,
    )
