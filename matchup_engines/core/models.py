"""Read-only input snapshots consumed by the engines.

Every record is a frozen dataclass; collections inside `MatchupData` are
tuples so a snapshot can be shared across concurrent engine calls.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple


@dataclass(frozen=True)
class ArsenalEntry:
    pitch_name: str
    usage_pct: float = 0.0
    avg_velo: Optional[float] = None
    whiff_pct: Optional[float] = None
    zone_pct: Optional[float] = None
    chase_pct: Optional[float] = None
    csw_pct: Optional[float] = None
    avg_xwoba: Optional[float] = None
    pitch_count: int = 0
    pitch_type: Optional[str] = None
    avg_spin: Optional[float] = None


@dataclass(frozen=True)
class ZoneStat:
    """Batter damage profile for one Statcast zone (1-9 grid, 11-14 outside)."""
    zone: int
    avg_ev: Optional[float] = None
    hard_hit_pct: Optional[float] = None
    barrel_pct: Optional[float] = None
    xwoba: Optional[float] = None
    pitch_count: int = 0


@dataclass(frozen=True)
class ChaseRegion:
    quadrant: str  # "up-left" | "up-right" | "down-left" | "down-right"
    swing_pct: Optional[float] = None
    whiff_pct: Optional[float] = None
    pitch_count: int = 0


@dataclass(frozen=True)
class CountProfile:
    balls: int
    strikes: int
    pitch_count: int = 0
    swing_pct: Optional[float] = None
    avg_ev: Optional[float] = None
    xwoba: Optional[float] = None


@dataclass(frozen=True)
class H2HRecord:
    """Batter vs. one pitch type from this pitcher."""
    pitch_name: str
    pitch_count: int = 0
    whiff_pct: Optional[float] = None
    xwoba: Optional[float] = None
    avg_ev: Optional[float] = None
    ba: Optional[float] = None


@dataclass(frozen=True)
class VeloTrendPoint:
    game_date: date
    avg_velo: Optional[float]
    pitch_count: int = 0


@dataclass(frozen=True)
class TransitionRow:
    from_pitch: str
    to_pitch: str
    freq: int = 0
    whiff_pct: Optional[float] = None
    xwoba: Optional[float] = None


@dataclass(frozen=True)
class RecentPitch:
    """One pitch from a prior at-bat between this pitcher and batter."""
    game_date: date
    game_pk: int
    at_bat_number: int
    pitch_number: int
    pitch_name: str
    description: str = ""
    balls: int = 0
    strikes: int = 0
    release_speed: Optional[float] = None


@dataclass(frozen=True)
class GameLogRow:
    game_date: date
    game_pk: int
    pitches: int
    avg_fb_velo: Optional[float] = None
    max_fb_velo: Optional[float] = None
    avg_spin: Optional[float] = None
    innings: int = 0
    batters_faced: int = 0
    csw: int = 0
    late_inning: bool = False
    had_runners: bool = False
    close_game: bool = False


@dataclass(frozen=True)
class InningVeloRow:
    game_date: date
    inning: int
    avg_velo: float
    pitches: int = 0


@dataclass(frozen=True)
class MatchupData:
    """Everything the data layer knows about one pitcher/batter pairing."""
    arsenal: Tuple[ArsenalEntry, ...] = ()
    velo_trend: Tuple[VeloTrendPoint, ...] = ()
    batter_zones: Tuple[ZoneStat, ...] = ()
    chase_profile: Tuple[ChaseRegion, ...] = ()
    count_profile: Tuple[CountProfile, ...] = ()
    h2h: Tuple[H2HRecord, ...] = ()
    transitions: Tuple[TransitionRow, ...] = ()
    recent_pitches: Tuple[RecentPitch, ...] = ()

    def h2h_for(self, pitch_name: str) -> Optional[H2HRecord]:
        for r in self.h2h:
            if r.pitch_name == pitch_name:
                return r
        return None

    def zone_stat(self, zone: int) -> Optional[ZoneStat]:
        for z in self.batter_zones:
            if z.zone == zone:
                return z
        return None

    def transition(self, from_pitch: str, to_pitch: str) -> Optional[TransitionRow]:
        for t in self.transitions:
            if t.from_pitch == from_pitch and t.to_pitch == to_pitch:
                return t
        return None
