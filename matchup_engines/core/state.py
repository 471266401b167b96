from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from matchup_engines.config import AGGRESSIVE_COUNTS, PROTECTIVE_COUNTS


class ApproachMode(str, Enum):
    AGGRESSIVE = "aggressive"
    NEUTRAL = "neutral"
    PROTECTIVE = "protective"


@dataclass(frozen=True)
class Count:
    balls: int = 0
    strikes: int = 0

    def __post_init__(self) -> None:
        if not 0 <= int(self.balls) <= 3:
            raise ValueError(f"balls must be 0-3, got {self.balls}")
        if not 0 <= int(self.strikes) <= 2:
            raise ValueError(f"strikes must be 0-2, got {self.strikes}")

    def __str__(self) -> str:
        return f"{int(self.balls)}-{int(self.strikes)}"

    def as_tuple(self) -> Tuple[int, int]:
        return (int(self.balls), int(self.strikes))

    @property
    def is_hitter_count(self) -> bool:
        return (self.balls >= 2 and self.strikes <= 1) or self.balls == 3

    @property
    def is_putaway_count(self) -> bool:
        return self.strikes == 2 and self.balls <= 1

    @property
    def approach_mode(self) -> ApproachMode:
        key = str(self)
        if key in AGGRESSIVE_COUNTS:
            return ApproachMode.AGGRESSIVE
        if key in PROTECTIVE_COUNTS:
            return ApproachMode.PROTECTIVE
        return ApproachMode.NEUTRAL


@dataclass(frozen=True)
class AtBatState:
    count: Count = Count()
    tto: int = 1  # times through the order (1, 2, 3+)
    # Pitches already thrown this at-bat, most recent last.
    current_sequence: Tuple[str, ...] = ()

    @property
    def last_pitch(self) -> Optional[str]:
        return self.current_sequence[-1] if self.current_sequence else None

    @property
    def second_last_pitch(self) -> Optional[str]:
        return self.current_sequence[-2] if len(self.current_sequence) > 1 else None

    def occurrences(self, pitch_name: str) -> int:
        return sum(1 for p in self.current_sequence if p == pitch_name)
