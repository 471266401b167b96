from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from matchup_engines.core.models import RecentPitch


@dataclass(frozen=True)
class AtBatSequence:
    game_date: date
    game_pk: int
    at_bat_number: int
    pitches: Tuple[RecentPitch, ...]

    def pitch_at(self, pitch_number: int) -> Optional[RecentPitch]:
        for p in self.pitches:
            if p.pitch_number == pitch_number:
                return p
        return None


def group_at_bats(rows: Iterable[RecentPitch]) -> Tuple[AtBatSequence, ...]:
    """Group pitch rows into at-bats, keeping first-seen at-bat order."""
    groups: Dict[Tuple[int, int], List[RecentPitch]] = {}
    for r in rows:
        groups.setdefault((r.game_pk, r.at_bat_number), []).append(r)
    out = []
    for pitches in groups.values():
        ordered = tuple(sorted(pitches, key=lambda p: p.pitch_number))
        first = ordered[0]
        out.append(AtBatSequence(
            game_date=first.game_date,
            game_pk=first.game_pk,
            at_bat_number=first.at_bat_number,
            pitches=ordered,
        ))
    return tuple(out)


def pitches_at_number(at_bats: Iterable[AtBatSequence], pitch_number: int) -> List[str]:
    """Pitch names thrown at `pitch_number` across at-bats that got that far."""
    names = []
    for ab in at_bats:
        p = ab.pitch_at(pitch_number)
        if p is not None:
            names.append(p.pitch_name)
    return names
