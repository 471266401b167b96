from .loaders import (
    game_log_from_records,
    inning_velo_from_records,
    matchup_from_payload,
    risk_inputs_from_payload,
    state_from_payload,
)

__all__ = [
    "game_log_from_records",
    "inning_velo_from_records",
    "matchup_from_payload",
    "risk_inputs_from_payload",
    "state_from_payload",
]
