"""Matchup engines: deterministic, explainable in-game recommendations.

Four rule-based engines over a pitcher/batter snapshot:
  - PAIE  pitch selection for the pitcher
  - HAIE  approach plan for the hitter
  - CGCIE sequence-aware next-pitch call for the catcher
  - PURI  workload / injury-risk index from a game log

Every output is a frozen dataclass with `to_dict()` for JSON responses.
"""

from .config import EngineConfig, load_engine_config
from .core.fatigue import detect_fatigue
from .core.models import MatchupData
from .core.ranking import build_avoid_list, rank_candidates
from .core.rules import evaluate_rules
from .core.state import AtBatState, Count
from .core.stats import percentile
from .core.zones import Perspective, classify_zones
from .data.loaders import game_log_from_records, matchup_from_payload, state_from_payload
from .recommenders.game_call import recommend_game_call
from .recommenders.hitter_approach import recommend_hitter_approach
from .recommenders.insights import generate_sequence_insights
from .recommenders.pitch_call import recommend_pitch_call
from .recommenders.workload_risk import assess_workload_risk

compute_paie = recommend_pitch_call
compute_haie = recommend_hitter_approach
compute_cgcie = recommend_game_call
compute_puri = assess_workload_risk

__all__ = [
    "AtBatState",
    "Count",
    "EngineConfig",
    "MatchupData",
    "Perspective",
    "assess_workload_risk",
    "build_avoid_list",
    "classify_zones",
    "compute_cgcie",
    "compute_haie",
    "compute_paie",
    "compute_puri",
    "detect_fatigue",
    "evaluate_rules",
    "game_log_from_records",
    "generate_sequence_insights",
    "load_engine_config",
    "matchup_from_payload",
    "percentile",
    "rank_candidates",
    "recommend_game_call",
    "recommend_hitter_approach",
    "recommend_pitch_call",
    "state_from_payload",
]
