from .fatigue import FatigueReport, detect_fatigue
from .models import MatchupData
from .output import Adjustment, Recommendation
from .ranking import build_avoid_list, rank_candidates
from .rules import Rule, RuleResult, evaluate_rules
from .state import ApproachMode, AtBatState, Count
from .stats import percentile
from .zones import Perspective, ZoneTier, classify_zones

__all__ = [
    "Adjustment",
    "ApproachMode",
    "AtBatState",
    "Count",
    "FatigueReport",
    "MatchupData",
    "Perspective",
    "Recommendation",
    "Rule",
    "RuleResult",
    "ZoneTier",
    "build_avoid_list",
    "classify_zones",
    "detect_fatigue",
    "evaluate_rules",
    "percentile",
    "rank_candidates",
]
