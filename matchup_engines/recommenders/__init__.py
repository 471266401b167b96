from .game_call import recommend_game_call
from .hitter_approach import recommend_hitter_approach
from .insights import generate_sequence_insights
from .pitch_call import recommend_pitch_call
from .workload_risk import assess_workload_risk

__all__ = [
    "assess_workload_risk",
    "generate_sequence_insights",
    "recommend_game_call",
    "recommend_hitter_approach",
    "recommend_pitch_call",
]
