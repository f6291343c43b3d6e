from dataclasses import dataclass, field
from typing import Dict

@dataclass(slots=True)
class ScoreState:
    """Per-level scoring and goal progress.

    multiplier starts at 1 for every swap and grows once per cascade pass.
    time_left is counted down by GameFlowSystem; the engine only reads it to gate input.
    """
    score: int = 0
    multiplier: int = 1
    moves_left: int = 0
    time_left: float = 0.0
    match_counts: Dict[str, int] = field(default_factory=dict)
    goals: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for color in self.goals:
            self.match_counts.setdefault(color, 0)
