from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

Position = Tuple[int, int]


class CascadePhase(Enum):
    IDLE = auto()
    AWAITING_SWAP_OUTCOME = auto()
    RESOLVING = auto()


@dataclass(slots=True)
class CascadeState:
    """Shared state of the swap-to-settle sequence.

    wait_remaining is the pacing delay left before the next step runs; the
    resolver only advances when it reaches zero (or an animation completes).
    """
    phase: CascadePhase = CascadePhase.IDLE
    depth: int = 0
    wait_remaining: float = 0.0
    swap_src: Optional[Position] = None
    swap_dst: Optional[Position] = None
    swap_accepted: bool = False
    last_removed: List[Position] = field(default_factory=list)
