"""Game state resource describing the current level attempt."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class GameMode(Enum):
    PLAYING = auto()
    PAUSED = auto()
    WON = auto()
    GAME_OVER = auto()


@dataclass
class GameState:
    """Singleton component storing the active mode and level."""
    mode: GameMode = GameMode.PLAYING
    level_id: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.mode in (GameMode.WON, GameMode.GAME_OVER)
