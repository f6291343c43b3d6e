from dataclasses import dataclass

@dataclass(slots=True)
class TargetPosition:
    """Where the presentation layer should move a token (board units, not pixels).

    Not authoritative for game logic; BoardPosition is.
    """
    x: float
    y: float
