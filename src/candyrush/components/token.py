from dataclasses import dataclass

@dataclass(slots=True)
class Token:
    """Color assignment for a token entity.

    Canonical RGB lookup lives on the singleton TokenColors component.
    """
    color: str
