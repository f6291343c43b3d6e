import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]


@dataclass(slots=True)
class TokenColors:
    """Canonical token colors stored on a single entity.

    colors: mapping of color name -> RGB used by renderers.
    spawnable: ordered subset that refill policies and the board builder may create.
    default: spawnable fallback for unknown or out-of-level names from configuration or data files.
    """
    colors: Dict[str, RGB]
    spawnable: List[str] = field(default_factory=list)
    default: str = ""

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError("TokenColors requires at least one color")
        if self.spawnable:
            # Preserve order while filtering unknown names.
            seen: set[str] = set()
            filtered: List[str] = []
            for name in self.spawnable:
                if name in self.colors and name not in seen:
                    filtered.append(name)
                    seen.add(name)
                elif name not in self.colors:
                    logger.warning("Ignoring unknown spawnable color %r", name)
            self.spawnable = filtered or list(self.colors.keys())
        else:
            self.spawnable = list(self.colors.keys())
        if self.default not in self.spawnable:
            if self.default:
                logger.warning("Default color %r is not spawnable; using %r", self.default, self.spawnable[0])
            self.default = self.spawnable[0]

    def resolve(self, name: object) -> str:
        """Return ``name`` when it is spawnable in this palette, else the default (with a warning)."""
        if isinstance(name, str) and name in self.spawnable:
            return name
        if isinstance(name, str) and name in self.colors:
            logger.warning("Color %r is outside the spawnable set; falling back to %r", name, self.default)
        else:
            logger.warning("Unknown color %r; falling back to %r", name, self.default)
        return self.default

    def rgb_for(self, name: str) -> RGB:
        if name in self.colors:
            return self.colors[name]
        return self.colors[self.default]

    def spawnable_colors(self) -> List[str]:
        return list(self.spawnable)

    def others(self, name: str) -> List[str]:
        return [color for color in self.spawnable if color != name]
