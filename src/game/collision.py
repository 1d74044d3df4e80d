# src/game/collision.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Bounds:
    """Float axis-aligned box, top-left origin."""
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def shrink(self, padding: float) -> "Bounds":
        """Same box with `padding` removed from every side."""
        return Bounds(self.x + padding, self.y + padding,
                      self.width - padding * 2, self.height - padding * 2)



def boxes_overlap(a: Bounds, b: Bounds) -> bool:
    """Separating-axis test. Touching edges count as a hit."""
    return not (a.right < b.left or a.left > b.right or
                a.bottom < b.top or a.top > b.bottom)


def check_collisions(character, obstacles: Iterable) -> bool:
    """True if the character's hitbox overlaps any obstacle hitbox (stops at the first)."""
    me = character.bounds()
    return any(boxes_overlap(me, ob.bounds()) for ob in obstacles)
