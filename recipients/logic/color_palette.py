"""Display colours that tell recipients apart in the editor."""
from __future__ import annotations

import random
from typing import Iterable, Optional

RECIPIENT_COLORS = (
    "#f97316",
    "#22c55e",
    "#06b6d4",
    "#8b5cf6",
    "#d946ef",
    "#f43f5e",
    "#eab308",
)


def next_color(used: Iterable[str], rng: Optional[random.Random] = None) -> str:
    """First palette colour not in *used*; a random palette colour once all are taken."""
    taken = {c.lower() for c in used}
    for color in RECIPIENT_COLORS:
        if color not in taken:
            return color
    return (rng or random).choice(RECIPIENT_COLORS)
