"""Random selection without replacement from a derived view."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

_default_rng = random.Random()


def clamp_count(requested_count: int, available: int) -> int:
    """Clamp a requested pick size to ``[1, available]`` (0 when empty)."""
    if available <= 0:
        return 0
    return min(max(requested_count, 1), available)


def sample(
    items: Sequence[T],
    requested_count: int,
    rng: random.Random | None = None,
) -> list[T]:
    """Return ``requested_count`` distinct items in uniformly random order.

    The count is clamped to the size of ``items``; an empty input gives an
    empty result.  Runs a partial Fisher-Yates shuffle over a copy, so every
    ordered subset of the chosen size is equally likely and ``items`` is
    left untouched.
    """
    rng = rng or _default_rng
    pool = list(items)
    count = clamp_count(requested_count, len(pool))

    for i in range(count):
        j = rng.randrange(i, len(pool))
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:count]
