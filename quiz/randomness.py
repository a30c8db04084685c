"""Random-source helpers shared by every quiz generator.

Generators never call the ``random`` module directly. They take a
``RandomSource`` (any zero-arg callable returning a float in [0, 1)) so tests
can replay a fixed sequence.
"""

from __future__ import annotations

import itertools
import random
from typing import Callable, Iterable, Sequence, TypeVar

T = TypeVar("T")

RandomSource = Callable[[], float]

default_source: RandomSource = random.random


def fixed_source(values: Iterable[float]) -> RandomSource:
    """Return a source that cycles through *values* forever."""
    pool = list(values)
    if not pool:
        raise ValueError("fixed_source needs at least one value")
    for v in pool:
        if not 0.0 <= v < 1.0:
            raise ValueError(f"Random values must be in [0, 1), got {v}")
    it = itertools.cycle(pool)
    return lambda: next(it)


def _index(rng: RandomSource, upper: int) -> int:
    # Guard against sources that return exactly 1.0
    return min(int(rng() * upper), upper - 1)


def shuffle(items: Iterable[T], rng: RandomSource = default_source) -> list[T]:
    """Fisher-Yates shuffle into a new list."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = _index(rng, i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def choice(items: Sequence[T], rng: RandomSource = default_source) -> T:
    """Pick one element. Raises IndexError on an empty sequence."""
    if not items:
        raise IndexError("Cannot choose from an empty sequence")
    return items[_index(rng, len(items))]


def sample(items: Iterable[T], k: int, rng: RandomSource = default_source) -> list[T]:
    """Pick up to *k* elements without replacement, in random order."""
    return shuffle(items, rng)[: max(k, 0)]
