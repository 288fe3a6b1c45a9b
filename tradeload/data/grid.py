"""
Value grids for order synthesis.

Grids are built with exact decimal arithmetic: every bound and step is
converted through its string form, so a grid stepping 0.1 holds 0.1, 0.2,
0.3 exactly instead of accumulating binary floating drift.
"""

import random
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from ..config.defaults import GridRange, RunParameters

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert a config number to Decimal without binary artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def build_grid(minimum: Number, maximum: Number, step: Number) -> tuple[Decimal, ...]:
    """
    Build the ordered grid min, min + step, ... up to and including max.

    The current value is appended before the bound is checked, so the grid
    always holds at least ``minimum``. Callers guarantee step > 0 and
    minimum <= maximum.

    Args:
        minimum: First grid value
        maximum: Inclusive upper bound
        step: Distance between consecutive values

    Returns:
        Immutable, non-decreasing tuple of Decimal values
    """
    current = to_decimal(minimum)
    upper = to_decimal(maximum)
    increment = to_decimal(step)

    values = []
    while True:
        values.append(current)
        current = current + increment
        if current > upper:
            break
    return tuple(values)


@dataclass(frozen=True)
class ParameterSpace:
    """Volume and price grids for a run, computed once and shared read-only."""
    volumes: tuple[Decimal, ...]
    prices: tuple[Decimal, ...]

    @classmethod
    def from_ranges(cls, volume: GridRange, price: GridRange) -> "ParameterSpace":
        return cls(
            volumes=build_grid(volume.min, volume.max, volume.step),
            prices=build_grid(price.min, price.max, price.step),
        )

    @classmethod
    def from_parameters(cls, params: RunParameters) -> "ParameterSpace":
        return cls.from_ranges(params.volume, params.price)

    def sample(self, rng: random.Random) -> tuple[Decimal, Decimal]:
        """Draw a (volume, price) pair uniformly."""
        return rng.choice(self.volumes), rng.choice(self.prices)
