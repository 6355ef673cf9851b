"""
MiniSFC Numeric Data
====================
Continuous per-dimension value ranges used for queries and decoded cells.

NumericRange is inclusive on min. Decoded cells are exclusive on max;
query regions are resolved to every cell they touch, so a zero-width
range still selects one cell.
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from sfc.errors import InvalidArgumentError


@dataclass(frozen=True)
class NumericRange:
    """A [min, max] interval over one dimension."""
    min: float
    max: float

    def __post_init__(self):
        if self.min > self.max:
            raise InvalidArgumentError(
                f"Range minimum {self.min} is greater than maximum {self.max}"
            )

    @property
    def width(self) -> float:
        return self.max - self.min

    @property
    def centroid(self) -> float:
        return (self.min + self.max) / 2.0

    def contains(self, other: "NumericRange") -> bool:
        return self.min <= other.min and other.max <= self.max

    def intersects(self, other: "NumericRange") -> bool:
        return self.min <= other.max and other.min <= self.max


@dataclass(frozen=True)
class MultiDimensionalNumericData:
    """
    One NumericRange per dimension, in the dimension order the curve
    was configured with.
    """
    ranges: Tuple[NumericRange, ...]

    def __post_init__(self):
        # Accept lists but store a tuple so instances stay hashable
        object.__setattr__(self, "ranges", tuple(self.ranges))

    @classmethod
    def from_bounds(cls, min_values: Sequence[float],
                    max_values: Sequence[float]) -> "MultiDimensionalNumericData":
        """Build from parallel per-dimension minimum and maximum values."""
        if len(min_values) != len(max_values):
            raise InvalidArgumentError(
                f"Got {len(min_values)} minimums but {len(max_values)} maximums"
            )
        return cls(tuple(NumericRange(lo, hi) for lo, hi in zip(min_values, max_values)))

    @property
    def dimension_count(self) -> int:
        return len(self.ranges)

    @property
    def min_values_per_dimension(self) -> List[float]:
        return [r.min for r in self.ranges]

    @property
    def max_values_per_dimension(self) -> List[float]:
        return [r.max for r in self.ranges]

    def contains(self, other: "MultiDimensionalNumericData") -> bool:
        """True if every range of `other` lies inside the matching range here."""
        if other.dimension_count != self.dimension_count:
            return False
        return all(mine.contains(theirs) for mine, theirs in zip(self.ranges, other.ranges))

    def __len__(self) -> int:
        return len(self.ranges)

    def __iter__(self) -> Iterator[NumericRange]:
        return iter(self.ranges)

    def __getitem__(self, dimension: int) -> NumericRange:
        return self.ranges[dimension]
