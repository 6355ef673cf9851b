"""
MiniSFC Range Decomposition
===========================
The result of decomposing a query region: half-open [start, end) index
intervals along the curve.

Invariants (enforced on construction):
  - Sorted ascending by start
  - Pairwise disjoint; touching or overlapping intervals are merged
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple

from sfc.errors import InvalidArgumentError


@dataclass(frozen=True, order=True)
class IndexRange:
    """Half-open interval of curve indexes."""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.start >= self.end:
            raise InvalidArgumentError(
                f"Invalid index range [{self.start}, {self.end})"
            )

    @property
    def cell_count(self) -> int:
        return self.end - self.start

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end

    def to_key_range(self, key_length: int) -> Tuple[bytes, bytes]:
        """
        Render as (first key, last key), both inclusive, big-endian.
        The exclusive end may need one bit more than the key holds,
        so the inclusive last index is used instead.
        """
        return (self.start.to_bytes(key_length, "big"),
                (self.end - 1).to_bytes(key_length, "big"))


def merge_ranges(ranges: Iterable[IndexRange]) -> List[IndexRange]:
    """Sort and coalesce overlapping or adjacent ranges."""
    merged: List[IndexRange] = []
    for r in sorted(ranges):
        if merged and r.start <= merged[-1].end:
            if r.end > merged[-1].end:
                merged[-1] = IndexRange(merged[-1].start, r.end)
        else:
            merged.append(r)
    return merged


def bridge_gaps(ranges: Sequence[IndexRange], max_ranges: int) -> List[IndexRange]:
    """
    Reduce a merged range list to at most max_ranges entries by
    absorbing the smallest gaps between consecutive ranges.
    Ties go to the gap earliest on the curve.
    """
    if max_ranges < 1:
        raise InvalidArgumentError(f"Cannot bridge down to {max_ranges} ranges")
    excess = len(ranges) - max_ranges
    if excess <= 0:
        return list(ranges)

    gap_order = sorted(
        range(len(ranges) - 1),
        key=lambda k: (ranges[k + 1].start - ranges[k].end, k),
    )
    bridged = set(gap_order[:excess])

    result: List[IndexRange] = []
    start = ranges[0].start
    for k in range(len(ranges) - 1):
        if k not in bridged:
            result.append(IndexRange(start, ranges[k].end))
            start = ranges[k + 1].start
    result.append(IndexRange(start, ranges[-1].end))
    return result


class RangeDecomposition:
    """Sorted, disjoint, merged sequence of IndexRange."""
    __slots__ = ("_ranges",)

    def __init__(self, ranges: Iterable[IndexRange] = ()):
        self._ranges: Tuple[IndexRange, ...] = tuple(merge_ranges(ranges))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, int]]) -> "RangeDecomposition":
        return cls(IndexRange(start, end) for start, end in pairs)

    @property
    def ranges(self) -> Tuple[IndexRange, ...]:
        return self._ranges

    @property
    def cell_count(self) -> int:
        """Total number of curve cells covered."""
        return sum(r.cell_count for r in self._ranges)

    def contains(self, index: int) -> bool:
        for r in self._ranges:
            if index < r.start:
                return False
            if index < r.end:
                return True
        return False

    def to_pairs(self) -> List[Tuple[int, int]]:
        return [(r.start, r.end) for r in self._ranges]

    def to_key_ranges(self, key_length: int) -> List[Tuple[bytes, bytes]]:
        """Scan bounds for a sorted key-value store, inclusive on both ends."""
        return [r.to_key_range(key_length) for r in self._ranges]

    def __len__(self) -> int:
        return len(self._ranges)

    def __iter__(self) -> Iterator[IndexRange]:
        return iter(self._ranges)

    def __getitem__(self, i: int) -> IndexRange:
        return self._ranges[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RangeDecomposition):
            return NotImplemented
        return self._ranges == other._ranges

    def __hash__(self) -> int:
        return hash(self._ranges)

    def __repr__(self) -> str:
        body = ", ".join(f"[{r.start}, {r.end})" for r in self._ranges)
        return f"RangeDecomposition({body})"
