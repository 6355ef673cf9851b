"""
MiniSFC Range Decomposer
========================
Covers an integer-coordinate query box with contiguous Hilbert index
ranges.

The curve's domain is subdivided level by level (breadth first). Every
node is a sub-cube whose upper bit planes are fixed; its cells form one
contiguous index range. Each child of a node is classified against the
query box:
  - CONTAINED: emitted as a single range
  - PARTIAL:   expanded at the next level
  - DISJOINT:  dropped
Single cells are never PARTIAL, so the loop ends after at most
max_bits levels.

Range budget (max_ranges >= 0):
  A level whose expansion would produce more than max_ranges merged
  ranges is not accepted as is. With remove_vacuum the expanded level is
  kept and the smallest gaps between its ranges are bridged until the
  count fits. Without it, the previous level's ranges are returned.
  Either way the result still covers the query; it just covers more.

over_inclusive_on_edge:
  A PARTIAL child that overlaps the query in at least half of its cells
  is emitted whole instead of being expanded.
"""

import logging
from enum import Enum
from typing import List, Sequence, Tuple

from sfc.errors import InvalidArgumentError
from sfc.hilbert.compact_curve import ROOT_STATE, CompactHilbertCurve, CurveState
from sfc.range_decomposition import (
    IndexRange,
    RangeDecomposition,
    bridge_gaps,
    merge_ranges,
)

logger = logging.getLogger(__name__)


class Overlap(Enum):
    DISJOINT = 0
    PARTIAL = 1
    CONTAINED = 2


class CurveNode:
    """A sub-cube of the curve: `level` low bit planes are still free."""
    __slots__ = ("level", "state", "prefix", "lows")

    def __init__(self, level: int, state: CurveState, prefix: int, lows: Tuple[int, ...]):
        self.level = level
        self.state = state
        self.prefix = prefix    # index bits fixed so far
        self.lows = lows        # lowest cell coordinate per dimension

    def __repr__(self) -> str:
        return f"CurveNode(level={self.level}, prefix={self.prefix}, lows={self.lows})"


class RangeDecomposer:
    """Breadth-first range decomposition over one CompactHilbertCurve."""

    def __init__(self, curve: CompactHilbertCurve):
        self.curve = curve

    # ─── Node geometry ──────────────────────────────────────────────────

    def root(self) -> CurveNode:
        return CurveNode(self.curve.max_bits, ROOT_STATE, 0, (0,) * self.curve.dimensions)

    def node_range(self, node: CurveNode) -> IndexRange:
        shift = self.curve.bits_below(node.level)
        return IndexRange(node.prefix << shift, (node.prefix + 1) << shift)

    def children(self, node: CurveNode) -> List[CurveNode]:
        """Children of a node, in curve order."""
        curve = self.curve
        split = node.level - 1
        width = curve.level_width(split)
        result = []
        for rank in range(1 << width):
            orthant, state = curve.child_to_orthant(node.state, split, rank)
            lows = tuple(
                low | (((orthant >> j) & 1) << split)
                for j, low in enumerate(node.lows)
            )
            result.append(CurveNode(split, state, (node.prefix << width) | rank, lows))
        return result

    def classify(self, node: CurveNode, box: Sequence[Tuple[int, int]]) -> Overlap:
        contained = True
        for j, (low, (qmin, qmax)) in enumerate(zip(node.lows, box)):
            high = low + self.curve.cell_extent(j, node.level) - 1
            if high < qmin or low > qmax:
                return Overlap.DISJOINT
            if low < qmin or high > qmax:
                contained = False
        return Overlap.CONTAINED if contained else Overlap.PARTIAL

    def _mostly_inside(self, node: CurveNode, box: Sequence[Tuple[int, int]]) -> bool:
        inside = 1
        volume = 1
        for j, (low, (qmin, qmax)) in enumerate(zip(node.lows, box)):
            extent = self.curve.cell_extent(j, node.level)
            high = low + extent - 1
            inside *= min(high, qmax) - max(low, qmin) + 1
            volume *= extent
        return 2 * inside >= volume

    # ─── Decomposition ──────────────────────────────────────────────────

    def _check_box(self, box: Sequence[Tuple[int, int]]) -> None:
        if len(box) != self.curve.dimensions:
            raise InvalidArgumentError(
                f"Expected {self.curve.dimensions} coordinate ranges, got {len(box)}"
            )
        for j, (qmin, qmax) in enumerate(box):
            top = (1 << self.curve.bits[j]) - 1
            if qmin > qmax or qmin < 0 or qmax > top:
                raise InvalidArgumentError(
                    f"Coordinate range [{qmin}, {qmax}] of dimension {j} "
                    f"is not inside [0, {top}]"
                )

    def decompose(self, box: Sequence[Tuple[int, int]],
                  max_ranges: int = -1,
                  remove_vacuum: bool = True,
                  over_inclusive_on_edge: bool = False) -> RangeDecomposition:
        """
        Cover an inclusive per-dimension coordinate box.

        Args:
            box: (min_coord, max_coord) per dimension, both inclusive
            max_ranges: upper bound on the number of ranges; negative
                means unbounded. Zero is rejected.
            remove_vacuum: when over budget, bridge the smallest gaps of
                the finer level instead of falling back to the coarser one
            over_inclusive_on_edge: accept mostly-covered edge sub-cubes whole
        """
        self._check_box(box)
        if max_ranges == 0:
            raise InvalidArgumentError("max_ranges must be negative (unbounded) or at least 1")

        root = self.root()
        if self.classify(root, box) is Overlap.CONTAINED:
            return RangeDecomposition([self.node_range(root)])

        covered: List[IndexRange] = []
        pending: List[CurveNode] = [root]
        accepted = [self.node_range(root)]

        # Every level fixes at least one more bit, so this bound is never hit
        # before the pending set drains.
        max_depth = self.curve.total_bits
        for depth in range(max_depth):
            if not pending:
                break

            next_covered = list(covered)
            next_pending: List[CurveNode] = []
            for node in pending:
                for child in self.children(node):
                    overlap = self.classify(child, box)
                    if overlap is Overlap.DISJOINT:
                        continue
                    if overlap is Overlap.CONTAINED or (
                            over_inclusive_on_edge and self._mostly_inside(child, box)):
                        next_covered.append(self.node_range(child))
                    else:
                        next_pending.append(child)

            candidate = merge_ranges(
                next_covered + [self.node_range(n) for n in next_pending]
            )
            logger.debug("Level %d: %d ranges, %d partial sub-cubes",
                         depth + 1, len(candidate), len(next_pending))

            if 0 <= max_ranges < len(candidate):
                if remove_vacuum:
                    logger.info("Range budget %d reached at level %d; bridging %d gaps",
                                max_ranges, depth + 1, len(candidate) - max_ranges)
                    return RangeDecomposition(bridge_gaps(candidate, max_ranges))
                logger.info("Range budget %d reached at level %d; keeping level %d ranges",
                            max_ranges, depth + 1, depth)
                return RangeDecomposition(accepted)

            covered, pending, accepted = next_covered, next_pending, candidate

        return RangeDecomposition(accepted)
