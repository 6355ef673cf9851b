"""
MiniSFC Range Decomposition Tests
=================================
Coverage, exactness, ordering, range budgets, vacuum bridging and
over-inclusive edges. Small curves are checked cell by cell against a
brute-force enumeration of the query box.
"""

import itertools
import random

import pytest

from sfc.data import MultiDimensionalNumericData
from sfc.dimension import DimensionDefinition
from sfc.errors import InvalidArgumentError
from sfc.hilbert.compact_curve import CompactHilbertCurve
from sfc.hilbert.decomposer import Overlap, RangeDecomposer
from sfc.hilbert.sfc import HilbertSFC
from sfc.range_decomposition import IndexRange, RangeDecomposition, bridge_gaps, merge_ranges


# ═══════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════

def _box_cells(box):
    return set(itertools.product(*[range(lo, hi + 1) for lo, hi in box]))


def _covered_cells(curve, decomposition):
    cells = set()
    for r in decomposition:
        for h in range(r.start, r.end):
            cells.add(tuple(curve.point(h)))
    return cells


def _random_boxes(bits, count, seed):
    rng = random.Random(seed)
    for _ in range(count):
        box = []
        for b in bits:
            a, c = rng.randrange(1 << b), rng.randrange(1 << b)
            box.append((min(a, c), max(a, c)))
        yield box


def _assert_sorted_disjoint(decomposition):
    pairs = decomposition.to_pairs()
    for (s1, e1), (s2, e2) in zip(pairs, pairs[1:]):
        assert s1 < e1 < s2 < e2


@pytest.fixture
def sfc_2x3():
    """2 dimensions over [0, 1), 3 bits each: 64 cells."""
    return HilbertSFC([DimensionDefinition(0.0, 1.0, 3), DimensionDefinition(0.0, 1.0, 3)])


def _query(mins, maxes):
    return MultiDimensionalNumericData.from_bounds(mins, maxes)


# ═══════════════════════════════════════════════════════════════════
# Range Decomposition Container
# ═══════════════════════════════════════════════════════════════════

class TestRangeDecomposition:

    def test_merges_adjacent_and_overlapping(self):
        d = RangeDecomposition.from_pairs([(10, 12), (0, 4), (4, 6), (11, 15)])
        assert d.to_pairs() == [(0, 6), (10, 15)]
        assert d.cell_count == 11

    def test_contains(self):
        d = RangeDecomposition.from_pairs([(0, 4), (8, 9)])
        assert d.contains(0) and d.contains(3) and d.contains(8)
        assert not d.contains(4) and not d.contains(9)

    def test_empty_range_rejected(self):
        with pytest.raises(InvalidArgumentError):
            IndexRange(5, 5)

    def test_key_ranges_use_inclusive_last_key(self):
        d = RangeDecomposition.from_pairs([(0, 64)])
        assert d.to_key_ranges(1) == [(b"\x00", b"\x3f")]

    def test_bridge_smallest_gaps_first(self):
        ranges = merge_ranges([IndexRange(0, 1), IndexRange(3, 6), IndexRange(58, 59)])
        assert bridge_gaps(ranges, 2) == [IndexRange(0, 6), IndexRange(58, 59)]
        assert bridge_gaps(ranges, 1) == [IndexRange(0, 59)]
        assert bridge_gaps(ranges, 5) == ranges

    def test_equality_and_repr(self):
        a = RangeDecomposition.from_pairs([(0, 2), (2, 3)])
        assert a == RangeDecomposition.from_pairs([(0, 3)])
        assert repr(a) == "RangeDecomposition([0, 3))"


# ═══════════════════════════════════════════════════════════════════
# Scenarios
# ═══════════════════════════════════════════════════════════════════

class TestScenarios:

    def test_full_domain_is_one_range(self, sfc_2x3):
        d = sfc_2x3.decompose_range(_query([0.0, 0.0], [1.0, 1.0]))
        assert d.to_pairs() == [(0, 64)]

    def test_full_domain_with_budget_is_one_range(self, sfc_2x3):
        d = sfc_2x3.decompose_range(_query([-5.0, 0.0], [5.0, 1.0]), max_ranges=1)
        assert d.to_pairs() == [(0, 64)]

    def test_point_query_at_origin_is_one_cell(self, sfc_2x3):
        d = sfc_2x3.decompose_range(_query([0.0, 0.0], [0.0, 0.0]))
        assert d.to_pairs() == [(0, 1)]
        assert d.cell_count == 1

    def test_point_query_at_far_corner(self, sfc_2x3):
        d = sfc_2x3.decompose_range(_query([1.0, 0.0], [1.0, 0.0]))
        assert d.to_pairs() == [(63, 64)]

    def test_left_half_is_first_half_of_curve(self, sfc_2x3):
        d = sfc_2x3.decompose_range(_query([0.0, 0.0], [0.45, 1.0]))
        assert d.to_pairs() == [(0, 32)]

    def test_bottom_half_is_two_quadrants(self, sfc_2x3):
        d = sfc_2x3.decompose_range(_query([0.0, 0.0], [1.0, 0.45]))
        assert d.to_pairs() == [(0, 16), (48, 64)]

    def test_bottom_row(self, sfc_2x3):
        d = sfc_2x3.decompose_range(_query([0.0, 0.0], [0.5, 0.1]))
        assert d.to_pairs() == [(0, 1), (3, 6), (58, 59)]


# ═══════════════════════════════════════════════════════════════════
# Exact Coverage
# ═══════════════════════════════════════════════════════════════════

class TestExactCoverage:

    @pytest.mark.parametrize("bits", [(3, 3), (3, 1), (1, 3, 2), (2, 2, 2), (4, 2, 3)])
    def test_cells_equal_query_box(self, bits):
        curve = CompactHilbertCurve(bits)
        decomposer = RangeDecomposer(curve)
        for box in _random_boxes(bits, 60, seed=sum(bits)):
            d = decomposer.decompose(box)
            _assert_sorted_disjoint(d)
            assert _covered_cells(curve, d) == _box_cells(box)

    def test_classify(self):
        decomposer = RangeDecomposer(CompactHilbertCurve((3, 3)))
        root = decomposer.root()
        assert decomposer.classify(root, [(0, 7), (0, 7)]) is Overlap.CONTAINED
        assert decomposer.classify(root, [(1, 2), (0, 7)]) is Overlap.PARTIAL
        first = decomposer.children(root)[0]
        assert decomposer.classify(first, [(4, 7), (0, 7)]) is Overlap.DISJOINT

    def test_children_partition_parent_range(self):
        decomposer = RangeDecomposer(CompactHilbertCurve((3, 1, 2)))
        root = decomposer.root()
        children = decomposer.children(root)
        ranges = [decomposer.node_range(c) for c in children]
        assert ranges[0].start == 0
        for a, b in zip(ranges, ranges[1:]):
            assert a.end == b.start
        assert ranges[-1].end == 1 << 6

    def test_box_outside_curve_rejected(self):
        decomposer = RangeDecomposer(CompactHilbertCurve((3, 3)))
        with pytest.raises(InvalidArgumentError):
            decomposer.decompose([(0, 8), (0, 0)])
        with pytest.raises(InvalidArgumentError):
            decomposer.decompose([(3, 2), (0, 0)])
        with pytest.raises(InvalidArgumentError):
            decomposer.decompose([(0, 1)])


# ═══════════════════════════════════════════════════════════════════
# Range Budget
# ═══════════════════════════════════════════════════════════════════

class TestRangeBudget:

    def test_bridging_keeps_finest_ranges(self, sfc_2x3):
        q = _query([0.0, 0.0], [0.5, 0.1])
        d = sfc_2x3.decompose_range(q, max_ranges=2, remove_vacuum=True)
        assert d.to_pairs() == [(0, 6), (58, 59)]

    def test_keeping_vacuum_falls_back_to_coarser_level(self, sfc_2x3):
        q = _query([0.0, 0.0], [0.5, 0.1])
        d = sfc_2x3.decompose_range(q, max_ranges=2, remove_vacuum=False)
        assert d.to_pairs() == [(0, 8), (56, 60)]

    def test_budget_of_one(self, sfc_2x3):
        q = _query([0.13, 0.26], [0.7, 0.8])
        assert sfc_2x3.decompose_range(q, max_ranges=1).to_pairs() == [(8, 56)]
        assert sfc_2x3.decompose_range(q, max_ranges=1, remove_vacuum=False).to_pairs() == [(0, 64)]

    def test_budget_large_enough_is_exact(self, sfc_2x3):
        q = _query([0.0, 0.0], [0.5, 0.1])
        assert sfc_2x3.decompose_range(q, max_ranges=3).to_pairs() == [(0, 1), (3, 6), (58, 59)]

    def test_zero_budget_rejected(self, sfc_2x3):
        with pytest.raises(InvalidArgumentError):
            sfc_2x3.decompose_range(_query([0.0, 0.0], [0.5, 0.5]), max_ranges=0)

    @pytest.mark.parametrize("remove_vacuum", [True, False])
    @pytest.mark.parametrize("max_ranges", [1, 2, 3, 5, 8])
    def test_bounded_and_covering(self, max_ranges, remove_vacuum):
        bits = (4, 3)
        curve = CompactHilbertCurve(bits)
        decomposer = RangeDecomposer(curve)
        for box in _random_boxes(bits, 25, seed=max_ranges):
            d = decomposer.decompose(box, max_ranges=max_ranges, remove_vacuum=remove_vacuum)
            assert 1 <= len(d) <= max_ranges
            _assert_sorted_disjoint(d)
            assert _covered_cells(curve, d) >= _box_cells(box)


# ═══════════════════════════════════════════════════════════════════
# Over-Inclusive Edges
# ═══════════════════════════════════════════════════════════════════

class TestOverInclusiveOnEdge:

    def test_mostly_covered_quadrant_taken_whole(self, sfc_2x3):
        q = _query([0.0, 0.0], [0.3, 0.45])
        exact = sfc_2x3.decompose_range(q)
        wide = sfc_2x3.decompose_range(q, over_inclusive_on_edge=True)
        assert exact.to_pairs() == [(0, 5), (7, 9), (11, 16)]
        assert wide.to_pairs() == [(0, 16)]

    def test_fewer_ranges_on_box(self, sfc_2x3):
        q = _query([0.13, 0.26], [0.7, 0.8])
        exact = sfc_2x3.decompose_range(q)
        wide = sfc_2x3.decompose_range(q, over_inclusive_on_edge=True)
        assert len(exact) == 6
        assert wide.to_pairs() == [(8, 40), (52, 56)]

    @pytest.mark.parametrize("bits", [(3, 3), (2, 3, 2)])
    def test_always_superset(self, bits):
        curve = CompactHilbertCurve(bits)
        decomposer = RangeDecomposer(curve)
        for box in _random_boxes(bits, 40, seed=7):
            d = decomposer.decompose(box, over_inclusive_on_edge=True)
            _assert_sorted_disjoint(d)
            assert _covered_cells(curve, d) >= _box_cells(box)
