"""
MiniSFC Compact Hilbert Curve
=============================
Bit-level Hilbert transform over dimensions with unequal precision.

A point is processed one bit plane ("level") at a time, from the most
significant plane down. At each level:
  - The orthant word holds bit `level` of every coordinate
    (dimension 0 in the least significant bit).
  - The word is transformed by the current orientation (entry corner e,
    direction d), gray-decoded into a child position w, and the child's
    orientation is derived from w.
  - Only dimensions that still have bits at this level ("active")
    contribute to the index. w is ranked over the active positions, so
    the index has exactly sum(bits) bits and no gaps.

Consecutive indices are neighbouring cells only when every dimension has
the same precision. With mixed precision the index is still a bijection
and sub-cube ranges stay contiguous, but a step can jump across the grid
where a dimension runs out of bits.

Reference: C. Hamilton, A. Rau-Chaplin, "Compact Hilbert Indices for
Multi-Dimensional Data" (2007).

All arithmetic uses Python ints; the width of the result is bounded by
the configured precision, not by the int type.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from sfc.errors import InvalidArgumentError


@dataclass(frozen=True)
class CurveState:
    """Orientation of the curve inside one sub-hypercube."""
    entry: int = 0       # entry corner, as an orthant word
    direction: int = 0   # axis the curve leaves along, minus one


ROOT_STATE = CurveState()


# ─── Bit helpers ────────────────────────────────────────────────────────────

def gray_code(i: int) -> int:
    return i ^ (i >> 1)


def gray_code_inverse(g: int) -> int:
    i = g
    shift = g >> 1
    while shift:
        i ^= shift
        shift >>= 1
    return i


def trailing_set_bits(i: int) -> int:
    count = 0
    while i & 1:
        count += 1
        i >>= 1
    return count


def rotate_right(x: int, r: int, n: int) -> int:
    """Rotate the low n bits of x right by r."""
    r %= n
    mask = (1 << n) - 1
    return ((x >> r) | (x << (n - r))) & mask


def rotate_left(x: int, r: int, n: int) -> int:
    """Rotate the low n bits of x left by r."""
    r %= n
    mask = (1 << n) - 1
    return ((x << r) | (x >> (n - r))) & mask


def entry_point(w: int) -> int:
    """Entry corner of the w-th child of a canonically oriented cube."""
    if w == 0:
        return 0
    return gray_code(2 * ((w - 1) // 2))


def intra_direction(w: int, n: int) -> int:
    """Direction of the w-th child of a canonically oriented cube."""
    if w == 0:
        return 0
    if w % 2 == 0:
        return trailing_set_bits(w - 1) % n
    return trailing_set_bits(w) % n


def gray_code_rank(mask: int, w: int, n: int) -> int:
    """Pack the bits of w selected by mask, most significant first."""
    r = 0
    for k in range(n - 1, -1, -1):
        if (mask >> k) & 1:
            r = (r << 1) | ((w >> k) & 1)
    return r


def gray_code_rank_inverse(mask: int, pattern: int, r: int,
                           n: int, free_bits: int) -> Tuple[int, int]:
    """
    Rebuild (w, gray_code(w)) from a rank.
    Bits of w under `mask` come from r; the remaining bits of the gray
    code are fixed by `pattern`.
    """
    w = 0
    g = 0
    j = free_bits - 1
    higher = 0
    for k in range(n - 1, -1, -1):
        if (mask >> k) & 1:
            wk = (r >> j) & 1
            j -= 1
            gk = wk ^ higher
        else:
            gk = (pattern >> k) & 1
            wk = gk ^ higher
        w |= wk << k
        g |= gk << k
        higher = wk
    return w, g


def popcount(x: int) -> int:
    return bin(x).count("1")


# ─── Curve ──────────────────────────────────────────────────────────────────

class CompactHilbertCurve:
    """
    Compact Hilbert curve for a fixed list of per-dimension precisions.
    Instances are immutable and safe to share across threads.
    """

    def __init__(self, bits_per_dimension: Sequence[int]):
        bits = tuple(bits_per_dimension)
        if not bits:
            raise InvalidArgumentError("A curve needs at least one dimension")
        for b in bits:
            if b <= 0:
                raise InvalidArgumentError(f"Bits of precision must be positive, got {b}")

        self.bits: Tuple[int, ...] = bits
        self.dimensions = len(bits)
        self.max_bits = max(bits)
        self.total_bits = sum(bits)

        # Unrotated mask of dimensions with a bit at each level
        self._active: List[int] = []
        for level in range(self.max_bits):
            m = 0
            for j, b in enumerate(bits):
                if b > level:
                    m |= 1 << j
            self._active.append(m)

        # _below[level]: index bits contributed by planes strictly below `level`
        self._below: List[int] = [
            sum(min(level, b) for b in bits) for level in range(self.max_bits + 1)
        ]

    # ─── Geometry of a level ────────────────────────────────────────────

    def bits_below(self, level: int) -> int:
        """Number of index bits produced by bit planes below `level`."""
        return self._below[level]

    def level_width(self, level: int) -> int:
        """Number of index bits produced by bit plane `level`."""
        return popcount(self._active[level])

    def cell_extent(self, dimension: int, level: int) -> int:
        """
        Side length, in cells, along `dimension` of a sub-cube whose
        planes at and above `level` are fixed.
        """
        return 1 << min(level, self.bits[dimension])

    def _mask(self, state: CurveState, level: int) -> int:
        return rotate_right(self._active[level], state.direction + 1, self.dimensions)

    def _descend(self, state: CurveState, w: int) -> CurveState:
        n = self.dimensions
        return CurveState(
            entry=state.entry ^ rotate_left(entry_point(w), state.direction + 1, n),
            direction=(state.direction + intra_direction(w, n) + 1) % n,
        )

    # ─── Orientation ────────────────────────────────────────────────────

    def orthant_to_child(self, state: CurveState, level: int,
                         orthant: int) -> Tuple[int, CurveState]:
        """
        Map a spatial orthant at `level` to (curve offset among the
        siblings, orientation of that child).
        """
        n = self.dimensions
        if orthant & ~self._active[level]:
            raise InvalidArgumentError(
                f"Orthant {orthant:#x} sets bits of dimensions exhausted at level {level}"
            )
        t = rotate_right(orthant ^ state.entry, state.direction + 1, n)
        w = gray_code_inverse(t)
        rank = gray_code_rank(self._mask(state, level), w, n)
        return rank, self._descend(state, w)

    def child_to_orthant(self, state: CurveState, level: int,
                         rank: int) -> Tuple[int, CurveState]:
        """Inverse of orthant_to_child."""
        n = self.dimensions
        mask = self._mask(state, level)
        free_bits = popcount(mask)
        if rank < 0 or rank >> free_bits:
            raise InvalidArgumentError(f"Rank {rank} out of range at level {level}")
        pattern = rotate_right(state.entry, state.direction + 1, n) & ~mask
        w, g = gray_code_rank_inverse(mask, pattern, rank, n, free_bits)
        orthant = rotate_left(g, state.direction + 1, n) ^ state.entry
        return orthant, self._descend(state, w)

    # ─── Point <-> index ────────────────────────────────────────────────

    def index(self, coords: Sequence[int]) -> int:
        """Hilbert index of an integer coordinate vector."""
        if len(coords) != self.dimensions:
            raise InvalidArgumentError(
                f"Expected {self.dimensions} coordinates, got {len(coords)}"
            )
        for j, (c, b) in enumerate(zip(coords, self.bits)):
            if c < 0 or c >> b:
                raise InvalidArgumentError(
                    f"Coordinate {c} of dimension {j} outside [0, {(1 << b) - 1}]"
                )

        h = 0
        state = ROOT_STATE
        for level in range(self.max_bits - 1, -1, -1):
            orthant = 0
            for j, c in enumerate(coords):
                orthant |= ((c >> level) & 1) << j
            rank, state = self.orthant_to_child(state, level, orthant)
            h = (h << self.level_width(level)) | rank
        return h

    def point(self, index: int) -> List[int]:
        """Integer coordinates of a Hilbert index."""
        if index < 0 or index >> self.total_bits:
            raise InvalidArgumentError(
                f"Index {index} outside a {self.total_bits}-bit curve"
            )

        coords = [0] * self.dimensions
        state = ROOT_STATE
        for level in range(self.max_bits - 1, -1, -1):
            width = self.level_width(level)
            rank = (index >> self._below[level]) & ((1 << width) - 1)
            orthant, state = self.child_to_orthant(state, level, rank)
            for j in range(self.dimensions):
                coords[j] |= ((orthant >> j) & 1) << level
        return coords
