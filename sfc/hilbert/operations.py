"""
MiniSFC Hilbert Operations
==========================
Normalization, encoding, decoding and estimation around the compact
Hilbert curve.

Two interchangeable variants share all logic and differ only in how an
index is packed into and out of its key:
  - PrimitiveHilbertOperations: total precision <= 62 bits, keys go
    through a fixed 64-bit word
  - UnboundedHilbertOperations: any precision, arbitrary-size ints

operations_for() picks the variant once, from the total precision.
For any curve both variants can serve, they produce identical keys.
"""

import math
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from sfc.data import MultiDimensionalNumericData, NumericRange
from sfc.dimension import DimensionDefinition
from sfc.errors import InvalidArgumentError
from sfc.hilbert.compact_curve import CompactHilbertCurve
from sfc.hilbert.decomposer import RangeDecomposer
from sfc.key_encoding import (
    FIXED_WIDTH_MAX_BITS,
    decode_index_fixed,
    decode_index_unbounded,
    encode_index_fixed,
    encode_index_unbounded,
    key_length,
)
from sfc.range_decomposition import RangeDecomposition


class HilbertOperations(ABC):
    """Curve operations bound to one immutable set of dimension definitions."""

    def __init__(self, dimension_definitions: Sequence[DimensionDefinition]):
        dims = tuple(dimension_definitions)
        if not dims:
            raise InvalidArgumentError("At least one dimension definition is required")
        for d in dims:
            if not isinstance(d, DimensionDefinition):
                raise InvalidArgumentError(f"Not a DimensionDefinition: {d!r}")

        self.dimension_definitions: Tuple[DimensionDefinition, ...] = dims
        self.curve = CompactHilbertCurve([d.bits_of_precision for d in dims])
        self.total_precision = self.curve.total_bits
        self.key_length = key_length(self.total_precision)
        self._decomposer = RangeDecomposer(self.curve)

    # ─── Key packing (variant specific) ─────────────────────────────────

    @abstractmethod
    def index_to_key(self, index: int) -> bytes:
        """Pack a curve index into a big-endian key."""

    @abstractmethod
    def key_to_index(self, key: bytes) -> int:
        """Unpack a key produced by index_to_key."""

    # ─── Normalizer ─────────────────────────────────────────────────────

    def _definition(self, dimension: int) -> DimensionDefinition:
        if dimension < 0 or dimension >= len(self.dimension_definitions):
            raise InvalidArgumentError(
                f"Dimension {dimension} out of range; curve has "
                f"{len(self.dimension_definitions)} dimensions"
            )
        return self.dimension_definitions[dimension]

    def normalize_range(self, min_value: float, max_value: float,
                        dimension: int) -> Tuple[int, int]:
        """
        Coordinates of the first and last cell that [min_value, max_value]
        touches along one dimension. Values past the domain are clipped.
        """
        definition = self._definition(dimension)
        if min_value > max_value:
            raise InvalidArgumentError(
                f"Minimum {min_value} is greater than maximum {max_value} "
                f"for dimension {dimension}"
            )
        return definition.normalize(min_value), definition.normalize(max_value)

    def get_insertion_id_range_per_dimension(self) -> List[float]:
        """Continuous width of one cell, per dimension."""
        return [d.cell_width for d in self.dimension_definitions]

    def _check_arity(self, count: int, what: str) -> None:
        if count != len(self.dimension_definitions):
            raise InvalidArgumentError(
                f"Expected {len(self.dimension_definitions)} {what}, got {count}"
            )

    # ─── Codec ──────────────────────────────────────────────────────────

    def convert_to_hilbert(self, values: Sequence[float]) -> bytes:
        """Normalize raw per-dimension values and encode them as a key."""
        self._check_arity(len(values), "values")
        coords = [d.normalize(v) for d, v in zip(self.dimension_definitions, values)]
        return self.coordinates_to_hilbert(coords)

    def coordinates_to_hilbert(self, coordinates: Sequence[int]) -> bytes:
        self._check_arity(len(coordinates), "coordinates")
        return self.index_to_key(self.curve.index(coordinates))

    def indices_from_hilbert(self, key: bytes) -> List[int]:
        """Integer coordinates encoded in a key."""
        return self.curve.point(self.key_to_index(key))

    def convert_from_hilbert(self, key: bytes) -> MultiDimensionalNumericData:
        """Continuous cell extent, per dimension, that a key represents."""
        coords = self.indices_from_hilbert(key)
        return MultiDimensionalNumericData(tuple(
            d.denormalize(c) for d, c in zip(self.dimension_definitions, coords)
        ))

    # ─── Range decomposition ────────────────────────────────────────────

    def decompose_range(self, query: MultiDimensionalNumericData,
                        max_ranges: int = -1,
                        remove_vacuum: bool = True,
                        over_inclusive_on_edge: bool = False) -> RangeDecomposition:
        """Cover a query region with contiguous index ranges."""
        self._check_arity(query.dimension_count, "query ranges")
        box = [
            self.normalize_range(r.min, r.max, dim)
            for dim, r in enumerate(query.ranges)
        ]
        return self._decomposer.decompose(
            box,
            max_ranges=max_ranges,
            remove_vacuum=remove_vacuum,
            over_inclusive_on_edge=over_inclusive_on_edge,
        )

    # ─── Estimator ──────────────────────────────────────────────────────

    def get_estimated_id_count(self, data: MultiDimensionalNumericData) -> int:
        """
        Estimate of the cells a region spans, computed from its geometry
        alone: the product of ceil(width / cell width) over dimensions.
        A zero-width range counts as one cell.

        The estimate ignores grid alignment. A box whose edges fall
        inside cells can touch one more cell per dimension than estimated,
        so decompose_range may cover more cells than this returns. It is
        monotone: a contained region never estimates higher.
        """
        self._check_arity(data.dimension_count, "ranges")
        estimate = 1
        for d, r in zip(self.dimension_definitions, data.ranges):
            clipped = NumericRange(d.clip(r.min), d.clip(r.max))
            cells = math.ceil(math.ldexp(clipped.width / d.span, d.bits_of_precision))
            estimate *= min(max(cells, 1), d.bins)
        return estimate


class PrimitiveHilbertOperations(HilbertOperations):
    """Keys packed through one unsigned 64-bit word."""

    def __init__(self, dimension_definitions: Sequence[DimensionDefinition]):
        super().__init__(dimension_definitions)
        if self.total_precision > FIXED_WIDTH_MAX_BITS:
            raise InvalidArgumentError(
                f"Total precision {self.total_precision} exceeds the "
                f"{FIXED_WIDTH_MAX_BITS}-bit fixed-width limit"
            )

    def index_to_key(self, index: int) -> bytes:
        return encode_index_fixed(index, self.total_precision)

    def key_to_index(self, key: bytes) -> int:
        return decode_index_fixed(key, self.total_precision)


class UnboundedHilbertOperations(HilbertOperations):
    """Keys of any length, packed from arbitrary-precision ints."""

    def index_to_key(self, index: int) -> bytes:
        return encode_index_unbounded(index, self.total_precision)

    def key_to_index(self, key: bytes) -> int:
        return decode_index_unbounded(key, self.total_precision)


def operations_for(dimension_definitions: Sequence[DimensionDefinition]) -> HilbertOperations:
    """Choose the fixed-width variant when the total precision allows it."""
    total = sum(d.bits_of_precision for d in dimension_definitions)
    if total <= FIXED_WIDTH_MAX_BITS:
        return PrimitiveHilbertOperations(dimension_definitions)
    return UnboundedHilbertOperations(dimension_definitions)
