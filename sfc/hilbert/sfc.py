"""
MiniSFC Hilbert SFC
===================
The configured, immutable entry point to the Hilbert curve.

Construction is configuration: the ordered dimension definitions are
validated once, the operations variant (fixed-width or unbounded) is
chosen from the total precision, and the instance is frozen. Any later
attribute assignment raises ConfigurationError. To change precision,
call reconfigure(), which returns a new instance and refuses to change
the number of dimensions.

Concurrency: instances hold no mutable state; every method is safe to
call from any number of threads.
"""

import logging
from typing import List, Sequence, Tuple

from sfc.data import MultiDimensionalNumericData
from sfc.dimension import DimensionDefinition
from sfc.errors import ConfigurationError, InvalidArgumentError
from sfc.hilbert.operations import HilbertOperations, PrimitiveHilbertOperations, operations_for
from sfc.range_decomposition import RangeDecomposition

logger = logging.getLogger(__name__)


class HilbertSFC:
    """Hilbert space filling curve over a fixed, ordered set of dimensions."""
    __slots__ = ("_dimensions", "_operations")

    def __init__(self, dimension_definitions: Sequence[DimensionDefinition]):
        dims = tuple(dimension_definitions)
        if not dims:
            raise InvalidArgumentError("At least one dimension definition is required")
        for d in dims:
            if not isinstance(d, DimensionDefinition):
                raise InvalidArgumentError(f"Not a DimensionDefinition: {d!r}")

        operations = operations_for(dims)
        object.__setattr__(self, "_dimensions", dims)
        object.__setattr__(self, "_operations", operations)
        logger.debug("Configured %d-dimensional Hilbert SFC, %d bits, %s",
                     len(dims), operations.total_precision, type(operations).__name__)

    def __setattr__(self, name, value):
        raise ConfigurationError(
            f"HilbertSFC is immutable once configured; cannot set {name!r}"
        )

    def __delattr__(self, name):
        raise ConfigurationError(
            f"HilbertSFC is immutable once configured; cannot delete {name!r}"
        )

    def reconfigure(self, dimension_definitions: Sequence[DimensionDefinition]) -> "HilbertSFC":
        """Return a new curve with new definitions for the same dimensions."""
        dims = tuple(dimension_definitions)
        if len(dims) != len(self._dimensions):
            raise ConfigurationError(
                f"Cannot reconfigure a {len(self._dimensions)}-dimensional curve "
                f"with {len(dims)} dimensions"
            )
        return HilbertSFC(dims)

    # ─── Properties ─────────────────────────────────────────────────────

    @property
    def dimension_definitions(self) -> Tuple[DimensionDefinition, ...]:
        return self._dimensions

    @property
    def dimension_count(self) -> int:
        return len(self._dimensions)

    @property
    def total_precision(self) -> int:
        return self._operations.total_precision

    @property
    def key_length(self) -> int:
        """Byte length of every key this curve produces."""
        return self._operations.key_length

    @property
    def operations(self) -> HilbertOperations:
        return self._operations

    @property
    def uses_fixed_width(self) -> bool:
        return isinstance(self._operations, PrimitiveHilbertOperations)

    # ─── Encode / decode ────────────────────────────────────────────────

    def get_id(self, values: Sequence[float]) -> bytes:
        """Key for one raw value per dimension."""
        return self._operations.convert_to_hilbert(values)

    def get_id_from_coordinates(self, coordinates: Sequence[int]) -> bytes:
        return self._operations.coordinates_to_hilbert(coordinates)

    def get_coordinates(self, values: Sequence[float]) -> List[int]:
        """Integer cell coordinates of raw values, without encoding them."""
        if len(values) != len(self._dimensions):
            raise InvalidArgumentError(
                f"Expected {len(self._dimensions)} values, got {len(values)}"
            )
        return [d.normalize(v) for d, v in zip(self._dimensions, values)]

    def get_coordinates_from_id(self, hilbert_value: bytes) -> List[int]:
        return self._operations.indices_from_hilbert(hilbert_value)

    def get_ranges_from_id(self, hilbert_value: bytes) -> MultiDimensionalNumericData:
        """Cell extent per dimension, inclusive start and exclusive end."""
        return self._operations.convert_from_hilbert(hilbert_value)

    # ─── Queries ────────────────────────────────────────────────────────

    def decompose_range(self, query: MultiDimensionalNumericData,
                        max_ranges: int = -1,
                        remove_vacuum: bool = True,
                        over_inclusive_on_edge: bool = False) -> RangeDecomposition:
        """
        Index ranges covering every cell the query touches.

        When max_ranges >= 0 the result never holds more ranges than
        that; meeting the budget may pull in cells outside the query.
        """
        return self._operations.decompose_range(
            query,
            max_ranges=max_ranges,
            remove_vacuum=remove_vacuum,
            over_inclusive_on_edge=over_inclusive_on_edge,
        )

    def get_estimated_id_count(self, data: MultiDimensionalNumericData) -> int:
        return self._operations.get_estimated_id_count(data)

    def normalize_range(self, min_value: float, max_value: float,
                        dimension: int) -> Tuple[int, int]:
        return self._operations.normalize_range(min_value, max_value, dimension)

    def get_insertion_id_range_per_dimension(self) -> List[float]:
        return self._operations.get_insertion_id_range_per_dimension()

    # ─── Serialization ──────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {"dimensions": [d.to_dict() for d in self._dimensions]}

    @classmethod
    def from_dict(cls, d: dict) -> "HilbertSFC":
        try:
            dims = d["dimensions"]
        except KeyError as e:
            raise InvalidArgumentError("Curve definition has no 'dimensions'") from e
        return cls([DimensionDefinition.from_dict(x) for x in dims])

    def __repr__(self) -> str:
        return (f"HilbertSFC(dimensions={self.dimension_count}, "
                f"bits={[d.bits_of_precision for d in self._dimensions]})")
