"""
MiniSFC — Hilbert Space Filling Curve Index Core
================================================
Linearizes multi-dimensional numeric data into sortable Hilbert keys and
turns multi-dimensional range queries into contiguous key ranges.

Usage:
    from sfc import DimensionDefinition, HilbertSFC, MultiDimensionalNumericData

    sfc = HilbertSFC([DimensionDefinition(-180, 180, 20),
                      DimensionDefinition(-90, 90, 20)])
    key = sfc.get_id([2.35, 48.85])
    ranges = sfc.decompose_range(
        MultiDimensionalNumericData.from_bounds([2.2, 48.8], [2.5, 48.9]),
        max_ranges=32)
"""

from sfc.errors import SFCError, InvalidArgumentError, ConfigurationError
from sfc.data import NumericRange, MultiDimensionalNumericData
from sfc.dimension import DimensionDefinition
from sfc.range_decomposition import IndexRange, RangeDecomposition
from sfc.hilbert.sfc import HilbertSFC
from sfc.config import IndexConfig, load_config, save_config

__all__ = [
    "SFCError", "InvalidArgumentError", "ConfigurationError",
    "NumericRange", "MultiDimensionalNumericData",
    "DimensionDefinition",
    "IndexRange", "RangeDecomposition",
    "HilbertSFC",
    "IndexConfig", "load_config", "save_config",
]
