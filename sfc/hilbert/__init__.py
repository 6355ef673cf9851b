"""
MiniSFC Hilbert Curve
=====================
  - compact_curve: bit-level compact Hilbert transform (orientation tracking)
  - operations: normalization, key codec, estimation (fixed-width / unbounded)
  - decomposer: query region → contiguous index ranges
  - sfc: immutable configured facade
"""

from sfc.hilbert.compact_curve import CompactHilbertCurve, CurveState, ROOT_STATE
from sfc.hilbert.operations import (
    HilbertOperations,
    PrimitiveHilbertOperations,
    UnboundedHilbertOperations,
    operations_for,
)
from sfc.hilbert.decomposer import RangeDecomposer
from sfc.hilbert.sfc import HilbertSFC

__all__ = [
    "CompactHilbertCurve", "CurveState", "ROOT_STATE",
    "HilbertOperations", "PrimitiveHilbertOperations",
    "UnboundedHilbertOperations", "operations_for",
    "RangeDecomposer",
    "HilbertSFC",
]
