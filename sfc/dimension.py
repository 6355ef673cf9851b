"""
MiniSFC Dimension Definitions
=============================
A dimension maps a continuous domain [min_value, max_value] onto
2^bits_of_precision discrete cells.

Normalization rule:
  coord = floor((value - min) / (max - min) * 2^bits), clamped to
  [0, 2^bits - 1]. Values outside the domain are clipped, not rejected;
  callers may legitimately query slightly past the declared bounds.

Definitions are immutable once created and validated eagerly.
"""

import math
from dataclasses import dataclass

from sfc.data import NumericRange
from sfc.errors import InvalidArgumentError


@dataclass(frozen=True)
class DimensionDefinition:
    """Bounds and precision of one curve dimension."""
    min_value: float
    max_value: float
    bits_of_precision: int

    def __post_init__(self):
        if not (math.isfinite(self.min_value) and math.isfinite(self.max_value)):
            raise InvalidArgumentError(
                f"Dimension bounds must be finite, got [{self.min_value}, {self.max_value}]"
            )
        if self.min_value >= self.max_value:
            raise InvalidArgumentError(
                f"Dimension minimum {self.min_value} must be less than maximum {self.max_value}"
            )
        if isinstance(self.bits_of_precision, bool) or not isinstance(self.bits_of_precision, int):
            raise InvalidArgumentError(
                f"Bits of precision must be an integer, got {self.bits_of_precision!r}"
            )
        if self.bits_of_precision <= 0:
            raise InvalidArgumentError(
                f"Bits of precision must be positive, got {self.bits_of_precision}"
            )

    @property
    def span(self) -> float:
        return self.max_value - self.min_value

    @property
    def bins(self) -> int:
        """Number of discrete cells along this dimension."""
        return 1 << self.bits_of_precision

    @property
    def cell_width(self) -> float:
        """Continuous width of a single cell."""
        return math.ldexp(self.span, -self.bits_of_precision)

    def clip(self, value: float) -> float:
        return min(max(value, self.min_value), self.max_value)

    def normalize(self, value: float) -> int:
        """Map a raw value to its integer cell coordinate."""
        if math.isnan(value):
            raise InvalidArgumentError("NaN cannot be normalized")
        fraction = (self.clip(value) - self.min_value) / self.span
        coord = math.floor(math.ldexp(fraction, self.bits_of_precision))
        return min(max(coord, 0), self.bins - 1)

    def denormalize(self, coord: int) -> NumericRange:
        """Return the [start, start + cell_width) extent of a cell."""
        if coord < 0 or coord >= self.bins:
            raise InvalidArgumentError(
                f"Coordinate {coord} outside [0, {self.bins - 1}]"
            )
        width = self.cell_width
        start = self.min_value + coord * width
        return NumericRange(start, start + width)

    def to_dict(self) -> dict:
        return {
            "min": self.min_value,
            "max": self.max_value,
            "bits": self.bits_of_precision,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DimensionDefinition":
        try:
            return cls(
                min_value=float(d["min"]),
                max_value=float(d["max"]),
                bits_of_precision=d["bits"],
            )
        except KeyError as e:
            raise InvalidArgumentError(f"Dimension definition is missing {e}") from e
        except InvalidArgumentError:
            raise
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Invalid dimension definition {d!r}: {e}") from e
