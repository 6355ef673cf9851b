"""
MiniSFC Index Configuration
===========================
Dimension definitions plus default query policy, persisted as JSON.

File layout:
  {
    "magic": "MiniSFC_Config",
    "format_version": 1,
    "dimensions": [{"min": 0.0, "max": 1.0, "bits": 3}, ...],
    "max_ranges": -1,
    "remove_vacuum": true,
    "over_inclusive_on_edge": false
  }

Writes are atomic: temp file in the same directory, then os.replace().
"""

import json
import os
import tempfile
from dataclasses import dataclass
from typing import Tuple

from sfc.dimension import DimensionDefinition
from sfc.errors import InvalidArgumentError
from sfc.hilbert.sfc import HilbertSFC


# Config format version — increment on breaking changes
CONFIG_FORMAT_VERSION = 1
CONFIG_MAGIC = "MiniSFC_Config"


@dataclass(frozen=True)
class IndexConfig:
    """Everything needed to open a curve and run default-policy queries."""
    dimensions: Tuple[DimensionDefinition, ...] = ()
    max_ranges: int = -1
    remove_vacuum: bool = True
    over_inclusive_on_edge: bool = False

    def __post_init__(self):
        object.__setattr__(self, "dimensions", tuple(self.dimensions))

    def build(self) -> HilbertSFC:
        return HilbertSFC(self.dimensions)

    def to_dict(self) -> dict:
        return {
            "magic": CONFIG_MAGIC,
            "format_version": CONFIG_FORMAT_VERSION,
            "dimensions": [d.to_dict() for d in self.dimensions],
            "max_ranges": self.max_ranges,
            "remove_vacuum": self.remove_vacuum,
            "over_inclusive_on_edge": self.over_inclusive_on_edge,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "IndexConfig":
        if not isinstance(d, dict):
            raise InvalidArgumentError("Config must be a JSON object")
        stored_version = d.get("format_version", 0)
        if not isinstance(stored_version, int):
            raise InvalidArgumentError(f"Invalid config format version {stored_version!r}")
        if stored_version > CONFIG_FORMAT_VERSION:
            raise InvalidArgumentError(
                f"Config format version {stored_version} is newer than "
                f"supported version {CONFIG_FORMAT_VERSION}")
        if "dimensions" not in d:
            raise InvalidArgumentError("Config has no 'dimensions'")
        try:
            return cls(
                dimensions=tuple(DimensionDefinition.from_dict(x) for x in d["dimensions"]),
                max_ranges=int(d.get("max_ranges", -1)),
                remove_vacuum=bool(d.get("remove_vacuum", True)),
                over_inclusive_on_edge=bool(d.get("over_inclusive_on_edge", False)),
            )
        except InvalidArgumentError:
            raise
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Invalid config: {e}") from e


def load_config(path: str) -> IndexConfig:
    """Read a config file written by save_config (or by hand)."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidArgumentError(f"Config {path} is not valid JSON: {e}") from e
    return IndexConfig.from_dict(data)


def save_config(config: IndexConfig, path: str) -> None:
    """Persist a config using atomic write."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    tmp_fd, tmp_path = tempfile.mkstemp(dir=directory, prefix="sfc_", suffix=".tmp")
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
