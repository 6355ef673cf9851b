"""
MiniSFC — Hilbert Space Filling Curve Index Core
================================================
Command-line entry point.

Usage:
    python main.py --config CONFIG [options] COMMAND [ARGS...]

Commands:
    info                    Show the configured curve
    encode V1 V2 ...        Key for one raw value per dimension
    decode HEX              Cell coordinates and extent of a key
    ranges MIN:MAX ...      Key ranges covering a query region
    estimate MIN:MAX ...    Estimated cell count of a query region
"""

import logging
import sys
from typing import List, Optional

from sfc.config import IndexConfig, load_config
from sfc.data import MultiDimensionalNumericData, NumericRange
from sfc.errors import SFCError, InvalidArgumentError
from sfc.key_encoding import hex_string, key_from_hex


def print_help():
    print("""
MiniSFC — Hilbert Space Filling Curve Index Core

Usage:
    python main.py --config CONFIG info
    python main.py --config CONFIG encode V1 V2 ...
    python main.py --config CONFIG decode HEX
    python main.py --config CONFIG ranges MIN:MAX ... [query options]
    python main.py --config CONFIG estimate MIN:MAX ...

Options:
    --help              Show this help
    --config PATH       JSON curve configuration (required)
    --verbose           Log decomposition progress to stderr

Query options (override the config defaults):
    --max-ranges N      Upper bound on ranges (negative = unbounded)
    --keep-vacuum       Fall back to coarser ranges instead of bridging gaps
    --over-inclusive    Accept mostly-covered edge cells whole
""")


def _parse_region(args: List[str]) -> MultiDimensionalNumericData:
    """Parse MIN:MAX tokens, one per dimension."""
    ranges = []
    for token in args:
        lo, sep, hi = token.partition(":")
        if not sep:
            raise InvalidArgumentError(f"Expected MIN:MAX, got {token!r}")
        try:
            ranges.append(NumericRange(float(lo), float(hi)))
        except ValueError as e:
            if isinstance(e, SFCError):
                raise
            raise InvalidArgumentError(f"Invalid range {token!r}") from e
    return MultiDimensionalNumericData(tuple(ranges))


def _parse_values(args: List[str]) -> List[float]:
    try:
        return [float(a) for a in args]
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid value in {args}") from e


def run_command(config: IndexConfig, command: str, args: List[str]) -> None:
    """Execute one command against a configured curve and print the result."""
    sfc = config.build()

    if command == "info":
        print(f"dimensions: {sfc.dimension_count}")
        for i, d in enumerate(sfc.dimension_definitions):
            print(f"  [{i}] [{d.min_value}, {d.max_value}] bits={d.bits_of_precision} "
                  f"cell={d.cell_width}")
        print(f"total bits: {sfc.total_precision}")
        print(f"key bytes:  {sfc.key_length}")
        print(f"key codec:  {'fixed-width' if sfc.uses_fixed_width else 'unbounded'}")

    elif command == "encode":
        key = sfc.get_id(_parse_values(args))
        print(hex_string(key))

    elif command == "decode":
        if len(args) != 1:
            raise InvalidArgumentError("decode takes exactly one hex key")
        key = key_from_hex(args[0])
        coords = sfc.get_coordinates_from_id(key)
        extent = sfc.get_ranges_from_id(key)
        print(f"coordinates: {coords}")
        for i, r in enumerate(extent):
            print(f"  [{i}] [{r.min}, {r.max})")

    elif command == "ranges":
        decomposition = sfc.decompose_range(
            _parse_region(args),
            max_ranges=config.max_ranges,
            remove_vacuum=config.remove_vacuum,
            over_inclusive_on_edge=config.over_inclusive_on_edge,
        )
        for first, last in decomposition.to_key_ranges(sfc.key_length):
            print(f"{hex_string(first)} {hex_string(last)}")
        print(f"-- {len(decomposition)} ranges, {decomposition.cell_count} cells",
              file=sys.stderr)

    elif command == "estimate":
        print(sfc.get_estimated_id_count(_parse_region(args)))

    else:
        raise InvalidArgumentError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> None:
    """Parse CLI arguments and dispatch."""
    args = sys.argv[1:] if argv is None else list(argv)

    if not args or "--help" in args or "-h" in args:
        print_help()
        return

    config_path = None
    max_ranges = None
    keep_vacuum = False
    over_inclusive = False
    verbose = False
    positional: List[str] = []

    i = 0
    while i < len(args):
        if args[i] == "--config" and i + 1 < len(args):
            config_path = args[i + 1]
            i += 2
        elif args[i] == "--max-ranges" and i + 1 < len(args):
            try:
                max_ranges = int(args[i + 1])
            except ValueError:
                print(f"Error: --max-ranges expects an integer, got {args[i + 1]!r}",
                      file=sys.stderr)
                sys.exit(1)
            i += 2
        elif args[i] == "--keep-vacuum":
            keep_vacuum = True
            i += 1
        elif args[i] == "--over-inclusive":
            over_inclusive = True
            i += 1
        elif args[i] == "--verbose":
            verbose = True
            i += 1
        elif args[i].startswith("--"):
            print(f"Unknown option: {args[i]}", file=sys.stderr)
            print_help()
            sys.exit(1)
        else:
            # Negative numbers are values, not options
            positional.append(args[i])
            i += 1

    if config_path is None:
        print("Error: --config is required", file=sys.stderr)
        sys.exit(1)
    if not positional:
        print("Error: no command given", file=sys.stderr)
        sys.exit(1)

    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(config_path)
        config = IndexConfig(
            dimensions=config.dimensions,
            max_ranges=config.max_ranges if max_ranges is None else max_ranges,
            remove_vacuum=config.remove_vacuum and not keep_vacuum,
            over_inclusive_on_edge=config.over_inclusive_on_edge or over_inclusive,
        )
        run_command(config, positional[0], positional[1:])
    except (SFCError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
