# src/tilefactors/cli.py

"""
tilefactors - diagnostic driver for the tile factorization engine

usage:
    tilefactors split N K [--given P=V ...] [--max P=V ...]
    tilefactors residual N K --spatial P=C [...] [--given P=V ...]
    tilefactors sample BOUND [--count M] [--random] [--seed S] [--autoloop]

Positions count from the outermost hierarchy level (0).
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap

from colorama import Fore, Style, just_fix_windows_console

from tilefactors import __version__ as _ver
from tilefactors.config import load_settings
from tilefactors.factors import Factors
from tilefactors.fmt import format_all_factors, format_cofactors, format_residual_pairs
from tilefactors.residual import ResidualFactors
from tilefactors.runtime import APPLY, CFG, ensure_runtime_deps
from tilefactors.runtime import current as _rt_current
from tilefactors.sampling import RandomSampler, SequentialSampler
from tilefactors.utility import (
    ContractError,
    SearchLimitExceeded,
    UserInputError,
    flatten_dotted,
    parse_position_map,
    typename,
)

logger = logging.getLogger(__name__)


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not msg.startswith("Error:"):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _configure_logging(debug: bool) -> None:
    level = "DEBUG" if debug else str(CFG("LOGGING.LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:
    epilog = textwrap.dedent("""\
    commands:
      split      all ordered K-way factorizations of N
      residual   factorizations with partially used spatial arrays
      sample     draw indices from [0, BOUND)

    settings:
      --config or $TILEFACTORS_CONFIG names a TOML file with the sections
      [SEARCH] MAX_CANDIDATES, [SAMPLING] SEED, [DISPLAY] COLOR/SEPARATOR
      and [LOGGING] LEVEL.
    """)

    p = argparse.ArgumentParser(
        prog="tilefactors",
        description="Tile factorization engine: enumerate ways to split a loop bound",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")
    p.add_argument("--config", default=None, help="TOML settings file")
    p.add_argument("--debug", action="store_true", help="Debug logging and full tracebacks")
    p.add_argument("--no-color", action="store_true", help="Plain output")
    p.add_argument("--limit", type=int, default=None,
                   help="Abort searches whose candidate space exceeds this size")

    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("split", help="exact K-way factorizations of N")
    sp.add_argument("n", type=int)
    sp.add_argument("order", type=int)
    sp.add_argument("--given", nargs="*", default=[], metavar="P=V", help="pin position P to V")
    sp.add_argument("--max", nargs="*", default=[], metavar="P=V", help="bound position P by V")
    sp.add_argument("--all-factors", action="store_true", help="also list the divisors of N")

    rp = sub.add_parser("residual", help="factorizations with partial spatial tiles")
    rp.add_argument("n", type=int)
    rp.add_argument("order", type=int)
    rp.add_argument("--spatial", nargs="*", default=[], metavar="P=C",
                    help="position P is a spatial array of capacity C")
    rp.add_argument("--given", nargs="*", default=[], metavar="P=V", help="pin position P to V")
    rp.add_argument("--all-factors", action="store_true", help="also list the candidate divisors")

    mp = sub.add_parser("sample", help="draw indices from [0, BOUND)")
    mp.add_argument("bound", type=int)
    mp.add_argument("--count", type=int, default=10)
    mp.add_argument("--random", action="store_true", help="uniform random instead of sequential")
    mp.add_argument("--seed", type=int, default=None)
    mp.add_argument("--autoloop", action="store_true", help="sequential: wrap to 0 after BOUND-1")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except (UserInputError, ContractError, SearchLimitExceeded, FileNotFoundError) as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug = ("--debug" in (argv if argv is not None else sys.argv))
        if debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


# ---- main ----
def _main_impl(argv=None) -> int:
    just_fix_windows_console()

    parser = _build_parser()
    args = parser.parse_args(argv)

    if not ensure_runtime_deps(strict=True):
        return 1

    settings = load_settings(args.config)
    APPLY(settings)
    rt = _rt_current()
    rt.debug = bool(args.debug)
    if args.no_color:
        rt.color = False
    _configure_logging(args.debug)

    if args.debug:
        logger.debug("active settings: %s (%s)", settings.name, settings.description)
        for k, v in flatten_dotted(rt.settings).items():
            logger.debug("  %s = %r (%s)", k, v, typename(v))

    if args.command == "split":
        f = Factors(args.n, args.order, parse_position_map(args.given, "--given"), limit=args.limit)
        bounds = parse_position_map(args.max, "--max")
        if bounds:
            f.prune_max(bounds)
        if args.all_factors:
            print(format_all_factors(f))
        print(format_cofactors(f))
        return 0

    if args.command == "residual":
        spatial = parse_position_map(args.spatial, "--spatial")
        r = ResidualFactors(args.n, args.order, list(spatial.values()), list(spatial.keys()),
                            parse_position_map(args.given, "--given"), limit=args.limit)
        if args.all_factors:
            print(format_all_factors(r))
        print(format_residual_pairs(r))
        return 0

    if args.command == "sample":
        if args.count < 0:
            raise UserInputError("--count must be non-negative.")
        if args.random:
            s = RandomSampler(args.bound, seed=args.seed)
        else:
            s = SequentialSampler(args.bound, autoloop=args.autoloop)
        for value in s.take(args.count):
            print(value)
        return 0

    parser.error(f"unknown command {args.command!r}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
