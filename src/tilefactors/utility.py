# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import reduce
from operator import mul

from tilefactors.runtime import CFG


class TilefactorsError(Exception):
    pass


class ContractError(TilefactorsError, ValueError):
    """A caller broke the contract of a query (bad order, positions, bounds...)."""


class SearchLimitExceeded(TilefactorsError):
    """The candidate space of a search is larger than the configured limit."""

    def __init__(self, what: str, size: int, limit: int):
        self.what = what
        self.size = size
        self.limit = limit
        super().__init__(f"{what}: {size} candidates exceed the search limit of {limit}")


class UserInputError(TilefactorsError):
    pass


def isqrt(x: int) -> int:
    """
    Integer floor square root, bit by bit (no floating point).

    Works for any non-negative int; the starting bit is the highest power
    of four not above x.
    """
    if x < 0:
        raise ContractError(f"isqrt of a negative number: {x}")
    op = x
    res = 0
    one = 1 << ((x.bit_length() - 1) & ~1) if x else 0
    while one != 0:
        if op >= res + one:
            op -= res + one
            res += one << 1
        res >>= 1
        one >>= 2
    return res


def divisors(n: int) -> list[int]:
    """All positive divisors of n by trial division up to isqrt(n), ascending."""
    if n < 1:
        raise ContractError(f"divisors are only defined here for n >= 1, got {n}")
    small: list[int] = []
    large: list[int] = []
    for i in range(1, isqrt(n) + 1):
        if n % i == 0:
            small.append(i)
            if i * i != n:
                large.append(n // i)
    return small + large[::-1]


def prod(values: Iterable[int]) -> int:
    return reduce(mul, values, 1)


def cart_product(pools: Sequence[Sequence[int]]) -> list[tuple[int, ...]]:
    """Cartesian product of the pools, first pool varying slowest."""
    out: list[tuple[int, ...]] = [()]
    for pool in pools:
        out = [t + (v,) for t in out for v in pool]
    return out


def check_search_size(what: str, size: int, limit: int | None = None) -> None:
    """
    Abort hook: raise SearchLimitExceeded if `size` is above `limit`
    (or SEARCH.MAX_CANDIDATES when no explicit limit is given).
    """
    if limit is None:
        limit = CFG("SEARCH.MAX_CANDIDATES", None)
    if limit is None:
        return
    limit = int(limit)
    if size > limit:
        raise SearchLimitExceeded(what, size, limit)


def parse_position_map(items: Iterable[str], label: str = "mapping") -> dict[int, int]:
    """Parse ["0=3", "2=4"] into {0: 3, 2: 4}."""
    out: dict[int, int] = {}
    for item in items or ():
        key, sep, value = str(item).partition("=")
        if not sep:
            raise UserInputError(f"{label} entry {item!r} is not of the form POSITION=VALUE.")
        try:
            pos, val = int(key.strip()), int(value.strip())
        except ValueError:
            raise UserInputError(f"{label} entry {item!r} must use integers.") from None
        if pos in out:
            raise UserInputError(f"{label} gives position {pos} twice.")
        out[pos] = val
    return out


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    """Flatten nested dicts to {'A.B': value}."""
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out


def typename(v: object) -> str:
    return type(v).__name__
