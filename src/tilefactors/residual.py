# -----------------------------------------------------------------------------
#  residual.py
#  Factorizations with partially-filled spatial tiles
# -----------------------------------------------------------------------------
"""
Tiling of a dimension of size n over `order` hierarchy levels where some
levels are bound to spatial arrays of fixed capacity that may be only
partially used.

A pair (c, r) of cofactors and residuals describes the tiling: level i
iterates c[i] times, and in its last iteration only r[i] of those are
live. Non-spatial levels are always fully used (r[i] == c[i]). In declared
order (index 0 = outermost) the pair is valid iff

    acc = 0
    for i in 0 .. order-1:
        acc = c[i] * acc + (r[i] - 1)
    acc + 1 == n

together with r[i] <= c[i] everywhere and c[i] <= capacity[i] at spatial
levels.

The search is four phases. Phases 1-3 build loose, polynomial-size
over-approximations of the candidate space; phase 4 is the exact check and
is the only one whose verdict counts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import NamedTuple

from tilefactors.fmt import format_residual_pairs
from tilefactors.given import check_query, resolve_given, splice
from tilefactors.utility import (
    ContractError,
    cart_product,
    check_search_size,
    divisors,
    isqrt,
    prod,
)

logger = logging.getLogger(__name__)


class ResidualPair(NamedTuple):
    cofactors: tuple[int, ...]
    residuals: tuple[int, ...]


def residual_index(cofactors: Sequence[int], residuals: Sequence[int]) -> int:
    """
    Evaluate the positional equation for a declared-order pair and return
    acc + 1, i.e. the dimension size the pair tiles.
    """
    if len(cofactors) != len(residuals):
        raise ContractError("cofactor and residual tuples differ in length")
    acc = 0
    for c, r in zip(cofactors, residuals):
        acc = c * acc + (r - 1)
    return acc + 1


def _check_spatial(order: int, capacities: Sequence[int], positions: Sequence[int]) -> dict[int, int]:
    if len(capacities) != len(positions):
        raise ContractError(
            f"{len(capacities)} spatial capacities for {len(positions)} spatial positions"
        )
    if len(set(positions)) != len(positions):
        raise ContractError(f"duplicate spatial positions in {list(positions)}")
    for pos, cap in zip(positions, capacities):
        if not 0 <= pos < order:
            raise ContractError(f"spatial position {pos} is outside [0, {order})")
        if cap < 1:
            raise ContractError(f"spatial capacity at position {pos} must be positive, got {cap}")
    return dict(zip(positions, capacities))


class ResidualFactors:
    """
    All (cofactors, residuals) pairs tiling n over `order` levels, with
    spatial_capacities[j] bounding level spatial_positions[j].

    Results are ResidualPair named tuples in declared order, deduplicated
    and sorted. An empty result means no tiling exists and is not an error.
    """

    def __init__(self, n: int, order: int,
                 spatial_capacities: Sequence[int] = (),
                 spatial_positions: Sequence[int] = (),
                 given: Mapping[int, int] | None = None,
                 *, limit: int | None = None):
        check_query(n, order)
        self.n = n
        self.order = order
        self.spatial = _check_spatial(order, list(spatial_capacities), list(spatial_positions))
        self._limit = limit

        res = resolve_given(n, order, given)
        self.given = dict(res.accepted)
        self.demoted = dict(res.demoted)

        # The search works innermost-first: declared position p is inner
        # position order-1-p.
        self._spatial_inner = {order - 1 - p: c for p, c in self.spatial.items()}
        self._slots = sorted(self._spatial_inner)
        given_inner = {order - 1 - p: v for p, v in self.given.items()}

        self.all_factors = self._candidate_divisors()
        cofactor_candidates = self._cofactor_candidates(res.free_order)
        residual_candidates = self._residual_candidates()
        accepted = self._solve(cofactor_candidates, residual_candidates, given_inner)
        self._pairs = self._finalize(accepted)

        logger.debug(
            "ResidualFactors(%d, %d, spatial=%s): %d candidate divisors, %d cofactor and "
            "%d residual candidates, %d pairs",
            n, order, self.spatial, len(self.all_factors), len(cofactor_candidates),
            len(residual_candidates), len(self._pairs),
        )

    # --- phase 1 -----------------------------------------------------------

    def _candidate_divisors(self) -> list[int]:
        """
        Divisors of n, plus every value below n that divides s*n*ceil(n/s)
        for some utilization s of a spatial array. The latter are the tile
        counts a partially filled array can induce.
        """
        n = self.n
        found = set(divisors(n))
        widest = max(self.spatial.values(), default=0)
        for s in range(1, widest + 1):
            g = s * n * -(-n // s)
            found.update(i for i in range(1, n) if g % i == 0)
        return sorted(found)

    # --- phase 2 -----------------------------------------------------------

    def _cofactor_candidates(self, free_order: int) -> list[tuple[int, ...]]:
        """
        Free cofactor tuples (inner order). One rotation per position picks
        which position may hold a large value; all other positions are kept
        to at most isqrt(n)+1. Tuples whose product of (value-1) terms
        exceeds n are dropped.
        """
        if free_order == 0:
            return [()]

        n = self.n
        edge = isqrt(n) + 1
        small = [a for a in self.all_factors if a <= edge]
        large = [a for a in self.all_factors if a * a >= n]

        found: dict[tuple[int, ...], None] = {}
        for rec in range(free_order):
            pools = [small] * free_order
            pools[rec] = self.all_factors if rec == 0 else large
            check_search_size(f"ResidualFactors({n}, {self.order}) cofactor rotation {rec}",
                              prod(len(p) for p in pools), self._limit)
            for t in cart_product(pools):
                if prod(v - 1 for v in t if v != 1) <= n:
                    found[t] = None
        return list(found)

    # --- phase 3 -----------------------------------------------------------

    def _residual_candidates(self) -> list[tuple[int, ...]]:
        """Residual tuples over the spatial slots (inner order), sum <= n + order."""
        pools = [range(1, self._spatial_inner[p] + 1) for p in self._slots]
        check_search_size(f"ResidualFactors({self.n}, {self.order}) residuals",
                          prod(len(p) for p in pools), self._limit)
        bound = self.n + self.order
        return [t for t in cart_product(pools) if sum(t) <= bound]

    # --- phase 4 -----------------------------------------------------------

    def _solve(self, cofactor_candidates: list[tuple[int, ...]],
               residual_candidates: list[tuple[int, ...]],
               given_inner: Mapping[int, int]) -> list[ResidualPair]:
        check_search_size(f"ResidualFactors({self.n}, {self.order}) pairs",
                          len(cofactor_candidates) * len(residual_candidates), self._limit)
        accepted: list[ResidualPair] = []
        for free in cofactor_candidates:
            cof = splice(free, given_inner)
            if any(cof[p] > self._spatial_inner[p] for p in self._slots):
                continue
            for res in residual_candidates:
                full = list(cof)
                for p, r in zip(self._slots, res):
                    full[p] = r
                if self._verify(cof, full):
                    accepted.append(ResidualPair(cof, tuple(full)))
        return accepted

    def _verify(self, cof: Sequence[int], res: Sequence[int]) -> bool:
        """Exact check, innermost position last in the Horner evaluation."""
        acc = 0
        for i in range(len(cof) - 1, -1, -1):
            if cof[i] < res[i]:
                return False
            acc = cof[i] * acc + (res[i] - 1)
        return acc + 1 == self.n

    def _finalize(self, accepted: list[ResidualPair]) -> list[ResidualPair]:
        """The one place inner-order pairs become declared-order results."""
        declared = {ResidualPair(p.cofactors[::-1], p.residuals[::-1]) for p in accepted}
        return sorted(declared)

    # --- sequence protocol -------------------------------------------------

    def __getitem__(self, index: int) -> ResidualPair:
        return self._pairs[index]

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[ResidualPair]:
        return iter(self._pairs)

    def size(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return (f"ResidualFactors(n={self.n}, order={self.order}, spatial={self.spatial}, "
                f"given={self.given}, size={len(self)})")

    def __str__(self) -> str:
        return format_residual_pairs(self, color=False)
