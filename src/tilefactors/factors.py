# -----------------------------------------------------------------------------
#  factors.py
#  Exact multiplicative split of a dimension size over hierarchy levels
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from tilefactors.fmt import format_cofactors
from tilefactors.given import check_query, resolve_given, splice
from tilefactors.utility import ContractError, check_search_size, divisors

logger = logging.getLogger(__name__)


class Factors:
    """
    Every ordered `order`-tuple of positive integers whose product is n.

    Tuples are reported in declared order (index 0 = outermost level) and
    listed lexicographically. Positions named in `given` are pinned to their
    values; a given value that cannot divide what is left of n is demoted to
    a free position and recorded in `demoted`.

    The whole search runs in the constructor; afterwards the object is a
    read-only sequence, except for prune_max().
    """

    def __init__(self, n: int, order: int, given: Mapping[int, int] | None = None,
                 *, limit: int | None = None):
        check_query(n, order)
        self.n = n
        self.order = order
        self._limit = limit

        res = resolve_given(n, order, given)
        self.given = dict(res.accepted)
        self.demoted = dict(res.demoted)

        self.all_factors = divisors(n)
        residue = n // res.partial_product
        self._memo: dict[tuple[int, int], list[tuple[int, ...]]] = {}
        if self.given and res.free_order == 0 and residue != 1:
            # every position pinned, but the pins don't multiply out to n
            inner_first = []
        else:
            inner_first = self._split(residue, res.free_order)
        del self._memo

        self._cofactors = self._finalize(inner_first)
        logger.debug("Factors(%d, %d): %d cofactor sets", n, order, len(self._cofactors))

    # --- search ----------------------------------------------------------

    def _split(self, residue: int, order: int) -> list[tuple[int, ...]]:
        """
        All order-way cofactor sets of residue, innermost factor first:
        the factor chosen at this level is appended after the sets
        returned by the recursive call.
        """
        if order == 0:
            return [()]
        if order == 1:
            return [(residue,)]

        key = (residue, order)
        if key in self._memo:
            return self._memo[key]

        out: list[tuple[int, ...]] = []
        for factor in self.all_factors:
            if factor > residue:
                break
            if residue % factor:
                continue
            for sub in self._split(residue // factor, order - 1):
                out.append(sub + (factor,))
        check_search_size(f"Factors({self.n}, {self.order})", len(out), self._limit)
        self._memo[key] = out
        return out

    def _finalize(self, inner_first: list[tuple[int, ...]]) -> list[tuple[int, ...]]:
        """The one place internal tuples become declared-order results."""
        declared = sorted(t[::-1] for t in inner_first)
        if not self.given:
            return declared
        return [splice(t, self.given) for t in declared]

    # --- pruning ---------------------------------------------------------

    def prune_max(self, bounds: Mapping[int, int]) -> Factors:
        """
        Drop every cofactor set with a value above its bound at a bounded
        position. Runs after given-factor splicing, so bounds use declared
        positions.
        """
        for pos in bounds:
            if not 0 <= pos < self.order:
                raise ContractError(f"bound position {pos} is outside [0, {self.order})")
        before = len(self._cofactors)
        self._cofactors = [
            t for t in self._cofactors
            if all(t[pos] <= mx for pos, mx in bounds.items())
        ]
        logger.debug("prune_max(%s): %d -> %d cofactor sets", dict(bounds), before, len(self._cofactors))
        return self

    # --- sequence protocol -----------------------------------------------

    def __getitem__(self, index: int) -> tuple[int, ...]:
        return self._cofactors[index]

    def __len__(self) -> int:
        return len(self._cofactors)

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        return iter(self._cofactors)

    def size(self) -> int:
        return len(self._cofactors)

    def __repr__(self) -> str:
        return f"Factors(n={self.n}, order={self.order}, given={self.given}, size={len(self)})"

    def __str__(self) -> str:
        return format_cofactors(self, color=False)
