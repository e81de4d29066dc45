# src/tilefactors/given.py
"""
Caller-fixed ("given") factors.

A given map pins tuple positions to values. Entries are consumed in
ascending position order against a running partial product; an entry whose
value would make the partial product stop dividing n is demoted to a free
position instead of failing the query.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from tilefactors.utility import ContractError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GivenResolution:
    order: int
    accepted: dict[int, int] = field(default_factory=dict)   # position -> value
    demoted: dict[int, int] = field(default_factory=dict)    # position -> rejected value
    partial_product: int = 1

    @property
    def free_order(self) -> int:
        return self.order - len(self.accepted)


def check_query(n: int, order: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise ContractError(f"dimension size must be a positive integer, got {n!r}")
    if isinstance(order, bool) or not isinstance(order, int) or order < 0:
        raise ContractError(f"order must be a non-negative integer, got {order!r}")


def resolve_given(n: int, order: int, given: Mapping[int, int] | None) -> GivenResolution:
    given = dict(given or {})
    if len(given) > order:
        raise ContractError(f"{len(given)} given factors do not fit in a {order}-way split")
    for pos, value in given.items():
        if not 0 <= pos < order:
            raise ContractError(f"given position {pos} is outside [0, {order})")
        if value < 1:
            raise ContractError(f"given factor at position {pos} must be positive, got {value}")

    accepted: dict[int, int] = {}
    demoted: dict[int, int] = {}
    partial_product = 1
    for pos in sorted(given):
        factor = given[pos]
        if n % (factor * partial_product) == 0:
            partial_product *= factor
            accepted[pos] = factor
        else:
            logger.warning(
                "cannot accept %d as a factor of %d with current partial product %d, "
                "ignoring mapping constraint and setting position %d to a free variable",
                factor, n, partial_product, pos,
            )
            demoted[pos] = factor

    return GivenResolution(order=order, accepted=accepted, demoted=demoted,
                           partial_product=partial_product)


def splice(values: tuple[int, ...], fixed: Mapping[int, int]) -> tuple[int, ...]:
    """Insert fixed values at their positions, shifting later entries right."""
    out = list(values)
    for pos in sorted(fixed):
        if pos > len(out):
            raise ContractError(f"cannot place a given factor at position {pos} of a {len(out)}-tuple")
        out.insert(pos, fixed[pos])
    return tuple(out)
