# tests/test_residual.py
"""
Residual (partially filled spatial tile) factorizations.

Run: pytest -v
"""

from __future__ import annotations

from itertools import product

import pytest

from tilefactors import (
    ContractError,
    Factors,
    ResidualFactors,
    ResidualPair,
    SearchLimitExceeded,
    residual_index,
)

# ---------- helpers -----------------------------------------------------------


def _assert_valid(rf: ResidualFactors) -> None:
    """Every returned pair satisfies the positional equation and the bounds."""
    for pair in rf:
        cof, res = pair
        assert len(cof) == len(res) == rf.order
        assert residual_index(cof, res) == rf.n
        for i in range(rf.order):
            assert 1 <= res[i] <= cof[i]
            if i in rf.spatial:
                assert cof[i] <= rf.spatial[i]
            else:
                assert res[i] == cof[i]
    assert len(set(rf)) == len(rf)


def _brute(n: int, order: int, spatial: dict[int, int], limit: int) -> list[ResidualPair]:
    """All pairs with cofactors up to `limit`, by exhaustive enumeration."""
    out = []
    for cof in product(range(1, limit + 1), repeat=order):
        if any(cof[p] > c for p, c in spatial.items()):
            continue
        pools = [range(1, cof[i] + 1) if i in spatial else (cof[i],) for i in range(order)]
        for res in product(*pools):
            if residual_index(cof, res) == n:
                out.append(ResidualPair(cof, res))
    return sorted(out)


# ---------- scenarios ---------------------------------------------------------

PARTIAL_TEN = [
    ResidualPair((3, 4), (3, 2)),
    ResidualPair((4, 3), (4, 1)),
    ResidualPair((5, 2), (5, 2)),
    ResidualPair((10, 1), (10, 1)),
]


def test_partial_inner_array():
    rf = ResidualFactors(10, 2, [4], [1])
    assert list(rf) == PARTIAL_TEN
    assert rf.size() == 4
    _assert_valid(rf)


def test_partial_inner_array_matches_brute_force():
    assert list(ResidualFactors(10, 2, [4], [1])) == _brute(10, 2, {1: 4}, 10)


def test_capacity_one_forces_residual_one():
    rf = ResidualFactors(6, 2, [1], [1])
    assert list(rf) == [ResidualPair((6, 1), (6, 1))]


def test_no_valid_tiling_is_empty_not_error():
    rf = ResidualFactors(10, 2, [2, 2], [0, 1])
    assert len(rf) == 0
    assert list(rf) == []
    assert "(no valid tiling)" in str(rf)


SOUNDNESS_CASES = [
    (10, 2, [4], [1]),
    (12, 3, [4], [2]),
    (16, 3, [3, 5], [0, 2]),
    (20, 2, [6], [0]),
    (9, 3, [2, 2], [1, 2]),
    (15, 3, [4], [1]),
]


@pytest.mark.parametrize("n,order,caps,positions", SOUNDNESS_CASES,
                         ids=[f"{c[0]}-{c[1]}-{c[3]}" for c in SOUNDNESS_CASES])
def test_every_pair_is_valid(n, order, caps, positions):
    _assert_valid(ResidualFactors(n, order, caps, positions))


def test_spatial_capacity_pairs_with_its_position():
    rf = ResidualFactors(16, 3, [5, 3], [2, 0])
    assert rf.spatial == {2: 5, 0: 3}
    _assert_valid(rf)


# ---------- no spatial positions: exact split ---------------------------------


@pytest.mark.parametrize("order", [1, 2, 3])
def test_without_spatial_positions_equals_exact_split(order):
    for n in range(1, 31):
        rf = ResidualFactors(n, order, [], [])
        assert [p.cofactors for p in rf] == list(Factors(n, order)), n
        assert all(p.residuals == p.cofactors for p in rf)


# ---------- given factors -----------------------------------------------------


def test_given_factor():
    rf = ResidualFactors(12, 2, [], [], {0: 3})
    assert list(rf) == [ResidualPair((3, 4), (3, 4))]
    assert rf.given == {0: 3}


def test_given_factor_on_spatial_position():
    rf = ResidualFactors(10, 2, [4], [1], {1: 2})
    assert list(rf) == [ResidualPair((5, 2), (5, 2))]


def test_every_position_given():
    rf = ResidualFactors(12, 2, [], [], {0: 3, 1: 4})
    assert list(rf) == [ResidualPair((3, 4), (3, 4))]


def test_non_dividing_given_is_demoted():
    rf = ResidualFactors(10, 2, [4], [1], {1: 3})
    assert rf.demoted == {1: 3}
    assert rf.given == {}
    assert list(rf) == PARTIAL_TEN


@pytest.mark.parametrize("args", [
    (10, 2, [4], []),            # capacity without a position
    (10, 2, [4, 4], [1, 1]),     # same position twice
    (10, 2, [4], [2]),           # position outside the tuple
    (10, 2, [0], [1]),           # empty array
    (10, 1, [], [], {0: 2, 1: 5}),
    (0, 2, [], []),
])
def test_contract_violations(args):
    with pytest.raises(ContractError):
        ResidualFactors(*args)


# ---------- misc --------------------------------------------------------------


def test_residual_index():
    assert residual_index((4, 3), (4, 1)) == 10
    assert residual_index((3, 4), (3, 4)) == 12
    assert residual_index((), ()) == 1
    with pytest.raises(ContractError):
        residual_index((1, 2), (1,))


def test_indexing():
    rf = ResidualFactors(10, 2, [4], [1])
    assert rf[0].cofactors == (3, 4)
    assert rf[0].residuals == (3, 2)
    with pytest.raises(IndexError):
        rf[4]


def test_candidate_divisors_include_partial_tile_counts():
    rf = ResidualFactors(10, 2, [4], [1])
    assert rf.all_factors == [1, 2, 3, 4, 5, 6, 8, 10]


def test_limit_aborts():
    with pytest.raises(SearchLimitExceeded):
        ResidualFactors(10, 2, [4], [1], limit=3)


def test_str_dump():
    text = str(ResidualFactors(10, 2, [4], [1]))
    assert "10 ~ 4 * 3  (residual 4 * 1)" in text
