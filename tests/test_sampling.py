# tests/test_sampling.py
from __future__ import annotations

import random
from collections import Counter

import pytest

from tilefactors import APPLY, ContractError, RandomSampler, SequentialSampler

# ---------- sequential --------------------------------------------------------


def test_sequential_autoloop_wraps():
    s = SequentialSampler(3, autoloop=True)
    assert [s.next() for _ in range(4)] == [0, 1, 2, 0]


def test_sequential_without_autoloop_stops_at_bound():
    s = SequentialSampler(3)
    assert s.take(3) == [0, 1, 2]
    with pytest.raises(ContractError):
        s.next()


def test_sequential_reset():
    s = SequentialSampler(5)
    s.take(5)
    s.reset()
    assert s.next() == 0


def test_sequential_beyond_64_bits():
    s = SequentialSampler(2**100, autoloop=True)
    assert s.take(3) == [0, 1, 2]
    assert s.bound == 2**100


@pytest.mark.parametrize("bound", [0, -1, 2**128, True, 1.5])
def test_bound_must_be_in_128_bit_range(bound):
    with pytest.raises(ContractError):
        SequentialSampler(bound)
    with pytest.raises(ContractError):
        RandomSampler(bound)


def test_largest_bound_is_accepted():
    s = RandomSampler(2**128 - 1, seed=0)
    assert all(0 <= v < 2**128 - 1 for v in s.take(50))


# ---------- random ------------------------------------------------------------


def test_random_small_bound_stays_in_range_and_covers_it():
    s = RandomSampler(10, seed=1)
    draws = s.take(500)
    assert all(0 <= v < 10 for v in draws)
    assert set(draws) == set(range(10))


def test_random_roughly_uniform():
    counts = Counter(RandomSampler(4, seed=11).take(4000))
    assert all(800 < counts[v] < 1200 for v in range(4))


def test_random_wide_bound_varies_high_word():
    bound = 2**100
    draws = RandomSampler(bound, seed=5).take(200)
    assert all(0 <= v < bound for v in draws)
    assert len({v >> 64 for v in draws}) > 1


def test_random_bound_just_above_64_bits():
    bound = 2**64 + 1
    draws = RandomSampler(bound, seed=3).take(300)
    assert all(0 <= v < bound for v in draws)


def test_random_is_reproducible_per_instance():
    a = RandomSampler(2**90, seed=42)
    b = RandomSampler(2**90, seed=42)
    assert a.take(20) == b.take(20)


def test_random_uses_injected_engine():
    a = RandomSampler(1000, rng=random.Random(3))
    b = RandomSampler(1000, rng=random.Random(3))
    assert a.take(10) == b.take(10)


def test_random_seed_from_settings():
    APPLY({"SAMPLING": {"SEED": 7}})
    assert RandomSampler(1000).take(5) == RandomSampler(1000, seed=7).take(5)


def test_bound_one_always_zero():
    assert RandomSampler(1, seed=0).take(5) == [0] * 5
    assert SequentialSampler(1, autoloop=True).take(3) == [0, 0, 0]
