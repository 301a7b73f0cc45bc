import math

import numpy as np
import pytest
from scipy import stats

from pompkit.distributions import (
    dbetabinom,
    dbetanbinom,
    deulermultinom,
    dmultinom,
    dot_product,
    exp2geom_rate_correction,
    expit,
    from_log_barycentric,
    logit,
    rbetabinom,
    rbetanbinom,
    reulermultinom,
    rgammawn,
    to_log_barycentric,
)


@pytest.fixture
def rng():
    return np.random.default_rng(20240101)


@pytest.mark.parametrize("p", [0.01, 0.3, 0.5, 0.77, 0.999])
def test_expit_inverts_logit(p):
    assert expit(logit(p)) == pytest.approx(p)


@pytest.mark.parametrize("p", [0.05, 0.2, 0.45])
def test_logit_is_antisymmetric(p):
    assert logit(1.0 - p) == pytest.approx(-logit(p))


def test_logit_of_half():
    assert logit(0.5) == 0.0


def test_logit_boundaries_are_infinite():
    upper = logit(1.0)
    lower = logit(0.0)
    assert math.isinf(upper) and upper > 0
    assert math.isinf(lower) and lower < 0


@pytest.mark.parametrize("x", [-3.0, 0.4, 2.5])
def test_expit_symmetry(x):
    assert expit(-x) == pytest.approx(1.0 - expit(x))


def test_rgammawn_without_noise_returns_dt(rng):
    assert rgammawn(0.0, 0.7, rng) == 0.7


def test_rgammawn_mean_is_dt(rng):
    draws = np.array([rgammawn(0.5, 2.0, rng) for _ in range(4000)])
    assert np.all(draws > 0)
    assert draws.mean() == pytest.approx(2.0, rel=0.05)


def test_reulermultinom_counts_are_valid(rng):
    for _ in range(200):
        trans = reulermultinom(50, [0.3, 1.2, 0.5], 0.8, rng)
        assert trans.shape == (3,)
        assert np.all(trans >= 0)
        assert np.all(trans == np.floor(trans))
        assert trans.sum() <= 50


def test_reulermultinom_zero_rates_give_zeros(rng):
    trans = reulermultinom(10, [0.0, 0.0, 0.0], 1.0, rng)
    assert np.array_equal(trans, np.zeros(3))


def test_reulermultinom_zero_dt_gives_zeros(rng):
    trans = reulermultinom(10, [1.0, 2.0], 0.0, rng)
    assert np.array_equal(trans, np.zeros(2))


def test_reulermultinom_bad_size_gives_nan(rng):
    with pytest.warns(RuntimeWarning, match="reulermultinom"):
        trans = reulermultinom(2.5, [1.0, 1.0], 1.0, rng)
    assert trans.size == 2
    assert np.isnan(trans).all()


def test_reulermultinom_negative_rate_gives_nan(rng):
    with pytest.warns(RuntimeWarning, match="reulermultinom"):
        trans = reulermultinom(5, [1.0, -1.0], 1.0, rng)
    assert np.isnan(trans).all()


def test_deulermultinom_sums_to_one():
    size, rates, dt = 4, [0.4, 1.1], 0.5
    total = sum(
        deulermultinom([a, b], size, rates, dt)
        for a in range(size + 1)
        for b in range(size + 1 - a)
    )
    assert total == pytest.approx(1.0)


def test_deulermultinom_log_matches_plain():
    args = ([1, 2], 6, [0.7, 0.3], 1.5)
    assert math.exp(deulermultinom(*args, give_log=True)) == pytest.approx(
        deulermultinom(*args, give_log=False)
    )


def test_deulermultinom_negative_count():
    assert deulermultinom([-1, 2], 5, [1.0, 1.0], 1.0, give_log=True) == -math.inf
    assert deulermultinom([-1, 2], 5, [1.0, 1.0], 1.0) == 0.0


def test_deulermultinom_more_events_than_size():
    assert deulermultinom([3, 3], 5, [1.0, 1.0], 1.0) == 0.0


def test_deulermultinom_negative_dt_is_nan():
    with pytest.warns(RuntimeWarning, match="deulermultinom"):
        value = deulermultinom([1, 1], 5, [1.0, 1.0], -1.0)
    assert math.isnan(value)


def test_dmultinom_agrees_with_scipy():
    x = [2, 1, 3]
    prob = [0.2, 0.5, 0.3]
    assert dmultinom(x, prob) == pytest.approx(stats.multinomial.pmf(x, 6, prob))


def test_dmultinom_normalises_probabilities():
    x = [2, 1, 3]
    assert dmultinom(x, [2.0, 5.0, 3.0]) == pytest.approx(dmultinom(x, [0.2, 0.5, 0.3]))


def test_dmultinom_non_integer_count():
    assert dmultinom([1.5, 2.0], [0.5, 0.5]) == 0.0


def test_dmultinom_negative_probability():
    with pytest.warns(RuntimeWarning, match="dmultinom"):
        value = dmultinom([1, 2], [-0.5, 0.5])
    assert math.isnan(value)


def test_barycentric_round_trip():
    x = np.array([0.5, 2.0, 1.5, 4.0])
    back = from_log_barycentric(to_log_barycentric(x))
    assert np.allclose(back, x / x.sum())


def test_from_log_barycentric_shift_invariant():
    y = np.array([0.1, -1.2, 2.3])
    a = from_log_barycentric(y)
    b = from_log_barycentric(y + 7.5)
    assert np.allclose(a, b)
    assert a.sum() == pytest.approx(1.0)


def test_dot_product_with_ones_is_sum():
    x = [1.5, -2.25, 4.0, 0.5]
    assert dot_product(x, np.ones(4)) == pytest.approx(math.fsum(x))


def test_dot_product_length_mismatch():
    with pytest.raises(ValueError):
        dot_product([1.0, 2.0], [1.0])


def test_exp2geom_without_step_returns_rate():
    assert exp2geom_rate_correction(0.8, 0.0) == 0.8


def test_exp2geom_inverts():
    rate, dt = 0.8, 0.25
    corrected = exp2geom_rate_correction(rate, dt)
    assert math.expm1(corrected * dt) / dt == pytest.approx(rate)


def test_rbetabinom_in_range(rng):
    draws = [rbetabinom(7, 0.3, 4.0, rng) for _ in range(300)]
    assert all(0 <= d <= 7 and d == int(d) for d in draws)


def test_dbetabinom_sums_to_one():
    total = sum(dbetabinom(x, 7, 0.35, 4.0) for x in range(8))
    assert total == pytest.approx(1.0)


def test_dbetabinom_log_matches_plain():
    assert math.exp(dbetabinom(3, 7, 0.35, 4.0, give_log=True)) == pytest.approx(
        dbetabinom(3, 7, 0.35, 4.0)
    )


def test_dbetanbinom_sums_to_one():
    total = sum(dbetanbinom(x, 2.0, 3.0, 10.0) for x in range(3000))
    assert total == pytest.approx(1.0, abs=1e-6)


def test_rbetanbinom_nonnegative_integers(rng):
    draws = [rbetanbinom(2.0, 3.0, 10.0, rng) for _ in range(300)]
    assert all(d >= 0 and d == int(d) for d in draws)