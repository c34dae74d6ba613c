import numpy as np
import pytest

from leadtime_sim.simulation.quantile import sample_quantile


def test_nearest_rank_index():
    values = [5.0, 1.0, 3.0, 2.0, 4.0]
    # floor(0.95 * 4) = 3 -> fourth smallest
    assert sample_quantile(values, 0.95) == 4.0
    assert sample_quantile(values, 0.0) == 1.0
    assert sample_quantile(values, 1.0) == 5.0
    assert sample_quantile(values, 0.5) == 3.0


def test_no_interpolation_between_ranks():
    values = np.arange(1.0, 101.0)
    # floor(0.95 * 99) = 94 -> 95.0, not an interpolated 95.05
    assert sample_quantile(values, 0.95) == 95.0


def test_single_value_ignores_p():
    for p in (0.0, 0.3, 0.95, 1.0):
        assert sample_quantile([7.25], p) == 7.25


def test_order_independent():
    rng = np.random.default_rng(0)
    values = rng.normal(50.0, 10.0, size=301)
    shuffled = rng.permutation(values)
    assert sample_quantile(values, 0.9) == sample_quantile(shuffled, 0.9)


def test_result_is_member_and_monotone():
    rng = np.random.default_rng(17)
    values = rng.gamma(2.0, 3.0, size=57)

    previous = -np.inf
    for p in np.linspace(0.0, 1.0, 41):
        q = sample_quantile(values, p)
        assert q in values
        assert q >= previous
        previous = q


def test_accepts_generators():
    assert sample_quantile((v for v in [3.0, 1.0, 2.0]), 1.0) == 3.0


@pytest.mark.parametrize("p", [-0.01, 1.01])
def test_rejects_out_of_range_p(p):
    with pytest.raises(ValueError):
        sample_quantile([1.0, 2.0], p)


def test_rejects_empty_sample():
    with pytest.raises(ValueError):
        sample_quantile([], 0.5)
