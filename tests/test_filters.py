import numpy as np
import pytest

from rppg.filters import (
    cardiac_filter,
    detrend,
    highpass,
    moving_average,
    normalize,
    respiratory_filter,
    trailing_mean,
)


def test_detrend_constant_is_zero():
    assert np.allclose(detrend(np.full(50, 3.7)), 0.0)


def test_detrend_removes_linear_ramp_in_interior():
    ramp = np.arange(30, dtype=float)
    # half-window shrinks to 30 // 3 = 10 on this short input
    assert np.allclose(detrend(ramp, half_window=60)[10:20], 0.0)


def test_moving_average_clips_at_edges():
    assert moving_average([0, 0, 3, 0, 0], 3).tolist() == pytest.approx([0, 1, 1, 1, 0])


def test_trailing_mean_is_causal():
    assert trailing_mean([3, 3, 6], 1).tolist() == pytest.approx([3, 3, 4.5])


def test_highpass_removes_offset():
    t = np.arange(200) / 30.0
    x = 5.0 + np.sin(2 * np.pi * 1.5 * t)
    assert abs(highpass(x, 40)[50:150].mean()) < 0.05


def test_normalize_range():
    assert normalize([1, 3, 2]).tolist() == pytest.approx([0, 1, 0.5])


def test_normalize_flat_signal():
    assert normalize(np.full(10, 2.0)).tolist() == [0.5] * 10
    assert normalize(np.array([]).astype(float)).size == 0


def test_filters_do_not_mutate_input():
    x = np.linspace(0, 1, 40)
    before = x.copy()
    cardiac_filter(x)
    respiratory_filter(x, 10)
    assert np.array_equal(x, before)


def test_cardiac_filter_output_is_normalised():
    t = np.arange(300) / 30.0
    out = cardiac_filter(np.sin(2 * np.pi * 1.2 * t) + 0.01 * t, highpass_window=40)
    assert out.min() == pytest.approx(0.0)
    assert out.max() == pytest.approx(1.0)


@pytest.mark.parametrize("call", [
    lambda: detrend(np.ones(10), half_window=0),
    lambda: moving_average(np.ones(10), window=0),
    lambda: trailing_mean(np.ones(10), window=-1),
    lambda: detrend(np.ones((3, 3))),
])
def test_invalid_arguments(call):
    with pytest.raises(ValueError):
        call()
