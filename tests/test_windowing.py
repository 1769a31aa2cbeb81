import numpy as np
import pytest

from src.transforms.windowing import Window, window
from src.utils.errors import DimensionMismatch


def test_invalid_window_is_black_with_declared_size() -> None:
    m = np.arange(6, dtype=np.float64).reshape(2, 3)
    out = window(m, Window(low=500, high=100), 4, 3)
    assert out.shape == (4, 3)
    assert np.all(out == 0)


def test_equal_bounds_are_invalid() -> None:
    out = window(np.ones((2, 2)), Window(low=40, high=40), 2, 2)
    np.testing.assert_array_equal(out, np.zeros((2, 2)))


def test_boundary_and_clamp() -> None:
    m = np.array([[-1000, 0], [500, 3000]], dtype=np.float64)
    out = window(m, Window(low=0, high=1000), 2, 2)
    np.testing.assert_array_equal(out, [[0.0, 0.0], [127.5, 255.0]])


def test_output_stays_in_display_range() -> None:
    m = np.linspace(-3000, 3000, 60).reshape(6, 10)
    out = window(m, Window(low=-160, high=240), 6, 10)
    assert out.min() >= 0.0
    assert out.max() <= 255.0


def test_mapping_is_non_decreasing() -> None:
    values = np.sort(np.random.default_rng(0).uniform(-2000, 2000, size=200)).reshape(1, -1)
    out = window(values, Window(low=-100, high=300), 1, 200)
    assert np.all(np.diff(out[0]) >= 0)


def test_input_is_not_mutated() -> None:
    m = np.array([[-50.0, 50.0]])
    before = m.copy()
    window(m, Window(0, 100), 1, 2)
    np.testing.assert_array_equal(m, before)


def test_declared_size_must_match_matrix() -> None:
    with pytest.raises(DimensionMismatch) as exc_info:
        window(np.zeros((2, 3)), Window(0, 100), 3, 2)
    assert exc_info.value.declared == (3, 2)
    assert exc_info.value.actual == (2, 3)


def test_negative_declared_size_is_rejected() -> None:
    with pytest.raises(DimensionMismatch):
        window(None, Window(10, 0), -1, 4)


def test_center_width_convention() -> None:
    w = Window.from_center_width(40, 80)
    assert (w.low, w.high) == (0.0, 80.0)
    assert w.center == 40.0
    assert w.width == 80.0
    assert w.is_valid
    assert not Window.from_center_width(40, 0).is_valid
