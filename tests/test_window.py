"""
Window Function Test Suite

Tests for the in-place window library.
"""

import sys
from pathlib import Path

import pytest
import numpy as np
from scipy import special

sys.path.insert(0, str(Path(__file__).parent.parent))

from blockdsp import window
from blockdsp.errors import InvalidArgumentError


# Each window applied to [1, 1, 1]
THREE_POINT_CASES = [
    (window.hanning, [0.25, 1.0, 0.25]),
    (window.hamming, [0.31, 1.0, 0.31]),
    (window.bartlett, [1.0 / 3.0, 1.0, 1.0 / 3.0]),
    (window.nuttall, [0.052558, 1.0, 0.052558]),
    (window.blackman, [0.13, 1.0, 0.13]),
    (window.blackman_harris, [0.055645, 1.0, 0.055645]),
    (window.blackman_nuttall, [0.0613345, 1.0, 0.0613345]),
    (window.flat_top, [-0.238, 4.64, -0.238]),
    (window.welch, [5.0 / 9.0, 1.0, 5.0 / 9.0]),
]

PLAIN_WINDOWS = [case[0] for case in THREE_POINT_CASES]


class TestWindowValues:
    """Known values of each window."""

    @pytest.mark.parametrize("func,expected", THREE_POINT_CASES)
    def test_three_point(self, func, expected):
        """Window of [1, 1, 1] matches the tabulated coefficients."""
        array = np.ones(3)
        func(array)
        np.testing.assert_allclose(array, expected, atol=1e-10)

    def test_hanning_matches_closed_form(self):
        """Hann values follow 0.5 + 0.5 cos(2 pi t) with t = (i+0.5)/L - 0.5."""
        length = 16
        t = (np.arange(length) + 0.5) / length - 0.5
        array = np.ones(length)
        window.hanning(array)
        np.testing.assert_allclose(array, 0.5 + 0.5 * np.cos(2 * np.pi * t), atol=1e-15)

    def test_scales_existing_values(self):
        """Windowing multiplies the array in place."""
        array = np.full(3, 2.0)
        result = window.hanning(array)
        assert result is array
        np.testing.assert_allclose(array, [0.5, 2.0, 0.5], atol=1e-10)


class TestWindowSymmetry:
    """Symmetric form is exactly mirror-symmetric."""

    @pytest.mark.parametrize("func", PLAIN_WINDOWS)
    @pytest.mark.parametrize("length", [1, 2, 7, 64, 255])
    def test_exact_symmetry(self, func, length):
        """w[i] == w[L-1-i] bit for bit."""
        array = np.ones(length)
        func(array)
        np.testing.assert_array_equal(array, array[::-1])

    def test_kaiser_exact_symmetry(self):
        """Kaiser is also mirror-symmetric."""
        array = np.ones(100)
        window.kaiser(array, 3.0)
        np.testing.assert_array_equal(array, array[::-1])

    def test_periodic_even_length(self):
        """Periodic Hann on even L matches the DFT-even form."""
        length = 8
        array = np.ones(length)
        window.hanning(array, periodic=True)
        k = np.arange(length)
        np.testing.assert_allclose(array, 0.5 - 0.5 * np.cos(2 * np.pi * k / length), atol=1e-15)

    def test_periodic_odd_length_is_symmetric(self):
        """periodic has no effect on odd lengths."""
        a = np.ones(9)
        b = np.ones(9)
        window.blackman(a, periodic=True)
        window.blackman(b)
        np.testing.assert_array_equal(a, b)


class TestWindowEdgeCases:
    """None, empty and invalid input."""

    @pytest.mark.parametrize("func", PLAIN_WINDOWS)
    def test_none_raises(self, func):
        """None is rejected."""
        with pytest.raises(InvalidArgumentError):
            func(None)

    @pytest.mark.parametrize("func", PLAIN_WINDOWS)
    def test_empty_is_noop(self, func):
        """An empty array stays empty."""
        array = np.zeros(0)
        func(array)
        assert len(array) == 0

    def test_integer_array_raises(self):
        """Integer arrays cannot hold the tapered values."""
        with pytest.raises(InvalidArgumentError):
            window.hanning(np.ones(4, dtype=np.int64))

    def test_list_raises(self):
        """Plain lists are not accepted."""
        with pytest.raises(InvalidArgumentError):
            window.hanning([1.0, 1.0, 1.0])


class TestKaiser:
    """Tests for the Kaiser window."""

    def test_center_is_one(self):
        """Odd-length Kaiser peaks at exactly 1 in the middle."""
        array = np.ones(3)
        window.kaiser(array, 2.0)
        assert array[1] == pytest.approx(1.0, abs=1e-15)

    def test_matches_scipy_i0(self):
        """Values follow I0(pi a sqrt(1 - (2t)^2)) / I0(pi a)."""
        length, alpha = 11, 2.5
        t = (np.arange(length) + 0.5) / length - 0.5
        expected = special.i0(np.pi * alpha * np.sqrt(1 - (2 * t) ** 2)) / special.i0(np.pi * alpha)

        array = np.ones(length)
        window.kaiser(array, alpha)
        np.testing.assert_allclose(array, expected, rtol=1e-12)

    def test_alpha_zero_zeroes(self):
        """alpha == 0 zeroes the output."""
        array = np.ones(5)
        window.kaiser(array, 0.0)
        np.testing.assert_array_equal(array, np.zeros(5))

    def test_negative_alpha_raises(self):
        """Negative alpha is rejected."""
        with pytest.raises(InvalidArgumentError):
            window.kaiser(np.ones(5), -1.0)

    def test_none_raises(self):
        """None is rejected."""
        with pytest.raises(InvalidArgumentError):
            window.kaiser(None, 1.0)


class TestApplyWindow:
    """Tests for window lookup by name."""

    def test_by_name(self):
        """apply_window dispatches through WINDOWS."""
        a = np.ones(7)
        b = np.ones(7)
        window.apply_window(a, 'blackman')
        window.blackman(b)
        np.testing.assert_array_equal(a, b)

    def test_kaiser_kwargs(self):
        """Extra keyword arguments reach the window."""
        a = np.ones(7)
        b = np.ones(7)
        window.apply_window(a, 'kaiser', alpha=3.0)
        window.kaiser(b, 3.0)
        np.testing.assert_array_equal(a, b)

    @pytest.mark.parametrize("name", ['none', 'rectangular'])
    def test_rectangular_is_noop(self, name):
        """'none' and 'rectangular' leave the array unchanged."""
        array = np.arange(5, dtype=np.float64)
        window.apply_window(array, name)
        np.testing.assert_array_equal(array, np.arange(5))

    def test_unknown_name_raises(self):
        """Unknown names are rejected."""
        with pytest.raises(InvalidArgumentError):
            window.apply_window(np.ones(3), 'gaussian')

    def test_registry_complete(self):
        """Every window function is registered."""
        assert set(window.WINDOWS) == {
            'hanning', 'hamming', 'bartlett', 'nuttall', 'blackman', 'blackman_harris',
            'blackman_nuttall', 'flat_top', 'welch', 'kaiser'
        }
