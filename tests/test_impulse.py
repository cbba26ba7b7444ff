"""
Impulse Response Test Suite

Tests for the FIR/comb/resonator generators, filter sizing and
frequency-sampling design.
"""

import math
import sys
from pathlib import Path

import pytest
import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from blockdsp.errors import InvalidArgumentError, InvalidConfigurationError
from blockdsp.impulse import (
    BandElimination, BandPass, Comb, HighPass, LowPass, Resonator,
    frequency_sampling, generate, generate_for_delta, generate_into,
    get_delta, get_filter_size,
)


SR = 44100.0


def positions(size: int) -> np.ndarray:
    return np.arange(size) - size // 2


def np_sinc(x: np.ndarray) -> np.ndarray:
    """Unnormalized sinc via numpy's normalized one."""
    return np.sinc(x / np.pi)


class TestFIRFormulas:
    """Windowed-sinc formulas, before windowing."""

    def test_low_pass(self):
        """h[j] = fe2 sinc(pi fe2 j), centered at size // 2."""
        size = 101
        fe2 = 2.0 * 1000.0 / SR
        taps = generate(LowPass(1000.0, SR), size)

        expected = fe2 * np_sinc(np.pi * fe2 * positions(size))
        np.testing.assert_allclose(taps, expected, atol=1e-15)
        assert taps[size // 2] == pytest.approx(fe2)

    def test_high_pass(self):
        """h = delta - low-pass."""
        size = 64
        fe2 = 2.0 * 5000.0 / SR
        taps = generate(HighPass(5000.0, SR), size)

        j = positions(size)
        expected = np_sinc(np.pi * j) - fe2 * np_sinc(np.pi * fe2 * j)
        np.testing.assert_allclose(taps, expected, atol=1e-14)
        assert taps[size // 2] == pytest.approx(1.0 - fe2)

    def test_band_pass(self):
        """h = lowpass(high edge) - lowpass(low edge)."""
        size = 65
        taps = generate(BandPass(1000.0, 400.0, SR), size)

        j = positions(size)
        feh2 = 2.0 * 1200.0 / SR
        fel2 = 2.0 * 800.0 / SR
        expected = feh2 * np_sinc(np.pi * feh2 * j) - fel2 * np_sinc(np.pi * fel2 * j)
        np.testing.assert_allclose(taps, expected, atol=1e-15)

    def test_band_elimination_is_complement(self):
        """Band-elimination + band-pass == unit impulse at the center."""
        size = 65
        bp = generate(BandPass(1000.0, 400.0, SR), size)
        be = generate(BandElimination(1000.0, 400.0, SR), size)

        impulse = np.zeros(size)
        impulse[size // 2] = 1.0
        np.testing.assert_allclose(bp + be, impulse, atol=1e-14)

    def test_low_pass_dc_gain_near_one(self):
        """A long low-pass passes DC with unit gain."""
        taps = generate(LowPass(2000.0, SR), 2001)
        assert np.sum(taps) == pytest.approx(1.0, abs=0.01)

    def test_band_frequencies(self):
        """Band edges are center -+ bandwidth/2."""
        band = BandPass(1000.0, 500.0, SR)
        assert band.frequency_low == 750.0
        assert band.frequency_high == 1250.0


class TestParameterValidation:
    """Construction-time checks."""

    @pytest.mark.parametrize("cutoff", [0.0, -1.0, math.inf, math.nan])
    def test_low_pass_cutoff(self, cutoff):
        """Cutoff must be positive and finite."""
        with pytest.raises(InvalidConfigurationError):
            LowPass(cutoff, SR)

    @pytest.mark.parametrize("rate", [0.0, -44100.0, math.inf])
    def test_sampling_rate(self, rate):
        """Sampling rate must be positive and finite."""
        with pytest.raises(InvalidConfigurationError):
            HighPass(1000.0, rate)

    @pytest.mark.parametrize("cls", [BandPass, BandElimination])
    def test_band_bandwidth(self, cls):
        """Bandwidth must be positive."""
        with pytest.raises(InvalidConfigurationError):
            cls(1000.0, 0.0, SR)
        with pytest.raises(InvalidConfigurationError):
            cls(1000.0, -10.0, SR)

    @pytest.mark.parametrize("cls", [BandPass, BandElimination])
    def test_band_negative_low_edge(self, cls):
        """Bandwidth wider than twice the center is rejected."""
        with pytest.raises(InvalidConfigurationError):
            cls(100.0, 300.0, SR)

    def test_errors_are_argument_errors(self):
        """Configuration errors also satisfy InvalidArgumentError and ValueError."""
        with pytest.raises(InvalidArgumentError):
            BandPass(1000.0, math.inf, SR)
        with pytest.raises(ValueError):
            LowPass(-1.0, SR)

    def test_comb_delay(self):
        """Comb delay must be positive."""
        with pytest.raises(InvalidConfigurationError):
            Comb(0.0, 0.5)

    @pytest.mark.parametrize("delay", [0.5, 1e-12])
    def test_comb_sub_sample_delay(self, delay):
        """Echo spacing below one sample is rejected."""
        with pytest.raises(InvalidConfigurationError):
            Comb(delay, 0.5)

    def test_resonator_nan_strength(self):
        """NaN strength is rejected."""
        with pytest.raises(InvalidConfigurationError):
            Resonator([440.0], SR, strength=math.nan)

    def test_variants_are_immutable(self):
        """Parameter records are frozen."""
        lp = LowPass(1000.0, SR)
        with pytest.raises(AttributeError):
            lp.cutoff = 2000.0


class TestComb:
    """Comb echo train."""

    def test_integer_delay(self):
        """Echoes land at delay - 1, 2*delay - 1, ... with gain amplifier**k."""
        taps = generate(Comb(2.0, 0.5), 10)
        np.testing.assert_allclose(taps, [0, 1, 0, 0.5, 0, 0.25, 0, 0.125, 0, 0.0625])

    def test_unit_delay(self):
        """The shortest spacing puts an echo on every sample."""
        taps = generate(Comb(1.0, 0.5), 4)
        np.testing.assert_allclose(taps, [1.0, 0.5, 0.25, 0.125])

    def test_fractional_delay(self):
        """Fractional positions split linearly between neighbours."""
        taps = generate(Comb(1.5, 1.0), 6)
        np.testing.assert_allclose(taps, [0, 0.5, 1.5, 0, 0.5, 1.5])

    def test_delay_past_end(self):
        """A delay longer than the buffer yields zeros."""
        taps = generate(Comb(20.0, 0.5), 8)
        np.testing.assert_array_equal(taps, np.zeros(8))


class TestResonator:
    """Damped-sinusoid resonator."""

    def test_formula(self):
        """h[i] = sum_f sin(2 pi f i / sr) * amp/(size/2) * exp(-i^2/s^2)."""
        size = 32
        res = Resonator([440.0, 1000.0], SR, amplifier=2.0, strength=10.0)
        taps = generate(res, size)

        i = np.arange(size)
        envelope = (2.0 / (size / 2.0)) * np.exp(-(i ** 2) / 100.0)
        expected = (np.sin(2 * np.pi * 440.0 * i / SR) + np.sin(2 * np.pi * 1000.0 * i / SR)) * envelope
        np.testing.assert_allclose(taps, expected, atol=1e-15)

    def test_infinite_strength_has_no_decay(self):
        """Default strength (inf) leaves the sinusoid undamped."""
        size = 16
        taps = generate(Resonator([1000.0], SR), size)
        i = np.arange(size)
        np.testing.assert_allclose(taps, np.sin(2 * np.pi * 1000.0 * i / SR) / (size / 2.0), atol=1e-15)

    def test_zero_strength_is_impulse(self):
        """strength == 0 gives a single impulse of height amplifier."""
        taps = generate(Resonator([440.0], SR, amplifier=0.7, strength=0.0), 8)
        expected = np.zeros(8)
        expected[0] = 0.7
        np.testing.assert_array_equal(taps, expected)

    def test_frequencies_stored_as_tuple(self):
        """Frequencies are copied into a tuple."""
        freqs = [440.0]
        res = Resonator(freqs, SR)
        freqs.append(880.0)
        assert res.frequencies == (440.0,)


class TestGenerate:
    """generate / generate_into / generate_for_delta."""

    def test_zero_size(self):
        """Size 0 gives an empty array."""
        assert len(generate(LowPass(1000.0, SR), 0)) == 0

    def test_negative_size(self):
        """Negative sizes raise."""
        with pytest.raises(InvalidArgumentError):
            generate(LowPass(1000.0, SR), -1)

    def test_unknown_variant(self):
        """Objects that are not response variants raise."""
        with pytest.raises(InvalidArgumentError):
            generate("lowpass", 16)

    def test_generate_into_prefix(self):
        """generate_into writes only the first `size` entries."""
        array = np.full(10, 9.0)
        generate_into(LowPass(1000.0, SR), array, 6)

        np.testing.assert_allclose(array[:6], generate(LowPass(1000.0, SR), 6))
        np.testing.assert_array_equal(array[6:], np.full(4, 9.0))

    def test_generate_into_whole_array(self):
        """Default size is the whole array."""
        array = np.zeros(12)
        generate_into(HighPass(3000.0, SR), array)
        np.testing.assert_allclose(array, generate(HighPass(3000.0, SR), 12))

    def test_generate_into_size_too_large(self):
        """size beyond the array raises."""
        with pytest.raises(InvalidArgumentError):
            generate_into(LowPass(1000.0, SR), np.zeros(4), 5)

    def test_generate_for_delta(self):
        """Length follows get_filter_size."""
        taps = generate_for_delta(LowPass(1000.0, SR), 200.0)
        assert len(taps) == 684

    def test_generate_for_delta_rejects_comb(self):
        """Comb and resonator have no delta-derived length."""
        with pytest.raises(InvalidArgumentError):
            generate_for_delta(Comb(10.0, 0.5), 200.0)


class TestFilterSizing:
    """Length <-> transition width."""

    def test_filter_size_default(self):
        """200 Hz at 44.1 kHz needs 684 taps."""
        assert get_filter_size(44100.0, 200.0) == 684

    @pytest.mark.parametrize("delta", [50.0, 100.0, 333.0, 1000.0, 5000.0])
    def test_filter_size_always_even(self, delta):
        """Filter sizes are even."""
        assert get_filter_size(SR, delta) % 2 == 0

    def test_filter_size_invalid_delta(self):
        """Non-positive delta raises."""
        with pytest.raises(InvalidArgumentError):
            get_filter_size(SR, 0.0)

    def test_get_delta(self):
        """Even lengths are made odd before computing the width."""
        assert get_delta(SR, 684) == pytest.approx(3.1 / 682.5 * SR)
        assert get_delta(SR, 683) == get_delta(SR, 684)

    def test_get_delta_inverts_filter_size(self):
        """get_delta(get_filter_size(delta)) is close to delta."""
        size = get_filter_size(SR, 200.0)
        assert get_delta(SR, size) == pytest.approx(200.0, rel=0.01)

    def test_get_delta_invalid(self):
        """delayer < 1 raises."""
        with pytest.raises(InvalidArgumentError):
            get_delta(SR, 0)


class TestFrequencySampling:
    """Zero-phase FIR design from sampled magnitudes."""

    def test_flat_spectrum_is_centered_impulse(self):
        """All-ones magnitudes give a unit impulse at index h."""
        taps = frequency_sampling(np.ones(16))

        expected = np.zeros(32)
        expected[16] = 1.0
        np.testing.assert_allclose(taps, expected, atol=1e-12)

    def test_matches_numpy(self):
        """Taps are the rotated real part of the inverse DFT of the mirrored spectrum."""
        magnitudes = np.linspace(1.0, 0.0, 32)
        taps = frequency_sampling(magnitudes)

        spectrum = np.concatenate([magnitudes, magnitudes[::-1]])
        expected = np.roll(np.real(np.fft.fft(spectrum)) / 64, 32)

        assert len(taps) == 64
        np.testing.assert_allclose(taps, expected, atol=1e-12)

    def test_dc_gain(self):
        """Sum of taps equals the DC magnitude."""
        magnitudes = np.linspace(0.8, 0.1, 8)
        assert np.sum(frequency_sampling(magnitudes)) == pytest.approx(0.8, abs=1e-12)

    def test_not_power_of_two(self):
        """Magnitude count must be a power of two."""
        with pytest.raises(InvalidArgumentError):
            frequency_sampling(np.ones(12))

    def test_none(self):
        """None is rejected."""
        with pytest.raises(InvalidArgumentError):
            frequency_sampling(None)
