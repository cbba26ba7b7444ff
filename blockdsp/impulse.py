"""
Impulse Response Generator - FIR and Closed-Form Filter Synthesis

Each filter is described by an immutable parameter record (one dataclass
per variant). generate() dispatches on the record's type and returns raw
taps. Windowing is a separate step performed by the caller, e.g.:

    taps = generate(LowPass(cutoff=1000.0, sampling_rate=44100.0), 255)
    window.blackman(taps)

DESIGN CONSTRAINTS:
- No I/O operations
- No config module imports - all parameters are explicit
- Taps are never windowed here

FIR TAP POSITIONS:
- Tap i sits at j = i - size // 2
- fe2 = 2 * frequency / sampling_rate, sinc is the unnormalized sinc

FILTER LENGTH / TRANSITION WIDTH:
- get_filter_size(sr, delta): delayer = int(3.1 / (delta / sr) + 0.5) - 1, made even
- get_delta(sr, delayer): delayer made odd, delta = 3.1 / (delayer - 0.5) * sr
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from blockdsp.buffers import check_buffer
from blockdsp.errors import InvalidArgumentError, InvalidConfigurationError
from blockdsp.fft import FFTEngine
from blockdsp.soundmath import sinc


# =============================================================================
# PARAMETER VALIDATION
# =============================================================================

def _require_positive_finite(value: float, name: str) -> None:
    if math.isnan(value) or math.isinf(value) or value <= 0.0:
        raise InvalidConfigurationError(f"{name} must be positive and finite, got {value}")


def _require_finite(value: float, name: str) -> None:
    if math.isnan(value) or math.isinf(value):
        raise InvalidConfigurationError(f"{name} must be finite, got {value}")


# =============================================================================
# RESPONSE VARIANTS
# =============================================================================

@dataclass(frozen=True)
class LowPass:
    """
    Windowed-sinc low-pass: h[j] = fe2 * sinc(pi * fe2 * j).

    Attributes:
        cutoff: Cutoff frequency (Hz)
        sampling_rate: Sampling rate (Hz)
    """
    cutoff: float
    sampling_rate: float

    def __post_init__(self):
        _require_positive_finite(self.cutoff, 'cutoff')
        _require_positive_finite(self.sampling_rate, 'sampling_rate')


@dataclass(frozen=True)
class HighPass:
    """
    Windowed-sinc high-pass: h[j] = sinc(pi * j) - fe2 * sinc(pi * fe2 * j).

    Attributes:
        cutoff: Cutoff frequency (Hz)
        sampling_rate: Sampling rate (Hz)
    """
    cutoff: float
    sampling_rate: float

    def __post_init__(self):
        _require_positive_finite(self.cutoff, 'cutoff')
        _require_positive_finite(self.sampling_rate, 'sampling_rate')


class _Band:
    """Shared center/bandwidth handling for the band variants."""

    center: float
    bandwidth: float
    sampling_rate: float

    def _validate(self) -> None:
        _require_positive_finite(self.center, 'center frequency')
        _require_positive_finite(self.bandwidth, 'bandwidth')
        _require_positive_finite(self.sampling_rate, 'sampling_rate')
        if self.frequency_low < 0.0:
            raise InvalidConfigurationError(
                f"bandwidth {self.bandwidth} around center {self.center} "
                f"gives a negative low frequency {self.frequency_low}"
            )

    @property
    def frequency_low(self) -> float:
        return self.center - self.bandwidth / 2.0

    @property
    def frequency_high(self) -> float:
        return self.center + self.bandwidth / 2.0


@dataclass(frozen=True)
class BandPass(_Band):
    """
    Windowed-sinc band-pass between center -+ bandwidth/2:
    h[j] = feH2 * sinc(pi * feH2 * j) - feL2 * sinc(pi * feL2 * j).
    """
    center: float
    bandwidth: float
    sampling_rate: float

    def __post_init__(self):
        self._validate()


@dataclass(frozen=True)
class BandElimination(_Band):
    """
    Windowed-sinc band-stop between center -+ bandwidth/2:
    h[j] = sinc(pi * j) - feH2 * sinc(pi * feH2 * j) + feL2 * sinc(pi * feL2 * j).
    """
    center: float
    bandwidth: float
    sampling_rate: float

    def __post_init__(self):
        self._validate()


@dataclass(frozen=True)
class Comb:
    """
    Decaying echo train.

    Echo k (k = 0, 1, ...) lands at fractional position p = (k + 1) * delay,
    split linearly between samples ceil(p) - 1 and ceil(p), scaled by amplifier**k.

    Attributes:
        delay: Echo spacing in samples (may be fractional, at least 1)
        amplifier: Per-echo gain
    """
    delay: float
    amplifier: float

    def __post_init__(self):
        _require_positive_finite(self.delay, 'delay')
        if self.delay < 1.0:
            raise InvalidConfigurationError(f"delay must be at least one sample, got {self.delay}")
        _require_finite(self.amplifier, 'amplifier')


@dataclass(frozen=True)
class Resonator:
    """
    Sum of damped sinusoids.

    h[i] = sum_f sin(2 pi f i / sampling_rate) * (amplifier / (size/2)) * exp(-i^2 / strength^2)

    strength == 0 collapses the response to a single impulse of height
    `amplifier` at index 0.

    Attributes:
        frequencies: Resonant frequencies (Hz)
        sampling_rate: Sampling rate (Hz)
        amplifier: Output gain (default 1.0)
        strength: Gaussian decay constant in samples (default inf = no decay)
    """
    frequencies: Tuple[float, ...]
    sampling_rate: float
    amplifier: float = 1.0
    strength: float = math.inf

    def __post_init__(self):
        object.__setattr__(self, 'frequencies', tuple(float(f) for f in self.frequencies))
        for f in self.frequencies:
            _require_finite(f, 'resonator frequency')
        _require_positive_finite(self.sampling_rate, 'sampling_rate')
        _require_finite(self.amplifier, 'amplifier')
        if math.isnan(self.strength):
            raise InvalidConfigurationError("strength must not be NaN")


ImpulseResponse = Union[LowPass, HighPass, BandPass, BandElimination, Comb, Resonator]

FIR_VARIANTS = (LowPass, HighPass, BandPass, BandElimination)


# =============================================================================
# GENERATORS
# =============================================================================

def _tap_positions(size: int) -> np.ndarray:
    return np.arange(size, dtype=np.float64) - (size // 2)


def _low_pass(response: LowPass, size: int) -> np.ndarray:
    fe2 = 2.0 * (response.cutoff / response.sampling_rate)
    j = _tap_positions(size)
    return fe2 * sinc(np.pi * fe2 * j)


def _high_pass(response: HighPass, size: int) -> np.ndarray:
    fe2 = 2.0 * (response.cutoff / response.sampling_rate)
    j = _tap_positions(size)
    return sinc(np.pi * j) - fe2 * sinc(np.pi * fe2 * j)


def _band_pass(response: BandPass, size: int) -> np.ndarray:
    fel2 = 2.0 * (response.frequency_low / response.sampling_rate)
    feh2 = 2.0 * (response.frequency_high / response.sampling_rate)
    j = _tap_positions(size)
    return feh2 * sinc(np.pi * feh2 * j) - fel2 * sinc(np.pi * fel2 * j)


def _band_elimination(response: BandElimination, size: int) -> np.ndarray:
    fel2 = 2.0 * (response.frequency_low / response.sampling_rate)
    feh2 = 2.0 * (response.frequency_high / response.sampling_rate)
    j = _tap_positions(size)
    return sinc(np.pi * j) - feh2 * sinc(np.pi * feh2 * j) + fel2 * sinc(np.pi * fel2 * j)


def _comb(response: Comb, size: int) -> np.ndarray:
    out = np.zeros(size, dtype=np.float64)
    progress = response.delay
    echo = 0

    while True:
        value = math.ceil(progress)
        alpha = 1.0 + progress - value
        beta = 1.0 - alpha
        amp = response.amplifier ** echo
        i = int(value) - 1
        progress += response.delay

        if i >= size:
            break
        out[i] += alpha * amp
        if i + 1 >= size:
            break
        out[i + 1] += beta * amp
        echo += 1

    return out


def _resonator(response: Resonator, size: int) -> np.ndarray:
    out = np.zeros(size, dtype=np.float64)

    if response.strength == 0.0:
        out[0] = response.amplifier
        return out

    amp = response.amplifier / (size / 2.0)
    i = np.arange(size, dtype=np.float64)
    envelope = amp * np.exp(-(i ** 2) / (response.strength ** 2))
    for f in response.frequencies:
        out += np.sin(i * f * 2.0 * np.pi / response.sampling_rate) * envelope
    return out


_GENERATORS: Dict[type, Callable[[ImpulseResponse, int], np.ndarray]] = {
    LowPass: _low_pass,
    HighPass: _high_pass,
    BandPass: _band_pass,
    BandElimination: _band_elimination,
    Comb: _comb,
    Resonator: _resonator,
}


def generate(response: ImpulseResponse, size: int) -> np.ndarray:
    """
    Generate raw (unwindowed) taps.

    Parameters:
        response: One of the response variants
        size: Number of taps (>= 0)

    Returns:
        float64 array of length `size`, owned by the caller

    Raises:
        InvalidArgumentError: If size is negative or the variant is unknown
    """
    generator = _GENERATORS.get(type(response))
    if generator is None:
        raise InvalidArgumentError(f"Unknown impulse response type: {type(response).__name__}")
    if size < 0:
        raise InvalidArgumentError(f"size must be non-negative, got {size}")
    if size == 0:
        return np.zeros(0, dtype=np.float64)
    return generator(response, int(size))


def generate_into(response: ImpulseResponse, array: np.ndarray, size: Optional[int] = None) -> np.ndarray:
    """
    Write taps into the first `size` entries of `array` (default: all of it).

    The remaining entries are left untouched.
    """
    check_buffer(array, 'array', floating=True)
    if size is None:
        size = len(array)
    if size < 0 or size > len(array):
        raise InvalidArgumentError(f"size {size} out of range for array of length {len(array)}")

    array[:size] = generate(response, size)
    return array


def generate_for_delta(response: ImpulseResponse, delta: float) -> np.ndarray:
    """
    Generate an FIR response sized for a stopband transition width.

    Parameters:
        response: LowPass, HighPass, BandPass or BandElimination
        delta: Transition width (Hz)

    Returns:
        Raw taps of length get_filter_size(response.sampling_rate, delta)
    """
    if not isinstance(response, FIR_VARIANTS):
        raise InvalidArgumentError(
            f"{type(response).__name__} has no delta-derived length; pass an explicit size"
        )
    return generate(response, get_filter_size(response.sampling_rate, delta))


# =============================================================================
# LENGTH <-> TRANSITION WIDTH
# =============================================================================

def get_filter_size(sampling_rate: float, delta: float) -> int:
    """Filter length (always even) for a transition width of `delta` Hz."""
    _require_positive_finite(sampling_rate, 'sampling_rate')
    if not (delta > 0.0) or math.isinf(delta):
        raise InvalidArgumentError(f"delta must be positive and finite, got {delta}")

    delayer = int(3.1 / (delta / sampling_rate) + 0.5) - 1
    if delayer & 1:
        delayer += 1
    return delayer


def get_delta(sampling_rate: float, delayer: int) -> float:
    """Transition width (Hz) achieved by a filter of `delayer` taps (made odd)."""
    _require_positive_finite(sampling_rate, 'sampling_rate')
    if delayer < 1:
        raise InvalidArgumentError(f"delayer must be >= 1, got {delayer}")

    if delayer & 1 == 0:
        delayer -= 1
    return (3.1 / (delayer - 0.5)) * sampling_rate


# =============================================================================
# FREQUENCY SAMPLING
# =============================================================================

def frequency_sampling(magnitudes: Sequence[float]) -> np.ndarray:
    """
    Design a zero-phase FIR from sampled magnitudes.

    The half-spectrum m[0..h-1] is mirrored to [m0 .. m(h-1), m(h-1) .. m0],
    inverse transformed, and rotated by h so the main lobe is centered.

    Parameters:
        magnitudes: h magnitude samples, h a power of two

    Returns:
        2h real taps; a flat spectrum gives a unit impulse at index h
    """
    if magnitudes is None:
        raise InvalidArgumentError("magnitudes must not be None")
    magnitudes = np.asarray(magnitudes, dtype=np.float64)
    half = len(magnitudes)
    if half < 1 or half & (half - 1):
        raise InvalidArgumentError(f"number of magnitudes must be a power of two, got {half}")

    length = 2 * half
    real = np.concatenate([magnitudes, magnitudes[::-1]])
    imag = np.zeros(length, dtype=np.float64)

    FFTEngine(2 * length).transform_complex_split(real, imag, invert=True)

    return np.roll(real, half)
