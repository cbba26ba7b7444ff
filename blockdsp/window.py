"""
Window Function Library - In-Place Tapering Envelopes

DESIGN CONSTRAINTS:
- No I/O operations
- No config module imports - all parameters are explicit
- Functions multiply the caller's array in place and return it

SAMPLE POSITIONS:
- Sample i of an L-point window sits at k = i + 0.5, giving the centered
  coordinate t = k/L - 0.5 in (-0.5, 0.5). Every window is then a function
  of t, and the result satisfies w[i] == w[L-1-i] exactly for all L.
- periodic=True on an even length uses k = i instead (DFT-even form). Such
  windows are not mirror-symmetric.

CONTRACT:
- None (or a non-array) raises InvalidArgumentError
- An empty array is left untouched
- kaiser(alpha=0) zeroes the array
"""

import numpy as np
from typing import Callable, Dict, Sequence

from blockdsp.buffers import check_buffer
from blockdsp.errors import InvalidArgumentError
from blockdsp.soundmath import bessel0


# =============================================================================
# COSINE-SUM COEFFICIENTS
# =============================================================================

# w(t) = sum_m a_m cos(2 pi m t) on the centered coordinate
HANNING_COEFFICIENTS = (0.5, 0.5)
HAMMING_COEFFICIENTS = (0.54, 0.46)
BLACKMAN_COEFFICIENTS = (0.42, 0.5, 0.08)
NUTTALL_COEFFICIENTS = (0.355768, 0.487396, 0.144232, 0.012604)
BLACKMAN_HARRIS_COEFFICIENTS = (0.35875, 0.48829, 0.14128, 0.01168)
BLACKMAN_NUTTALL_COEFFICIENTS = (0.3635819, 0.4891775, 0.1365995, 0.0106411)
FLAT_TOP_COEFFICIENTS = (1.0, 1.93, 1.29, 0.388, 0.032)


# =============================================================================
# HELPERS
# =============================================================================

def _positions(length: int, periodic: bool) -> np.ndarray:
    """Centered coordinate t for each sample."""
    k = np.arange(length, dtype=np.float64)
    if not (periodic and length % 2 == 0):
        k += 0.5
    return k / length - 0.5


def _taper(array: np.ndarray, envelope: Callable[[np.ndarray], np.ndarray], periodic: bool) -> np.ndarray:
    check_buffer(array, 'array', floating=True)
    length = len(array)
    if length == 0:
        return array

    w = envelope(_positions(length, periodic))
    if not (periodic and length % 2 == 0):
        # Mirror the first half so rounding cannot break symmetry
        w[(length + 1) // 2:] = w[:length // 2][::-1]

    array *= w
    return array


def _cosine_sum(coefficients: Sequence[float]) -> Callable[[np.ndarray], np.ndarray]:
    def envelope(t: np.ndarray) -> np.ndarray:
        w = np.zeros_like(t)
        for m, a in enumerate(coefficients):
            w += a * np.cos(2.0 * np.pi * m * t)
        return w
    return envelope


# =============================================================================
# WINDOWS
# =============================================================================

def hanning(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    """Hann window: 0.5 + 0.5 cos(2 pi t)."""
    return _taper(array, _cosine_sum(HANNING_COEFFICIENTS), periodic)


def hamming(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    """Hamming window: 0.54 + 0.46 cos(2 pi t)."""
    return _taper(array, _cosine_sum(HAMMING_COEFFICIENTS), periodic)


def bartlett(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    """Triangular window: 1 - 2|t|."""
    return _taper(array, lambda t: 1.0 - 2.0 * np.abs(t), periodic)


def nuttall(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    return _taper(array, _cosine_sum(NUTTALL_COEFFICIENTS), periodic)


def blackman(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    return _taper(array, _cosine_sum(BLACKMAN_COEFFICIENTS), periodic)


def blackman_harris(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    return _taper(array, _cosine_sum(BLACKMAN_HARRIS_COEFFICIENTS), periodic)


def blackman_nuttall(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    return _taper(array, _cosine_sum(BLACKMAN_NUTTALL_COEFFICIENTS), periodic)


def flat_top(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    """Flat-top window (unnormalized, peak 4.64)."""
    return _taper(array, _cosine_sum(FLAT_TOP_COEFFICIENTS), periodic)


def welch(array: np.ndarray, periodic: bool = False) -> np.ndarray:
    """Welch (parabolic) window: 1 - (2t)^2."""
    return _taper(array, lambda t: 1.0 - (2.0 * t) ** 2, periodic)


def kaiser(array: np.ndarray, alpha: float, periodic: bool = False) -> np.ndarray:
    """
    Kaiser window.

    w(t) = I0(pi * alpha * sqrt(1 - (2t)^2)) / I0(pi * alpha)

    Parameters:
        array: Buffer to taper in place
        alpha: Shape parameter (0 zeroes the array, larger = narrower)
        periodic: Use the DFT-even form on even lengths

    Returns:
        The tapered array
    """
    check_buffer(array, 'array', floating=True)
    if alpha < 0.0:
        raise InvalidArgumentError(f"kaiser alpha must be non-negative, got {alpha}")
    if alpha == 0.0:
        array[:] = 0.0
        return array

    pa = np.pi * alpha
    denominator = bessel0(pa)

    def envelope(t: np.ndarray) -> np.ndarray:
        r = np.sqrt(np.clip(1.0 - (2.0 * t) ** 2, 0.0, None))
        return np.array([bessel0(pa * v) for v in r]) / denominator

    return _taper(array, envelope, periodic)


# Name -> window function (kaiser takes an extra alpha argument)
WINDOWS: Dict[str, Callable[..., np.ndarray]] = {
    'hanning': hanning,
    'hamming': hamming,
    'bartlett': bartlett,
    'nuttall': nuttall,
    'blackman': blackman,
    'blackman_harris': blackman_harris,
    'blackman_nuttall': blackman_nuttall,
    'flat_top': flat_top,
    'welch': welch,
    'kaiser': kaiser,
}


def apply_window(array: np.ndarray, name: str, **kwargs) -> np.ndarray:
    """
    Apply a window by name.

    Parameters:
        array: Buffer to taper in place
        name: Key of WINDOWS, or 'none' / 'rectangular' for no tapering
        **kwargs: Passed through (e.g. alpha for kaiser)

    Returns:
        The tapered array

    Raises:
        InvalidArgumentError: If the name is unknown
    """
    if name in ('none', 'rectangular'):
        return check_buffer(array, 'array', floating=True)
    if name not in WINDOWS:
        raise InvalidArgumentError(
            f"Unknown window: {name}. Expected one of {sorted(WINDOWS)}"
        )
    return WINDOWS[name](array, **kwargs)
