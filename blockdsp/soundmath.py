"""
Sound Math Module - Scalar Helpers for Filter Design

DESIGN CONSTRAINTS:
- No I/O operations
- No config module imports - all parameters are explicit
- Only numpy dependency

CONTRACT:
- sinc is the unnormalized sinc: sin(x)/x with sinc(0) == 1.0 exactly.
  (numpy.sinc is the normalized variant and is not used here.)
- Non-finite input to sinc yields NaN, never an exception
- bessel0 is the truncated power series of the modified Bessel function
  of the first kind, order 0
"""

import numpy as np
from typing import Union

from blockdsp.errors import InvalidArgumentError


ArrayOrFloat = Union[float, np.ndarray]

# Terms of the I0 power series used by default
DEFAULT_BESSEL_TERMS: int = 100


def sinc(x: ArrayOrFloat) -> ArrayOrFloat:
    """
    Unnormalized sinc function.

    Parameters:
        x: Scalar or array of arguments (radians)

    Returns:
        sin(x)/x elementwise, 1.0 where x == 0, NaN where x is +-inf or NaN.
        A scalar input returns a Python float.
    """
    x = np.asarray(x, dtype=np.float64)
    with np.errstate(invalid='ignore', divide='ignore'):
        y = np.where(x == 0.0, 1.0, np.sin(x) / x)
    if y.ndim == 0:
        return float(y)
    return y


def bessel0(x: float, terms: int = DEFAULT_BESSEL_TERMS) -> float:
    """
    Modified Bessel function of the first kind, order 0.

    I0(x) = sum_{i=0}^{terms-1} (1/i!)^2 * (x/2)^(2i)

    Each term is derived from the previous one, which keeps large arguments
    from overflowing the intermediate power.

    Parameters:
        x: Non-negative argument
        terms: Number of series terms (0 returns 0.0)

    Returns:
        Series approximation of I0(x)

    Raises:
        InvalidArgumentError: If x < 0 or terms < 0
    """
    if x < 0.0:
        raise InvalidArgumentError(f"bessel0 argument must be non-negative, got {x}")
    if terms < 0:
        raise InvalidArgumentError(f"bessel0 term count must be non-negative, got {terms}")

    half_sq = (x / 2.0) ** 2
    term = 1.0
    total = 0.0
    for i in range(terms):
        if i > 0:
            term *= half_sq / (i * i)
        total += term
    return total


def inverted_factorial(n: int) -> float:
    """
    Compute 1/n!.

    Raises:
        InvalidArgumentError: If n < 0
    """
    if n < 0:
        raise InvalidArgumentError(f"inverted_factorial requires n >= 0, got {n}")

    y = 1.0
    while n > 1:
        y *= 1.0 / n
        n -= 1
    return y
