"""
FFT Engine - Mixed-Radix Complex and Real DFT

Radix-4 Cooley-Tukey stages with a radix-2 tail, preceded by an in-place
bit-reversal permutation (Ooura's general-purpose FFT package, fft4g
variant). Twiddle factors and the bit-reversal work table are built lazily
the first time a transform is requested and reused afterwards.

DESIGN CONSTRAINTS:
- No I/O operations
- No config module imports - all parameters are explicit
- Butterfly arithmetic and operation order match fft4g exactly, so outputs
  are reproducible to the last bit across runs and platforms
- Arithmetic runs on Python floats; buffers are read once and written back once

CONVENTIONS (size = length of the interleaved buffer, N = size/2 points):
- Forward complex:  X[k] = sum_j x[j] exp(+2 pi i jk/N)
- Inverse complex:  x[j] = (1/N) sum_k X[k] exp(-2 pi i jk/N)
- Forward real (size samples), packed in place:
      data[0] = R[0], data[1] = R[size/2],
      data[2k] = R[k], data[2k+1] = I[k]   (0 < k < size/2)
  where R[k] = sum_j x[j] cos(2 pi jk/size), I[k] = sum_j x[j] sin(2 pi jk/size)
- Every inverse transform scales its output by 2/size, so forward followed
  by inverse is the identity.

STATE:
- FFTEngine instances own their scratch tables and are not thread-safe.
"""

import math
import numpy as np
from typing import List, Optional

from blockdsp import channel
from blockdsp.buffers import check_buffer
from blockdsp.errors import InvalidConfigurationError


class FFTEngine:
    """
    FFT engine for one fixed transform size.

    CONTRACT:
    - size >= 4 and a power of two, else InvalidConfigurationError
    - Buffer length mismatches raise InvalidArgumentError before any write
    - transform_complex / transform_real take `size` doubles,
      transform_complex_split takes two arrays of size/2 doubles
    """

    def __init__(self, size: int) -> None:
        if not isinstance(size, (int, np.integer)) or isinstance(size, bool):
            raise InvalidConfigurationError(f"FFT size must be an integer, got {size!r}")
        if size < 4:
            raise InvalidConfigurationError(f"FFT size must be >= 4, got {size}")
        if size & (size - 1):
            raise InvalidConfigurationError(f"FFT size must be a power of two, got {size}")

        self.size: int = int(size)
        self._ip: List[int] = [0] * (self.size // 2)
        self._w: List[float] = [0.0] * (self.size // 2)
        self._interleaved: Optional[np.ndarray] = None

    def transform_complex(self, data: np.ndarray, invert: bool = False) -> None:
        """Transform interleaved complex data in place."""
        check_buffer(data, 'data', length=self.size, floating=True)

        a = data.tolist()
        _cdft(self.size, invert, a, self._ip, self._w)
        data[:] = a
        if invert:
            data *= 2.0 / self.size

    def transform_complex_split(self, real: np.ndarray, imag: np.ndarray, invert: bool = False) -> None:
        """Transform complex data held as separate real and imaginary arrays, in place."""
        half = self.size // 2
        check_buffer(real, 'real', length=half, floating=True)
        check_buffer(imag, 'imag', length=half, floating=True)

        if self._interleaved is None:
            self._interleaved = np.zeros(self.size, dtype=np.float64)

        channel.interleave_complex(real, imag, self._interleaved, half)
        self.transform_complex(self._interleaved, invert)
        channel.deinterleave_complex(self._interleaved, real, imag, half)

    def transform_real(self, data: np.ndarray, invert: bool = False) -> None:
        """Transform real data in place (see module docstring for the packed layout)."""
        check_buffer(data, 'data', length=self.size, floating=True)

        a = data.tolist()
        _rdft(self.size, invert, a, self._ip, self._w)
        data[:] = a
        if invert:
            data *= 2.0 / self.size


# =============================================================================
# DRIVERS
# =============================================================================

def _cdft(n: int, invert: bool, a: List[float], ip: List[int], w: List[float]) -> None:
    if n > (ip[0] << 2):
        _makewt(n >> 2, ip, w)

    if n > 4:
        if invert:
            _bitrv2conj(n, ip, a)
            _cftbsub(n, a, w)
        else:
            _bitrv2(n, ip, a)
            _cftfsub(n, a, w)
    elif n == 4:
        _cftfsub(n, a, w)


def _rdft(n: int, invert: bool, a: List[float], ip: List[int], w: List[float]) -> None:
    nw = ip[0]
    if n > (nw << 2):
        nw = n >> 2
        _makewt(nw, ip, w)

    nc = ip[1]
    if n > (nc << 2):
        nc = n >> 2
        _makect(nc, ip, w, nw)

    if invert:
        a[1] = 0.5 * (a[0] - a[1])
        a[0] -= a[1]
        if n > 4:
            _rftbsub(n, a, nc, w, nw)
            _bitrv2(n, ip, a)
            _cftbsub(n, a, w)
        elif n == 4:
            _cftfsub(n, a, w)
    else:
        if n > 4:
            _bitrv2(n, ip, a)
            _cftfsub(n, a, w)
            _rftfsub(n, a, nc, w, nw)
        elif n == 4:
            _cftfsub(n, a, w)

        xi = a[0] - a[1]
        a[0] += a[1]
        a[1] = xi


# =============================================================================
# TABLE INITIALIZATION
# =============================================================================

def _makewt(nw: int, ip: List[int], w: List[float]) -> None:
    """Twiddle factors for the complex stages, stored bit-reversed in w[0:nw]."""
    ip[0] = nw
    ip[1] = 1

    if nw > 2:
        nwh = nw >> 1
        delta = math.atan(1.0) / nwh
        w[0] = 1.0
        w[1] = 0.0
        w[nwh] = math.cos(delta * nwh)
        w[nwh + 1] = w[nwh]

        if nwh > 2:
            for j in range(2, nwh, 2):
                x = math.cos(delta * j)
                y = math.sin(delta * j)
                w[j] = x
                w[j + 1] = y
                w[nw - j] = y
                w[nw - j + 1] = x
            _bitrv2(nw, ip, w)


def _makect(nc: int, ip: List[int], c: List[float], offset: int) -> None:
    """Cosine/sine table for the real-transform post-processing, stored at c[offset:offset+nc]."""
    ip[1] = nc

    if nc > 1:
        nch = nc >> 1
        delta = math.atan(1.0) / nch
        c[offset] = math.cos(delta * nch)
        c[offset + nch] = 0.5 * c[offset]

        for j in range(1, nch):
            c[offset + j] = 0.5 * math.cos(delta * j)
            c[offset + nc - j] = 0.5 * math.sin(delta * j)


# =============================================================================
# BIT REVERSAL
# =============================================================================

# Work area for the bit-reversal table starts at ip[2]; ip[0:2] hold table sizes
_IP_BASE = 2


def _bitrv_table(n: int, ip: List[int]):
    ip[_IP_BASE] = 0
    l = n
    m = 1
    while (m << 3) < l:
        l >>= 1
        for j in range(m):
            ip[_IP_BASE + m + j] = ip[_IP_BASE + j] + l
        m <<= 1
    return l, m


def _swap(a: List[float], j1: int, k1: int) -> None:
    a[j1], a[j1 + 1], a[k1], a[k1 + 1] = a[k1], a[k1 + 1], a[j1], a[j1 + 1]


def _swap_conj(a: List[float], j1: int, k1: int) -> None:
    a[j1], a[j1 + 1], a[k1], a[k1 + 1] = a[k1], -a[k1 + 1], a[j1], -a[j1 + 1]


def _bitrv2(n: int, ip: List[int], a: List[float]) -> None:
    l, m = _bitrv_table(n, ip)
    m2 = 2 * m

    if (m << 3) == l:
        for k in range(m):
            for j in range(k):
                j1 = 2 * j + ip[_IP_BASE + k]
                k1 = 2 * k + ip[_IP_BASE + j]
                _swap(a, j1, k1)
                j1 += m2
                k1 += 2 * m2
                _swap(a, j1, k1)
                j1 += m2
                k1 -= m2
                _swap(a, j1, k1)
                j1 += m2
                k1 += 2 * m2
                _swap(a, j1, k1)
            j1 = 2 * k + m2 + ip[_IP_BASE + k]
            k1 = j1 + m2
            _swap(a, j1, k1)
    else:
        for k in range(1, m):
            for j in range(k):
                j1 = 2 * j + ip[_IP_BASE + k]
                k1 = 2 * k + ip[_IP_BASE + j]
                _swap(a, j1, k1)
                j1 += m2
                k1 += m2
                _swap(a, j1, k1)


def _bitrv2conj(n: int, ip: List[int], a: List[float]) -> None:
    """Bit reversal that also conjugates every element (inverse transform)."""
    l, m = _bitrv_table(n, ip)
    m2 = 2 * m

    if (m << 3) == l:
        for k in range(m):
            for j in range(k):
                j1 = 2 * j + ip[_IP_BASE + k]
                k1 = 2 * k + ip[_IP_BASE + j]
                _swap_conj(a, j1, k1)
                j1 += m2
                k1 += 2 * m2
                _swap_conj(a, j1, k1)
                j1 += m2
                k1 -= m2
                _swap_conj(a, j1, k1)
                j1 += m2
                k1 += 2 * m2
                _swap_conj(a, j1, k1)
            k1 = 2 * k + ip[_IP_BASE + k]
            a[k1 + 1] = -a[k1 + 1]
            j1 = k1 + m2
            k1 = j1 + m2
            _swap_conj(a, j1, k1)
            k1 += m2
            a[k1 + 1] = -a[k1 + 1]
    else:
        a[1] = -a[1]
        a[m2 + 1] = -a[m2 + 1]
        for k in range(1, m):
            for j in range(k):
                j1 = 2 * j + ip[_IP_BASE + k]
                k1 = 2 * k + ip[_IP_BASE + j]
                _swap_conj(a, j1, k1)
                j1 += m2
                k1 += m2
                _swap_conj(a, j1, k1)
            k1 = 2 * k + ip[_IP_BASE + k]
            a[k1 + 1] = -a[k1 + 1]
            a[k1 + m2 + 1] = -a[k1 + m2 + 1]


# =============================================================================
# BUTTERFLIES
# =============================================================================

def _cftfsub(n: int, a: List[float], w: List[float]) -> None:
    l = 2
    if n > 8:
        _cft1st(n, a, w)
        l = 8
        while (l << 2) < n:
            _cftmdl(n, l, a, w)
            l <<= 2

    if (l << 2) == n:
        for j in range(0, l, 2):
            j1 = j + l
            j2 = j1 + l
            j3 = j2 + l
            x0r = a[j] + a[j1]
            x0i = a[j + 1] + a[j1 + 1]
            x1r = a[j] - a[j1]
            x1i = a[j + 1] - a[j1 + 1]
            x2r = a[j2] + a[j3]
            x2i = a[j2 + 1] + a[j3 + 1]
            x3r = a[j2] - a[j3]
            x3i = a[j2 + 1] - a[j3 + 1]
            a[j] = x0r + x2r
            a[j + 1] = x0i + x2i
            a[j2] = x0r - x2r
            a[j2 + 1] = x0i - x2i
            a[j1] = x1r - x3i
            a[j1 + 1] = x1i + x3r
            a[j3] = x1r + x3i
            a[j3 + 1] = x1i - x3r
    else:
        for j in range(0, l, 2):
            j1 = j + l
            x0r = a[j] - a[j1]
            x0i = a[j + 1] - a[j1 + 1]
            a[j] += a[j1]
            a[j + 1] += a[j1 + 1]
            a[j1] = x0r
            a[j1 + 1] = x0i


def _cftbsub(n: int, a: List[float], w: List[float]) -> None:
    l = 2
    if n > 8:
        _cft1st(n, a, w)
        l = 8
        while (l << 2) < n:
            _cftmdl(n, l, a, w)
            l <<= 2

    if (l << 2) == n:
        for j in range(0, l, 2):
            j1 = j + l
            j2 = j1 + l
            j3 = j2 + l
            x0r = a[j] + a[j1]
            x0i = -a[j + 1] - a[j1 + 1]
            x1r = a[j] - a[j1]
            x1i = -a[j + 1] + a[j1 + 1]
            x2r = a[j2] + a[j3]
            x2i = a[j2 + 1] + a[j3 + 1]
            x3r = a[j2] - a[j3]
            x3i = a[j2 + 1] - a[j3 + 1]
            a[j] = x0r + x2r
            a[j + 1] = x0i - x2i
            a[j2] = x0r - x2r
            a[j2 + 1] = x0i + x2i
            a[j1] = x1r - x3i
            a[j1 + 1] = x1i - x3r
            a[j3] = x1r + x3i
            a[j3 + 1] = x1i + x3r
    else:
        for j in range(0, l, 2):
            j1 = j + l
            x0r = a[j] - a[j1]
            x0i = -a[j + 1] + a[j1 + 1]
            a[j] += a[j1]
            a[j + 1] = -a[j + 1] - a[j1 + 1]
            a[j1] = x0r
            a[j1 + 1] = x0i


def _cft1st(n: int, a: List[float], w: List[float]) -> None:
    x0r = a[0] + a[2]
    x0i = a[1] + a[3]
    x1r = a[0] - a[2]
    x1i = a[1] - a[3]
    x2r = a[4] + a[6]
    x2i = a[5] + a[7]
    x3r = a[4] - a[6]
    x3i = a[5] - a[7]
    a[0] = x0r + x2r
    a[1] = x0i + x2i
    a[4] = x0r - x2r
    a[5] = x0i - x2i
    a[2] = x1r - x3i
    a[3] = x1i + x3r
    a[6] = x1r + x3i
    a[7] = x1i - x3r
    wk1r = w[2]
    x0r = a[8] + a[10]
    x0i = a[9] + a[11]
    x1r = a[8] - a[10]
    x1i = a[9] - a[11]
    x2r = a[12] + a[14]
    x2i = a[13] + a[15]
    x3r = a[12] - a[14]
    x3i = a[13] - a[15]
    a[8] = x0r + x2r
    a[9] = x0i + x2i
    a[12] = x2i - x0i
    a[13] = x0r - x2r
    x0r = x1r - x3i
    x0i = x1i + x3r
    a[10] = wk1r * (x0r - x0i)
    a[11] = wk1r * (x0r + x0i)
    x0r = x3i + x1r
    x0i = x3r - x1i
    a[14] = wk1r * (x0i - x0r)
    a[15] = wk1r * (x0i + x0r)

    k1 = 0
    for j in range(16, n, 16):
        k1 += 2
        k2 = 2 * k1
        wk2r = w[k1]
        wk2i = w[k1 + 1]
        wk1r = w[k2]
        wk1i = w[k2 + 1]
        wk3r = wk1r - 2 * wk2i * wk1i
        wk3i = 2 * wk2i * wk1r - wk1i
        x0r = a[j] + a[j + 2]
        x0i = a[j + 1] + a[j + 3]
        x1r = a[j] - a[j + 2]
        x1i = a[j + 1] - a[j + 3]
        x2r = a[j + 4] + a[j + 6]
        x2i = a[j + 5] + a[j + 7]
        x3r = a[j + 4] - a[j + 6]
        x3i = a[j + 5] - a[j + 7]
        a[j] = x0r + x2r
        a[j + 1] = x0i + x2i
        x0r -= x2r
        x0i -= x2i
        a[j + 4] = wk2r * x0r - wk2i * x0i
        a[j + 5] = wk2r * x0i + wk2i * x0r
        x0r = x1r - x3i
        x0i = x1i + x3r
        a[j + 2] = wk1r * x0r - wk1i * x0i
        a[j + 3] = wk1r * x0i + wk1i * x0r
        x0r = x1r + x3i
        x0i = x1i - x3r
        a[j + 6] = wk3r * x0r - wk3i * x0i
        a[j + 7] = wk3r * x0i + wk3i * x0r

        wk1r = w[k2 + 2]
        wk1i = w[k2 + 3]
        wk3r = wk1r - 2 * wk2r * wk1i
        wk3i = 2 * wk2r * wk1r - wk1i
        x0r = a[j + 8] + a[j + 10]
        x0i = a[j + 9] + a[j + 11]
        x1r = a[j + 8] - a[j + 10]
        x1i = a[j + 9] - a[j + 11]
        x2r = a[j + 12] + a[j + 14]
        x2i = a[j + 13] + a[j + 15]
        x3r = a[j + 12] - a[j + 14]
        x3i = a[j + 13] - a[j + 15]
        a[j + 8] = x0r + x2r
        a[j + 9] = x0i + x2i
        x0r -= x2r
        x0i -= x2i
        a[j + 12] = -wk2i * x0r - wk2r * x0i
        a[j + 13] = -wk2i * x0i + wk2r * x0r
        x0r = x1r - x3i
        x0i = x1i + x3r
        a[j + 10] = wk1r * x0r - wk1i * x0i
        a[j + 11] = wk1r * x0i + wk1i * x0r
        x0r = x1r + x3i
        x0i = x1i - x3r
        a[j + 14] = wk3r * x0r - wk3i * x0i
        a[j + 15] = wk3r * x0i + wk3i * x0r


def _cftmdl(n: int, l: int, a: List[float], w: List[float]) -> None:
    m = l << 2

    for j in range(0, l, 2):
        j1 = j + l
        j2 = j1 + l
        j3 = j2 + l
        x0r = a[j] + a[j1]
        x0i = a[j + 1] + a[j1 + 1]
        x1r = a[j] - a[j1]
        x1i = a[j + 1] - a[j1 + 1]
        x2r = a[j2] + a[j3]
        x2i = a[j2 + 1] + a[j3 + 1]
        x3r = a[j2] - a[j3]
        x3i = a[j2 + 1] - a[j3 + 1]
        a[j] = x0r + x2r
        a[j + 1] = x0i + x2i
        a[j2] = x0r - x2r
        a[j2 + 1] = x0i - x2i
        a[j1] = x1r - x3i
        a[j1 + 1] = x1i + x3r
        a[j3] = x1r + x3i
        a[j3 + 1] = x1i - x3r

    wk1r = w[2]
    for j in range(m, l + m, 2):
        j1 = j + l
        j2 = j1 + l
        j3 = j2 + l
        x0r = a[j] + a[j1]
        x0i = a[j + 1] + a[j1 + 1]
        x1r = a[j] - a[j1]
        x1i = a[j + 1] - a[j1 + 1]
        x2r = a[j2] + a[j3]
        x2i = a[j2 + 1] + a[j3 + 1]
        x3r = a[j2] - a[j3]
        x3i = a[j2 + 1] - a[j3 + 1]
        a[j] = x0r + x2r
        a[j + 1] = x0i + x2i
        a[j2] = x2i - x0i
        a[j2 + 1] = x0r - x2r
        x0r = x1r - x3i
        x0i = x1i + x3r
        a[j1] = wk1r * (x0r - x0i)
        a[j1 + 1] = wk1r * (x0r + x0i)
        x0r = x3i + x1r
        x0i = x3r - x1i
        a[j3] = wk1r * (x0i - x0r)
        a[j3 + 1] = wk1r * (x0i + x0r)

    k1 = 0
    m2 = 2 * m
    for k in range(m2, n, m2):
        k1 += 2
        k2 = 2 * k1
        wk2r = w[k1]
        wk2i = w[k1 + 1]
        wk1r = w[k2]
        wk1i = w[k2 + 1]
        wk3r = wk1r - 2 * wk2i * wk1i
        wk3i = 2 * wk2i * wk1r - wk1i

        for j in range(k, l + k, 2):
            j1 = j + l
            j2 = j1 + l
            j3 = j2 + l
            x0r = a[j] + a[j1]
            x0i = a[j + 1] + a[j1 + 1]
            x1r = a[j] - a[j1]
            x1i = a[j + 1] - a[j1 + 1]
            x2r = a[j2] + a[j3]
            x2i = a[j2 + 1] + a[j3 + 1]
            x3r = a[j2] - a[j3]
            x3i = a[j2 + 1] - a[j3 + 1]
            a[j] = x0r + x2r
            a[j + 1] = x0i + x2i
            x0r -= x2r
            x0i -= x2i
            a[j2] = wk2r * x0r - wk2i * x0i
            a[j2 + 1] = wk2r * x0i + wk2i * x0r
            x0r = x1r - x3i
            x0i = x1i + x3r
            a[j1] = wk1r * x0r - wk1i * x0i
            a[j1 + 1] = wk1r * x0i + wk1i * x0r
            x0r = x1r + x3i
            x0i = x1i - x3r
            a[j3] = wk3r * x0r - wk3i * x0i
            a[j3 + 1] = wk3r * x0i + wk3i * x0r

        wk1r = w[k2 + 2]
        wk1i = w[k2 + 3]
        wk3r = wk1r - 2 * wk2r * wk1i
        wk3i = 2 * wk2r * wk1r - wk1i

        for j in range(k + m, l + (k + m), 2):
            j1 = j + l
            j2 = j1 + l
            j3 = j2 + l
            x0r = a[j] + a[j1]
            x0i = a[j + 1] + a[j1 + 1]
            x1r = a[j] - a[j1]
            x1i = a[j + 1] - a[j1 + 1]
            x2r = a[j2] + a[j3]
            x2i = a[j2 + 1] + a[j3 + 1]
            x3r = a[j2] - a[j3]
            x3i = a[j2 + 1] - a[j3 + 1]
            a[j] = x0r + x2r
            a[j + 1] = x0i + x2i
            x0r -= x2r
            x0i -= x2i
            a[j2] = -wk2i * x0r - wk2r * x0i
            a[j2 + 1] = -wk2i * x0i + wk2r * x0r
            x0r = x1r - x3i
            x0i = x1i + x3r
            a[j1] = wk1r * x0r - wk1i * x0i
            a[j1 + 1] = wk1r * x0i + wk1i * x0r
            x0r = x1r + x3i
            x0i = x1i - x3r
            a[j3] = wk3r * x0r - wk3i * x0i
            a[j3 + 1] = wk3r * x0i + wk3i * x0r


# =============================================================================
# REAL-TRANSFORM POST/PRE-PROCESSING
# =============================================================================

def _rftfsub(n: int, a: List[float], nc: int, c: List[float], offset: int) -> None:
    m = n >> 1
    ks = 2 * nc // m
    kk = 0
    for j in range(2, m, 2):
        k = n - j
        kk += ks
        wkr = 0.5 - c[offset + nc - kk]
        wki = c[offset + kk]
        xr = a[j] - a[k]
        xi = a[j + 1] + a[k + 1]
        yr = wkr * xr - wki * xi
        yi = wkr * xi + wki * xr
        a[j] -= yr
        a[j + 1] -= yi
        a[k] += yr
        a[k + 1] -= yi


def _rftbsub(n: int, a: List[float], nc: int, c: List[float], offset: int) -> None:
    a[1] = -a[1]
    m = n >> 1
    ks = 2 * nc // m
    kk = 0
    for j in range(2, m, 2):
        k = n - j
        kk += ks
        wkr = 0.5 - c[offset + nc - kk]
        wki = c[offset + kk]
        xr = a[j] - a[k]
        xi = a[j + 1] + a[k + 1]
        yr = wkr * xr + wki * xi
        yi = wkr * xi - wki * xr
        a[j] -= yr
        a[j + 1] = yi - a[j + 1]
        a[k] += yr
        a[k + 1] = yi - a[k + 1]
    a[m + 1] = -a[m + 1]
