"""
Overlap-Add Filter - FFT Block Convolution With Carried State

Streams a signal through a fixed impulse response one buffer at a time.
Each buffer is cut into segments; each segment is zero-padded to fft_size,
multiplied by the filter spectrum, transformed back, and the part that runs
past the segment (the overlap tail) is added into the head of the next
segment, including across apply() calls.

DESIGN CONSTRAINTS:
- No I/O operations
- No config module imports - all parameters are explicit
- Configuration is fixed at construction

CONTRACT:
- fft_size > segment_size, fft_size a power of two
- buffer_size a positive multiple of segment_size
- Output equals the linear convolution of the whole stream with the
  impulse response, truncated to the input length, provided the response
  has at most fft_size - segment_size + 1 taps
- set_filter() zeroes the overlap tail; consecutive apply() calls are one stream
- Not thread-safe: one instance per channel
"""

import warnings
import numpy as np

from blockdsp import channel
from blockdsp.buffers import check_buffer
from blockdsp.errors import InvalidArgumentError, InvalidConfigurationError
from blockdsp.fft import FFTEngine


class OverlapAddFilter:
    """
    Overlap-add convolution engine for one channel.

    Parameters:
        segment_size: Samples convolved per FFT
        fft_size: Complex FFT length (power of two, > segment_size)
        buffer_size: Samples per apply() call (multiple of segment_size)
    """

    def __init__(self, segment_size: int, fft_size: int, buffer_size: int) -> None:
        if segment_size < 1:
            raise InvalidConfigurationError(f"segment_size must be positive, got {segment_size}")
        if fft_size <= segment_size:
            raise InvalidConfigurationError(
                f"fft_size ({fft_size}) must exceed segment_size ({segment_size})"
            )
        if buffer_size < 1 or buffer_size % segment_size:
            raise InvalidConfigurationError(
                f"buffer_size ({buffer_size}) must be a positive multiple of segment_size ({segment_size})"
            )

        self._segment_size = int(segment_size)
        self._fft_size = int(fft_size)
        self._buffer_size = int(buffer_size)
        self._overlap_size = self._fft_size - self._segment_size

        # Complex transform of fft_size points (interleaved length 2 * fft_size)
        self._fft = FFTEngine(2 * self._fft_size)

        self._fr = np.zeros(self._fft_size, dtype=np.float64)
        self._fi = np.zeros(self._fft_size, dtype=np.float64)
        self._xr = np.zeros(self._fft_size, dtype=np.float64)
        self._work = np.zeros(2 * self._fft_size, dtype=np.float64)
        self._overlap = np.zeros(self._overlap_size, dtype=np.float64)

    @property
    def segment_size(self) -> int:
        return self._segment_size

    @property
    def fft_size(self) -> int:
        return self._fft_size

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @property
    def overlap_size(self) -> int:
        return self._overlap_size

    @property
    def max_filter_length(self) -> int:
        """Longest impulse response convolved without wrap-around."""
        return self._overlap_size + 1

    def set_filter(self, impulse_response) -> None:
        """
        Load an impulse response and reset the stream.

        The response is zero-padded or truncated to fft_size and its spectrum
        cached. Any pending overlap tail is discarded.

        Raises:
            InvalidArgumentError: If impulse_response is None
        """
        if impulse_response is None:
            raise InvalidArgumentError("impulse_response must not be None")
        taps = np.asarray(impulse_response, dtype=np.float64).ravel()

        if len(taps) > self.max_filter_length:
            warnings.warn(
                f"Impulse response has {len(taps)} taps but only {self.max_filter_length} "
                f"fit without circular aliasing (fft_size={self._fft_size}, "
                f"segment_size={self._segment_size})",
                RuntimeWarning
            )

        self._fr[:] = 0.0
        self._fi[:] = 0.0
        self._overlap[:] = 0.0

        count = min(len(taps), self._fft_size)
        self._fr[:count] = taps[:count]
        self._fft.transform_complex_split(self._fr, self._fi)

    def apply(self, buffer: np.ndarray) -> None:
        """
        Filter one buffer in place, continuing the stream from the previous call.

        Raises:
            InvalidArgumentError: If buffer is missing or not buffer_size long
        """
        check_buffer(buffer, 'buffer', length=self._buffer_size, floating=True)

        seg = self._segment_size
        work = self._work
        xr = self._xr

        for offset in range(0, self._buffer_size, seg):
            work[:] = 0.0
            channel.interleave(buffer, work, seg, source_offset=offset)

            self._fft.transform_complex(work)

            cr = work[0::2].copy()
            ci = work[1::2].copy()
            work[0::2] = self._fr * cr - self._fi * ci
            work[1::2] = self._fr * ci + self._fi * cr

            self._fft.transform_complex(work, invert=True)
            channel.deinterleave(work, xr, self._fft_size)

            xr[:self._overlap_size] += self._overlap
            self._overlap[:] = xr[seg:]

            buffer[offset:offset + seg] = xr[:seg]
