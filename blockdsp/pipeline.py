"""
Sound Filter Pipeline - Mono/Stereo Orchestration

Wraps one OverlapAddFilter per channel. Stereo buffers arrive interleaved
([L0, R0, L1, R1, ...]); they are split, each channel is filtered
independently, and the result is re-interleaved.

DESIGN CONSTRAINTS:
- No I/O operations
- No config module imports - all parameters are explicit
- Channels never share state; both receive the same impulse response

SIZING:
- buffer_size is the interleaved total and must be even
- per-channel size = buffer_size / 2 (stereo) or buffer_size (mono)
- defaults: segment_size = per_channel // 8, fft_size = per_channel
"""

import numpy as np
from typing import List, Optional

from blockdsp import channel
from blockdsp.buffers import check_buffer
from blockdsp.errors import InvalidConfigurationError
from blockdsp.impulse import LowPass, generate, get_delta
from blockdsp.overlap_add import OverlapAddFilter
from blockdsp.window import blackman


class SoundFilterPipeline:
    """
    Block filter for mono or interleaved stereo audio.

    Parameters:
        stereo: True for interleaved two-channel buffers
        buffer_size: Interleaved samples per filtering() call (even)
        segment_size: Per-channel segment size (default per_channel // 8)
        fft_size: Per-channel FFT size (default per_channel)
    """

    def __init__(
        self,
        stereo: bool,
        buffer_size: int,
        segment_size: Optional[int] = None,
        fft_size: Optional[int] = None
    ) -> None:
        if buffer_size < 2 or buffer_size % 2:
            raise InvalidConfigurationError(f"buffer_size must be positive and even, got {buffer_size}")

        self._stereo = bool(stereo)
        self._buffer_size = int(buffer_size)
        per_channel = self._buffer_size // 2 if self._stereo else self._buffer_size

        if segment_size is None:
            segment_size = per_channel // 8
        if fft_size is None:
            fft_size = per_channel

        channels = 2 if self._stereo else 1
        self._filters: List[OverlapAddFilter] = [
            OverlapAddFilter(segment_size, fft_size, per_channel) for _ in range(channels)
        ]
        self._channel_buffers: List[np.ndarray] = [
            np.zeros(per_channel, dtype=np.float64) for _ in range(channels)
        ]

    @property
    def stereo(self) -> bool:
        return self._stereo

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @property
    def channel_size(self) -> int:
        return self._filters[0].buffer_size

    @property
    def segment_size(self) -> int:
        return self._filters[0].segment_size

    @property
    def fft_size(self) -> int:
        return self._filters[0].fft_size

    @property
    def max_filter_length(self) -> int:
        return self._filters[0].max_filter_length

    def set_filter(self, impulse_response) -> None:
        """Load the same impulse response into every channel and reset the stream."""
        for f in self._filters:
            f.set_filter(impulse_response)

    def filtering(self, buffer: np.ndarray, output: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Filter one buffer.

        Parameters:
            buffer: buffer_size interleaved samples
            output: Destination of the same length (default: buffer, in place)

        Returns:
            The array holding the filtered samples
        """
        check_buffer(buffer, 'buffer', length=self._buffer_size)
        if output is None:
            output = buffer
        check_buffer(output, 'output', length=self._buffer_size, floating=True)

        if self._stereo:
            left, right = self._channel_buffers
            channel.split(buffer, left, right)
            self._filters[0].apply(left)
            self._filters[1].apply(right)
            channel.join(left, right, output)
        else:
            if output is not buffer:
                output[:] = buffer
            self._filters[0].apply(output)

        return output


class Decimator:
    """
    Anti-aliased sample-rate reduction by an integer factor.

    Input runs at sampling_rate * magnification. A Blackman-windowed
    low-pass (cutoff sampling_rate/2 minus its transition width) removes
    content above the output Nyquist, then every magnification-th frame is kept.

    Parameters:
        sampling_rate: Output sampling rate (Hz)
        magnification: Integer decimation factor (1 = pass-through)
        stereo: True for interleaved two-channel buffers
        buffer_size: Interleaved samples per apply() call
    """

    def __init__(self, sampling_rate: float, magnification: int, stereo: bool, buffer_size: int) -> None:
        if magnification < 1:
            raise InvalidConfigurationError(f"magnification must be >= 1, got {magnification}")

        self.sampling_rate = sampling_rate
        self.magnification = int(magnification)
        self.stereo = bool(stereo)
        self.buffer_size = int(buffer_size)

        self._pipeline = SoundFilterPipeline(stereo, buffer_size)

        taps = self._pipeline.channel_size // 2
        input_rate = sampling_rate * magnification
        cutoff = sampling_rate / 2.0 - get_delta(input_rate, taps)
        if cutoff <= 0.0:
            raise InvalidConfigurationError(
                f"buffer_size {buffer_size} is too short for a low-pass below {sampling_rate / 2.0} Hz"
            )

        self.impulse_response = blackman(generate(LowPass(cutoff, input_rate), taps))
        self._pipeline.set_filter(self.impulse_response)

    def apply(self, buffer: np.ndarray) -> int:
        """
        Filter and decimate in place.

        Returns:
            Number of valid interleaved samples now at the start of buffer
        """
        check_buffer(buffer, 'buffer', length=self.buffer_size, floating=True)
        if self.magnification == 1:
            return self.buffer_size

        self._pipeline.filtering(buffer)

        if self.stereo:
            kept = buffer.reshape(-1, 2)[::self.magnification].ravel()
        else:
            kept = buffer[::self.magnification].copy()

        valid = len(kept)
        buffer[:valid] = kept
        return valid
