"""
Audio I/O Module

PCM quantization, byte ordering and WAV reading/writing.

- Quantization clips to [-1, 1]; non-finite samples become silence
- Byte order is produced with explicit shift/mask, never by reinterpreting memory
- WAV files are read with scipy.io.wavfile; WavWriter streams 8/16-bit PCM
  block by block through soundfile, which fills in the RIFF sizes on close
"""

import numpy as np
import soundfile as sf
from pathlib import Path
from typing import Tuple
from scipy.io import wavfile

import config
from blockdsp.errors import InvalidArgumentError


# =============================================================================
# QUANTIZATION
# =============================================================================

def quantize_pcm8(samples: np.ndarray) -> np.ndarray:
    """
    Quantize to unsigned 8-bit PCM.

    round((x + 1) * 127.5), clipped to [0, 255]; NaN/inf become 127.

    Parameters:
        samples: Float samples, nominal range [-1, 1]

    Returns:
        uint8 array
    """
    x = np.asarray(samples, dtype=np.float64)
    finite = np.isfinite(x)
    safe = np.where(finite, x, 0.0)

    q = np.round((np.clip(safe, -1.0, 1.0) + 1.0) * 127.5)
    q = np.where(finite, q, 127)
    return q.astype(np.uint8)


def quantize_pcm16(samples: np.ndarray) -> np.ndarray:
    """
    Quantize to signed 16-bit PCM.

    trunc(x * 32767.5), clipped to [-32768, 32767]; NaN/inf become 0.

    Parameters:
        samples: Float samples, nominal range [-1, 1]

    Returns:
        int16 array
    """
    x = np.asarray(samples, dtype=np.float64)
    finite = np.isfinite(x)
    safe = np.where(finite, x, 0.0)

    q = np.trunc(np.clip(safe, -1.0, 1.0) * 32767.5)
    q = np.where(safe > 1.0, 32767, q)
    q = np.where(safe < -1.0, -32768, q)
    return q.astype(np.int16)


# =============================================================================
# BYTE ORDER
# =============================================================================

def reverse_bytes(value: int, width: int) -> int:
    """
    Swap the byte order of a signed integer.

    Parameters:
        value: Integer representable in `width` bits (two's complement)
        width: 16, 32 or 64

    Returns:
        Byte-swapped value, reinterpreted as signed
    """
    if width not in (16, 32, 64):
        raise InvalidArgumentError(f"width must be 16, 32 or 64, got {width}")

    n_bytes = width // 8
    unsigned = value & ((1 << width) - 1)

    swapped = 0
    for i in range(n_bytes):
        swapped = (swapped << 8) | ((unsigned >> (8 * i)) & 0xFF)

    if swapped >= 1 << (width - 1):
        swapped -= 1 << width
    return swapped


def to_pcm_bytes(samples: np.ndarray, bits: int, big_endian: bool = False) -> bytes:
    """
    Quantize samples and pack them as PCM bytes.

    Parameters:
        samples: Float samples (interleaved if multi-channel)
        bits: 8 or 16
        big_endian: Byte order for 16-bit samples (WAV uses little-endian)

    Returns:
        Packed bytes, `bits // 8` per sample
    """
    if bits == 8:
        return quantize_pcm8(samples).tobytes()
    if bits != 16:
        raise InvalidArgumentError(f"bits must be 8 or 16, got {bits}")

    q = quantize_pcm16(samples).astype(np.int32) & 0xFFFF
    low = (q & 0xFF).astype(np.uint8)
    high = ((q >> 8) & 0xFF).astype(np.uint8)

    out = np.empty(2 * len(q), dtype=np.uint8)
    if big_endian:
        out[0::2] = high
        out[1::2] = low
    else:
        out[0::2] = low
        out[1::2] = high
    return out.tobytes()


# =============================================================================
# WAV
# =============================================================================

PCM_SUBTYPES = {8: 'PCM_U8', 16: 'PCM_16'}


def _check_format(channels: int, bits: int) -> None:
    if bits not in PCM_SUBTYPES:
        raise InvalidArgumentError(f"bits must be 8 or 16, got {bits}")
    if channels not in (1, 2):
        raise InvalidArgumentError(f"channels must be 1 or 2, got {channels}")


def _to_frames(samples: np.ndarray, channels: int, bits: int) -> np.ndarray:
    """
    Quantize interleaved samples into int16 frames for libsndfile.

    8-bit values are scaled so that libsndfile's short to unsigned-byte
    conversion ((s >> 8) + 128) reproduces quantize_pcm8 exactly.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) % channels:
        raise InvalidArgumentError(f"{len(samples)} samples do not divide into {channels} channels")

    if bits == 8:
        frames = (quantize_pcm8(samples).astype(np.int16) - 128) * 256
    else:
        frames = quantize_pcm16(samples)
    return frames.reshape(-1, channels)


class WavWriter:
    """
    Streaming PCM WAV writer backed by soundfile.

    Samples are appended block by block; libsndfile patches the RIFF
    sizes and the odd-length pad byte when the writer is closed.

    Usage:
        with WavWriter(path, 44100, channels=2) as writer:
            writer.write(block)
    """

    def __init__(self, path: Path, sample_rate: int, channels: int, bits: int = config.PCM_BITS) -> None:
        _check_format(channels, bits)
        self.path = Path(path)
        self.sample_rate = int(sample_rate)
        self.channels = channels
        self.bits = bits
        self.written_bytes = 0

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = sf.SoundFile(
            str(self.path), mode='w', samplerate=self.sample_rate, channels=channels,
            subtype=PCM_SUBTYPES[bits], format='WAV'
        )

    def write(self, samples: np.ndarray) -> None:
        """Append interleaved samples."""
        if self._file is None:
            raise InvalidArgumentError("WavWriter is closed")
        frames = _to_frames(samples, self.channels, self.bits)
        self._file.write(frames)
        self.written_bytes += frames.size * self.bits // 8

    def close(self) -> None:
        if self._file is None:
            return
        self._file.close()
        self._file = None

    def __enter__(self) -> 'WavWriter':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def write_wav(path: Path, samples: np.ndarray, sample_rate: int, channels: int = 1, bits: int = config.PCM_BITS) -> None:
    """
    Write a complete WAV file in one call.

    Parameters:
        path: Output path
        samples: Interleaved float samples
        sample_rate: Sampling rate (Hz)
        channels: 1 or 2
        bits: 8 or 16
    """
    _check_format(channels, bits)
    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) % channels:
        raise InvalidArgumentError(f"{len(samples)} samples do not divide into {channels} channels")

    quantized = quantize_pcm8(samples) if bits == 8 else quantize_pcm16(samples)
    if channels == 2:
        quantized = quantized.reshape(-1, 2)

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    wavfile.write(str(path), int(sample_rate), quantized)


def load_wav(file_path: Path) -> Tuple[np.ndarray, int, int]:
    """
    Load a WAV file as interleaved float samples.

    Parameters:
        file_path: Path to WAV file

    Returns:
        Tuple of (samples, sample_rate, channels)
        samples: interleaved float64 array in range [-1.0, 1.0]

    Raises:
        FileNotFoundError: If file doesn't exist
        InvalidArgumentError: If the sample format is unsupported
    """
    sr, audio = wavfile.read(str(file_path))

    # Convert to float and normalize based on dtype
    if audio.dtype == np.uint8:
        audio = (audio.astype(np.float64) - 128.0) / 128.0
    elif audio.dtype == np.int16:
        audio = audio.astype(np.float64) / 32768.0
    elif audio.dtype == np.int32:
        audio = audio.astype(np.float64) / 2147483648.0
    elif audio.dtype in (np.float32, np.float64):
        audio = audio.astype(np.float64)
    else:
        raise InvalidArgumentError(f"Unsupported audio dtype: {audio.dtype}")

    channels = 1 if audio.ndim == 1 else audio.shape[1]
    return audio.ravel(), int(sr), channels
