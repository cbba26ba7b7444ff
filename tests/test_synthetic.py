"""
Synthetic Signal Test Suite

End-to-end tests using generated signals with known spectral content.
No external audio files required.
"""

import sys
from pathlib import Path

import pytest
import numpy as np
from scipy import signal as scipy_signal

sys.path.insert(0, str(Path(__file__).parent.parent))

from blockdsp import audio_io
from blockdsp.accumulator import BlockAccumulator
from blockdsp.filter_params import (
    BlockParams, DesignParams, FilterConfig, design_impulse_response, make_pipeline
)


# =============================================================================
# SYNTHETIC SIGNAL GENERATORS
# =============================================================================

def generate_sine_mix(
    duration: float = 1.0,
    sr: int = 44100,
    frequencies: tuple = (220.0, 1000.0, 8000.0),
    amplitude: float = 0.25
) -> np.ndarray:
    """
    Generate a sum of equal-amplitude sine tones.

    Parameters:
        duration: Duration in seconds
        sr: Sample rate
        frequencies: Tone frequencies in Hz
        amplitude: Amplitude of each tone

    Returns:
        Mono float64 array
    """
    t = np.arange(int(duration * sr)) / sr
    audio = np.zeros_like(t)
    for f in frequencies:
        audio += amplitude * np.sin(2 * np.pi * f * t)
    return audio


def generate_sweep(duration: float = 1.0, sr: int = 44100, f0: float = 50.0, f1: float = 15000.0) -> np.ndarray:
    """
    Generate a logarithmic sine sweep at half scale.

    Returns:
        Mono float64 array
    """
    f1 = min(f1, 0.45 * sr)
    t = np.arange(int(duration * sr)) / sr
    return 0.5 * scipy_signal.chirp(t, f0=f0, t1=duration, f1=f1, method='logarithmic')


def generate_noise_burst(duration: float = 1.0, sr: int = 44100, seed: int = 0) -> np.ndarray:
    """
    Generate silence with a white-noise burst in the middle third.

    Returns:
        Mono float64 array
    """
    samples = int(duration * sr)
    audio = np.zeros(samples)
    rng = np.random.default_rng(seed)
    start, stop = samples // 3, 2 * samples // 3
    audio[start:stop] = 0.5 * rng.uniform(-1.0, 1.0, stop - start)
    return audio


def generate_stereo_pair(
    duration: float = 1.0,
    sr: int = 44100,
    left_hz: float = 440.0,
    right_hz: float = 6000.0
) -> np.ndarray:
    """
    Generate an interleaved stereo signal with a different tone per channel.

    Returns:
        Interleaved float64 array [L0, R0, L1, R1, ...]
    """
    t = np.arange(int(duration * sr)) / sr
    out = np.empty(2 * len(t))
    out[0::2] = 0.5 * np.sin(2 * np.pi * left_hz * t)
    out[1::2] = 0.5 * np.sin(2 * np.pi * right_hz * t)
    return out


def tone_amplitude(audio: np.ndarray, freq: float, sr: int) -> float:
    """Amplitude of one sinusoidal component (audio spans whole periods)."""
    t = np.arange(len(audio)) / sr
    return 2.0 * abs(np.sum(audio * np.exp(-2j * np.pi * freq * t))) / len(audio)


def run_filter(samples: np.ndarray, cfg: FilterConfig, chunk: int = 333) -> np.ndarray:
    """Stream samples through a pipeline built from cfg, return filtered output."""
    pipeline = make_pipeline(cfg)
    pipeline.set_filter(design_impulse_response(cfg))

    blocks = []

    def flush(block):
        blocks.append(pipeline.filtering(block, np.zeros_like(block)))

    acc = BlockAccumulator(pipeline.buffer_size, flush)
    for start in range(0, len(samples), chunk):
        acc.push(samples[start:start + chunk])
    valid = acc.close()

    out = np.concatenate(blocks)
    if valid:
        out = out[:len(out) - pipeline.buffer_size + valid]
    return out


# Small sizes keep the pure-Python FFT fast
SR = 8000
SMALL_BLOCK = BlockParams(buffer_size=1024, segment_size=64, fft_size=256)


# =============================================================================
# TESTS
# =============================================================================

def test_generators_shapes():
    """Generators produce the documented lengths and ranges."""
    assert len(generate_sine_mix(0.5, SR)) == 4000
    assert len(generate_sweep(0.5, SR)) == 4000
    assert len(generate_noise_burst(0.5, SR)) == 4000
    assert len(generate_stereo_pair(0.5, SR)) == 8000

    for audio in (generate_sine_mix(0.5, SR), generate_sweep(0.5, SR), generate_noise_burst(0.5, SR)):
        assert np.max(np.abs(audio)) <= 1.0


def test_noise_burst_silent_outside_burst():
    """Noise burst is silent in the first and last thirds."""
    audio = generate_noise_burst(0.3, SR)
    n = len(audio)
    assert np.all(audio[:n // 3] == 0.0)
    assert np.all(audio[2 * n // 3:] == 0.0)
    assert np.any(audio[n // 3:2 * n // 3] != 0.0)


def test_lowpass_removes_high_tone():
    """A 1 kHz low-pass keeps a 250 Hz tone and removes a 3 kHz tone."""
    cfg = FilterConfig(
        sample_rate=SR,
        stereo=False,
        block=SMALL_BLOCK,
        design=DesignParams(kind='lowpass', cutoff_hz=1000.0, delta_hz=200.0)
    )
    audio = generate_sine_mix(1.0, SR, frequencies=(250.0, 3000.0))
    out = run_filter(audio, cfg)

    assert len(out) == len(audio)

    # Skip the first 0.25 s (filter delay and start-up), analyse 0.5 s
    steady = out[2000:6000]
    assert tone_amplitude(steady, 250.0, SR) == pytest.approx(0.25, abs=0.01)
    assert tone_amplitude(steady, 3000.0, SR) < 0.005


def test_highpass_removes_low_tone():
    """A 1 kHz high-pass keeps a 3 kHz tone and removes a 250 Hz tone."""
    cfg = FilterConfig(
        sample_rate=SR,
        stereo=False,
        block=SMALL_BLOCK,
        design=DesignParams(kind='highpass', cutoff_hz=1000.0, delta_hz=200.0)
    )
    audio = generate_sine_mix(1.0, SR, frequencies=(250.0, 3000.0))
    steady = run_filter(audio, cfg)[2000:6000]

    assert tone_amplitude(steady, 3000.0, SR) == pytest.approx(0.25, abs=0.01)
    assert tone_amplitude(steady, 250.0, SR) < 0.005


def test_bandpass_keeps_center_tone():
    """A band-pass around 1 kHz keeps 1 kHz and removes tones on both sides."""
    cfg = FilterConfig(
        sample_rate=SR,
        stereo=False,
        block=SMALL_BLOCK,
        design=DesignParams(kind='bandpass', center_hz=1000.0, bandwidth_hz=600.0, delta_hz=200.0)
    )
    audio = generate_sine_mix(1.0, SR, frequencies=(250.0, 1000.0, 3000.0))
    steady = run_filter(audio, cfg)[2000:6000]

    assert tone_amplitude(steady, 1000.0, SR) == pytest.approx(0.25, abs=0.01)
    assert tone_amplitude(steady, 250.0, SR) < 0.005
    assert tone_amplitude(steady, 3000.0, SR) < 0.005


def test_stereo_channels_filtered_independently():
    """Low-pass removes the right channel's high tone but keeps the left tone."""
    cfg = FilterConfig(
        sample_rate=SR,
        stereo=True,
        block=SMALL_BLOCK,
        design=DesignParams(kind='lowpass', cutoff_hz=1000.0, delta_hz=200.0)
    )
    audio = generate_stereo_pair(1.0, SR, left_hz=250.0, right_hz=3000.0)
    out = run_filter(audio, cfg)

    left = out[0::2][2000:6000]
    right = out[1::2][2000:6000]

    assert tone_amplitude(left, 250.0, SR) == pytest.approx(0.5, abs=0.02)
    assert tone_amplitude(right, 3000.0, SR) < 0.01


def test_noise_burst_output_starts_silent():
    """Silence in gives silence out until the burst arrives."""
    cfg = FilterConfig(sample_rate=SR, stereo=False, block=SMALL_BLOCK)
    audio = generate_noise_burst(0.5, SR)
    out = run_filter(audio, cfg)

    n = len(audio)
    np.testing.assert_allclose(out[:n // 3], 0.0, atol=1e-12)


def test_filtered_file_round_trip(tmp_path):
    """Filtered output written with WavWriter reads back at the same length."""
    cfg = FilterConfig(sample_rate=SR, stereo=True, block=SMALL_BLOCK)
    audio = generate_stereo_pair(0.25, SR)
    out = run_filter(audio, cfg)

    path = tmp_path / 'filtered.wav'
    with audio_io.WavWriter(path, SR, 2) as writer:
        writer.write(out)

    loaded, sr, channels = audio_io.load_wav(path)
    assert sr == SR
    assert channels == 2
    assert len(loaded) == len(audio)
    np.testing.assert_allclose(loaded, np.clip(out, -1.0, 1.0), atol=2.0 / 32768.0)


def test_determinism():
    """Same input and configuration give identical output."""
    cfg = FilterConfig(sample_rate=SR, stereo=False, block=SMALL_BLOCK)
    audio = generate_sweep(0.3, SR)

    np.testing.assert_array_equal(run_filter(audio, cfg), run_filter(audio, cfg))


def test_chunking_does_not_change_output():
    """Chunk size fed to the accumulator does not affect the result."""
    cfg = FilterConfig(sample_rate=SR, stereo=False, block=SMALL_BLOCK)
    audio = generate_sweep(0.3, SR)

    np.testing.assert_allclose(
        run_filter(audio, cfg, chunk=1),
        run_filter(audio, cfg, chunk=5000),
        atol=0.0
    )
