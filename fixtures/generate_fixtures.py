#!/usr/bin/env python3
"""Generate deterministic synthetic WAV fixtures.

Creates the signals the golden reference filters, materialized as stable
16-bit PCM files so filtered outputs can be compared across platforms.

Format: WAV PCM 16-bit, 44100 Hz, 1.0s exactly (stereo_pair is 2 channels)
"""

import hashlib
import json
import sys
from pathlib import Path

import numpy as np
from scipy import signal as scipy_signal

sys.path.insert(0, str(Path(__file__).parent.parent))

from blockdsp.audio_io import write_wav

SAMPLE_RATE = 44100
DURATION_SEC = 1.0
OUTPUT_DIR = Path(__file__).parent / "synthetic_audio"


def generate_sine_mix() -> np.ndarray:
    """Three tones either side of the default cutoffs.

    Signal: 220 Hz + 1000 Hz + 8000 Hz, 0.25 each.
    """
    t = np.arange(int(DURATION_SEC * SAMPLE_RATE)) / SAMPLE_RATE
    return (
        0.25 * np.sin(2 * np.pi * 220 * t) +
        0.25 * np.sin(2 * np.pi * 1000 * t) +
        0.25 * np.sin(2 * np.pi * 8000 * t)
    )


def generate_sweep() -> np.ndarray:
    """Logarithmic sweep 50 Hz -> 15 kHz at half scale."""
    t = np.arange(int(DURATION_SEC * SAMPLE_RATE)) / SAMPLE_RATE
    return 0.5 * scipy_signal.chirp(t, f0=50.0, t1=DURATION_SEC, f1=15000.0, method='logarithmic')


def generate_noise_burst() -> np.ndarray:
    """Silence, seeded white noise in the middle third, silence."""
    samples = int(DURATION_SEC * SAMPLE_RATE)
    audio = np.zeros(samples)
    rng = np.random.default_rng(1234)
    start, stop = samples // 3, 2 * samples // 3
    audio[start:stop] = 0.5 * rng.uniform(-1.0, 1.0, stop - start)
    return audio


def generate_stereo_pair() -> np.ndarray:
    """440 Hz on the left, 6 kHz on the right, interleaved."""
    t = np.arange(int(DURATION_SEC * SAMPLE_RATE)) / SAMPLE_RATE
    out = np.empty(2 * len(t))
    out[0::2] = 0.5 * np.sin(2 * np.pi * 440 * t)
    out[1::2] = 0.5 * np.sin(2 * np.pi * 6000 * t)
    return out


def write_fixture(filepath: Path, audio: np.ndarray, channels: int) -> str:
    """Write WAV (PCM 16-bit) and return SHA256 of file bytes."""
    write_wav(filepath, audio, SAMPLE_RATE, channels=channels, bits=16)
    with open(filepath, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()


def main():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    fixtures = [
        ("sine_mix", generate_sine_mix, 1),
        ("sweep", generate_sweep, 1),
        ("noise_burst", generate_noise_burst, 1),
        ("stereo_pair", generate_stereo_pair, 2),
    ]

    manifest_entries = []

    for name, generator, channels in fixtures:
        audio = generator()
        filepath = OUTPUT_DIR / f"{name}.wav"
        sha256 = write_fixture(filepath, audio, channels)

        print(f"{name}.wav: {sha256}")

        manifest_entries.append({
            "name": name,
            "filename": f"{name}.wav",
            "duration_sec": DURATION_SEC,
            "sample_rate_hz": SAMPLE_RATE,
            "channels": channels,
            "bits": 16,
            "sha256_bytes": sha256,
        })

    manifest = {
        "version": "1.0",
        "fixtures": manifest_entries,
    }

    manifest_path = OUTPUT_DIR / "fixtures_manifest.json"
    with open(manifest_path, 'w') as f:
        json.dump(manifest, f, indent=2)

    print(f"\nManifest written to: {manifest_path}")


if __name__ == "__main__":
    main()
