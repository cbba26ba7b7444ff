"""
Golden Reference Generator

Generates deterministic reference outputs from the blockdsp kernels so later
changes (or ports) can be checked against them.

Usage:
    # Generate golden outputs (fixture WAVs are optional)
    python golden_reference.py --output golden_outputs/

    # Validate existing golden outputs
    python golden_reference.py --validate --output golden_outputs/

Directory structure:
    golden_outputs/
    └── kernel_v{KERNEL_VERSION}/
        ├── fft.json          # complex/real transforms of seeded inputs
        ├── windows.json      # every window on a fixed length
        ├── designs.json      # designed taps per filter kind
        └── fixtures/
            ├── sine_mix.json
            ├── sweep.json
            ├── noise_burst.json
            └── stereo_pair.json
"""

import argparse
import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

import config
from blockdsp.audio_io import load_wav
from blockdsp.export import save_json
from blockdsp.fft import FFTEngine
from blockdsp.filter_params import (
    BlockParams,
    DesignParams,
    FilterConfig,
    design_impulse_response,
    make_pipeline,
)
from blockdsp.window import WINDOWS


FFT_SIZES: List[int] = [8, 64, 1024]
WINDOW_LENGTH: int = 33
FFT_SEED: int = 20240501


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def compute_sha256(data: np.ndarray) -> str:
    """Compute SHA256 checksum of numpy array."""
    return hashlib.sha256(np.ascontiguousarray(data).tobytes()).hexdigest()


def compute_wav_file_sha256(wav_path: Path) -> str:
    """Compute SHA256 of WAV file bytes (not float buffer)."""
    with open(wav_path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()


def get_versioned_output_path(base_dir: str, kernel_version: str = None) -> Path:
    """
    Build versioned output path.

    Returns:
        Path like golden_outputs/kernel_v1.0.0/
    """
    if kernel_version is None:
        kernel_version = config.KERNEL_VERSION
    return Path(base_dir) / f"kernel_v{kernel_version}"


def max_abs_diff(reference: np.ndarray, actual: np.ndarray) -> float:
    """Largest absolute difference, inf on shape mismatch."""
    reference = np.asarray(reference, dtype=np.float64)
    actual = np.asarray(actual, dtype=np.float64)
    if reference.shape != actual.shape:
        return float('inf')
    if reference.size == 0:
        return 0.0
    return float(np.max(np.abs(reference - actual)))


# =============================================================================
# FIXTURE LOADING
# =============================================================================

def load_fixture_manifest(fixtures_dir: Path) -> Optional[Dict]:
    """Load fixtures_manifest.json from fixtures directory, None if absent."""
    manifest_path = fixtures_dir / 'fixtures_manifest.json'
    if not manifest_path.exists():
        return None
    with open(manifest_path, 'r') as f:
        return json.load(f)


def load_fixture(
    name: str,
    fixtures_dir: Path,
    expected_sha256: str = None
) -> Tuple[np.ndarray, int, int, str]:
    """
    Load a fixture WAV file.

    Parameters:
        name: Fixture name (without .wav extension)
        fixtures_dir: Directory containing fixture WAV files
        expected_sha256: Optional expected SHA256 of WAV file bytes

    Returns:
        Tuple of (samples, sample_rate, channels, wav_sha256)

    Raises:
        ValueError: If SHA256 doesn't match expected value
        FileNotFoundError: If fixture file doesn't exist
    """
    wav_path = fixtures_dir / f"{name}.wav"
    wav_sha256 = compute_wav_file_sha256(wav_path)

    if expected_sha256 and wav_sha256 != expected_sha256:
        raise ValueError(
            f"Fixture {name} SHA256 mismatch:\n"
            f"  Expected: {expected_sha256}\n"
            f"  Got:      {wav_sha256}"
        )

    samples, sr, channels = load_wav(wav_path)
    return samples, sr, channels, wav_sha256


# =============================================================================
# REFERENCE COMPUTATION
# =============================================================================

def fft_input(size: int) -> np.ndarray:
    """Seeded uniform input in [-1, 1) for a given transform size."""
    rng = np.random.default_rng(FFT_SEED + size)
    return rng.uniform(-1.0, 1.0, size)


def compute_fft_references() -> Dict:
    """Forward complex and real transforms of seeded inputs."""
    results = {}
    for size in FFT_SIZES:
        engine = FFTEngine(size)
        data = fft_input(size)

        complex_out = data.copy()
        engine.transform_complex(complex_out)

        real_out = data.copy()
        engine.transform_real(real_out)

        results[str(size)] = {
            'input': data,
            'complex_forward': complex_out,
            'real_forward': real_out,
        }
    return results


def compute_window_references(length: int = WINDOW_LENGTH) -> Dict:
    """Every window applied to a ones array of the given length."""
    results = {}
    for name, window in sorted(WINDOWS.items()):
        values = np.ones(length)
        if name == 'kaiser':
            window(values, config.KAISER_ALPHA)
        else:
            window(values)
        results[name] = values
    return results


def reference_config(sample_rate: float, stereo: bool, kind: str) -> FilterConfig:
    """FilterConfig built from config.py defaults for one filter kind."""
    return FilterConfig(
        sample_rate=float(sample_rate),
        stereo=stereo,
        block=BlockParams(
            buffer_size=config.BUFFER_SIZE,
            segment_size=config.SEGMENT_SIZE,
            fft_size=config.FFT_SIZE,
        ),
        design=DesignParams(
            kind=kind,
            cutoff_hz=config.CUTOFF_HZ,
            center_hz=config.CENTER_HZ,
            bandwidth_hz=config.BANDWIDTH_HZ,
            delta_hz=config.TRANSITION_DELTA_HZ,
            window=config.DEFAULT_WINDOW,
            kaiser_alpha=config.KAISER_ALPHA,
            comb_delay=config.COMB_DELAY_SAMPLES,
            comb_amplifier=config.COMB_AMPLIFIER,
            resonator_frequencies=tuple(config.RESONATOR_FREQUENCIES),
            resonator_amplifier=config.RESONATOR_AMPLIFIER,
            resonator_strength=config.RESONATOR_STRENGTH,
        ),
    )


def compute_design_references(sample_rate: float = config.DEFAULT_SAMPLE_RATE) -> Dict:
    """Designed taps for every filter kind."""
    return {
        kind: design_impulse_response(reference_config(sample_rate, False, kind))
        for kind in config.FILTER_KINDS
    }


def filter_samples(samples: np.ndarray, cfg: FilterConfig) -> np.ndarray:
    """
    Filter interleaved samples block by block.

    The tail is zero-padded to a whole buffer and the output truncated back
    to the input length.
    """
    pipeline = make_pipeline(cfg)
    pipeline.set_filter(design_impulse_response(cfg))

    n = len(samples)
    n_blocks = -(-n // pipeline.buffer_size)
    padded = np.zeros(max(1, n_blocks) * pipeline.buffer_size)
    padded[:n] = samples

    for start in range(0, len(padded), pipeline.buffer_size):
        pipeline.filtering(padded[start:start + pipeline.buffer_size])

    return padded[:n]


# =============================================================================
# ORACLE CHECKS
# =============================================================================

def check_oracles() -> List[Tuple[str, float]]:
    """
    Compare kernels against numpy.

    Returns:
        List of (check name, max abs difference)
    """
    checks = []

    for size in FFT_SIZES:
        data = fft_input(size)
        z = data[0::2] + 1j * data[1::2]

        # Forward uses exp(+2 pi i jk/N), i.e. N * ifft
        expected = (size // 2) * np.fft.ifft(z)
        out = data.copy()
        FFTEngine(size).transform_complex(out)
        checks.append((f"fft_complex_{size}", max(
            max_abs_diff(expected.real, out[0::2]),
            max_abs_diff(expected.imag, out[1::2]),
        )))

        spectrum = np.fft.rfft(data)
        out = data.copy()
        FFTEngine(size).transform_real(out)
        checks.append((f"fft_real_{size}", max(
            abs(spectrum[0].real - out[0]),
            abs(spectrum[-1].real - out[1]),
            max_abs_diff(spectrum[1:-1].real, out[2::2]),
            max_abs_diff(-spectrum[1:-1].imag, out[3::2]),
        )))

    cfg = reference_config(config.DEFAULT_SAMPLE_RATE, False, 'lowpass')
    rng = np.random.default_rng(FFT_SEED)
    samples = rng.uniform(-0.5, 0.5, 3 * cfg.block.buffer_size)
    taps = design_impulse_response(cfg)
    expected = np.convolve(samples, taps)[:len(samples)]
    checks.append(("overlap_add_vs_convolve", max_abs_diff(expected, filter_samples(samples, cfg))))

    return checks


# =============================================================================
# GENERATION
# =============================================================================

def generate_references(output_dir: str, fixtures_dir: str = 'fixtures/synthetic_audio') -> List[Path]:
    """
    Generate all golden references.

    Parameters:
        output_dir: Base output directory
        fixtures_dir: Directory containing fixture WAVs (skipped if absent)

    Returns:
        List of generated file paths
    """
    versioned_path = get_versioned_output_path(output_dir)
    versioned_path.mkdir(parents=True, exist_ok=True)

    generated_at = datetime.now(timezone.utc).isoformat()
    header = {
        'schema_version': config.SCHEMA_VERSION,
        'kernel_version': config.KERNEL_VERSION,
        'generated_at': generated_at,
    }

    all_files = []

    print("Generating reference: fft...")
    path = versioned_path / 'fft.json'
    save_json({**header, 'transforms': compute_fft_references()}, path)
    all_files.append(path)

    print("Generating reference: windows...")
    path = versioned_path / 'windows.json'
    save_json({**header, 'length': WINDOW_LENGTH, 'windows': compute_window_references()}, path)
    all_files.append(path)

    print("Generating reference: designs...")
    path = versioned_path / 'designs.json'
    save_json({
        **header,
        'sample_rate': config.DEFAULT_SAMPLE_RATE,
        'designs': compute_design_references(),
    }, path)
    all_files.append(path)

    fixtures_path = Path(fixtures_dir)
    manifest = load_fixture_manifest(fixtures_path)
    if manifest is None:
        print(f"No fixture manifest in {fixtures_path}, skipping fixture references "
              f"(run fixtures/generate_fixtures.py first)")
        return all_files

    for info in manifest['fixtures']:
        name = info['name']
        print(f"Generating reference: fixtures/{name}...")
        samples, sr, channels, wav_sha256 = load_fixture(
            name, fixtures_path, expected_sha256=info['sha256_bytes']
        )
        cfg = reference_config(sr, channels == 2, config.DEFAULT_FILTER_KIND)
        filtered = filter_samples(samples, cfg)

        path = versioned_path / 'fixtures' / f"{name}.json"
        save_json({
            **header,
            'fixture': info['filename'],
            'audio_checksum': wav_sha256,
            'params': cfg.to_dict(),
            'output_checksum': compute_sha256(filtered),
            'output': filtered,
        }, path)
        all_files.append(path)

    return all_files


# =============================================================================
# VALIDATION
# =============================================================================

def _report(name: str, diff: float, tolerance: float) -> bool:
    if diff <= tolerance:
        print(f"  PASS: {name} (max diff: {diff:.3e})")
        return True
    print(f"  FAIL: {name} (max diff: {diff:.3e} > {tolerance:.1e})")
    return False


def validate_references(output_dir: str, fixtures_dir: str = 'fixtures/synthetic_audio') -> bool:
    """
    Validate golden references by recomputing them.

    Validates:
    1. Kernel version of the references matches config.KERNEL_VERSION
    2. FFT, window and design outputs match within GOLDEN_TOLERANCE
    3. Fixture WAV SHA256 matches the golden audio_checksum
    4. Filtered fixture outputs match within GOLDEN_TOLERANCE
    5. FFT and overlap-add agree with numpy oracles

    Returns:
        True if all validations pass
    """
    versioned_path = get_versioned_output_path(output_dir)
    if not versioned_path.exists():
        print(f"No golden outputs found at {versioned_path}")
        return False

    tolerance = config.GOLDEN_TOLERANCE
    all_passed = True

    def load(path: Path) -> Dict:
        with open(path, 'r') as f:
            data = json.load(f)
        if data.get('kernel_version') != config.KERNEL_VERSION:
            print(f"  FAIL: {path.name} kernel_version {data.get('kernel_version')} "
                  f"!= {config.KERNEL_VERSION}")
            return None
        return data

    print("Validating: fft...")
    ref = load(versioned_path / 'fft.json')
    if ref is None:
        all_passed = False
    else:
        current = compute_fft_references()
        for size, entry in ref['transforms'].items():
            for key in ('complex_forward', 'real_forward'):
                all_passed &= _report(
                    f"{key}_{size}", max_abs_diff(entry[key], current[size][key]), tolerance
                )

    print("Validating: windows...")
    ref = load(versioned_path / 'windows.json')
    if ref is None:
        all_passed = False
    else:
        current = compute_window_references(ref['length'])
        for name, values in ref['windows'].items():
            all_passed &= _report(name, max_abs_diff(values, current[name]), tolerance)

    print("Validating: designs...")
    ref = load(versioned_path / 'designs.json')
    if ref is None:
        all_passed = False
    else:
        current = compute_design_references(ref['sample_rate'])
        for kind, taps in ref['designs'].items():
            all_passed &= _report(kind, max_abs_diff(taps, current[kind]), tolerance)

    fixtures_path = Path(fixtures_dir)
    for ref_path in sorted((versioned_path / 'fixtures').glob('*.json')):
        name = ref_path.stem
        print(f"Validating: fixtures/{name}...")
        ref = load(ref_path)
        if ref is None:
            all_passed = False
            continue

        try:
            samples, sr, channels, wav_sha256 = load_fixture(
                name, fixtures_path, expected_sha256=ref['audio_checksum']
            )
        except (ValueError, FileNotFoundError) as e:
            print(f"  FAIL: {e}")
            all_passed = False
            continue
        print("  PASS: audio_checksum matches")

        cfg = reference_config(sr, channels == 2, ref['params']['kind'])
        filtered = filter_samples(samples, cfg)
        all_passed &= _report("filtered output", max_abs_diff(ref['output'], filtered), tolerance)

    print("Validating: numpy oracles...")
    for name, diff in check_oracles():
        all_passed &= _report(name, diff, 1e-6)

    return bool(all_passed)


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description='Generate golden reference outputs for blockdsp kernel validation'
    )
    parser.add_argument(
        '--output', '-o',
        default='golden_outputs',
        help='Base output directory for golden reference files'
    )
    parser.add_argument(
        '--fixtures-dir', '-f',
        default='fixtures/synthetic_audio',
        help='Directory containing synthetic audio fixtures (default: fixtures/synthetic_audio)'
    )
    parser.add_argument(
        '--validate', '-v',
        action='store_true',
        help='Validate existing golden references instead of generating'
    )

    args = parser.parse_args()

    if args.validate:
        print(f"Validating golden references in {args.output}/")
        print(f"Using fixtures from: {args.fixtures_dir}/")
        success = validate_references(args.output, args.fixtures_dir)
        print("\nAll checks passed." if success else "\nValidation FAILED.")
        return 0 if success else 1

    print(f"Generating golden references to {args.output}/")
    files = generate_references(args.output, args.fixtures_dir)
    print(f"\nGenerated {len(files)} files.")

    return 0


if __name__ == '__main__':
    exit(main())
