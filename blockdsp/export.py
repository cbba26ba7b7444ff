"""
Export Module

Generate JSON reports and plots describing a designed filter.
All outputs follow versioned schema for consistency.
"""

import numpy as np
import json
from pathlib import Path
from typing import Dict, List, Tuple
from scipy import signal as scipy_signal
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

import config


# Floor for magnitude in dB (avoids log of zero)
MIN_DB: float = -200.0


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, np.bool_):
            return bool(obj)
        return super().default(obj)


def compute_magnitude_response(
    taps: np.ndarray,
    sample_rate: float,
    n_points: int = config.RESPONSE_POINTS
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Magnitude response of an FIR filter.

    Parameters:
        taps: Impulse response
        sample_rate: Sampling rate (Hz)
        n_points: Number of frequencies between 0 and Nyquist

    Returns:
        Tuple of (frequencies_hz, magnitude_db)
    """
    freqs, h = scipy_signal.freqz(taps, worN=n_points, fs=sample_rate)
    magnitude = np.abs(h)
    with np.errstate(divide='ignore'):
        magnitude_db = 20.0 * np.log10(magnitude)
    magnitude_db = np.maximum(magnitude_db, MIN_DB)
    return freqs, magnitude_db


def summarize_response(freqs: np.ndarray, magnitude_db: np.ndarray) -> Dict:
    """
    Key figures of a magnitude response.

    Returns:
        Dict with peak level/frequency, DC and Nyquist levels, and the
        lowest/highest frequency within 3 dB of the peak
    """
    peak_idx = int(np.argmax(magnitude_db))
    peak_db = float(magnitude_db[peak_idx])
    within_3db = np.where(magnitude_db >= peak_db - 3.0)[0]

    return {
        'peak_db': peak_db,
        'peak_hz': float(freqs[peak_idx]),
        'dc_db': float(magnitude_db[0]),
        'nyquist_db': float(magnitude_db[-1]),
        'band_3db_hz': [float(freqs[within_3db[0]]), float(freqs[within_3db[-1]])],
    }


def create_design_json(params: Dict, taps: np.ndarray, sample_rate: float) -> Dict:
    """
    Create the filter design report.

    Parameters:
        params: Flat parameter dict (FilterConfig.to_dict())
        taps: Impulse response actually loaded into the pipeline
        sample_rate: Sampling rate (Hz)

    Returns:
        Design dict ready for JSON serialization
    """
    taps = np.asarray(taps, dtype=np.float64)
    response = {}
    if len(taps) > 0:
        freqs, magnitude_db = compute_magnitude_response(taps, sample_rate)
        response = summarize_response(freqs, magnitude_db)

    return {
        'schema_version': config.SCHEMA_VERSION,
        'kernel_version': config.KERNEL_VERSION,
        'params': params,
        'impulse_response': {
            'values': taps,
            'length': len(taps),
            'sum': float(np.sum(taps)),
            'energy': float(np.sum(taps ** 2)),
            'description': 'Impulse response taps after windowing',
        },
        'magnitude_response': response,
    }


def save_json(data: Dict, output_path: Path) -> None:
    """
    Save data as JSON with pretty printing.

    Parameters:
        data: Dictionary to save
        output_path: Path to output file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        json.dump(data, f, indent=2, cls=NumpyEncoder)


def plot_design(
    taps: np.ndarray,
    sample_rate: float,
    output_path: Path,
    title: str = "Filter Design"
) -> None:
    """
    Plot impulse response and magnitude response.

    Parameters:
        taps: Impulse response
        sample_rate: Sampling rate (Hz)
        output_path: Path to save plot
        title: Plot title
    """
    freqs, magnitude_db = compute_magnitude_response(taps, sample_rate)

    fig, axes = plt.subplots(2, 1, figsize=config.PLOT_FIGSIZE)

    # Plot 1: Taps
    ax1 = axes[0]
    ax1.plot(np.arange(len(taps)), taps, color='blue', linewidth=1)
    ax1.set_xlabel('Tap', fontsize=10)
    ax1.set_ylabel('Amplitude', fontsize=10)
    ax1.set_title(title, fontsize=12, fontweight='bold')
    ax1.grid(True, alpha=0.3)

    # Plot 2: Magnitude response
    ax2 = axes[1]
    ax2.plot(freqs, magnitude_db, color='red', linewidth=1.5)
    ax2.set_xlabel('Frequency (Hz)', fontsize=10)
    ax2.set_ylabel('Magnitude (dB)', fontsize=10)
    ax2.grid(True, alpha=0.3)
    ax2.set_ylim(max(MIN_DB, float(np.max(magnitude_db)) - 120.0), float(np.max(magnitude_db)) + 6.0)

    plt.tight_layout()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=config.PLOT_DPI, bbox_inches='tight')
    plt.close(fig)


def export_design_outputs(
    params: Dict,
    taps: np.ndarray,
    sample_rate: float,
    output_dir: Path,
    name: str,
    generate_plots: bool = True
) -> List[Path]:
    """
    Export the design report and plot.

    Parameters:
        params: Flat parameter dict
        taps: Impulse response
        sample_rate: Sampling rate (Hz)
        output_dir: Output directory path
        name: Base name for files
        generate_plots: Whether to generate plot files

    Returns:
        List of paths to created files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    created_files = []

    design_json = create_design_json(params, taps, sample_rate)
    design_path = output_dir / f"{name}_design.json"
    save_json(design_json, design_path)
    created_files.append(design_path)

    if generate_plots and len(taps) > 0:
        plot_path = output_dir / f"{name}_response.png"
        plot_design(taps, sample_rate, plot_path, title=f"Filter Design: {name}")
        created_files.append(plot_path)

    return created_files


def print_design_summary(design_json: Dict, name: str) -> None:
    """
    Print concise design summary to console.

    Parameters:
        design_json: Design dict from create_design_json
        name: Name of the processed input
    """
    params = design_json['params']
    response = design_json['magnitude_response']

    print(f"\n{'='*60}")
    print(f"Filter Summary: {name}")
    print(f"{'='*60}")
    print(f"Kind: {params['kind']}  Window: {params['window']}")
    print(f"Taps: {design_json['impulse_response']['length']}")
    if response:
        lo, hi = response['band_3db_hz']
        print(f"Peak: {response['peak_db']:.2f} dB at {response['peak_hz']:.1f} Hz")
        print(f"3 dB band: {lo:.1f} - {hi:.1f} Hz")
        print(f"DC: {response['dc_db']:.2f} dB  Nyquist: {response['nyquist_db']:.2f} dB")
    print(f"{'='*60}\n")
