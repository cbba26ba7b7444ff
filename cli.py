#!/usr/bin/env python3
"""
blockdsp - Command Line Interface

Main entry point for filtering WAV files through the overlap-add pipeline.
Uses blockdsp/filter_params.py to design the filter (same as golden_reference.py).
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List
import numpy as np

import config
from blockdsp import audio_io, export
from blockdsp.accumulator import BlockAccumulator
from blockdsp.filter_params import (
    BlockParams,
    DesignParams,
    FilterConfig,
    design_impulse_response,
    make_pipeline,
    validate_config,
)


def build_config(params: dict, sample_rate: float, stereo: bool) -> FilterConfig:
    """
    Build a validated FilterConfig from CLI parameters.

    Parameters:
        params: Parameters dict (from config or overrides)
        sample_rate: Sampling rate of the input (Hz)
        stereo: Whether the input is interleaved stereo

    Returns:
        FilterConfig

    Raises:
        InvalidConfigurationError: If the combination is invalid
    """
    cfg = FilterConfig(
        sample_rate=float(sample_rate),
        stereo=stereo,
        block=BlockParams(
            buffer_size=params.get('buffer_size', config.BUFFER_SIZE),
            segment_size=params.get('segment_size', config.SEGMENT_SIZE),
            fft_size=params.get('fft_size', config.FFT_SIZE),
        ),
        design=DesignParams(
            kind=params.get('kind', config.DEFAULT_FILTER_KIND),
            cutoff_hz=params.get('cutoff_hz', config.CUTOFF_HZ),
            center_hz=params.get('center_hz', config.CENTER_HZ),
            bandwidth_hz=params.get('bandwidth_hz', config.BANDWIDTH_HZ),
            delta_hz=params.get('delta_hz', config.TRANSITION_DELTA_HZ),
            length=params.get('length', 0),
            window=params.get('window', config.DEFAULT_WINDOW),
            kaiser_alpha=params.get('kaiser_alpha', config.KAISER_ALPHA),
            comb_delay=config.COMB_DELAY_SAMPLES,
            comb_amplifier=config.COMB_AMPLIFIER,
            resonator_frequencies=tuple(config.RESONATOR_FREQUENCIES),
            resonator_amplifier=config.RESONATOR_AMPLIFIER,
            resonator_strength=config.RESONATOR_STRENGTH,
        ),
    )
    validate_config(cfg)
    return cfg


def stream_through_pipeline(
    samples: np.ndarray,
    cfg: FilterConfig,
    taps: np.ndarray,
    writer: audio_io.WavWriter,
    chunk_size: int = config.STREAM_CHUNK_SIZE
) -> int:
    """
    Filter interleaved samples block by block into a WAV writer.

    Samples are pushed in chunks through a BlockAccumulator sized to the
    pipeline buffer; the final partial block is written truncated to its
    valid length.

    Parameters:
        samples: Interleaved float samples
        cfg: FilterConfig the pipeline is built from
        taps: Impulse response loaded into the pipeline
        writer: Open WavWriter receiving the filtered samples
        chunk_size: Frames pushed per accumulator call

    Returns:
        Number of interleaved samples written
    """
    pipeline = make_pipeline(cfg)
    pipeline.set_filter(taps)

    output = np.zeros(pipeline.buffer_size, dtype=np.float64)
    state = {'limit': pipeline.buffer_size, 'written': 0}

    def flush(block: np.ndarray) -> None:
        pipeline.filtering(block, output)
        writer.write(output[:state['limit']])
        state['written'] += state['limit']

    accumulator = BlockAccumulator(pipeline.buffer_size, flush)

    channels = 2 if cfg.stereo else 1
    step = max(1, chunk_size) * channels
    for start in range(0, len(samples), step):
        accumulator.push(samples[start:start + step])

    state['limit'] = accumulator.pending
    accumulator.close()

    return state['written']


def process_audio_array(
    samples: np.ndarray,
    sample_rate: int,
    channels: int,
    name: str,
    output_dir: Path,
    params: dict,
    verbose: bool = False
) -> Dict:
    """
    Design the filter, stream the samples through it and export the results.

    Shared by file mode and demo mode.

    Parameters:
        samples: Interleaved float samples
        sample_rate: Sampling rate (Hz)
        channels: 1 or 2
        name: Base name for output files
        output_dir: Output directory for results
        params: Parameters dict
        verbose: Print verbose progress messages

    Returns:
        Dict with the design report and created file paths
    """
    # Step 2: Design the impulse response
    if verbose:
        print("2. Designing impulse response...")

    cfg = build_config(params, sample_rate, stereo=(channels == 2))
    taps = design_impulse_response(cfg)

    if verbose:
        print(f"   Kind: {cfg.design.kind}, taps: {len(taps)}, "
              f"alias-free limit: {cfg.block.max_filter_length}")

    # Step 3: Stream through the pipeline
    if verbose:
        print("3. Filtering...")

    output_dir = Path(output_dir)
    wav_path = output_dir / f"{name}_filtered.wav"
    bits = params.get('bits', config.PCM_BITS)

    with audio_io.WavWriter(wav_path, sample_rate, channels, bits=bits) as writer:
        written = stream_through_pipeline(
            samples, cfg, taps, writer,
            chunk_size=params.get('chunk_size', config.STREAM_CHUNK_SIZE)
        )

    if verbose:
        print(f"   Wrote {written // channels} frames to {wav_path.name}")

    # Step 4: Export design report
    if verbose:
        print("4. Exporting design report...")

    created_files = [wav_path]
    created_files.extend(export.export_design_outputs(
        cfg.to_dict(),
        taps,
        sample_rate,
        output_dir,
        name,
        generate_plots=params.get('generate_plots', True)
    ))

    return {
        'design': export.create_design_json(cfg.to_dict(), taps, sample_rate),
        'files': created_files,
        'samples_written': written,
    }


def process_single_file(
    file_path: Path,
    output_dir: Path,
    params: dict,
    verbose: bool = False
) -> bool:
    """
    Filter a single WAV file through the full pipeline.

    Parameters:
        file_path: Path to WAV file
        output_dir: Output directory for results
        params: Parameters dict (from config or overrides)
        verbose: Print verbose progress messages

    Returns:
        True if successful, False otherwise
    """
    name = file_path.stem

    try:
        if verbose:
            print(f"\nProcessing: {file_path.name}")
            print("-" * 60)

        # Step 1: Load audio
        if verbose:
            print("1. Loading audio...")

        samples, sr, channels = audio_io.load_wav(file_path)
        if channels not in (1, 2):
            raise ValueError(f"Only mono and stereo input is supported, got {channels} channels")

        if verbose:
            print(f"   Duration: {len(samples) / channels / sr:.2f}s, "
                  f"Sample rate: {sr} Hz, Channels: {channels}")

        results = process_audio_array(samples, sr, channels, name, output_dir, params, verbose)

        print(f"Created {len(results['files'])} output files in {output_dir}")
        export.print_design_summary(results['design'], name)

        return True

    except Exception as e:
        print(f"ERROR processing {file_path.name}: {e}", file=sys.stderr)
        if verbose:
            import traceback
            traceback.print_exc()
        return False


def process_directory(
    input_dir: Path,
    output_dir: Path,
    params: dict,
    verbose: bool = False
) -> dict:
    """
    Filter all WAV files in a directory.

    Parameters:
        input_dir: Input directory containing WAV files
        output_dir: Output directory for results
        params: Parameters dict
        verbose: Print verbose messages

    Returns:
        Dict with success/failure counts
    """
    wav_files: List[Path] = []
    for pattern in ('*.wav', '*.WAV'):
        wav_files.extend(input_dir.glob(pattern))

    if not wav_files:
        print(f"No WAV files found in {input_dir}")
        return {'success': 0, 'failed': 0}

    print(f"Found {len(wav_files)} WAV files")

    success_count = 0
    failed_count = 0

    for wav_file in sorted(set(wav_files)):
        file_output_dir = output_dir / wav_file.stem

        if process_single_file(wav_file, file_output_dir, params, verbose):
            success_count += 1
        else:
            failed_count += 1

    print(f"\nProcessing complete: {success_count} successful, {failed_count} failed")

    return {'success': success_count, 'failed': failed_count}


def run_demo_mode(output_dir: Path, params: dict, verbose: bool = False) -> bool:
    """
    Run demo mode using synthetic signals.

    Parameters:
        output_dir: Output directory for demo results
        params: Parameters dict
        verbose: Print verbose messages

    Returns:
        True if successful
    """
    print("Running demo mode with synthetic audio...")

    from tests.test_synthetic import (
        generate_sine_mix,
        generate_sweep,
        generate_stereo_pair,
    )

    sr = config.DEFAULT_SAMPLE_RATE

    demo_signals = [
        {
            'name': 'demo_sine_mix',
            'samples': generate_sine_mix(duration=2.0, sr=sr),
            'channels': 1,
            'description': 'Low, mid and high tones'
        },
        {
            'name': 'demo_sweep',
            'samples': generate_sweep(duration=2.0, sr=sr),
            'channels': 1,
            'description': 'Logarithmic sweep'
        },
        {
            'name': 'demo_stereo',
            'samples': generate_stereo_pair(duration=2.0, sr=sr),
            'channels': 2,
            'description': 'Different tone per channel'
        }
    ]

    print(f"Generated {len(demo_signals)} synthetic signals")

    for signal_info in demo_signals:
        print(f"\nProcessing: {signal_info['name']} ({signal_info['description']})")
        print("-" * 60)

        try:
            signal_output_dir = output_dir / signal_info['name']

            # Keep the unfiltered signal next to the result for comparison
            audio_io.write_wav(
                signal_output_dir / f"{signal_info['name']}_input.wav",
                signal_info['samples'],
                sr,
                channels=signal_info['channels'],
                bits=params.get('bits', config.PCM_BITS)
            )

            results = process_audio_array(
                signal_info['samples'],
                sr,
                signal_info['channels'],
                signal_info['name'],
                signal_output_dir,
                params,
                verbose
            )

            print(f"Created {len(results['files'])} output files in {signal_output_dir}")
            export.print_design_summary(results['design'], signal_info['name'])

        except Exception as e:
            print(f"ERROR: {e}", file=sys.stderr)
            if verbose:
                import traceback
                traceback.print_exc()
            return False

    print(f"\nDemo complete! Results saved to {output_dir}")
    return True


def build_params(args: argparse.Namespace) -> dict:
    """Build the parameters dict from parsed arguments, falling back to config."""
    return {
        'kind': args.filter or config.DEFAULT_FILTER_KIND,
        'cutoff_hz': args.cutoff or config.CUTOFF_HZ,
        'center_hz': args.center or config.CENTER_HZ,
        'bandwidth_hz': args.bandwidth or config.BANDWIDTH_HZ,
        'delta_hz': args.delta or config.TRANSITION_DELTA_HZ,
        'length': args.length or 0,
        'window': args.window or config.DEFAULT_WINDOW,
        'kaiser_alpha': args.kaiser_alpha if args.kaiser_alpha is not None else config.KAISER_ALPHA,
        'buffer_size': args.buffer_size or config.BUFFER_SIZE,
        'segment_size': args.segment_size or config.SEGMENT_SIZE,
        'fft_size': args.fft_size or config.FFT_SIZE,
        'bits': args.bits or config.PCM_BITS,
        'chunk_size': config.STREAM_CHUNK_SIZE,
        'generate_plots': not args.no_plots
    }


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description='blockdsp - FFT overlap-add filtering of WAV files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Low-pass a single file
  %(prog)s track.wav --output results/

  # Band-pass every WAV in a directory
  %(prog)s tracks/ --output results/ --filter bandpass --center 1000 --bandwidth 400

  # Run demo mode
  %(prog)s --demo --output demo_results/

  # Verbose output
  %(prog)s track.wav --output results/ --verbose
        """
    )

    parser.add_argument(
        'input',
        nargs='?',
        type=str,
        help='Input WAV file or directory (not needed for --demo)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        required=True,
        help='Output directory for results'
    )

    parser.add_argument(
        '--demo',
        action='store_true',
        help='Run demo mode with synthetic signals (no input file needed)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Print verbose progress messages'
    )

    parser.add_argument(
        '--no-plots',
        action='store_true',
        help='Skip plot generation'
    )

    # Filter design overrides
    parser.add_argument(
        '--filter',
        choices=config.FILTER_KINDS,
        help=f'Filter kind (default: {config.DEFAULT_FILTER_KIND})'
    )

    parser.add_argument(
        '--cutoff',
        type=float,
        help=f'Low/high-pass cutoff in Hz (default: {config.CUTOFF_HZ})'
    )

    parser.add_argument(
        '--center',
        type=float,
        help=f'Band filter center in Hz (default: {config.CENTER_HZ})'
    )

    parser.add_argument(
        '--bandwidth',
        type=float,
        help=f'Band filter width in Hz (default: {config.BANDWIDTH_HZ})'
    )

    parser.add_argument(
        '--delta',
        type=float,
        help=f'FIR transition width in Hz (default: {config.TRANSITION_DELTA_HZ})'
    )

    parser.add_argument(
        '--length',
        type=int,
        help='Explicit number of taps (default: derived from --delta)'
    )

    parser.add_argument(
        '--window',
        type=str,
        help=f'Window applied to FIR taps, or "none" (default: {config.DEFAULT_WINDOW})'
    )

    parser.add_argument(
        '--kaiser-alpha',
        type=float,
        help=f'Kaiser window alpha (default: {config.KAISER_ALPHA})'
    )

    # Block sizing overrides
    parser.add_argument(
        '--buffer-size',
        type=int,
        help=f'Interleaved samples per pipeline call (default: {config.BUFFER_SIZE})'
    )

    parser.add_argument(
        '--segment-size',
        type=int,
        help=f'Per-channel segment size (default: {config.SEGMENT_SIZE})'
    )

    parser.add_argument(
        '--fft-size',
        type=int,
        help=f'Per-channel FFT size (default: {config.FFT_SIZE})'
    )

    parser.add_argument(
        '--bits',
        type=int,
        choices=[8, 16],
        help=f'Output PCM bit depth (default: {config.PCM_BITS})'
    )

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate arguments
    if not args.demo and not args.input:
        parser.error("Either provide an input file/directory or use --demo")

    params = build_params(args)
    output_dir = Path(args.output)

    # Run appropriate mode
    if args.demo:
        success = run_demo_mode(output_dir, params, args.verbose)
        return 0 if success else 1

    input_path = Path(args.input)

    if not input_path.exists():
        print(f"ERROR: Input path does not exist: {input_path}", file=sys.stderr)
        return 1

    if input_path.is_file():
        success = process_single_file(input_path, output_dir, params, args.verbose)
        return 0 if success else 1

    if input_path.is_dir():
        results = process_directory(input_path, output_dir, params, args.verbose)
        return 0 if results['failed'] == 0 else 1

    print(f"ERROR: Invalid input path: {input_path}", file=sys.stderr)
    return 1


if __name__ == '__main__':
    sys.exit(main())
