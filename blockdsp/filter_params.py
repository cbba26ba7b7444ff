"""
Filter Parameters Module - Block Sizes and Filter Design

Parameter groups are frozen dataclasses; FilterConfig aggregates them.
Helpers turn a FilterConfig into impulse-response taps and a ready
SoundFilterPipeline.

USAGE:
    from blockdsp.filter_params import FilterConfig, DesignParams, DEFAULT_CONFIG

    # Use default config
    taps = design_impulse_response(DEFAULT_CONFIG)

    # Create custom config
    custom = FilterConfig(
        stereo=False,
        design=DesignParams(kind='highpass', cutoff_hz=500.0)
    )
"""

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Tuple

from blockdsp.errors import InvalidConfigurationError
from blockdsp.impulse import (
    BandElimination, BandPass, Comb, HighPass, ImpulseResponse, LowPass, Resonator,
    FIR_VARIANTS, generate, get_filter_size
)
from blockdsp.pipeline import SoundFilterPipeline
from blockdsp.window import WINDOWS, apply_window


FILTER_KINDS: Tuple[str, ...] = ('lowpass', 'highpass', 'bandpass', 'bandstop', 'comb', 'resonator')


@dataclass(frozen=True)
class BlockParams:
    """
    Block sizing for the overlap-add pipeline.

    Attributes:
        buffer_size: Interleaved samples per pipeline call (default 4096, even)
        segment_size: Per-channel samples per FFT (default 256)
        fft_size: Per-channel complex FFT length (default 1024, power of two)
    """
    buffer_size: int = 4096
    segment_size: int = 256
    fft_size: int = 1024

    @property
    def max_filter_length(self) -> int:
        """Longest impulse response convolved without circular aliasing."""
        return self.fft_size - self.segment_size + 1


@dataclass(frozen=True)
class DesignParams:
    """
    Impulse-response design parameters.

    Attributes:
        kind: One of FILTER_KINDS (default 'lowpass')
        cutoff_hz: Low/high-pass cutoff (default 2000 Hz)
        center_hz: Band filter center (default 1000 Hz)
        bandwidth_hz: Band filter width (default 500 Hz)
        delta_hz: FIR transition width, sets the tap count (default 200 Hz)
        length: Explicit tap count, 0 = derive (default 0)
        window: Window applied to FIR taps, 'none' to skip (default 'blackman')
        kaiser_alpha: Kaiser shape parameter (default 3.0)
        comb_delay: Comb echo spacing in samples (default 441.0)
        comb_amplifier: Comb per-echo gain (default 0.5)
        resonator_frequencies: Resonator frequencies in Hz (default 440, 880)
        resonator_amplifier: Resonator gain (default 1.0)
        resonator_strength: Resonator decay in samples (default 200.0)
    """
    kind: str = 'lowpass'
    cutoff_hz: float = 2000.0
    center_hz: float = 1000.0
    bandwidth_hz: float = 500.0
    delta_hz: float = 200.0
    length: int = 0
    window: str = 'blackman'
    kaiser_alpha: float = 3.0
    comb_delay: float = 441.0
    comb_amplifier: float = 0.5
    resonator_frequencies: Tuple[float, ...] = (440.0, 880.0)
    resonator_amplifier: float = 1.0
    resonator_strength: float = 200.0


@dataclass
class FilterConfig:
    """
    Complete filter configuration aggregating all parameter groups.

    Example usage:
        config = FilterConfig()  # All defaults
        config = FilterConfig(design=DesignParams(kind='bandpass'))  # Override specific params
    """
    sample_rate: float = 44100.0
    stereo: bool = True
    block: BlockParams = field(default_factory=BlockParams)
    design: DesignParams = field(default_factory=DesignParams)

    @property
    def channel_size(self) -> int:
        return self.block.buffer_size // 2 if self.stereo else self.block.buffer_size

    def to_dict(self) -> Dict:
        """
        Export all parameters as a flat dictionary for JSON serialization.

        Returns:
            Dictionary with all parameter values
        """
        return {
            'sample_rate': self.sample_rate,
            'stereo': self.stereo,

            # Block params
            'buffer_size': self.block.buffer_size,
            'segment_size': self.block.segment_size,
            'fft_size': self.block.fft_size,
            'channel_size': self.channel_size,

            # Design params
            'kind': self.design.kind,
            'cutoff_hz': self.design.cutoff_hz,
            'center_hz': self.design.center_hz,
            'bandwidth_hz': self.design.bandwidth_hz,
            'delta_hz': self.design.delta_hz,
            'length': self.design.length,
            'window': self.design.window,
            'kaiser_alpha': self.design.kaiser_alpha,
            'comb_delay': self.design.comb_delay,
            'comb_amplifier': self.design.comb_amplifier,
            'resonator_frequencies': list(self.design.resonator_frequencies),
            'resonator_amplifier': self.design.resonator_amplifier,
            'resonator_strength': self.design.resonator_strength,
        }


# Default configuration instance
DEFAULT_CONFIG = FilterConfig()


def build_response(design: DesignParams, sample_rate: float) -> ImpulseResponse:
    """
    Build the impulse-response variant a DesignParams describes.

    Raises:
        InvalidConfigurationError: If the kind is unknown or its parameters are invalid
    """
    if design.kind == 'lowpass':
        return LowPass(design.cutoff_hz, sample_rate)
    if design.kind == 'highpass':
        return HighPass(design.cutoff_hz, sample_rate)
    if design.kind == 'bandpass':
        return BandPass(design.center_hz, design.bandwidth_hz, sample_rate)
    if design.kind == 'bandstop':
        return BandElimination(design.center_hz, design.bandwidth_hz, sample_rate)
    if design.kind == 'comb':
        return Comb(design.comb_delay, design.comb_amplifier)
    if design.kind == 'resonator':
        return Resonator(
            design.resonator_frequencies,
            sample_rate,
            amplifier=design.resonator_amplifier,
            strength=design.resonator_strength
        )
    raise InvalidConfigurationError(f"Unknown filter kind: {design.kind}. Expected one of {FILTER_KINDS}")


def filter_length(config: FilterConfig) -> int:
    """
    Number of taps to generate.

    An explicit design.length wins; FIR kinds otherwise derive it from
    delta_hz; comb and resonator use the alias-free maximum.
    """
    if config.design.length > 0:
        return config.design.length
    if config.design.kind in ('comb', 'resonator'):
        return config.block.max_filter_length
    return get_filter_size(config.sample_rate, config.design.delta_hz)


def design_impulse_response(config: FilterConfig) -> np.ndarray:
    """
    Generate raw taps, then window them (FIR kinds only).

    Parameters:
        config: FilterConfig describing the filter

    Returns:
        Impulse-response taps
    """
    response = build_response(config.design, config.sample_rate)
    taps = generate(response, filter_length(config))

    if isinstance(response, FIR_VARIANTS):
        if config.design.window == 'kaiser':
            apply_window(taps, 'kaiser', alpha=config.design.kaiser_alpha)
        else:
            apply_window(taps, config.design.window)

    return taps


def make_pipeline(config: FilterConfig) -> SoundFilterPipeline:
    """Construct a SoundFilterPipeline sized by config.block (no filter loaded)."""
    return SoundFilterPipeline(
        config.stereo,
        config.block.buffer_size,
        segment_size=config.block.segment_size,
        fft_size=config.block.fft_size
    )


def validate_config(config: FilterConfig) -> bool:
    """
    Validate configuration parameters for consistency.

    Parameters:
        config: FilterConfig instance to validate

    Returns:
        True if config is valid

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    block = config.block
    design = config.design

    # Check block sizing
    if block.buffer_size <= 0 or block.buffer_size % 2:
        raise InvalidConfigurationError("buffer_size must be positive and even")
    if block.segment_size <= 0:
        raise InvalidConfigurationError("segment_size must be positive")
    if config.channel_size % block.segment_size:
        raise InvalidConfigurationError(
            f"segment_size {block.segment_size} must divide the channel size {config.channel_size}"
        )
    if block.fft_size <= block.segment_size:
        raise InvalidConfigurationError("fft_size must exceed segment_size")
    if block.fft_size & (block.fft_size - 1):
        raise InvalidConfigurationError("fft_size must be a power of two")

    # Check sampling rate
    if not (config.sample_rate > 0.0) or math.isinf(config.sample_rate):
        raise InvalidConfigurationError("sample_rate must be positive and finite")

    # Check design
    if design.kind not in FILTER_KINDS:
        raise InvalidConfigurationError(f"Unknown filter kind: {design.kind}")
    if design.window not in WINDOWS and design.window not in ('none', 'rectangular'):
        raise InvalidConfigurationError(f"Unknown window: {design.window}")
    if design.length < 0:
        raise InvalidConfigurationError("length must be non-negative")

    # Constructing the variant runs its own parameter checks
    build_response(design, config.sample_rate)

    return True


# Validate default config on import
validate_config(DEFAULT_CONFIG)
