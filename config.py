"""
blockdsp - Configuration

Defaults for the command-line tools, golden reference and exports.
Every default value includes rationale.

The blockdsp core modules never import this file; they take explicit
parameters (see blockdsp/filter_params.py for the library-side defaults).
"""

from typing import List

# =============================================================================
# SAMPLING PARAMETERS
# =============================================================================

# Sampling rate assumed for synthetic signals (Hz)
# Why: 44100 Hz is the CD rate and the most common rate of WAV input,
#      so filter frequencies in this file read in familiar units
DEFAULT_SAMPLE_RATE: int = 44100

# =============================================================================
# BLOCK PARAMETERS
# =============================================================================

# Interleaved samples per pipeline call (both channels together in stereo)
# Why: 4096 = 2048 frames of stereo, ~46ms at 44.1 kHz, short enough for
#      low latency while amortizing per-call overhead
BUFFER_SIZE: int = 4096

# Per-channel samples convolved per FFT
# Why: 256 divides both the stereo (2048) and mono (4096) channel sizes,
#      and leaves 768 samples of overlap with FFT_SIZE = 1024
SEGMENT_SIZE: int = 256

# Per-channel complex FFT length (power of two)
# Why: 1024 gives room for impulse responses up to 769 taps without
#      circular aliasing (FFT_SIZE - SEGMENT_SIZE + 1)
FFT_SIZE: int = 1024

# Samples read from the input per accumulator push
# Why: 0.1 s at 44.1 kHz; deliberately not a multiple of BUFFER_SIZE so the
#      accumulator path is exercised on every run
STREAM_CHUNK_SIZE: int = 4410

# =============================================================================
# FILTER DESIGN PARAMETERS
# =============================================================================

# Supported filter kinds
# Why: one entry per impulse-response variant exposed by blockdsp.impulse
FILTER_KINDS: List[str] = ['lowpass', 'highpass', 'bandpass', 'bandstop', 'comb', 'resonator']

# Default filter kind
# Why: a low-pass gives an audible, easy-to-verify result on any material
DEFAULT_FILTER_KIND: str = 'lowpass'

# Cutoff frequency for low/high-pass (Hz)
# Why: 2 kHz splits voice fundamentals from sibilance, an obvious audible change
CUTOFF_HZ: float = 2000.0

# Center frequency for band filters (Hz)
# Why: 1 kHz sits in the middle of the ear's most sensitive range
CENTER_HZ: float = 1000.0

# Bandwidth for band filters (Hz)
# Why: 500 Hz (750-1250 Hz) is wide enough to pass a recognizable signal
BANDWIDTH_HZ: float = 500.0

# Stopband transition width used to size FIR filters (Hz)
# Why: 200 Hz at 44.1 kHz yields 684 taps, which fits the 769-tap limit
#      of the default SEGMENT_SIZE/FFT_SIZE pair
TRANSITION_DELTA_HZ: float = 200.0

# Window applied to FIR taps
# Why: Blackman gives ~58 dB sidelobe rejection, a good default tradeoff
#      between stopband attenuation and transition width
DEFAULT_WINDOW: str = 'blackman'

# Kaiser shape parameter (used when window == 'kaiser')
# Why: alpha = 3 (beta ~ 9.4) gives roughly 90 dB of stopband attenuation
KAISER_ALPHA: float = 3.0

# Comb echo spacing (samples)
# Why: 441 samples = 10 ms at 44.1 kHz, a short slap-back echo
COMB_DELAY_SAMPLES: float = 441.0

# Comb per-echo gain
# Why: 0.5 decays each echo by 6 dB, so the train dies out within the filter
COMB_AMPLIFIER: float = 0.5

# Resonator frequencies (Hz)
# Why: A4 and its octave produce a clearly pitched resonance
RESONATOR_FREQUENCIES: List[float] = [440.0, 880.0]

# Resonator gain
# Why: 1.0 keeps the synthesized response at its natural level
RESONATOR_AMPLIFIER: float = 1.0

# Resonator Gaussian decay constant (samples)
# Why: 200 samples (~4.5 ms) rings audibly without smearing transients
RESONATOR_STRENGTH: float = 200.0


# =============================================================================
# OUTPUT PARAMETERS
# =============================================================================

# JSON schema version
# Why: Versioning allows future format changes while maintaining compatibility
SCHEMA_VERSION: str = "1.0.0"

# Kernel version (algorithm version, bump when DSP logic changes)
# Why: Allows tracking which algorithm version produced specific outputs
KERNEL_VERSION: str = "1.0.0"

# PCM bit depth for written WAV files
# Why: 16-bit is universally playable and matches CD-quality input
PCM_BITS: int = 16

# Number of frequency points in magnitude-response plots and reports
# Why: 2048 points resolves ~10.8 Hz at 44.1 kHz, finer than any default
#      transition width
RESPONSE_POINTS: int = 2048

# Plot resolution (dots per inch)
# Why: 150 DPI is good balance of quality and file size for screen viewing
PLOT_DPI: int = 150

# Plot figure size (width, height in inches)
# Why: 12x8 inches fits taps and magnitude response stacked on one page
PLOT_FIGSIZE: tuple = (12, 8)

# Tolerance for golden reference validation
# Why: outputs are deterministic; 1e-9 absorbs only platform libm differences
GOLDEN_TOLERANCE: float = 1e-9

# =============================================================================
# VALIDATION
# =============================================================================

def validate_config() -> bool:
    """
    Validate configuration parameters for consistency.

    Returns:
        True if config is valid

    Raises:
        ValueError: If configuration is invalid
    """
    if BUFFER_SIZE <= 0 or BUFFER_SIZE % 2:
        raise ValueError("BUFFER_SIZE must be positive and even")

    # Stereo filters see half the interleaved buffer, mono the whole of it
    for channel_size in (BUFFER_SIZE // 2, BUFFER_SIZE):
        if channel_size % SEGMENT_SIZE:
            raise ValueError("SEGMENT_SIZE must divide the per-channel buffer size")

    if FFT_SIZE <= SEGMENT_SIZE:
        raise ValueError("FFT_SIZE must exceed SEGMENT_SIZE")

    if FFT_SIZE & (FFT_SIZE - 1):
        raise ValueError("FFT_SIZE must be a power of two")

    if DEFAULT_FILTER_KIND not in FILTER_KINDS:
        raise ValueError(f"DEFAULT_FILTER_KIND must be one of {FILTER_KINDS}")

    if CENTER_HZ - BANDWIDTH_HZ / 2.0 < 0.0:
        raise ValueError("BANDWIDTH_HZ is too wide for CENTER_HZ")

    if not (0.0 < CUTOFF_HZ < DEFAULT_SAMPLE_RATE / 2.0):
        raise ValueError("CUTOFF_HZ must be in (0, Nyquist)")

    if COMB_DELAY_SAMPLES < 1.0:
        raise ValueError("COMB_DELAY_SAMPLES must be at least one sample")

    if PCM_BITS not in (8, 16):
        raise ValueError("PCM_BITS must be 8 or 16")

    return True


# Validate on import
validate_config()
