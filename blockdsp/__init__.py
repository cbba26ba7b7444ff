"""
blockdsp - Block-Oriented DSP Toolkit

This package contains the core modules for FFT-based block filtering:
- soundmath: sinc, Bessel I0 and factorial helpers
- window: symmetric tapering windows (including Kaiser)
- channel: interleave/deinterleave of mono, stereo and complex buffers
- fft: mixed-radix complex/real FFT engine
- impulse: impulse-response generators (FIR, comb, resonator)
- overlap_add: overlap-add block convolution
- pipeline: mono/stereo filter orchestration and decimation
- accumulator: fixed-size streaming block accumulator
- filter_params: parameter dataclasses and filter design
- audio_io: PCM quantization and WAV read/write
- export: JSON and plot generation
"""

__version__ = "1.0.0"
