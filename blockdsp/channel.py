"""
Channel Interleaver - Packing Between Split and Interleaved Layouts

Stereo audio is stored interleaved as [L0, R0, L1, R1, ...]; complex data
for the FFT engine is stored interleaved as [re0, im0, re1, im1, ...]. The
functions below convert between those layouts and separate channel arrays.

DESIGN CONSTRAINTS:
- No I/O operations
- Destination arrays are caller-owned and written in place
- All lengths, offsets and counts are validated before any write
"""

import numpy as np

from blockdsp.buffers import check_buffer, check_span
from blockdsp.errors import InvalidArgumentError


# =============================================================================
# STEREO SPLIT / JOIN
# =============================================================================

def split(source: np.ndarray, left: np.ndarray, right: np.ndarray) -> None:
    """
    Split an interleaved stereo buffer into left and right channels.

    Raises:
        InvalidArgumentError: If any array is missing, or unless
            len(left) == len(right) and len(source) == 2 * len(left)
    """
    check_buffer(source, 'source')
    check_buffer(left, 'left')
    check_buffer(right, 'right')
    if len(left) != len(right) or len(source) != 2 * len(left):
        raise InvalidArgumentError(
            f"split needs len(source) == 2*len(left) == 2*len(right), "
            f"got {len(source)}, {len(left)}, {len(right)}"
        )

    left[:] = source[0::2]
    right[:] = source[1::2]


def join(left: np.ndarray, right: np.ndarray, dest: np.ndarray) -> None:
    """
    Interleave left and right channels into a stereo buffer.

    Raises:
        InvalidArgumentError: If any array is missing, or unless
            len(left) == len(right) and len(dest) == 2 * len(left)
    """
    check_buffer(left, 'left')
    check_buffer(right, 'right')
    check_buffer(dest, 'dest')
    if len(left) != len(right) or len(dest) != 2 * len(left):
        raise InvalidArgumentError(
            f"join needs len(dest) == 2*len(left) == 2*len(right), "
            f"got {len(dest)}, {len(left)}, {len(right)}"
        )

    dest[0::2] = left
    dest[1::2] = right


# =============================================================================
# COMPLEX PACKING
# =============================================================================

def interleave(
    source: np.ndarray,
    dest: np.ndarray,
    count: int,
    source_offset: int = 0,
    dest_offset: int = 0
) -> None:
    """
    Pack `count` real samples into interleaved complex form with zero imaginary parts.

    dest[dest_offset + 2i] = source[source_offset + i]
    dest[dest_offset + 2i + 1] = 0
    """
    check_buffer(source, 'source')
    check_buffer(dest, 'dest')
    check_span(source_offset, count, 1, len(source), 'source')
    check_span(dest_offset, count, 2, len(dest), 'dest')

    end = dest_offset + 2 * count
    dest[dest_offset:end:2] = source[source_offset:source_offset + count]
    dest[dest_offset + 1:end:2] = 0


def interleave_complex(
    real: np.ndarray,
    imag: np.ndarray,
    dest: np.ndarray,
    count: int,
    real_offset: int = 0,
    imag_offset: int = 0,
    dest_offset: int = 0
) -> None:
    """
    Pack `count` real/imaginary pairs into interleaved complex form.

    dest[dest_offset + 2i] = real[real_offset + i]
    dest[dest_offset + 2i + 1] = imag[imag_offset + i]
    """
    check_buffer(real, 'real')
    check_buffer(imag, 'imag')
    check_buffer(dest, 'dest')
    check_span(real_offset, count, 1, len(real), 'real')
    check_span(imag_offset, count, 1, len(imag), 'imag')
    check_span(dest_offset, count, 2, len(dest), 'dest')

    end = dest_offset + 2 * count
    dest[dest_offset:end:2] = real[real_offset:real_offset + count]
    dest[dest_offset + 1:end:2] = imag[imag_offset:imag_offset + count]


def deinterleave(
    source: np.ndarray,
    dest: np.ndarray,
    count: int,
    source_offset: int = 0,
    dest_offset: int = 0
) -> None:
    """
    Take every other sample of `source` starting at `source_offset`.

    dest[dest_offset + i] = source[source_offset + 2i]
    """
    check_buffer(source, 'source')
    check_buffer(dest, 'dest')
    check_span(source_offset, count, 2, len(source), 'source', width=1)
    check_span(dest_offset, count, 1, len(dest), 'dest')

    end = source_offset + 2 * count
    dest[dest_offset:dest_offset + count] = source[source_offset:end:2]


def deinterleave_complex(
    source: np.ndarray,
    real: np.ndarray,
    imag: np.ndarray,
    count: int,
    source_offset: int = 0,
    real_offset: int = 0,
    imag_offset: int = 0
) -> None:
    """
    Unpack `count` interleaved complex pairs into real and imaginary arrays.

    real[real_offset + i] = source[source_offset + 2i]
    imag[imag_offset + i] = source[source_offset + 2i + 1]
    """
    check_buffer(source, 'source')
    check_buffer(real, 'real')
    check_buffer(imag, 'imag')
    check_span(source_offset, count, 2, len(source), 'source')
    check_span(real_offset, count, 1, len(real), 'real')
    check_span(imag_offset, count, 1, len(imag), 'imag')

    end = source_offset + 2 * count
    real[real_offset:real_offset + count] = source[source_offset:end:2]
    imag[imag_offset:imag_offset + count] = source[source_offset + 1:end:2]
