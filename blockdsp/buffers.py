"""
Buffer Validation Helpers

Shared precondition checks for every in-place operation. Buffers are 1-D
numpy arrays owned by the caller; checks run before any write.
"""

import numpy as np
from typing import Optional

from blockdsp.errors import InvalidArgumentError


def check_buffer(
    buffer: np.ndarray,
    name: str,
    length: Optional[int] = None,
    floating: bool = False
) -> np.ndarray:
    """
    Validate a caller-owned buffer.

    Parameters:
        buffer: Array to validate
        name: Argument name used in error messages
        length: Required exact length (None = any)
        floating: Require a floating-point dtype (results are written back)

    Returns:
        The same array, unchanged

    Raises:
        InvalidArgumentError: If the buffer is missing, not a 1-D ndarray,
            of the wrong dtype or of the wrong length
    """
    if buffer is None:
        raise InvalidArgumentError(f"{name} must not be None")
    if not isinstance(buffer, np.ndarray):
        raise InvalidArgumentError(
            f"{name} must be a numpy array, got {type(buffer).__name__}"
        )
    if buffer.ndim != 1:
        raise InvalidArgumentError(f"{name} must be 1-D, got shape {buffer.shape}")
    if floating and not np.issubdtype(buffer.dtype, np.floating):
        raise InvalidArgumentError(f"{name} must have a floating dtype, got {buffer.dtype}")
    if length is not None and len(buffer) != length:
        raise InvalidArgumentError(f"{name} must have length {length}, got {len(buffer)}")
    return buffer


def check_span(
    start: int,
    count: int,
    stride: int,
    size: int,
    name: str,
    width: Optional[int] = None
) -> None:
    """
    Validate that `count` elements spaced `stride` apart starting at `start`,
    each touching `width` slots (default: `stride`), fit inside `size`.
    """
    if width is None:
        width = stride
    if count < 0:
        raise InvalidArgumentError(f"count must be non-negative, got {count}")
    if start < 0:
        raise InvalidArgumentError(f"{name} offset must be non-negative, got {start}")
    if count > 0 and start + (count - 1) * stride + width > size:
        raise InvalidArgumentError(
            f"{name}: {count} elements from offset {start} exceed length {size}"
        )
