"""
Block Accumulator - Fixed-Size Buffering for Streaming Input

Arbitrary-length chunks go in through push(); every time `length` samples
have been collected the block is handed to the flush callable. close()
zero-pads and flushes whatever is left.

    acc = BlockAccumulator(4096, pipeline.filtering)
    for chunk in chunks:
        acc.push(chunk)
    valid = acc.close()

The block passed to flush is reused after flush returns; copy it to keep it.
"""

import numpy as np
from typing import Callable

from blockdsp.errors import InvalidArgumentError, InvalidConfigurationError


class BlockAccumulator:
    """
    Collect samples into fixed-size blocks.

    CONTRACT:
    - flush is called exactly once per full block, in order
    - close() flushes a partial block (zero-padded) and returns its valid
      sample count, or returns 0 without flushing if nothing is pending
    """

    def __init__(self, length: int, flush: Callable[[np.ndarray], object]) -> None:
        if length < 1:
            raise InvalidConfigurationError(f"length must be positive, got {length}")
        if flush is None:
            raise InvalidConfigurationError("flush must be callable")

        self._length = int(length)
        self._flush = flush
        self._data = np.zeros(self._length, dtype=np.float64)
        self._index = 0

    @property
    def length(self) -> int:
        return self._length

    @property
    def pending(self) -> int:
        """Samples collected since the last flush."""
        return self._index

    @property
    def data(self) -> np.ndarray:
        return self._data

    def push(self, chunk) -> None:
        """Append samples, flushing each block as it fills."""
        if chunk is None:
            raise InvalidArgumentError("chunk must not be None")
        chunk = np.asarray(chunk, dtype=np.float64).ravel()

        position = 0
        while position < len(chunk):
            count = min(self._length - self._index, len(chunk) - position)
            self._data[self._index:self._index + count] = chunk[position:position + count]
            self._index += count
            position += count

            if self._index >= self._length:
                self._flush(self._data)
                self._index = 0

    def close(self) -> int:
        """Flush the pending partial block, zero-padded."""
        if self._index == 0:
            return 0

        valid = self._index
        self._data[valid:] = 0.0
        self._flush(self._data)
        self._index = 0
        return valid
