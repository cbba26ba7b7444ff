"""
Block Accumulator Test Suite

Tests for fixed-size block collection with a flush callback.
"""

import sys
from pathlib import Path

import pytest
import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent))

from blockdsp.accumulator import BlockAccumulator
from blockdsp.errors import InvalidArgumentError, InvalidConfigurationError


class Collector:
    """Flush target that keeps copies of every block."""

    def __init__(self):
        self.blocks = []

    def __call__(self, block):
        self.blocks.append(block.copy())


class TestBlockAccumulator:
    """push / close behaviour."""

    def test_exact_block_flushes_once(self):
        """Pushing exactly one block flushes it immediately."""
        sink = Collector()
        acc = BlockAccumulator(4, sink)

        acc.push(np.array([1.0, 2.0, 3.0, 4.0]))

        assert len(sink.blocks) == 1
        np.testing.assert_array_equal(sink.blocks[0], [1, 2, 3, 4])
        assert acc.pending == 0

    def test_partial_push_does_not_flush(self):
        """Fewer than length samples stay pending."""
        sink = Collector()
        acc = BlockAccumulator(4, sink)

        acc.push(np.array([1.0, 2.0, 3.0]))

        assert sink.blocks == []
        assert acc.pending == 3

    def test_chunks_spanning_blocks(self):
        """Chunks are split across block boundaries in order."""
        sink = Collector()
        acc = BlockAccumulator(4, sink)

        acc.push(np.arange(3.0))
        acc.push(np.arange(3.0, 10.0))

        assert len(sink.blocks) == 2
        np.testing.assert_array_equal(sink.blocks[0], [0, 1, 2, 3])
        np.testing.assert_array_equal(sink.blocks[1], [4, 5, 6, 7])
        assert acc.pending == 2

    def test_close_pads_with_zeros(self):
        """close() flushes the partial block zero-padded and returns its valid count."""
        sink = Collector()
        acc = BlockAccumulator(4, sink)

        acc.push(np.arange(1.0, 7.0))
        valid = acc.close()

        assert valid == 2
        np.testing.assert_array_equal(sink.blocks[-1], [5, 6, 0, 0])
        assert acc.pending == 0

    def test_close_without_pending(self):
        """close() with nothing pending does not flush."""
        sink = Collector()
        acc = BlockAccumulator(4, sink)

        acc.push(np.arange(4.0))
        assert acc.close() == 0
        assert len(sink.blocks) == 1

    def test_close_clears_stale_samples(self):
        """Padding overwrites samples left from the previous block."""
        sink = Collector()
        acc = BlockAccumulator(3, sink)

        acc.push(np.array([9.0, 9.0, 9.0, 1.0]))
        acc.close()

        np.testing.assert_array_equal(sink.blocks[-1], [1, 0, 0])

    def test_single_sample_pushes(self):
        """Sample-by-sample pushes give the same blocks as one big push."""
        a, b = Collector(), Collector()
        acc_a = BlockAccumulator(5, a)
        acc_b = BlockAccumulator(5, b)
        data = np.random.default_rng(0).normal(size=23)

        for x in data:
            acc_a.push([x])
        acc_b.push(data)

        assert acc_a.close() == acc_b.close() == 3
        assert len(a.blocks) == len(b.blocks) == 5
        for block_a, block_b in zip(a.blocks, b.blocks):
            np.testing.assert_array_equal(block_a, block_b)

    def test_empty_push(self):
        """An empty chunk is a no-op."""
        sink = Collector()
        acc = BlockAccumulator(4, sink)
        acc.push(np.zeros(0))
        assert acc.pending == 0
        assert sink.blocks == []

    def test_properties(self):
        """length and data are exposed."""
        acc = BlockAccumulator(8, Collector())
        assert acc.length == 8
        assert len(acc.data) == 8

    def test_invalid_length(self):
        """length must be positive."""
        with pytest.raises(InvalidConfigurationError):
            BlockAccumulator(0, Collector())

    def test_missing_flush(self):
        """flush must be provided."""
        with pytest.raises(InvalidConfigurationError):
            BlockAccumulator(4, None)

    def test_none_chunk(self):
        """None chunks are rejected."""
        with pytest.raises(InvalidArgumentError):
            BlockAccumulator(4, Collector()).push(None)
