"""Tests for linear and tree hashes"""

import hashlib

import pytest

from iceaxe.transfer.treehash import (
    ONE_MB, TreeHashAccumulator, combine, compute_checksums, linear_hash, reduce_tree
)
from tests.helpers import SAMPLE_CONTENT, SAMPLE_TREE_HASH_4


def digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class TestReduceTree:
    """Pairwise reduction rules"""

    def test_single_hash_unchanged(self):
        h = digest(b'only')
        assert reduce_tree([h]) == h

    def test_pair(self):
        a, b = digest(b'a'), digest(b'b')
        expected = hashlib.sha256(bytes.fromhex(a) + bytes.fromhex(b)).hexdigest()
        assert reduce_tree([a, b]) == expected
        assert combine(a, b) == expected

    def test_odd_hash_carried_up(self):
        a, b, c = digest(b'a'), digest(b'b'), digest(b'c')
        assert reduce_tree([a, b, c]) == combine(combine(a, b), c)

    def test_five_hashes(self):
        h = [digest(bytes([i])) for i in range(5)]
        level1 = [combine(h[0], h[1]), combine(h[2], h[3]), h[4]]
        level2 = [combine(level1[0], level1[1]), level1[2]]
        assert reduce_tree(h) == combine(level2[0], level2[1])

    def test_order_matters(self):
        a, b = digest(b'a'), digest(b'b')
        assert reduce_tree([a, b]) != reduce_tree([b, a])

    def test_empty_list(self):
        with pytest.raises(ValueError):
            reduce_tree([])


class TestAccumulator:
    """Tree hash over chunk hashes"""

    def test_known_vector(self):
        hashes = TreeHashAccumulator()
        for i in range(0, len(SAMPLE_CONTENT), 4):
            hashes.update(SAMPLE_CONTENT[i:i + 4])

        assert len(hashes) == 13
        assert hashes.tree_hash == SAMPLE_TREE_HASH_4

    def test_single_chunk_equals_linear_hash(self):
        hashes = TreeHashAccumulator()
        hashes.update(SAMPLE_CONTENT)
        assert hashes.tree_hash == linear_hash(SAMPLE_CONTENT)

    def test_empty(self):
        assert TreeHashAccumulator().tree_hash == digest(b'')


class TestComputeChecksums:
    """Single buffer checksums"""

    def test_small_buffer(self):
        checksums = compute_checksums(b'hello')
        assert checksums.linear_hash == digest(b'hello')
        assert checksums.tree_hash == checksums.linear_hash

    def test_buffer_over_one_megabyte(self):
        data = bytes(range(256)) * (ONE_MB * 5 // 2 // 256)
        leaves = [digest(data[i:i + ONE_MB]) for i in range(0, len(data), ONE_MB)]
        assert len(leaves) == 3

        checksums = compute_checksums(data)
        assert checksums.linear_hash == digest(data)
        assert checksums.tree_hash == combine(combine(leaves[0], leaves[1]), leaves[2])
