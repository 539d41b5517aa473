"""SHA-256 linear and tree hashes"""

import hashlib
from dataclasses import dataclass
from typing import List, Sequence

ONE_MB = 1024 * 1024


@dataclass(frozen=True)
class Checksums:
    """Hex digests of a single buffer"""
    linear_hash: str
    tree_hash: str


def linear_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def combine(left: str, right: str) -> str:
    """Parent node: hash of the two child digests concatenated"""
    return hashlib.sha256(bytes.fromhex(left + right)).hexdigest()


def reduce_tree(hashes: Sequence[str]) -> str:
    """
    Bottom-up binary reduction of ordered digests.
    Adjacent digests are paired left to right, an odd one out is
    carried up unchanged, until a single digest remains.
    """
    if not hashes:
        raise ValueError("Cannot reduce an empty hash list")

    level = list(hashes)
    while len(level) > 1:
        parents = [combine(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)]
        if len(level) % 2:
            parents.append(level[-1])
        level = parents

    return level[0]


def compute_checksums(data: bytes, leaf_size: int = ONE_MB) -> Checksums:
    """Linear hash and tree hash (over leaf_size leaves) of one buffer"""
    linear = linear_hash(data)
    if len(data) <= leaf_size:
        return Checksums(linear_hash=linear, tree_hash=linear)

    leaves = [linear_hash(data[i:i + leaf_size]) for i in range(0, len(data), leaf_size)]
    return Checksums(linear_hash=linear, tree_hash=reduce_tree(leaves))


class TreeHashAccumulator:
    """Collects per-chunk digests in chunk order"""

    def __init__(self):
        self.hashes: List[str] = []

    def add(self, digest: str):
        self.hashes.append(digest)

    def update(self, data: bytes) -> str:
        digest = linear_hash(data)
        self.add(digest)
        return digest

    def __len__(self):
        return len(self.hashes)

    @property
    def tree_hash(self) -> str:
        # Zero chunks: digest of the empty payload
        if not self.hashes:
            return linear_hash(b"")
        return reduce_tree(self.hashes)
