from __future__ import annotations
import heapq
from dataclasses import dataclass
from itertools import count
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from .errors import InvalidInput


@dataclass(frozen=True)
class Leaf:
    weight: int
    key: str

    @property
    def children(self) -> Tuple[()]:
        return ()

    @property
    def is_leaf(self) -> bool:
        return True


@dataclass(frozen=True)
class Internal:
    weight: int
    left: "HuffmanTree"
    right: "HuffmanTree"

    def __post_init__(self):
        if self.weight != self.left.weight + self.right.weight:
            raise InvalidInput(
                f"Internal weight {self.weight} != "
                f"{self.left.weight} + {self.right.weight}"
            )

    @property
    def key(self) -> Optional[str]:
        return None

    @property
    def children(self) -> Tuple["HuffmanTree", "HuffmanTree"]:
        return (self.left, self.right)

    @property
    def is_leaf(self) -> bool:
        return False


HuffmanTree = Union[Leaf, Internal]


def _check_frequencies(frequencies: Mapping[str, int]):
    if not frequencies:
        raise InvalidInput("Cannot build a Huffman tree from no symbols")
    for sym, f in frequencies.items():
        if not isinstance(sym, str) or len(sym) != 1:
            raise InvalidInput(f"Symbol must be a single character, got {sym!r}")
        if isinstance(f, bool) or not isinstance(f, int) or f < 0:
            raise InvalidInput(f"Count for {sym!r} must be a non-negative int, got {f!r}")


def from_frequencies(frequencies: Mapping[str, int]) -> HuffmanTree:
    """
    Greedy Huffman merge over a binary heap.

    Heap entries are (weight, seq, node). seq increases with every push, so
    among equal weights the node created first is popped first: leaves in the
    mapping's iteration order, then merged nodes in the order they were made.
    The first node popped becomes the left (code "0") child.
    """
    _check_frequencies(frequencies)
    seq = count()
    pq = [(f, next(seq), Leaf(weight=f, key=s)) for s, f in frequencies.items()]
    heapq.heapify(pq)
    while len(pq) > 1:
        wa, _, a = heapq.heappop(pq)
        wb, _, b = heapq.heappop(pq)
        heapq.heappush(pq, (wa + wb, next(seq), Internal(weight=wa + wb, left=a, right=b)))
    return pq[0][2]


def _walk(node: HuffmanTree, prefix: str) -> Iterator[Tuple[Leaf, str]]:
    if node.is_leaf:
        yield node, prefix
        return
    yield from _walk(node.left, prefix + "0")
    yield from _walk(node.right, prefix + "1")


def iter_leaves(tree: HuffmanTree) -> Iterator[Tuple[Leaf, str]]:
    """Yield (leaf, code) pairs left to right. A root leaf gets code "0"."""
    if tree.is_leaf:
        yield tree, "0"
        return
    yield from _walk(tree, "")


def build_table(tree: HuffmanTree) -> Dict[str, str]:
    return {leaf.key: code for leaf, code in iter_leaves(tree)}


def encoded_bit_length(tree: HuffmanTree) -> int:
    """Bits needed to code every occurrence counted in the tree's leaf weights."""
    return sum(leaf.weight * len(code) for leaf, code in iter_leaves(tree))
