"""Read QTC files back into quadtrees."""

from __future__ import annotations

from os import PathLike

from .bitstream import BitReader
from .quadtree import Node, QuadTree, node_count

_HEADER_LINES = 3


def _interpolate(tree: QuadTree, index: int) -> int:
    parent = tree.nodes[(index - 1) // 4]
    siblings = sum(node.mean for node in tree.nodes[index - 3:index])
    return (4 * parent.mean + parent.error - siblings) & 0xFF


def _read_flags(reader: BitReader, node: Node) -> None:
    node.error = reader.read_bits(2)
    node.uniform = bool(reader.read_bits(1)) if node.error == 0 else False


def read_nodes(reader: BitReader, tree: QuadTree) -> None:
    """Fill ``tree`` from the node data produced by the encoder."""
    nodes = tree.nodes
    for level in range(tree.levels + 1):
        start = node_count(level - 1)
        for index in range(start, start + 4**level):
            node = nodes[index]
            if level:
                parent = nodes[(index - 1) // 4]
                if parent.uniform:
                    node.mean = parent.mean
                    continue
            fourth = index % 4 == 0
            if level == 0:
                node.mean = reader.read_bits(8)
                _read_flags(reader, node)
            elif level == tree.levels:
                node.mean = _interpolate(tree, index) if fourth else reader.read_bits(8)
            else:
                node.mean = _interpolate(tree, index) if fourth else reader.read_bits(8)
                _read_flags(reader, node)


def decode_qtc(path: str | PathLike[str]) -> QuadTree:
    """Decode the QTC file at ``path`` into a quadtree.

    Raises ValueError when the header is incomplete and EOFError when the
    node data ends early.
    """
    with open(path, "rb") as stream:
        for _ in range(_HEADER_LINES):
            if not stream.readline():
                raise ValueError("file is too short to hold a 3-line header")
        reader = BitReader(stream)
        tree = QuadTree(reader.read_bits(8))
        read_nodes(reader, tree)
    return tree