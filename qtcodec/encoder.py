"""Build a quadtree from pixels and serialise it to the QTC format."""

from __future__ import annotations

import datetime
from collections.abc import Iterator, Sequence
from os import PathLike

from .bitstream import BitWriter
from .quadtree import Node, QuadTree, node_count

_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def build_tree(tree: QuadTree, pixels: Sequence[int], width: int) -> None:
    """Fill ``tree`` bottom-up from row-major ``pixels`` with row stride ``width``.

    The region covered spans ``width`` rows and ``len(pixels) // width``
    columns, halved at every level until the leaves are reached.
    """
    if width <= 0:
        raise ValueError("width must be positive")
    _build(tree, pixels, width, 0, 0, 0, 0, width, len(pixels) // width)


def _build(
    tree: QuadTree,
    pixels: Sequence[int],
    width: int,
    index: int,
    level: int,
    x: int,
    y: int,
    rows: int,
    cols: int,
) -> None:
    node = tree.nodes[index]
    if level == tree.levels:
        node.mean = pixels[y * width + x]
        node.error = 0
        node.uniform = True
        return
    half_rows, half_cols = rows // 2, cols // 2
    first = 4 * index + 1
    corners = (
        (x, y),
        (x + half_cols, y),
        (x + half_cols, y + half_rows),
        (x, y + half_rows),
    )
    for child, (cx, cy) in zip(range(first, first + 4), corners):
        _build(tree, pixels, width, child, level + 1, cx, cy, half_rows, half_cols)
    children = tree.nodes[first:first + 4]
    total = sum(child.mean for child in children)
    node.mean = total // 4
    if all(child.uniform for child in children) and len({c.mean for c in children}) == 1:
        node.uniform = True
        node.error = 0
    else:
        node.uniform = False
        node.error = total % 4


def _flags(node: Node) -> Iterator[tuple[int, int]]:
    yield node.error, 2
    if node.error == 0:
        yield int(node.uniform), 1


def _fields(tree: QuadTree) -> Iterator[tuple[int, int]]:
    """Yield ``(value, nbits)`` pairs in the order they appear in the stream."""
    nodes = tree.nodes
    for level in range(tree.levels + 1):
        start = node_count(level - 1)
        for index in range(start, start + 4**level):
            node = nodes[index]
            if level and nodes[(index - 1) // 4].uniform:
                continue
            fourth = index % 4 == 0
            if level == 0:
                yield node.mean, 8
                yield from _flags(node)
            elif level == tree.levels:
                if not fourth:
                    yield node.mean, 8
            else:
                if not fourth:
                    yield node.mean, 8
                yield from _flags(node)


def count_bits(tree: QuadTree) -> int:
    """Number of bits needed to encode the node data of ``tree``."""
    return sum(nbits for _, nbits in _fields(tree))


def write_nodes(writer: BitWriter, tree: QuadTree) -> None:
    """Write the node data of ``tree`` through ``writer``, level by level."""
    for value, nbits in _fields(tree):
        writer.write_bits(value, nbits)


def _date_stamp(day: datetime.date) -> str:
    return f"{_MONTHS[day.month - 1]} {day.day:2d} {day.year}"


def write_qtc(tree: QuadTree, path: str | PathLike[str], original_size: int) -> float:
    """Write ``tree`` to a QTC file and return the compression rate in percent.

    ``original_size`` is the size of the source image in bits.
    """
    if original_size <= 0:
        raise ValueError("original size must be positive")
    rate = count_bits(tree) / original_size * 100.0
    header = (
        "Q1\n"
        f"# {_date_stamp(datetime.date.today())}\n"
        f"# compression rate: {rate:.2f}%\n"
    )
    with open(path, "wb") as stream:
        stream.write(header.encode("ascii"))
        stream.write(bytes((tree.levels & 0xFF,)))
        with BitWriter(stream) as writer:
            write_nodes(writer, tree)
    return rate