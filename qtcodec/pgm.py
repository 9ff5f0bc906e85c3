"""Reading and writing binary PGM images, and rendering quadtrees to pixels."""

from __future__ import annotations

import re
from os import PathLike

from .quadtree import QuadTree

_LEADING_INT = re.compile(rb"\s*([+-]?\d+)")
_MAGIC = b"P5"
_GRID_LINE = 200
_GRID_FILL = 255


class PgmError(Exception):
    """Raised when a PGM image cannot be read."""


def _scan_ints(line: bytes, limit: int) -> list[int]:
    """Parse up to ``limit`` whitespace-separated integers at the start of ``line``."""
    values: list[int] = []
    pos = 0
    while len(values) < limit:
        match = _LEADING_INT.match(line, pos)
        if match is None:
            break
        values.append(int(match.group(1)))
        pos = match.end()
    return values


def read_pgm(path: str | PathLike[str]) -> tuple[bytes, int, int]:
    """Read a binary (P5) PGM file and return ``(pixels, rows, cols)``.

    Comment lines starting with ``#`` are skipped.  The dimensions and the
    maximum value may share one line, or the maximum value may follow on a
    later line.
    """
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise PgmError(f"Impossible d'ouvrir le fichier {path}") from exc
    with stream:
        if stream.read(2) != _MAGIC:
            raise PgmError("Format incorrect")
        rows = cols = max_val = None
        for line in iter(stream.readline, b""):
            if line.startswith(b"#"):
                continue
            values = _scan_ints(line, 3)
            if len(values) == 3:
                cols, rows, max_val = values
                break
            if len(values) == 2:
                cols, rows = values
                for extra in iter(stream.readline, b""):
                    if extra.startswith(b"#"):
                        continue
                    found = _scan_ints(extra, 1)
                    if found:
                        max_val = found[0]
                        break
                break
        if (
            cols is None
            or rows is None
            or max_val is None
            or cols <= 0
            or rows <= 0
            or max_val <= 0
            or max_val > 255
        ):
            raise PgmError("Dimensions ou valeur maximale incorrecte")
        total = rows * cols
        pixels = stream.read(total)
        if len(pixels) != total:
            raise PgmError("lecture des pixels")
    return pixels, rows, cols


def render_pixmap(tree: QuadTree, rows: int, cols: int) -> bytearray:
    """Render the leaf means of ``tree`` into a pixel buffer with row stride ``rows``."""
    pixels = bytearray(rows * cols)

    def visit(index: int, level: int, x: int, y: int, height: int, width: int) -> None:
        if level == tree.levels:
            pixels[y * rows + x] = tree.nodes[index].mean & 0xFF
            return
        half_h, half_w = height // 2, width // 2
        first = 4 * index + 1
        visit(first, level + 1, x, y, half_h, half_w)
        visit(first + 1, level + 1, x + half_w, y, half_h, half_w)
        visit(first + 2, level + 1, x + half_w, y + half_h, half_h, half_w)
        visit(first + 3, level + 1, x, y + half_h, half_h, half_w)

    visit(0, 0, 0, 0, rows, cols)
    return pixels


def render_grid(tree: QuadTree, rows: int, cols: int) -> bytearray:
    """Draw the segmentation grid of ``tree``: block borders grey, interiors white."""
    pixels = bytearray(rows * cols)

    def visit(index: int, level: int, x: int, y: int, height: int, width: int) -> None:
        if level == tree.levels:
            pixels[y * rows + x] = _GRID_LINE
            return
        if tree.nodes[index].uniform:
            for i in range(height):
                for j in range(width):
                    border = i in (0, height - 1) or j in (0, width - 1)
                    pixels[(y + i) * rows + x + j] = _GRID_LINE if border else _GRID_FILL
            return
        half_h, half_w = height // 2, width // 2
        first = 4 * index + 1
        visit(first, level + 1, x, y, half_h, half_w)
        visit(first + 1, level + 1, x + half_w, y, half_h, half_w)
        visit(first + 2, level + 1, x + half_w, y + half_h, half_h, half_w)
        visit(first + 3, level + 1, x, y + half_h, half_h, half_w)

    visit(0, 0, 0, 0, rows, cols)
    return pixels


def save_pgm(pixels: bytes, path: str | PathLike[str], width: int, height: int) -> None:
    """Write ``width * height`` pixels to ``path`` as a binary PGM image."""
    header = f"P5\n{width} {height}\n255\n".encode("ascii")
    with open(path, "wb") as stream:
        stream.write(header)
        stream.write(bytes(pixels[: width * height]))


def grid_filename(name: str) -> str:
    """Replace everything from the last dot of ``name`` with ``_g.pgm``."""
    dot = name.rfind(".")
    if dot < 0:
        raise ValueError(f"file name has no extension: {name}")
    return name[:dot] + "_g.pgm"


def write_grid(tree: QuadTree, rows: int, cols: int, name: str) -> str:
    """Save the segmentation grid of ``tree`` next to ``name`` and return its path."""
    path = grid_filename(name)
    save_pgm(render_grid(tree, rows, cols), path, rows, cols)
    return path