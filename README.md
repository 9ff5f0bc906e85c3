# qtcodec

A quadtree codec for 8-bit greyscale images in binary PGM (`P5`) format.

An image is split recursively into four quadrants down to single pixels.
Each node stores the integer mean of its four children, the remainder of
that mean (the "error", 0–3) and a uniformity bit. Children of a uniform
node are not written at all, and the mean of the fourth child of every
node is recovered from its parent and its three siblings, so it is never
stored. Without filtering the encoding is lossless.

With a non-zero `alpha`, nodes whose variance falls below a threshold are
merged into uniform blocks, trading quality for size (lossy mode).

Images should be square with a side that is a power of two; the tree is
sized from the larger dimension, and other shapes are not reproduced
faithfully.

## Installation

```
pip install .
```

## Command line

Encode a PGM image into a QTC file:

```
qtcodec -c -i picture.pgm -o picture.qtc
```

Decode a QTC file back to PGM:

```
qtcodec -u -i picture.qtc -o picture.pgm
```

Options:

| Option       | Meaning                                                         |
|--------------|-----------------------------------------------------------------|
| `-h`         | Print the option list and exit                                  |
| `-c`         | Encoder mode                                                    |
| `-u`         | Decoder mode (the default)                                      |
| `-i <file>`  | Input file (PGM when encoding, QTC when decoding)               |
| `-o <file>`  | Output file (defaults: `QTC/out.qtc` or `PGM/out.pgm`)          |
| `-g`         | Also write the segmentation grid as a PGM image (see below)     |
| `-v`         | Verbose: print the chosen settings first                        |
| `-a <float>` | Filtering strength alpha; `0` (the default) means lossless      |

The grid image is named after the input file when encoding and after the
output file when decoding, with everything from the last dot replaced by
`_g.pgm` (for example `picture.pgm` gives `picture_g.pgm`). Block borders
are drawn in grey (200) and block interiors in white (255).

Messages on the console are in French. The command exits with status 0 on
success and 1 on a bad option, an unreadable image or a malformed QTC
file. Directories in the output path are not created; the default paths
only work if `QTC/` or `PGM/` already exists.

## Library use

```python
from qtcodec.pgm import read_pgm, render_pixmap, save_pgm
from qtcodec.quadtree import QuadTree
from qtcodec.encoder import build_tree, write_qtc
from qtcodec.decoder import decode_qtc

pixels, rows, cols = read_pgm("picture.pgm")
tree = QuadTree.for_image(rows, cols)
build_tree(tree, pixels, rows)
tree.filter(0.5, 1.0)          # optional, lossy
rate = write_qtc(tree, "picture.qtc", rows * cols * 8)

decoded = decode_qtc("picture.qtc")
side = 1 << decoded.levels
save_pgm(render_pixmap(decoded, side, side), "restored.pgm", side, side)
```

Modules:

- `qtcodec.bitstream` – `BitWriter` and `BitReader`, most-significant-bit
  first; `BitReader.read_bit` raises `EOFError` at the end of the stream.
- `qtcodec.quadtree` – `Node`, `QuadTree` (a flat node list where the
  children of node `i` are `4*i+1` to `4*i+4`), `node_count` and
  `max_level`. `QuadTree.filter(alpha, beta)` performs the lossy merge.
- `qtcodec.encoder` – `build_tree`, `count_bits`, `write_nodes` and
  `write_qtc`, which returns the compression rate in percent.
- `qtcodec.decoder` – `read_nodes` and `decode_qtc`; the latter raises
  `ValueError` for an incomplete header and `EOFError` for truncated data.
- `qtcodec.pgm` – `read_pgm` (raises `PgmError`), `save_pgm`,
  `render_pixmap`, `render_grid`, `grid_filename` and `write_grid`.
- `qtcodec.cli` – `Options`, `parse_options`, `describe`, `encode`,
  `decode` and `main`; `UsageError` is raised for bad arguments.

## File format

A `.qtc` file starts with three text lines: the magic `Q1`, a comment with
the date of encoding (`# Mon DD YYYY`) and a comment with the compression
rate (`# compression rate: 12.34%`). A byte giving the number of tree
levels follows, then the nodes, level by level from the root, packed as a
most-significant-bit-first bit stream and padded with zeros to a whole
byte.

## Limits

Only binary `P5` PGM files with a maximum value of at most 255 are read;
plain-text `P2` files and other image formats are not supported. The
decoder always produces a square image whose side is `2 ** levels`.