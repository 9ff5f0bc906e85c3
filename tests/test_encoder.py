import io
import random

import pytest

from qtcodec.bitstream import BitReader, BitWriter
from qtcodec.decoder import read_nodes
from qtcodec.encoder import build_tree, count_bits, write_nodes, write_qtc
from qtcodec.quadtree import QuadTree


def _encoded(size, pixels):
    tree = QuadTree.for_image(size, size)
    build_tree(tree, pixels, size)
    return tree


def _random_pixels(size, seed):
    rng = random.Random(seed)
    return bytes(rng.randrange(256) for _ in range(size * size))


def _blocky_pixels(size, block):
    return bytes(
        ((r // block) * 37 + (c // block) * 91) % 256
        for r in range(size)
        for c in range(size)
    )


def _state(tree):
    return [(n.mean, n.error, n.uniform) for n in tree.nodes]


def test_single_pixel_tree_uses_root_fields():
    tree = _encoded(1, bytes([200]))
    assert tree.nodes[0].mean == 200
    assert tree.nodes[0].uniform
    assert count_bits(tree) == 11


def test_children_follow_clockwise_order():
    tree = _encoded(2, bytes([10, 20, 30, 40]))
    assert [n.mean for n in tree.nodes[1:]] == [10, 20, 40, 30]
    assert tree.nodes[0].mean == 25
    assert tree.nodes[0].error == 0
    assert tree.nodes[0].uniform is False


def test_uniform_image_collapses_to_root():
    tree = _encoded(8, bytes([77] * 64))
    assert all(n.uniform and n.mean == 77 and n.error == 0 for n in tree.nodes)
    single = _encoded(1, bytes([77]))
    assert count_bits(tree) == count_bits(single)


def test_error_is_remainder_of_children_sum():
    pixels = _random_pixels(4, 3)
    tree = _encoded(4, pixels)
    for index in range(5):
        children = tree.nodes[4 * index + 1:4 * index + 5]
        total = sum(c.mean for c in children)
        assert tree.nodes[index].mean == total // 4
        if not tree.nodes[index].uniform:
            assert tree.nodes[index].error == total % 4


def test_invalid_width_raises():
    tree = QuadTree(1)
    with pytest.raises(ValueError):
        build_tree(tree, bytes(4), 0)


@pytest.mark.parametrize("size,seed", [(2, 1), (4, 2), (8, 3), (16, 4)])
def test_write_nodes_length_matches_count(size, seed):
    tree = _encoded(size, _random_pixels(size, seed))
    buffer = io.BytesIO()
    with BitWriter(buffer) as writer:
        write_nodes(writer, tree)
    assert len(buffer.getvalue()) == (count_bits(tree) + 7) // 8


@pytest.mark.parametrize(
    "size,pixels",
    [
        (1, bytes([5])),
        (4, _random_pixels(4, 9)),
        (8, _blocky_pixels(8, 2)),
        (16, _blocky_pixels(16, 4)),
        (16, _random_pixels(16, 11)),
    ],
)
def test_round_trip_through_bits(size, pixels):
    tree = _encoded(size, pixels)
    buffer = io.BytesIO()
    with BitWriter(buffer) as writer:
        write_nodes(writer, tree)
    buffer.seek(0)
    decoded = QuadTree(tree.levels)
    read_nodes(BitReader(buffer), decoded)
    assert _state(decoded) == _state(tree)


def test_blocky_image_needs_fewer_bits_than_noise():
    blocky = _encoded(16, _blocky_pixels(16, 4))
    noisy = _encoded(16, _random_pixels(16, 5))
    assert count_bits(blocky) < count_bits(noisy)


def test_filter_never_increases_bits():
    tree = _encoded(16, _random_pixels(16, 6))
    before = count_bits(tree)
    tree.filter(2.0, 1.0)
    assert count_bits(tree) <= before


def test_write_qtc_header_and_payload(tmp_path):
    tree = _encoded(8, _blocky_pixels(8, 2))
    path = tmp_path / "out.qtc"
    rate = write_qtc(tree, path, 8 * 8 * 8)
    data = path.read_bytes()
    lines = data.split(b"\n", 3)
    assert lines[0] == b"Q1"
    assert lines[1].startswith(b"# ")
    assert lines[2] == f"# compression rate: {rate:.2f}%".encode()
    payload = lines[3]
    assert payload[0] == tree.levels
    assert len(payload) - 1 == (count_bits(tree) + 7) // 8
    assert rate == pytest.approx(count_bits(tree) / (8 * 8 * 8) * 100.0)


def test_write_qtc_rejects_zero_size(tmp_path):
    tree = _encoded(1, bytes([1]))
    with pytest.raises(ValueError):
        write_qtc(tree, tmp_path / "x.qtc", 0)