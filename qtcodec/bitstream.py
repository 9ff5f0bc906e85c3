"""Bit-level reading and writing on top of binary streams."""

from __future__ import annotations

from typing import BinaryIO


class BitWriter:
    """Pack bits most-significant first into bytes written to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self._buffer = 0
        self._count = 0

    def write_bit(self, bit: int) -> None:
        """Append one bit; a full byte is written out immediately."""
        self._buffer = ((self._buffer << 1) | (int(bit) & 1)) & 0xFF
        self._count += 1
        if self._count == 8:
            self.stream.write(bytes((self._buffer,)))
            self._buffer = 0
            self._count = 0

    def write_bits(self, value: int, nbits: int) -> None:
        """Append the low ``nbits`` bits of ``value``, most significant first."""
        for shift in reversed(range(nbits)):
            self.write_bit((value >> shift) & 1)

    def flush(self) -> None:
        """Write any pending bits, padded with zeros on the right."""
        if self._count > 0:
            self._buffer = (self._buffer << (8 - self._count)) & 0xFF
            self.stream.write(bytes((self._buffer,)))
            self._buffer = 0
            self._count = 0

    def __enter__(self) -> BitWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.flush()


class BitReader:
    """Read bits most-significant first from a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream
        self._buffer = 0
        self._count = 0

    def read_bit(self) -> int:
        """Return the next bit; raise EOFError when the stream is exhausted."""
        if self._count == 0:
            data = self.stream.read(1)
            if not data:
                raise EOFError("no more bits in stream")
            self._buffer = data[0]
            self._count = 8
        self._count -= 1
        return (self._buffer >> self._count) & 1

    def read_bits(self, nbits: int) -> int:
        """Return the next ``nbits`` bits as an unsigned integer."""
        result = 0
        for _ in range(nbits):
            result = (result << 1) | self.read_bit()
        return result