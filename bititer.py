"""Read-only traversal over a right-aligned bit buffer.

The iterators here never copy or modify the buffer they are given; they
only keep a cursor. Like the rest of the package they are meant for a
single owner on a single thread.
"""

from enum import Enum


class Direction(Enum):
    """Traversal order for :class:`BitDirectionalIterator`."""

    LEFT_TO_RIGHT = "left_to_right"
    RIGHT_TO_LEFT = "right_to_left"


class BitIterator:
    """Single-pass iterator yielding the bits of a buffer as booleans.

    Bits are produced from the most significant (index 0) to the least
    significant. The buffer must be right-aligned: when ``bit_count`` is
    not a multiple of 8 the unused bits sit at the top of the first byte.

    :ivar data: Right-aligned source buffer.
    :type data: bytes
    :ivar bit_count: Number of significant bits in ``data``.
    :type bit_count: int
    :ivar pos: Index of the next bit to yield.
    :type pos: int
    """

    def __init__(self, data: bytes, bit_count: int):
        """Create an iterator over the ``bit_count`` trailing bits of ``data``.

        :param data: Right-aligned byte buffer.
        :type data: bytes
        :param bit_count: Number of significant bits.
        :type bit_count: int
        :returns: None
        :rtype: None
        :raises ValueError: If ``bit_count`` is negative or does not fit in
                            ``data``.
        """
        self.data = data
        self.bit_count = bit_count
        self.pos = 0
        self._offset = _padding(data, bit_count)

    def __iter__(self):
        return self

    def __next__(self) -> bool:
        if self.pos >= self.bit_count:
            raise StopIteration
        bit = _bit_at(self.data, self._offset + self.pos)
        self.pos += 1
        return bool(bit)

    def __length_hint__(self) -> int:
        return self.bit_count - self.pos


class BitDirectionalIterator:
    """Single-pass iterator yielding ``0``/``1`` in a selectable direction.

    :ivar data: Right-aligned source buffer.
    :type data: bytes
    :ivar bit_count: Number of significant bits in ``data``.
    :type bit_count: int
    :ivar direction: Traversal order.
    :type direction: Direction
    :ivar pos: Logical index (0 = leftmost) of the next bit to yield.
    :type pos: int
    """

    def __init__(
        self,
        data: bytes,
        bit_count: int,
        direction: Direction = Direction.LEFT_TO_RIGHT,
    ):
        """Create an iterator over ``data`` in the given ``direction``.

        Right-to-left traversal starts at the last bit of the last byte and
        walks toward the front of the buffer.

        :param data: Right-aligned byte buffer.
        :type data: bytes
        :param bit_count: Number of significant bits.
        :type bit_count: int
        :param direction: Traversal order.
        :type direction: Direction
        :returns: None
        :rtype: None
        :raises ValueError: If ``bit_count`` does not fit in ``data`` or
                            ``direction`` is unknown.
        """
        self.data = data
        self.bit_count = bit_count
        self.direction = Direction(direction)
        self._offset = _padding(data, bit_count)
        if self.direction is Direction.LEFT_TO_RIGHT:
            self.pos = 0
            self._step = 1
        else:
            self.pos = bit_count - 1
            self._step = -1

    def __iter__(self):
        return self

    def __next__(self) -> int:
        if not 0 <= self.pos < self.bit_count:
            raise StopIteration
        bit = _bit_at(self.data, self._offset + self.pos)
        self.pos += self._step
        return bit

    def __length_hint__(self) -> int:
        if self._step > 0:
            return self.bit_count - self.pos
        return self.pos + 1


def _padding(data: bytes, bit_count: int) -> int:
    """Return the number of filler bits in front of the first significant bit."""
    total = len(data) * 8
    if bit_count < 0 or bit_count > total:
        raise ValueError(
            f"bit_count must be in range 0-{total} for a {len(data)}-byte "
            f"buffer, got {bit_count}"
        )
    return total - bit_count


def _bit_at(data: bytes, physical: int) -> int:
    return (data[physical >> 3] >> (7 - (physical & 7))) & 1
