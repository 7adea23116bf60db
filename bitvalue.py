"""Bit sequences of explicit length backed by a Python integer.

A :class:`BitValue` keeps its bits in a non-negative ``int`` together with
an explicit bit count, so leading zero bits are never lost. Index 0 is the
leftmost (most significant) bit.

Converting to and from bytes needs an alignment whenever the bit count is
not a multiple of 8. The 12-bit sequence ``101000111001`` becomes
``00001010 00111001`` when right aligned (leading filler bits, like an
ordinary number) and ``10100011 10010000`` when left aligned (trailing
filler bits, like packed wire data). Storage is always right aligned.

Instances are mutable and not synchronized; use each one from a single
thread.
"""

import ctypes
import logging
import operator
from enum import Enum
from functools import total_ordering
from typing import Tuple

from bititer import BitDirectionalIterator, BitIterator, Direction

__all__ = [
    "Align",
    "BITS_PER_BYTE",
    "BitValue",
    "Direction",
    "Group",
    "SOURCE_SIZE",
]

_logger = logging.getLogger(__name__)

BITS_PER_BYTE = 8
SOURCE_SIZE = -1  #: Bit count taken from the size of the source value

_FIXED_WIDTH_TYPES = (ctypes.c_int8, ctypes.c_int16, ctypes.c_int32, ctypes.c_int64)
_REPR_LIMIT = 64


class Align(Enum):
    """Side of a byte buffer the bits are flush against.

    For bitwise operations this also tells on which side the shorter
    operand is zero-extended; for grouped strings, where grouping starts.
    """

    LEFT = "left"
    RIGHT = "right"


class Group(Enum):
    """Grouping of digits in :meth:`BitValue.to_binary_string`."""

    CONTINUOUS = 0
    BYTE = 8
    NIBBLE = 4

    @property
    def size(self) -> int:
        """Number of digits per group, 0 for no grouping."""
        return self.value


def _mask(bit_count: int) -> int:
    return (1 << bit_count) - 1


def _byte_length(bit_count: int) -> int:
    return (bit_count + BITS_PER_BYTE - 1) // BITS_PER_BYTE


def _check_count(name: str, count: int) -> int:
    count = operator.index(count)
    if count < 0:
        raise ValueError(f"{name} must be >= 0, got {count}")
    return count


@total_ordering
class BitValue:
    """A sequence of bits with an exact length.

    Operations documented as *in place* change this instance and return
    ``None`` (or the removed part, for :meth:`extract`). All other
    operations return new instances and leave their operands untouched.

    Equality requires the same bits *and* the same length. Ordering
    compares the length first, so any shorter sequence sorts before any
    longer one.

    :ivar _value: Right-aligned magnitude, always below ``2 ** bit_count``.
    :type _value: int
    :ivar _bit_count: Number of significant bits.
    :type _bit_count: int
    """

    __hash__ = None

    def __init__(self, value: int = 0, bit_count: int = 0):
        """Create a sequence holding the ``bit_count`` low bits of ``value``.

        :param value: Source integer; the sign is discarded.
        :type value: int
        :param bit_count: Length of the sequence.
        :type bit_count: int
        :returns: None
        :rtype: None
        :raises ValueError: If ``bit_count`` is negative.
        """
        self._bit_count = _check_count("bit_count", bit_count)
        self._value = abs(operator.index(value)) & _mask(self._bit_count)

    # -- construction -------------------------------------------------------

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        bit_count: int = SOURCE_SIZE,
        align: Align = Align.RIGHT,
    ) -> "BitValue":
        """Build a sequence from a big-endian byte buffer.

        With ``SOURCE_SIZE`` every bit of ``data`` is used and ``align`` is
        irrelevant. Otherwise ``data`` is reinterpreted at ``bit_count``
        bits: right-aligned input keeps its trailing bits and is
        zero-extended at the front, left-aligned input keeps its leading
        bits and is zero-extended at the back.

        >>> BitValue.from_bytes(b"\\xa3\\x90", 12, Align.LEFT).to_binary_string()
        '101000111001'

        :param data: Source buffer.
        :type data: bytes | bytearray | memoryview
        :param bit_count: Target length or ``SOURCE_SIZE``.
        :type bit_count: int
        :param align: Alignment of the bits inside ``data``.
        :type align: Align
        :returns: New sequence.
        :rtype: BitValue
        :raises ValueError: If ``bit_count`` is negative (other than the
                            sentinel) or ``align`` is unknown.
        """
        data = bytes(data)
        align = Align(align)
        source_bits = len(data) * BITS_PER_BYTE
        value = int.from_bytes(data, "big")
        if bit_count == SOURCE_SIZE:
            return cls(value, source_bits)

        bit_count = _check_count("bit_count", bit_count)
        if bit_count != source_bits:
            _logger.debug(
                "reinterpreting %d source bits as %d bits (%s aligned)",
                source_bits, bit_count, align.value,
            )
            if align is Align.LEFT:
                if bit_count < source_bits:
                    value >>= source_bits - bit_count
                else:
                    value <<= bit_count - source_bits
        return cls(value, bit_count)

    @classmethod
    def from_number(cls, number, bit_count: int = SOURCE_SIZE) -> "BitValue":
        """Build a sequence from the binary representation of a number.

        Accepted sources and their natural width (used with
        ``SOURCE_SIZE``):

        * ``int`` -- the bit length of its absolute value;
        * ``ctypes.c_int8`` .. ``ctypes.c_int64`` -- 8, 16, 32 or 64;
        * signed integer scalars carrying a ``dtype`` (numpy) --
          ``dtype.itemsize * 8``.

        The sign is discarded. A width smaller than the value keeps only
        its low bits.

        :param number: Source number.
        :param bit_count: Target length or ``SOURCE_SIZE``.
        :type bit_count: int
        :returns: New sequence.
        :rtype: BitValue
        :raises TypeError: If ``number`` is of an unsupported type.
        :raises ValueError: If ``bit_count`` is negative.
        """
        dtype = getattr(number, "dtype", None)
        if isinstance(number, bool):
            raise TypeError("bool is not accepted as a numeric source")
        elif isinstance(number, int):
            value = number
            natural = abs(number).bit_length()
        elif isinstance(number, _FIXED_WIDTH_TYPES):
            value = number.value
            natural = ctypes.sizeof(number) * BITS_PER_BYTE
        elif dtype is not None and getattr(dtype, "kind", None) == "i":
            value = int(number)
            natural = dtype.itemsize * BITS_PER_BYTE
        else:
            raise TypeError(
                "only int, ctypes c_int8/c_int16/c_int32/c_int64 or signed "
                f"integer scalars are accepted, got {type(number).__name__}"
            )
        if bit_count == SOURCE_SIZE:
            bit_count = natural
        return cls(value, bit_count)

    @classmethod
    def from_binary_string(cls, text: str) -> "BitValue":
        """Parse a string of ``0``/``1`` digits.

        Spaces and underscores are ignored, so any output of
        :meth:`to_binary_string` parses back to an equal sequence.

        :param text: Binary digits.
        :type text: str
        :returns: New sequence, one bit per digit.
        :rtype: BitValue
        :raises ValueError: On any other character.
        """
        digits = text.replace(" ", "").replace("_", "")
        invalid = set(digits) - {"0", "1"}
        if invalid:
            raise ValueError(f"Invalid binary digits: {''.join(sorted(invalid))!r}")
        return cls(int(digits, 2) if digits else 0, len(digits))

    @classmethod
    def zeros(cls, bit_count: int) -> "BitValue":
        """Return a sequence of ``bit_count`` zero bits.

        :raises ValueError: If ``bit_count`` is negative.
        """
        return cls(0, bit_count)

    @classmethod
    def ones(cls, bit_count: int) -> "BitValue":
        """Return a sequence of ``bit_count`` one bits.

        :raises ValueError: If ``bit_count`` is negative.
        """
        bit_count = _check_count("bit_count", bit_count)
        return cls(_mask(bit_count), bit_count)

    def copy(self) -> "BitValue":
        """Return an independent copy of this sequence."""
        return BitValue(self._value, self._bit_count)

    __copy__ = copy

    def __deepcopy__(self, memo):
        return self.copy()

    # -- accessors ----------------------------------------------------------

    @property
    def bit_count(self) -> int:
        """Number of bits in the sequence."""
        return self._bit_count

    def to_int(self) -> int:
        """Return the non-negative magnitude of the sequence."""
        return self._value

    def to_bytes(self, align: Align = Align.RIGHT) -> bytes:
        """Render the sequence as ``ceil(bit_count / 8)`` big-endian bytes.

        :param align: ``RIGHT`` puts filler bits at the front of the first
                      byte, ``LEFT`` at the end of the last byte.
        :type align: Align
        :returns: Encoded bytes; empty for an empty sequence.
        :rtype: bytes
        """
        length = _byte_length(self._bit_count)
        value = self._value
        if Align(align) is Align.LEFT:
            value <<= length * BITS_PER_BYTE - self._bit_count
        return value.to_bytes(length, "big")

    def __len__(self) -> int:
        return self._bit_count

    def __bool__(self) -> bool:
        return self._bit_count > 0

    def __int__(self) -> int:
        return self._value

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    # -- single bits --------------------------------------------------------

    def _shift_of(self, index: int) -> int:
        index = operator.index(index)
        if not 0 <= index < self._bit_count:
            raise IndexError(
                f"Bit index must be in range 0-{self._bit_count - 1}, got {index}"
            )
        return self._bit_count - 1 - index

    def get_bit(self, index: int) -> bool:
        """Return the bit at ``index`` (0 is the leftmost bit).

        :raises IndexError: If ``index`` is outside ``[0, bit_count - 1]``.
        """
        return bool((self._value >> self._shift_of(index)) & 1)

    def set_bit(self, index: int, bit: bool):
        """Set or clear the bit at ``index`` in place.

        :param index: Position, 0 is the leftmost bit.
        :type index: int
        :param bit: Any truthy value sets the bit.
        :type bit: bool
        :returns: None
        :rtype: None
        :raises IndexError: If ``index`` is outside ``[0, bit_count - 1]``.
        """
        shift = self._shift_of(index)
        if bit:
            self._value |= 1 << shift
        else:
            self._value &= ~(1 << shift)

    __getitem__ = get_bit
    __setitem__ = set_bit

    # -- shifting and rotation (in place) ------------------------------------

    def shift_right(self, n: int):
        """Drop the ``n`` rightmost bits in place.

        Equivalent to ``sub_sequence(0, bit_count - n)``.

        :param n: Number of bits to drop.
        :type n: int
        :returns: None
        :rtype: None
        :raises ValueError: If ``n`` is negative or exceeds ``bit_count``.
        """
        n = operator.index(n)
        if n < 0 or n > self._bit_count:
            raise ValueError(f"Shift must be in range 0-{self._bit_count}, got {n}")
        self._value >>= n
        self._bit_count -= n

    def shift_left(self, n: int):
        """Append ``n`` zero bits on the right in place.

        :param n: Number of zero bits to append.
        :type n: int
        :returns: None
        :rtype: None
        :raises ValueError: If ``n`` is negative.
        """
        n = _check_count("Shift", n)
        self._value <<= n
        self._bit_count += n

    def shift(self, n: int, keep_size: bool = False):
        """Shift in place toward the left (``n > 0``) or right (``n < 0``).

        With ``keep_size`` the length does not change: bits pushed past one
        end are lost and zero bits come in at the other end. Without it a
        left shift appends ``n`` zero bits and a right shift drops ``-n``
        bits, as :meth:`shift_left` and :meth:`shift_right` do.

        :param n: Signed shift distance.
        :type n: int
        :param keep_size: Keep the current bit count.
        :type keep_size: bool
        :returns: None
        :rtype: None
        :raises ValueError: If a right shift without ``keep_size`` drops more
                            bits than there are.
        """
        n = operator.index(n)
        if keep_size:
            if abs(n) >= self._bit_count:
                self._value = 0
            elif n > 0:
                self._value = (self._value << n) & _mask(self._bit_count)
            else:
                self._value >>= -n
        elif n > 0:
            self.shift_left(n)
        elif n < 0:
            self.shift_right(-n)

    def rotate(self, n: int):
        """Rotate in place, to the left for ``n > 0`` and right for ``n < 0``.

        The sequence is split at ``n mod bit_count`` and the two parts are
        swapped. Rotating an empty sequence does nothing.

        :param n: Signed rotation distance.
        :type n: int
        :returns: None
        :rtype: None
        """
        n = operator.index(n)
        if not self._bit_count:
            return
        point = n % self._bit_count
        if point:
            prefix, suffix = self.split(point)
            self._value = suffix.concat(prefix)._value

    # -- structure ----------------------------------------------------------

    def split(self, index: int) -> Tuple["BitValue", "BitValue"]:
        """Split into ``(bits[0:index], bits[index:])``.

        Out-of-range indexes are clamped instead of rejected: a negative
        ``index`` gives an empty prefix, one past ``bit_count`` an empty
        suffix.

        :param index: First bit of the suffix.
        :type index: int
        :returns: New prefix and suffix sequences.
        :rtype: Tuple[BitValue, BitValue]
        """
        index = operator.index(index)
        if index < 0:
            return BitValue(), self.copy()
        if index > self._bit_count:
            return self.copy(), BitValue()
        tail = self._bit_count - index
        return (
            BitValue(self._value >> tail, index),
            BitValue(self._value & _mask(tail), tail),
        )

    def _check_range(self, start: int, length: int):
        if length < 0:
            raise ValueError(f"length must be >= 0, got {length}")
        end = start + length - 1
        if end > self._bit_count - 1:
            raise IndexError(
                f"End index must be in range 0-{self._bit_count - 1}, got {end}"
            )

    def sub_sequence(self, start: int, length: int) -> "BitValue":
        """Return the bits ``[start, start + length)`` as a new sequence.

        :param start: Index of the first bit.
        :type start: int
        :param length: Number of bits.
        :type length: int
        :returns: New sequence of ``length`` bits.
        :rtype: BitValue
        :raises IndexError: If ``start`` is outside ``[0, bit_count - 1]`` or
                            the range runs past the end.
        :raises ValueError: If ``length`` is negative.
        """
        start, length = operator.index(start), operator.index(length)
        if not 0 <= start < self._bit_count:
            raise IndexError(
                f"Start index must be in range 0-{self._bit_count - 1}, got {start}"
            )
        self._check_range(start, length)
        shift = self._bit_count - start - length
        return BitValue(self._value >> shift, length)

    def insert(self, index: int, other: "BitValue"):
        """Splice ``other`` in at ``index``, in place.

        :param index: Position in ``[0, bit_count]``.
        :type index: int
        :param other: Sequence to insert; it is not modified.
        :type other: BitValue
        :returns: None
        :rtype: None
        :raises IndexError: If ``index`` is out of range.
        """
        index = operator.index(index)
        other = _require_bit_value(other)
        if not 0 <= index <= self._bit_count:
            raise IndexError(
                f"Insert index must be in range 0-{self._bit_count}, got {index}"
            )
        prefix, suffix = self.split(index)
        joined = prefix.concat(other).concat(suffix)
        self._value, self._bit_count = joined._value, joined._bit_count

    def extract(self, from_index: int, length: int) -> "BitValue":
        """Remove the bits ``[from_index, from_index + length)`` in place.

        The inverse of :meth:`insert`: this sequence becomes the
        concatenation of what was left on either side.

        :param from_index: Position in ``[0, bit_count]``.
        :type from_index: int
        :param length: Number of bits to remove.
        :type length: int
        :returns: The removed bits.
        :rtype: BitValue
        :raises IndexError: If ``from_index`` is out of range or the range
                            runs past the end.
        :raises ValueError: If ``length`` is negative.
        """
        from_index, length = operator.index(from_index), operator.index(length)
        if not 0 <= from_index <= self._bit_count:
            raise IndexError(
                f"Start index must be in range 0-{self._bit_count}, got {from_index}"
            )
        self._check_range(from_index, length)
        prefix, rest = self.split(from_index)
        taken, suffix = rest.split(length)
        remainder = prefix.concat(suffix)
        self._value, self._bit_count = remainder._value, remainder._bit_count
        return taken

    def concat(self, other: "BitValue") -> "BitValue":
        """Return ``self`` followed by ``other`` as a new sequence."""
        other = _require_bit_value(other)
        return BitValue(
            (self._value << other._bit_count) | other._value,
            self._bit_count + other._bit_count,
        )

    def __add__(self, other):
        if not isinstance(other, BitValue):
            return NotImplemented
        return self.concat(other)

    # -- logic --------------------------------------------------------------

    def _operands(self, other, align) -> Tuple[int, int, int]:
        """Zero-extend both magnitudes to the longer length.

        Right alignment extends at the front, which leaves the integers
        as they are; left alignment extends at the back.
        """
        other = _require_bit_value(other)
        width = max(self._bit_count, other._bit_count)
        a, b = self._value, other._value
        if Align(align) is Align.LEFT:
            a <<= width - self._bit_count
            b <<= width - other._bit_count
        return a, b, width

    def and_(self, other: "BitValue", align: Align = Align.RIGHT) -> "BitValue":
        """Bitwise AND; the result has the length of the longer operand.

        :param other: Second operand.
        :type other: BitValue
        :param align: Side the shorter operand is aligned to; the other
                      side is filled with zeros.
        :type align: Align
        :returns: New sequence.
        :rtype: BitValue
        """
        a, b, width = self._operands(other, align)
        return BitValue(a & b, width)

    def or_(self, other: "BitValue", align: Align = Align.RIGHT) -> "BitValue":
        """Bitwise OR, aligned as in :meth:`and_`."""
        a, b, width = self._operands(other, align)
        return BitValue(a | b, width)

    def xor(self, other: "BitValue", align: Align = Align.RIGHT) -> "BitValue":
        """Bitwise XOR, aligned as in :meth:`and_`."""
        a, b, width = self._operands(other, align)
        return BitValue(a ^ b, width)

    def invert(self) -> "BitValue":
        """Return a new sequence with every bit flipped."""
        return BitValue(self._value ^ _mask(self._bit_count), self._bit_count)

    def __and__(self, other):
        if not isinstance(other, BitValue):
            return NotImplemented
        return self.and_(other)

    def __or__(self, other):
        if not isinstance(other, BitValue):
            return NotImplemented
        return self.or_(other)

    def __xor__(self, other):
        if not isinstance(other, BitValue):
            return NotImplemented
        return self.xor(other)

    __invert__ = invert

    # -- comparison ---------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, BitValue):
            return NotImplemented
        return (self._bit_count, self._value) == (other._bit_count, other._value)

    def __lt__(self, other):
        if not isinstance(other, BitValue):
            return NotImplemented
        return (self._bit_count, self._value) < (other._bit_count, other._value)

    # -- text ---------------------------------------------------------------

    def to_binary_string(
        self,
        align: Align = Align.RIGHT,
        group: Group = Group.CONTINUOUS,
        sep: str = " ",
    ) -> str:
        """Render the bits as ``0``/``1`` digits.

        With ``Group.BYTE`` or ``Group.NIBBLE`` the digits are split into
        groups joined by ``sep``. ``align`` tells which end the grouping
        starts from; a shorter remainder group ends up at the other end.

        >>> BitValue(0b101000111001, 12).to_binary_string(Align.RIGHT, Group.BYTE)
        '1010 00111001'
        >>> BitValue(0b101000111001, 12).to_binary_string(Align.LEFT, Group.BYTE)
        '10100011 1001'

        :param align: Anchor of the grouping.
        :type align: Align
        :param group: Group size.
        :type group: Group
        :param sep: Separator placed between groups.
        :type sep: str
        :returns: Exactly ``bit_count`` digits, plus separators.
        :rtype: str
        """
        count = self._bit_count
        digits = format(self._value, f"0{count}b") if count else ""
        size = Group(group).size
        if not size:
            return digits

        if Align(align) is Align.RIGHT:
            head = count % size
            chunks = [digits[:head]] if head else []
        else:
            head = 0
            chunks = []
        chunks.extend(digits[i:i + size] for i in range(head, count, size))
        return sep.join(chunks)

    def __str__(self) -> str:
        return self.to_binary_string()

    def __repr__(self) -> str:
        digits = self.to_binary_string()
        if len(digits) > _REPR_LIMIT:
            digits = digits[:_REPR_LIMIT - 3] + "..."
        return f"BitValue('{digits}')"

    # -- iteration ----------------------------------------------------------

    def __iter__(self) -> BitIterator:
        """Iterate over the bits as booleans, leftmost first."""
        return BitIterator(self.to_bytes(), self._bit_count)

    def iter_int(
        self, direction: Direction = Direction.LEFT_TO_RIGHT
    ) -> BitDirectionalIterator:
        """Iterate over the bits as ``0``/``1`` in the given direction."""
        return BitDirectionalIterator(self.to_bytes(), self._bit_count, direction)


def _require_bit_value(other) -> BitValue:
    if not isinstance(other, BitValue):
        raise TypeError(f"Expected BitValue, got {type(other).__name__}")
    return other
