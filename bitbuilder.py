import logging

from bititer import BitIterator
from bitvalue import BITS_PER_BYTE, Align, BitValue, Group

_logger = logging.getLogger(__name__)

MAX_APPEND_BITS = 32  #: Widest chunk accepted by :meth:`BitBuilder.append`


class BuilderClosedError(RuntimeError):
    """Raised when bits are appended to a closed :class:`BitBuilder`."""


class BitBuilder:
    """Bit-packing builder.

    Accumulates bits, most significant first, into bytes. Closing the
    builder pads the last partial byte with zero bits; after that no more
    bits can be appended.

    Reading from a builder that is still open (``to_bytes``, string
    rendering, iteration ...) works on a closed copy, so the builder
    itself stays open. Builders are not synchronized; use each one from a
    single thread.

    :ivar buffer: Completed bytes.
    :type buffer: bytearray
    :ivar bit_buffer: Pending bits not yet forming a full byte, right-justified.
    :type bit_buffer: int
    :ivar pending_bits: Number of valid bits in ``bit_buffer`` (0-7).
    :type pending_bits: int
    :ivar total_bits: Number of bits appended so far.
    :type total_bits: int
    """

    def __init__(self):
        """Initialize an empty, open builder.

        :returns: None
        :rtype: None
        """
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.pending_bits = 0
        self.total_bits = 0
        self._closed = False

    def copy(self) -> "BitBuilder":
        """Return a deep copy sharing no state with this builder."""
        clone = BitBuilder()
        clone.buffer = bytearray(self.buffer)
        clone.bit_buffer = self.bit_buffer
        clone.pending_bits = self.pending_bits
        clone.total_bits = self.total_bits
        clone._closed = self._closed
        return clone

    __copy__ = copy

    def __deepcopy__(self, memo):
        return self.copy()

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed

    def append(self, nbits: int, value: int):
        """Append the lowest ``nbits`` of ``value``, most significant first.

        :param nbits: Number of bits to take from ``value`` (0-32).
        :type nbits: int
        :param value: Integer whose low bits are appended.
        :type value: int
        :returns: None
        :rtype: None
        :raises BuilderClosedError: If the builder is closed.
        :raises ValueError: If ``nbits`` is outside 0-32.
        """
        if self._closed:
            raise BuilderClosedError("Builder already closed")
        if not 0 <= nbits <= MAX_APPEND_BITS:
            raise ValueError(
                f"Bit count must be in range 0-{MAX_APPEND_BITS}, got {nbits}"
            )

        value &= (1 << nbits) - 1
        self.total_bits += nbits

        room = BITS_PER_BYTE - self.pending_bits
        while nbits >= room:
            nbits -= room
            self.buffer.append((self.bit_buffer << room) | (value >> nbits))
            value &= (1 << nbits) - 1
            self.bit_buffer = 0
            self.pending_bits = 0
            room = BITS_PER_BYTE

        if nbits:
            self.bit_buffer = (self.bit_buffer << nbits) | value
            self.pending_bits += nbits

    def append_bit(self, bit: bool):
        """Append a single bit; any truthy ``bit`` appends a one.

        :raises BuilderClosedError: If the builder is closed.
        """
        self.append(1, 1 if bit else 0)

    def close(self):
        """Pad the pending partial byte with zeros and close the builder.

        Closing an already closed builder does nothing.

        :returns: None
        :rtype: None
        """
        if self._closed:
            return
        if self.pending_bits > 0:
            self.buffer.append(self.bit_buffer << (BITS_PER_BYTE - self.pending_bits))
            self.bit_buffer = 0
            self.pending_bits = 0
        self._closed = True
        _logger.debug(
            "closed builder with %d bits in %d bytes", self.total_bits, len(self.buffer)
        )

    def _snapshot(self) -> "BitBuilder":
        """Return this builder if closed, otherwise a closed copy of it."""
        if self._closed:
            return self
        snapshot = self.copy()
        snapshot.close()
        return snapshot

    def to_bytes(self, align: Align = Align.RIGHT) -> bytes:
        """Return the appended bits as ``ceil(bit_count / 8)`` bytes.

        The builder stores bits left aligned, padded with trailing zeros.
        For ``Align.RIGHT`` the filler bits of the last byte are moved to
        the front of the first byte by shifting the whole buffer right.

        :param align: Alignment of the returned bytes.
        :type align: Align
        :returns: Encoded bytes.
        :rtype: bytes
        """
        data = bytes(self._snapshot().buffer)
        if Align(align) is Align.LEFT:
            return data
        filler = len(data) * BITS_PER_BYTE - self.total_bits
        if not filler:
            return data
        return (int.from_bytes(data, "big") >> filler).to_bytes(len(data), "big")

    def to_bit_value(self) -> BitValue:
        """Return the appended bits as a new :class:`BitValue`."""
        return BitValue.from_bytes(self.to_bytes(), self.total_bits, Align.RIGHT)

    def to_binary_string(
        self,
        align: Align = Align.RIGHT,
        group: Group = Group.CONTINUOUS,
        sep: str = " ",
    ) -> str:
        """Render the appended bits, see :meth:`BitValue.to_binary_string`."""
        return self.to_bit_value().to_binary_string(align, group, sep)

    @property
    def bit_count(self) -> int:
        """Number of bits appended so far."""
        return self.total_bits

    def __len__(self) -> int:
        return self.total_bits

    def __iter__(self) -> BitIterator:
        return BitIterator(self.to_bytes(), self.total_bits)

    def __str__(self) -> str:
        return self.to_binary_string()

    def __repr__(self) -> str:
        return f"BitBuilder(bit_count={self.total_bits}, closed={self._closed})"
