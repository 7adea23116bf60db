import copy
import logging

import pytest

from bitbuilder import BitBuilder, BuilderClosedError
from bitvalue import Align, BitValue, Group


def test_append_and_close_aligns_both_ways():
    bb = BitBuilder()
    bb.append(12, 0b101000111001)
    bb.close()
    assert bb.to_bytes() == bytes([0x0A, 0x39])
    assert bb.to_bytes(Align.RIGHT) == bytes([0x0A, 0x39])
    assert bb.to_bytes(Align.LEFT) == bytes([0xA3, 0x90])


def test_append_chunks_across_byte_boundaries():
    bb = BitBuilder()
    bb.append(4, 0b1010)
    bb.append(8, 0b11110000)
    assert bb.to_bytes(Align.LEFT) == bytes([0b10101111, 0b00000000])
    assert bb.to_bytes() == bytes([0b00001010, 0b11110000])
    assert bb.bit_count == 12


def test_append_zero_bits_is_noop():
    bb = BitBuilder()
    bb.append(8, 0xAA)
    bb.append(0, 0)
    assert bb.to_bytes() == bytes([0xAA])
    assert len(bb) == 8


def test_append_uses_only_low_bits():
    bb = BitBuilder()
    bb.append(4, 0xFF)
    assert bb.to_binary_string() == "1111"


def test_append_full_32_bit_chunks():
    bb = BitBuilder()
    bb.append(32, 0xDEADBEEF)
    assert bb.to_bytes() == b"\xde\xad\xbe\xef"

    bb = BitBuilder()
    bb.append(3, 0b101)
    bb.append(32, 0xFFFFFFFF)
    assert bb.bit_count == 35
    assert bb.to_bit_value() == BitValue.from_binary_string("101" + "1" * 32)


@pytest.mark.parametrize("nbits", [-1, 33])
def test_append_rejects_bad_widths(nbits):
    bb = BitBuilder()
    with pytest.raises(ValueError):
        bb.append(nbits, 0)
    assert bb.bit_count == 0


def test_append_bit():
    bb = BitBuilder()
    for bit in (True, False, True):
        bb.append_bit(bit)
    assert bb.to_bytes() == b"\x05"
    assert bb.to_bytes(Align.LEFT) == b"\xa0"
    assert bb.to_binary_string() == "101"


def test_append_after_close_raises():
    bb = BitBuilder()
    bb.append(3, 0b101)
    bb.close()
    with pytest.raises(BuilderClosedError):
        bb.append(1, 1)
    with pytest.raises(RuntimeError):
        bb.append_bit(True)
    assert bb.closed
    assert bb.bit_count == 3


def test_close_twice_is_noop():
    bb = BitBuilder()
    bb.append(5, 0b10111)
    bb.close()
    bb.close()
    assert bb.to_bytes(Align.LEFT) == b"\xb8"
    assert bb.to_bytes() == b"\x17"


def test_export_on_open_builder_leaves_it_open():
    bb = BitBuilder()
    bb.append(3, 0b101)
    assert bb.to_bytes() == b"\x05"
    assert bb.to_bytes(Align.LEFT) == b"\xa0"
    assert bb.to_binary_string() == "101"
    assert list(bb) == [True, False, True]
    assert not bb.closed

    bb.append(5, 0)
    assert bb.to_bytes() == b"\xa0"
    assert bb.bit_count == 8


def test_to_bit_value(sample):
    bb = BitBuilder()
    bb.append(12, 0b101000111001)
    assert bb.to_bit_value() == sample


def test_empty_builder():
    bb = BitBuilder()
    assert bb.to_bytes() == b""
    assert bb.to_bytes(Align.LEFT) == b""
    assert bb.to_bit_value() == BitValue()
    assert list(bb) == []
    bb.close()
    assert bb.to_bytes() == b""


def test_binary_string_grouping():
    bb = BitBuilder()
    bb.append(12, 0b101000111001)
    assert str(bb) == "101000111001"
    assert bb.to_binary_string(Align.LEFT, Group.NIBBLE) == "1010 0011 1001"
    assert bb.to_binary_string(Align.RIGHT, Group.BYTE) == "1010 00111001"
    assert bb.to_binary_string(Align.LEFT, Group.BYTE, sep="|") == "10100011|1001"


def test_copy_is_independent():
    bb = BitBuilder()
    bb.append(6, 0b110011)
    for clone in (bb.copy(), copy.copy(bb), copy.deepcopy(bb)):
        clone.append(2, 0b11)
        clone.close()
        assert clone.to_bytes() == b"\xcf"
    assert bb.bit_count == 6
    assert not bb.closed
    assert bb.to_bytes() == b"\x33"


def test_repr():
    bb = BitBuilder()
    bb.append(12, 0)
    assert repr(bb) == "BitBuilder(bit_count=12, closed=False)"
    bb.close()
    assert repr(bb) == "BitBuilder(bit_count=12, closed=True)"


def test_close_logs_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="bitbuilder")
    bb = BitBuilder()
    bb.append(12, 0b101000111001)
    bb.close()
    assert "closed builder with 12 bits in 2 bytes" in caplog.text
