import operator

import pytest

from bititer import BitDirectionalIterator, BitIterator, Direction

SAMPLE = b"\x0a\x39"
SAMPLE_BITS = [int(c) for c in "101000111001"]


def test_bit_iterator_exhausts_after_bit_count():
    it = BitIterator(b"\x05", 3)
    assert next(it) is True
    assert next(it) is False
    assert next(it) is True
    with pytest.raises(StopIteration):
        next(it)
    with pytest.raises(StopIteration):
        next(it)


def test_bit_iterator_skips_leading_filler_bits():
    assert list(BitIterator(SAMPLE, 12)) == [bool(b) for b in SAMPLE_BITS]
    assert list(BitIterator(b"\xff\x05", 3)) == [True, False, True]


def test_directional_iterator_both_ways():
    assert list(BitDirectionalIterator(SAMPLE, 12)) == SAMPLE_BITS
    assert list(BitDirectionalIterator(SAMPLE, 12, Direction.LEFT_TO_RIGHT)) == SAMPLE_BITS
    assert list(BitDirectionalIterator(SAMPLE, 12, Direction.RIGHT_TO_LEFT)) == SAMPLE_BITS[::-1]


def test_directional_iterator_exhaustion():
    it = BitDirectionalIterator(b"\x02", 2, Direction.RIGHT_TO_LEFT)
    assert next(it) == 0
    assert next(it) == 1
    with pytest.raises(StopIteration):
        next(it)


def test_empty_buffers():
    assert list(BitIterator(b"", 0)) == []
    assert list(BitDirectionalIterator(b"", 0, Direction.RIGHT_TO_LEFT)) == []


def test_length_hint():
    it = BitIterator(SAMPLE, 12)
    assert operator.length_hint(it) == 12
    next(it)
    assert operator.length_hint(it) == 11

    rtl = BitDirectionalIterator(SAMPLE, 12, Direction.RIGHT_TO_LEFT)
    assert operator.length_hint(rtl) == 12
    next(rtl)
    next(rtl)
    assert operator.length_hint(rtl) == 10


def test_iterators_are_read_only():
    for it in (BitIterator(SAMPLE, 12), BitDirectionalIterator(SAMPLE, 12)):
        assert not hasattr(it, "remove")
        with pytest.raises(TypeError):
            del it[0]


@pytest.mark.parametrize("bit_count", [-1, 17])
def test_bit_count_must_fit_buffer(bit_count):
    with pytest.raises(ValueError):
        BitIterator(SAMPLE, bit_count)
    with pytest.raises(ValueError):
        BitDirectionalIterator(SAMPLE, bit_count)


def test_unknown_direction():
    with pytest.raises(ValueError):
        BitDirectionalIterator(SAMPLE, 12, "sideways")


def test_buffer_is_referenced_not_copied():
    data = bytearray(b"\x80")
    it = BitIterator(data, 8)
    assert it.data is data
    data[0] = 0x00
    assert next(it) is False
    assert data == bytearray(b"\x00")
