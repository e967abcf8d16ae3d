import pytest

from spbwire.reader import (
    DecodeError,
    Reader,
    ScalarKind,
    WireType,
    check_if_empty,
    check_tag,
    check_wire_type,
    field_from_tag,
    read_tag_or_eof,
    read_varint,
    wire_type_from_tag,
)


def _encode_varint(value):
    value &= (1 << 64) - 1
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


class _TrickleSource:
    """Hands out at most one byte per read call."""

    def __init__(self, data):
        self._data = data

    def read(self, n):
        chunk, self._data = self._data[:1], self._data[1:]
        return chunk


# varints


def test_varint_documented_example():
    assert read_varint(Reader(b"\x96\x01"), ScalarKind.UINT32) == 150


@pytest.mark.parametrize("value", [0, 1, 0x42, 0xFF, 300, 2**31 - 1, 2**32 - 1])
def test_uint32_round_trip(value):
    assert read_varint(Reader(_encode_varint(value)), ScalarKind.UINT32) == value


@pytest.mark.parametrize("value", [0, 0x42, 2**63, 2**64 - 1])
def test_uint64_round_trip(value):
    assert read_varint(Reader(_encode_varint(value)), ScalarKind.UINT64) == value


@pytest.mark.parametrize("value", [0, 0x42, -2, -(2**63), 2**63 - 1])
def test_int64_round_trip(value):
    assert read_varint(Reader(_encode_varint(value)), ScalarKind.INT64) == value


def test_int32_negative_sign_extended_to_64_bits():
    data = b"\xfe\xff\xff\xff\xff\xff\xff\xff\xff\x01"
    assert read_varint(Reader(data), ScalarKind.INT32) == -2


def test_int32_negative_short_form():
    assert read_varint(Reader(b"\xfe\xff\xff\xff\x0f"), ScalarKind.INT32) == -2


@pytest.mark.parametrize("value", [0x42, 0xFF, -2, -(2**31), 2**31 - 1])
def test_int32_round_trip(value):
    assert read_varint(Reader(_encode_varint(value)), ScalarKind.INT32) == value


def test_uint32_overflow_raises():
    with pytest.raises(DecodeError, match="invalid varint"):
        read_varint(Reader(_encode_varint(2**32)), ScalarKind.UINT32)


def test_uint8_overflow_raises():
    with pytest.raises(DecodeError):
        read_varint(Reader(_encode_varint(256)), ScalarKind.UINT8)


def test_varint_too_long_raises():
    with pytest.raises(DecodeError, match="invalid varint"):
        read_varint(Reader(b"\xff" * 11), ScalarKind.UINT64)


def test_truncated_varint_raises():
    with pytest.raises(DecodeError, match="unexpected end of stream"):
        read_varint(Reader(b"\x96"), ScalarKind.UINT32)


def test_bool_values():
    assert read_varint(Reader(b"\x01"), ScalarKind.BOOL) is True
    assert read_varint(Reader(b"\x00"), ScalarKind.BOOL) is False


def test_bool_invalid_raises():
    with pytest.raises(DecodeError, match="invalid varint for bool"):
        read_varint(Reader(b"\x02"), ScalarKind.BOOL)


def test_float_kind_is_not_a_varint():
    with pytest.raises(TypeError):
        read_varint(Reader(b"\x01"), ScalarKind.FLOAT)


def test_varint_consumes_exactly_its_bytes():
    stream = Reader(_encode_varint(300) + b"\x07", 3)
    assert read_varint(stream, ScalarKind.UINT32) == 300
    assert stream.size == 1
    assert stream.read_byte() == 7


# tags


def test_tag_helpers():
    assert wire_type_from_tag(0x0A) is WireType.LENGTH_DELIMITED
    assert field_from_tag(0x0A) == 1
    assert wire_type_from_tag(0x08) is WireType.VARINT
    assert wire_type_from_tag(0x0D) is WireType.FIXED32
    assert wire_type_from_tag(0x09) is WireType.FIXED64


@pytest.mark.parametrize("tag", [0x0E, 0x0F])
def test_unknown_wire_type_raises(tag):
    with pytest.raises(DecodeError, match="invalid wire type"):
        wire_type_from_tag(tag)


def test_check_tag_rejects_field_zero():
    with pytest.raises(DecodeError, match="invalid field id"):
        check_tag(0x02)


def test_check_wire_type_mismatch():
    with pytest.raises(DecodeError, match="invalid wire type"):
        check_wire_type(WireType.VARINT, WireType.FIXED32)


def test_read_tag_at_eof_is_zero():
    assert read_tag_or_eof(Reader(b"")) == 0


@pytest.mark.parametrize("field", [1, 15, 16, 2047, 2**29 - 1])
def test_read_tag_round_trip(field):
    tag = (field << 3) | WireType.LENGTH_DELIMITED
    stream = Reader(_encode_varint(tag))
    result = read_tag_or_eof(stream)
    assert result == tag
    assert field_from_tag(result) == field
    assert stream.read_byte_or_eof() == -1


def test_read_tag_field_zero_raises():
    with pytest.raises(DecodeError, match="invalid field id"):
        read_tag_or_eof(Reader(b"\x00"))


def test_read_tag_too_long_raises():
    with pytest.raises(DecodeError, match="invalid tag"):
        read_tag_or_eof(Reader(b"\x88\x80\x80\x80\x80\x01"))


def test_read_tag_truncated_raises():
    with pytest.raises(DecodeError, match="unexpected end of stream"):
        read_tag_or_eof(Reader(b"\x88"))


# streams


def test_read_exact_respects_size_limit():
    stream = Reader(b"abcdef", 3)
    with pytest.raises(DecodeError, match="unexpected end of stream"):
        stream.read_exact(4)


def test_read_exact_past_data_raises():
    with pytest.raises(DecodeError, match="unexpected end of stream"):
        Reader(b"ab").read_exact(3)


def test_read_exact_assembles_short_reads():
    stream = Reader(_TrickleSource(b"xyz"), 3)
    assert stream.read_exact(3) == b"xyz"
    assert stream.empty()


def test_read_byte_or_eof_at_end():
    stream = Reader(b"\x05")
    assert stream.read_byte_or_eof() == 5
    assert stream.read_byte_or_eof() == -1


def test_read_byte_or_eof_honours_limit():
    stream = Reader(b"\x05\x06", 1)
    assert stream.read_byte_or_eof() == 5
    assert stream.read_byte_or_eof() == -1


def test_sub_stream_shares_source_and_reduces_size():
    stream = Reader(b"abcdef", 6)
    sub = stream.sub_stream(4)
    assert stream.size == 2
    assert sub.size == 4
    assert sub.read_exact(4) == b"abcd"
    assert sub.empty()
    assert stream.read_exact(2) == b"ef"


def test_sub_stream_too_large_raises():
    with pytest.raises(DecodeError, match="unexpected end of stream"):
        Reader(b"abc", 3).sub_stream(4)


def test_check_if_empty():
    stream = Reader(b"a", 1)
    with pytest.raises(DecodeError, match="unexpected data in stream"):
        check_if_empty(stream)
    assert stream.read_byte() == ord("a")
    check_if_empty(stream)
    assert stream.empty()


def test_read_skip_spans_chunks():
    data = bytes(range(200))
    stream = Reader(data, len(data))
    stream.read_skip(150)
    assert stream.size == 50
    assert stream.read_byte() == 150


# skipping fields


def test_skip_varint():
    stream = Reader(_encode_varint(2**40) + b"\x09")
    stream.skip(0x08)
    assert stream.read_byte() == 9


def test_skip_fixed32_and_fixed64():
    stream = Reader(b"\x00" * 4 + b"\x01" * 8 + b"\x02")
    stream.skip(0x0D)
    assert stream.read_exact(8) == b"\x01" * 8
    stream = Reader(b"\x00" * 8 + b"\x03")
    stream.skip(0x09)
    assert stream.read_byte() == 3


def test_skip_length_delimited_consumes_substream():
    outer = Reader(b"hello!", 6)
    sub = outer.sub_stream(5)
    sub.skip(0x0A)
    assert sub.empty()
    assert outer.read_byte() == ord("!")


@pytest.mark.parametrize("tag", [0x0B, 0x0C])
def test_skip_group_raises(tag):
    with pytest.raises(DecodeError, match="invalid wire type"):
        Reader(b"\x00").skip(tag)