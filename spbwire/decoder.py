"""Decoding of protobuf fields, repeated values, maps and messages."""

from __future__ import annotations

import struct
from enum import IntFlag
from typing import Any, BinaryIO, Callable, List, Tuple, Union

from .bits import check_signed_fits, check_unsigned_fits
from .reader import (
    DecodeError,
    Reader,
    ScalarKind,
    WireType,
    check_if_empty,
    check_wire_type,
    field_from_tag,
    read_tag_or_eof,
    read_varint,
    wire_type_from_tag,
)

__all__ = [
    "ScalarEncoder",
    "decode_scalar",
    "decode_repeated",
    "decode_bitfield",
    "decode_string",
    "decode_bytes",
    "decode_map_entry",
    "decode_message",
    "deserialize",
]

Handler = Callable[[Reader, int], None]
FieldDecoder = Callable[[Reader, WireType], Any]

_UNSIGNED_BY_WIDTH = {
    8: ScalarKind.UINT8,
    16: ScalarKind.UINT16,
    32: ScalarKind.UINT32,
    64: ScalarKind.UINT64,
}


class ScalarEncoder(IntFlag):
    """How a scalar is laid out on the wire; combine with ``PACKED`` for packed arrays."""

    VARINT = 0x01
    SVARINT = 0x02
    I32 = 0x04
    I64 = 0x08
    PACKED = 0x10

    @property
    def base(self) -> "ScalarEncoder":
        """The encoding without the packed flag."""
        base = ScalarEncoder(int(self) & ~int(ScalarEncoder.PACKED))
        if base not in (
            ScalarEncoder.VARINT,
            ScalarEncoder.SVARINT,
            ScalarEncoder.I32,
            ScalarEncoder.I64,
        ):
            raise ValueError("invalid scalar encoder")
        return base

    @property
    def is_packed(self) -> bool:
        return bool(self & ScalarEncoder.PACKED)

    @property
    def wire_type(self) -> WireType:
        """Wire type a single value of this encoding uses."""
        base = self.base
        if base in (ScalarEncoder.VARINT, ScalarEncoder.SVARINT):
            return WireType.VARINT
        if base is ScalarEncoder.I32:
            return WireType.FIXED32
        return WireType.FIXED64


def _fixed_size(base: ScalarEncoder) -> int:
    return 4 if base is ScalarEncoder.I32 else 8


def _read_zigzag(stream: Reader, kind: ScalarKind) -> int:
    if kind.is_float or kind.is_bool:
        raise TypeError(f"{kind.label} cannot be zigzag encoded")
    raw = read_varint(stream, _UNSIGNED_BY_WIDTH[kind.width])
    value = (raw >> 1) ^ -(raw & 1)
    if not kind.signed:
        value &= (1 << kind.width) - 1
    return value


def _read_fixed(stream: Reader, size: int, signed: bool) -> int:
    return int.from_bytes(stream.read_exact(size), "little", signed=signed)


def decode_scalar(
    stream: Reader, encoder: ScalarEncoder, kind: ScalarKind, wire_type: WireType
) -> int | float | bool:
    """Decode one scalar of ``kind`` laid out as ``encoder``.

    The wire type is checked unless the encoder is packed.
    """
    base = encoder.base
    if not encoder.is_packed:
        check_wire_type(wire_type, base.wire_type)

    if base is ScalarEncoder.SVARINT:
        return _read_zigzag(stream, kind)
    if base is ScalarEncoder.VARINT:
        return read_varint(stream, kind)

    size = _fixed_size(base)
    if kind.is_float:
        if kind.width != size * 8:
            raise TypeError(f"{kind.label} cannot be read as {size}-byte fixed")
        fmt = "<f" if size == 4 else "<d"
        return struct.unpack(fmt, stream.read_exact(size))[0]
    if kind.width > size * 8:
        raise TypeError(f"{kind.label} does not fit in {size}-byte fixed")

    value = _read_fixed(stream, size, kind.signed)
    if kind.width == size * 8:
        return value
    if not kind.minimum <= value <= kind.maximum:
        raise DecodeError("int overflow")
    return bool(value) if kind.is_bool else value


def decode_repeated(
    stream: Reader,
    encoder: ScalarEncoder,
    kind: ScalarKind,
    wire_type: WireType,
    values: List[Any],
) -> List[Any]:
    """Append one value, or every value of a packed run, to ``values`` and return it."""
    if encoder.is_packed:
        element_wire_type = encoder.wire_type
        while not stream.empty():
            if kind.is_bool:
                values.append(read_varint(stream, kind))
            else:
                values.append(decode_scalar(stream, encoder, kind, element_wire_type))
    elif kind.is_bool:
        values.append(read_varint(stream, kind))
    else:
        values.append(decode_scalar(stream, encoder, kind, wire_type))
    return values


def _check_fits(value: int, kind: ScalarKind, bits: int) -> None:
    if kind.signed:
        check_signed_fits(value, bits)
    else:
        check_unsigned_fits(value, bits)


def decode_bitfield(
    stream: Reader, encoder: ScalarEncoder, kind: ScalarKind, bits: int, wire_type: WireType
) -> int:
    """Decode an integer that must fit in ``bits`` bits; raises ``OverflowError`` if not."""
    base = encoder.base
    if kind.is_float or kind.is_bool:
        raise TypeError(f"{kind.label} cannot be a bitfield")
    check_wire_type(wire_type, base.wire_type)

    if base is ScalarEncoder.SVARINT:
        value = _read_zigzag(stream, kind)
    elif base is ScalarEncoder.VARINT:
        value = read_varint(stream, kind)
    else:
        size = _fixed_size(base)
        if kind.width > size * 8:
            raise TypeError(f"{kind.label} does not fit in {size}-byte fixed")
        value = _read_fixed(stream, size, kind.signed)
        if kind.width != size * 8:
            _check_fits(value, kind, bits)
    _check_fits(value, kind, bits)
    return value


def decode_string(stream: Reader, wire_type: WireType) -> str:
    """Decode the rest of ``stream`` as a UTF-8 string."""
    check_wire_type(wire_type, WireType.LENGTH_DELIMITED)
    data = stream.read_exact(stream.size)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        raise DecodeError("invalid utf8") from None


def decode_bytes(stream: Reader, wire_type: WireType) -> bytes:
    """Return the rest of ``stream`` as bytes."""
    check_wire_type(wire_type, WireType.LENGTH_DELIMITED)
    return stream.read_exact(stream.size)


def decode_map_entry(
    stream: Reader,
    key_decoder: FieldDecoder,
    value_decoder: FieldDecoder,
    wire_type: WireType,
) -> Tuple[Any, Any]:
    """Decode a map entry into a ``(key, value)`` pair.

    Each decoder is called as ``decoder(stream, wire_type)``; length-delimited
    parts get their own bounded stream. Both key and value must be present.
    """
    check_wire_type(wire_type, WireType.LENGTH_DELIMITED)

    decoders = {1: key_decoder, 2: value_decoder}
    found = {}
    while not stream.empty():
        tag = read_varint(stream, ScalarKind.UINT32)
        field = field_from_tag(tag)
        field_type = wire_type_from_tag(tag)
        decoder = decoders.get(field)
        if decoder is None:
            raise DecodeError("invalid field")
        if field_type is WireType.LENGTH_DELIMITED:
            size = read_varint(stream, ScalarKind.UINT32)
            substream = stream.sub_stream(size)
            found[field] = decoder(substream, field_type)
            check_if_empty(substream)
        else:
            found[field] = decoder(stream, field_type)

    if 1 not in found or 2 not in found:
        raise DecodeError("invalid map item")
    return found[1], found[2]


def _dispatch(stream: Reader, handler: Handler, tag: int) -> None:
    if wire_type_from_tag(tag) is WireType.LENGTH_DELIMITED:
        size = read_varint(stream, ScalarKind.UINT32)
        substream = stream.sub_stream(size)
        handler(substream, tag)
        check_if_empty(substream)
    else:
        handler(stream, tag)


def decode_message(stream: Reader, handler: Handler, wire_type: WireType) -> None:
    """Decode an embedded message, calling ``handler(stream, tag)`` per field.

    For length-delimited fields the handler gets a stream bounded to the
    field's payload and must consume all of it.
    """
    check_wire_type(wire_type, WireType.LENGTH_DELIMITED)
    while not stream.empty():
        tag = read_varint(stream, ScalarKind.UINT32)
        _dispatch(stream, handler, tag)


def deserialize(source: Union[bytes, bytearray, memoryview, BinaryIO], handler: Handler) -> None:
    """Decode a top-level message from ``source`` until the data runs out."""
    stream = Reader(source)
    while True:
        tag = read_tag_or_eof(stream)
        if not tag:
            break
        _dispatch(stream, handler, tag)