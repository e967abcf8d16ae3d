"""Low-level reading of protobuf wire data: streams, tags and varints."""

from __future__ import annotations

import io
from enum import Enum, IntEnum
from typing import BinaryIO, Union

__all__ = [
    "DecodeError",
    "WireType",
    "ScalarKind",
    "Reader",
    "wire_type_from_tag",
    "field_from_tag",
    "check_tag",
    "check_wire_type",
    "check_if_empty",
    "read_tag_or_eof",
    "read_varint",
]

_UINT64_MASK = (1 << 64) - 1
_UINT32_MASK = (1 << 32) - 1
_UNLIMITED = _UINT64_MASK
_SKIP_CHUNK = 64


class DecodeError(ValueError):
    """Raised when wire data is malformed or does not match the schema."""


class WireType(IntEnum):
    """Protobuf wire types carried in the low three bits of a tag."""

    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


class ScalarKind(Enum):
    """Target scalar types a wire value can be decoded into."""

    BOOL = ("bool", 1, False)
    INT8 = ("int8", 8, True)
    UINT8 = ("uint8", 8, False)
    INT16 = ("int16", 16, True)
    UINT16 = ("uint16", 16, False)
    INT32 = ("int32", 32, True)
    UINT32 = ("uint32", 32, False)
    INT64 = ("int64", 64, True)
    UINT64 = ("uint64", 64, False)
    FLOAT = ("float", 32, True)
    DOUBLE = ("double", 64, True)

    def __init__(self, label: str, width: int, signed: bool) -> None:
        self.label = label
        self.width = width
        self.signed = signed

    @property
    def is_float(self) -> bool:
        return self in (ScalarKind.FLOAT, ScalarKind.DOUBLE)

    @property
    def is_bool(self) -> bool:
        return self is ScalarKind.BOOL

    @property
    def minimum(self) -> int:
        """Smallest integer value of the kind."""
        return -(1 << (self.width - 1)) if self.signed else 0

    @property
    def maximum(self) -> int:
        """Largest integer value of the kind."""
        return (1 << (self.width - 1)) - 1 if self.signed else (1 << self.width) - 1


def _to_signed(value: int, width: int) -> int:
    value &= (1 << width) - 1
    if value >= 1 << (width - 1):
        value -= 1 << width
    return value


class Reader:
    """A bounded view over a byte source.

    ``source`` is either a bytes-like object or a binary file-like object
    with a ``read`` method. ``size`` limits how many bytes may be taken;
    ``None`` leaves it unbounded. Sub-streams share the same source.
    """

    def __init__(
        self, source: Union[bytes, bytearray, memoryview, BinaryIO], size: int | None = None
    ) -> None:
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._source = source
        self._size = _UNLIMITED if size is None else size

    @property
    def size(self) -> int:
        """Number of bytes this stream may still yield."""
        return self._size

    def empty(self) -> bool:
        return self._size == 0

    def read_exact(self, size: int) -> bytes:
        """Read exactly ``size`` bytes or raise ``DecodeError``."""
        if self._size < size:
            raise DecodeError("unexpected end of stream")
        parts = []
        remaining = size
        while remaining > 0:
            chunk = self._source.read(remaining)
            if not chunk:
                raise DecodeError("unexpected end of stream")
            parts.append(chunk)
            remaining -= len(chunk)
            self._size -= len(chunk)
        return b"".join(parts)

    def read_byte(self) -> int:
        return self.read_exact(1)[0]

    def read_byte_or_eof(self) -> int:
        """Return the next byte, or -1 at the end of the data."""
        if self._size == 0:
            return -1
        chunk = self._source.read(1)
        if not chunk:
            return -1
        self._size -= 1
        return chunk[0]

    def read_skip(self, size: int) -> None:
        """Discard ``size`` bytes."""
        while size > 0:
            chunk_size = min(size, _SKIP_CHUNK)
            self.read_exact(chunk_size)
            size -= chunk_size

    def sub_stream(self, size: int) -> "Reader":
        """Carve the next ``size`` bytes off into a separate stream."""
        if self._size < size:
            raise DecodeError("unexpected end of stream")
        self._size -= size
        return Reader(self._source, size)

    def skip(self, tag: int) -> None:
        """Skip over the value of a field with the given tag."""
        wire_type = wire_type_from_tag(tag)
        if wire_type is WireType.VARINT:
            read_varint(self, ScalarKind.UINT64)
        elif wire_type is WireType.LENGTH_DELIMITED:
            self.read_skip(self._size)
        elif wire_type is WireType.FIXED32:
            self.read_skip(4)
        elif wire_type is WireType.FIXED64:
            self.read_skip(8)
        else:
            raise DecodeError("invalid wire type")


def wire_type_from_tag(tag: int) -> WireType:
    try:
        return WireType(tag & 0x07)
    except ValueError:
        raise DecodeError("invalid wire type") from None


def field_from_tag(tag: int) -> int:
    return tag >> 3


def check_tag(tag: int) -> None:
    if field_from_tag(tag) == 0:
        raise DecodeError("invalid field id")


def check_wire_type(actual: WireType, expected: WireType) -> None:
    if actual != expected:
        raise DecodeError("invalid wire type")


def check_if_empty(stream: Reader) -> None:
    if not stream.empty():
        raise DecodeError("unexpected data in stream")


def read_tag_or_eof(stream: Reader) -> int:
    """Read a field tag, returning 0 if the stream is exhausted."""
    byte = stream.read_byte_or_eof()
    if byte < 0:
        return 0
    tag = byte & 0x7F
    shift = 7
    while byte & 0x80:
        if shift >= 32:
            raise DecodeError("invalid tag")
        byte = stream.read_byte()
        tag = (tag | ((byte & 0x7F) << shift)) & _UINT32_MASK
        shift += 7
    check_tag(tag)
    return tag


def read_varint(stream: Reader, kind: ScalarKind) -> int | bool:
    """Read a base-128 varint and convert it to ``kind``.

    Signed kinds narrower than 64 bits are truncated, since negative values
    are commonly sent sign-extended to 64 bits. Unsigned kinds raise
    ``DecodeError`` when the value does not fit.
    """
    if kind.is_float:
        raise TypeError(f"{kind.label} cannot be read as a varint")
    if kind.is_bool:
        byte = stream.read_byte()
        if byte == 0:
            return False
        if byte == 1:
            return True
        raise DecodeError("invalid varint for bool")

    value = 0
    for shift in range(0, 64, 7):
        byte = stream.read_byte()
        value = (value | ((byte & 0x7F) << shift)) & _UINT64_MASK
        if byte & 0x80 == 0:
            if kind.signed:
                return _to_signed(value, kind.width)
            if value <= kind.maximum:
                return value
            break
    raise DecodeError("invalid varint")