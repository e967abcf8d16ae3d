"""RFC 4648 base64 encoding and strict decoding of JSON string values."""

from __future__ import annotations

import binascii
from typing import Tuple, Union

from .reader import DecodeError

__all__ = ["encode", "decode", "decode_prefix"]

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_DECODE = {char: index for index, char in enumerate(_ALPHABET)}


def encode(data: Union[bytes, bytearray, memoryview]) -> str:
    """Encode ``data`` as padded base64 text."""
    return binascii.b2a_base64(bytes(data), newline=False).decode("ascii")


def _lookup(char: str) -> int:
    try:
        return _DECODE[char]
    except KeyError:
        raise DecodeError("invalid base64") from None


def _decode_body(body: str) -> bytes:
    if not body:
        return b""
    if len(body) % 4:
        raise DecodeError("invalid base64")

    out = bytearray()
    head, tail = body[:-4], body[-4:]
    quads = iter(head)
    for c0, c1, c2, c3 in zip(quads, quads, quads, quads):
        v0, v1, v2, v3 = _lookup(c0), _lookup(c1), _lookup(c2), _lookup(c3)
        out.append(((v0 << 2) | (v1 >> 4)) & 0xFF)
        out.append(((v1 << 4) | (v2 >> 2)) & 0xFF)
        out.append(((v2 << 6) | v3) & 0xFF)

    c0, c1, c2, c3 = tail
    if c2 == "=" and c3 != "=":
        raise DecodeError("invalid base64")
    v0 = _lookup(c0)
    v1 = _lookup(c1)
    v2 = 0 if c2 == "=" else _lookup(c2)
    v3 = 0 if c3 == "=" else _lookup(c3)
    padding = (c2 == "=") + (c3 == "=")

    last = (
        ((v0 << 2) | (v1 >> 4)) & 0xFF,
        ((v1 << 4) | (v2 >> 2)) & 0xFF,
        ((v2 << 6) | v3) & 0xFF,
    )
    out.extend(last[: 3 - padding])
    return bytes(out)


def decode(text: str) -> bytes:
    """Decode unquoted base64 ``text``; raises ``DecodeError`` if malformed."""
    return _decode_body(text)


def decode_prefix(text: str, pos: int = 0) -> Tuple[bytes, int]:
    """Decode a double-quoted base64 string starting at ``text[pos]``.

    Returns the decoded bytes and the position just past the closing quote.
    """
    if pos >= len(text) or text[pos] != '"':
        raise DecodeError("expecting '\"'")
    end = text.find('"', pos + 1)
    if end < 0:
        raise DecodeError("invalid base64")
    return _decode_body(text[pos + 1 : end]), end + 1