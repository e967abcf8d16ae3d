# spbwire

A small library with no dependencies. It reads data in the protocol buffers binary
wire format and comes with a few helpers that go with that job.

## Modules

### `spbwire.reader`

- `Reader(source, size=None)` is a bounded view over a bytes-like object or a
  binary file-like object. It provides `read_byte`, `read_byte_or_eof` (returns
  `-1` at the end), `read_exact`, `read_skip` and `empty`. `sub_stream(size)`
  carves off a nested bounded stream. `skip(tag)` discards the value of a field.
  The `size` property gives the number of bytes that remain.
- `WireType` lists the wire types. `ScalarKind` lists the target types `BOOL`,
  `INT8` … `UINT64`, `FLOAT` and `DOUBLE`.
- `wire_type_from_tag`, `field_from_tag`, `check_tag`, `check_wire_type`,
  `check_if_empty` and `read_tag_or_eof` handle tags. `read_tag_or_eof` returns
  `0` once the data runs out.
- `read_varint(stream, kind)` decodes a base-128 varint. For signed kinds
  narrower than 64 bits, it truncates values that were sent sign-extended. For
  unsigned kinds, it rejects values that do not fit.
- Malformed input raises `DecodeError`, which is a subclass of `ValueError`.

### `spbwire.decoder`

- `ScalarEncoder` has the flags `VARINT`, `SVARINT` (zigzag), `I32` and `I64`.
  Combine one of them with `PACKED` for a packed array.
- `decode_scalar` decodes a single scalar.
- `decode_repeated` appends one value, or a whole packed run, to a list.
- `decode_bitfield` decodes an integer and raises `OverflowError` if the value
  does not fit in the given number of bits.
- `decode_string` decodes UTF-8 text and rejects invalid UTF-8. `decode_bytes`
  returns raw bytes.
- `decode_map_entry(stream, key_decoder, value_decoder, wire_type)` returns a
  `(key, value)` pair. Both the key and the value must be present.
- `decode_message(stream, handler, wire_type)` and `deserialize(source, handler)`
  walk the fields of a message and call `handler(stream, tag)` for each field.
  For a length-delimited field, the handler gets a stream bounded to that
  field's payload and must consume all of it.

### `spbwire.bits`

`check_signed_fits(value, bits)` and `check_unsigned_fits(value, bits)` return
the value if it fits in the bitfield. Otherwise they raise `OverflowError`. An
invalid width raises `ValueError`.

### `spbwire.base64`

This module implements RFC 4648 base64, the encoding JSON uses for protobuf
`bytes` fields.

- `encode(data)` returns padded text.
- `decode(text)` decodes unquoted text strictly.
- `decode_prefix(text, pos=0)` decodes a double-quoted string that starts at
  `text[pos]`. It returns the bytes and the position just past the closing quote.

### `spbwire.fileio`

- `load_file(path)` returns a file's content as UTF-8 text and keeps line
  endings unchanged.
- `save_file(path, content)` writes `str` (as UTF-8) or `bytes`, replacing any
  existing file.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Example

```python
from spbwire import base64
from spbwire.reader import Reader, ScalarKind, read_varint

reader = Reader(b"\x96\x01", 2)
assert read_varint(reader, ScalarKind.UINT32) == 150

assert base64.encode(b"hello") == "aGVsbG8="
assert base64.decode("aGVsbG8=") == b"hello"
```

## What it does not do

The package only decodes. It does not:

- write the binary wire format;
- read or write JSON documents beyond the base64 helpers;
- parse `.proto` files or generate code from them.

Field handlers for each message type are written by the user. The package
provides no command-line tool.

## Running the tests

```
pytest
```