"""
Primitive codec: typed reads and writes, optionally run through the cipher.

Two per-byte cipher disciplines are used and must not be mixed up:

- Byte runs (raw arrays, strings, single bytes, bools): each byte is XORed
  with the low byte of the state, and the *plaintext* byte is consumed.
- 32-bit words (UInt32, Float32): the whole little-endian word is XORed with
  the state, and the four *encoded* bytes are consumed.

UInt16, Int32 and UInt64 never go through the cipher; they only appear in the
archive and database readers. Passing ``enc=None`` reads everything raw.
"""

import struct
from typing import Optional

from ...errors import FormatError
from ...utils.binary import IoBuffer
from .encrypter import Encrypter

# Single-byte text. Latin-1 maps all 256 byte values, so round trips are exact.
ASCII = 'latin-1'
UTF16 = 'utf-16-le'

# Bytes per length unit for each text encoding
UNIT_SIZES = {ASCII: 1, UTF16: 2}


def read_bytes(io: IoBuffer, enc: Optional[Encrypter], count: int) -> bytes:
    data = io.read_bytes(count)
    if enc is None:
        return data
    out = bytearray(count)
    for i, b in enumerate(data):
        plain = b ^ (enc.state & 0xFF)
        out[i] = plain
        enc.consume(plain)
    return bytes(out)


def write_bytes(io: IoBuffer, enc: Optional[Encrypter], data: bytes):
    if enc is None:
        io.write_bytes(data)
        return
    out = bytearray(len(data))
    for i, plain in enumerate(data):
        out[i] = plain ^ (enc.state & 0xFF)
        enc.consume(plain)
    io.write_bytes(bytes(out))


def read_uint32(io: IoBuffer, enc: Optional[Encrypter]) -> int:
    raw = io.read_bytes(4)
    word = struct.unpack('<I', raw)[0]
    if enc is None:
        return word
    value = word ^ enc.state
    enc.consume_all(raw)
    return value


def _check_range(value: int, limit: int, kind: str):
    if not 0 <= value <= limit:
        raise FormatError(f"{kind} value out of range: {value}")


def write_uint32(io: IoBuffer, enc: Optional[Encrypter], value: int):
    _check_range(value, 0xFFFFFFFF, "uint32")
    if enc is None:
        io.write_uint32(value)
        return
    raw = struct.pack('<I', value ^ enc.state)
    enc.consume_all(raw)
    io.write_bytes(raw)


def read_float(io: IoBuffer, enc: Optional[Encrypter]) -> float:
    """Float32 shares the word discipline; the bits are reinterpreted."""
    bits = read_uint32(io, enc)
    return struct.unpack('<f', struct.pack('<I', bits))[0]


def write_float(io: IoBuffer, enc: Optional[Encrypter], value: float):
    bits = struct.unpack('<I', struct.pack('<f', value))[0]
    write_uint32(io, enc, bits)


def read_byte(io: IoBuffer, enc: Optional[Encrypter]) -> int:
    return read_bytes(io, enc, 1)[0]


def write_byte(io: IoBuffer, enc: Optional[Encrypter], value: int):
    _check_range(value, 0xFF, "byte")
    write_bytes(io, enc, bytes((value,)))


def read_bool(io: IoBuffer, enc: Optional[Encrypter]) -> bool:
    return read_byte(io, enc) == 1


def write_bool(io: IoBuffer, enc: Optional[Encrypter], value: bool):
    write_byte(io, enc, 1 if value else 0)


def read_string(io: IoBuffer, enc: Optional[Encrypter], encoding: str = ASCII) -> str:
    """Read a UInt32 unit count followed by the encoded text."""
    start = io.position
    count = read_uint32(io, enc)
    if count == 0:
        return ""
    size = count * UNIT_SIZES[encoding]
    if not io.has_bytes(size):
        raise FormatError(
            f"string at offset {start} declares {count} units "
            f"({size} bytes) but only {io.length - io.position} remain"
        )
    return read_bytes(io, enc, size).decode(encoding)


def write_string(io: IoBuffer, enc: Optional[Encrypter], value: str, encoding: str = ASCII):
    data = value.encode(encoding)
    write_uint32(io, enc, len(data) // UNIT_SIZES[encoding])
    if data:
        write_bytes(io, enc, data)


# Raw-only primitives. The encrypter argument keeps the signatures uniform
# for the structure codec; it is never applied.

def read_uint16(io: IoBuffer, enc: Optional[Encrypter] = None) -> int:
    return io.read_uint16()


def write_uint16(io: IoBuffer, enc: Optional[Encrypter], value: int):
    io.write_uint16(value)


def read_int32(io: IoBuffer, enc: Optional[Encrypter] = None) -> int:
    return io.read_int32()


def write_int32(io: IoBuffer, enc: Optional[Encrypter], value: int):
    io.write_int32(value)


def read_uint64(io: IoBuffer, enc: Optional[Encrypter] = None) -> int:
    return io.read_uint64()


def write_uint64(io: IoBuffer, enc: Optional[Encrypter], value: int):
    io.write_uint64(value)
