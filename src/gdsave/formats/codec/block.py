"""
Block framing protocol.

On disk a block is::

    [UInt32 id]        ciphered, word discipline
    [UInt32 length]    raw XOR state, NOT fed to the cipher
    [payload]          structure codec output
    [UInt32 checksum]  raw, equals the cipher state after the payload

The length word is masked with the state captured right after the id, and
because it never reaches ``consume`` the writer can back-patch it once the
payload size is known.
"""

import logging
from typing import Callable, TypeVar

from ...errors import FormatError
from ...utils.binary import IoBuffer
from .encrypter import Encrypter
from .primitives import read_uint32, write_uint32
from .structure import read_structure, write_structure

logger = logging.getLogger(__name__)

T = TypeVar('T')


def read_framed(io: IoBuffer, enc: Encrypter, expected_id: int,
                read_payload: Callable[[], T]) -> T:
    """Read a block envelope around ``read_payload()`` and verify it."""
    block_start = io.position
    block_id = read_uint32(io, enc)
    if block_id != expected_id:
        raise FormatError(
            f"block id mismatch at offset {block_start}: "
            f"expected {expected_id}, got {block_id}"
        )

    length = io.read_uint32() ^ enc.state
    payload_start = io.position
    logger.debug(f"Block {block_id}: offset={block_start}, length={length}")

    payload = read_payload()

    expected_end = payload_start + length
    if io.position != expected_end:
        raise FormatError(
            f"block {block_id} ended at wrong offset: "
            f"expected {expected_end}, got {io.position}"
        )

    checksum = io.read_uint32()
    if checksum != enc.state:
        raise FormatError(
            f"block {block_id} checksum mismatch: "
            f"expected {enc.state:#010x}, stored {checksum:#010x}"
        )
    return payload


def write_framed(io: IoBuffer, enc: Encrypter, block_id: int,
                 write_payload: Callable[[], None]):
    """Write a block envelope around ``write_payload()``."""
    write_uint32(io, enc, block_id)

    length_pos = io.position
    state_before_payload = enc.state
    io.write_uint32(0)  # back-patched below

    write_payload()

    end = io.position
    length = end - length_pos - 4
    io.seek(length_pos)
    io.write_uint32(length ^ state_before_payload)
    io.seek(end)

    io.write_uint32(enc.state)
    logger.debug(f"Block {block_id}: wrote {length} payload bytes")


def read_block(io: IoBuffer, enc: Encrypter, block_id: int, record_type: type):
    """Read a framed record of ``record_type``."""
    return read_framed(io, enc, block_id,
                       lambda: read_structure(record_type, io, enc))


def write_block(io: IoBuffer, enc: Encrypter, block_id: int, record):
    """Write ``record`` inside a block envelope."""
    write_framed(io, enc, block_id,
                 lambda: write_structure(record, io, enc))
