"""
Character save file (player.gdc) loader and writer.

Layout::

    [UInt32 seed XOR 0x55555555]     raw
    [UInt32 magic "GDCX"]            ciphered
    [UInt32 header version == 1]     ciphered
    [Header record]                  ciphered
    [UInt32 checksum]                raw, equals cipher state
    [UInt32 data version, 6 or 7]    ciphered
    [16 opaque bytes]                ciphered
    [blocks 1,2,3,4,5,6,7,17,8,12,13,14,15,16,10]

Every block's fields (except ``version``) are merged with the header's into
one flat name -> value map for inspection and editing. Saving writes the map
back into the same record instances and re-encodes them in the same order.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ...errors import FormatError, DuplicateFieldError
from ...utils.binary import IoBuffer
from ..codec import (
    Encrypter, ByteArray, read_structure, write_structure, read_value, write_value,
    read_block, write_block,
)
from ..codec.primitives import read_uint32, write_uint32
from ..codec.schema import field_names
from .blocks import Header, Block, get_block_class

logger = logging.getLogger(__name__)

SEED_MASK = 0x55555555
GDC_MAGIC = 0x58434447  # "GDCX" little-endian
HEADER_VERSION = 1
DATA_VERSIONS = (6, 7)
UNKNOWN_SIZE = 16
UNKNOWN_FIELD = ByteArray(UNKNOWN_SIZE)

# Mandatory on-disk block order (17 precedes 8, 10 is last)
BLOCK_ORDER = (1, 2, 3, 4, 5, 6, 7, 17, 8, 12, 13, 14, 15, 16, 10)

VERSION_FIELD = 'version'


def _owned_names(record) -> list[str]:
    return [name for name in field_names(type(record)) if name != VERSION_FIELD]


def build_field_map(records: list) -> dict[str, Any]:
    """Merge the fields of several records into one flat map.

    Raises:
        DuplicateFieldError: two records declare the same field name
    """
    owners: dict[str, Any] = {}
    fields: dict[str, Any] = {}
    for record in records:
        for name in _owned_names(record):
            if name in owners:
                raise DuplicateFieldError(
                    f"field '{name}' is declared by both "
                    f"{type(owners[name]).__name__} and {type(record).__name__}"
                )
            owners[name] = record
            fields[name] = getattr(record, name)
    return fields


def apply_field_map(fields: dict[str, Any], records: list,
                    baseline: Optional[dict[str, Any]] = None):
    """Write flat values back into the one record that owns each.

    With a ``baseline`` snapshot, entries still holding the snapshot object
    are skipped, so direct edits to the records are kept.
    """
    baseline = baseline or {}
    for name, value in fields.items():
        if name in baseline and baseline[name] is value:
            continue
        owners = [r for r in records if name in _owned_names(r)]
        if len(owners) != 1:
            raise DuplicateFieldError(
                f"field '{name}' must belong to exactly one record, "
                f"found {len(owners)}"
            )
        setattr(owners[0], name, value)


@dataclass
class CharacterDocument:
    """A fully parsed character save."""
    seed: int = 0
    header_version: int = HEADER_VERSION
    data_version: int = DATA_VERSIONS[-1]
    unknown: bytes = bytes(UNKNOWN_SIZE)
    header: Header = field(default_factory=Header)
    blocks: list[Block] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)
    # Snapshot of the flat map taken by refresh_fields()
    _baseline: dict[str, Any] = field(default_factory=dict, init=False,
                                      repr=False, compare=False)

    @classmethod
    def create(cls, seed: int = 0, **kwargs) -> 'CharacterDocument':
        """New document holding a default instance of every block."""
        doc = cls(seed=seed, **kwargs)
        doc.blocks = [get_block_class(block_id)() for block_id in BLOCK_ORDER]
        doc.refresh_fields()
        return doc

    @property
    def records(self) -> list:
        """Header followed by the blocks: every owner of a flat field."""
        return [self.header, *self.blocks]

    def refresh_fields(self):
        """Rebuild the flat map from the records."""
        self.fields = build_field_map(self.records)
        self._baseline = dict(self.fields)

    def block(self, block_id: int) -> Optional[Block]:
        for blk in self.blocks:
            if blk.BLOCK_ID == block_id:
                return blk
        return None

    def get(self, name: str) -> Any:
        if name not in self.fields:
            raise KeyError(f"unknown field '{name}'")
        return self.fields[name]

    def set(self, name: str, value: Any):
        if name not in self.fields:
            raise KeyError(f"unknown field '{name}'")
        self.fields[name] = value

    def summary(self) -> str:
        h = self.header
        mode = "hardcore" if h.hardcore else "softcore"
        return (
            f"{h.player_name} - level {h.player_level} {h.player_class or '(no class)'} ({mode})\n"
            f"Data version: {self.data_version}  |  Blocks: {len(self.blocks)}  |  "
            f"Fields: {len(self.fields)}"
        )


def read_character(io: IoBuffer) -> CharacterDocument:
    """Parse a whole character save from a buffer."""
    doc = CharacterDocument()
    doc.seed = io.read_uint32() ^ SEED_MASK
    enc = Encrypter(doc.seed)

    magic = read_uint32(io, enc)
    if magic != GDC_MAGIC:
        raise FormatError(f"bad magic: expected {GDC_MAGIC:#010x} (GDCX), got {magic:#010x}")

    doc.header_version = read_uint32(io, enc)
    if doc.header_version != HEADER_VERSION:
        raise FormatError(
            f"unsupported header version: expected {HEADER_VERSION}, got {doc.header_version}"
        )

    doc.header = read_structure(Header, io, enc)

    checksum = io.read_uint32()
    if checksum != enc.state:
        raise FormatError(
            f"header checksum mismatch: expected {enc.state:#010x}, stored {checksum:#010x}"
        )

    doc.data_version = read_uint32(io, enc)
    if doc.data_version not in DATA_VERSIONS:
        raise FormatError(
            f"unsupported data version: expected one of {DATA_VERSIONS}, got {doc.data_version}"
        )

    doc.unknown = read_value(UNKNOWN_FIELD, io, enc)

    doc.blocks = [read_block(io, enc, block_id, get_block_class(block_id))
                  for block_id in BLOCK_ORDER]

    if io.position != io.length:
        raise FormatError(
            f"trailing/missing bytes: blocks ended at {io.position}, file is {io.length} bytes"
        )

    doc.refresh_fields()
    logger.info(f"Loaded character '{doc.header.player_name}' ({len(doc.blocks)} blocks)")
    return doc


def write_character(doc: CharacterDocument, io: IoBuffer):
    """Encode a document, after applying the flat map to its records.

    Only flat entries changed since the last ``refresh_fields()`` are written
    back; a flat edit wins over a direct record edit of the same field.
    """
    apply_field_map(doc.fields, doc.records, doc._baseline)
    doc.refresh_fields()

    io.write_uint32(doc.seed ^ SEED_MASK)
    enc = Encrypter(doc.seed)

    write_uint32(io, enc, GDC_MAGIC)
    write_uint32(io, enc, doc.header_version)
    write_structure(doc.header, io, enc)
    io.write_uint32(enc.state)
    write_uint32(io, enc, doc.data_version)
    write_value(UNKNOWN_FIELD, doc.unknown, io, enc)

    by_id = {blk.BLOCK_ID: blk for blk in doc.blocks}
    for block_id in BLOCK_ORDER:
        blk = by_id.get(block_id)
        if blk is None:
            raise FormatError(f"document has no block {block_id}")
        write_block(io, enc, block_id, blk)


def parse_character(data: bytes) -> CharacterDocument:
    return read_character(IoBuffer.from_bytes(data))


def serialize_character(doc: CharacterDocument) -> bytes:
    io = IoBuffer.from_bytes()
    write_character(doc, io)
    return io.getvalue()


def load_character(path) -> CharacterDocument:
    """Load a player.gdc file."""
    logger.debug(f"Loading {path}")
    return read_character(IoBuffer.from_file(path))


def save_character(doc: CharacterDocument, path):
    """Encode a document and overwrite ``path`` with it.

    The file is truncated; keep a backup first if the original matters.
    """
    data = serialize_character(doc)
    with open(Path(path), 'wb') as f:
        f.write(data)
    logger.info(f"Saved character '{doc.header.player_name}' to {path} ({len(data)} bytes)")
