"""
ARZ Database - Grim Dawn game database (version 3)

The database holds every game record (items, skills, monsters...) as a
compressed list of typed key/value entries. Keys and string values are
indices into a shared string table.

Structure:
  Header (24 bytes):
    - Unknown (2 bytes, always 2)
    - Version (2 bytes, 3)
    - Record table start / size / entry count (4 bytes each)
    - String table start / size (4 bytes each)
  Record data (LZ4 blocks), offsets relative to the end of the header
  Record table:
    - Name string index, type (length-prefixed), data offset,
      compressed size, decompressed size, file time
  String table:
    - Count, then (length, ASCII bytes) per string
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Iterator, Optional, Union

from ...errors import FormatError
from ...utils.binary import IoBuffer
from ..codec import read_structure, uint16, uint32, int32, uint64, string
from ..compression import decompress_block

logger = logging.getLogger(__name__)

ARZ_MAGIC = 2
ARZ_VERSION = 3
HEADER_SIZE = 24

ArzValue = Union[int, float, str, bool]


class ArzValueType(IntEnum):
    """Value types of record entries"""
    INT = 0
    FLOAT = 1
    STRING = 2
    BOOL = 3


@dataclass
class ArzHeader:
    unknown: int = uint16(ARZ_MAGIC)
    version: int = uint16(ARZ_VERSION)
    record_table_start: int = uint32()
    record_table_size: int = uint32()
    record_table_entries: int = uint32()
    string_table_start: int = uint32()
    string_table_size: int = uint32()


@dataclass
class ArzRecordHeader:
    name_index: int = int32()
    record_type: str = string()
    data_offset: int = uint32()
    compressed_size: int = uint32()
    decompressed_size: int = uint32()
    file_time: int = uint64()


@dataclass
class ArzRecord:
    """A database record entry (data not yet decoded)."""
    name: str
    header: ArzRecordHeader

    @property
    def record_type(self) -> str:
        return self.header.record_type


def read_string_table(io: IoBuffer, start: int, end: int) -> list[str]:
    """Read a count-prefixed list of strings that must end exactly at ``end``."""
    origin = io.position
    io.seek(start)

    count = io.read_uint32()
    strings = []
    for _ in range(count):
        length = io.read_int32()
        strings.append(io.read_cstring(length))

    if io.position != end:
        raise FormatError(
            f"string table ended at {io.position}, expected {end}"
        )
    io.seek(origin)
    return strings


class ArzDatabase:
    """ARZ (game database v3) reader."""

    def __init__(self, path):
        self.path = Path(path)
        self.header = ArzHeader()
        self.strings: list[str] = []
        self._records: list[ArzRecord] = []
        self._io = IoBuffer.from_file(self.path)

        self._read_tables()

    def _read_tables(self):
        io = self._io
        self.header = read_structure(ArzHeader, io, None)
        if self.header.unknown != ARZ_MAGIC or self.header.version != ARZ_VERSION:
            raise FormatError(
                f"unsupported ARZ format: unknown={self.header.unknown}, "
                f"version={self.header.version}"
            )

        self.strings = read_string_table(
            io,
            self.header.string_table_start,
            self.header.string_table_start + self.header.string_table_size,
        )

        io.seek(self.header.record_table_start)
        for _ in range(self.header.record_table_entries):
            header = read_structure(ArzRecordHeader, io, None)
            self._records.append(ArzRecord(self._string(header.name_index), header))

        logger.debug(f"ARZ {self.path.name}: {len(self._records)} records, "
                     f"{len(self.strings)} strings")

    def _string(self, index: int) -> str:
        if not 0 <= index < len(self.strings):
            raise FormatError(f"string index {index} out of range ({len(self.strings)} strings)")
        return self.strings[index]

    def read_record(self, record: ArzRecord) -> dict[str, Union[ArzValue, list[ArzValue]]]:
        """Decode a record's entries into ``key -> value`` (lists for arrays)."""
        io = self._io
        io.seek(HEADER_SIZE + record.header.data_offset)
        compressed = io.read_bytes(record.header.compressed_size)
        data = decompress_block(compressed, record.header.compressed_size,
                                record.header.decompressed_size)

        buf = IoBuffer.from_bytes(data)
        fields = {}
        while buf.has_more:
            value_type = buf.read_uint16()
            count = buf.read_uint16()
            key = self._string(buf.read_uint32())
            values = [self._read_value(buf, value_type) for _ in range(count)]
            fields[key] = values[0] if count == 1 else values
        return fields

    def _read_value(self, buf: IoBuffer, value_type: int) -> ArzValue:
        if value_type == ArzValueType.INT:
            return buf.read_int32()
        if value_type == ArzValueType.FLOAT:
            return buf.read_float()
        if value_type == ArzValueType.STRING:
            return self._string(buf.read_int32())
        if value_type == ArzValueType.BOOL:
            return buf.read_int32() != 0
        raise FormatError(f"unknown ARZ value type {value_type}")

    @property
    def records(self) -> list[ArzRecord]:
        return self._records

    def get_record(self, name: str) -> Optional[dict]:
        """Decoded fields of the record with this name."""
        for record in self._records:
            if record.name == name:
                return self.read_record(record)
        return None

    def __iter__(self) -> Iterator[ArzRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def summary(self) -> str:
        return f"ARZ: {self.path}\nRecords: {len(self)}\nStrings: {len(self.strings)}"
