"""
ARC Archive - Grim Dawn resource archive (version 3)

ARC files bundle game resources (text tables, textures, sounds). Headers are
plain little-endian structures and are read with the generic structure codec
with no cipher.

Structure:
  - Header (28 bytes): magic "ARC\\0", version 3, counts, table sizes,
    record table offset
  - [File data / compressed parts...]
  - Record table at record_table_offset:
    - Part headers (12 bytes each: offset, compressed size, decompressed size)
  - String table (file names) right after the record table
  - Record headers (44 bytes each) right after the string table
"""

import logging
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Iterator

from ...errors import FormatError
from ...utils.binary import IoBuffer
from ..codec import read_structure, uint32, int32, uint64
from ..compression import decompress_block

logger = logging.getLogger(__name__)

ARC_MAGIC = 0x435241  # "ARC\0"
ARC_VERSION = 3
PART_HEADER_SIZE = 12
ENTRY_TYPE_STORED = 1


@dataclass
class ArcHeader:
    magic: int = uint32(ARC_MAGIC)
    version: int = uint32(ARC_VERSION)
    file_entry_count: int = int32()
    data_record_count: int = int32()
    record_table_size: int = uint32()
    string_table_size: int = uint32()
    record_table_offset: int = uint32()


@dataclass
class ArcRecordHeader:
    entry_type: int = uint32()
    file_offset: int = uint32()
    compressed_size: int = int32()
    decompressed_size: int = int32()
    decompressed_hash: int = uint32()  # Adler-32 of the decompressed bytes
    file_time: int = uint64()
    file_parts: int = uint32()
    first_part_index: int = uint32()
    name_length: int = int32()
    name_offset: int = uint32()


@dataclass
class ArcPartHeader:
    offset: int = uint32()
    compressed_size: int = int32()
    decompressed_size: int = int32()


@dataclass
class ArcEntry:
    """A single file entry in an ARC archive."""
    filename: str
    record: ArcRecordHeader

    @property
    def size(self) -> int:
        return self.record.decompressed_size


class ArcArchive:
    """
    ARC (resource archive v3) reader.

    The whole archive is buffered in memory on open.
    """

    def __init__(self, path):
        self.path = Path(path)
        self.header = ArcHeader()
        self._entries: list[ArcEntry] = []
        self._io = IoBuffer.from_file(self.path)

        self._read_manifest()

    def _read_manifest(self):
        io = self._io
        self.header = read_structure(ArcHeader, io, None)
        if self.header.magic != ARC_MAGIC or self.header.version != ARC_VERSION:
            raise FormatError(
                f"unsupported ARC format: magic={self.header.magic:#x}, "
                f"version={self.header.version}"
            )

        names_offset = self.header.record_table_offset + self.header.record_table_size
        io.seek(names_offset + self.header.string_table_size)
        records = [read_structure(ArcRecordHeader, io, None)
                   for _ in range(self.header.file_entry_count)]

        for record in records:
            io.seek(names_offset + record.name_offset)
            filename = io.read_cstring(record.name_length)
            self._entries.append(ArcEntry(filename, record))

        logger.debug(f"ARC {self.path.name}: {len(self._entries)} entries")

    def _read_entry_data(self, entry: ArcEntry) -> bytes:
        """Read (and decompress) the contents of an entry."""
        io = self._io
        record = entry.record

        if record.entry_type == ENTRY_TYPE_STORED and record.compressed_size == record.decompressed_size:
            io.seek(record.file_offset)
            return io.read_bytes(record.decompressed_size)

        contents = bytearray()
        for part_index in range(record.first_part_index, record.first_part_index + record.file_parts):
            io.seek(self.header.record_table_offset + part_index * PART_HEADER_SIZE)
            part = read_structure(ArcPartHeader, io, None)

            io.seek(part.offset)
            data = io.read_bytes(part.compressed_size)
            if part.compressed_size == part.decompressed_size:
                contents += data
            else:
                contents += decompress_block(data, part.compressed_size, part.decompressed_size)

        if len(contents) != record.decompressed_size:
            raise FormatError(
                f"{entry.filename}: parts hold {len(contents)} bytes, "
                f"expected {record.decompressed_size}"
            )
        if zlib.adler32(contents) != record.decompressed_hash:
            logger.warning(f"{entry.filename}: decompressed hash mismatch")
        return bytes(contents)

    @property
    def entries(self) -> list[ArcEntry]:
        """All entries in the archive."""
        return self._entries

    def get_entry(self, filename: str) -> Optional[bytes]:
        """Get file data by filename."""
        for entry in self._entries:
            if entry.filename == filename:
                return self._read_entry_data(entry)
        return None

    def read_all(self) -> dict[str, bytes]:
        """Every file in the archive, keyed by name."""
        return {entry.filename: self._read_entry_data(entry) for entry in self._entries}

    def extract_all(self, output_dir):
        """Extract all files to a directory."""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        for entry in self._entries:
            data = self._read_entry_data(entry)
            file_path = output_path / entry.filename
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'wb') as f:
                f.write(data)

    def list_files(self) -> list[str]:
        """Get list of all filenames in the archive."""
        return [e.filename for e in self._entries]

    def __iter__(self) -> Iterator[ArcEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, filename: str) -> bool:
        return any(e.filename == filename for e in self._entries)

    def summary(self) -> str:
        """Get a summary of the archive."""
        total_size = sum(e.size for e in self._entries)
        return f"ARC: {self.path}\nFiles: {len(self)}\nTotal size: {total_size:,} bytes"


def read_arc(path) -> dict[str, bytes]:
    """Read an archive into a ``name -> bytes`` map."""
    return ArcArchive(path).read_all()
