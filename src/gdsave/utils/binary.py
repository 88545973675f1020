"""Little-endian binary I/O utilities for Grim Dawn file parsing."""

import struct
from typing import BinaryIO
from io import BytesIO

from ..errors import FormatError


class IoBuffer:
    """Binary reader/writer over a seekable stream (little-endian)."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    @classmethod
    def from_bytes(cls, data: bytes = b"") -> 'IoBuffer':
        """Create from bytes."""
        return cls(BytesIO(data))

    @classmethod
    def from_file(cls, filepath) -> 'IoBuffer':
        """Create from file path (whole file is buffered)."""
        with open(filepath, 'rb') as f:
            data = f.read()
        return cls.from_bytes(data)

    @property
    def position(self) -> int:
        """Current position in stream."""
        return self.stream.tell()

    @position.setter
    def position(self, value: int):
        """Seek to position."""
        self.stream.seek(value)

    @property
    def length(self) -> int:
        """Total stream length in bytes."""
        current = self.stream.tell()
        self.stream.seek(0, 2)  # Seek to end
        end = self.stream.tell()
        self.stream.seek(current)  # Seek back
        return end

    @property
    def has_more(self) -> bool:
        """Check if there are more bytes to read."""
        return self.position < self.length

    def has_bytes(self, num_bytes: int) -> bool:
        """Check if there are at least num_bytes remaining."""
        return (self.length - self.position) >= num_bytes

    def skip(self, num_bytes: int):
        """Skip bytes from current position."""
        self.stream.seek(num_bytes, 1)

    def seek(self, offset: int, whence: int = 0):
        """Seek in stream (whence: 0=start, 1=current, 2=end)."""
        self.stream.seek(offset, whence)

    def getvalue(self) -> bytes:
        """Whole buffer contents (BytesIO-backed buffers only)."""
        return self.stream.getvalue()

    def read_bytes(self, count: int) -> bytes:
        """Read exactly count raw bytes."""
        data = self.stream.read(count)
        if len(data) != count:
            raise FormatError(
                f"unexpected end of stream at offset {self.position}: "
                f"wanted {count} bytes, got {len(data)}"
            )
        return data

    def read_byte(self) -> int:
        """Read single byte (0-255)."""
        return self.read_bytes(1)[0]

    def read_uint16(self) -> int:
        """Read unsigned 16-bit integer."""
        return struct.unpack('<H', self.read_bytes(2))[0]

    def read_int32(self) -> int:
        """Read signed 32-bit integer."""
        return struct.unpack('<i', self.read_bytes(4))[0]

    def read_uint32(self) -> int:
        """Read unsigned 32-bit integer."""
        return struct.unpack('<I', self.read_bytes(4))[0]

    def read_uint64(self) -> int:
        """Read unsigned 64-bit integer."""
        return struct.unpack('<Q', self.read_bytes(8))[0]

    def read_float(self) -> float:
        """Read 32-bit float."""
        return struct.unpack('<f', self.read_bytes(4))[0]

    def read_cstring(self, length: int) -> str:
        """Read fixed-length ASCII string."""
        return self.read_bytes(length).decode('ascii', errors='replace')

    def write_bytes(self, data: bytes):
        """Write raw bytes."""
        self.stream.write(data)

    def write_byte(self, value: int):
        """Write single byte."""
        self.stream.write(struct.pack('B', value))

    def write_uint16(self, value: int):
        """Write unsigned 16-bit integer."""
        self.stream.write(struct.pack('<H', value))

    def write_int32(self, value: int):
        """Write signed 32-bit integer."""
        self.stream.write(struct.pack('<i', value))

    def write_uint32(self, value: int):
        """Write unsigned 32-bit integer."""
        self.stream.write(struct.pack('<I', value))

    def write_uint64(self, value: int):
        """Write unsigned 64-bit integer."""
        self.stream.write(struct.pack('<Q', value))

    def write_float(self, value: float):
        """Write 32-bit float."""
        self.stream.write(struct.pack('<f', value))
