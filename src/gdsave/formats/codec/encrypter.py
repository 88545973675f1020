"""
Stream cipher used by Grim Dawn character saves.

A 256-entry table of 32-bit words is derived from the file seed. Every byte
read or written is XORed with the running state, and the state then absorbs
``table[byte]``. Because the state evolves identically on the read and the
write side, its value at the end of a block doubles as the block checksum.
"""

TABLE_SIZE = 256
TABLE_MULTIPLIER = 39916801


def rotate_right(value: int, count: int = 1) -> int:
    """Rotate a 32-bit value right."""
    value &= 0xFFFFFFFF
    return ((value >> count) | (value << (32 - count))) & 0xFFFFFFFF


def build_table(seed: int) -> list[int]:
    """Derive the substitution table for a seed.

    Each entry is the previous value rotated right by one bit and multiplied
    by 39916801, truncated to 32 bits. The first entry is derived from the
    seed itself.
    """
    table = []
    val = seed & 0xFFFFFFFF
    for _ in range(TABLE_SIZE):
        val = (rotate_right(val) * TABLE_MULTIPLIER) & 0xFFFFFFFF
        table.append(val)
    return table


class Encrypter:
    """Running cipher state for one load or save session."""

    __slots__ = ('seed', 'table', 'state')

    def __init__(self, seed: int):
        self.seed = seed & 0xFFFFFFFF
        self.table = tuple(build_table(self.seed))
        self.state = self.seed

    def consume(self, byte: int):
        """Fold one byte into the running state."""
        self.state ^= self.table[byte]

    def consume_all(self, data: bytes):
        for b in data:
            self.state ^= self.table[b]

    def __repr__(self) -> str:
        return f"Encrypter(seed={self.seed:#010x}, state={self.state:#010x})"
