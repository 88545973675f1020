"""LZ4 block decompression shared by the ARC and ARZ readers."""

import lz4.block

from ..errors import FormatError


def decompress_block(data: bytes, compressed_size: int, decompressed_size: int) -> bytes:
    """
    Decompress one raw LZ4 block (no frame header).

    Args:
        data: Buffer holding at least ``compressed_size`` bytes
        compressed_size: Number of compressed bytes to use
        decompressed_size: Expected output size

    Raises:
        FormatError: If the block is corrupt or decodes to the wrong size
    """
    try:
        out = lz4.block.decompress(data[:compressed_size], uncompressed_size=decompressed_size)
    except lz4.block.LZ4BlockError as e:
        raise FormatError(f"corrupt LZ4 block: {e}") from e
    if len(out) != decompressed_size:
        raise FormatError(
            f"LZ4 block decoded to {len(out)} bytes, expected {decompressed_size}"
        )
    return out
