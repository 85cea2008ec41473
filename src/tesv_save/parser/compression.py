"""Body and change-form decompression.

The body is either stored as-is or LZ4 block-compressed (no frame header),
selected by the header's compression type. Individual change forms may be
zlib-compressed on their own. In both cases the output must be exactly the
declared size.
"""

import zlib

import lz4.block

from tesv_save.models.constants import CompressionType
from tesv_save.parser.binary_reader import BinaryReader
from tesv_save.parser.errors import DecompressionError, UnsupportedCompressionError


def read_body(reader: BinaryReader, compression_type: int,
              uncompressed_len: int, compressed_len: int) -> bytes:
    """Return the decompressed body that starts at the reader's position.

    Uncompressed bodies run to the end of the buffer. LZ4 bodies occupy
    the next `compressed_len` bytes.
    """
    if compression_type == CompressionType.NONE:
        return reader.rest()
    if compression_type == CompressionType.LZ4:
        offset = reader.position
        compressed = reader.bytes(compressed_len)
        return decompress_lz4_block(compressed, uncompressed_len, offset=offset)
    if compression_type == CompressionType.ZLIB:
        raise UnsupportedCompressionError(
            "zlib body compression is not supported",
            offset=reader.position,
            expected=f"{CompressionType.NONE} or {CompressionType.LZ4}",
            found=compression_type,
        )
    raise UnsupportedCompressionError(
        "Unknown body compression type",
        offset=reader.position,
        expected=f"{CompressionType.NONE} or {CompressionType.LZ4}",
        found=compression_type,
    )


def decompress_lz4_block(data: bytes, expected_size: int, *, offset: int | None = None) -> bytes:
    try:
        raw = lz4.block.decompress(data, uncompressed_size=expected_size)
    except lz4.block.LZ4BlockError as exc:
        raise DecompressionError(
            f"LZ4 body decompression failed: {exc}",
            offset=offset,
            expected=expected_size,
        ) from exc
    if len(raw) != expected_size:
        raise DecompressionError(
            "LZ4 body decompressed to the wrong size",
            offset=offset,
            expected=expected_size,
            found=len(raw),
        )
    return raw


def inflate(data: bytes, expected_size: int, *, offset: int | None = None) -> bytes:
    """Inflate a zlib stream that must produce exactly *expected_size* bytes.

    Output is capped one byte past the declared size, so an oversized
    stream fails without being inflated in full.
    """
    decompressor = zlib.decompressobj()
    try:
        raw = decompressor.decompress(data, expected_size + 1)
    except zlib.error as exc:
        raise DecompressionError(
            f"zlib decompression failed: {exc}",
            offset=offset,
            expected=expected_size,
        ) from exc
    if len(raw) != expected_size or not decompressor.eof:
        raise DecompressionError(
            "zlib stream inflated to the wrong size",
            offset=offset,
            expected=expected_size,
            found=len(raw),
        )
    return raw
