"""Locating and parsing the file footer."""

import logging
import struct

from io import SEEK_END

from pqstream.constants import FOOTER_SIZE, PARQUET_MAGIC
from pqstream.exceptions import (
    ParquetFormatError,
    ParquetMagicError,
    ThriftParsingError,
)
from pqstream.file_metadata import FileMetadata
from pqstream.parsers.parquet.metadata import MetadataParser
from pqstream.protocols import ReadableSeekable

logger = logging.getLogger(__name__)

# header magic plus the footer length and magic
MIN_FILE_SIZE = len(PARQUET_MAGIC) + FOOTER_SIZE


def read_metadata(reader: ReadableSeekable) -> FileMetadata:
    """
    Read and parse the footer of a Parquet file.

    The footer is the last eight bytes: a 4-byte little-endian metadata
    length followed by the magic bytes. The metadata sits right before it.
    """
    reader.seek(0, SEEK_END)
    filesize = reader.tell()
    if filesize < MIN_FILE_SIZE:
        raise ParquetFormatError(
            f'Parquet file is too small to be valid ({filesize} bytes)',
        )

    reader.seek(0)
    magic_header = reader.read(len(PARQUET_MAGIC))
    if magic_header != PARQUET_MAGIC:
        raise ParquetMagicError(
            f'Invalid magic header: expected {PARQUET_MAGIC!r}, got {magic_header!r}',
        )

    footer_start = filesize - FOOTER_SIZE
    reader.seek(footer_start)
    footer_bytes = reader.read(FOOTER_SIZE)
    magic_footer = footer_bytes[4:8]
    if magic_footer != PARQUET_MAGIC:
        raise ParquetMagicError(
            f'Invalid magic footer: expected {PARQUET_MAGIC!r}, got {magic_footer!r}',
        )

    (metadata_size,) = struct.unpack('<I', footer_bytes[:4])
    metadata_start = footer_start - metadata_size
    if metadata_start < len(PARQUET_MAGIC):
        raise ParquetFormatError(
            f'Footer length {metadata_size} points outside the file '
            f'({filesize} bytes)',
        )

    reader.seek(metadata_start)
    metadata_bytes = reader.read(metadata_size)
    if len(metadata_bytes) != metadata_size:
        raise ParquetFormatError(
            f'Short read of file metadata: wanted {metadata_size} bytes, '
            f'got {len(metadata_bytes)}',
        )
    logger.debug(
        'Parsing %d bytes of file metadata at offset %d',
        metadata_size,
        metadata_start,
    )

    try:
        return MetadataParser(metadata_bytes).parse()
    except ValueError as e:
        # unknown enum members and model validation failures
        raise ThriftParsingError(f'Invalid file metadata: {e}') from e
