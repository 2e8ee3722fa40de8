"""
ColumnChunkReader: reads and decodes every page of one column chunk.

The chunk is fetched with a single positioned read covering
`[start_offset, start_offset + total_compressed_size)`; pages are then
parsed from that buffer in order, dictionary page first.
"""

import logging

from dataclasses import dataclass, field
from typing import Any

from pqstream.exceptions import ParquetDataError, ParquetFormatError
from pqstream.file_metadata import ColumnChunk
from pqstream.pages import DataPageV1, DataPageV2, DictionaryPage, IndexPage
from pqstream.parsers.parquet.page import PageParser
from pqstream.parsers.thrift.parser import ThriftCompactParser
from pqstream.protocols import ReadableSeekable
from pqstream.schema import PrimitiveField

logger = logging.getLogger(__name__)


@dataclass
class ColumnData:
    """
    The decoded level entries of one leaf column within one row group.

    The three lists are aligned: entry `i` has a repetition level, a
    definition level and a value, which is None unless the definition level
    equals the leaf's maximum.
    """

    column_index: int
    path: tuple[str, ...]
    repetition_levels: list[int] = field(default_factory=list)
    definition_levels: list[int] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.definition_levels)


class ColumnChunkReader:
    def __init__(
        self,
        reader: ReadableSeekable,
        column_chunk: ColumnChunk,
        leaf: PrimitiveField,
    ):
        self.reader = reader
        self.column_chunk = column_chunk
        self.leaf = leaf

    def read_bytes(self) -> bytes:
        chunk = self.column_chunk
        if chunk.file_path:
            raise ParquetFormatError(
                f'Column chunk {chunk.path_in_schema} is stored in an external '
                f'file ({chunk.file_path}), which is not supported',
            )
        self.reader.seek(chunk.start_offset)
        data = self.reader.read(chunk.total_compressed_size)
        if len(data) != chunk.total_compressed_size:
            raise ParquetFormatError(
                f'Short read of column chunk {chunk.path_in_schema}: wanted '
                f'{chunk.total_compressed_size} bytes at offset '
                f'{chunk.start_offset}, got {len(data)}',
            )
        return data

    def read(self) -> ColumnData:
        """Read the chunk and decode all of its pages."""
        chunk = self.column_chunk
        data = self.read_bytes()
        parser = ThriftCompactParser(data)
        page_parser = PageParser(parser)
        result = ColumnData(column_index=self.leaf.column_index, path=self.leaf.path)
        dictionary_values: list[Any] | None = None

        logger.debug(
            'Decoding column chunk %s (%d values, %d bytes)',
            chunk.path_in_schema,
            chunk.num_values,
            len(data),
        )

        while not parser.at_end() and len(result) < chunk.num_values:
            page = page_parser.read_page(chunk.start_offset + parser.pos)
            content = parser.read(page.compressed_page_size)

            match page:
                case DictionaryPage():
                    if dictionary_values is not None:
                        raise ParquetDataError(
                            f'Multiple dictionary pages in column chunk '
                            f'{chunk.path_in_schema}',
                        )
                    dictionary_values = page.parse_content(
                        content,
                        self.leaf.physical_type,
                        chunk.codec,
                        self.leaf.type_length,
                    )
                case DataPageV1() | DataPageV2():
                    levels = page.parse_content(
                        content,
                        self.leaf,
                        chunk.codec,
                        dictionary_values,
                    )
                    result.repetition_levels.extend(levels.repetition_levels)
                    result.definition_levels.extend(levels.definition_levels)
                    result.values.extend(levels.values)
                case IndexPage():
                    logger.debug('Skipping index page at offset %d', page.start_offset)

        if len(result) != chunk.num_values:
            logger.warning(
                'Column chunk %s declares %d values but %d were decoded',
                chunk.path_in_schema,
                chunk.num_values,
                len(result),
            )
        return result
