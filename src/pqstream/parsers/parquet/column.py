"""
Column chunk parsing.

A ColumnChunk struct wraps a ColumnMetaData struct that says where the
chunk's pages live, how they are compressed and which encodings they use.
"""

import logging

from typing import Any

from pqstream.enums import Compression, Encoding, Type
from pqstream.file_metadata import ColumnChunk

from ..thrift.enums import ThriftFieldType
from ..thrift.parser import ThriftStructParser
from .base import BaseParser
from .enums import ColumnChunkFieldId, ColumnMetadataFieldId

logger = logging.getLogger(__name__)


class ColumnParser(BaseParser):
    """Parses ColumnChunk structs and their ColumnMetaData."""

    def read_column_chunk(self) -> ColumnChunk:
        struct_parser = ThriftStructParser(self.parser)
        chunk: dict[str, Any] = {'file_offset': 0}
        meta: dict[str, Any] | None = None

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            if field_type == ThriftFieldType.STRUCT:
                if field_id == ColumnChunkFieldId.META_DATA:
                    meta = self.read_column_metadata()
                else:
                    struct_parser.skip_field(field_type)
                continue

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case ColumnChunkFieldId.FILE_PATH:
                    chunk['file_path'] = value.decode('utf-8')
                case ColumnChunkFieldId.FILE_OFFSET:
                    chunk['file_offset'] = value

        if meta is None:
            # Some writers only fill in file_offset for chunks stored elsewhere
            meta = self._empty_metadata()

        column_chunk = ColumnChunk(**meta, **chunk)
        logger.debug(
            'Read column chunk %s: codec=%s, %d bytes at offset %d',
            column_chunk.path_in_schema,
            column_chunk.codec.name,
            column_chunk.total_compressed_size,
            column_chunk.start_offset,
        )
        return column_chunk

    def read_column_metadata(self) -> dict[str, Any]:  # noqa: C901
        """
        Read a ColumnMetaData struct into keyword arguments for `ColumnChunk`.

        Statistics and per-column key/value metadata are skipped.
        """
        struct_parser = ThriftStructParser(self.parser)
        meta = self._empty_metadata()

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            if field_type == ThriftFieldType.LIST:
                if field_id == ColumnMetadataFieldId.ENCODINGS:
                    meta['encodings'] = [
                        Encoding(e) for e in self.read_list(self.read_i32)
                    ]
                elif field_id == ColumnMetadataFieldId.PATH_IN_SCHEMA:
                    meta['path_in_schema'] = '.'.join(
                        self.read_list(self.read_string),
                    )
                else:
                    struct_parser.skip_field(field_type)
                continue

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case ColumnMetadataFieldId.TYPE:
                    meta['type'] = Type(value)
                case ColumnMetadataFieldId.CODEC:
                    meta['codec'] = Compression(value)
                case ColumnMetadataFieldId.NUM_VALUES:
                    meta['num_values'] = value
                case ColumnMetadataFieldId.TOTAL_UNCOMPRESSED_SIZE:
                    meta['total_uncompressed_size'] = value
                case ColumnMetadataFieldId.TOTAL_COMPRESSED_SIZE:
                    meta['total_compressed_size'] = value
                case ColumnMetadataFieldId.DATA_PAGE_OFFSET:
                    meta['data_page_offset'] = value
                case ColumnMetadataFieldId.INDEX_PAGE_OFFSET:
                    meta['index_page_offset'] = value
                case ColumnMetadataFieldId.DICTIONARY_PAGE_OFFSET:
                    meta['dictionary_page_offset'] = value

        return meta

    @staticmethod
    def _empty_metadata() -> dict[str, Any]:
        return {
            'type': Type.BOOLEAN,
            'encodings': [],
            'path_in_schema': '',
            'codec': Compression.UNCOMPRESSED,
            'num_values': 0,
            'total_uncompressed_size': 0,
            'total_compressed_size': 0,
            'data_page_offset': 0,
        }
