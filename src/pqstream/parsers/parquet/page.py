"""
Page header parsing.

Every page in a column chunk starts with a Thrift PageHeader, followed by
`compressed_page_size` bytes of body. The header says which of the
type-specific headers (data v1, data v2, dictionary, index) is present.
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING, Any

from pqstream.enums import Encoding, PageType
from pqstream.exceptions import ThriftParsingError

from ..thrift.enums import ThriftFieldType
from ..thrift.parser import ThriftStructParser
from .base import BaseParser
from .enums import (
    DataPageHeaderFieldId,
    DataPageHeaderV2FieldId,
    DictionaryPageHeaderFieldId,
    PageHeaderFieldId,
)

if TYPE_CHECKING:
    from pqstream.pages import AnyPage

logger = logging.getLogger(__name__)


class PageParser(BaseParser):
    """Parses page headers into `pqstream.pages` models."""

    def read_page(self, start_offset: int) -> AnyPage:  # noqa: C901
        """
        Read one page header at the parser's current position.

        `start_offset` is the position of the header within the file; it is
        only recorded on the resulting page.
        """
        from pqstream.pages import DataPageV1, DataPageV2, DictionaryPage, IndexPage

        header_start = self.parser.pos
        struct_parser = ThriftStructParser(self.parser)
        page_type: PageType | None = None
        common: dict[str, Any] = {
            'uncompressed_page_size': 0,
            'compressed_page_size': 0,
        }
        specific: dict[str, Any] | None = None

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            if field_type == ThriftFieldType.STRUCT:
                match field_id:
                    case PageHeaderFieldId.DATA_PAGE_HEADER:
                        specific = self.read_data_page_header()
                    case PageHeaderFieldId.DICTIONARY_PAGE_HEADER:
                        specific = self.read_dictionary_page_header()
                    case PageHeaderFieldId.DATA_PAGE_HEADER_V2:
                        specific = self.read_data_page_header_v2()
                    case _:
                        struct_parser.skip_field(field_type)
                continue

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case PageHeaderFieldId.TYPE:
                    page_type = PageType(value)
                case PageHeaderFieldId.UNCOMPRESSED_PAGE_SIZE:
                    common['uncompressed_page_size'] = value
                case PageHeaderFieldId.COMPRESSED_PAGE_SIZE:
                    common['compressed_page_size'] = value
                case PageHeaderFieldId.CRC:
                    common['crc'] = value

        common['start_offset'] = start_offset
        common['header_size'] = self.parser.pos - header_start

        if common['compressed_page_size'] < 0:
            raise ThriftParsingError(
                f'Negative page size at offset {start_offset}',
            )

        logger.debug(
            'Read page header: type=%s, compressed=%d bytes, uncompressed=%d bytes',
            page_type.name if page_type is not None else None,
            common['compressed_page_size'],
            common['uncompressed_page_size'],
        )

        match page_type:
            case PageType.INDEX_PAGE:
                return IndexPage(**common)
            case _ if specific is None:
                raise ThriftParsingError(
                    f'Page at offset {start_offset} of type {page_type} is '
                    'missing its type-specific header',
                )
            case PageType.DATA_PAGE:
                return DataPageV1(**common, **specific)
            case PageType.DATA_PAGE_V2:
                return DataPageV2(**common, **specific)
            case PageType.DICTIONARY_PAGE:
                return DictionaryPage(**common, **specific)
            case _:
                raise ThriftParsingError(
                    f'Page at offset {start_offset} has no page type',
                )

    def read_data_page_header(self) -> dict[str, Any]:
        struct_parser = ThriftStructParser(self.parser)
        header: dict[str, Any] = {
            'num_values': 0,
            'encoding': Encoding.PLAIN,
            'definition_level_encoding': Encoding.RLE,
            'repetition_level_encoding': Encoding.RLE,
        }

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            # statistics are not used for reading records
            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case DataPageHeaderFieldId.NUM_VALUES:
                    header['num_values'] = value
                case DataPageHeaderFieldId.ENCODING:
                    header['encoding'] = Encoding(value)
                case DataPageHeaderFieldId.DEFINITION_LEVEL_ENCODING:
                    header['definition_level_encoding'] = Encoding(value)
                case DataPageHeaderFieldId.REPETITION_LEVEL_ENCODING:
                    header['repetition_level_encoding'] = Encoding(value)

        return header

    def read_data_page_header_v2(self) -> dict[str, Any]:
        """
        Read a DataPageHeaderV2 struct.

        In V2 pages the level sections are never compressed and their byte
        lengths are given here; `is_compressed` applies to the values only.
        """
        struct_parser = ThriftStructParser(self.parser)
        header: dict[str, Any] = {
            'num_values': 0,
            'num_nulls': 0,
            'num_rows': 0,
            'encoding': Encoding.PLAIN,
            'definition_levels_byte_length': 0,
            'repetition_levels_byte_length': 0,
            'is_compressed': True,
        }

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case DataPageHeaderV2FieldId.NUM_VALUES:
                    header['num_values'] = value
                case DataPageHeaderV2FieldId.NUM_NULLS:
                    header['num_nulls'] = value
                case DataPageHeaderV2FieldId.NUM_ROWS:
                    header['num_rows'] = value
                case DataPageHeaderV2FieldId.ENCODING:
                    header['encoding'] = Encoding(value)
                case DataPageHeaderV2FieldId.DEFINITION_LEVELS_BYTE_LENGTH:
                    header['definition_levels_byte_length'] = value
                case DataPageHeaderV2FieldId.REPETITION_LEVELS_BYTE_LENGTH:
                    header['repetition_levels_byte_length'] = value
                case DataPageHeaderV2FieldId.IS_COMPRESSED:
                    header['is_compressed'] = bool(value)

        return header

    def read_dictionary_page_header(self) -> dict[str, Any]:
        struct_parser = ThriftStructParser(self.parser)
        header: dict[str, Any] = {'num_values': 0, 'encoding': Encoding.PLAIN}

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case DictionaryPageHeaderFieldId.NUM_VALUES:
                    header['num_values'] = value
                case DictionaryPageHeaderFieldId.ENCODING:
                    header['encoding'] = Encoding(value)
                case DictionaryPageHeaderFieldId.IS_SORTED:
                    header['is_sorted'] = bool(value)

        return header
