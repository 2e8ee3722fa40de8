"""
Page models.

Each model describes one page of a column chunk: where its header starts,
how large the header and body are, and the type-specific header fields.
Decoding the body is delegated to `pqstream.parsers.page_content`.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from .enums import Compression, Encoding, PageType, Type
from .parsers.page_content import DataPageParser, DictionaryPageParser, PageLevels
from .schema import PrimitiveField


class Page(BaseModel):
    """Fields shared by every page type."""

    model_config = ConfigDict(frozen=True)

    page_type: PageType
    start_offset: int
    header_size: int
    compressed_page_size: int
    uncompressed_page_size: int
    crc: int | None = None


class DictionaryPage(Page):
    page_type: Literal[PageType.DICTIONARY_PAGE] = PageType.DICTIONARY_PAGE
    num_values: int
    encoding: Encoding
    is_sorted: bool = False

    def parse_content(
        self,
        content: bytes,
        physical_type: Type,
        compression_codec: Compression,
        type_length: int | None = None,
    ) -> list[Any]:
        """Decode the dictionary entries held in `content`."""
        return DictionaryPageParser().parse_content(
            content,
            self,
            physical_type,
            compression_codec,
            type_length,
        )


class DataPageV1(Page):
    page_type: Literal[PageType.DATA_PAGE] = PageType.DATA_PAGE
    num_values: int
    encoding: Encoding
    definition_level_encoding: Encoding
    repetition_level_encoding: Encoding

    def parse_content(
        self,
        content: bytes,
        field: PrimitiveField,
        compression_codec: Compression,
        dictionary_values: list[Any] | None = None,
    ) -> PageLevels:
        return DataPageParser().parse_content(
            content,
            self,
            field,
            compression_codec,
            dictionary_values,
        )


class DataPageV2(Page):
    page_type: Literal[PageType.DATA_PAGE_V2] = PageType.DATA_PAGE_V2
    num_values: int
    num_nulls: int
    num_rows: int
    encoding: Encoding
    definition_levels_byte_length: int
    repetition_levels_byte_length: int
    is_compressed: bool = True

    def parse_content(
        self,
        content: bytes,
        field: PrimitiveField,
        compression_codec: Compression,
        dictionary_values: list[Any] | None = None,
    ) -> PageLevels:
        return DataPageParser().parse_content(
            content,
            self,
            field,
            compression_codec,
            dictionary_values,
        )


class IndexPage(Page):
    """Index pages carry no values; readers skip over them."""

    page_type: Literal[PageType.INDEX_PAGE] = PageType.INDEX_PAGE


AnyPage = DictionaryPage | DataPageV1 | DataPageV2 | IndexPage
