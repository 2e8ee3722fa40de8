"""
Data page content parsing.

Turns the body of a DATA_PAGE or DATA_PAGE_V2 into three aligned lists:
repetition levels, definition levels and values. A value slot is None
wherever the definition level is below the leaf's maximum, so every level
entry has exactly one value slot.
"""

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from io import BytesIO
from typing import TYPE_CHECKING, Any

from pqstream.enums import Compression, Encoding, Type
from pqstream.exceptions import ParquetDataError
from pqstream.parsers import encodings, physical_types
from pqstream.schema import PrimitiveField

from . import compressors

if TYPE_CHECKING:
    from pqstream.pages import DataPageV1, DataPageV2

logger = logging.getLogger(__name__)


@dataclass
class PageLevels:
    repetition_levels: list[int] = field(default_factory=list)
    definition_levels: list[int] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)


class DataPageParser:
    """Parser for data page content."""

    def parse_content(
        self,
        content: bytes,
        data_page: DataPageV1 | DataPageV2,
        leaf: PrimitiveField,
        compression_codec: Compression,
        dictionary_values: list[Any] | None = None,
    ) -> PageLevels:
        from pqstream.pages import DataPageV1, DataPageV2

        num_values = data_page.num_values
        max_rep = leaf.repetition_level
        max_def = leaf.definition_level

        match data_page:
            case DataPageV1():
                stream = BytesIO(compressors.decompress(content, compression_codec))
                repetition_levels = self._read_v1_levels(stream, max_rep, num_values)
                definition_levels = self._read_v1_levels(stream, max_def, num_values)
                values_stream = stream
            case DataPageV2():
                rep_length = data_page.repetition_levels_byte_length
                def_length = data_page.definition_levels_byte_length
                if rep_length + def_length > len(content):
                    raise ParquetDataError(
                        'Level sections are larger than the page body',
                    )
                repetition_levels = self._read_v2_levels(
                    content[:rep_length],
                    max_rep,
                    num_values,
                )
                definition_levels = self._read_v2_levels(
                    content[rep_length : rep_length + def_length],
                    max_def,
                    num_values,
                )
                values_data = content[rep_length + def_length :]
                if data_page.is_compressed and values_data:
                    values_data = compressors.decompress(values_data, compression_codec)
                values_stream = BytesIO(values_data)
            case _:
                raise ParquetDataError(f'Not a data page: {data_page!r}')

        num_non_null = sum(1 for level in definition_levels if level == max_def)
        non_null_values = self._read_values(
            values_stream,
            data_page.encoding,
            leaf.physical_type,
            leaf.type_length,
            num_non_null,
            dictionary_values,
        )
        if len(non_null_values) < num_non_null:
            raise ParquetDataError(
                f'Fewer values ({len(non_null_values)}) than specified by '
                f'definition levels ({num_non_null}) in column {leaf.dotted_path}',
            )

        values: list[Any] = []
        non_null_iter = iter(non_null_values)
        for level in definition_levels:
            values.append(next(non_null_iter) if level == max_def else None)

        logger.debug(
            'Parsed %s page for %s: %d entries, %d non-null',
            data_page.page_type.name,
            leaf.dotted_path,
            num_values,
            num_non_null,
        )
        return PageLevels(repetition_levels, definition_levels, values)

    def _read_v1_levels(
        self,
        stream: BytesIO,
        max_level: int,
        num_values: int,
    ) -> list[int]:
        if max_level == 0:
            return [0] * num_values
        return encodings.decode_rle_with_length_prefix(
            stream,
            max_level.bit_length(),
            num_values,
        )

    def _read_v2_levels(
        self,
        data: bytes,
        max_level: int,
        num_values: int,
    ) -> list[int]:
        if max_level == 0:
            return [0] * num_values
        return encodings.decode_rle_bit_packed_hybrid(
            BytesIO(data),
            max_level.bit_length(),
            num_values,
        )

    def _read_values(  # noqa: C901
        self,
        stream: BytesIO,
        encoding: Encoding,
        physical_type: Type,
        type_length: int | None,
        num_non_null: int,
        dictionary_values: list[Any] | None,
    ) -> list[Any]:
        """Selects the correct value decoder based on the encoding."""
        if num_non_null == 0:
            return []

        match encoding:
            case Encoding.PLAIN:
                return physical_types.parse_plain_values(
                    stream,
                    physical_type,
                    num_non_null,
                    type_length,
                )
            case Encoding.PLAIN_DICTIONARY | Encoding.RLE_DICTIONARY:
                return self._read_dictionary_values(
                    stream,
                    num_non_null,
                    dictionary_values,
                )
            case Encoding.RLE if physical_type == Type.BOOLEAN:
                return [
                    bool(v)
                    for v in encodings.decode_rle_with_length_prefix(
                        stream,
                        1,
                        num_non_null,
                    )
                ]
            case Encoding.DELTA_BINARY_PACKED if physical_type in (
                Type.INT32,
                Type.INT64,
            ):
                bits = 32 if physical_type == Type.INT32 else 64
                return encodings.decode_delta_binary_packed(stream, bits)
            case Encoding.DELTA_LENGTH_BYTE_ARRAY:
                return encodings.decode_delta_length_byte_array(stream, num_non_null)
            case Encoding.DELTA_BYTE_ARRAY:
                return encodings.decode_delta_byte_array(stream, num_non_null)
            case Encoding.BYTE_STREAM_SPLIT:
                return encodings.decode_byte_stream_split(
                    stream,
                    physical_type,
                    num_non_null,
                    type_length,
                )
            case _:
                raise ParquetDataError(
                    f'Encoding {encoding.name} not supported for '
                    f'{physical_type.name} values',
                )

    def _read_dictionary_values(
        self,
        stream: BytesIO,
        num_values: int,
        dictionary_values: list[Any] | None,
    ) -> list[Any]:
        if dictionary_values is None:
            raise ParquetDataError(
                'Dictionary-encoded page without a preceding dictionary page',
            )
        bit_width_bytes = stream.read(1)
        if not bit_width_bytes:
            raise ParquetDataError('Could not read bit width for dictionary indices')
        indices = encodings.decode_rle_bit_packed_hybrid(
            stream,
            bit_width_bytes[0],
            num_values,
        )
        try:
            return [dictionary_values[i] for i in indices]
        except IndexError:
            raise ParquetDataError(
                f'Dictionary index out of range (dictionary has '
                f'{len(dictionary_values)} entries)',
            ) from None
