"""Dictionary page content parsing."""

import logging

from io import BytesIO

from pqstream.enums import Compression, Encoding, Type
from pqstream.exceptions import ParquetDataError
from pqstream.parsers import physical_types

from . import compressors

logger = logging.getLogger(__name__)

type DictType = list[bool] | list[int] | list[float] | list[bytes]


class DictionaryPageParser:
    """Parser for dictionary page content."""

    def parse_content(
        self,
        content: bytes,
        dictionary_page,
        physical_type: Type,
        compression_codec: Compression,
        type_length: int | None = None,
    ) -> DictType:
        if dictionary_page.encoding not in (
            Encoding.PLAIN,
            Encoding.PLAIN_DICTIONARY,
        ):
            raise ParquetDataError(
                f'Unsupported dictionary page encoding: '
                f'{dictionary_page.encoding.name}',
            )

        data = compressors.decompress(content, compression_codec)
        if len(data) != dictionary_page.uncompressed_page_size:
            logger.warning(
                'Dictionary page size mismatch: expected %d bytes, got %d',
                dictionary_page.uncompressed_page_size,
                len(data),
            )

        values = physical_types.parse_plain_values(
            BytesIO(data),
            physical_type,
            dictionary_page.num_values,
            type_length,
        )
        logger.debug(
            'Parsed dictionary of %d %s values',
            len(values),
            physical_type.name,
        )
        return values
