"""
FileMetaData parsing.

Composes the schema, row group and column parsers into one pass over the
Thrift-encoded footer.
"""

import itertools
import logging

from pqstream.exceptions import ThriftParsingError
from pqstream.file_metadata import FileMetadata, RowGroup
from pqstream.schema import MessageSchema

from ..thrift.enums import ThriftFieldType
from ..thrift.parser import ThriftCompactParser, ThriftStructParser
from .base import BaseParser
from .enums import FileMetadataFieldId, KeyValueFieldId
from .row_group import RowGroupParser
from .schema import SchemaParser

logger = logging.getLogger(__name__)


class MetadataParser(BaseParser):
    """Parses the complete FileMetaData structure from the footer bytes."""

    def __init__(self, metadata_bytes: bytes):
        super().__init__(ThriftCompactParser(metadata_bytes))

    def parse(self) -> FileMetadata:  # noqa: C901
        """
        Parse the footer into a `FileMetadata`.

        Parsing progress can be monitored by enabling debug logging for this
        module.
        """
        logger.debug('Starting FileMetadata parsing')

        struct_parser = ThriftStructParser(self.parser)
        version = 0
        num_rows = 0
        created_by: str | None = None
        schema: MessageSchema | None = None
        row_groups: list[RowGroup] = []
        key_value_metadata: dict[str, str] = {}

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            if field_type == ThriftFieldType.LIST:
                match field_id:
                    case FileMetadataFieldId.SCHEMA:
                        schema = SchemaParser(self.parser).parse_schema_field()
                    case FileMetadataFieldId.ROW_GROUPS:
                        row_groups = self._parse_row_groups_field()
                    case FileMetadataFieldId.KEY_VALUE_METADATA:
                        key_value_metadata = self._parse_key_value_metadata_field()
                    case _:
                        logger.debug('Skipping list field %s', field_id)
                        struct_parser.skip_field(field_type)
                continue

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case FileMetadataFieldId.VERSION:
                    version = value
                case FileMetadataFieldId.NUM_ROWS:
                    num_rows = value
                case FileMetadataFieldId.CREATED_BY:
                    created_by = value.decode('utf-8', errors='replace')

        if schema is None:
            raise ThriftParsingError('File metadata does not contain a schema')

        metadata = FileMetadata(
            version=version,
            schema_root=schema,
            num_rows=num_rows,
            row_groups=row_groups,
            created_by=created_by,
            key_value_metadata=key_value_metadata,
        )
        logger.debug(
            'FileMetadata parsed: version=%d, %d rows in %d row groups',
            metadata.version,
            metadata.num_rows,
            metadata.row_group_count,
        )
        return metadata

    def _parse_row_groups_field(self) -> list[RowGroup]:
        counter = itertools.count()

        def parse_single_row_group() -> RowGroup:
            return RowGroupParser(self.parser, next(counter)).read_row_group()

        return self.read_list(parse_single_row_group)

    def _parse_key_value_metadata_field(self) -> dict[str, str]:
        def parse_key_value() -> tuple[str, str]:
            struct_parser = ThriftStructParser(self.parser)
            key = None
            value = ''

            while True:
                field_type, field_id = struct_parser.read_field_header()
                if field_type == ThriftFieldType.STOP:
                    break

                field_value = struct_parser.read_value(field_type)
                if field_value is None:
                    continue

                if field_id == KeyValueFieldId.KEY:
                    key = field_value.decode('utf-8')
                elif field_id == KeyValueFieldId.VALUE:
                    value = field_value.decode('utf-8', errors='replace')

            if key is None:
                raise ThriftParsingError(
                    'Incomplete key/value pair: missing key field. '
                    'This may indicate corrupted metadata.',
                )
            return key, value

        return dict(self.read_list(parse_key_value))
