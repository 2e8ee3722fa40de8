"""
Row group parsing.

Row groups partition the file by rows; each one holds exactly one column
chunk per leaf column of the schema.
"""

import logging

from pqstream.file_metadata import ColumnChunk, RowGroup

from ..thrift.enums import ThriftFieldType
from ..thrift.parser import ThriftCompactParser, ThriftStructParser
from .base import BaseParser
from .column import ColumnParser
from .enums import RowGroupFieldId

logger = logging.getLogger(__name__)


class RowGroupParser(BaseParser):
    def __init__(self, parser: ThriftCompactParser, index: int):
        super().__init__(parser)
        self.index = index

    def read_row_group(self) -> RowGroup:
        """
        Read a RowGroup struct.

        The position of the row group in the footer list becomes its `index`,
        which is what error messages and the pager report.
        """
        struct_parser = ThriftStructParser(self.parser)
        columns: list[ColumnChunk] = []
        total_byte_size = 0
        num_rows = 0
        logger.debug('Reading row group %d', self.index)

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            if field_type == ThriftFieldType.LIST:
                if field_id == RowGroupFieldId.COLUMNS:
                    column_parser = ColumnParser(self.parser)
                    columns = self.read_list(column_parser.read_column_chunk)
                else:
                    struct_parser.skip_field(field_type)
                continue

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case RowGroupFieldId.TOTAL_BYTE_SIZE:
                    total_byte_size = value
                case RowGroupFieldId.NUM_ROWS:
                    num_rows = value

        logger.debug(
            'Read row group %d with %d columns, %d rows, %d bytes',
            self.index,
            len(columns),
            num_rows,
            total_byte_size,
        )
        return RowGroup(
            index=self.index,
            num_rows=num_rows,
            total_byte_size=total_byte_size,
            columns=columns,
        )
