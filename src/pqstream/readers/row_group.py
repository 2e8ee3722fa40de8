"""RowGroupReader: decodes every column chunk of one row group."""

import logging

from dataclasses import dataclass

from pqstream.exceptions import ParquetFormatError
from pqstream.file_metadata import RowGroup
from pqstream.protocols import ReadableSeekable
from pqstream.schema import MessageSchema

from .column_chunk import ColumnChunkReader, ColumnData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowGroupData:
    """A fully decoded row group: one `ColumnData` per schema leaf, in leaf order."""

    index: int
    row_count: int
    columns: list[ColumnData]


class RowGroupReader:
    def __init__(
        self,
        reader: ReadableSeekable,
        row_group: RowGroup,
        schema: MessageSchema,
    ):
        self.reader = reader
        self.row_group = row_group
        self.schema = schema

    def read(self) -> RowGroupData:
        """
        Read the row group's column chunks in file order and decode them.

        Chunks are matched to schema leaves by their dotted path, so a footer
        listing chunks in a different order still decodes correctly.
        """
        chunks_by_path = {
            chunk.path_in_schema: chunk for chunk in self.row_group.columns
        }
        missing = [
            leaf.dotted_path
            for leaf in self.schema.leaves
            if leaf.dotted_path not in chunks_by_path
        ]
        if missing:
            raise ParquetFormatError(
                f'Row group {self.row_group.index} has no column chunk for '
                f'{", ".join(missing)}',
            )

        leaves = sorted(
            self.schema.leaves,
            key=lambda leaf: chunks_by_path[leaf.dotted_path].start_offset,
        )
        decoded: dict[int, ColumnData] = {}
        for leaf in leaves:
            chunk = chunks_by_path[leaf.dotted_path]
            decoded[leaf.column_index] = ColumnChunkReader(
                self.reader,
                chunk,
                leaf,
            ).read()

        logger.debug(
            'Decoded row group %d: %d rows, %d columns',
            self.row_group.index,
            self.row_group.num_rows,
            len(decoded),
        )
        return RowGroupData(
            index=self.row_group.index,
            row_count=self.row_group.num_rows,
            columns=[decoded[leaf.column_index] for leaf in self.schema.leaves],
        )
