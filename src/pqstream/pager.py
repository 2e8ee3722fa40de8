"""
Row-group paging over one open byte source.

The pager owns the handle: it opens it, reads the footer once, hands out
decoded row groups in file order and closes the handle when asked.
"""

from __future__ import annotations

import logging

from .exceptions import ParquetOpenError, RowGroupReadError
from .file_metadata import FileMetadata
from .filesystem import FileSystem
from .protocols import ReadableSeekable
from .readers.metadata import read_metadata
from .readers.row_group import RowGroupData, RowGroupReader
from .schema import MessageSchema

logger = logging.getLogger(__name__)


class RowGroupPager:
    def __init__(self, source: str, reader: ReadableSeekable, metadata: FileMetadata):
        self.source = source
        self.metadata = metadata
        self._reader: ReadableSeekable | None = reader
        self._next_index = 0

    @classmethod
    def open(cls, filesystem: FileSystem, source: str) -> RowGroupPager:
        """
        Open `source` and parse its footer.

        Any failure closes whatever was opened and raises `ParquetOpenError`
        chained to the cause.
        """
        try:
            reader = filesystem.open(source)
        except Exception as e:
            raise ParquetOpenError(source, str(e)) from e

        try:
            metadata = read_metadata(reader)
        except Exception as e:
            reader.close()
            raise ParquetOpenError(source, str(e)) from e

        logger.debug(
            'Opened %s: %d rows in %d row groups (created by %s)',
            source,
            metadata.row_count,
            metadata.row_group_count,
            metadata.created_by,
        )
        return cls(source, reader, metadata)

    @property
    def schema(self) -> MessageSchema:
        return self.metadata.schema_root

    @property
    def row_group_count(self) -> int:
        return self.metadata.row_group_count

    @property
    def closed(self) -> bool:
        return self._reader is None

    def next_row_group(self) -> RowGroupData | None:
        """Decode the next row group, or return None when all were read."""
        if self._next_index >= self.row_group_count:
            return None
        if self._reader is None:
            raise RowGroupReadError(self.source, self._next_index, 'pager is closed')

        index = self._next_index
        self._next_index += 1
        row_group = self.metadata.row_groups[index]
        logger.debug('Reading row group %d of %s', index, self.source)
        try:
            return RowGroupReader(self._reader, row_group, self.schema).read()
        except Exception as e:
            raise RowGroupReadError(self.source, index, str(e)) from e

    def close(self) -> None:
        if self._reader is None:
            return
        reader, self._reader = self._reader, None
        logger.debug('Closing %s', self.source)
        reader.close()
