"""Binds a converter tree to one decoded row group."""

from __future__ import annotations

import logging

from .converters import ConverterTree, Record
from .readers.record_reader import RecordReader
from .readers.row_group import RowGroupData

logger = logging.getLogger(__name__)


class RowMaterializer:
    """
    Produces one record per `read_row` call from a row group's columns.

    The materializer does not know the row group's row count: the caller
    decides how many rows to ask for, and a None result means the columns
    ran out first.
    """

    def __init__(self, tree: ConverterTree, row_group: RowGroupData):
        self.tree = tree
        self.row_group = row_group
        tree.reset()
        self._reader = RecordReader(row_group.columns, tree.schema, tree)
        logger.debug('Materializer bound to row group %d', row_group.index)

    def read_row(self) -> Record | None:
        return self._reader.read()
