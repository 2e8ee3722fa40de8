"""
Column-to-row replay.

Rebuilds rows from decoded columns using their repetition and definition
levels, and reports each row to a converter tree as start, value and end
events. Every leaf contributes the run of entries that starts at a
repetition level of 0 and stops before the next one.
"""

from __future__ import annotations

import logging

from collections.abc import Sequence

from pqstream.converters import (
    Converter,
    ConverterTree,
    GroupConverter,
    PrimitiveConverter,
    Record,
)
from pqstream.enums import Repetition
from pqstream.exceptions import ParquetDataError
from pqstream.schema import MessageSchema

from .column_chunk import ColumnData

logger = logging.getLogger(__name__)

# column index -> half-open range of level entries
type Ranges = dict[int, tuple[int, int]]


class RecordReader:
    def __init__(
        self,
        columns: Sequence[ColumnData],
        schema: MessageSchema,
        tree: ConverterTree,
    ):
        if len(columns) != schema.column_count:
            raise ParquetDataError(
                f'Expected {schema.column_count} columns for schema '
                f'{schema.name}, got {len(columns)}',
            )
        self.columns = list(columns)
        self.schema = schema
        self.tree = tree
        self._positions = [0] * len(self.columns)

    def read(self) -> Record | None:
        """Replay the next row into the tree; None once the columns run out."""
        if self.columns and self._positions[0] >= len(self.columns[0]):
            return None

        ranges: Ranges = {}
        for index, column in enumerate(self.columns):
            start = self._positions[index]
            if start >= len(column):
                raise ParquetDataError(
                    f'Column {".".join(column.path)} ended before the others',
                )
            end = start + 1
            while end < len(column) and column.repetition_levels[end] != 0:
                end += 1
            ranges[index] = (start, end)
            self._positions[index] = end

        root = self.tree.root
        self.tree.start(root)
        for child in root.children:
            self._replay(child, ranges)
        self.tree.end(root)
        return self.tree.current_record

    def _replay(self, node: Converter, ranges: Ranges) -> None:
        field = node.field
        if field is None or not field.leaf_indices:
            return
        leaves = field.leaf_indices
        first_leaf = self.columns[leaves[0]]
        occurrences = self._occurrences(
            field.repetition,
            field.repetition_level,
            leaves,
            ranges,
        )

        for occurrence in occurrences:
            start, _ = occurrence[leaves[0]]
            if first_leaf.definition_levels[start] < field.definition_level:
                continue

            match node:
                case PrimitiveConverter():
                    self.tree.add_value(node, first_leaf.values[start])
                case GroupConverter(children=children):
                    self.tree.start(node)
                    for child in children:
                        self._replay(child, occurrence)
                    self.tree.end(node)

    def _occurrences(
        self,
        repetition: Repetition,
        repetition_level: int,
        leaves: tuple[int, ...],
        ranges: Ranges,
    ) -> list[Ranges]:
        """
        Split the ranges into one entry per occurrence of a field.

        Non-repeated fields occur once. A repeated field starts a new
        occurrence at every entry whose repetition level is at or below its
        own.
        """
        if repetition != Repetition.REPEATED:
            return [ranges]

        per_leaf: list[list[tuple[int, int]]] = []
        for leaf in leaves:
            start, end = ranges[leaf]
            levels = self.columns[leaf].repetition_levels
            bounds = [start]
            bounds.extend(
                i for i in range(start + 1, end) if levels[i] <= repetition_level
            )
            bounds.append(end)
            per_leaf.append(list(zip(bounds, bounds[1:], strict=False)))

        try:
            grouped = list(zip(*per_leaf, strict=True))
        except ValueError:
            raise ParquetDataError(
                'Leaf columns disagree on the number of repeated occurrences',
            ) from None
        return [dict(zip(leaves, occurrence, strict=True)) for occurrence in grouped]
