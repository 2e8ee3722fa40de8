"""
The converter tree.

One converter node per schema field, mirroring the schema's nesting. The
record reader drives the tree with three events:

- `start(group)` begins a group occurrence and clears its accumulator,
- `add_value(primitive, raw)` decodes a value into the parent's accumulator,
- `end(group)` snapshots the accumulator into the parent, or into
  `current_record` when the group is the root.

Nodes are a tagged variant of `PrimitiveConverter` and `GroupConverter`;
operations dispatch on the variant with `match`.
"""

from __future__ import annotations

import dataclasses
import logging

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .decoding import decode_value
from .exceptions import ConverterStateError
from .schema import GroupField, MessageSchema, PrimitiveField

logger = logging.getLogger(__name__)

type Record = dict[str, Any]


class ConverterState(StrEnum):
    IDLE = 'idle'
    ACCUMULATING = 'accumulating'


@dataclass(eq=False)
class PrimitiveConverter:
    field: PrimitiveField
    parent: GroupConverter = dataclasses.field(repr=False)

    @property
    def name(self) -> str:
        return self.field.name


@dataclass(eq=False)
class GroupConverter:
    name: str
    field: GroupField | None
    parent: GroupConverter | None = dataclasses.field(repr=False)
    children: list[Converter] = dataclasses.field(default_factory=list)
    accumulator: Record = dataclasses.field(default_factory=dict, repr=False)
    state: ConverterState = ConverterState.IDLE

    @property
    def is_root(self) -> bool:
        return self.parent is None


type Converter = PrimitiveConverter | GroupConverter


def _build_children(
    group: GroupConverter,
    fields: list[PrimitiveField | GroupField],
) -> None:
    for child_field in fields:
        match child_field:
            case PrimitiveField():
                group.children.append(PrimitiveConverter(child_field, group))
            case GroupField():
                child = GroupConverter(child_field.name, child_field, group)
                _build_children(child, child_field.children)
                group.children.append(child)


class ConverterTree:
    """The converter nodes for one schema, plus the last completed record."""

    def __init__(self, root: GroupConverter, schema: MessageSchema):
        self.root = root
        self.schema = schema
        self.current_record: Record | None = None
        self._primitives: dict[int, PrimitiveConverter] = {
            node.field.column_index: node
            for node in self.walk()
            if isinstance(node, PrimitiveConverter)
        }

    @classmethod
    def build(cls, schema: MessageSchema) -> ConverterTree:
        root = GroupConverter(schema.name, None, None)
        _build_children(root, schema.children)
        tree = cls(root, schema)
        logger.debug(
            'Built converter tree for %s with %d primitive converters',
            schema.name,
            len(tree._primitives),
        )
        return tree

    def walk(self, node: Converter | None = None) -> Iterator[Converter]:
        """Yield every node, depth first, in schema order."""
        node = self.root if node is None else node
        yield node
        match node:
            case GroupConverter(children=children):
                for child in children:
                    yield from self.walk(child)
            case PrimitiveConverter():
                pass

    def primitive(self, column_index: int) -> PrimitiveConverter:
        return self._primitives[column_index]

    def start(self, node: Converter) -> None:
        match node:
            case GroupConverter(state=ConverterState.IDLE):
                if node.parent is not None:
                    _require_accumulating(node.parent, f'start {node.name}')
                else:
                    self.current_record = None
                node.accumulator = {}
                node.state = ConverterState.ACCUMULATING
            case GroupConverter():
                raise ConverterStateError(
                    f'Group {node.name} was started twice without an end',
                )
            case PrimitiveConverter():
                raise ConverterStateError(
                    f'Cannot start primitive field {node.name}',
                )

    def add_value(self, node: Converter, raw: Any) -> None:
        match node:
            case PrimitiveConverter(field=leaf, parent=parent):
                _require_accumulating(parent, f'add a value for {leaf.name}')
                parent.accumulator[leaf.name] = decode_value(
                    leaf.physical_type,
                    leaf.logical_type,
                    raw,
                )
            case GroupConverter():
                raise ConverterStateError(
                    f'Cannot add a primitive value to group {node.name}',
                )

    def end(self, node: Converter) -> None:
        match node:
            case GroupConverter(state=ConverterState.ACCUMULATING, parent=parent):
                snapshot = dict(node.accumulator)
                node.state = ConverterState.IDLE
                if parent is None:
                    self.current_record = snapshot
                else:
                    _require_accumulating(parent, f'end {node.name}')
                    parent.accumulator[node.name] = snapshot
            case GroupConverter():
                raise ConverterStateError(
                    f'Group {node.name} was ended without being started',
                )
            case PrimitiveConverter():
                raise ConverterStateError(f'Cannot end primitive field {node.name}')

    def reset(self) -> None:
        """Return every group to idle and drop partial state."""
        for node in self.walk():
            match node:
                case GroupConverter():
                    node.accumulator = {}
                    node.state = ConverterState.IDLE
                case PrimitiveConverter():
                    pass
        self.current_record = None


def _require_accumulating(group: GroupConverter, action: str) -> None:
    if group.state != ConverterState.ACCUMULATING:
        raise ConverterStateError(
            f'Cannot {action}: group {group.name} is {group.state}',
        )
