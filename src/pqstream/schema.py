"""
The file schema as a tree of typed fields.

Parquet stores the schema as a flat, depth-first list of elements. This
module turns that list into an immutable tree of `PrimitiveField` and
`GroupField` nodes, resolving logical annotations into explicit typed models
and computing the maximum definition/repetition level of every field.
"""

from __future__ import annotations

import itertools
import logging

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Discriminator

from .enums import ConvertedType, FieldKind, LogicalType, Repetition, TimeUnit, Type
from .exceptions import ThriftParsingError

logger = logging.getLogger(__name__)


class LogicalTypeInfo(BaseModel):
    """Base class for logical type information."""

    model_config = ConfigDict(frozen=True)

    logical_type: LogicalType


class StringTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.STRING] = LogicalType.STRING


class IntTypeInfo(LogicalTypeInfo):
    """Integer logical type with bit width and signedness."""

    logical_type: Literal[LogicalType.INTEGER] = LogicalType.INTEGER
    bit_width: int = 32
    is_signed: bool = True


class DecimalTypeInfo(LogicalTypeInfo):
    """Decimal logical type with scale and precision."""

    logical_type: Literal[LogicalType.DECIMAL] = LogicalType.DECIMAL
    scale: int = 0
    precision: int = 10


class TimeTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.TIME] = LogicalType.TIME
    is_adjusted_to_utc: bool = False
    unit: TimeUnit = TimeUnit.MILLIS


class TimestampTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.TIMESTAMP] = LogicalType.TIMESTAMP
    is_adjusted_to_utc: bool = False
    unit: TimeUnit = TimeUnit.MILLIS


class DateTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.DATE] = LogicalType.DATE


class EnumTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.ENUM] = LogicalType.ENUM


class JsonTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.JSON] = LogicalType.JSON


class BsonTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.BSON] = LogicalType.BSON


class UuidTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.UUID] = LogicalType.UUID


class Float16TypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.FLOAT16] = LogicalType.FLOAT16


class MapTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.MAP] = LogicalType.MAP


class ListTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.LIST] = LogicalType.LIST


class VariantTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.VARIANT] = LogicalType.VARIANT


class GeometryTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.GEOMETRY] = LogicalType.GEOMETRY


class GeographyTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.GEOGRAPHY] = LogicalType.GEOGRAPHY


class UnknownTypeInfo(LogicalTypeInfo):
    logical_type: Literal[LogicalType.UNKNOWN] = LogicalType.UNKNOWN


LogicalTypeInfoUnion = (
    StringTypeInfo
    | IntTypeInfo
    | DecimalTypeInfo
    | TimeTypeInfo
    | TimestampTypeInfo
    | DateTypeInfo
    | EnumTypeInfo
    | JsonTypeInfo
    | BsonTypeInfo
    | UuidTypeInfo
    | Float16TypeInfo
    | MapTypeInfo
    | ListTypeInfo
    | VariantTypeInfo
    | GeometryTypeInfo
    | GeographyTypeInfo
    | UnknownTypeInfo
)

LogicalTypeInfoDiscriminated = Annotated[
    LogicalTypeInfoUnion,
    Discriminator('logical_type'),
]


CONVERTED_TYPE_TO_LOGICAL_TYPE: dict[ConvertedType, LogicalTypeInfoUnion] = {
    ConvertedType.UTF8: StringTypeInfo(),
    ConvertedType.MAP: MapTypeInfo(),
    ConvertedType.LIST: ListTypeInfo(),
    ConvertedType.ENUM: EnumTypeInfo(),
    ConvertedType.DATE: DateTypeInfo(),
    ConvertedType.JSON: JsonTypeInfo(),
    ConvertedType.BSON: BsonTypeInfo(),
    ConvertedType.TIME_MILLIS: TimeTypeInfo(
        unit=TimeUnit.MILLIS,
        is_adjusted_to_utc=True,
    ),
    ConvertedType.TIME_MICROS: TimeTypeInfo(
        unit=TimeUnit.MICROS,
        is_adjusted_to_utc=True,
    ),
    ConvertedType.TIMESTAMP_MILLIS: TimestampTypeInfo(
        unit=TimeUnit.MILLIS,
        is_adjusted_to_utc=True,
    ),
    ConvertedType.TIMESTAMP_MICROS: TimestampTypeInfo(
        unit=TimeUnit.MICROS,
        is_adjusted_to_utc=True,
    ),
    ConvertedType.INT_8: IntTypeInfo(bit_width=8, is_signed=True),
    ConvertedType.INT_16: IntTypeInfo(bit_width=16, is_signed=True),
    ConvertedType.INT_32: IntTypeInfo(bit_width=32, is_signed=True),
    ConvertedType.INT_64: IntTypeInfo(bit_width=64, is_signed=True),
    ConvertedType.UINT_8: IntTypeInfo(bit_width=8, is_signed=False),
    ConvertedType.UINT_16: IntTypeInfo(bit_width=16, is_signed=False),
    ConvertedType.UINT_32: IntTypeInfo(bit_width=32, is_signed=False),
    ConvertedType.UINT_64: IntTypeInfo(bit_width=64, is_signed=False),
}


def resolve_logical_type(
    logical_type: LogicalTypeInfoUnion | None,
    converted_type: ConvertedType | None,
    scale: int | None = None,
    precision: int | None = None,
) -> LogicalTypeInfoUnion | None:
    """Pick the annotation, preferring the LogicalType union over ConvertedType."""
    if logical_type is not None:
        return logical_type

    if converted_type is None:
        return None

    if converted_type == ConvertedType.DECIMAL:
        return DecimalTypeInfo(scale=scale or 0, precision=precision or 10)

    return CONVERTED_TYPE_TO_LOGICAL_TYPE.get(converted_type)


@dataclass
class SchemaElement:
    """One entry of the flat schema list, as it appears in the footer."""

    name: str
    type: Type | None = None
    type_length: int | None = None
    repetition: Repetition | None = None
    num_children: int | None = None
    converted_type: ConvertedType | None = None
    scale: int | None = None
    precision: int | None = None
    field_id: int | None = None
    logical_type: LogicalTypeInfoUnion | None = None


class BaseField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: tuple[str, ...]
    repetition: Repetition
    definition_level: int
    repetition_level: int
    logical_type: LogicalTypeInfoDiscriminated | None = None
    field_id: int | None = None

    @property
    def dotted_path(self) -> str:
        return '.'.join(self.path)


class PrimitiveField(BaseField):
    kind: Literal[FieldKind.PRIMITIVE] = FieldKind.PRIMITIVE
    physical_type: Type
    type_length: int | None = None
    column_index: int

    @cached_property
    def leaf_indices(self) -> tuple[int, ...]:
        return (self.column_index,)

    def __repr__(self) -> str:
        annotation = (
            f' [{self.logical_type.logical_type.name}]' if self.logical_type else ''
        )
        return (
            f'Column({self.name}: {self.physical_type.name} '
            f'{self.repetition.name}{annotation})'
        )


class GroupField(BaseField):
    kind: Literal[FieldKind.GROUP] = FieldKind.GROUP
    children: list[AnyField]

    @cached_property
    def leaf_indices(self) -> tuple[int, ...]:
        return tuple(
            index for child in self.children for index in child.leaf_indices
        )

    def __repr__(self) -> str:
        inner = ', '.join(repr(child) for child in self.children)
        return f'Group({self.name} {self.repetition.name}: {inner})'


type Field = PrimitiveField | GroupField

AnyField = Annotated[PrimitiveField | GroupField, Discriminator('kind')]

GroupField.model_rebuild()


class MessageSchema(BaseModel):
    """The root of the schema tree; names the record type."""

    model_config = ConfigDict(frozen=True)

    name: str
    children: list[AnyField]

    @cached_property
    def leaves(self) -> list[PrimitiveField]:
        return list(_iter_leaves(self.children))

    @property
    def column_count(self) -> int:
        return len(self.leaves)

    @property
    def field_names(self) -> list[str]:
        return [child.name for child in self.children]

    def find(self, path: str | Sequence[str]) -> Field:
        """Finds a field by its dotted path."""
        parts = path.split('.') if isinstance(path, str) else list(path)
        children: list[Field] = list(self.children)
        for depth, part in enumerate(parts):
            match = next((child for child in children if child.name == part), None)
            if match is None:
                break
            if depth == len(parts) - 1:
                return match
            if not isinstance(match, GroupField):
                break
            children = list(match.children)
        raise KeyError(f"Schema field for path '{path}' not found")

    def __repr__(self) -> str:
        inner = ', '.join(repr(child) for child in self.children)
        return f'Schema({self.name}: {inner})'


MessageSchema.model_rebuild()


def _iter_leaves(fields: Sequence[Field]) -> Iterator[PrimitiveField]:
    for field in fields:
        match field:
            case PrimitiveField():
                yield field
            case GroupField():
                yield from _iter_leaves(field.children)


def build_schema(elements: Sequence[SchemaElement]) -> MessageSchema:
    """
    Rebuild the schema tree from the flat depth-first element list.

    Each element states how many children follow it; definition and
    repetition levels accumulate from the root down.
    """
    if not elements:
        raise ThriftParsingError('Schema has no elements')

    root = elements[0]
    remaining = iter(elements[1:])
    column_counter = itertools.count()

    children = [
        _build_field(remaining, (), 0, 0, column_counter)
        for _ in range(root.num_children or 0)
    ]

    leftover = sum(1 for _ in remaining)
    if leftover:
        raise ThriftParsingError(
            f'Schema root declares {root.num_children} children but '
            f'{leftover} elements were left over',
        )

    schema = MessageSchema(name=root.name, children=children)
    logger.debug(
        'Built schema %s with %d top-level fields and %d columns',
        schema.name,
        len(schema.children),
        schema.column_count,
    )
    return schema


def _build_field(
    elements: Iterator[SchemaElement],
    parent_path: tuple[str, ...],
    parent_definition_level: int,
    parent_repetition_level: int,
    column_counter: Iterator[int],
) -> Field:
    try:
        element = next(elements)
    except StopIteration:
        raise ThriftParsingError(
            'Unexpected end of schema elements. This suggests a malformed '
            'schema where a parent element claims more children than exist.',
        ) from None

    repetition = element.repetition
    if repetition is None:
        logger.warning(
            'Schema element %s has no repetition, assuming REQUIRED',
            element.name,
        )
        repetition = Repetition.REQUIRED

    path = (*parent_path, element.name)
    definition_level = parent_definition_level + (
        0 if repetition == Repetition.REQUIRED else 1
    )
    repetition_level = parent_repetition_level + (
        1 if repetition == Repetition.REPEATED else 0
    )
    logical_type = resolve_logical_type(
        element.logical_type,
        element.converted_type,
        element.scale,
        element.precision,
    )

    if element.num_children is None:
        if element.type is None:
            raise ThriftParsingError(
                f'Schema element {element.name} has neither a type nor children',
            )
        return PrimitiveField(
            name=element.name,
            path=path,
            repetition=repetition,
            definition_level=definition_level,
            repetition_level=repetition_level,
            logical_type=logical_type,
            field_id=element.field_id,
            physical_type=element.type,
            type_length=element.type_length,
            column_index=next(column_counter),
        )

    children = [
        _build_field(
            elements,
            path,
            definition_level,
            repetition_level,
            column_counter,
        )
        for _ in range(element.num_children)
    ]
    return GroupField(
        name=element.name,
        path=path,
        repetition=repetition,
        definition_level=definition_level,
        repetition_level=repetition_level,
        logical_type=logical_type,
        field_id=element.field_id,
        children=children,
    )
