"""Footer-only summary of a file: writer, schema name, counts and field types."""

from __future__ import annotations

import logging

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .config import ReaderConfig
from .enums import Type
from .filesystem import FileSystem, resolve_filesystem
from .pager import RowGroupPager
from .schema import (
    DateTypeInfo,
    DecimalTypeInfo,
    GroupField,
    PrimitiveField,
    StringTypeInfo,
    TimestampTypeInfo,
)

logger = logging.getLogger(__name__)


class FieldInfo(BaseModel):
    """The Python type a field decodes to, its repetition and its children."""

    model_config = ConfigDict(frozen=True)

    type: str
    repetition: str
    children: dict[str, FieldInfo] = Field(default_factory=dict)


class FileInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    created_by: str | None
    schema_name: str
    row_group_count: int
    total_rows: int
    fields: dict[str, FieldInfo]


def python_type_name(field: PrimitiveField | GroupField) -> str:
    """Name of the type records carry for `field`."""
    match field:
        case GroupField():
            return 'dict'
        case PrimitiveField(physical_type=Type.INT32, logical_type=DateTypeInfo()):
            return 'datetime.date'
        case PrimitiveField(physical_type=Type.INT64, logical_type=TimestampTypeInfo()):
            return 'datetime.datetime'
        case PrimitiveField(
            physical_type=Type.BYTE_ARRAY | Type.FIXED_LEN_BYTE_ARRAY,
            logical_type=DecimalTypeInfo(),
        ):
            return 'decimal.Decimal'
        case PrimitiveField(
            physical_type=Type.BYTE_ARRAY,
            logical_type=StringTypeInfo(),
        ):
            return 'str'
        case PrimitiveField(physical_type=Type.BYTE_ARRAY):
            return 'str | bytes'
        case PrimitiveField(physical_type=Type.FIXED_LEN_BYTE_ARRAY):
            return 'bytes'
        case PrimitiveField(physical_type=Type.BOOLEAN):
            return 'bool'
        case PrimitiveField(physical_type=Type.FLOAT | Type.DOUBLE):
            return 'float'
        case _:
            return 'int'


def _field_info(field: PrimitiveField | GroupField) -> FieldInfo:
    children = {}
    if isinstance(field, GroupField):
        children = {child.name: _field_info(child) for child in field.children}
    return FieldInfo(
        type=python_type_name(field),
        repetition=field.repetition.name,
        children=children,
    )


def read_file_info(
    source: str | Path,
    filesystem: FileSystem | None = None,
    config: ReaderConfig | None = None,
) -> FileInfo:
    """
    Read only the footer of `source` and summarize it.

    Raises `ParquetOpenError` when the source cannot be opened or parsed.
    """
    source = str(source)
    filesystem = filesystem or resolve_filesystem(source, config)
    pager = RowGroupPager.open(filesystem, source)
    try:
        metadata = pager.metadata
        schema = metadata.schema_root
        return FileInfo(
            created_by=metadata.created_by,
            schema_name=schema.name,
            row_group_count=metadata.row_group_count,
            total_rows=metadata.row_count,
            fields={field.name: _field_info(field) for field in schema.children},
        )
    finally:
        pager.close()
