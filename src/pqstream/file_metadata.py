from __future__ import annotations

from functools import cached_property

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .enums import Compression, Encoding, Type
from .schema import MessageSchema


class ColumnChunk(BaseModel):
    """Location and encoding of one column's data within one row group."""

    model_config = ConfigDict(frozen=True)

    path_in_schema: str
    type: Type
    codec: Compression
    num_values: int
    total_compressed_size: int
    total_uncompressed_size: int
    data_page_offset: int
    encodings: list[Encoding] = Field(default_factory=list)
    dictionary_page_offset: int | None = None
    index_page_offset: int | None = None
    file_offset: int = 0
    file_path: str | None = None

    @property
    def start_offset(self) -> int:
        # The file_offset on the ColumnChunk struct can be misleading; the
        # first page is the earlier of the dictionary and data page offsets.
        # Some writers emit a zero dictionary offset when there is none.
        if self.dictionary_page_offset:
            return min(self.data_page_offset, self.dictionary_page_offset)
        return self.data_page_offset


class RowGroup(BaseModel):
    """Logical representation of row group metadata."""

    model_config = ConfigDict(frozen=True)

    index: int
    num_rows: int
    total_byte_size: int
    columns: list[ColumnChunk]

    @cached_property
    def column_paths(self) -> list[str]:
        return [column.path_in_schema for column in self.columns]

    @computed_field
    @cached_property
    def total_compressed_size(self) -> int:
        return sum(column.total_compressed_size for column in self.columns)


class FileMetadata(BaseModel):
    """The parsed footer: schema, row-group directory, and writer info."""

    model_config = ConfigDict(frozen=True)

    version: int
    schema_root: MessageSchema
    num_rows: int
    row_groups: list[RowGroup]
    created_by: str | None = None
    key_value_metadata: dict[str, str] = Field(default_factory=dict)

    @computed_field
    @cached_property
    def row_count(self) -> int:
        return sum(rg.num_rows for rg in self.row_groups)

    @computed_field
    @cached_property
    def row_group_count(self) -> int:
        return len(self.row_groups)
