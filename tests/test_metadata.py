import struct

from pathlib import Path

import pytest

from pqstream.enums import Compression, Repetition, TimeUnit, Type
from pqstream.exceptions import (
    ParquetFormatError,
    ParquetMagicError,
    ThriftParsingError,
)
from pqstream.readers.metadata import read_metadata
from pqstream.schema import (
    DateTypeInfo,
    DecimalTypeInfo,
    GroupField,
    ListTypeInfo,
    PrimitiveField,
    StringTypeInfo,
    TimestampTypeInfo,
)


def metadata_of(path: Path):
    with path.open('rb') as f:
        return read_metadata(f)


def test_simple_footer(simple_file: Path) -> None:
    metadata = metadata_of(simple_file)

    assert metadata.num_rows == 10
    assert metadata.row_count == 10
    assert metadata.row_group_count == 3
    assert [rg.index for rg in metadata.row_groups] == [0, 1, 2]
    assert metadata.created_by.startswith('parquet-cpp')
    assert 'ARROW:schema' in metadata.key_value_metadata

    schema = metadata.schema_root
    assert schema.field_names == ['id', 'name', 'score']
    assert schema.column_count == 3
    name = schema.find('name')
    assert isinstance(name, PrimitiveField)
    assert name.physical_type == Type.BYTE_ARRAY
    assert name.repetition == Repetition.OPTIONAL
    assert isinstance(name.logical_type, StringTypeInfo)


def test_column_chunks(simple_file: Path) -> None:
    metadata = metadata_of(simple_file)
    for row_group in metadata.row_groups:
        assert row_group.column_paths == ['id', 'name', 'score']
        for chunk in row_group.columns:
            assert chunk.codec == Compression.UNCOMPRESSED
            assert chunk.start_offset >= 4
            assert chunk.num_values == row_group.num_rows


def test_nested_schema(nested_file: Path) -> None:
    schema = metadata_of(nested_file).schema_root

    address = schema.find('address')
    assert isinstance(address, GroupField)
    assert address.leaf_indices == (0, 1)

    tags = schema.find('tags')
    assert isinstance(tags.logical_type, ListTypeInfo)
    element = schema.find('tags.list.element')
    assert element.column_index == 2
    assert element.dotted_path == 'tags.list.element'
    assert element.definition_level == 3
    assert element.repetition_level == 1

    with pytest.raises(KeyError):
        schema.find('tags.nope')


def test_logical_schema(logical_file: Path) -> None:
    schema = metadata_of(logical_file).schema_root

    assert isinstance(schema.find('day').logical_type, DateTypeInfo)
    ts_ms = schema.find('ts_ms').logical_type
    assert isinstance(ts_ms, TimestampTypeInfo)
    assert ts_ms.unit == TimeUnit.MILLIS
    assert schema.find('ts_us').logical_type.unit == TimeUnit.MICROS

    amount = schema.find('amount')
    assert amount.physical_type == Type.FIXED_LEN_BYTE_ARRAY
    assert amount.logical_type == DecimalTypeInfo(scale=2, precision=10)
    assert schema.find('blob').logical_type is None


def write_bytes(tmp_path: Path, data: bytes) -> Path:
    path = tmp_path / 'broken.parquet'
    path.write_bytes(data)
    return path


def test_too_small(tmp_path: Path) -> None:
    with pytest.raises(ParquetFormatError):
        metadata_of(write_bytes(tmp_path, b'PAR1PAR1'))


def test_bad_header_magic(tmp_path: Path) -> None:
    with pytest.raises(ParquetMagicError):
        metadata_of(write_bytes(tmp_path, b'NOPE' + bytes(8) + b'PAR1'))


def test_bad_footer_magic(tmp_path: Path) -> None:
    with pytest.raises(ParquetMagicError):
        metadata_of(write_bytes(tmp_path, b'PAR1' + bytes(8) + b'NOPE'))


def test_footer_length_out_of_bounds(tmp_path: Path) -> None:
    data = b'PAR1' + bytes(4) + struct.pack('<I', 1000) + b'PAR1'
    with pytest.raises(ParquetFormatError):
        metadata_of(write_bytes(tmp_path, data))


def test_garbage_metadata(tmp_path: Path) -> None:
    payload = bytes([0xFF, 0xFF, 0xFF])
    data = b'PAR1' + payload + struct.pack('<I', len(payload)) + b'PAR1'
    with pytest.raises(ThriftParsingError):
        metadata_of(write_bytes(tmp_path, data))


def test_truncated_file(simple_file: Path, tmp_path: Path) -> None:
    data = simple_file.read_bytes()
    with pytest.raises(ParquetMagicError):
        metadata_of(write_bytes(tmp_path, data[: len(data) // 2]))
