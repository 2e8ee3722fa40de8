import base64
import datetime
import decimal
import json

from pathlib import Path

import pytest

from pqstream.exceptions import ParquetOpenError
from pqstream.file_info import read_file_info
from pqstream.formatters import format_file_info, format_record


def test_simple_info(simple_file: Path, counting_filesystem) -> None:
    info = read_file_info(simple_file, filesystem=counting_filesystem)

    assert info.schema_name == 'schema'
    assert info.total_rows == 10
    assert info.row_group_count == 3
    assert info.created_by.startswith('parquet-cpp')
    assert {name: field.type for name, field in info.fields.items()} == {
        'id': 'int',
        'name': 'str',
        'score': 'float',
    }
    assert info.fields['id'].repetition == 'OPTIONAL'
    assert counting_filesystem.opened == 1
    assert counting_filesystem.closed == 1


def test_logical_info(logical_file: Path) -> None:
    fields = read_file_info(logical_file).fields
    assert {name: field.type for name, field in fields.items()} == {
        'day': 'datetime.date',
        'ts_ms': 'datetime.datetime',
        'ts_us': 'datetime.datetime',
        'amount': 'decimal.Decimal',
        'blob': 'str | bytes',
        'flag': 'bool',
        'ratio': 'float',
    }


def test_nested_info(nested_file: Path) -> None:
    fields = read_file_info(nested_file).fields
    address = fields['address']
    assert address.type == 'dict'
    assert {name: child.type for name, child in address.children.items()} == {
        'street': 'str',
        'zip': 'int',
    }
    tags = fields['tags']
    element = tags.children['list'].children['element']
    assert tags.children['list'].repetition == 'REPEATED'
    assert element.type == 'int'


def test_info_of_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ParquetOpenError):
        read_file_info(tmp_path / 'missing.parquet')


def test_format_file_info(nested_file: Path) -> None:
    text = format_file_info(read_file_info(nested_file))
    assert text.startswith('Parquet File Summary\n' + '=' * 60)
    assert 'Total rows: 3' in text
    assert '  address: dict OPTIONAL' in text
    assert '    street: str OPTIONAL' in text


def test_format_record() -> None:
    record = {
        'day': datetime.date(2020, 1, 2),
        'at': datetime.datetime(2020, 1, 2, 3, 4, 5, tzinfo=datetime.UTC),
        'amount': decimal.Decimal('-1.50'),
        'blob': b'\xff\x00',
        'inner': {'text': 'héllo'},
    }
    assert json.loads(format_record(record)) == {
        'day': '2020-01-02',
        'at': '2020-01-02T03:04:05+00:00',
        'amount': '-1.50',
        'blob': base64.b64encode(b'\xff\x00').decode('ascii'),
        'inner': {'text': 'héllo'},
    }


def test_format_record_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        format_record({'value': object()})
