import base64
import datetime
import decimal
import json

from typing import Any

from .file_info import FieldInfo, FileInfo


def _header(title: str) -> str:
    return f'{title}\n{"=" * 60}'


def _format_field(name: str, info: FieldInfo, depth: int) -> list[str]:
    indent = '  ' * (depth + 1)
    lines = [f'{indent}{name}: {info.type} {info.repetition}']
    for child_name, child in info.children.items():
        lines.extend(_format_field(child_name, child, depth + 1))
    return lines


def format_file_info(info: FileInfo) -> str:
    lines = [
        _header('Parquet File Summary'),
        f'Created by: {info.created_by or "unknown"}',
        f'Schema: {info.schema_name}',
        f'Total rows: {info.total_rows:,}',
        f'Row groups: {info.row_group_count}',
    ]
    if info.fields:
        lines.extend(['\nFields:', '-' * 40])
        for name, field in info.fields.items():
            lines.extend(_format_field(name, field, 0))
    return '\n'.join(lines)


def _json_default(value: Any) -> Any:
    match value:
        case datetime.datetime() | datetime.date() | datetime.time():
            return value.isoformat()
        case decimal.Decimal():
            return str(value)
        case bytes() | bytearray() | memoryview():
            return base64.b64encode(bytes(value)).decode('ascii')
        case _:
            raise TypeError(f'{type(value).__name__} is not JSON serializable')


def format_record(record: dict[str, Any]) -> str:
    """One record as a single line of JSON."""
    return json.dumps(record, default=_json_default, ensure_ascii=False)
