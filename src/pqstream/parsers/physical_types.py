"""
PLAIN decoding of the Parquet physical types.

All functions read `num_values` values from a binary stream positioned at
the start of the values section and leave it after the last value read.
"""

import struct

from io import BytesIO

from pqstream.enums import Type
from pqstream.exceptions import ParquetDataError


def _read_exact(stream: BytesIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ParquetDataError(
            f'Unexpected end of page reading {what}: wanted {size} bytes, '
            f'got {len(data)}',
        )
    return data


def parse_boolean_values(stream: BytesIO, num_values: int) -> list[bool]:
    """Booleans are bit-packed, least significant bit first."""
    data = _read_exact(stream, (num_values + 7) // 8, 'BOOLEAN values')
    return [bool((data[i >> 3] >> (i & 7)) & 1) for i in range(num_values)]


def parse_int32_values(stream: BytesIO, num_values: int) -> list[int]:
    data = _read_exact(stream, 4 * num_values, 'INT32 values')
    return list(struct.unpack(f'<{num_values}i', data))


def parse_int64_values(stream: BytesIO, num_values: int) -> list[int]:
    data = _read_exact(stream, 8 * num_values, 'INT64 values')
    return list(struct.unpack(f'<{num_values}q', data))


def parse_int96_values(stream: BytesIO, num_values: int) -> list[int]:
    """INT96 values are 12-byte little-endian signed integers."""
    data = _read_exact(stream, 12 * num_values, 'INT96 values')
    return [
        int.from_bytes(data[i : i + 12], 'little', signed=True)
        for i in range(0, len(data), 12)
    ]


def parse_float_values(stream: BytesIO, num_values: int) -> list[float]:
    data = _read_exact(stream, 4 * num_values, 'FLOAT values')
    return list(struct.unpack(f'<{num_values}f', data))


def parse_double_values(stream: BytesIO, num_values: int) -> list[float]:
    data = _read_exact(stream, 8 * num_values, 'DOUBLE values')
    return list(struct.unpack(f'<{num_values}d', data))


def parse_byte_array_values(stream: BytesIO, num_values: int) -> list[bytes]:
    """Each value is a 4-byte little-endian length followed by the bytes."""
    values = []
    for _ in range(num_values):
        (length,) = struct.unpack('<I', _read_exact(stream, 4, 'BYTE_ARRAY length'))
        values.append(_read_exact(stream, length, 'BYTE_ARRAY value'))
    return values


def parse_fixed_len_byte_array_values(
    stream: BytesIO,
    num_values: int,
    type_length: int | None,
) -> list[bytes]:
    if type_length is None or type_length < 0:
        raise ParquetDataError('FIXED_LEN_BYTE_ARRAY column has no type length')
    data = _read_exact(stream, type_length * num_values, 'FIXED_LEN_BYTE_ARRAY values')
    return [
        data[i * type_length : (i + 1) * type_length] for i in range(num_values)
    ]


def parse_plain_values(
    stream: BytesIO,
    physical_type: Type,
    num_values: int,
    type_length: int | None = None,
) -> list:
    match physical_type:
        case Type.BOOLEAN:
            return parse_boolean_values(stream, num_values)
        case Type.INT32:
            return parse_int32_values(stream, num_values)
        case Type.INT64:
            return parse_int64_values(stream, num_values)
        case Type.INT96:
            return parse_int96_values(stream, num_values)
        case Type.FLOAT:
            return parse_float_values(stream, num_values)
        case Type.DOUBLE:
            return parse_double_values(stream, num_values)
        case Type.BYTE_ARRAY:
            return parse_byte_array_values(stream, num_values)
        case Type.FIXED_LEN_BYTE_ARRAY:
            return parse_fixed_len_byte_array_values(stream, num_values, type_length)
        case _:
            raise ParquetDataError(f'Unsupported physical type: {physical_type}')


def value_width(physical_type: Type, type_length: int | None = None) -> int:
    """Byte width of fixed-size physical types."""
    match physical_type:
        case Type.INT32 | Type.FLOAT:
            return 4
        case Type.INT64 | Type.DOUBLE:
            return 8
        case Type.INT96:
            return 12
        case Type.FIXED_LEN_BYTE_ARRAY if type_length:
            return type_length
        case _:
            raise ParquetDataError(f'{physical_type.name} values have no fixed width')
