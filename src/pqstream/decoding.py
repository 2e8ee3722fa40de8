"""
Logical type decoding.

Maps a physical value plus its optional logical annotation to the value a
record carries. Decoding is total: any combination not covered here falls
back to the physical type's natural value, and nothing in this module
raises for bad data.
"""

from __future__ import annotations

import datetime
import decimal
import logging

from typing import Any

from .enums import TimeUnit, Type
from .schema import (
    DateTypeInfo,
    DecimalTypeInfo,
    LogicalTypeInfoUnion,
    StringTypeInfo,
    TimestampTypeInfo,
)

logger = logging.getLogger(__name__)

EPOCH_DATE = datetime.date(1970, 1, 1)
EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)

# units per second, and nanoseconds per unit
_TIMESTAMP_SCALES: dict[TimeUnit, tuple[int, int]] = {
    TimeUnit.MILLIS: (1_000, 1_000_000),
    TimeUnit.MICROS: (1_000_000, 1_000),
}
_NANOS_SCALE = (1_000_000_000, 1)


def decode_value(
    physical_type: Type,
    logical_type: LogicalTypeInfoUnion | None,
    raw: Any,
) -> Any:
    """Decode one non-null physical value."""
    if raw is None:
        return None

    match physical_type:
        case Type.BOOLEAN | Type.FLOAT | Type.DOUBLE | Type.INT96:
            return raw
        case Type.INT32:
            return _decode_int32(raw, logical_type)
        case Type.INT64:
            return _decode_int64(raw, logical_type)
        case Type.BYTE_ARRAY:
            return _decode_byte_array(raw, logical_type)
        case Type.FIXED_LEN_BYTE_ARRAY:
            return _decode_fixed_len_byte_array(raw, logical_type)
        case _:
            return raw


def _decode_int32(value: int, logical_type: LogicalTypeInfoUnion | None) -> Any:
    # TIME values stay as the raw integer count of units since midnight
    match logical_type:
        case DateTypeInfo():
            return decode_date(value)
        case _:
            return value


def _decode_int64(value: int, logical_type: LogicalTypeInfoUnion | None) -> Any:
    match logical_type:
        case TimestampTypeInfo(unit=unit):
            return decode_timestamp(value, unit)
        case _:
            return value


def _decode_byte_array(value: bytes, logical_type: LogicalTypeInfoUnion | None) -> Any:
    match logical_type:
        case StringTypeInfo():
            return _utf8_or_bytes(value)
        case DecimalTypeInfo(scale=scale):
            return decode_decimal(value, scale)
        case _:
            return _utf8_or_bytes(value)


def _decode_fixed_len_byte_array(
    value: bytes,
    logical_type: LogicalTypeInfoUnion | None,
) -> Any:
    match logical_type:
        case DecimalTypeInfo(scale=scale):
            return decode_decimal(value, scale)
        case _:
            return bytes(value)


def decode_date(days: int) -> datetime.date | int:
    """Days since 1970-01-01; out-of-range values stay integers."""
    try:
        return EPOCH_DATE + datetime.timedelta(days=days)
    except OverflowError:
        logger.debug('DATE value %d is outside the supported range', days)
        return days


def decode_timestamp(value: int, unit: TimeUnit) -> datetime.datetime | int:
    """
    Convert a count of `unit` since the epoch to an aware UTC datetime.

    Nanosecond precision is truncated to microseconds. Values outside the
    range `datetime` can represent stay integers.
    """
    per_second, nanos_per_unit = _TIMESTAMP_SCALES.get(unit, _NANOS_SCALE)
    seconds, remainder = divmod(value, per_second)
    nanos = remainder * nanos_per_unit
    try:
        return EPOCH + datetime.timedelta(seconds=seconds, microseconds=nanos // 1000)
    except OverflowError:
        logger.debug(
            'TIMESTAMP value %d (%s) is outside the supported range',
            value,
            unit,
        )
        return value


def decode_decimal(value: bytes, scale: int) -> decimal.Decimal:
    """Big-endian two's complement unscaled integer, times 10**-scale."""
    unscaled = int.from_bytes(value, 'big', signed=True)
    return decimal.Decimal(f'{unscaled}e{-scale}')


def _utf8_or_bytes(value: bytes) -> str | bytes:
    try:
        return bytes(value).decode('utf-8')
    except UnicodeDecodeError:
        return bytes(value)
