"""
Value and level encodings used inside data pages.

Covers the RLE/bit-packed hybrid (levels, dictionary indices, RLE booleans),
DELTA_BINARY_PACKED, DELTA_LENGTH_BYTE_ARRAY, DELTA_BYTE_ARRAY and
BYTE_STREAM_SPLIT. Readers consume exactly the bytes that belong to them so
callers can chain decoders over one stream.
"""

from __future__ import annotations

import logging
import struct

from io import BytesIO

from pqstream.enums import Type
from pqstream.exceptions import ParquetDataError

from .physical_types import value_width

logger = logging.getLogger(__name__)


def read_varint(stream: BytesIO) -> int:
    result, shift = 0, 0
    while True:
        byte_data = stream.read(1)
        if not byte_data:
            raise ParquetDataError('Unexpected end of data while reading varint')
        byte = byte_data[0]
        result |= (byte & 0x7F) << shift
        if (byte & 0x80) == 0:
            return result
        shift += 7


def read_zigzag_varint(stream: BytesIO) -> int:
    value = read_varint(stream)
    return (value >> 1) ^ (-(value & 1))


def unpack_bits(data: bytes, count: int, bit_width: int) -> list[int]:
    """
    Unpack `count` little-endian bit-packed integers of `bit_width` bits.

    Missing trailing bits read as zero.
    """
    if bit_width == 0:
        return [0] * count
    packed = int.from_bytes(data, 'little')
    mask = (1 << bit_width) - 1
    return [(packed >> (i * bit_width)) & mask for i in range(count)]


def decode_rle_bit_packed_hybrid(
    stream: BytesIO,
    bit_width: int,
    num_values: int,
) -> list[int]:
    """
    Decode `num_values` integers of the RLE/bit-packed hybrid encoding.

    Each run starts with a varint header: an even header is an RLE run of
    `header >> 1` repeats of one value, an odd header is `header >> 1`
    groups of eight bit-packed values.
    """
    values: list[int] = []
    value_byte_width = (bit_width + 7) // 8

    while len(values) < num_values:
        header = read_varint(stream)
        if (header & 1) == 0:
            count = header >> 1
            value_bytes = stream.read(value_byte_width)
            if len(value_bytes) < value_byte_width:
                raise ParquetDataError('Unexpected end of data in RLE run')
            value = int.from_bytes(value_bytes, 'little')
            values.extend([value] * min(count, num_values - len(values)))
        else:
            count = (header >> 1) * 8
            packed = stream.read((header >> 1) * bit_width)
            unpacked = unpack_bits(packed, count, bit_width)
            values.extend(unpacked[: num_values - len(values)])

    return values


def decode_rle_with_length_prefix(
    stream: BytesIO,
    bit_width: int,
    num_values: int,
) -> list[int]:
    """Hybrid-encoded run preceded by its 4-byte little-endian byte length."""
    length_bytes = stream.read(4)
    if len(length_bytes) != 4:
        raise ParquetDataError('Could not read 4-byte length prefix for RLE data')
    (data_length,) = struct.unpack('<I', length_bytes)
    data = stream.read(data_length)
    if len(data) != data_length:
        raise ParquetDataError(
            f'RLE data truncated: wanted {data_length} bytes, got {len(data)}',
        )
    return decode_rle_bit_packed_hybrid(BytesIO(data), bit_width, num_values)


def _wrap_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def decode_delta_binary_packed(stream: BytesIO, bits: int = 64) -> list[int]:
    """
    Decode one DELTA_BINARY_PACKED run; returns every value it holds.

    Layout: a header of block size, miniblocks per block, total value count
    and zigzag first value; then blocks of a zigzag min delta, one bit width
    byte per miniblock, and the bit-packed miniblocks. Miniblocks after the
    last value are absent even though their bit widths are present.
    """
    block_size = read_varint(stream)
    num_mini_blocks = read_varint(stream)
    total_value_count = read_varint(stream)
    first_value = read_zigzag_varint(stream)

    if total_value_count == 0:
        return []
    if num_mini_blocks == 0 or block_size % num_mini_blocks:
        raise ParquetDataError(
            f'Invalid DELTA_BINARY_PACKED header: block size {block_size}, '
            f'{num_mini_blocks} miniblocks',
        )

    values_per_mini_block = block_size // num_mini_blocks
    values = [_wrap_signed(first_value, bits)]
    current = first_value
    remaining = total_value_count - 1

    while remaining > 0:
        min_delta = read_zigzag_varint(stream)
        bit_widths = stream.read(num_mini_blocks)
        if len(bit_widths) != num_mini_blocks:
            raise ParquetDataError('Unexpected end of data in DELTA_BINARY_PACKED')

        for bit_width in bit_widths:
            if remaining <= 0:
                break
            packed = stream.read(values_per_mini_block * bit_width // 8)
            deltas = unpack_bits(packed, values_per_mini_block, bit_width)
            for delta in deltas[:remaining]:
                current += min_delta + delta
                values.append(_wrap_signed(current, bits))
            remaining -= len(deltas[:remaining])

    return values


def decode_delta_length_byte_array(stream: BytesIO, num_values: int) -> list[bytes]:
    lengths = decode_delta_binary_packed(stream, bits=32)
    if len(lengths) < num_values:
        raise ParquetDataError(
            f'DELTA_LENGTH_BYTE_ARRAY has {len(lengths)} lengths, '
            f'expected {num_values}',
        )
    values = []
    for length in lengths[:num_values]:
        if length < 0:
            raise ParquetDataError(f'Invalid negative byte array length {length}')
        data = stream.read(length)
        if len(data) != length:
            raise ParquetDataError(f'EOF reading byte array of length {length}')
        values.append(data)
    return values


def decode_delta_byte_array(stream: BytesIO, num_values: int) -> list[bytes]:
    """
    Incremental encoding: each value shares a prefix with the previous one.

    Prefix lengths come first as DELTA_BINARY_PACKED, then the suffixes as
    DELTA_LENGTH_BYTE_ARRAY.
    """
    prefix_lengths = decode_delta_binary_packed(stream, bits=32)
    suffixes = decode_delta_length_byte_array(stream, num_values)
    if len(prefix_lengths) < num_values:
        raise ParquetDataError(
            f'DELTA_BYTE_ARRAY has {len(prefix_lengths)} prefix lengths, '
            f'expected {num_values}',
        )

    values: list[bytes] = []
    previous = b''
    for i, (prefix_length, suffix) in enumerate(
        zip(prefix_lengths, suffixes, strict=False),
    ):
        if prefix_length < 0 or prefix_length > len(previous):
            raise ParquetDataError(
                f'Invalid prefix length at index {i}: '
                f'prefix={prefix_length}, prev_len={len(previous)}',
            )
        previous = previous[:prefix_length] + suffix
        values.append(previous)
    return values


_SPLIT_FORMATS = {
    Type.INT32: '<i',
    Type.INT64: '<q',
    Type.FLOAT: '<f',
    Type.DOUBLE: '<d',
}


def decode_byte_stream_split(
    stream: BytesIO,
    physical_type: Type,
    num_values: int,
    type_length: int | None = None,
) -> list:
    """
    Byte j of value k is stored at position j * num_values + k.

    Supported for FLOAT, DOUBLE, INT32, INT64 and FIXED_LEN_BYTE_ARRAY.
    """
    if (
        physical_type not in _SPLIT_FORMATS
        and physical_type != Type.FIXED_LEN_BYTE_ARRAY
    ):
        raise ParquetDataError(
            f'BYTE_STREAM_SPLIT is not defined for {physical_type.name}',
        )
    width = value_width(physical_type, type_length)
    data = stream.read(width * num_values)
    if len(data) != width * num_values:
        raise ParquetDataError('Unexpected end of data in BYTE_STREAM_SPLIT values')

    streams = [data[j * num_values : (j + 1) * num_values] for j in range(width)]
    raw_values = [bytes(value) for value in zip(*streams, strict=True)]

    if physical_type == Type.FIXED_LEN_BYTE_ARRAY:
        return raw_values
    fmt = _SPLIT_FORMATS[physical_type]
    return [struct.unpack(fmt, value)[0] for value in raw_values]
