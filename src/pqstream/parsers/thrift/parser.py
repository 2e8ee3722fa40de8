"""
Thrift compact protocol decoding.

Parquet serializes its footer and every page header with the Thrift compact
protocol. Only the decoding half is implemented, and only over an in-memory
buffer: callers read the bytes they need from the byte source first.
"""

from __future__ import annotations

import logging
import struct

from typing import Any

from pqstream.exceptions import ThriftParsingError

from .enums import ThriftFieldType

logger = logging.getLogger(__name__)


class ThriftCompactParser:
    """Cursor over a buffer of compact-protocol bytes."""

    def __init__(self, data: bytes, pos: int = 0):
        self.data = data
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def read(self, length: int) -> bytes:
        if length < 0:
            raise ThriftParsingError(f'Negative read length {length}')
        end = self.pos + length
        if end > len(self.data):
            raise ThriftParsingError(
                f'Unexpected end of data: wanted {length} bytes at offset '
                f'{self.pos}, only {len(self.data) - self.pos} available',
            )
        chunk = self.data[self.pos : end]
        self.pos = end
        return chunk

    def read_byte(self) -> int:
        if self.pos >= len(self.data):
            raise ThriftParsingError(f'Unexpected end of data at offset {self.pos}')
        byte = self.data[self.pos]
        self.pos += 1
        return byte

    def read_varint(self) -> int:
        result = 0
        shift = 0
        while True:
            byte = self.read_byte()
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7
            if shift > 70:
                raise ThriftParsingError('Varint is too long')

    def read_zigzag(self) -> int:
        n = self.read_varint()
        return (n >> 1) ^ -(n & 1)

    def read_i8(self) -> int:
        return struct.unpack('<b', self.read(1))[0]

    def read_i16(self) -> int:
        return self.read_zigzag()

    def read_i32(self) -> int:
        return self.read_zigzag()

    def read_i64(self) -> int:
        return self.read_zigzag()

    def read_double(self) -> float:
        return struct.unpack('<d', self.read(8))[0]

    def read_binary(self) -> bytes:
        return self.read(self.read_varint())

    def read_string(self) -> str:
        raw = self.read_binary()
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ThriftParsingError(f'Invalid UTF-8 in string field: {e}') from e

    def read_list_header(self) -> tuple[ThriftFieldType, int]:
        header = self.read_byte()
        size = header >> 4
        element_type = _field_type(header & 0x0F)
        if size == 15:
            size = self.read_varint()
        return element_type, size

    def read_map_header(self) -> tuple[ThriftFieldType, ThriftFieldType, int]:
        size = self.read_varint()
        if size == 0:
            return ThriftFieldType.STOP, ThriftFieldType.STOP, 0
        types = self.read_byte()
        return _field_type(types >> 4), _field_type(types & 0x0F), size

    def read_element(self, element_type: ThriftFieldType) -> Any:
        """Read one list/set/map element (booleans are a full byte here)."""
        match element_type:
            case ThriftFieldType.BOOLEAN_TRUE | ThriftFieldType.BOOLEAN_FALSE:
                return self.read_byte() == 1
            case ThriftFieldType.BYTE:
                return self.read_i8()
            case ThriftFieldType.I16 | ThriftFieldType.I32 | ThriftFieldType.I64:
                return self.read_zigzag()
            case ThriftFieldType.DOUBLE:
                return self.read_double()
            case ThriftFieldType.BINARY:
                return self.read_binary()
            case _:
                raise ThriftParsingError(
                    f'Cannot read container element of type {element_type.name} '
                    'as a primitive',
                )

    def skip(self, field_type: ThriftFieldType) -> None:
        match field_type:
            case ThriftFieldType.BOOLEAN_TRUE | ThriftFieldType.BOOLEAN_FALSE:
                # value lives in the field header
                pass
            case ThriftFieldType.BYTE:
                self.read(1)
            case ThriftFieldType.I16 | ThriftFieldType.I32 | ThriftFieldType.I64:
                self.read_varint()
            case ThriftFieldType.DOUBLE:
                self.read(8)
            case ThriftFieldType.BINARY:
                self.read_binary()
            case ThriftFieldType.STRUCT:
                ThriftStructParser(self).skip_struct()
            case ThriftFieldType.LIST | ThriftFieldType.SET:
                element_type, size = self.read_list_header()
                for _ in range(size):
                    self.skip_element(element_type)
            case ThriftFieldType.MAP:
                key_type, value_type, size = self.read_map_header()
                for _ in range(size):
                    self.skip_element(key_type)
                    self.skip_element(value_type)
            case _:
                raise ThriftParsingError(f'Cannot skip field of type {field_type}')

    def skip_element(self, element_type: ThriftFieldType) -> None:
        if element_type in (
            ThriftFieldType.BOOLEAN_TRUE,
            ThriftFieldType.BOOLEAN_FALSE,
        ):
            self.read(1)
        else:
            self.skip(element_type)


class ThriftStructParser:
    """
    Reads the fields of one struct.

    Field ids are delta-encoded against the previous field of the same
    struct, so each nested struct needs its own instance.
    """

    def __init__(self, parser: ThriftCompactParser):
        self.parser = parser
        self.last_field_id = 0
        self._bool_value: bool | None = None

    def read_field_header(self) -> tuple[ThriftFieldType, int]:
        header = self.parser.read_byte()
        field_type = _field_type(header & 0x0F)
        if field_type == ThriftFieldType.STOP:
            return field_type, 0

        delta = header >> 4
        if delta:
            field_id = self.last_field_id + delta
        else:
            field_id = self.parser.read_i16()
        self.last_field_id = field_id

        if field_type == ThriftFieldType.BOOLEAN_TRUE:
            self._bool_value = True
        elif field_type == ThriftFieldType.BOOLEAN_FALSE:
            self._bool_value = False
        return field_type, field_id

    def read_value(self, field_type: ThriftFieldType) -> Any:
        """
        Read a primitive field value.

        Returns None after skipping containers and structs; callers that need
        those handle them before calling this.
        """
        match field_type:
            case ThriftFieldType.BOOLEAN_TRUE | ThriftFieldType.BOOLEAN_FALSE:
                return self._bool_value
            case ThriftFieldType.BYTE:
                return self.parser.read_i8()
            case ThriftFieldType.I16 | ThriftFieldType.I32 | ThriftFieldType.I64:
                return self.parser.read_zigzag()
            case ThriftFieldType.DOUBLE:
                return self.parser.read_double()
            case ThriftFieldType.BINARY:
                return self.parser.read_binary()
            case _:
                self.skip_field(field_type)
                return None

    def skip_field(self, field_type: ThriftFieldType) -> None:
        logger.debug(
            'Skipping field %d of type %s',
            self.last_field_id,
            field_type.name,
        )
        self.parser.skip(field_type)

    def skip_struct(self) -> None:
        while True:
            field_type, _ = self.read_field_header()
            if field_type == ThriftFieldType.STOP:
                return
            self.parser.skip(field_type)


def _field_type(nibble: int) -> ThriftFieldType:
    try:
        return ThriftFieldType(nibble)
    except ValueError:
        raise ThriftParsingError(f'Unknown compact protocol type {nibble}') from None
