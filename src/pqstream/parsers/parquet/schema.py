"""
Schema element parsing.

The footer stores the schema as a flat list of SchemaElement structs in
depth-first order; `pqstream.schema.build_schema` turns that list into a tree.
"""

import logging

from pqstream.constants import DEFAULT_SCHEMA_NAME
from pqstream.enums import ConvertedType, Repetition, TimeUnit, Type
from pqstream.exceptions import ThriftParsingError
from pqstream.schema import (
    BsonTypeInfo,
    DateTypeInfo,
    DecimalTypeInfo,
    EnumTypeInfo,
    Float16TypeInfo,
    GeographyTypeInfo,
    GeometryTypeInfo,
    IntTypeInfo,
    JsonTypeInfo,
    ListTypeInfo,
    LogicalTypeInfoUnion,
    MapTypeInfo,
    MessageSchema,
    SchemaElement,
    StringTypeInfo,
    TimestampTypeInfo,
    TimeTypeInfo,
    UnknownTypeInfo,
    UuidTypeInfo,
    VariantTypeInfo,
    build_schema,
)

from ..thrift.enums import ThriftFieldType
from ..thrift.parser import ThriftStructParser
from .base import BaseParser
from .enums import (
    DecimalTypeFieldId,
    IntTypeFieldId,
    LogicalTypeFieldId,
    SchemaElementFieldId,
    TemporalTypeFieldId,
    TimeUnitFieldId,
)

logger = logging.getLogger(__name__)

_EMPTY_LOGICAL_TYPES: dict[LogicalTypeFieldId, type[LogicalTypeInfoUnion]] = {
    LogicalTypeFieldId.STRING: StringTypeInfo,
    LogicalTypeFieldId.MAP: MapTypeInfo,
    LogicalTypeFieldId.LIST: ListTypeInfo,
    LogicalTypeFieldId.ENUM: EnumTypeInfo,
    LogicalTypeFieldId.DATE: DateTypeInfo,
    LogicalTypeFieldId.UNKNOWN: UnknownTypeInfo,
    LogicalTypeFieldId.JSON: JsonTypeInfo,
    LogicalTypeFieldId.BSON: BsonTypeInfo,
    LogicalTypeFieldId.UUID: UuidTypeInfo,
    LogicalTypeFieldId.FLOAT16: Float16TypeInfo,
    LogicalTypeFieldId.VARIANT: VariantTypeInfo,
    LogicalTypeFieldId.GEOMETRY: GeometryTypeInfo,
    LogicalTypeFieldId.GEOGRAPHY: GeographyTypeInfo,
}


class SchemaParser(BaseParser):
    """Parses SchemaElement structs and their LogicalType annotations."""

    def read_schema_element(self) -> SchemaElement:
        struct_parser = ThriftStructParser(self.parser)
        element = SchemaElement(name=DEFAULT_SCHEMA_NAME)

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            if field_type == ThriftFieldType.STRUCT:
                if field_id == SchemaElementFieldId.LOGICAL_TYPE:
                    element.logical_type = self.read_logical_type()
                else:
                    struct_parser.skip_field(field_type)
                continue

            value = struct_parser.read_value(field_type)
            if value is None:
                continue

            match field_id:
                case SchemaElementFieldId.TYPE:
                    element.type = Type(value)
                case SchemaElementFieldId.TYPE_LENGTH:
                    element.type_length = value
                case SchemaElementFieldId.REPETITION_TYPE:
                    element.repetition = Repetition(value)
                case SchemaElementFieldId.NAME:
                    element.name = value.decode('utf-8')
                case SchemaElementFieldId.NUM_CHILDREN:
                    element.num_children = value
                case SchemaElementFieldId.CONVERTED_TYPE:
                    element.converted_type = ConvertedType(value)
                case SchemaElementFieldId.SCALE:
                    element.scale = value
                case SchemaElementFieldId.PRECISION:
                    element.precision = value
                case SchemaElementFieldId.FIELD_ID:
                    element.field_id = value

        logger.debug(
            'Read schema element: %s (type=%s, children=%s)',
            element.name,
            element.type,
            element.num_children,
        )
        return element

    def read_logical_type(self) -> LogicalTypeInfoUnion | None:
        """
        Read the LogicalType union. Exactly one member is set; members this
        parser does not know are skipped and yield None.
        """
        struct_parser = ThriftStructParser(self.parser)
        result: LogicalTypeInfoUnion | None = None

        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break

            if field_type != ThriftFieldType.STRUCT:
                struct_parser.skip_field(field_type)
                continue

            match field_id:
                case LogicalTypeFieldId.DECIMAL:
                    result = self._read_decimal_type()
                case LogicalTypeFieldId.TIME:
                    adjusted, unit = self._read_temporal_type()
                    result = TimeTypeInfo(is_adjusted_to_utc=adjusted, unit=unit)
                case LogicalTypeFieldId.TIMESTAMP:
                    adjusted, unit = self._read_temporal_type()
                    result = TimestampTypeInfo(is_adjusted_to_utc=adjusted, unit=unit)
                case LogicalTypeFieldId.INTEGER:
                    result = self._read_int_type()
                case _ if field_id in _EMPTY_LOGICAL_TYPES:
                    struct_parser.skip_field(field_type)
                    result = _EMPTY_LOGICAL_TYPES[LogicalTypeFieldId(field_id)]()
                case _:
                    logger.debug('Skipping unknown logical type member %d', field_id)
                    struct_parser.skip_field(field_type)

        return result

    def _read_decimal_type(self) -> DecimalTypeInfo:
        struct_parser = ThriftStructParser(self.parser)
        scale = 0
        precision = 0
        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break
            value = struct_parser.read_value(field_type)
            match field_id:
                case DecimalTypeFieldId.SCALE:
                    scale = value
                case DecimalTypeFieldId.PRECISION:
                    precision = value
        return DecimalTypeInfo(scale=scale, precision=precision)

    def _read_temporal_type(self) -> tuple[bool, TimeUnit]:
        struct_parser = ThriftStructParser(self.parser)
        adjusted = False
        unit = TimeUnit.MILLIS
        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break
            if field_type == ThriftFieldType.STRUCT:
                if field_id == TemporalTypeFieldId.UNIT:
                    unit = self._read_time_unit()
                else:
                    struct_parser.skip_field(field_type)
                continue
            value = struct_parser.read_value(field_type)
            if field_id == TemporalTypeFieldId.IS_ADJUSTED_TO_UTC:
                adjusted = bool(value)
        return adjusted, unit

    def _read_time_unit(self) -> TimeUnit:
        struct_parser = ThriftStructParser(self.parser)
        unit = TimeUnit.MILLIS
        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break
            struct_parser.skip_field(field_type)
            match field_id:
                case TimeUnitFieldId.MILLIS:
                    unit = TimeUnit.MILLIS
                case TimeUnitFieldId.MICROS:
                    unit = TimeUnit.MICROS
                case TimeUnitFieldId.NANOS:
                    unit = TimeUnit.NANOS
        return unit

    def _read_int_type(self) -> IntTypeInfo:
        struct_parser = ThriftStructParser(self.parser)
        bit_width = 32
        is_signed = True
        while True:
            field_type, field_id = struct_parser.read_field_header()
            if field_type == ThriftFieldType.STOP:
                break
            value = struct_parser.read_value(field_type)
            match field_id:
                case IntTypeFieldId.BIT_WIDTH:
                    bit_width = value
                case IntTypeFieldId.IS_SIGNED:
                    is_signed = bool(value)
        return IntTypeInfo(bit_width=bit_width, is_signed=is_signed)

    def parse_schema_field(self) -> MessageSchema:
        """Parse the flat element list and rebuild the tree."""
        elements = self.read_list(self.read_schema_element)
        logger.debug('Read %d schema elements, building tree', len(elements))
        try:
            return build_schema(elements)
        except ValueError as e:
            # pydantic validation errors while assembling the tree
            raise ThriftParsingError(f'Invalid schema: {e}') from e
