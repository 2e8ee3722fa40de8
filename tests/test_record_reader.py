import pytest

from pqstream.converters import ConverterTree
from pqstream.enums import ConvertedType, Repetition, Type
from pqstream.exceptions import ParquetDataError
from pqstream.readers.column_chunk import ColumnData
from pqstream.readers.record_reader import RecordReader
from pqstream.schema import MessageSchema, SchemaElement, build_schema


def reader_for(schema: MessageSchema, columns: list[ColumnData]) -> RecordReader:
    return RecordReader(columns, schema, ConverterTree.build(schema))


def read_all(reader: RecordReader) -> list[dict]:
    records = []
    while (record := reader.read()) is not None:
        records.append(record)
    return records


@pytest.fixture
def repeated_schema() -> MessageSchema:
    return build_schema(
        [
            SchemaElement('root', num_children=1),
            SchemaElement('values', type=Type.INT32, repetition=Repetition.REPEATED),
        ],
    )


@pytest.fixture
def list_schema() -> MessageSchema:
    return build_schema(
        [
            SchemaElement('root', num_children=2),
            SchemaElement('id', type=Type.INT64, repetition=Repetition.REQUIRED),
            SchemaElement(
                'tags',
                repetition=Repetition.OPTIONAL,
                num_children=1,
                converted_type=ConvertedType.LIST,
            ),
            SchemaElement('list', repetition=Repetition.REPEATED, num_children=1),
            SchemaElement(
                'element',
                type=Type.BYTE_ARRAY,
                repetition=Repetition.OPTIONAL,
                converted_type=ConvertedType.UTF8,
            ),
        ],
    )


def test_levels_of_list_schema(list_schema: MessageSchema) -> None:
    element = list_schema.find('tags.list.element')
    assert element.definition_level == 3
    assert element.repetition_level == 1
    assert list_schema.find('id').definition_level == 0


def test_repeated_primitive_keeps_last_value(repeated_schema: MessageSchema) -> None:
    column = ColumnData(
        column_index=0,
        path=('values',),
        repetition_levels=[0, 1, 0, 0],
        definition_levels=[1, 1, 0, 1],
        values=[1, 2, None, 3],
    )
    reader = reader_for(repeated_schema, [column])
    assert read_all(reader) == [{'values': 2}, {}, {'values': 3}]


def test_list_rows(list_schema: MessageSchema) -> None:
    ids = ColumnData(
        column_index=0,
        path=('id',),
        repetition_levels=[0, 0, 0, 0],
        definition_levels=[0, 0, 0, 0],
        values=[1, 2, 3, 4],
    )
    # [a, b], [], None, [None]
    elements = ColumnData(
        column_index=1,
        path=('tags', 'list', 'element'),
        repetition_levels=[0, 1, 0, 0, 0],
        definition_levels=[3, 3, 1, 0, 2],
        values=[b'a', b'b', None, None, None],
    )
    reader = reader_for(list_schema, [ids, elements])
    assert read_all(reader) == [
        {'id': 1, 'tags': {'list': {'element': 'b'}}},
        {'id': 2, 'tags': {}},
        {'id': 3},
        {'id': 4, 'tags': {'list': {}}},
    ]


def test_exhausted_reader_keeps_returning_none(
    repeated_schema: MessageSchema,
) -> None:
    column = ColumnData(0, ('values',), [0], [1], [9])
    reader = reader_for(repeated_schema, [column])
    assert reader.read() == {'values': 9}
    assert reader.read() is None
    assert reader.read() is None


def test_column_count_mismatch(list_schema: MessageSchema) -> None:
    column = ColumnData(0, ('id',), [0], [0], [1])
    with pytest.raises(ParquetDataError):
        reader_for(list_schema, [column])


def test_ragged_columns(list_schema: MessageSchema) -> None:
    ids = ColumnData(0, ('id',), [0, 0], [0, 0], [1, 2])
    elements = ColumnData(1, ('tags', 'list', 'element'), [0], [3], [b'a'])
    reader = reader_for(list_schema, [ids, elements])
    assert reader.read() == {'id': 1, 'tags': {'list': {'element': 'a'}}}
    with pytest.raises(ParquetDataError):
        reader.read()
