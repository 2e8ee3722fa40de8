import datetime

import pytest

from pqstream.converters import (
    ConverterState,
    ConverterTree,
    GroupConverter,
    PrimitiveConverter,
)
from pqstream.enums import ConvertedType, Repetition, Type
from pqstream.exceptions import ConverterStateError
from pqstream.schema import MessageSchema, SchemaElement, build_schema


@pytest.fixture
def schema() -> MessageSchema:
    return build_schema(
        [
            SchemaElement('event', num_children=2),
            SchemaElement('id', type=Type.INT64, repetition=Repetition.REQUIRED),
            SchemaElement('inner', repetition=Repetition.OPTIONAL, num_children=2),
            SchemaElement(
                'day',
                type=Type.INT32,
                repetition=Repetition.OPTIONAL,
                converted_type=ConvertedType.DATE,
            ),
            SchemaElement(
                'label',
                type=Type.BYTE_ARRAY,
                repetition=Repetition.OPTIONAL,
                converted_type=ConvertedType.UTF8,
            ),
        ],
    )


@pytest.fixture
def tree(schema: MessageSchema) -> ConverterTree:
    return ConverterTree.build(schema)


def emit(tree: ConverterTree, record_id: int, day: int | None) -> None:
    id_node, inner = tree.root.children
    day_node = inner.children[0]
    tree.start(tree.root)
    tree.add_value(id_node, record_id)
    tree.start(inner)
    if day is not None:
        tree.add_value(day_node, day)
    tree.end(inner)
    tree.end(tree.root)


def test_tree_mirrors_schema(tree: ConverterTree) -> None:
    nodes = list(tree.walk())
    assert [node.name for node in nodes] == ['event', 'id', 'inner', 'day', 'label']
    assert isinstance(nodes[0], GroupConverter)
    assert nodes[0].is_root
    assert isinstance(nodes[1], PrimitiveConverter)
    assert isinstance(nodes[2], GroupConverter)
    assert nodes[3].parent is nodes[2]
    assert tree.primitive(2).name == 'label'


def test_one_record(tree: ConverterTree) -> None:
    emit(tree, 5, 1)
    assert tree.current_record == {
        'id': 5,
        'inner': {'day': datetime.date(1970, 1, 2)},
    }


def test_absent_values_leave_keys_absent(tree: ConverterTree) -> None:
    emit(tree, 5, None)
    assert tree.current_record == {'id': 5, 'inner': {}}


def test_records_are_independent(tree: ConverterTree) -> None:
    emit(tree, 1, 0)
    first = tree.current_record
    emit(tree, 2, None)
    second = tree.current_record

    assert first == {'id': 1, 'inner': {'day': datetime.date(1970, 1, 1)}}
    assert second == {'id': 2, 'inner': {}}
    assert first is not second


def test_start_clears_previous_values(tree: ConverterTree) -> None:
    inner = tree.root.children[1]
    label = inner.children[1]
    tree.start(tree.root)
    tree.start(inner)
    tree.add_value(label, b'first')
    tree.end(inner)
    tree.start(inner)
    tree.end(inner)
    tree.end(tree.root)
    assert tree.current_record == {'inner': {}}


def test_repeated_value_overwrites(tree: ConverterTree) -> None:
    id_node = tree.root.children[0]
    tree.start(tree.root)
    tree.add_value(id_node, 1)
    tree.add_value(id_node, 2)
    tree.end(tree.root)
    assert tree.current_record == {'id': 2}


def test_root_start_clears_current_record(tree: ConverterTree) -> None:
    emit(tree, 1, None)
    tree.start(tree.root)
    assert tree.current_record is None


def test_add_value_outside_group_fails(tree: ConverterTree) -> None:
    with pytest.raises(ConverterStateError):
        tree.add_value(tree.root.children[0], 1)


def test_end_without_start_fails(tree: ConverterTree) -> None:
    with pytest.raises(ConverterStateError):
        tree.end(tree.root)


def test_double_start_fails(tree: ConverterTree) -> None:
    tree.start(tree.root)
    with pytest.raises(ConverterStateError):
        tree.start(tree.root)


def test_nested_start_requires_open_parent(tree: ConverterTree) -> None:
    with pytest.raises(ConverterStateError):
        tree.start(tree.root.children[1])


def test_primitive_events_fail(tree: ConverterTree) -> None:
    id_node = tree.root.children[0]
    tree.start(tree.root)
    with pytest.raises(ConverterStateError):
        tree.start(id_node)
    with pytest.raises(ConverterStateError):
        tree.end(id_node)
    with pytest.raises(ConverterStateError):
        tree.add_value(tree.root.children[1], 1)


def test_reset(tree: ConverterTree) -> None:
    inner = tree.root.children[1]
    tree.start(tree.root)
    tree.start(inner)
    tree.reset()

    assert tree.current_record is None
    assert all(
        node.state == ConverterState.IDLE
        for node in tree.walk()
        if isinstance(node, GroupConverter)
    )
    emit(tree, 3, None)
    assert tree.current_record == {'id': 3, 'inner': {}}
