import json

import pyarrow as pa
import pytest

from visiontab.core.exceptions import ConfigurationError
from visiontab.core.schema import Field, Schema, SchemaType


def _sample() -> Schema:
    point = Schema.record_of("point", [
        Field.of("x", Schema.of(SchemaType.INT)),
        Field.of("y", Schema.of(SchemaType.INT)),
    ])
    return Schema.record_of("row", [
        Field.of("name", Schema.nullable_of(Schema.of(SchemaType.STRING))),
        Field.of("kind", Schema.enum_with(["A", "B"])),
        Field.of("points", Schema.array_of(point)),
        Field.of("score", Schema.of(SchemaType.FLOAT)),
    ])


def test_json_form_is_avro_like():
    schema = _sample()
    node = json.loads(schema.to_json())

    assert node["type"] == "record"
    assert node["name"] == "row"
    assert node["fields"][0] == {"name": "name", "type": ["string", "null"]}
    assert node["fields"][1]["type"] == {"type": "enum", "symbols": ["A", "B"]}
    assert node["fields"][2]["type"]["items"]["name"] == "point"
    assert Schema.parse_json(schema.to_json()) == schema


def test_parse_accepts_null_first_union():
    schema = Schema.parse_json('{"type": "record", "name": "r", "fields": [{"name": "a", "type": ["null", "long"]}]}')
    a = schema.get_field("a").schema

    assert a.nullable
    assert a.type == SchemaType.LONG


@pytest.mark.parametrize("text", [
    "not json",
    '{"type": "record", "fields": []}',
    '{"type": "record", "name": "r", "fields": [{"name": "a"}]}',
    '{"type": "record", "name": "r", "fields": [{"name": "a", "type": "timestamp"}]}',
    '{"type": "record", "name": "r", "fields": [{"name": "a", "type": ["int", "string"]}]}',
    '{"type": "record", "name": "r", "fields": [{"name": "a", "type": "int"}, {"name": "a", "type": "int"}]}',
])
def test_parse_rejects_malformed_schemas(text):
    with pytest.raises(ConfigurationError) as exc:
        Schema.parse_json(text)

    assert exc.value.failures
    assert exc.value.failures[0].field == "schema"


def test_duplicate_field_names_are_rejected():
    with pytest.raises(ValueError):
        Schema.record_of("r", [Field.of("a", Schema.of(SchemaType.INT)), Field.of("a", Schema.of(SchemaType.LONG))])


def test_simple_constructor_rejects_complex_types():
    with pytest.raises(ValueError):
        Schema.of(SchemaType.RECORD)


def test_record_names_walks_nested_records_depth_first():
    assert _sample().record_names() == ["row", "point"]


def test_arrow_conversion():
    arrow = _sample().to_arrow_schema()

    assert arrow.field("name").nullable
    assert arrow.field("name").type == pa.string()
    assert arrow.field("kind").type == pa.string()
    assert arrow.field("score").type == pa.float32()
    points = arrow.field("points").type
    assert pa.types.is_list(points)
    assert points.value_type == pa.struct([pa.field("x", pa.int32(), nullable=False), pa.field("y", pa.int32(), nullable=False)])


def test_non_record_has_no_table_schema():
    with pytest.raises(ValueError):
        Schema.of(SchemaType.STRING).to_arrow_schema()


def test_display():
    assert Schema.nullable_of(Schema.of(SchemaType.STRING)).display() == "nullable string"
    assert Schema.array_of(_sample()).display() == "array<record<row>>"
