from __future__ import annotations
import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pyarrow as pa

from .exceptions import ConfigFailure, ConfigurationError


class SchemaType(str, Enum):
    STRING = "string"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    BYTES = "bytes"
    ENUM = "enum"
    RECORD = "record"
    ARRAY = "array"


SIMPLE_TYPES = frozenset({
    SchemaType.STRING, SchemaType.INT, SchemaType.LONG, SchemaType.FLOAT,
    SchemaType.DOUBLE, SchemaType.BOOLEAN, SchemaType.BYTES,
})

_ARROW_TYPES = {
    SchemaType.STRING: pa.string(),
    SchemaType.INT: pa.int32(),
    SchemaType.LONG: pa.int64(),
    SchemaType.FLOAT: pa.float32(),
    SchemaType.DOUBLE: pa.float64(),
    SchemaType.BOOLEAN: pa.bool_(),
    SchemaType.BYTES: pa.binary(),
    SchemaType.ENUM: pa.string(),
}


@dataclass(frozen=True)
class Field:
    name: str
    schema: "Schema"

    @staticmethod
    def of(name: str, schema: "Schema") -> "Field":
        if not name or not isinstance(name, str):
            raise ValueError("Field name must be a non-empty string.")
        return Field(name, schema)


@dataclass(frozen=True)
class Schema:
    """
    Immutable, named, typed schema for tabular records.

    Records carry a name so that one root schema can be checked for colliding
    sub-record names. Nullability is a flag on the schema rather than a union.
    """
    type: SchemaType
    nullable: bool = False
    name: Optional[str] = None
    fields: Tuple[Field, ...] = ()
    items: Optional["Schema"] = None
    symbols: Tuple[str, ...] = ()
    _index: Dict[str, Field] = field(default_factory=dict, init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        index = {f.name: f for f in self.fields}
        if len(index) != len(self.fields):
            raise ValueError(f"Record '{self.name}' has duplicate field names.")
        object.__setattr__(self, "_index", index)

    @staticmethod
    def of(type_: SchemaType) -> "Schema":
        if type_ not in SIMPLE_TYPES:
            raise ValueError(f"'{type_.value}' is not a simple type.")
        return Schema(type_)

    @staticmethod
    def record_of(name: str, fields: Iterable[Field]) -> "Schema":
        if not name:
            raise ValueError("Record schema requires a name.")
        return Schema(SchemaType.RECORD, name=name, fields=tuple(fields))

    @staticmethod
    def array_of(items: "Schema") -> "Schema":
        return Schema(SchemaType.ARRAY, items=items)

    @staticmethod
    def enum_with(symbols: Iterable[str]) -> "Schema":
        return Schema(SchemaType.ENUM, symbols=tuple(symbols))

    @staticmethod
    def nullable_of(schema: "Schema") -> "Schema":
        return replace(schema, nullable=True)

    def non_nullable(self) -> "Schema":
        return replace(self, nullable=False) if self.nullable else self

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[Field]:
        return self._index.get(name)

    def record_names(self) -> List[str]:
        """All record names in depth-first order, duplicates included."""
        out: List[str] = []
        if self.type == SchemaType.RECORD:
            out.append(self.name)
            for f in self.fields:
                out.extend(f.schema.record_names())
        elif self.type == SchemaType.ARRAY and self.items is not None:
            out.extend(self.items.record_names())
        return out

    def display(self) -> str:
        if self.type == SchemaType.RECORD:
            text = f"record<{self.name}>"
        elif self.type == SchemaType.ARRAY:
            text = f"array<{self.items.display() if self.items else '?'}>"
        else:
            text = self.type.value
        return f"nullable {text}" if self.nullable else text

    # Avro-style JSON

    def to_dict(self) -> Any:
        if self.type == SchemaType.RECORD:
            body: Any = {
                "type": "record",
                "name": self.name,
                "fields": [{"name": f.name, "type": f.schema.to_dict()} for f in self.fields],
            }
        elif self.type == SchemaType.ARRAY:
            body = {"type": "array", "items": self.items.to_dict()}
        elif self.type == SchemaType.ENUM:
            body = {"type": "enum", "symbols": list(self.symbols)}
        else:
            body = self.type.value
        return [body, "null"] if self.nullable else body

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, node: Any, *, path: str = "$") -> "Schema":
        if isinstance(node, list):
            non_null = [n for n in node if n != "null"]
            if len(non_null) != 1 or len(node) - len(non_null) > 1:
                raise _parse_error(path, "only unions of a single type with 'null' are supported")
            inner = cls.from_dict(non_null[0], path=path)
            return cls.nullable_of(inner) if len(non_null) != len(node) else inner

        if isinstance(node, str):
            try:
                type_ = SchemaType(node)
            except ValueError:
                raise _parse_error(path, f"unknown type '{node}'") from None
            if type_ not in SIMPLE_TYPES:
                raise _parse_error(path, f"type '{node}' must be declared as an object")
            return cls.of(type_)

        if not isinstance(node, dict):
            raise _parse_error(path, "schema node must be a string, list or object")

        kind = node.get("type")
        if isinstance(kind, (list, dict)):
            return cls.from_dict(kind, path=path)

        if kind == "record":
            name = node.get("name")
            raw_fields = node.get("fields")
            if not isinstance(name, str) or not name:
                raise _parse_error(path, "record requires a non-empty 'name'")
            if not isinstance(raw_fields, list):
                raise _parse_error(path, "record requires a 'fields' list")
            fields: List[Field] = []
            seen = set()
            for i, raw in enumerate(raw_fields):
                if not isinstance(raw, dict) or not isinstance(raw.get("name"), str) or not raw.get("name"):
                    raise _parse_error(f"{path}.fields[{i}]", "field requires a non-empty 'name'")
                if raw["name"] in seen:
                    raise _parse_error(f"{path}.{raw['name']}", "duplicate field name")
                seen.add(raw["name"])
                if "type" not in raw:
                    raise _parse_error(f"{path}.{raw['name']}", "field requires a 'type'")
                fields.append(Field.of(raw["name"], cls.from_dict(raw["type"], path=f"{path}.{raw['name']}")))
            return cls.record_of(name, fields)

        if kind == "array":
            if "items" not in node:
                raise _parse_error(path, "array requires 'items'")
            return cls.array_of(cls.from_dict(node["items"], path=f"{path}[]"))

        if kind == "enum":
            symbols = node.get("symbols")
            if not isinstance(symbols, list) or not all(isinstance(s, str) for s in symbols):
                raise _parse_error(path, "enum requires a list of string 'symbols'")
            return cls.enum_with(symbols)

        if isinstance(kind, str):
            return cls.from_dict(kind, path=path)

        raise _parse_error(path, "schema object requires a 'type'")

    @classmethod
    def parse_json(cls, text: str) -> "Schema":
        try:
            node = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ConfigurationError([ConfigFailure("schema", f"Invalid schema JSON: {e}")]) from e
        return cls.from_dict(node)

    # pyarrow

    def to_arrow(self) -> pa.DataType:
        if self.type == SchemaType.RECORD:
            return pa.struct([f.schema.to_arrow_field(f.name) for f in self.fields])
        if self.type == SchemaType.ARRAY:
            return pa.list_(self.items.to_arrow_field("item"))
        return _ARROW_TYPES[self.type]

    def to_arrow_field(self, name: str) -> pa.Field:
        return pa.field(name, self.to_arrow(), nullable=self.nullable)

    def to_arrow_schema(self) -> pa.Schema:
        if self.type != SchemaType.RECORD:
            raise ValueError("Only record schemas can be converted to a table schema.")
        return pa.schema([f.schema.to_arrow_field(f.name) for f in self.fields])


def _parse_error(path: str, msg: str) -> ConfigurationError:
    return ConfigurationError([ConfigFailure("schema", f"{path}: {msg}")])
