from __future__ import annotations
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from .exceptions import TransformationError
from .schema import Schema, SchemaType

if TYPE_CHECKING:
    from .features import ImageFeature
    from .registry import MapperRegistry


class MappingContext:
    """
    Mapping context: the sub-schema being filled, the mapper registry and the field path used in errors.
    """
    __slots__ = ("schema", "registry", "feature", "path")

    def __init__(
        self,
        schema: Schema,
        registry: "MapperRegistry",
        feature: Optional["ImageFeature"] = None,
        path: str = "$",
    ) -> None:
        self.schema = schema
        self.registry = registry
        self.feature = feature
        self.path = path

    def has_field(self, name: str) -> bool:
        return self.schema.non_nullable().get_field(name) is not None

    def field(self, name: str) -> "MappingContext":
        record = self.schema.non_nullable()
        if record.type != SchemaType.RECORD:
            raise TransformationError(f"{self.path}: expected a record schema, found {record.display()}")

        f = record.get_field(name)
        if f is None:
            raise TransformationError(f"{self.path}: schema has no field '{name}'")

        return MappingContext(f.schema, self.registry, self.feature, f"{self.path}.{name}")

    def map_record(self, kind: str, obj: Any) -> Dict[str, Any]:
        """Map one annotation object with the mapper registered for ``kind`` and check it against this schema."""
        record = self.schema.non_nullable()
        if record.type != SchemaType.RECORD:
            raise TransformationError(f"{self.path}: '{kind}' maps to a record, schema is {record.display()}")

        handler = self.registry.get_handler(kind)
        if handler is None:
            raise TransformationError(f"{self.path}: no mapper registered for '{kind}'")

        return conform(handler(obj, self), record, self.path)

    def map_one(self, kind: str, obj: Any, field: str) -> Optional[Dict[str, Any]]:
        """Map a nested record field. Fields the schema does not declare are skipped."""
        if not self.has_field(field):
            return None

        child = self.field(field)
        if obj is None:
            if not child.schema.nullable:
                raise TransformationError(f"{child.path}: missing value for non-nullable '{kind}'")
            return None

        return child.map_record(kind, obj)

    def map_many(self, kind: str, items: Optional[Sequence[Any]], field: str) -> Optional[List[Dict[str, Any]]]:
        if not self.has_field(field):
            return None

        child = self.field(field)
        array = child.schema.non_nullable()
        if array.type != SchemaType.ARRAY:
            raise TransformationError(f"{child.path}: '{kind}' list maps to an array, schema is {array.display()}")

        if items is None:
            return []
        if not isinstance(items, (list, tuple)):
            raise TransformationError(f"{child.path}: expected a list of '{kind}', got {type(items).__name__}")

        out = []
        for i, item in enumerate(items):
            item_ctx = MappingContext(array.items, self.registry, self.feature, f"{child.path}[{i}]")
            out.append(item_ctx.map_record(kind, item))

        return out

    def map_feature(self, feature: "ImageFeature", response: Any, field: str) -> Any:
        payload = feature.extract(response)
        if feature.is_list:
            return self.map_many(feature.kind, payload, field)

        return self.map_one(feature.kind, payload, field)


def conform(raw: Any, schema: Schema, path: str) -> Dict[str, Any]:
    """
    Build a record holding exactly the fields of ``schema``, in schema order.

    Fields the mapper did not produce are filled with None.
    """
    if not isinstance(raw, dict):
        raise TransformationError(f"{path}: expected a record, got {type(raw).__name__}")

    return {f.name: check_value(raw.get(f.name), f.schema, f"{path}.{f.name}") for f in schema.fields}


def check_value(value: Any, schema: Schema, path: str) -> Any:
    if value is None:
        return None

    t = schema.type
    if t == SchemaType.RECORD:
        return conform(value, schema, path)

    if t == SchemaType.ARRAY:
        if not isinstance(value, (list, tuple)):
            raise _mismatch(path, schema, value)
        return [check_value(v, schema.items, f"{path}[{i}]") for i, v in enumerate(value)]

    if isinstance(value, Enum) and t in (SchemaType.ENUM, SchemaType.STRING):
        value = value.name

    if t == SchemaType.ENUM:
        if not isinstance(value, str) or value not in schema.symbols:
            raise TransformationError(f"{path}: '{value}' is not one of the enum symbols")
        return value

    if t == SchemaType.STRING:
        if not isinstance(value, str):
            raise _mismatch(path, schema, value)
        return value

    if t in (SchemaType.INT, SchemaType.LONG):
        if isinstance(value, bool) or not isinstance(value, int):
            raise _mismatch(path, schema, value)
        return value

    if t in (SchemaType.FLOAT, SchemaType.DOUBLE):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _mismatch(path, schema, value)
        return value

    if t == SchemaType.BOOLEAN:
        if not isinstance(value, bool):
            raise _mismatch(path, schema, value)
        return value

    if t == SchemaType.BYTES:
        if not isinstance(value, (bytes, bytearray)):
            raise _mismatch(path, schema, value)
        return bytes(value)

    raise TransformationError(f"{path}: unsupported schema type '{t.value}'")


def _mismatch(path: str, schema: Schema, value: Any) -> TransformationError:
    return TransformationError(f"{path}: expected {schema.display()}, got {type(value).__name__}")
