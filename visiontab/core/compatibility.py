from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import ConfigFailure, ConfigurationError
from .schema import Schema, SchemaType


@dataclass
class ValidationResult:
    failures: List[ConfigFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise ConfigurationError(self.failures)


def validate_schema(declared: Optional[Schema], derived: Schema, *, config_field: str = "schema") -> ValidationResult:
    """
    Check that a caller-declared output schema can hold every record the derived schema describes.

    Every field of ``derived`` must exist in ``declared`` with the same type, recursively.
    Fields that only ``declared`` has are allowed. Nullability is not compared.
    An enum fits a string field and an enum field with at least the same symbols.
    All incompatibilities are collected, not just the first one.
    """
    result = ValidationResult()
    if declared is None:
        return result

    def err(msg: str, path: str) -> None:
        result.failures.append(ConfigFailure(config_field, f"{path}: {msg}"))

    for name, count in Counter(declared.record_names()).items():
        if count > 1:
            err(f"record name '{name}' is used {count} times", "$")

    _compare(declared, derived, "$", err)
    return result


def _compare(declared: Schema, derived: Schema, path: str, err) -> None:
    d = declared.non_nullable()
    g = derived.non_nullable()

    if g.type == SchemaType.ENUM:
        if d.type == SchemaType.STRING:
            return
        if d.type != SchemaType.ENUM:
            err(f"expected enum or string, declared {d.display()}", path)
            return
        missing = [s for s in g.symbols if s not in d.symbols]
        if missing:
            err(f"enum is missing symbols {missing}", path)
        return

    if d.type != g.type:
        err(f"expected {g.display()}, declared {d.display()}", path)
        return

    if g.type == SchemaType.RECORD:
        for f in g.fields:
            target = d.get_field(f.name)
            if target is None:
                err(f"field '{f.name}' is missing", path)
                continue
            _compare(target.schema, f.schema, f"{path}.{f.name}", err)

    elif g.type == SchemaType.ARRAY:
        _compare(d.items, g.items, f"{path}[]", err)
