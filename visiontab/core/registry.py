from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import MappingContext

# Mapper signature:
# handler(obj: annotation model, ctx: MappingContext) -> dict of field name -> value
# Nested values are produced through ctx.map_one / ctx.map_many so that each
# level is checked against its own sub-schema.

MapperHandler = Callable[[Any, "MappingContext"], Dict[str, Any]]


class MapperRegistry:
    """
    Registry mapping annotation kinds (e.g. 'face', 'vertex', custom kinds) to mapper handlers.
    """
    def __init__(self) -> None:
        self._handlers: Dict[str, MapperHandler] = {}

    def register(self, kind: str, handler: MapperHandler) -> None:
        if not kind or not isinstance(kind, str):
            raise ValueError("kind must be a non-empty string.")

        if not callable(handler):
            raise ValueError(f"Mapper for '{kind}' must be callable.")

        self._handlers[kind] = handler

    def get_handler(self, kind: str) -> Optional[MapperHandler]:
        return self._handlers.get(kind)

    @property
    def kinds(self) -> Set[str]:
        return set(self._handlers.keys())


_global_registry: Optional[MapperRegistry] = None


def get_registry() -> MapperRegistry:
    global _global_registry
    if _global_registry is None:
        _global_registry = MapperRegistry()
        # Built-ins are registered on import
        from . import mappers  # noqa: F401

    return _global_registry


def register_mapper(kind: str, handler: MapperHandler) -> None:
    get_registry().register(kind, handler)
