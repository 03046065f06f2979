from __future__ import annotations
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .annotations import AnnotateFileResponse, AnnotateImageResponse
from .context import MappingContext
from .exceptions import TransformationError
from .features import ImageFeature
from .mappers import PageResponse
from .registry import MapperRegistry, get_registry
from .schema import Schema, SchemaType
from .types import Record

M = TypeVar("M", bound=BaseModel)


class ImageAnnotationTransformer:
    """
    Turns one image annotation response into an output record.

    The output record holds every field of ``output_schema``: the field named
    ``output_field`` receives the mapped feature, all other fields are copied
    from the input record (None when the input lacks them).

    Example:
        >>> t = ImageAnnotationTransformer(ImageFeature.LABELS, "labels", schema)
        >>> t.transform({"path": "gs://b/cat.jpg"}, response)
        {'path': 'gs://b/cat.jpg', 'labels': [{'mid': '/m/01yrx', ...}]}
    """
    __slots__ = ("feature", "output_field", "output_schema", "_registry")

    def __init__(
        self,
        feature: ImageFeature,
        output_field: str,
        output_schema: Schema,
        *,
        registry: Optional[MapperRegistry] = None,
    ) -> None:
        if output_schema.type != SchemaType.RECORD:
            raise ValueError("Output schema must be a record schema.")

        if output_schema.get_field(output_field) is None:
            raise ValueError(f"Output schema has no field '{output_field}'.")

        self.feature = feature
        self.output_field = output_field
        self.output_schema = output_schema
        self._registry = registry or get_registry()

    def transform(self, input_record: Record, response: Any) -> Record:
        response = coerce_response(response, AnnotateImageResponse)
        ctx = MappingContext(self.output_schema, self._registry, self.feature)
        return self._assemble(input_record, ctx.map_feature(self.feature, response, self.output_field))

    def _assemble(self, input_record: Record, value: Any) -> Record:
        out: Dict[str, Any] = {}
        for f in self.output_schema.fields:
            out[f.name] = value if f.name == self.output_field else input_record.get(f.name)

        return out


class FileAnnotationTransformer(ImageAnnotationTransformer):
    """
    Turns one document (PDF/TIFF/GIF) annotation response into an output record.

    The output field holds one ``{page, feature}`` record per page response,
    numbered from 1 in response order.
    """
    __slots__ = ()

    def transform(self, input_record: Record, response: Any) -> Record:
        response = coerce_response(response, AnnotateFileResponse)
        ctx = MappingContext(self.output_schema, self._registry, self.feature)
        pages = [PageResponse(i, r) for i, r in enumerate(response.responses, start=1)]
        return self._assemble(input_record, ctx.map_many("page", pages, self.output_field))


def coerce_response(response: Any, model: Type[M]) -> M:
    """Accept a parsed response model or its JSON form (a dict)."""
    if isinstance(response, model):
        return response

    if isinstance(response, dict):
        try:
            return model.model_validate(response)
        except ValidationError as e:
            raise TransformationError(f"Invalid {model.__name__}: {e}") from e

    raise TransformationError(f"Expected {model.__name__}, got {type(response).__name__}")
