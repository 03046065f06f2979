from __future__ import annotations
import json
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union

from ..validation import validate_config
from ..config import DocumentExtractorConfig, ExtractorConfig
from ..driver import DocumentExtractorTransform, ExtractorTransform
from ..features import ImageFeature
from ..schema import Schema


class ExtractorConfigBuilder:
    """
    Fluent builder for extractor configurations.

    Example:
        >>> config = (ExtractorConfigBuilder(ImageFeature.LABELS)
        ...           .from_path("image_uri")
        ...           .output("labels")
        ...           .build())
    """
    __slots__ = ("_values", "_document")

    def __init__(self, feature: Union[ImageFeature, str]) -> None:
        name = feature.display_name if isinstance(feature, ImageFeature) else feature
        if not name or not isinstance(name, str):
            raise ValueError("feature requires an ImageFeature or a non-empty display name.")
        self._values: Dict[str, Any] = {"feature": name}
        self._document = False

    def from_path(self, field: str) -> "ExtractorConfigBuilder":
        if not field or not isinstance(field, str):
            raise ValueError("from_path(field=...) requires a non-empty string.")
        self._values["path_field"] = field
        self._values.pop("content_field", None)
        return self

    def from_content(self, field: str) -> "ExtractorConfigBuilder":
        if not field or not isinstance(field, str):
            raise ValueError("from_content(field=...) requires a non-empty string.")
        self._values["content_field"] = field
        self._values.pop("path_field", None)
        return self

    def output(self, field: str) -> "ExtractorConfigBuilder":
        self._values["output_field"] = field
        return self

    def with_schema(self, schema: Union[Schema, str]) -> "ExtractorConfigBuilder":
        self._values["schema"] = schema.to_json() if isinstance(schema, Schema) else schema
        return self

    def language_hints(self, *languages: str) -> "ExtractorConfigBuilder":
        self._values["language_hints"] = ",".join(languages)
        return self

    def aspect_ratios(self, *ratios: float) -> "ExtractorConfigBuilder":
        self._values["aspect_ratios"] = ",".join(str(r) for r in ratios)
        return self

    def include_geo_results(self, enabled: bool = True) -> "ExtractorConfigBuilder":
        self._values["include_geo_results"] = bool(enabled)
        return self

    def product_search(
        self,
        product_set: str,
        *,
        categories: Iterable[str] = (),
        bounding_polygon: Optional[Sequence[Dict[str, int]]] = None,
        filter: Optional[str] = None,
    ) -> "ExtractorConfigBuilder":
        self._values["product_set"] = product_set
        self._values["product_categories"] = ",".join(categories) or None
        self._values["bounding_polygon"] = json.dumps(list(bounding_polygon)) if bounding_polygon else None
        self._values["filter"] = filter
        return self

    def document(self, mime_type: str = "application/pdf", pages: Iterable[int] = ()) -> "ExtractorConfigBuilder":
        self._document = True
        self._values["mime_type"] = mime_type
        self._values["pages"] = ",".join(str(p) for p in pages) or None
        return self

    def logger(self, logger: logging.Logger) -> "ExtractorConfigBuilder":
        self._values["logger"] = logger
        return self

    def metrics(
        self,
        increment: Optional[Callable[[str, int], None]] = None,
        observe: Optional[Callable[[str, float], None]] = None,
    ) -> "ExtractorConfigBuilder":
        self._values["metrics_increment"] = increment
        self._values["metrics_observe"] = observe
        return self

    def build(self) -> ExtractorConfig:
        config_cls = DocumentExtractorConfig if self._document else ExtractorConfig
        config = config_cls(**self._values)
        validate_config(config, raise_on_error=True)
        return config

    def to_transform(self) -> ExtractorTransform:
        config = self.build()
        if isinstance(config, DocumentExtractorConfig):
            return DocumentExtractorTransform(config)
        return ExtractorTransform(config)
