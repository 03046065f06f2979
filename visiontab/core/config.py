from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

DOCUMENT_MIME_TYPES = ("application/pdf", "image/tiff", "image/gif")
PRODUCT_CATEGORIES = ("homegoods-v2", "apparel-v2", "toys-v2", "packagedgoods-v1", "general-v1")
MAX_DOCUMENT_PAGES = 5


@dataclass
class ExtractorConfig:
    """
    Configuration of an image extractor stage.

    Exactly one of ``path_field`` (a column holding an image URI) and
    ``content_field`` (a column holding the image bytes) must be set.
    List-valued options are comma separated strings, as they come from a
    pipeline configuration.
    """
    feature: str
    output_field: str = "extracted"
    path_field: Optional[str] = None
    content_field: Optional[str] = None
    schema: Optional[str] = None

    language_hints: Optional[str] = None
    aspect_ratios: Optional[str] = None
    include_geo_results: bool = False

    product_set: Optional[str] = None
    product_categories: Optional[str] = None
    bounding_polygon: Optional[str] = None
    filter: Optional[str] = None

    logger: Optional[logging.Logger] = None
    metrics_increment: Optional[Callable[[str, int], None]] = None
    metrics_observe: Optional[Callable[[str, float], None]] = None

    def language_hints_list(self) -> List[str]:
        return _split(self.language_hints)

    def aspect_ratios_list(self) -> List[float]:
        return [float(v) for v in _split(self.aspect_ratios)]

    def product_categories_list(self) -> List[str]:
        return _split(self.product_categories)

    def bounding_polygon_vertices(self) -> List[Dict[str, Any]]:
        if not self.bounding_polygon:
            return []
        vertices = json.loads(self.bounding_polygon)
        if not isinstance(vertices, list) or not all(isinstance(v, dict) for v in vertices):
            raise ValueError("bounding polygon must be a JSON list of {\"x\": .., \"y\": ..} objects")
        return vertices


@dataclass
class DocumentExtractorConfig(ExtractorConfig):
    """Extractor for small PDF, TIFF or GIF documents; ``pages`` selects up to five 1-based pages."""
    mime_type: str = "application/pdf"
    pages: Optional[str] = None

    def pages_list(self) -> List[int]:
        return [int(v) for v in _split(self.pages)]


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
