from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..rest.models import CropHintsParams, ImageContext, ProductSearchParams, WebDetectionParams
from .annotations import (
    AnnotateImageResponse,
    BoundingPoly,
    ProductSearchResults,
    SafeSearchAnnotation,
    TextAnnotation,
    WebDetection,
)
from .builders import NamingContext, build_schema
from .config import ExtractorConfig
from .schema import Schema

PayloadExtractor = Callable[[AnnotateImageResponse], Any]


def _colors(r: AnnotateImageResponse) -> Any:
    props = r.image_properties_annotation
    if props is None or props.dominant_colors is None:
        return []
    return props.dominant_colors.colors


def _crop_hints(r: AnnotateImageResponse) -> Any:
    return r.crop_hints_annotation.crop_hints if r.crop_hints_annotation is not None else []


class ImageFeature(Enum):
    """
    Features that can be extracted from an image.

    Each member carries its display name, the API feature type it requests,
    the annotation kind its payload maps through, whether the payload is a
    list, and how to pull the payload out of an ``AnnotateImageResponse``.
    Record-valued payloads fall back to an empty model when the response lacks
    them, so a missing detection never produces a missing field.
    """
    FACE = ("Face", "FACE_DETECTION", "face", True, lambda r: r.face_annotations)
    TEXT = ("Text", "TEXT_DETECTION", "text", True, lambda r: r.text_annotations)
    HANDWRITING = ("Handwriting", "DOCUMENT_TEXT_DETECTION", "full_text", False,
                   lambda r: r.full_text_annotation or TextAnnotation())
    CROP_HINTS = ("Crop Hints", "CROP_HINTS", "crop_hint", True, _crop_hints)
    IMAGE_PROPERTIES = ("Image Properties", "IMAGE_PROPERTIES", "color", True, _colors)
    LABELS = ("Labels", "LABEL_DETECTION", "label", True, lambda r: r.label_annotations)
    LANDMARKS = ("Landmarks", "LANDMARK_DETECTION", "landmark", True, lambda r: r.landmark_annotations)
    LOGOS = ("Logos", "LOGO_DETECTION", "logo", True, lambda r: r.logo_annotations)
    OBJECT_LOCALIZATION = ("Object Localization", "OBJECT_LOCALIZATION", "localized_object", True,
                           lambda r: r.localized_object_annotations)
    EXPLICIT_CONTENT = ("Explicit Content", "SAFE_SEARCH_DETECTION", "safe_search", False,
                        lambda r: r.safe_search_annotation or SafeSearchAnnotation())
    WEB_DETECTION = ("Web Detection", "WEB_DETECTION", "web_detection", False,
                     lambda r: r.web_detection or WebDetection())
    MULTIPLE_OBJECTS = ("Multiple Objects", "PRODUCT_SEARCH", "product_search", False,
                        lambda r: r.product_search_results or ProductSearchResults())

    def __init__(self, display_name: str, feature_type: str, kind: str, is_list: bool, extract: PayloadExtractor):
        self.display_name = display_name
        self.feature_type = feature_type
        self.kind = kind
        self.is_list = is_list
        self._extract = extract

    @classmethod
    def from_display_name(cls, display_name: Optional[str]) -> Optional["ImageFeature"]:
        return _BY_DISPLAY_NAME.get(display_name) if display_name else None

    def build_schema(self, naming: NamingContext) -> Schema:
        schema = build_schema(self.kind, naming)
        return Schema.array_of(schema) if self.is_list else schema

    def extract(self, response: AnnotateImageResponse) -> Any:
        return self._extract(response)

    def image_context(self, config: ExtractorConfig) -> Optional[ImageContext]:
        """Feature-specific request parameters, or None when the feature takes none."""
        if self in (ImageFeature.TEXT, ImageFeature.HANDWRITING):
            hints = config.language_hints_list()
            return ImageContext(language_hints=hints) if hints else None

        if self is ImageFeature.CROP_HINTS:
            ratios = config.aspect_ratios_list()
            return ImageContext(crop_hints_params=CropHintsParams(aspect_ratios=ratios)) if ratios else None

        if self is ImageFeature.WEB_DETECTION:
            return ImageContext(web_detection_params=WebDetectionParams(include_geo_results=config.include_geo_results))

        if self is ImageFeature.MULTIPLE_OBJECTS and config.product_set:
            vertices = config.bounding_polygon_vertices()
            params = ProductSearchParams(
                product_set=config.product_set,
                product_categories=config.product_categories_list(),
                filter=config.filter or None,
                bounding_poly=BoundingPoly(vertices=vertices) if vertices else None,
            )
            return ImageContext(product_search_params=params)

        return None


_BY_DISPLAY_NAME: Dict[str, ImageFeature] = {f.display_name: f for f in ImageFeature}
