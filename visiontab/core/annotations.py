"""
Response side of the Cloud Vision annotate API.

The models mirror the REST JSON (camelCase on the wire, snake_case in Python)
and are frozen: a response is parsed once and never mutated. Enumerations are
stored as ``IntEnum`` members and accept either the symbolic name or the
integer code the API may send.
"""
from __future__ import annotations
from enum import IntEnum
from typing import Annotated, Any, Callable, List, Optional, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Likelihood(IntEnum):
    UNKNOWN = 0
    VERY_UNLIKELY = 1
    UNLIKELY = 2
    POSSIBLE = 3
    LIKELY = 4
    VERY_LIKELY = 5


class LandmarkType(IntEnum):
    UNKNOWN_LANDMARK = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2
    LEFT_OF_LEFT_EYEBROW = 3
    RIGHT_OF_LEFT_EYEBROW = 4
    LEFT_OF_RIGHT_EYEBROW = 5
    RIGHT_OF_RIGHT_EYEBROW = 6
    MIDPOINT_BETWEEN_EYES = 7
    NOSE_TIP = 8
    UPPER_LIP = 9
    LOWER_LIP = 10
    MOUTH_LEFT = 11
    MOUTH_RIGHT = 12
    MOUTH_CENTER = 13
    NOSE_BOTTOM_RIGHT = 14
    NOSE_BOTTOM_LEFT = 15
    NOSE_BOTTOM_CENTER = 16
    LEFT_EYE_TOP_BOUNDARY = 17
    LEFT_EYE_RIGHT_CORNER = 18
    LEFT_EYE_BOTTOM_BOUNDARY = 19
    LEFT_EYE_LEFT_CORNER = 20
    RIGHT_EYE_TOP_BOUNDARY = 21
    RIGHT_EYE_RIGHT_CORNER = 22
    RIGHT_EYE_BOTTOM_BOUNDARY = 23
    RIGHT_EYE_LEFT_CORNER = 24
    LEFT_EYEBROW_UPPER_MIDPOINT = 25
    RIGHT_EYEBROW_UPPER_MIDPOINT = 26
    LEFT_EAR_TRAGION = 27
    RIGHT_EAR_TRAGION = 28
    LEFT_EYE_PUPIL = 29
    RIGHT_EYE_PUPIL = 30
    FOREHEAD_GLABELLA = 31
    CHIN_GNATHION = 32
    CHIN_LEFT_GONION = 33
    CHIN_RIGHT_GONION = 34
    LEFT_CHEEK_CENTER = 35
    RIGHT_CHEEK_CENTER = 36


class BlockType(IntEnum):
    UNKNOWN = 0
    TEXT = 1
    TABLE = 2
    PICTURE = 3
    RULER = 4
    BARCODE = 5


class BreakType(IntEnum):
    UNKNOWN = 0
    SPACE = 1
    SURE_SPACE = 2
    EOL_SURE_SPACE = 3
    HYPHEN = 4
    LINE_BREAK = 5


def _coerce_enum(enum_cls: Type[IntEnum]) -> Callable[[Any], Any]:
    def coerce(value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, enum_cls):
            try:
                return enum_cls[value]
            except KeyError:
                raise ValueError(f"'{value}' is not a valid {enum_cls.__name__}") from None
        return value
    return coerce


LikelihoodField = Annotated[Likelihood, BeforeValidator(_coerce_enum(Likelihood))]
LandmarkTypeField = Annotated[LandmarkType, BeforeValidator(_coerce_enum(LandmarkType))]
BlockTypeField = Annotated[BlockType, BeforeValidator(_coerce_enum(BlockType))]
BreakTypeField = Annotated[BreakType, BeforeValidator(_coerce_enum(BreakType))]


class VisionModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore")


# Geometry

class Vertex(VisionModel):
    x: int = 0
    y: int = 0


class NormalizedVertex(VisionModel):
    x: float = 0.0
    y: float = 0.0


class BoundingPoly(VisionModel):
    vertices: List[Vertex] = []
    normalized_vertices: List[NormalizedVertex] = []


class Position(VisionModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class LatLng(VisionModel):
    latitude: float = 0.0
    longitude: float = 0.0


class LocationInfo(VisionModel):
    lat_lng: Optional[LatLng] = None


# Faces

class FaceLandmark(VisionModel):
    type: LandmarkTypeField = LandmarkType.UNKNOWN_LANDMARK
    position: Optional[Position] = None


class FaceAnnotation(VisionModel):
    bounding_poly: Optional[BoundingPoly] = None
    fd_bounding_poly: Optional[BoundingPoly] = None
    landmarks: List[FaceLandmark] = []
    roll_angle: float = 0.0
    pan_angle: float = 0.0
    tilt_angle: float = 0.0
    detection_confidence: float = 0.0
    landmarking_confidence: float = 0.0
    joy_likelihood: LikelihoodField = Likelihood.UNKNOWN
    sorrow_likelihood: LikelihoodField = Likelihood.UNKNOWN
    anger_likelihood: LikelihoodField = Likelihood.UNKNOWN
    surprise_likelihood: LikelihoodField = Likelihood.UNKNOWN
    under_exposed_likelihood: LikelihoodField = Likelihood.UNKNOWN
    blurred_likelihood: LikelihoodField = Likelihood.UNKNOWN
    headwear_likelihood: LikelihoodField = Likelihood.UNKNOWN


# Labels, logos, landmarks and text

class EntityAnnotation(VisionModel):
    mid: Optional[str] = None
    locale: Optional[str] = None
    description: str = ""
    score: float = 0.0
    confidence: float = 0.0
    topicality: float = 0.0
    bounding_poly: Optional[BoundingPoly] = None
    locations: List[LocationInfo] = []


class LocalizedObjectAnnotation(VisionModel):
    mid: Optional[str] = None
    language_code: Optional[str] = None
    name: str = ""
    score: float = 0.0
    bounding_poly: Optional[BoundingPoly] = None


class SafeSearchAnnotation(VisionModel):
    adult: LikelihoodField = Likelihood.UNKNOWN
    spoof: LikelihoodField = Likelihood.UNKNOWN
    medical: LikelihoodField = Likelihood.UNKNOWN
    violence: LikelihoodField = Likelihood.UNKNOWN
    racy: LikelihoodField = Likelihood.UNKNOWN


# Image properties and crop hints

class Color(VisionModel):
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    alpha: Optional[float] = None


class ColorInfo(VisionModel):
    color: Optional[Color] = None
    score: float = 0.0
    pixel_fraction: float = 0.0


class DominantColorsAnnotation(VisionModel):
    colors: List[ColorInfo] = []


class ImageProperties(VisionModel):
    dominant_colors: Optional[DominantColorsAnnotation] = None


class CropHint(VisionModel):
    bounding_poly: Optional[BoundingPoly] = None
    confidence: float = 0.0
    importance_fraction: float = 0.0


class CropHintsAnnotation(VisionModel):
    crop_hints: List[CropHint] = []


# Web detection

class WebEntity(VisionModel):
    entity_id: Optional[str] = None
    score: float = 0.0
    description: Optional[str] = None


class WebImage(VisionModel):
    url: str = ""
    score: float = 0.0


class WebPage(VisionModel):
    url: str = ""
    score: float = 0.0
    page_title: Optional[str] = None
    full_matching_images: List[WebImage] = []
    partial_matching_images: List[WebImage] = []


class WebLabel(VisionModel):
    label: str = ""
    language_code: Optional[str] = None


class WebDetection(VisionModel):
    web_entities: List[WebEntity] = []
    full_matching_images: List[WebImage] = []
    partial_matching_images: List[WebImage] = []
    pages_with_matching_images: List[WebPage] = []
    visually_similar_images: List[WebImage] = []
    best_guess_labels: List[WebLabel] = []


# Product search

class KeyValue(VisionModel):
    key: str = ""
    value: str = ""


class Product(VisionModel):
    name: str = ""
    display_name: str = ""
    description: Optional[str] = None
    product_category: str = ""
    product_labels: List[KeyValue] = []


class ProductSearchResult(VisionModel):
    product: Optional[Product] = None
    score: float = 0.0
    image: str = ""


class GroupedResult(VisionModel):
    bounding_poly: Optional[BoundingPoly] = None
    results: List[ProductSearchResult] = []


class ProductSearchResults(VisionModel):
    index_time: Optional[str] = None
    results: List[ProductSearchResult] = []
    product_grouped_results: List[GroupedResult] = []


# Full text (document text detection)

class DetectedBreak(VisionModel):
    type: BreakTypeField = BreakType.UNKNOWN
    is_prefix: bool = False


class TextProperty(VisionModel):
    detected_break: Optional[DetectedBreak] = None


class Symbol(VisionModel):
    text_property: Optional[TextProperty] = Field(default=None, alias="property")
    bounding_box: Optional[BoundingPoly] = None
    text: str = ""
    confidence: float = 0.0


class Word(VisionModel):
    text_property: Optional[TextProperty] = Field(default=None, alias="property")
    bounding_box: Optional[BoundingPoly] = None
    symbols: List[Symbol] = []
    confidence: float = 0.0


class Paragraph(VisionModel):
    text_property: Optional[TextProperty] = Field(default=None, alias="property")
    bounding_box: Optional[BoundingPoly] = None
    words: List[Word] = []
    confidence: float = 0.0


class Block(VisionModel):
    text_property: Optional[TextProperty] = Field(default=None, alias="property")
    bounding_box: Optional[BoundingPoly] = None
    paragraphs: List[Paragraph] = []
    block_type: BlockTypeField = BlockType.UNKNOWN
    confidence: float = 0.0


class Page(VisionModel):
    text_property: Optional[TextProperty] = Field(default=None, alias="property")
    width: int = 0
    height: int = 0
    blocks: List[Block] = []
    confidence: float = 0.0


class TextAnnotation(VisionModel):
    pages: List[Page] = []
    text: Optional[str] = None


# Envelopes

class Status(VisionModel):
    code: int = 0
    message: str = ""


class ImageAnnotationContext(VisionModel):
    uri: Optional[str] = None
    page_number: int = 0


class AnnotateImageResponse(VisionModel):
    face_annotations: List[FaceAnnotation] = []
    landmark_annotations: List[EntityAnnotation] = []
    logo_annotations: List[EntityAnnotation] = []
    label_annotations: List[EntityAnnotation] = []
    localized_object_annotations: List[LocalizedObjectAnnotation] = []
    text_annotations: List[EntityAnnotation] = []
    full_text_annotation: Optional[TextAnnotation] = None
    safe_search_annotation: Optional[SafeSearchAnnotation] = None
    image_properties_annotation: Optional[ImageProperties] = None
    crop_hints_annotation: Optional[CropHintsAnnotation] = None
    web_detection: Optional[WebDetection] = None
    product_search_results: Optional[ProductSearchResults] = None
    error: Optional[Status] = None
    context: Optional[ImageAnnotationContext] = None


class GcsSource(VisionModel):
    uri: str = ""


class InputConfig(VisionModel):
    gcs_source: Optional[GcsSource] = None
    content: Optional[str] = None
    mime_type: str = ""


class AnnotateFileResponse(VisionModel):
    input_config: Optional[InputConfig] = None
    responses: List[AnnotateImageResponse] = []
    total_pages: int = 0
    error: Optional[Status] = None
