"""
Schema builders for every annotation variant.

Each builder is a pure function ``(naming) -> Schema``. The naming context
threads a path of parent field names through nested builders so that one root
schema never holds two sub-records with the same name, even when the same
variant (a vertex, a product result) appears under several parents.
"""
from __future__ import annotations
from typing import Callable, Dict, List, Tuple

from .annotations import BlockType, LandmarkType
from .schema import Field, Schema, SchemaType

STRING = Schema.of(SchemaType.STRING)
INT = Schema.of(SchemaType.INT)
FLOAT = Schema.of(SchemaType.FLOAT)
DOUBLE = Schema.of(SchemaType.DOUBLE)
NULLABLE_STRING = Schema.nullable_of(STRING)
NULLABLE_FLOAT = Schema.nullable_of(FLOAT)


class NamingContext:
    """
    Produces globally unique record names from a prefix and a path of parent fields.
    """
    __slots__ = ("_parts",)

    def __init__(self, prefix: str, _parts: Tuple[str, ...] = ()) -> None:
        self._parts = _parts or (prefix,)

    def child(self, segment: str) -> "NamingContext":
        return NamingContext(self._parts[0], self._parts + (segment,))

    def record_name(self, kind: str) -> str:
        return "-".join(self._parts + (kind, "record"))

    @property
    def prefix(self) -> str:
        return "-".join(self._parts)


SchemaBuilder = Callable[[NamingContext], Schema]

_BUILDERS: Dict[str, SchemaBuilder] = {}


def schema_builder(kind: str) -> Callable[[SchemaBuilder], SchemaBuilder]:
    def register(fn: SchemaBuilder) -> SchemaBuilder:
        _BUILDERS[kind] = fn
        return fn
    return register


def build_schema(kind: str, naming: NamingContext) -> Schema:
    try:
        builder = _BUILDERS[kind]
    except KeyError:
        raise KeyError(f"No schema builder for annotation kind '{kind}'.") from None
    return builder(naming)


def builder_kinds() -> List[str]:
    return sorted(_BUILDERS)


def _array_of(kind: str, naming: NamingContext, field_name: str) -> Field:
    return Field.of(field_name, Schema.array_of(build_schema(kind, naming.child(field_name))))


# Geometry


@schema_builder("vertex")
def _vertex(naming: NamingContext) -> Schema:
    """A 2D point in pixel coordinates."""
    return Schema.record_of(naming.record_name("vertex"), [
        Field.of("x", INT),
        Field.of("y", INT),
    ])


@schema_builder("normalized_vertex")
def _normalized_vertex(naming: NamingContext) -> Schema:
    """A 2D point, coordinates relative to the image size in [0, 1]."""
    return Schema.record_of(naming.record_name("normalized-vertex"), [
        Field.of("x", FLOAT),
        Field.of("y", FLOAT),
    ])


@schema_builder("location")
def _location(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("location"), [
        Field.of("latitude", DOUBLE),
        Field.of("longitude", DOUBLE),
    ])


# Faces


@schema_builder("face_landmark")
def _face_landmark(naming: NamingContext) -> Schema:
    """A face landmark: its type and its 3D position flattened to x, y, z."""
    return Schema.record_of(naming.record_name("face-landmark"), [
        Field.of("type", Schema.enum_with(t.name for t in LandmarkType)),
        Field.of("x", FLOAT),
        Field.of("y", FLOAT),
        Field.of("z", FLOAT),
    ])


FACE_LIKELIHOOD_FIELDS = (
    "angerLikelihood", "joyLikelihood", "surpriseLikelihood", "blurredLikelihood",
    "underExposedLikelihood", "sorrowLikelihood", "headwearLikelihood",
)


@schema_builder("face")
def _face(naming: NamingContext) -> Schema:
    """
    rollAngle: clockwise/anti-clockwise rotation about the axis perpendicular to the face, [-180, 180].
    panAngle: leftward/rightward (yaw) angle, [-180, 180].
    tiltAngle: upwards/downwards (pitch) angle, [-180, 180].
    detectionConfidence, landmarkingConfidence: [0, 1].
    *Likelihood: name of a Likelihood value.
    boundingPoly: polygon framing the face, based on the landmarker results.
    fdBoundingPoly: tighter polygon around the skin part of the face, from face detection only.
    """
    fields = [
        Field.of("rollAngle", FLOAT),
        Field.of("panAngle", FLOAT),
        Field.of("tiltAngle", FLOAT),
        Field.of("detectionConfidence", FLOAT),
        Field.of("landmarkingConfidence", FLOAT),
    ]
    fields.extend(Field.of(name, STRING) for name in FACE_LIKELIHOOD_FIELDS)
    fields.append(_array_of("vertex", naming, "boundingPoly"))
    fields.append(_array_of("vertex", naming, "fdBoundingPoly"))
    fields.append(_array_of("face_landmark", naming, "landmarks"))
    return Schema.record_of(naming.record_name("face-annotation"), fields)


# Entities


def entity_schema(naming: NamingContext, kind: str, *, with_position: bool, with_locations: bool) -> Schema:
    """
    Shared shape of label, logo, landmark and text annotations.

    mid: opaque Knowledge Graph entity id, when there is one.
    locale: language code of the description, when known.
    score: overall score of the result, [0, 1].
    topicality: relevancy of the label to the image, [0, 1].
    position: bounding polygon of the detected entity.
    locations: latitude/longitude of the detected entity (landmarks).
    """
    fields = [
        Field.of("mid", NULLABLE_STRING),
        Field.of("locale", NULLABLE_STRING),
        Field.of("description", STRING),
        Field.of("score", FLOAT),
        Field.of("topicality", FLOAT),
    ]
    if with_position:
        fields.append(_array_of("vertex", naming, "position"))
    if with_locations:
        fields.append(_array_of("location", naming, "locations"))
    return Schema.record_of(naming.record_name(kind), fields)


@schema_builder("label")
def _label(naming: NamingContext) -> Schema:
    return entity_schema(naming, "label", with_position=False, with_locations=False)


@schema_builder("logo")
def _logo(naming: NamingContext) -> Schema:
    return entity_schema(naming, "logo", with_position=True, with_locations=False)


@schema_builder("landmark")
def _landmark(naming: NamingContext) -> Schema:
    return entity_schema(naming, "landmark", with_position=True, with_locations=True)


@schema_builder("text")
def _text(naming: NamingContext) -> Schema:
    """The first text annotation holds the whole text, the following ones each hold one word."""
    return Schema.record_of(naming.record_name("text"), [
        Field.of("locale", NULLABLE_STRING),
        Field.of("description", STRING),
        _array_of("vertex", naming, "position"),
    ])


@schema_builder("localized_object")
def _localized_object(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("localized-object"), [
        Field.of("mid", NULLABLE_STRING),
        Field.of("languageCode", NULLABLE_STRING),
        Field.of("name", STRING),
        Field.of("score", FLOAT),
        _array_of("normalized_vertex", naming, "position"),
    ])


@schema_builder("safe_search")
def _safe_search(naming: NamingContext) -> Schema:
    """Likelihood names for each explicit content category."""
    return Schema.record_of(naming.record_name("safe-search"), [
        Field.of(name, STRING) for name in ("adult", "spoof", "medical", "violence", "racy")
    ])


# Image properties and crop hints


@schema_builder("color")
def _color(naming: NamingContext) -> Schema:
    """
    red, green, blue: color channels in [0, 255].
    alpha: fraction of the color applied to the pixel, null when absent (solid).
    score: image-specific score for this color, [0, 1].
    pixelFraction: fraction of pixels the color occupies, [0, 1].
    """
    return Schema.record_of(naming.record_name("color"), [
        Field.of("red", FLOAT),
        Field.of("green", FLOAT),
        Field.of("blue", FLOAT),
        Field.of("alpha", NULLABLE_FLOAT),
        Field.of("score", FLOAT),
        Field.of("pixelFraction", FLOAT),
    ])


@schema_builder("crop_hint")
def _crop_hint(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("crop-hint"), [
        _array_of("vertex", naming, "position"),
        Field.of("confidence", FLOAT),
        Field.of("importanceFraction", FLOAT),
    ])


# Web detection


@schema_builder("web_entity")
def _web_entity(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("web-entity"), [
        Field.of("entityId", NULLABLE_STRING),
        Field.of("score", FLOAT),
        Field.of("description", NULLABLE_STRING),
    ])


@schema_builder("web_image")
def _web_image(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("web-image"), [
        Field.of("url", STRING),
        Field.of("score", FLOAT),
    ])


@schema_builder("web_page")
def _web_page(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("web-page"), [
        Field.of("url", STRING),
        Field.of("score", FLOAT),
        Field.of("pageTitle", NULLABLE_STRING),
        _array_of("web_image", naming, "fullMatchingImages"),
        _array_of("web_image", naming, "partialMatchingImages"),
    ])


@schema_builder("web_label")
def _web_label(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("web-label"), [
        Field.of("label", STRING),
        Field.of("languageCode", NULLABLE_STRING),
    ])


@schema_builder("web_detection")
def _web_detection(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("web-detection"), [
        _array_of("web_entity", naming, "webEntities"),
        _array_of("web_image", naming, "fullMatchingImages"),
        _array_of("web_image", naming, "partialMatchingImages"),
        _array_of("web_page", naming, "pagesWithMatchingImages"),
        _array_of("web_image", naming, "visuallySimilarImages"),
        _array_of("web_label", naming, "bestGuessLabels"),
    ])


# Product search


@schema_builder("key_value")
def _key_value(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("key-value"), [
        Field.of("key", STRING),
        Field.of("value", STRING),
    ])


@schema_builder("product")
def _product(naming: NamingContext) -> Schema:
    """
    name: resource name, projects/PROJECT_ID/locations/LOC_ID/products/PRODUCT_ID.
    productCategory: category of the product, e.g. "homegoods-v2".
    productLabels: key-value pairs attached to the product.
    """
    return Schema.record_of(naming.record_name("product"), [
        Field.of("name", STRING),
        Field.of("displayName", STRING),
        Field.of("description", NULLABLE_STRING),
        Field.of("productCategory", STRING),
        _array_of("key_value", naming, "productLabels"),
    ])


@schema_builder("product_result")
def _product_result(naming: NamingContext) -> Schema:
    """image: resource name of the closest matching reference image. score: [0, 1]."""
    return Schema.record_of(naming.record_name("product-result"), [
        Field.of("image", STRING),
        Field.of("score", FLOAT),
        Field.of("product", Schema.nullable_of(build_schema("product", naming.child("product")))),
    ])


@schema_builder("grouped_result")
def _grouped_result(naming: NamingContext) -> Schema:
    """Products matching one region of the query image, with that region's polygon."""
    return Schema.record_of(naming.record_name("grouped-result"), [
        _array_of("vertex", naming, "position"),
        _array_of("product_result", naming, "results"),
    ])


@schema_builder("product_search")
def _product_search(naming: NamingContext) -> Schema:
    """
    indexTime: RFC3339 timestamp of the index that produced the results.
    results: one entry per product match.
    productGroupedResults: results grouped by product region in the query image.
    """
    return Schema.record_of(naming.record_name("product-search"), [
        Field.of("indexTime", NULLABLE_STRING),
        _array_of("product_result", naming, "results"),
        _array_of("grouped_result", naming, "productGroupedResults"),
    ])


# Full text


@schema_builder("text_block")
def _text_block(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("text-block"), [
        Field.of("blockType", Schema.enum_with(t.name for t in BlockType)),
        Field.of("confidence", FLOAT),
        _array_of("vertex", naming, "boundingBox"),
        Field.of("text", STRING),
    ])


@schema_builder("text_page")
def _text_page(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("text-page"), [
        Field.of("width", INT),
        Field.of("height", INT),
        Field.of("confidence", FLOAT),
        _array_of("text_block", naming, "blocks"),
    ])


@schema_builder("full_text")
def _full_text(naming: NamingContext) -> Schema:
    return Schema.record_of(naming.record_name("full-text"), [
        Field.of("text", NULLABLE_STRING),
        _array_of("text_page", naming, "pages"),
    ])


def pages_schema(feature_schema: Schema, naming: NamingContext) -> Schema:
    """Document output: one record per page holding the 1-based page number and the page's feature."""
    return Schema.array_of(Schema.record_of(naming.record_name("page"), [
        Field.of("page", INT),
        Field.of("feature", feature_schema),
    ]))
