import pytest

from visiontab.core.annotations import AnnotateFileResponse, AnnotateImageResponse, Block
from visiontab.core.builders import NamingContext, pages_schema
from visiontab.core.exceptions import TransformationError
from visiontab.core.features import ImageFeature
from visiontab.core.context import MappingContext
from visiontab.core.mappers import PageResponse, block_text
from visiontab.core.registry import MapperRegistry, get_registry
from visiontab.core.schema import Field, Schema, SchemaType
from visiontab.core.transformer import FileAnnotationTransformer, ImageAnnotationTransformer


def _output_schema(feature: ImageFeature, output_field: str = "extracted") -> Schema:
    return Schema.record_of("record", [
        Field.of("path", Schema.of(SchemaType.STRING)),
        Field.of(output_field, feature.build_schema(NamingContext(output_field))),
    ])


def _transform(feature, response, record=None):
    t = ImageAnnotationTransformer(feature, "extracted", _output_schema(feature))
    return t.transform(record or {"path": "gs://bucket/image.jpg"}, response)


def test_faces_map_in_order_with_likelihood_names(face_response):
    out = _transform(ImageFeature.FACE, face_response)

    assert out["path"] == "gs://bucket/image.jpg"
    faces = out["extracted"]
    assert len(faces) == 2

    first = faces[0]
    assert first["rollAngle"] == 1.5
    assert first["panAngle"] == -12.25
    assert first["joyLikelihood"] == "VERY_LIKELY"
    assert first["headwearLikelihood"] == "LIKELY"
    assert first["boundingPoly"] == [{"x": 10, "y": 20}, {"x": 110, "y": 20}, {"x": 110, "y": 140}, {"x": 10, "y": 140}]
    assert first["fdBoundingPoly"] == [{"x": 15, "y": 30}, {"x": 100, "y": 30}]
    assert first["landmarks"][0] == {"type": "LEFT_EYE", "x": 40.5, "y": 60.25, "z": -1.5}
    assert first["landmarks"][1]["type"] == "NOSE_TIP"

    second = faces[1]
    assert second["boundingPoly"] == [{"x": 200, "y": 20}]
    assert second["fdBoundingPoly"] == []
    assert second["landmarks"] == []
    assert second["joyLikelihood"] == "UNLIKELY"
    assert second["angerLikelihood"] == "UNKNOWN"


def test_integer_likelihood_codes_render_as_names():
    out = _transform(ImageFeature.EXPLICIT_CONTENT, {"safeSearchAnnotation": {"adult": 1, "racy": 4}})

    assert out["extracted"] == {
        "adult": "VERY_UNLIKELY",
        "spoof": "UNKNOWN",
        "medical": "UNKNOWN",
        "violence": "UNKNOWN",
        "racy": "LIKELY",
    }


def test_labels(label_response):
    out = _transform(ImageFeature.LABELS, label_response)

    assert [l["description"] for l in out["extracted"]] == ["Cat", "Felidae"]
    assert out["extracted"][0] == {
        "mid": "/m/01yrx", "locale": None, "description": "Cat", "score": 0.97, "topicality": 0.97,
    }


def test_landmarks_carry_position_and_locations():
    response = {"landmarkAnnotations": [{
        "mid": "/m/0c7zy",
        "description": "Eiffel Tower",
        "score": 0.89,
        "boundingPoly": {"vertices": [{"x": 1, "y": 2}]},
        "locations": [{"latLng": {"latitude": 48.858, "longitude": 2.294}}],
    }]}
    landmark = _transform(ImageFeature.LANDMARKS, response)["extracted"][0]

    assert landmark["position"] == [{"x": 1, "y": 2}]
    assert landmark["locations"] == [{"latitude": 48.858, "longitude": 2.294}]


def test_objects_use_normalized_vertices():
    response = {"localizedObjectAnnotations": [{
        "mid": "/m/01bqk0",
        "name": "Bicycle wheel",
        "score": 0.94,
        "boundingPoly": {"normalizedVertices": [{"x": 0.31, "y": 0.66}, {"x": 0.48, "y": 0.66}]},
    }]}
    obj = _transform(ImageFeature.OBJECT_LOCALIZATION, response)["extracted"][0]

    assert obj["name"] == "Bicycle wheel"
    assert obj["languageCode"] is None
    assert obj["position"] == [{"x": 0.31, "y": 0.66}, {"x": 0.48, "y": 0.66}]


def test_dominant_colors():
    response = {"imagePropertiesAnnotation": {"dominantColors": {"colors": [
        {"color": {"red": 200, "green": 10, "blue": 30}, "score": 0.6, "pixelFraction": 0.2},
    ]}}}
    color = _transform(ImageFeature.IMAGE_PROPERTIES, response)["extracted"][0]

    assert color == {"red": 200.0, "green": 10.0, "blue": 30.0, "alpha": None, "score": 0.6, "pixelFraction": 0.2}


def test_crop_hints():
    response = {"cropHintsAnnotation": {"cropHints": [
        {"boundingPoly": {"vertices": [{"x": 0, "y": 0}, {"x": 99, "y": 0}]}, "confidence": 0.8, "importanceFraction": 1.0},
    ]}}
    hint = _transform(ImageFeature.CROP_HINTS, response)["extracted"][0]

    assert hint == {"position": [{"x": 0, "y": 0}, {"x": 99, "y": 0}], "confidence": 0.8, "importanceFraction": 1.0}


def test_web_detection():
    response = {"webDetection": {
        "webEntities": [{"entityId": "/m/02p7_j8", "score": 1.2, "description": "Carnival in Rio"}],
        "pagesWithMatchingImages": [{
            "url": "https://example.com/rio",
            "pageTitle": "Rio",
            "fullMatchingImages": [{"url": "https://example.com/rio.jpg"}],
        }],
        "bestGuessLabels": [{"label": "carnival", "languageCode": "en"}],
    }}
    web = _transform(ImageFeature.WEB_DETECTION, response)["extracted"]

    assert web["webEntities"] == [{"entityId": "/m/02p7_j8", "score": 1.2, "description": "Carnival in Rio"}]
    assert web["pagesWithMatchingImages"][0]["fullMatchingImages"] == [{"url": "https://example.com/rio.jpg", "score": 0.0}]
    assert web["pagesWithMatchingImages"][0]["partialMatchingImages"] == []
    assert web["visuallySimilarImages"] == []
    assert web["bestGuessLabels"] == [{"label": "carnival", "languageCode": "en"}]


def test_product_search_nested_records():
    product = {
        "name": "projects/p/locations/us-west1/products/shoe-1",
        "displayName": "Runner",
        "productCategory": "apparel-v2",
        "productLabels": [{"key": "color", "value": "red"}],
    }
    response = {"productSearchResults": {
        "indexTime": "2024-01-01T00:00:00Z",
        "results": [{"product": product, "score": 0.8, "image": "projects/p/.../referenceImages/r1"}],
        "productGroupedResults": [{
            "boundingPoly": {"vertices": [{"x": 5, "y": 5}]},
            "results": [{"score": 0.5, "image": "img-2"}],
        }],
    }}
    out = _transform(ImageFeature.MULTIPLE_OBJECTS, response)["extracted"]

    assert out["indexTime"] == "2024-01-01T00:00:00Z"
    assert out["results"][0]["product"]["productLabels"] == [{"key": "color", "value": "red"}]
    assert out["results"][0]["product"]["description"] is None
    group = out["productGroupedResults"][0]
    assert group["position"] == [{"x": 5, "y": 5}]
    assert group["results"] == [{"image": "img-2", "score": 0.5, "product": None}]


def _symbol(text, break_type=None):
    symbol = {"text": text}
    if break_type:
        symbol["property"] = {"detectedBreak": {"type": break_type}}
    return symbol


def test_block_text_uses_detected_breaks():
    block = Block.model_validate({"paragraphs": [{"words": [
        {"symbols": [_symbol("H"), _symbol("i", "SPACE")]},
        {"symbols": [_symbol("t"), _symbol("h"), _symbol("e"), _symbol("r"), _symbol("e", "EOL_SURE_SPACE")]},
        {"symbols": [_symbol("w", "HYPHEN")]},
        {"symbols": [_symbol("o"), _symbol("k", "LINE_BREAK")]},
    ]}]})

    assert block_text(block) == "Hi there\nw-\nok"


def test_handwriting_full_text():
    response = {"fullTextAnnotation": {
        "text": "Hi there\n",
        "pages": [{
            "width": 640,
            "height": 480,
            "confidence": 0.9,
            "blocks": [{
                "blockType": "TEXT",
                "confidence": 0.95,
                "boundingBox": {"vertices": [{"x": 1, "y": 1}]},
                "paragraphs": [{"words": [
                    {"symbols": [_symbol("H"), _symbol("i", "SPACE")]},
                    {"symbols": [_symbol("t"), _symbol("h"), _symbol("e"), _symbol("r"), _symbol("e", "EOL_SURE_SPACE")]},
                ]}],
            }],
        }],
    }}
    out = _transform(ImageFeature.HANDWRITING, response)["extracted"]

    assert out["text"] == "Hi there\n"
    page = out["pages"][0]
    assert (page["width"], page["height"]) == (640, 480)
    assert page["blocks"] == [{"blockType": "TEXT", "confidence": 0.95, "boundingBox": [{"x": 1, "y": 1}], "text": "Hi there"}]


def test_missing_list_feature_maps_to_empty_list():
    assert _transform(ImageFeature.FACE, AnnotateImageResponse())["extracted"] == []


@pytest.mark.parametrize("feature", list(ImageFeature))
def test_zero_detections_map_to_empty_or_default(feature):
    out = _transform(feature, AnnotateImageResponse())["extracted"]

    if feature.is_list:
        assert out == []
    else:
        assert list(out) == feature.build_schema(NamingContext("extracted")).field_names
        assert all(v in (None, [], "UNKNOWN") for v in out.values())


def test_every_feature_kind_has_a_mapper():
    assert {f.kind for f in ImageFeature} | {"page"} <= get_registry().kinds


def test_page_mapper_requires_feature():
    naming = NamingContext("x")
    schema = pages_schema(ImageFeature.FACE.build_schema(naming.child("feature")), naming).items
    ctx = MappingContext(schema, get_registry(), path="$.x[0]")

    with pytest.raises(TransformationError, match="selected feature"):
        ctx.map_record("page", PageResponse(1, AnnotateImageResponse()))


def test_polygon_with_omitted_zero_coordinates():
    vertices = [{}, {"x": 100}, {"x": 100, "y": 100}, {"y": 100}]
    out = _transform(ImageFeature.FACE, {"faceAnnotations": [{"boundingPoly": {"vertices": vertices}}]})

    assert out["extracted"][0]["boundingPoly"] == [
        {"x": 0, "y": 0}, {"x": 100, "y": 0}, {"x": 100, "y": 100}, {"x": 0, "y": 100},
    ]


def test_missing_record_feature_maps_to_defaults():
    out = _transform(ImageFeature.HANDWRITING, {})["extracted"]

    assert out == {"text": None, "pages": []}


def test_declared_pass_through_fields_missing_from_input_are_null():
    schema = Schema.record_of("record", [
        Field.of("path", Schema.of(SchemaType.STRING)),
        Field.of("batch", Schema.nullable_of(Schema.of(SchemaType.STRING))),
        Field.of("extracted", ImageFeature.LABELS.build_schema(NamingContext("extracted"))),
    ])
    t = ImageAnnotationTransformer(ImageFeature.LABELS, "extracted", schema)
    out = t.transform({"path": "gs://b/i.jpg", "ignored": 1}, {})

    assert out == {"path": "gs://b/i.jpg", "batch": None, "extracted": []}


def test_transform_is_deterministic(face_response):
    assert _transform(ImageFeature.FACE, face_response) == _transform(ImageFeature.FACE, face_response)


def test_malformed_response_names_the_problem():
    with pytest.raises(TransformationError) as exc:
        _transform(ImageFeature.FACE, {"faceAnnotations": [{"rollAngle": "sideways"}]})

    assert "AnnotateImageResponse" in str(exc.value)


def test_wrong_response_type():
    with pytest.raises(TransformationError):
        _transform(ImageFeature.FACE, AnnotateFileResponse())


def test_schema_type_mismatch_reports_field_path(face_response):
    schema = Schema.record_of("record", [
        Field.of("extracted", Schema.array_of(Schema.record_of("face", [
            Field.of("rollAngle", Schema.of(SchemaType.STRING)),
        ]))),
    ])
    t = ImageAnnotationTransformer(ImageFeature.FACE, "extracted", schema)

    with pytest.raises(TransformationError) as exc:
        t.transform({}, face_response)

    assert "$.extracted[0].rollAngle" in str(exc.value)


def test_output_field_must_be_in_schema():
    with pytest.raises(ValueError):
        ImageAnnotationTransformer(ImageFeature.FACE, "faces", _output_schema(ImageFeature.FACE))


def test_custom_registry_plugs_in_mapper():
    registry = MapperRegistry()
    registry.register("label", lambda entity, ctx: {"description": entity.description.upper()})
    schema = Schema.record_of("record", [
        Field.of("extracted", Schema.array_of(Schema.record_of("label", [
            Field.of("description", Schema.of(SchemaType.STRING)),
            Field.of("score", Schema.nullable_of(Schema.of(SchemaType.FLOAT))),
        ]))),
    ])
    t = ImageAnnotationTransformer(ImageFeature.LABELS, "extracted", schema, registry=registry)

    assert t.transform({}, {"labelAnnotations": [{"description": "cat"}]}) == {
        "extracted": [{"description": "CAT", "score": None}],
    }


def test_documents_group_by_page_from_one(label_response):
    naming = NamingContext("extracted")
    schema = Schema.record_of("record", [
        Field.of("path", Schema.of(SchemaType.STRING)),
        Field.of("extracted", pages_schema(ImageFeature.LABELS.build_schema(naming.child("feature")), naming)),
    ])
    t = FileAnnotationTransformer(ImageFeature.LABELS, "extracted", schema)
    response = {"responses": [label_response, {}, {"labelAnnotations": [{"description": "Dog", "score": 0.5}]}]}

    pages = t.transform({"path": "gs://b/doc.pdf"}, response)["extracted"]

    assert [p["page"] for p in pages] == [1, 2, 3]
    assert [l["description"] for l in pages[0]["feature"]] == ["Cat", "Felidae"]
    assert pages[1]["feature"] == []
    assert pages[2]["feature"][0]["description"] == "Dog"
