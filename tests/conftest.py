import logging
from typing import Any, Dict, List, Optional

import pytest

from visiontab.core.annotations import AnnotateFileResponse, AnnotateImageResponse
from visiontab.core.schema import Field, Schema, SchemaType


class FakeAnnotator:
    """In-memory stand-in for the Vision client; replays canned responses and records calls."""

    def __init__(self, image_response: Any = None, file_response: Any = None, error: Optional[Exception] = None):
        self.image_response = image_response
        self.file_response = file_response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def annotate_image(self, image, features, image_context=None):
        self.calls.append({"image": image, "features": list(features), "image_context": image_context})
        if self.error is not None:
            raise self.error
        response = self.image_response
        return AnnotateImageResponse.model_validate(response) if isinstance(response, dict) else response

    def annotate_file(self, document, mime_type, features, image_context=None, pages=None):
        self.calls.append({
            "document": document,
            "mime_type": mime_type,
            "features": list(features),
            "image_context": image_context,
            "pages": list(pages or []),
        })
        if self.error is not None:
            raise self.error
        response = self.file_response
        return AnnotateFileResponse.model_validate(response) if isinstance(response, dict) else response


@pytest.fixture
def face_response() -> Dict[str, Any]:
    return {
        "faceAnnotations": [
            {
                "boundingPoly": {"vertices": [{"x": 10, "y": 20}, {"x": 110, "y": 20}, {"x": 110, "y": 140}, {"x": 10, "y": 140}]},
                "fdBoundingPoly": {"vertices": [{"x": 15, "y": 30}, {"x": 100, "y": 30}]},
                "landmarks": [
                    {"type": "LEFT_EYE", "position": {"x": 40.5, "y": 60.25, "z": -1.5}},
                    {"type": "NOSE_TIP", "position": {"x": 60.0, "y": 80.0, "z": 3.0}},
                ],
                "rollAngle": 1.5,
                "panAngle": -12.25,
                "tiltAngle": 4.0,
                "detectionConfidence": 0.98,
                "landmarkingConfidence": 0.75,
                "joyLikelihood": "VERY_LIKELY",
                "sorrowLikelihood": "VERY_UNLIKELY",
                "angerLikelihood": "UNLIKELY",
                "surpriseLikelihood": "POSSIBLE",
                "underExposedLikelihood": "VERY_UNLIKELY",
                "blurredLikelihood": "VERY_UNLIKELY",
                "headwearLikelihood": "LIKELY",
            },
            {
                "boundingPoly": {"vertices": [{"x": 200, "y": 20}]},
                "joyLikelihood": "UNLIKELY",
            },
        ]
    }


@pytest.fixture
def label_response() -> Dict[str, Any]:
    return {
        "labelAnnotations": [
            {"mid": "/m/01yrx", "description": "Cat", "score": 0.97, "topicality": 0.97},
            {"mid": "/m/0307l", "description": "Felidae", "score": 0.91, "topicality": 0.91},
        ]
    }


@pytest.fixture
def path_input_schema() -> Schema:
    return Schema.record_of("input", [
        Field.of("id", Schema.of(SchemaType.LONG)),
        Field.of("path", Schema.of(SchemaType.STRING)),
    ])


@pytest.fixture
def test_logger() -> logging.Logger:
    return logging.getLogger("visiontab.tests")


@pytest.fixture
def fake_annotator():
    return FakeAnnotator
