import base64
import json

import httpx
import pytest

from visiontab.rest.client import VisionClient
from visiontab.rest.exceptions import (
    VisionClientError,
    VisionHTTPError,
    VisionRateLimitError,
    VisionResponseError,
    VisionValidationError,
)
from visiontab.rest.models import ImageContext, WebDetectionParams


def _client(handler) -> VisionClient:
    return VisionClient(base_url="https://vision.test/v1", transport=httpx.MockTransport(handler))


def test_annotate_image_by_uri(label_response):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"responses": [label_response]})

    context = ImageContext(web_detection_params=WebDetectionParams(include_geo_results=True))
    with _client(handler) as client:
        response = client.annotate_image("gs://bucket/cat.jpg", ["LABEL_DETECTION"], context)

    assert seen["url"] == "https://vision.test/v1/images:annotate"
    request = seen["body"]["requests"][0]
    assert request["image"] == {"source": {"imageUri": "gs://bucket/cat.jpg"}}
    assert request["features"] == [{"type": "LABEL_DETECTION"}]
    assert request["imageContext"]["webDetectionParams"] == {"includeGeoResults": True}
    assert [l.description for l in response.label_annotations] == ["Cat", "Felidae"]


def test_annotate_image_bytes_are_base64():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"responses": [{}]})

    with _client(handler) as client:
        client.annotate_image(b"\x89PNG", ["FACE_DETECTION"])

    image = seen["body"]["requests"][0]["image"]
    assert base64.b64decode(image["content"]) == b"\x89PNG"
    assert "source" not in image
    assert "imageContext" not in seen["body"]["requests"][0]


def test_annotate_file_request_shape():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"responses": [{"responses": [{}, {}], "totalPages": 2}]})

    with _client(handler) as client:
        response = client.annotate_file("gs://bucket/doc.pdf", "application/pdf", ["DOCUMENT_TEXT_DETECTION"], pages=[1, 3])

    request = seen["body"]["requests"][0]
    assert seen["url"].endswith("/files:annotate")
    assert request["inputConfig"] == {"gcsSource": {"uri": "gs://bucket/doc.pdf"}, "mimeType": "application/pdf"}
    assert request["pages"] == [1, 3]
    assert response.total_pages == 2
    assert len(response.responses) == 2


@pytest.mark.parametrize("status, exc", [(429, VisionRateLimitError), (500, VisionHTTPError), (403, VisionHTTPError)])
def test_http_errors(status, exc):
    with _client(lambda request: httpx.Response(status, json={})) as client:
        with pytest.raises(exc):
            client.annotate_image("gs://b/x.jpg", ["FACE_DETECTION"])


def test_invalid_json():
    with _client(lambda request: httpx.Response(200, content=b"<html>")) as client:
        with pytest.raises(VisionValidationError):
            client.annotate_image("gs://b/x.jpg", ["FACE_DETECTION"])


def test_response_count_must_match():
    with _client(lambda request: httpx.Response(200, json={"responses": []})) as client:
        with pytest.raises(VisionValidationError):
            client.annotate_image("gs://b/x.jpg", ["FACE_DETECTION"])


def test_per_image_error_status():
    body = {"responses": [{"error": {"code": 7, "message": "Permission denied on gs://b/x.jpg"}}]}
    with _client(lambda request: httpx.Response(200, json=body)) as client:
        with pytest.raises(VisionResponseError, match="Permission denied"):
            client.annotate_image("gs://b/x.jpg", ["FACE_DETECTION"])


def test_per_page_error_status():
    body = {"responses": [{"responses": [{}, {"error": {"code": 3, "message": "Bad image data"}}], "totalPages": 2}]}
    with _client(lambda request: httpx.Response(200, json=body)) as client:
        with pytest.raises(VisionResponseError, match="Page 2: Bad image data"):
            client.annotate_file("gs://b/doc.pdf", "application/pdf", ["FACE_DETECTION"])


def test_transport_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(VisionClientError):
            client.annotate_image("gs://b/x.jpg", ["FACE_DETECTION"])


def test_client_plugs_into_extractor(label_response):
    from visiontab.core.config import ExtractorConfig
    from visiontab.core.driver import CollectingEmitter, ExtractorTransform, TransformOutcome

    stage = ExtractorTransform(ExtractorConfig(feature="Labels", path_field="path"))
    stage.configure()
    with _client(lambda request: httpx.Response(200, json={"responses": [label_response]})) as client:
        stage.initialize(client)
        emitter = CollectingEmitter()
        assert stage.transform({"path": "gs://b/cat.jpg"}, emitter) is TransformOutcome.EMITTED

    assert emitter.records[0]["extracted"][1]["description"] == "Felidae"
