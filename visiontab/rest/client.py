import base64
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx
from pydantic import ValidationError

from ..core.annotations import AnnotateFileResponse, AnnotateImageResponse, GcsSource, InputConfig
from .exceptions import (
    VisionClientError,
    VisionHTTPError,
    VisionRateLimitError,
    VisionResponseError,
    VisionValidationError,
)
from .models import (
    AnnotateFileRequest,
    AnnotateImageRequest,
    BatchAnnotateFilesRequest,
    BatchAnnotateFilesResponse,
    BatchAnnotateImagesRequest,
    BatchAnnotateImagesResponse,
    Feature,
    Image,
    ImageContext,
    ImageSource,
    to_wire,
)

ImageInput = Union[str, bytes]


class VisionClient:
    """
    Client for the Cloud Vision ``images:annotate`` and ``files:annotate`` endpoints.

    The client does not acquire credentials and does not retry: pass whatever
    headers (or a preconfigured transport) the deployment needs.

    Example:
        >>> from visiontab.rest.client import VisionClient
        >>> with VisionClient(headers={"Authorization": f"Bearer {token}"}) as client:
        ...     response = client.annotate_image("gs://bucket/faces.jpg", ["FACE_DETECTION"])
    """

    def __init__(
        self,
        base_url: str = "https://vision.googleapis.com/v1",
        timeout: float = 30.0,
        *,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, headers=headers, transport=transport)

    def annotate_image(
        self,
        image: ImageInput,
        features: Sequence[str],
        image_context: Optional[ImageContext] = None,
    ) -> AnnotateImageResponse:
        if isinstance(image, (bytes, bytearray)):
            img = Image(content=base64.b64encode(bytes(image)).decode("ascii"))
        else:
            img = Image(source=ImageSource(image_uri=image))

        request = BatchAnnotateImagesRequest(requests=[
            AnnotateImageRequest(image=img, features=_features(features), image_context=image_context)
        ])
        data = self._post("images:annotate", to_wire(request))
        try:
            batch = BatchAnnotateImagesResponse.model_validate(data)
        except ValidationError as e:
            raise VisionValidationError(f"Invalid response format: {e}") from e

        response = _single(batch.responses)
        if response.error is not None and response.error.code:
            raise VisionResponseError(response.error.message or f"Image annotation failed with code {response.error.code}")
        return response

    def annotate_file(
        self,
        document: ImageInput,
        mime_type: str,
        features: Sequence[str],
        image_context: Optional[ImageContext] = None,
        pages: Optional[Sequence[int]] = None,
    ) -> AnnotateFileResponse:
        if isinstance(document, (bytes, bytearray)):
            input_config = InputConfig(content=base64.b64encode(bytes(document)).decode("ascii"), mime_type=mime_type)
        else:
            input_config = InputConfig(gcs_source=GcsSource(uri=document), mime_type=mime_type)

        request = BatchAnnotateFilesRequest(requests=[
            AnnotateFileRequest(
                input_config=input_config,
                features=_features(features),
                image_context=image_context,
                pages=list(pages or []),
            )
        ])
        data = self._post("files:annotate", to_wire(request))
        try:
            batch = BatchAnnotateFilesResponse.model_validate(data)
        except ValidationError as e:
            raise VisionValidationError(f"Invalid response format: {e}") from e

        response = _single(batch.responses)
        if response.error is not None and response.error.code:
            raise VisionResponseError(response.error.message or f"File annotation failed with code {response.error.code}")

        for i, page in enumerate(response.responses, start=1):
            if page.error is not None and page.error.code:
                message = page.error.message or f"annotation failed with code {page.error.code}"
                raise VisionResponseError(f"Page {i}: {message}")
        return response

    def _post(self, method: str, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/{method}"
        try:
            response = self._client.post(url, json=payload)
        except httpx.RequestError as e:
            raise VisionClientError(f"Request failed: {e}") from e

        if response.status_code == 429:
            raise VisionRateLimitError("Rate limit exceeded. Please retry later.")

        if not response.is_success:
            raise VisionHTTPError(f"Unexpected status code: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise VisionValidationError(f"Invalid response format: {e}") from e

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _features(types: Sequence[str]) -> List[Feature]:
    return [Feature(type=t) for t in types]


def _single(responses: list):
    if len(responses) != 1:
        raise VisionValidationError(f"Expected exactly one response, got {len(responses)}.")
    return responses[0]
