from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.annotations import AnnotateFileResponse, AnnotateImageResponse, BoundingPoly, InputConfig, VisionModel


class Feature(VisionModel):
    type: str
    max_results: Optional[int] = None


class ImageSource(VisionModel):
    image_uri: Optional[str] = None


class Image(VisionModel):
    content: Optional[str] = None
    source: Optional[ImageSource] = None


class CropHintsParams(VisionModel):
    aspect_ratios: List[float] = []


class WebDetectionParams(VisionModel):
    include_geo_results: bool = False


class ProductSearchParams(VisionModel):
    product_set: str
    product_categories: List[str] = []
    filter: Optional[str] = None
    bounding_poly: Optional[BoundingPoly] = None


class ImageContext(VisionModel):
    language_hints: List[str] = []
    crop_hints_params: Optional[CropHintsParams] = None
    web_detection_params: Optional[WebDetectionParams] = None
    product_search_params: Optional[ProductSearchParams] = None


class AnnotateImageRequest(VisionModel):
    image: Image
    features: List[Feature]
    image_context: Optional[ImageContext] = None


class AnnotateFileRequest(VisionModel):
    input_config: InputConfig
    features: List[Feature]
    image_context: Optional[ImageContext] = None
    pages: List[int] = []


class BatchAnnotateImagesRequest(BaseModel):
    requests: List[AnnotateImageRequest]


class BatchAnnotateImagesResponse(BaseModel):
    responses: List[AnnotateImageResponse] = Field(default_factory=list)


class BatchAnnotateFilesRequest(BaseModel):
    requests: List[AnnotateFileRequest]


class BatchAnnotateFilesResponse(BaseModel):
    responses: List[AnnotateFileResponse] = Field(default_factory=list)


def to_wire(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
