"""Map Cloud Vision annotation responses onto typed tabular records."""
from .core import (
    ConfigurationError,
    DocumentExtractorConfig,
    DocumentExtractorTransform,
    ExtractorConfig,
    ExtractorConfigBuilder,
    ExtractorTransform,
    ImageFeature,
    Schema,
    TransformationError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "TransformationError",
    "Schema",
    "ImageFeature",
    "ExtractorConfig",
    "DocumentExtractorConfig",
    "ExtractorConfigBuilder",
    "ExtractorTransform",
    "DocumentExtractorTransform",
]
