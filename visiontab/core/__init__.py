from .exceptions import (
    ConfigFailure,
    ConfigurationError,
    ExternalCallError,
    TransformationError,
    VisionTabError,
)
from .schema import Field, Schema, SchemaType
from .builders import NamingContext, build_schema, builder_kinds, pages_schema
from .config import DocumentExtractorConfig, ExtractorConfig
from .features import ImageFeature
from .registry import MapperRegistry, get_registry, register_mapper
from .context import MappingContext
from .transformer import FileAnnotationTransformer, ImageAnnotationTransformer
from .compatibility import ValidationResult, validate_schema
from .backends.pandas import DataFrameBackend, PandasBackend
from .driver import (
    ERROR_SCHEMA,
    CollectingEmitter,
    DocumentExtractorTransform,
    Emitter,
    ExtractorTransform,
    InputSource,
    InvalidEntry,
    TransformOutcome,
    TransformState,
)
from .builder.config import ExtractorConfigBuilder

__all__ = [
    "VisionTabError",
    "ConfigFailure",
    "ConfigurationError",
    "TransformationError",
    "ExternalCallError",
    "Field",
    "Schema",
    "SchemaType",
    "NamingContext",
    "build_schema",
    "builder_kinds",
    "pages_schema",
    "ExtractorConfig",
    "DocumentExtractorConfig",
    "ImageFeature",
    "MapperRegistry",
    "get_registry",
    "register_mapper",
    "MappingContext",
    "ImageAnnotationTransformer",
    "FileAnnotationTransformer",
    "ValidationResult",
    "validate_schema",
    "DataFrameBackend",
    "PandasBackend",
    "ERROR_SCHEMA",
    "CollectingEmitter",
    "Emitter",
    "InvalidEntry",
    "InputSource",
    "TransformState",
    "TransformOutcome",
    "ExtractorTransform",
    "DocumentExtractorTransform",
    "ExtractorConfigBuilder",
]
