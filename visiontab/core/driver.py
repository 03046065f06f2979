from __future__ import annotations
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence, Union

from .validation import validate_config, validate_input_schema
from .annotations import AnnotateFileResponse, AnnotateImageResponse
from .backends.pandas import DataFrameBackend, PandasBackend
from .builders import NamingContext, pages_schema
from .compatibility import validate_schema
from .config import DocumentExtractorConfig, ExtractorConfig
from .exceptions import ConfigurationError, ExternalCallError, TransformationError
from .features import ImageFeature
from .schema import Field, Schema, SchemaType
from .transformer import FileAnnotationTransformer, ImageAnnotationTransformer
from .types import Record
from ..rest.models import ImageContext

ERROR_SCHEMA = Schema.record_of("error", [Field.of("error", Schema.of(SchemaType.STRING))])
ERROR_CODE = 400


class ImageAnnotator(Protocol):
    def annotate_image(
        self,
        image: Union[str, bytes],
        features: Sequence[str],
        image_context: Optional[ImageContext] = None,
    ) -> AnnotateImageResponse: ...


class DocumentAnnotator(Protocol):
    def annotate_file(
        self,
        document: Union[str, bytes],
        mime_type: str,
        features: Sequence[str],
        image_context: Optional[ImageContext] = None,
        pages: Optional[Sequence[int]] = None,
    ) -> AnnotateFileResponse: ...


@dataclass(frozen=True)
class InvalidEntry:
    error_code: int
    error_msg: str
    invalid_record: Record


class Emitter(Protocol):
    def emit(self, record: Record) -> None: ...

    def emit_error(self, entry: InvalidEntry) -> None: ...


@dataclass
class CollectingEmitter:
    """Emitter that keeps everything in memory; handy for batches and tests."""
    records: List[Record] = field(default_factory=list)
    errors: List[InvalidEntry] = field(default_factory=list)

    def emit(self, record: Record) -> None:
        self.records.append(record)

    def emit_error(self, entry: InvalidEntry) -> None:
        self.errors.append(entry)

    def to_dataframe(self, schema: Optional[Schema] = None, backend: Optional[DataFrameBackend] = None):
        return (backend or PandasBackend()).to_dataframe(self.records, schema)

    def clear(self) -> None:
        self.records.clear()
        self.errors.clear()


class TransformState(Enum):
    RESOLVING_INPUT = "resolving input"
    INVOKING_EXTERNAL_API = "invoking the annotation API"
    TRANSFORMING = "transforming the response"
    EMITTING = "emitting the record"


class TransformOutcome(Enum):
    EMITTED = "emitted"
    EMITTED_ERROR = "emitted_error"


@dataclass(frozen=True)
class InputSource:
    """Where the image comes from: a field holding its URI, or a field holding its bytes."""
    field: str
    is_content: bool = False

    @classmethod
    def from_config(cls, config: ExtractorConfig) -> "InputSource":
        if config.content_field:
            return cls(config.content_field, is_content=True)
        return cls(config.path_field)

    def resolve(self, record: Record) -> Union[str, bytes]:
        value = record.get(self.field)
        if self.is_content:
            if not isinstance(value, (bytes, bytearray, memoryview)) or len(value) == 0:
                raise TransformationError(f"Field '{self.field}' must hold non-empty image bytes.")
            return bytes(value)

        if not isinstance(value, str) or not value.strip():
            raise TransformationError(f"Field '{self.field}' must hold a non-empty image path.")
        return value


class ExtractorTransform:
    """
    Per-record driver: read the image reference, call the annotation API, map the
    response into the output schema and emit either the record or one error entry.

    Lifecycle: ``configure`` (once, with the input schema) derives and validates the
    output schema; ``initialize`` binds the annotator; ``transform`` runs per record.

    Example:
        >>> stage = ExtractorTransform(ExtractorConfig(feature="Labels", path_field="path"))
        >>> stage.configure(input_schema)
        >>> stage.initialize(VisionClient(headers=auth_headers))
        >>> stage.transform({"path": "gs://bucket/cat.jpg"}, emitter)
        <TransformOutcome.EMITTED: 'emitted'>
    """
    transformer_class = ImageAnnotationTransformer

    def __init__(self, config: ExtractorConfig) -> None:
        self.config = config
        self.feature: Optional[ImageFeature] = None
        self.output_schema: Optional[Schema] = None
        self._source: Optional[InputSource] = None
        self._transformer: Optional[ImageAnnotationTransformer] = None
        self._image_context: Optional[ImageContext] = None
        self._annotator: Any = None

    def configure(self, input_schema: Optional[Schema] = None) -> Schema:
        _, failures = validate_config(self.config)
        failures.extend(validate_input_schema(self.config, input_schema))
        if failures:
            raise ConfigurationError(failures)

        feature = ImageFeature.from_display_name(self.config.feature)
        derived = self.derive_schema(feature, input_schema)
        declared = Schema.parse_json(self.config.schema) if self.config.schema else None
        validate_schema(declared, derived).raise_for_failures()

        self.feature = feature
        self.output_schema = declared or derived
        self._source = InputSource.from_config(self.config)
        self._image_context = feature.image_context(self.config)

        if self.config.logger:
            self.config.logger.info("Configured '%s' extractor writing to field '%s'.",
                                    feature.display_name, self.config.output_field)
        return self.output_schema

    def derive_schema(self, feature: ImageFeature, input_schema: Optional[Schema] = None) -> Schema:
        fields = list(input_schema.fields) if input_schema is not None else []
        fields.append(Field.of(self.config.output_field, self.feature_schema(feature)))
        name = input_schema.name if input_schema is not None and input_schema.name else "record"
        return Schema.record_of(name, fields)

    def feature_schema(self, feature: ImageFeature) -> Schema:
        return feature.build_schema(NamingContext(self.config.output_field))

    def initialize(self, annotator: Union[ImageAnnotator, DocumentAnnotator]) -> None:
        if self.output_schema is None:
            self.configure()

        self._annotator = annotator
        self._transformer = self.transformer_class(self.feature, self.config.output_field, self.output_schema)

    def transform(self, record: Record, emitter: Emitter) -> TransformOutcome:
        """Emit exactly one output record or exactly one error entry for ``record``."""
        if self._transformer is None:
            raise RuntimeError("initialize() must be called before transform().")

        state = TransformState.RESOLVING_INPUT
        try:
            value = self._source.resolve(record)

            state = TransformState.INVOKING_EXTERNAL_API
            started = time.perf_counter()
            response = self.annotate(value)
            if self.config.metrics_observe:
                self.config.metrics_observe("extractor.annotate_seconds", time.perf_counter() - started)

            state = TransformState.TRANSFORMING
            out = self._transformer.transform(record, response)

            state = TransformState.EMITTING
            emitter.emit(out)
        except Exception as e:
            message = str(e) or type(e).__name__
            if self.config.logger:
                self.config.logger.warning("Record failed while %s: %s", state.value, message)
            if self.config.metrics_increment:
                self.config.metrics_increment("extractor.record_errors", 1)

            emitter.emit_error(InvalidEntry(ERROR_CODE, message, {"error": message}))
            return TransformOutcome.EMITTED_ERROR

        if self.config.metrics_increment:
            self.config.metrics_increment("extractor.records_emitted", 1)
        return TransformOutcome.EMITTED

    def annotate(self, value: Union[str, bytes]) -> Any:
        try:
            response = self._annotator.annotate_image(value, [self.feature.feature_type], self._image_context)
        except ExternalCallError:
            raise
        except Exception as e:
            raise ExternalCallError(f"Image annotation failed: {e}") from e

        _raise_for_status(response)
        return response


class DocumentExtractorTransform(ExtractorTransform):
    """Extractor for PDF, TIFF and GIF documents; the output field holds one record per page."""
    transformer_class = FileAnnotationTransformer

    config: DocumentExtractorConfig

    def feature_schema(self, feature: ImageFeature) -> Schema:
        naming = NamingContext(self.config.output_field)
        return pages_schema(feature.build_schema(naming.child("feature")), naming)

    def annotate(self, value: Union[str, bytes]) -> Any:
        try:
            response = self._annotator.annotate_file(
                value,
                self.config.mime_type,
                [self.feature.feature_type],
                self._image_context,
                self.config.pages_list(),
            )
        except ExternalCallError:
            raise
        except Exception as e:
            raise ExternalCallError(f"File annotation failed: {e}") from e

        _raise_for_status(response)
        return response


def _raise_for_status(response: Any) -> None:
    error = response.error if isinstance(response, (AnnotateImageResponse, AnnotateFileResponse)) else None
    if error is not None and error.code:
        raise ExternalCallError(error.message or f"Annotation failed with code {error.code}")

    if isinstance(response, AnnotateFileResponse):
        for i, page in enumerate(response.responses, start=1):
            if page.error is not None and page.error.code:
                message = page.error.message or f"annotation failed with code {page.error.code}"
                raise ExternalCallError(f"Page {i}: {message}")
