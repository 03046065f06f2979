from __future__ import annotations
import math
from typing import List, Optional, Tuple

from .config import (
    DOCUMENT_MIME_TYPES,
    MAX_DOCUMENT_PAGES,
    PRODUCT_CATEGORIES,
    DocumentExtractorConfig,
    ExtractorConfig,
)
from .exceptions import ConfigFailure, ConfigurationError
from .features import ImageFeature
from .schema import Schema, SchemaType


def validate_config(config: ExtractorConfig, *, raise_on_error: bool = False) -> Tuple[bool, List[ConfigFailure]]:
    """Check an extractor configuration, collecting every failure before reporting."""
    failures: List[ConfigFailure] = []

    def err(msg: str, field: str) -> None:
        failures.append(ConfigFailure(field, msg))

    feature = ImageFeature.from_display_name(config.feature)
    if feature is None:
        allowed = [f.display_name for f in ImageFeature]
        err(f"Unknown image feature '{config.feature}'. Allowed: {allowed}", "feature")

    if not isinstance(config.output_field, str) or not config.output_field.strip():
        err("'output_field' must be a non-empty string.", "output_field")

    if config.path_field and config.content_field:
        err("'path_field' and 'content_field' are mutually exclusive; set only one.", "path_field")
    elif not config.path_field and not config.content_field:
        err("One of 'path_field' or 'content_field' must be set.", "path_field")

    try:
        ratios = config.aspect_ratios_list()
    except ValueError:
        err(f"'aspect_ratios' must be comma separated numbers, got '{config.aspect_ratios}'.", "aspect_ratios")
    else:
        if any(not math.isfinite(r) or r <= 0 for r in ratios):
            err("'aspect_ratios' must all be finite and greater than 0.", "aspect_ratios")

    if feature is ImageFeature.MULTIPLE_OBJECTS:
        _validate_product_search(config, err)

    if isinstance(config, DocumentExtractorConfig):
        _validate_document(config, err)

    if config.schema:
        try:
            declared = Schema.parse_json(config.schema)
        except ConfigurationError as e:
            failures.extend(e.failures)
        else:
            if declared.type != SchemaType.RECORD:
                err("Output schema must be a record.", "schema")
            elif config.output_field and declared.get_field(config.output_field) is None:
                err(f"Output schema has no field '{config.output_field}'.", "schema")

    return _finish(failures, raise_on_error)


def validate_input_schema(config: ExtractorConfig, input_schema: Optional[Schema]) -> List[ConfigFailure]:
    """Check the fields the extractor reads from, and writes next to, the input records."""
    failures: List[ConfigFailure] = []
    if input_schema is None:
        return failures

    if input_schema.type != SchemaType.RECORD:
        return [ConfigFailure("input_schema", "Input schema must be a record.")]

    if config.path_field:
        f = input_schema.get_field(config.path_field)
        if f is None:
            failures.append(ConfigFailure("path_field", f"Input has no field '{config.path_field}'."))
        elif f.schema.non_nullable().type != SchemaType.STRING:
            failures.append(ConfigFailure(
                "path_field", f"Field '{config.path_field}' must be a string, found {f.schema.display()}."))

    if config.content_field:
        f = input_schema.get_field(config.content_field)
        if f is None:
            failures.append(ConfigFailure("content_field", f"Input has no field '{config.content_field}'."))
        elif f.schema.non_nullable().type != SchemaType.BYTES:
            failures.append(ConfigFailure(
                "content_field", f"Field '{config.content_field}' must be bytes, found {f.schema.display()}."))

    if config.output_field and input_schema.get_field(config.output_field) is not None:
        failures.append(ConfigFailure(
            "output_field", f"Output field '{config.output_field}' already exists in the input."))

    return failures


def _validate_product_search(config: ExtractorConfig, err) -> None:
    if not config.product_set:
        err("'product_set' is required for product search.", "product_set")

    unknown = [c for c in config.product_categories_list() if c not in PRODUCT_CATEGORIES]
    if unknown:
        err(f"Unknown product categories {unknown}. Allowed: {list(PRODUCT_CATEGORIES)}", "product_categories")

    try:
        vertices = config.bounding_polygon_vertices()
    except ValueError as e:
        # json.JSONDecodeError is a ValueError
        err(f"Invalid bounding polygon: {e}", "bounding_polygon")
    else:
        for i, v in enumerate(vertices):
            if not all(isinstance(v.get(k, 0), int) and not isinstance(v.get(k, 0), bool) for k in ("x", "y")):
                err(f"Vertex {i} of the bounding polygon must have integer 'x' and 'y'.", "bounding_polygon")


def _validate_document(config: DocumentExtractorConfig, err) -> None:
    if config.mime_type not in DOCUMENT_MIME_TYPES:
        err(f"Unsupported mime type '{config.mime_type}'. Allowed: {list(DOCUMENT_MIME_TYPES)}", "mime_type")

    try:
        pages = config.pages_list()
    except ValueError:
        err(f"'pages' must be comma separated page numbers, got '{config.pages}'.", "pages")
        return

    if len(pages) > MAX_DOCUMENT_PAGES:
        err(f"At most {MAX_DOCUMENT_PAGES} pages can be annotated, got {len(pages)}.", "pages")
    if any(p < 1 for p in pages):
        err("Page numbers start at 1.", "pages")
    if len(set(pages)) != len(pages):
        err("Page numbers must be unique.", "pages")


def _finish(failures: List[ConfigFailure], raise_on_error: bool) -> Tuple[bool, List[ConfigFailure]]:
    if failures and raise_on_error:
        raise ConfigurationError(failures)
    return (len(failures) == 0, failures)
