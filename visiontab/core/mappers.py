from __future__ import annotations

from typing import Any, Dict, List, NamedTuple, Optional

from .annotations import (
    AnnotateImageResponse,
    Block,
    BoundingPoly,
    BreakType,
    Color,
    LatLng,
    Position,
)
from .context import MappingContext
from .exceptions import TransformationError
from .registry import register_mapper


class PageResponse(NamedTuple):
    """One page of a document response together with its 1-based page number."""
    page: int
    response: AnnotateImageResponse


_BREAKS = {
    BreakType.SPACE: " ",
    BreakType.SURE_SPACE: " ",
    BreakType.EOL_SURE_SPACE: "\n",
    BreakType.LINE_BREAK: "\n",
    BreakType.HYPHEN: "-\n",
}


def _vertices(poly: Optional[BoundingPoly]) -> List[Any]:
    return poly.vertices if poly is not None else []

def _normalized_vertices(poly: Optional[BoundingPoly]) -> List[Any]:
    return poly.normalized_vertices if poly is not None else []

def block_text(block: Block) -> str:
    """Text of a block, rebuilt from its symbols and the breaks detected after them."""
    parts: List[str] = []
    for paragraph in block.paragraphs:
        for word in paragraph.words:
            for symbol in word.symbols:
                parts.append(symbol.text)
                prop = symbol.text_property
                if prop is not None and prop.detected_break is not None:
                    parts.append(_BREAKS.get(prop.detected_break.type, ""))
    return "".join(parts).rstrip()


# Geometry

def _map_vertex(v, ctx: MappingContext) -> Dict[str, Any]:
    return {"x": v.x, "y": v.y}
register_mapper("vertex", _map_vertex)

def _map_normalized_vertex(v, ctx: MappingContext) -> Dict[str, Any]:
    return {"x": v.x, "y": v.y}
register_mapper("normalized_vertex", _map_normalized_vertex)

def _map_location(loc, ctx: MappingContext) -> Dict[str, Any]:
    lat_lng = loc.lat_lng or LatLng()
    return {"latitude": lat_lng.latitude, "longitude": lat_lng.longitude}
register_mapper("location", _map_location)


# Faces

def _map_face_landmark(lm, ctx: MappingContext) -> Dict[str, Any]:
    pos = lm.position or Position()
    return {"type": lm.type.name, "x": pos.x, "y": pos.y, "z": pos.z}
register_mapper("face_landmark", _map_face_landmark)

def _map_face(face, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "rollAngle": face.roll_angle,
        "panAngle": face.pan_angle,
        "tiltAngle": face.tilt_angle,
        "detectionConfidence": face.detection_confidence,
        "landmarkingConfidence": face.landmarking_confidence,
        "angerLikelihood": face.anger_likelihood.name,
        "joyLikelihood": face.joy_likelihood.name,
        "surpriseLikelihood": face.surprise_likelihood.name,
        "blurredLikelihood": face.blurred_likelihood.name,
        "underExposedLikelihood": face.under_exposed_likelihood.name,
        "sorrowLikelihood": face.sorrow_likelihood.name,
        "headwearLikelihood": face.headwear_likelihood.name,
        "boundingPoly": ctx.map_many("vertex", _vertices(face.bounding_poly), "boundingPoly"),
        "fdBoundingPoly": ctx.map_many("vertex", _vertices(face.fd_bounding_poly), "fdBoundingPoly"),
        "landmarks": ctx.map_many("face_landmark", face.landmarks, "landmarks"),
    }
register_mapper("face", _map_face)


# Entities

def _map_entity(entity, ctx: MappingContext) -> Dict[str, Any]:
    out = {
        "mid": entity.mid or None,
        "locale": entity.locale or None,
        "description": entity.description,
        "score": entity.score,
        "topicality": entity.topicality,
    }
    # label, logo and landmark share one shape; geometry only where the schema asks for it
    if ctx.has_field("position"):
        out["position"] = ctx.map_many("vertex", _vertices(entity.bounding_poly), "position")
    if ctx.has_field("locations"):
        out["locations"] = ctx.map_many("location", entity.locations, "locations")
    return out
register_mapper("label", _map_entity)
register_mapper("logo", _map_entity)
register_mapper("landmark", _map_entity)

def _map_text(entity, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "locale": entity.locale or None,
        "description": entity.description,
        "position": ctx.map_many("vertex", _vertices(entity.bounding_poly), "position"),
    }
register_mapper("text", _map_text)

def _map_localized_object(obj, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "mid": obj.mid or None,
        "languageCode": obj.language_code or None,
        "name": obj.name,
        "score": obj.score,
        "position": ctx.map_many("normalized_vertex", _normalized_vertices(obj.bounding_poly), "position"),
    }
register_mapper("localized_object", _map_localized_object)

def _map_safe_search(annotation, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "adult": annotation.adult.name,
        "spoof": annotation.spoof.name,
        "medical": annotation.medical.name,
        "violence": annotation.violence.name,
        "racy": annotation.racy.name,
    }
register_mapper("safe_search", _map_safe_search)


# Image properties and crop hints

def _map_color(info, ctx: MappingContext) -> Dict[str, Any]:
    color = info.color or Color()
    return {
        "red": color.red,
        "green": color.green,
        "blue": color.blue,
        "alpha": color.alpha,
        "score": info.score,
        "pixelFraction": info.pixel_fraction,
    }
register_mapper("color", _map_color)

def _map_crop_hint(hint, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "position": ctx.map_many("vertex", _vertices(hint.bounding_poly), "position"),
        "confidence": hint.confidence,
        "importanceFraction": hint.importance_fraction,
    }
register_mapper("crop_hint", _map_crop_hint)


# Web detection

def _map_web_entity(entity, ctx: MappingContext) -> Dict[str, Any]:
    return {"entityId": entity.entity_id, "score": entity.score, "description": entity.description}
register_mapper("web_entity", _map_web_entity)

def _map_web_image(image, ctx: MappingContext) -> Dict[str, Any]:
    return {"url": image.url, "score": image.score}
register_mapper("web_image", _map_web_image)

def _map_web_page(page, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "url": page.url,
        "score": page.score,
        "pageTitle": page.page_title,
        "fullMatchingImages": ctx.map_many("web_image", page.full_matching_images, "fullMatchingImages"),
        "partialMatchingImages": ctx.map_many("web_image", page.partial_matching_images, "partialMatchingImages"),
    }
register_mapper("web_page", _map_web_page)

def _map_web_label(label, ctx: MappingContext) -> Dict[str, Any]:
    return {"label": label.label, "languageCode": label.language_code}
register_mapper("web_label", _map_web_label)

def _map_web_detection(web, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "webEntities": ctx.map_many("web_entity", web.web_entities, "webEntities"),
        "fullMatchingImages": ctx.map_many("web_image", web.full_matching_images, "fullMatchingImages"),
        "partialMatchingImages": ctx.map_many("web_image", web.partial_matching_images, "partialMatchingImages"),
        "pagesWithMatchingImages": ctx.map_many("web_page", web.pages_with_matching_images, "pagesWithMatchingImages"),
        "visuallySimilarImages": ctx.map_many("web_image", web.visually_similar_images, "visuallySimilarImages"),
        "bestGuessLabels": ctx.map_many("web_label", web.best_guess_labels, "bestGuessLabels"),
    }
register_mapper("web_detection", _map_web_detection)


# Product search

def _map_key_value(kv, ctx: MappingContext) -> Dict[str, Any]:
    return {"key": kv.key, "value": kv.value}
register_mapper("key_value", _map_key_value)

def _map_product(product, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "name": product.name,
        "displayName": product.display_name,
        "description": product.description,
        "productCategory": product.product_category,
        "productLabels": ctx.map_many("key_value", product.product_labels, "productLabels"),
    }
register_mapper("product", _map_product)

def _map_product_result(result, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "image": result.image,
        "score": result.score,
        "product": ctx.map_one("product", result.product, "product"),
    }
register_mapper("product_result", _map_product_result)

def _map_grouped_result(group, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "position": ctx.map_many("vertex", _vertices(group.bounding_poly), "position"),
        "results": ctx.map_many("product_result", group.results, "results"),
    }
register_mapper("grouped_result", _map_grouped_result)

def _map_product_search(results, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "indexTime": results.index_time,
        "results": ctx.map_many("product_result", results.results, "results"),
        "productGroupedResults": ctx.map_many("grouped_result", results.product_grouped_results, "productGroupedResults"),
    }
register_mapper("product_search", _map_product_search)


# Full text

def _map_text_block(block, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "blockType": block.block_type.name,
        "confidence": block.confidence,
        "boundingBox": ctx.map_many("vertex", _vertices(block.bounding_box), "boundingBox"),
        "text": block_text(block),
    }
register_mapper("text_block", _map_text_block)

def _map_text_page(page, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "width": page.width,
        "height": page.height,
        "confidence": page.confidence,
        "blocks": ctx.map_many("text_block", page.blocks, "blocks"),
    }
register_mapper("text_page", _map_text_page)

def _map_full_text(annotation, ctx: MappingContext) -> Dict[str, Any]:
    return {
        "text": annotation.text,
        "pages": ctx.map_many("text_page", annotation.pages, "pages"),
    }
register_mapper("full_text", _map_full_text)


# Documents

def _map_page(page: PageResponse, ctx: MappingContext) -> Dict[str, Any]:
    if ctx.feature is None:
        raise TransformationError(f"{ctx.path}: page mapping requires the selected feature on the context")
    return {"page": page.page, "feature": ctx.map_feature(ctx.feature, page.response, "feature")}
register_mapper("page", _map_page)
