# ======================= JSON:API response normalization =======================
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)


def parse_body(body: Any) -> Any:
    """Decode a text body as JSON; text that is not JSON is returned unchanged."""
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str):
        return body
    try:
        return json.loads(body)
    except ValueError:
        logger.debug("Response body is not JSON, passing it through")
        return body


def entity_href(entity: Mapping[str, Any]) -> Any:
    links = entity.get("links")
    if not isinstance(links, Mapping):
        return None
    self_link = links.get("self")
    if isinstance(self_link, Mapping) and self_link.get("href") is not None:
        return self_link["href"]
    return links.get("href")


def simplify_entity(entity: Any) -> Any:
    """
    Flatten a JSON:API resource object.

    {"id", "type", "links": {"self": {"href"}}, "attributes": {...}} becomes
    {"id", "type", "href", **attributes}. Attributes are merged last, so an
    attribute named id, type or href replaces the envelope value.
    Non-mapping values are returned as they are.
    """
    if not isinstance(entity, Mapping):
        return entity

    record: Dict[str, Any] = {
        "id": entity.get("id"),
        "type": entity.get("type"),
        "href": entity_href(entity),
    }
    attributes = entity.get("attributes")
    if isinstance(attributes, Mapping):
        record.update(attributes)
    return record


def normalize_response(body: Any, simplify: bool = True, split_items: bool = True) -> List[Any]:
    """
    Turn a JSON:API response body into output records.

    - data is a list: one record per entity when split_items, otherwise a
      single {"data": [...]} record; entity order is preserved
    - data is an object: one record
    - anything else (including text that is not JSON): one record equal
      to the body

    The input is never mutated, so normalizing the same body twice yields
    equal output.
    """
    parsed = parse_body(body)
    if not isinstance(parsed, Mapping):
        return [parsed]

    data = parsed.get("data")

    def shape(entity: Any) -> Any:
        return simplify_entity(entity) if simplify else entity

    if isinstance(data, list):
        entities = [shape(entity) for entity in data]
        if split_items:
            return entities
        return [{"data": entities}]

    if isinstance(data, Mapping):
        return [shape(data)]

    return [parsed]
