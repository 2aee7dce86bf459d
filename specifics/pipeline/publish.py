"""
Publish check - a finished draft must be complete before it goes to eBay.
"""
import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from ..models.listing import PublishPayload


logger = logging.getLogger(__name__)

SPECIFICS_ERROR = "item_specifics must be a list of {name, value}."


def validate_publish_payload(body: Optional[Mapping[str, Any]]) -> tuple[Optional[PublishPayload], list[str]]:
    """
    Check a publish request and collect every problem at once.

    Returns:
        (payload, errors). The payload is None when errors is not empty.
    """
    if body is not None and not isinstance(body, Mapping):
        return None, ["Publish request must be a JSON object."]

    try:
        payload = PublishPayload.model_validate(dict(body or {}))
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        logger.warning(f"Publish payload rejected: {errors}")
        return None, errors

    errors: list[str] = []
    if not payload.title.strip():
        errors.append("Title is required.")
    if not payload.description.strip():
        errors.append("Description is required.")
    if not payload.category:
        errors.append("Category is required.")
    if not payload.item_specifics:
        errors.append(SPECIFICS_ERROR)
    if not payload.image_urls:
        errors.append("At least one image URL is required.")

    if errors:
        logger.warning(f"Publish payload incomplete: {errors}")
        return None, errors

    logger.info(
        f"Publish payload ready: {payload.title!r}, "
        f"{len(payload.item_specifics)} specifics, {len(payload.image_urls)} images"
    )
    return payload, []
