"""Pipeline modules for the listing flow."""

from .orchestrator import reconcile_request, run_listing_pipeline
from .publish import validate_publish_payload

__all__ = [
    "reconcile_request",
    "run_listing_pipeline",
    "validate_publish_payload",
]
