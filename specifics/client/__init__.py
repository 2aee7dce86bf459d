"""Clients for the services around the listing flow."""

from .ebay import EbayTaxonomyClient, TokenCache
from .images import fetch_image_data_urls, optimize_image_url
from .session_store import SessionStore
from .webhook import forward_to_webhook

__all__ = [
    "EbayTaxonomyClient",
    "TokenCache",
    "fetch_image_data_urls",
    "optimize_image_url",
    "SessionStore",
    "forward_to_webhook",
]
