"""AI modules for photo analysis and item-specifics suggestions."""

from .llm_client import LLMClient
from .listing_analyzer import ListingAnalyzer

__all__ = ["LLMClient", "ListingAnalyzer"]
