"""
Pydantic models for the listing specifics service.
All data contracts are defined here for strict validation.
"""

from .aspect import (
    AttributeDefinition,
    AttributeValue,
    MultiValue,
    ReconciledAttribute,
    SingleValue,
)
from .facts import DetectedFacts
from .listing import (
    CategorySuggestion,
    CategorySuggestions,
    DetectedItem,
    ListingAnalysis,
    ListingResult,
    PublishPayload,
    PublishSpecific,
    SpecificsSuggestion,
    SuggestedSpecific,
)

__all__ = [
    # Aspects
    "AttributeDefinition",
    "AttributeValue",
    "SingleValue",
    "MultiValue",
    "ReconciledAttribute",
    # Facts
    "DetectedFacts",
    # Listing
    "DetectedItem",
    "ListingAnalysis",
    "CategorySuggestion",
    "CategorySuggestions",
    "SuggestedSpecific",
    "SpecificsSuggestion",
    "ListingResult",
    "PublishSpecific",
    "PublishPayload",
]
