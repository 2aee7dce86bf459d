"""eBay item-specifics reconciliation for listings built from product photos."""

from .errors import SchemaError
from .models.aspect import AttributeDefinition, ReconciledAttribute
from .models.facts import DetectedFacts
from .reconcile.policy import reconcile

__all__ = [
    "AttributeDefinition",
    "DetectedFacts",
    "ReconciledAttribute",
    "SchemaError",
    "reconcile",
]
