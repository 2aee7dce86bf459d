"""Attribute reconciliation: normalizer, option matcher, size families and policy."""

from .normalizer import normalize
from .matcher import MatchTier, OptionMatch, match, match_option
from .size_family import (
    SizeFamily,
    filter_by_size_family,
    get_size_type_value,
    is_size_aspect_name,
    resolve_size_family,
)
from .policy import ReconciliationPolicy, reconcile, validate_definitions
from .heuristics import apply_relational_defaults, infer_department, infer_size_type
from .facts_builder import facts_from_analysis

__all__ = [
    "normalize",
    "MatchTier",
    "OptionMatch",
    "match",
    "match_option",
    "SizeFamily",
    "filter_by_size_family",
    "get_size_type_value",
    "is_size_aspect_name",
    "resolve_size_family",
    "ReconciliationPolicy",
    "reconcile",
    "validate_definitions",
    "apply_relational_defaults",
    "infer_department",
    "infer_size_type",
    "facts_from_analysis",
]
