"""
Option matcher - maps one candidate value onto an aspect's allowed options.
"""
from enum import Enum
from typing import NamedTuple, Sequence

from .normalizer import normalize


class MatchTier(str, Enum):
    """How a candidate was resolved, strongest first."""
    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"
    FREE_TEXT = "free_text"
    NONE = "none"


class OptionMatch(NamedTuple):
    value: str
    tier: MatchTier

    @property
    def matched_option(self) -> bool:
        return self.tier in (MatchTier.EXACT, MatchTier.PREFIX, MatchTier.SUBSTRING)


NO_MATCH = OptionMatch("", MatchTier.NONE)


def match_option(candidate: str, options: Sequence[str], selection_only: bool) -> OptionMatch:
    """
    Resolve a candidate against options in strict priority order:
    exact, prefix (either direction), substring (either direction),
    then free text unless selection_only.

    Ties inside a tier go to the first option in list order. The returned
    option keeps the marketplace casing.
    """
    needle = normalize(candidate)
    if not needle:
        return NO_MATCH

    normalized = [(opt, normalize(opt)) for opt in options]
    normalized = [(opt, n) for opt, n in normalized if n]

    for opt, n in normalized:
        if n == needle:
            return OptionMatch(opt, MatchTier.EXACT)

    for opt, n in normalized:
        if n.startswith(needle) or needle.startswith(n):
            return OptionMatch(opt, MatchTier.PREFIX)

    for opt, n in normalized:
        if needle in n or n in needle:
            return OptionMatch(opt, MatchTier.SUBSTRING)

    if selection_only:
        return NO_MATCH
    return OptionMatch(candidate, MatchTier.FREE_TEXT)


def match(candidate: str, options: Sequence[str], selection_only: bool) -> str:
    """Matched option, free-text candidate, or "" when nothing may be assigned."""
    return match_option(candidate, options, selection_only).value
