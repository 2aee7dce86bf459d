"""
Category-agnostic heuristics layered around the reconciliation policy.
"""
import logging
import re
from typing import NamedTuple, Optional, Sequence

from ..models.aspect import AttributeDefinition, ReconciledAttribute
from .normalizer import normalize


logger = logging.getLogger(__name__)


# Women before Men: "women" contains "men"
_DEPARTMENTS = [
    (re.compile(r"\bwomen'?s?\b", re.IGNORECASE), "Women"),
    (re.compile(r"\bmen'?s?\b", re.IGNORECASE), "Men"),
    (re.compile(r"\bgirls?'?\b", re.IGNORECASE), "Girls"),
    (re.compile(r"\bboys?'?\b", re.IGNORECASE), "Boys"),
    (re.compile(r"\bunisex\b", re.IGNORECASE), "Unisex Adult"),
]


def infer_department(category_path: Optional[str]) -> str:
    """Department from the category path, "" when it says nothing."""
    path = normalize(category_path)
    for pattern, department in _DEPARTMENTS:
        if pattern.search(path):
            return department
    return ""


def infer_size_type(
    size: Optional[str] = None,
    title: Optional[str] = None,
    category_path: Optional[str] = None,
) -> str:
    """Size Type guess from the size label, title and category path."""
    hay = normalize(" ".join(p for p in (size, title, category_path) if p))
    if "petite" in hay:
        return "Petite"
    if re.search(r"\btall\b|\blong\b(?!\s*sleeve)", hay):
        return "Tall"
    if any(k in hay for k in ("plus", "extended", "big & tall", "big and tall")):
        return "Plus"
    return "Regular"


class RelationalDefault(NamedTuple):
    """Fill an empty aspect with an option when the listing text says so."""
    aspect: re.Pattern
    text: re.Pattern
    option: str


RELATIONAL_DEFAULTS: list[RelationalDefault] = [
    RelationalDefault(re.compile(r"^closure$"), re.compile(r"puffer|down|insulat"), "Zipper"),
    RelationalDefault(re.compile(r"dress length|coat length"), re.compile(r"maxi"), "Long"),
    RelationalDefault(re.compile(r"dress length|coat length"), re.compile(r"\bmini\b"), "Short"),
    RelationalDefault(re.compile(r"dress length|coat length"), re.compile(r"\bmidi\b"), "Midi"),
    RelationalDefault(re.compile(r"lining material"), re.compile(r"lining.*polyester"), "Polyester"),
    RelationalDefault(re.compile(r"outer shell|shell material"), re.compile(r"shell.*nylon"), "Nylon"),
    RelationalDefault(re.compile(r"insulation material|\bfill\b"), re.compile(r"\bdown\b"), "Down"),
]


def apply_relational_defaults(
    attributes: Sequence[ReconciledAttribute],
    definitions: Sequence[AttributeDefinition],
    text: str,
) -> list[ReconciledAttribute]:
    """
    Fill blank aspects from simple text cues (puffer -> Zipper, maxi -> Long).

    Only blank aspects are touched and only with an option the aspect
    actually offers, so selection-only containment still holds. The last
    matching rule for an aspect wins.
    """
    by_name = {d.name.lower(): d for d in definitions}
    hay = normalize(text)
    out: list[ReconciledAttribute] = []

    for attr in attributes:
        definition = by_name.get(attr.name.lower())
        if definition is None or not attr.is_blank:
            out.append(attr)
            continue

        filled = attr
        aspect_name = definition.name.lower()
        for rule in RELATIONAL_DEFAULTS:
            if not rule.aspect.search(aspect_name) or rule.option not in definition.options:
                continue
            if rule.text.search(hay):
                filled = ReconciledAttribute.from_values(
                    definition,
                    [rule.option],
                    note=f"Set from listing text ({rule.text.pattern})",
                )
        if filled is not attr:
            logger.info(f"Relational default: {definition.name} = {filled.values}")
        out.append(filled)

    return out
