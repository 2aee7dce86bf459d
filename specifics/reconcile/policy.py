"""
Reconciliation policy - assigns detected facts to marketplace aspects.

Priority, strongest first:
1. respect the allowed options
2. never fabricate numeric measurements
3. leave sensitive / legal / seller-choice fields blank unless unambiguous
4. keep multi-select answers to 1-3 values
5. prefer blank over a trendy classification the evidence does not carry

Every degraded outcome is a blank value (optionally with a note); only a
malformed definition set raises.
"""
import logging
import re
from collections.abc import Mapping
from typing import Any, NamedTuple, Optional, Sequence, Union

from pydantic import ValidationError

from ..errors import SchemaError
from ..models.aspect import AttributeDefinition, ReconciledAttribute
from ..models.facts import DetectedFacts, FactValue
from .matcher import MatchTier, match_option
from .normalizer import normalize
from .size_family import filter_by_size_family, is_size_aspect_name


logger = logging.getLogger(__name__)

MULTI_SELECT_CAP = 3

SENSITIVE_FIELD_PATTERNS = [
    r"prop(osition)?\s*65",
    r"\bwarning\b",
    r"personali[sz]",
    r"\bhandmade\b",
    r"country(/region)?\s+of\s+manufacture",
    r"garment care",
    r"care instructions",
    r"\bmpn\b",
    r"manufacturer part number",
    r"model number",
]

MEASUREMENT_FIELD_PATTERNS = [
    r"\bwaist\b",
    r"\binseam\b",
    r"\brise\b",
    r"\bchest\b",
    r"\bbust\b",
    r"\bhips?\b",
    r"sleeve length",
]

THEME_FIELD_PATTERNS = [r"\btheme\b", r"\baesthetic\b", r"\bvibe\b"]

MATERIAL_FIELD_PATTERNS = [r"material", r"fabric"]

TREND_TERMS = [
    "y2k", "boho", "bohemian", "cottagecore", "punk", "grunge", "goth", "gothic",
    "kawaii", "coquette", "dark academia", "fairycore", "emo", "vaporwave",
    "steampunk", "hippie", "rave", "balletcore", "gorpcore",
]

_SENSITIVE = re.compile("|".join(SENSITIVE_FIELD_PATTERNS), re.IGNORECASE)
_MEASUREMENT = re.compile("|".join(MEASUREMENT_FIELD_PATTERNS), re.IGNORECASE)
_THEME = re.compile("|".join(THEME_FIELD_PATTERNS), re.IGNORECASE)
_MATERIAL = re.compile("|".join(MATERIAL_FIELD_PATTERNS), re.IGNORECASE)
_TREND = re.compile(r"\b(" + "|".join(re.escape(t) for t in TREND_TERMS) + r")\b", re.IGNORECASE)

_HEDGE = re.compile(
    r"\b(maybe|possibly|probably|likely|approx\w*|about|around|roughly|estimated?|"
    r"unclear|unknown|unsure|not sure|n/?a|appears?|looks? like|seems?)\b|~|\?",
    re.IGNORECASE,
)
_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_FIBER = re.compile(
    r"(\d{1,3}(?:\.\d+)?)\s*(?:%|percent)\s*"
    r"([a-z][a-z\-]*(?:\s+(?!and\b)[a-z][a-z\-]*)*)"
)
_PART_LABEL = re.compile(r"^\s*(?:shell|outer|outer shell|body|main|main fabric|self|fabric)\s*:\s*")
_NEXT_PART = re.compile(r"\b(?:lining|shell|trim|insulation|fill|filling|contrast|pocketing|rib)\b")
_SPLIT = re.compile(r"\s*[,;|/]\s*")


def is_sensitive_aspect(name: str) -> bool:
    """Legal or seller-declared fields (Prop 65, handmade, MPN...)."""
    return bool(_SENSITIVE.search(name or ""))


def is_measurement_aspect(name: str) -> bool:
    """Fields that hold a numeric body measurement."""
    return bool(_MEASUREMENT.search(name or ""))


def is_theme_aspect(name: str) -> bool:
    return bool(_THEME.search(name or ""))


def is_material_aspect(name: str) -> bool:
    return bool(_MATERIAL.search(name or ""))


class _Resolution(NamedTuple):
    value: str
    note: Optional[str] = None


def validate_definitions(
    definitions: Sequence[Union[AttributeDefinition, Mapping]],
) -> list[AttributeDefinition]:
    """
    Parse and check a definition set before any reconciliation.

    Raises:
        SchemaError: duplicate names, blank names, selection-only aspects
            that also claim free text, or entries that fail validation
    """
    parsed: list[AttributeDefinition] = []
    seen: set[str] = set()

    for index, raw in enumerate(definitions or []):
        if isinstance(raw, AttributeDefinition):
            definition = raw
        elif isinstance(raw, Mapping):
            try:
                definition = AttributeDefinition.model_validate(raw)
            except ValidationError as e:
                raise SchemaError(f"Aspect #{index} is malformed: {e}") from e
        else:
            raise SchemaError(f"Aspect #{index} is not a definition: {type(raw).__name__}")

        key = definition.name.strip().lower()
        if not key:
            raise SchemaError(f"Aspect #{index} has no name")
        if key in seen:
            raise SchemaError(f"Duplicate aspect name: {definition.name!r}")
        if definition.selection_only and definition.free_text_allowed:
            raise SchemaError(
                f"Aspect {definition.name!r} is selection-only but also allows free text"
            )
        seen.add(key)
        parsed.append(definition)

    return parsed


class ReconciliationPolicy:
    """
    Maps detected facts onto aspect definitions.
    Pure and deterministic: the same input always yields the same output.
    """

    def __init__(self, multi_select_cap: int = MULTI_SELECT_CAP):
        self.multi_select_cap = max(1, min(multi_select_cap, MULTI_SELECT_CAP))

    def reconcile(
        self,
        definitions: Sequence[Union[AttributeDefinition, Mapping]],
        facts: Union[DetectedFacts, Mapping[str, Any], None],
    ) -> list[ReconciledAttribute]:
        """
        Produce one ReconciledAttribute per definition, in definition order.

        Args:
            definitions: Aspect schema for the category
            facts: Candidate values by aspect name, or a DetectedFacts

        Returns:
            Reconciled attributes; blanks mean "left for the seller"

        Raises:
            SchemaError: If the definition set is malformed
        """
        parsed = validate_definitions(definitions)

        if facts is None:
            facts = DetectedFacts()
        elif not isinstance(facts, DetectedFacts):
            facts = DetectedFacts(values=dict(facts))

        size_type = self._size_type(facts)
        return [self._reconcile_one(d, facts, size_type) for d in parsed]

    def _size_type(self, facts: DetectedFacts) -> str:
        value = facts.find(r"^\s*size type\s*$")
        if isinstance(value, list):
            value = next((v for v in value if v.strip()), "")
        return (value or "").strip()

    def _reconcile_one(
        self,
        definition: AttributeDefinition,
        facts: DetectedFacts,
        size_type: str,
    ) -> ReconciledAttribute:
        raw = facts.lookup(definition.name)
        candidates = self._candidates(raw, definition)
        if not candidates:
            return ReconciledAttribute.blank(definition)

        options = list(definition.options)
        if size_type and options and is_size_aspect_name(definition.name):
            options = filter_by_size_family(size_type, options)
            logger.debug(
                f"{definition.name}: size type {size_type!r} narrowed "
                f"{len(definition.options)} options to {len(options)}"
            )

        notes: list[str] = []
        if definition.multi:
            values = self._resolve_multi(definition, candidates, options, facts, notes)
        else:
            if isinstance(raw, list) and len({normalize(c) for c in candidates}) > 1:
                notes.append(f"Several values detected; kept the first ({candidates[0]})")
            resolution = self._resolve_single(definition, candidates[0], options, facts)
            if resolution.note:
                notes.append(resolution.note)
            values = [resolution.value] if resolution.value else []

        if not values:
            logger.debug(f"{definition.name}: left blank")
            if definition.required:
                notes.append("Required aspect left blank for seller review")

        return ReconciledAttribute.from_values(
            definition,
            values,
            note="; ".join(notes) if notes else None,
        )

    def _candidates(self, raw: Optional[FactValue], definition: AttributeDefinition) -> list[str]:
        """Raw strings to resolve. Multi aspects split on natural separators."""
        if raw is None:
            return []
        items = raw if isinstance(raw, list) else [raw]
        items = [str(i).strip() for i in items if str(i).strip()]
        if not definition.multi:
            return items

        out: list[str] = []
        for item in items:
            whole = match_option(item, definition.options, selection_only=True)
            if whole.tier is MatchTier.EXACT:
                out.append(item)
            else:
                out.extend(p for p in _SPLIT.split(item) if p)
        return out

    def _resolve_multi(
        self,
        definition: AttributeDefinition,
        candidates: list[str],
        options: list[str],
        facts: DetectedFacts,
        notes: list[str],
    ) -> list[str]:
        values: list[str] = []
        seen: set[str] = set()
        for candidate in candidates:
            resolution = self._resolve_value(definition, candidate, options, facts)
            if resolution.note and resolution.note not in notes:
                notes.append(resolution.note)
            key = normalize(resolution.value)
            if key and key not in seen:
                seen.add(key)
                values.append(resolution.value)

        if len(values) > self.multi_select_cap:
            notes.append(f"Kept the {self.multi_select_cap} most relevant of {len(values)} values")
            values = values[: self.multi_select_cap]
        return values

    def _resolve_single(
        self,
        definition: AttributeDefinition,
        candidate: str,
        options: list[str],
        facts: DetectedFacts,
    ) -> _Resolution:
        if is_material_aspect(definition.name) and options:
            blend = self._collapse_blend(candidate, options)
            if blend is not None:
                return blend
        return self._resolve_value(definition, candidate, options, facts)

    def _resolve_value(
        self,
        definition: AttributeDefinition,
        candidate: str,
        options: list[str],
        facts: DetectedFacts,
    ) -> _Resolution:
        """Apply the field-kind guards, then the option matcher."""
        name = definition.name
        restricted = definition.restricts_to_options

        if is_measurement_aspect(name):
            numbers = _NUMBER.findall(candidate)
            if numbers:
                evidence = facts.evidence_text(exclude=name)
                if not self._measurement_verified(candidate, numbers, evidence):
                    return _Resolution("", f"Dropped unverified measurement {candidate!r}")
                if len(numbers) == 1 and options:
                    exact = match_option(numbers[0], options, selection_only=True)
                    if exact.tier is MatchTier.EXACT:
                        return _Resolution(exact.value)
            elif not options:
                return _Resolution("", f"Dropped non-numeric measurement {candidate!r}")

        if is_sensitive_aspect(name):
            if _HEDGE.search(candidate):
                return _Resolution("", "Left blank: evidence for a seller-declared field is uncertain")
            if options:
                found = match_option(candidate, options, selection_only=True)
                if found.tier in (MatchTier.EXACT, MatchTier.PREFIX):
                    return _Resolution(found.value)
                return _Resolution("", "Left blank: no unambiguous option for a seller-declared field")
            if restricted:
                return _Resolution("")
            return _Resolution(candidate)

        if is_theme_aspect(name):
            trend = _TREND.search(candidate)
            if trend:
                evidence = normalize(facts.evidence_text(exclude=name))
                if not re.search(rf"\b{re.escape(trend.group(1).lower())}\b", evidence):
                    return _Resolution("", f"Trend aesthetic {candidate!r} not supported by evidence")

        return _Resolution(match_option(candidate, options, restricted).value)

    def _measurement_verified(self, candidate: str, numbers: list[str], evidence: str) -> bool:
        """Every number must appear verbatim in the evidence; hedged values never pass."""
        if _HEDGE.search(candidate):
            return False
        for number in numbers:
            if not re.search(rf"(?<![\d.]){re.escape(number)}(?!\d|\.\d)", evidence):
                return False
        return True

    @staticmethod
    def _main_part(candidate: str) -> str:
        """Composition of the first garment part ("Shell: ...; Lining: ..." -> shell)."""
        part = re.split(r"[;\n]", normalize(candidate), maxsplit=1)[0]
        part = _PART_LABEL.sub("", part)
        for label in _NEXT_PART.finditer(part):
            if label.start() > 0:
                return part[: label.start()]
        return part

    def _collapse_blend(
        self,
        candidate: str,
        options: list[str],
    ) -> Optional[_Resolution]:
        """
        "60% Cotton, 40% Polyester" -> "Cotton Blend" when offered,
        else the primary fiber. None when the candidate is not a blend.

        Only the first garment part counts: a 100% wool shell with a
        polyester lining is wool, not a blend.
        """
        fibers: dict[str, float] = {}
        for pct, fiber in _FIBER.findall(self._main_part(candidate)):
            fibers[fiber] = fibers.get(fiber, 0.0) + float(pct)
        if len(fibers) < 2 or abs(sum(fibers.values()) - 100.0) > 1.0:
            return None

        primary = max(fibers, key=lambda f: fibers[f])
        for opt in options:
            n = normalize(opt)
            if n == f"{primary} blend" or (n.startswith(primary) and "blend" in n):
                return _Resolution(opt, f"Blended composition collapsed to {opt!r}")

        found = match_option(primary, options, selection_only=True)
        if found.tier is not MatchTier.NONE:
            return _Resolution(found.value, f"Blended composition reduced to primary fiber {found.value!r}")
        return None


def reconcile(
    definitions: Sequence[Union[AttributeDefinition, Mapping]],
    facts: Union[DetectedFacts, Mapping[str, Any], None],
    multi_select_cap: int = MULTI_SELECT_CAP,
) -> list[ReconciledAttribute]:
    """Reconcile facts against definitions with the default policy."""
    return ReconciliationPolicy(multi_select_cap=multi_select_cap).reconcile(definitions, facts)
