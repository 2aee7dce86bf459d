"""
Builds DetectedFacts from the photo analysis and the model's suggestions.
"""
from typing import Optional, Sequence, Union

from ..models.aspect import AttributeDefinition
from ..models.facts import DetectedFacts
from ..models.listing import ListingAnalysis, SpecificsSuggestion
from .heuristics import infer_department, infer_size_type


# Detected field -> aspect name it usually feeds
DETECTED_ASPECTS = {
    "brand": "Brand",
    "size": "Size",
    "colors": "Color",
    "materials": "Material",
    "type": "Type",
    "style": "Style",
    "features": "Features",
}


def facts_from_analysis(
    analysis: ListingAnalysis,
    suggestion: Optional[SpecificsSuggestion] = None,
    definitions: Sequence[AttributeDefinition] = (),
    category_path: str = "",
) -> DetectedFacts:
    """
    Merge candidate values, strongest source first:
    model suggestions, then raw detected fields, then inferred
    Department / Size Type (only for aspects the schema has).

    Tag text, title and description become evidence.
    """
    values: dict[str, Union[str, list[str]]] = {}

    def add(name: str, value: Union[str, list[str], None]) -> None:
        if not value:
            return
        if any(k.lower() == name.lower() for k in values):
            return
        values[name] = value

    if suggestion is not None:
        for name, value in suggestion.as_fact_values().items():
            add(name, value)

    detected = analysis.detected
    for field, aspect in DETECTED_ASPECTS.items():
        add(aspect, getattr(detected, field))

    schema_names = {d.name.lower() for d in definitions}
    if "department" in schema_names:
        add("Department", infer_department(category_path))
    if "size type" in schema_names:
        add("Size Type", infer_size_type(detected.size, analysis.title, category_path))

    evidence = [analysis.title, analysis.description]
    if detected.tag_text:
        evidence.append(detected.tag_text)
    if detected.size:
        evidence.append(detected.size)

    return DetectedFacts(
        values=values,
        evidence=[e for e in evidence if e],
        values_as_evidence=False,
    )
