"""
Tests for Pydantic models.
"""
import pytest
from datetime import datetime

from pydantic import ValidationError

from specifics.models.aspect import (
    AttributeDefinition,
    MultiValue,
    ReconciledAttribute,
    SingleValue,
)
from specifics.models.facts import DetectedFacts
from specifics.models.listing import (
    CategorySuggestion,
    CategorySuggestions,
    DetectedItem,
    ListingAnalysis,
    ListingResult,
    SpecificsSuggestion,
)


class TestAttributeDefinition:
    """Tests for aspect definitions."""

    def test_camel_case_keys(self):
        """Test parsing the camelCase shape used by the taxonomy layer."""
        definition = AttributeDefinition.model_validate({
            "name": "Size",
            "required": True,
            "selectionOnly": True,
            "freeTextAllowed": False,
            "options": ["S", "M"],
        })

        assert definition.selection_only is True
        assert definition.free_text_allowed is False
        assert definition.restricts_to_options is True

    def test_free_text_defaults_to_inverse_of_selection_only(self):
        """Test the freeTextAllowed default."""
        assert AttributeDefinition(name="Brand").free_text_allowed is True
        assert AttributeDefinition(name="Size", selection_only=True).free_text_allowed is False

    def test_free_text_false_with_options_restricts(self):
        """Test that a closed vocabulary restricts even without selectionOnly."""
        definition = AttributeDefinition(name="Fit", free_text_allowed=False, options=["Slim"])
        assert definition.restricts_to_options is True

    def test_free_text_false_without_options_does_not_restrict(self):
        definition = AttributeDefinition(name="Fit", free_text_allowed=False)
        assert definition.restricts_to_options is False

    def test_options_coerced(self):
        """Test None and blank options."""
        assert AttributeDefinition(name="Color", options=None).options == []
        assert AttributeDefinition(name="Color", options=["Red", "", "  ", "Blue"]).options == ["Red", "Blue"]

    def test_schema_dict_uses_aliases(self):
        data = AttributeDefinition(name="Size", selection_only=True, options=["S"]).to_schema_dict()

        assert data["selectionOnly"] is True
        assert data["freeTextAllowed"] is False
        assert "selection_only" not in data

    def test_missing_name_fails(self):
        with pytest.raises(ValidationError):
            AttributeDefinition.model_validate({"options": ["S"]})


class TestReconciledAttribute:
    """Tests for reconciled values."""

    def test_single_variant(self):
        """Test that a non-multi definition produces a single value."""
        attr = ReconciledAttribute.from_values(AttributeDefinition(name="Brand"), ["Nike"])

        assert isinstance(attr.value, SingleValue)
        assert attr.to_output() == {"name": "Brand", "value": "Nike"}

    def test_multi_variant(self):
        """Test that a multi definition produces a list value."""
        definition = AttributeDefinition(name="Color", multi=True)
        attr = ReconciledAttribute.from_values(definition, ["Red", "Blue"])

        assert isinstance(attr.value, MultiValue)
        assert attr.to_output() == {"name": "Color", "value": ["Red", "Blue"]}

    def test_blank_shapes(self):
        """Test intentionally blank values keep their variant."""
        single = ReconciledAttribute.blank(AttributeDefinition(name="Brand"))
        multi = ReconciledAttribute.blank(AttributeDefinition(name="Color", multi=True))

        assert single.to_output()["value"] == ""
        assert multi.to_output()["value"] == []
        assert single.is_blank and multi.is_blank

    def test_note_only_when_present(self):
        definition = AttributeDefinition(name="Brand")

        assert "note" not in ReconciledAttribute.blank(definition).to_output()
        assert ReconciledAttribute.blank(definition, note="left for seller").to_output()["note"] == "left for seller"

    def test_discriminated_round_trip_from_dict(self):
        """Test parsing the stored shape back."""
        attr = ReconciledAttribute.model_validate(
            {"name": "Color", "value": {"kind": "multi", "values": ["Red"]}}
        )
        assert attr.values == ["Red"]


class TestDetectedFacts:
    """Tests for DetectedFacts."""

    def test_values_coerced(self):
        facts = DetectedFacts(values={"Handmade": False, "Waist": 32, "Color": ("Red", None), "Brand": None})

        assert facts.values == {"Handmade": "No", "Waist": "32", "Color": ["Red"]}

    def test_lookup_is_case_insensitive(self):
        facts = DetectedFacts(values={" size type ": "Tall"})
        assert facts.lookup("Size Type") == "Tall"
        assert facts.lookup("Brand") is None

    def test_evidence_text_excludes_own_aspect(self):
        facts = DetectedFacts(values={"Waist Size": "32", "Size": "34x30"}, evidence="Tag W34")
        text = facts.evidence_text(exclude="waist size")

        assert "34x30" in text
        assert "Tag W34" in text
        assert "32" not in text

    def test_values_as_evidence_off(self):
        facts = DetectedFacts(values={"Size": "34x30"}, evidence=["Tag"], values_as_evidence=False)
        assert facts.evidence_text() == "Tag"


class TestListingModels:
    """Tests for analysis and listing models."""

    def test_detected_item_null_strings(self):
        """Test that the model's 'null' answers become None."""
        item = DetectedItem.model_validate({
            "brand": "null",
            "size": " M ",
            "colors": "Black",
            "tagText": "RN 12345",
        })

        assert item.brand is None
        assert item.size == "M"
        assert item.colors == ["Black"]
        assert item.tag_text == "RN 12345"

    def test_title_clamped(self):
        analysis = ListingAnalysis(title="x" * 120)
        assert len(analysis.title) == 80

    def test_keywords_from_string(self):
        analysis = ListingAnalysis(keywords="puffer, down jacket, ,winter")
        assert analysis.keywords == ["puffer", "down jacket", "winter"]

    def test_category_path_defaults_to_name(self):
        assert CategorySuggestion(id="1", name="Coats").path == "Coats"

    def test_top_category(self):
        suggestions = CategorySuggestions(
            category_id="57988",
            category_name="Coats, Jackets & Vests",
            category_path="Clothing > Men > Coats, Jackets & Vests",
        )

        assert suggestions.top.id == "57988"
        assert suggestions.top.path.endswith("Vests")

    def test_suggestion_accepts_item_specifics_key(self):
        """Test the alternate key name the model sometimes uses."""
        suggestion = SpecificsSuggestion.model_validate({
            "item_specifics": [
                {"name": "Brand", "value": "Patagonia"},
                {"name": "Color", "value": ["Black", None]},
                {"name": "Size", "value": None},
            ],
            "notes": ["checked tag"],
        })

        assert suggestion.as_fact_values() == {"Brand": "Patagonia", "Color": ["Black"]}
        assert suggestion.notes == "checked tag"

    def test_listing_result_output(self):
        """Test the payload sent to the editor."""
        definition = AttributeDefinition(name="Color", multi=True, selection_only=True, options=["Black"])
        result = ListingResult(
            session_id="abc",
            title="Patagonia Down Jacket",
            category=CategorySuggestion(id="57988", name="Coats"),
            category_specifics_schema=[definition],
            item_specifics=[ReconciledAttribute.from_values(definition, ["Black"])],
        )

        data = result.to_output()

        assert data["session_id"] == "abc"
        assert data["category"]["id"] == "57988"
        assert data["category_specifics_schema"][0]["selectionOnly"] is True
        assert data["item_specifics"] == [{"name": "Color", "value": ["Black"]}]
        assert isinstance(result.created_at, datetime)
        assert isinstance(data["created_at"], str)
