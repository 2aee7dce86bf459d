"""
Tests for the reconciliation policy.
Same input must always produce the same output.
"""
import pytest

from specifics.errors import SchemaError
from specifics.models.aspect import AttributeDefinition, MultiValue, SingleValue
from specifics.models.facts import DetectedFacts
from specifics.reconcile.policy import (
    ReconciliationPolicy,
    is_measurement_aspect,
    is_sensitive_aspect,
    reconcile,
    validate_definitions,
)


def _material(options: list[str]) -> dict:
    return {
        "name": "Material",
        "multi": False,
        "selectionOnly": True,
        "freeTextAllowed": False,
        "options": options,
    }


class TestScenarios:
    """Worked examples of the policy."""

    def test_selection_only_without_match_is_blank(self):
        result = reconcile(
            [_material(["Cotton", "Cotton Blend", "Polyester"])],
            {"Material": "100% Acrylic"},
        )

        assert [a.to_output() for a in result] == [{"name": "Material", "value": ""}]

    def test_substring_match_after_normalization(self):
        result = reconcile(
            [_material(["Cotton", "Cotton Blend", "Acrylic", "Polyester"])],
            {"Material": "100 percent Acrylic"},
        )

        assert result[0].to_output()["value"] == "Acrylic"

    def test_option_inside_candidate(self):
        definitions = [{
            "name": "Color",
            "multi": False,
            "selectionOnly": False,
            "freeTextAllowed": True,
            "options": ["White", "Ivory"],
        }]

        result = reconcile(definitions, {"Color": "Off-white"})

        assert result[0].to_output()["value"] == "White"

    def test_missing_fact_is_blank_without_note(self):
        definitions = [{
            "name": "Waist Size",
            "multi": False,
            "selectionOnly": False,
            "freeTextAllowed": True,
            "options": [],
        }]

        result = reconcile(definitions, {})

        assert result[0].to_output() == {"name": "Waist Size", "value": ""}
        assert result[0].note is None

    def test_size_type_narrows_size_options(self):
        definitions = [
            {"name": "Size Type", "options": ["Regular", "Tall", "Petite"]},
            {"name": "Size", "selectionOnly": True, "options": ["M", "Petite M", "MT"]},
        ]

        result = reconcile(definitions, {"Size Type": "Petite", "Size": "M"})

        assert result[1].to_output()["value"] == "Petite M"

    def test_regular_size_type_skips_petite_options(self):
        definitions = [
            {"name": "Size", "selectionOnly": True, "options": ["Petite M", "M"]},
        ]

        with_type = reconcile(definitions, {"Size Type": "Regular", "Size": "m"})
        without_type = reconcile(definitions, {"Size": "petite"})

        assert with_type[0].to_output()["value"] == "M"
        assert without_type[0].to_output()["value"] == "Petite M"


class TestInvariants:
    """Properties that hold for any valid input."""

    @pytest.fixture
    def definitions(self) -> list[AttributeDefinition]:
        return [
            AttributeDefinition(name="Brand", required=True),
            AttributeDefinition(
                name="Color", multi=True, selection_only=True,
                options=["Black", "Blue", "Red", "White", "Green"],
            ),
            AttributeDefinition(
                name="Features", multi=True,
                options=["Hood", "Pockets", "Zipper", "Lined", "Waterproof"],
            ),
            AttributeDefinition(name="Waist Size", options=[]),
            AttributeDefinition(
                name="Material", selection_only=True,
                options=["Cotton", "Cotton Blend", "Polyester"],
            ),
        ]

    @pytest.fixture
    def facts(self) -> DetectedFacts:
        return DetectedFacts(
            values={
                "brand": "Patagonia",
                "COLOR": ["Black", "Navy Blue", "Red", "White", "Purple"],
                "Features": "Hood, Pockets, Zipper, Lined",
                "Waist Size": "34",
                "Material": "Shell: 60% Cotton, 40% Polyester",
            },
            evidence=["Tag: W32 L30"],
        )

    def test_idempotent(self, definitions, facts):
        runs = [
            [a.to_output() for a in reconcile(definitions, facts)]
            for _ in range(5)
        ]
        assert all(r == runs[0] for r in runs)

    def test_names_and_order_preserved(self, definitions, facts):
        result = reconcile(definitions, facts)
        assert [a.name for a in result] == [d.name for d in definitions]

    def test_selection_only_containment(self, definitions, facts):
        by_name = {d.name: d for d in definitions}
        for attr in reconcile(definitions, facts):
            definition = by_name[attr.name]
            if definition.selection_only:
                assert all(v in definition.options for v in attr.values)

    def test_multi_select_cap(self, definitions, facts):
        result = {a.name: a for a in reconcile(definitions, facts)}

        assert result["Color"].values == ["Black", "Blue", "Red"]
        assert result["Features"].values == ["Hood", "Pockets", "Zipper"]
        assert "Kept the 3" in result["Features"].note

    def test_variant_follows_multi_flag(self, definitions, facts):
        result = {a.name: a for a in reconcile(definitions, facts)}

        assert isinstance(result["Color"].value, MultiValue)
        assert isinstance(result["Brand"].value, SingleValue)
        assert result["Brand"].to_output()["value"] == "Patagonia"

    def test_unverified_measurement_is_dropped(self, definitions, facts):
        result = {a.name: a for a in reconcile(definitions, facts)}

        # 34 appears nowhere else in the evidence
        assert result["Waist Size"].is_blank
        assert "unverified measurement" in result["Waist Size"].note

    def test_blend_collapses_to_primary_blend_option(self, definitions, facts):
        result = {a.name: a for a in reconcile(definitions, facts)}

        assert result["Material"].to_output()["value"] == "Cotton Blend"
        assert "Blended composition" in result["Material"].note

    def test_plain_dict_facts_and_none(self, definitions):
        assert all(a.is_blank for a in reconcile(definitions, None))
        assert all(a.is_blank for a in reconcile(definitions, {}))


class TestMeasurements:
    """Numbers are only accepted when present verbatim."""

    def test_verbatim_number_accepted(self):
        definitions = [AttributeDefinition(name="Inseam", options=["28", "30", "32"])]
        facts = DetectedFacts(values={"Inseam": "30 in"}, evidence=["Tag reads W32 L30"])

        assert reconcile(definitions, facts)[0].values == ["30"]

    def test_number_inside_other_facts_counts(self):
        definitions = [AttributeDefinition(name="Waist Size")]
        result = reconcile(definitions, {"Waist Size": "32", "Size": "32x30"})

        assert result[0].values == ["32"]

    def test_rounded_value_rejected(self):
        definitions = [AttributeDefinition(name="Chest Size")]
        facts = DetectedFacts(values={"Chest Size": "42"}, evidence=["Chest 42.5 in"])

        assert reconcile(definitions, facts)[0].is_blank

    def test_hedged_value_rejected(self):
        definitions = [AttributeDefinition(name="Inseam")]
        facts = DetectedFacts(values={"Inseam": "approx 30"}, evidence=["30"])

        assert reconcile(definitions, facts)[0].is_blank

    def test_model_guesses_are_not_evidence(self):
        definitions = [AttributeDefinition(name="Waist Size")]
        facts = DetectedFacts(
            values={"Waist Size": "32", "Size": "32"},
            values_as_evidence=False,
        )

        assert reconcile(definitions, facts)[0].is_blank

    def test_categorical_rise_goes_to_matcher(self):
        definitions = [AttributeDefinition(name="Rise", selection_only=True, options=["High", "Mid", "Low"])]

        assert reconcile(definitions, {"Rise": "Mid Rise"})[0].values == ["Mid"]


class TestSensitiveFields:
    """Legal and seller-choice fields need unambiguous evidence."""

    def test_exact_option_accepted(self):
        definitions = [AttributeDefinition(name="Handmade", selection_only=True, options=["Yes", "No"])]
        assert reconcile(definitions, {"Handmade": "yes"})[0].values == ["Yes"]

    def test_vague_phrasing_rejected(self):
        definitions = [AttributeDefinition(name="Handmade", selection_only=True, options=["Yes", "No"])]
        result = reconcile(definitions, {"Handmade": "possibly yes"})

        assert result[0].is_blank
        assert "uncertain" in result[0].note

    def test_substring_match_is_not_enough(self):
        definitions = [AttributeDefinition(
            name="Country/Region of Manufacture",
            options=["China", "United States"],
        )]
        result = reconcile(definitions, {"Country/Region of Manufacture": "Made in China"})

        assert result[0].is_blank

    def test_free_text_sensitive_value_kept(self):
        definitions = [AttributeDefinition(name="MPN")]
        assert reconcile(definitions, {"MPN": "AB-1234"})[0].values == ["AB-1234"]

    def test_required_blank_gets_note(self):
        definitions = [AttributeDefinition(
            name="California Prop 65 Warning", required=True, options=["Yes"], selection_only=True,
        )]
        result = reconcile(definitions, {"California Prop 65 Warning": "maybe"})

        assert result[0].is_blank
        assert "Required aspect left blank" in result[0].note


class TestBlends:
    """Fiber compositions on material aspects."""

    def test_pure_shell_with_lining_is_not_a_blend(self):
        definitions = [_material(["Wool", "Wool Blend", "Polyester"])]
        result = reconcile(definitions, {"Material": "Shell: 100% Wool; Lining: 100% Polyester"})

        assert result[0].to_output() == {"name": "Material", "value": "Wool"}

    def test_lining_without_separator_is_ignored(self):
        definitions = [_material(["Wool", "Wool Blend", "Polyester"])]
        result = reconcile(definitions, {"Material": "100% Wool Lining 100% Polyester"})

        assert result[0].to_output()["value"] == "Wool"

    def test_and_joins_fibers(self):
        definitions = [_material(["Cotton", "Cotton Blend", "Polyester"])]
        result = reconcile(definitions, {"Material": "60% Cotton and 40% Polyester"})

        assert result[0].to_output()["value"] == "Cotton Blend"
        assert "Blended composition" in result[0].note

    def test_ampersand_joins_fibers(self):
        definitions = [_material(["Cotton", "Polyester", "Polyester Blend"])]
        result = reconcile(definitions, {"Material": "35% Cotton & 65% Polyester"})

        assert result[0].to_output()["value"] == "Polyester Blend"

    def test_blend_without_blend_option_keeps_primary_fiber(self):
        definitions = [_material(["Cotton", "Polyester"])]
        result = reconcile(definitions, {"Material": "Shell: 70% Polyester, 30% Cotton; Lining: 100% Nylon"})

        assert result[0].to_output()["value"] == "Polyester"
        assert "primary fiber" in result[0].note

    def test_incomplete_composition_is_not_collapsed(self):
        definitions = [_material(["Cotton", "Cotton Blend", "Polyester"])]
        result = reconcile(definitions, {"Material": "60% Cotton, 20% Polyester"})

        assert result[0].to_output()["value"] == "Cotton"
        assert result[0].note is None


class TestThemes:
    """Trend aesthetics need support outside the theme fact itself."""

    @pytest.fixture
    def theme(self) -> AttributeDefinition:
        return AttributeDefinition(name="Theme", multi=True, options=["Y2K", "Boho", "Classic", "Floral"])

    def test_unsupported_trend_dropped(self, theme):
        facts = DetectedFacts(values={"Theme": ["Y2K", "Floral"]}, evidence=["Floral midi dress"])
        result = reconcile([theme], facts)[0]

        assert result.values == ["Floral"]
        assert "not supported by evidence" in result.note

    def test_supported_trend_kept(self, theme):
        facts = DetectedFacts(values={"Theme": "Boho"}, evidence=["Boho peasant blouse"])
        assert reconcile([theme], facts)[0].values == ["Boho"]


class TestMultiValues:
    """Splitting and de-duplication of multi-valued facts."""

    def test_whole_option_with_separator_not_split(self):
        definitions = [AttributeDefinition(name="Type", multi=True, options=["Jacket/Coat", "Vest"])]
        assert reconcile(definitions, {"Type": "Jacket/Coat"})[0].values == ["Jacket/Coat"]

    def test_split_and_dedupe(self):
        definitions = [AttributeDefinition(name="Pattern", multi=True, selection_only=True,
                                           options=["Floral", "Striped", "Solid"])]
        result = reconcile(definitions, {"Pattern": "floral; Floral | striped"})

        assert result[0].values == ["Floral", "Striped"]

    def test_cap_can_be_lowered(self):
        definitions = [AttributeDefinition(name="Color", multi=True, options=["Red", "Blue", "Green"])]
        policy = ReconciliationPolicy(multi_select_cap=1)

        assert policy.reconcile(definitions, {"Color": "Red, Blue"})[0].values == ["Red"]

    def test_cap_never_exceeds_three(self):
        assert ReconciliationPolicy(multi_select_cap=10).multi_select_cap == 3

    def test_list_for_single_valued_keeps_first(self):
        definitions = [AttributeDefinition(name="Brand")]
        result = reconcile(definitions, {"Brand": ["Nike", "Adidas"]})

        assert result[0].to_output()["value"] == "Nike"
        assert "kept the first" in result[0].note


class TestSchemaValidation:
    """Malformed definition sets are rejected before processing."""

    def test_duplicate_names_rejected(self):
        with pytest.raises(SchemaError):
            reconcile([{"name": "Color"}, {"name": "color"}], {})

    def test_blank_name_rejected(self):
        with pytest.raises(SchemaError):
            validate_definitions([{"name": "  "}])

    def test_selection_only_with_free_text_rejected(self):
        with pytest.raises(SchemaError):
            validate_definitions([{"name": "Size", "selectionOnly": True, "freeTextAllowed": True}])

    def test_malformed_entry_rejected(self):
        with pytest.raises(SchemaError):
            validate_definitions([{"required": True}])
        with pytest.raises(SchemaError):
            validate_definitions(["Color"])

    def test_valid_definitions_parsed(self):
        parsed = validate_definitions([{"name": "Color", "selectionOnly": True, "options": ["Red"]}])

        assert parsed[0].selection_only is True
        assert parsed[0].free_text_allowed is False


class TestFieldClassification:
    """Name vocabularies."""

    @pytest.mark.parametrize("name", [
        "California Prop 65 Warning", "Personalization Instructions", "Handmade",
        "Country/Region of Manufacture", "Garment Care", "MPN",
    ])
    def test_sensitive(self, name):
        assert is_sensitive_aspect(name)

    @pytest.mark.parametrize("name", ["Waist Size", "Inseam", "Rise", "Chest Size", "Hip Size", "Sleeve Length"])
    def test_measurement(self, name):
        assert is_measurement_aspect(name)

    @pytest.mark.parametrize("name", ["Brand", "Color", "Size"])
    def test_plain(self, name):
        assert not is_sensitive_aspect(name)
        assert not is_measurement_aspect(name)
