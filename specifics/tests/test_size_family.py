"""
Tests for size-family filtering.
"""
import pytest

from specifics.models.aspect import AttributeDefinition, ReconciledAttribute
from specifics.reconcile.size_family import (
    SizeFamily,
    filter_by_size_family,
    get_size_type_value,
    is_junior,
    is_petite,
    is_plus,
    is_regular,
    is_size_aspect_name,
    is_tall,
    resolve_size_family,
)


class TestPredicates:
    """Each family predicate works on its own."""

    @pytest.mark.parametrize("option", ["LT", "XLT", "2XLT", "3XLT", "Tall", "M Long"])
    def test_tall(self, option):
        assert is_tall(option)

    @pytest.mark.parametrize("option", ["S", "M", "L", "XL"])
    def test_not_tall(self, option):
        assert not is_tall(option)

    @pytest.mark.parametrize("option", ["Petite M", "PS", "PM", "P"])
    def test_petite(self, option):
        assert is_petite(option)

    def test_petite_tokens_are_whole_words(self):
        assert not is_petite("XL")
        assert not is_petite("PL2")

    @pytest.mark.parametrize("option", ["Junior M", "Juniors 5", "Jr 7", "JRS L"])
    def test_junior(self, option):
        assert is_junior(option)

    @pytest.mark.parametrize("option", ["1X", "2XL", "3XLT", "Plus 18", "Big 2XB"])
    def test_plus(self, option):
        assert is_plus(option)

    def test_regular_is_complement(self):
        assert is_regular("M")
        assert is_regular("2X")  # plus codes are still regular
        assert not is_regular("LT")
        assert not is_regular("Petite S")
        assert not is_regular("Maternity M")


class TestResolveSizeFamily:
    """Hint keywords map onto families."""

    @pytest.mark.parametrize("hint, family", [
        ("Big & Tall", SizeFamily.TALL),
        ("Tall", SizeFamily.TALL),
        ("Petite", SizeFamily.PETITE),
        ("Juniors", SizeFamily.JUNIOR),
        ("Maternity", SizeFamily.MATERNITY),
        ("Plus", SizeFamily.PLUS),
        ("Regular", SizeFamily.REGULAR),
        ("", SizeFamily.REGULAR),
        (None, SizeFamily.REGULAR),
    ])
    def test_hints(self, hint, family):
        assert resolve_size_family(hint) is family


class TestFilterBySizeFamily:
    """Tests for filter_by_size_family."""

    @pytest.fixture
    def sizes(self) -> list[str]:
        return ["S", "M", "L", "LT", "XLT", "Petite M", "PS", "1X", "2X", "Junior M", "Maternity L"]

    def test_tall_hint(self):
        assert filter_by_size_family("Tall", ["S", "M", "L", "LT", "XLT"]) == ["LT", "XLT"]

    def test_big_and_tall_includes_plus(self, sizes):
        assert filter_by_size_family("Big & Tall", sizes) == ["LT", "XLT", "1X", "2X"]

    def test_petite_hint(self, sizes):
        assert filter_by_size_family("petite", sizes) == ["Petite M", "PS"]

    def test_junior_hint(self, sizes):
        assert filter_by_size_family("Juniors", sizes) == ["Junior M"]

    def test_plus_hint(self, sizes):
        assert filter_by_size_family("Plus", sizes) == ["1X", "2X"]

    def test_maternity_keeps_everything(self, sizes):
        assert filter_by_size_family("Maternity", sizes) == sizes

    def test_regular_and_empty_hint(self, sizes):
        expected = ["S", "M", "L", "1X", "2X"]
        assert filter_by_size_family("Regular", sizes) == expected
        assert filter_by_size_family("", sizes) == expected

    def test_preserves_order_and_duplicates(self):
        assert filter_by_size_family("Tall", ["XLT", "LT", "XLT"]) == ["XLT", "LT", "XLT"]


class TestSizeAspectHelpers:
    """Tests for size aspect detection helpers."""

    @pytest.mark.parametrize("name", ["Size", "size", "Waist Size", "Neck Size", "Chest Size", "Inseam"])
    def test_size_aspects(self, name):
        assert is_size_aspect_name(name)

    @pytest.mark.parametrize("name", ["Size Type", "Shoe Size Width", "Color", ""])
    def test_not_size_aspects(self, name):
        assert not is_size_aspect_name(name)

    def test_size_type_value_from_dicts(self):
        specs = [{"name": "Color", "value": "Red"}, {"name": "Size Type", "value": ["Petite"]}]
        assert get_size_type_value(specs) == "Petite"

    def test_size_type_value_from_reconciled(self):
        definition = AttributeDefinition(name="Size Type", options=["Regular", "Tall"])
        specs = [ReconciledAttribute.from_values(definition, ["Tall"])]
        assert get_size_type_value(specs) == "Tall"

    def test_size_type_value_missing(self):
        assert get_size_type_value([]) == ""
        assert get_size_type_value(None) == ""
