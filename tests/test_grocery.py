"""Tests for grocery list aggregation."""

import pytest

from ourmeals.normalize.ingredients import FreeText, Structured
from ourmeals.plan.formatting import format_grocery_list
from ourmeals.plan.grocery import (
    BareLine,
    GroceryList,
    MealSlot,
    QuantifiedLine,
    RecipeRef,
    aggregate,
    clamp_base_servings,
    clamp_servings,
    coerce_servings,
    collation_key,
)


def recipe(recipe_id: str, *lines: str, base_servings=1) -> RecipeRef:
    """Build a recipe from free-text lines."""
    return RecipeRef(
        id=recipe_id,
        name=recipe_id.title(),
        base_servings=base_servings,
        ingredients=tuple(FreeText(line) for line in lines),
    )


def totals(grocery: GroceryList) -> dict[tuple[str, str], float]:
    """Quantified totals keyed by (name, unit)."""
    return {(line.name, line.unit): line.total for line in grocery.quantified}


# =============================================================================
# Servings
# =============================================================================


class TestServings:
    """Tests for the servings helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [(4, 4), (2.9, 2), ("3", 3), (1, 1), (0, None), (-2, None), (0.5, None),
         (None, None), (True, None), ("abc", None), (float("nan"), None), (float("inf"), None)],
    )
    def test_coerce_servings(self, value, expected):
        """Test reading a servings value."""
        assert coerce_servings(value) == expected

    def test_clamp_base_servings(self):
        """Test that invalid base servings become 1."""
        assert clamp_base_servings(6) == 6
        assert clamp_base_servings(0) == 1
        assert clamp_base_servings(None) == 1
        assert clamp_base_servings("x") == 1

    def test_clamp_servings(self):
        """Test that invalid slot servings fall back to the default."""
        assert clamp_servings(3, default=4) == 3
        assert clamp_servings(None, default=4) == 4
        assert clamp_servings(-1, default=4) == 4
        assert clamp_servings(None, default=0) == 1


class TestCollationKey:
    """Tests for collation_key function."""

    def test_accents_and_case_ignored(self):
        """Test that accented and capitalized names sort together."""
        assert collation_key("Écrou") == collation_key("ecrou")
        assert sorted(["pomme", "Épinard", "ail"], key=collation_key) == [
            "ail",
            "Épinard",
            "pomme",
        ]


# =============================================================================
# Aggregation
# =============================================================================


class TestAggregate:
    """Tests for aggregate function."""

    def test_full_week(self, recipes_by_id):
        """Test a plan mixing two recipes, units and bare names."""
        slots = [MealSlot("crepes", servings=8), MealSlot("omelette")]

        grocery = aggregate(slots, recipes_by_id)

        assert grocery.quantified == [
            QuantifiedLine("farine", "g", 500.0),
            QuantifiedLine("lait", "ml", 1000.0),
            QuantifiedLine("sel", "unit", 1.0),
            QuantifiedLine("sucre", "ml", 60.0),
            QuantifiedLine("tomate", "unit", 2.0),
            QuantifiedLine("œuf", "unit", 11.0),
        ]
        assert grocery.bare == [BareLine("poivre")]

    def test_full_week_formatted(self, recipes_by_id):
        """Test the French rendering of an aggregated plan."""
        slots = [MealSlot("crepes", servings=8), MealSlot("omelette")]

        lines = format_grocery_list(aggregate(slots, recipes_by_id), "fr")

        assert lines == [
            "500 g farine",
            "1\u202f000 ml lait",
            "1 pièce sel",
            "60 ml sucre",
            "2 pièces tomate",
            "11 pièces œuf",
            "poivre",
        ]

    def test_scaled_by_servings(self):
        """Test that quantities follow desired / base servings."""
        recipes = {"cake": recipe("cake", "200 g flour", base_servings=4)}

        grocery = aggregate([MealSlot("cake", servings=2)], recipes)

        assert totals(grocery) == {("flour", "g"): 100.0}

    def test_volume_kept_apart_from_mass(self):
        """Test that the same name in mass and volume gives two lines."""
        recipes = {
            "cake": recipe("cake", "200 g flour", base_servings=4),
            "bread": recipe("bread", "1 cup flour"),
        }

        grocery = aggregate([MealSlot("cake", servings=2), MealSlot("bread")], recipes)

        assert grocery.quantified == [
            QuantifiedLine("flour", "g", 100.0),
            QuantifiedLine("flour", "ml", 240.0),
        ]
        assert format_grocery_list(grocery, "en") == ["100 g flour", "240 ml flour"]

    def test_units_summed_after_conversion(self):
        """Test that kg and g of the same name add up in grams."""
        recipes = {
            "a": recipe("a", "1 kg sucre"),
            "b": recipe("b", "250 grammes de sucre"),
        }

        grocery = aggregate([MealSlot("a"), MealSlot("b")], recipes)

        assert totals(grocery) == {("sucre", "g"): 1250.0}

    def test_plural_and_singular_merged(self):
        """Test that normalized names merge across spellings."""
        recipes = {"a": recipe("a", "2 tomates", "1 Tomate")}

        grocery = aggregate([MealSlot("a")], recipes)

        assert totals(grocery) == {("tomate", "unit"): 3.0}

    def test_linear_in_servings(self, recipes_by_id):
        """Test that doubling every slot's servings doubles every total."""
        single = aggregate([MealSlot("crepes", 4), MealSlot("omelette", 2)], recipes_by_id)
        double = aggregate([MealSlot("crepes", 8), MealSlot("omelette", 4)], recipes_by_id)

        assert totals(double) == {key: 2 * value for key, value in totals(single).items()}

    def test_split_servings_add_up(self, recipes_by_id):
        """Test that two slots of s1 and s2 servings equal one slot of s1 + s2."""
        split = aggregate([MealSlot("crepes", 3), MealSlot("crepes", 5)], recipes_by_id)
        joined = aggregate([MealSlot("crepes", 8)], recipes_by_id)

        assert totals(split).keys() == totals(joined).keys()
        for key, value in totals(joined).items():
            assert totals(split)[key] == pytest.approx(value)
        assert split.bare == joined.bare

    def test_negative_quantity_listed_bare(self):
        """Test that a negative quantity is treated as missing."""
        recipes = {
            "a": RecipeRef(
                id="a",
                name="A",
                ingredients=(Structured(name="sel", qty=-2, unit="g"),),
            )
        }

        grocery = aggregate([MealSlot("a")], recipes)

        assert grocery.quantified == []
        assert grocery.bare == [BareLine("sel")]

    def test_large_quantity_formatted(self):
        """Test that a total past the default decimal precision still renders."""
        recipes = {
            "a": RecipeRef(
                id="a",
                name="A",
                ingredients=(Structured(name="sel", qty=1e30, unit="kg"),),
            )
        }

        lines = format_grocery_list(aggregate([MealSlot("a")], recipes), "en")

        assert len(lines) == 1
        assert lines[0].startswith("1,000")
        assert lines[0].endswith(" g sel")

    def test_overflowing_total_dropped(self):
        """Test that quantities beyond the float range never reach a total."""
        recipes = {
            "a": RecipeRef(
                id="a",
                name="A",
                ingredients=(
                    Structured(name="sel", qty=1e308, unit="kg"),
                    Structured(name="poivre", qty=1e308, unit="g"),
                    Structured(name="poivre", qty=1e308, unit="g"),
                ),
            )
        }

        grocery = aggregate([MealSlot("a")], recipes)

        assert totals(grocery) == {("poivre", "g"): 1e308}
        assert format_grocery_list(grocery, "en")[0].endswith(" g poivre")

    def test_repeated_slot_adds_up(self):
        """Test that a recipe planned twice counts twice."""
        recipes = {"a": recipe("a", "3 œufs")}

        grocery = aggregate([MealSlot("a"), MealSlot("a")], recipes)

        assert totals(grocery) == {("œuf", "unit"): 6.0}

    def test_unknown_unit_counts_as_units(self):
        """Test the count fallback for unrecognized units."""
        recipes = {"a": recipe("a", "2 pincées sel", "1 bunch persil")}

        grocery = aggregate([MealSlot("a")], recipes)

        assert totals(grocery) == {("persil", "unit"): 1.0, ("sel", "unit"): 2.0}

    def test_bare_name_dropped_when_quantified(self):
        """Test that a bare name is omitted once any quantity exists for it."""
        recipes = {
            "a": recipe("a", "sel", "poivre"),
            "b": recipe("b", "2 g sel"),
        }

        grocery = aggregate([MealSlot("a"), MealSlot("b")], recipes)

        assert grocery.bare == [BareLine("poivre")]
        assert totals(grocery) == {("sel", "g"): 2.0}

    def test_bare_names_deduplicated(self):
        """Test that a bare name appears once across recipes."""
        recipes = {"a": recipe("a", "poivre"), "b": recipe("b", "Poivre", "basilic")}

        grocery = aggregate([MealSlot("a"), MealSlot("b")], recipes)

        assert grocery.bare == [BareLine("basilic"), BareLine("poivre")]

    def test_structured_entries(self):
        """Test aggregation of structured ingredient records."""
        recipes = {
            "a": RecipeRef(
                id="a",
                name="A",
                base_servings=2,
                ingredients=(
                    Structured(name="Lait", qty="0.5", unit="litres"),
                    Structured(name="sucre", qty=None, unit="g"),
                ),
            )
        }

        grocery = aggregate([MealSlot("a", servings=4)], recipes)

        assert totals(grocery) == {("lait", "ml"): 1000.0}
        assert grocery.bare == [BareLine("sucre")]

    def test_missing_and_empty_slots_skipped(self, recipes_by_id):
        """Test that empty ids and deleted recipes contribute nothing."""
        grocery = aggregate([MealSlot(""), MealSlot("deleted")], recipes_by_id)

        assert len(grocery) == 0
        assert grocery.lines == []

    def test_invalid_servings_clamped(self):
        """Test clamping of base and desired servings."""
        recipes = {"a": recipe("a", "100 g riz", base_servings=0)}

        assert totals(aggregate([MealSlot("a", servings=-3)], recipes)) == {("riz", "g"): 100.0}
        assert totals(aggregate([MealSlot("a", servings=3)], recipes)) == {("riz", "g"): 300.0}

    def test_empty_plan(self, recipes_by_id):
        """Test that no slots gives an empty list."""
        assert list(aggregate([], recipes_by_id)) == []

    def test_sorted_by_name_then_unit(self):
        """Test accent-insensitive ordering of quantified and bare lines."""
        recipes = {
            "a": recipe(
                "a",
                "1 pomme",
                "2 g Épinards",
                "1 ail",
                "1 ml ail",
                "menthe",
                "Aneth",
            )
        }

        grocery = aggregate([MealSlot("a")], recipes)

        assert [(line.name, line.unit) for line in grocery.quantified] == [
            ("ail", "ml"),
            ("ail", "unit"),
            ("épinard", "g"),
            ("pomme", "unit"),
        ]
        assert [line.name for line in grocery.bare] == ["aneth", "menthe"]

    def test_deterministic(self, recipes_by_id):
        """Test that slot order does not change the result."""
        forward = aggregate([MealSlot("crepes", 8), MealSlot("omelette")], recipes_by_id)
        backward = aggregate([MealSlot("omelette"), MealSlot("crepes", 8)], recipes_by_id)

        assert forward == backward

    def test_lines_order(self, recipes_by_id):
        """Test that iteration yields quantified lines before bare ones."""
        grocery = aggregate([MealSlot("omelette")], recipes_by_id)

        lines = list(grocery)
        assert isinstance(lines[-1], BareLine)
        assert all(isinstance(line, QuantifiedLine) for line in lines[:-1])
        assert len(grocery) == len(lines)
