import pytest

from cookshelf.model import (
    Cookware,
    Ingredient,
    Modifiers,
    Quantity,
    Recipe,
    ReferenceTarget,
)


def test_display_name_prefers_alias():
    assert Ingredient("tipo zero flour", alias="flour").display_name() == "flour"
    assert Ingredient("salt").display_name() == "salt"
    assert Cookware("frying pan", alias="pan").display_name() == "pan"
    assert Cookware("pot").display_name() == "pot"


@pytest.mark.parametrize(
    "modifiers, listed",
    [
        (Modifiers(0), True),
        (Modifiers.OPT, True),
        (Modifiers.HIDDEN, False),
        (Modifiers.REF, False),
        (Modifiers.RECIPE | Modifiers.NEW, True),
    ],
)
def test_should_be_listed(modifiers, listed):
    assert modifiers.should_be_listed() is listed


def test_is_optional():
    assert (Modifiers.OPT | Modifiers.HIDDEN).is_optional() is True
    assert Modifiers.HIDDEN.is_optional() is False


def test_quantity_text():
    assert str(Quantity(2, "g")) == "2 g"
    assert str(Quantity(2.0)) == "2"
    assert str(Quantity(0.5, "cup")) == "0.5 cup"
    assert str(Quantity((1, 2), "tbsp")) == "1-2 tbsp"
    assert str(Quantity("some")) == "some"


def test_tags_from_list_and_string():
    assert Recipe(metadata={"tags": ["quick", "easy"]}).tags() == ["quick", "easy"]
    assert Recipe(metadata={"tags": "quick, easy"}).tags() == ["quick", "easy"]
    assert Recipe().tags() is None


def test_description():
    assert Recipe(metadata={"description": "A soup"}).description() == "A soup"
    assert Recipe(metadata={"description": 3}).description() is None


def test_group_ingredients_merges_references():
    recipe = Recipe(
        ingredients=[
            Ingredient("flour", quantity=Quantity(100, "g")),
            Ingredient("water", quantity=Quantity(1, "cup")),
            Ingredient(
                "flour",
                quantity=Quantity(50, "g"),
                modifiers=Modifiers.REF,
                reference=(0, ReferenceTarget.INGREDIENT),
            ),
        ]
    )
    groups = recipe.group_ingredients()
    assert [igr.name for igr, _ in groups] == ["flour", "water"]
    flour_quantities = groups[0][1]
    assert len(flour_quantities) == 1
    assert flour_quantities[0].unit == "g"
    assert flour_quantities[0].value == 100 + 50


def test_group_ingredients_keeps_different_units():
    recipe = Recipe(
        ingredients=[
            Ingredient("milk", quantity=Quantity(1, "cup")),
            Ingredient(
                "milk",
                quantity=Quantity(2, "tbsp"),
                reference=(0, ReferenceTarget.INGREDIENT),
            ),
        ]
    )
    (igr, quantities), = recipe.group_ingredients()
    assert [str(q) for q in quantities] == ["1 cup", "2 tbsp"]


def test_step_reference_is_its_own_group():
    recipe = Recipe(
        ingredients=[Ingredient("dough", reference=(0, ReferenceTarget.STEP))]
    )
    assert recipe.group_ingredients() == [(recipe.ingredients[0], [])]


def test_group_cookware_skips_hidden():
    recipe = Recipe(
        cookware=[
            Cookware("pan", quantity=2),
            Cookware("knife", modifiers=Modifiers.HIDDEN),
        ]
    )
    groups = recipe.group_cookware()
    assert [(cw.name, [str(q) for q in qs]) for cw, qs in groups] == [("pan", ["2"])]