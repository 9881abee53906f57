import pytest

from drinkctl.drink import Drink, DrinkContent


def _sample():
    return Drink(
        name="Tequila Sunrise",
        path="img/sunrise.png",
        content=[
            DrinkContent("Tequila", 4),
            DrinkContent("Appelsinjuice", 10),
            DrinkContent("Grenadine sirup", 2),
            DrinkContent(),
            DrinkContent(),
        ],
    )


def test_default_drink_is_undeclared():
    drink = Drink()
    assert drink.name == "NOT_DECLARED"
    assert drink.path == "STD/PATH/TO/TMP.png"
    assert drink.content == [DrinkContent("NOT_DECLARED", 0)] * 5


def test_default_slots_are_independent():
    first, second = Drink(), Drink()
    first.content[0].name = "Cola"
    assert second.content[0].name == "NOT_DECLARED"
    assert first.content[1].name == "NOT_DECLARED"


def test_to_fields_layout():
    fields = _sample().to_fields()
    assert len(fields) == 12
    assert fields[0] == "Tequila Sunrise"
    assert fields[1:3] == ["Tequila", "4"]
    assert fields[-1] == "img/sunrise.png"


def test_round_trip():
    drink = _sample()
    assert Drink.from_fields(drink.to_fields()) == drink


def test_from_fields_reads_amounts_leniently():
    fields = _sample().to_fields()
    fields[2] = "abc"
    fields[4] = "12cl"
    drink = Drink.from_fields(fields)
    assert drink.content[0].amount == 0
    assert drink.content[1].amount == 12


def test_from_fields_ignores_extra_fields():
    drink = _sample()
    assert Drink.from_fields(drink.to_fields() + ["*", "*"]) == drink


def test_from_fields_too_short():
    with pytest.raises(ValueError):
        Drink.from_fields(["Mojito", "Rom", "4"])


def test_wrong_slot_count_rejected():
    with pytest.raises(ValueError):
        Drink(content=[DrinkContent()])