import math

import pytest

from cattle_api.weight import (
    Breed, Condition, dressing_percentage, estimated_live_weight_kg,
    estimated_meat_yield_kg, estimate,
    schaeffer_weight_kg, usda_weight_kg, cook_weight_kg
)


@pytest.mark.parametrize("breed, condition, expected", [
    (Breed.ANGUS, Condition.EXCELLENT, 0.64),
    (Breed.HOLSTEIN, Condition.THIN, 0.51),
    (Breed.OTHER, Condition.AVERAGE, 0.58),
    (Breed.BRAHMAN, Condition.GOOD, 0.60),
    (Breed.JERSEY, Condition.EXCELLENT, 0.59),
    (Breed.SIMMENTAL, Condition.THIN, 0.56),
])
def test_dressing_percentage(breed, condition, expected):
    assert dressing_percentage(breed, condition) == pytest.approx(expected)


def test_every_beef_breed_gets_the_same_bonus():
    beef = [Breed.ANGUS, Breed.HEREFORD, Breed.CHAROLAIS, Breed.LIMOUSIN, Breed.SIMMENTAL]
    for breed in beef:
        assert dressing_percentage(breed, Condition.AVERAGE) == pytest.approx(0.60)


def test_condition_order_increases_dressing():
    values = [dressing_percentage(Breed.ANGUS, c) for c in Condition]
    assert values == sorted(values)


def test_enums_parse_case_insensitively():
    assert Breed("angus") is Breed.ANGUS
    assert Breed(" HOLSTEIN ") is Breed.HOLSTEIN
    assert Condition("excellent") is Condition.EXCELLENT
    with pytest.raises(ValueError):
        Breed("Wagyu")


def test_no_girth_no_weight():
    assert estimated_live_weight_kg(0, 120) == 0
    assert estimated_live_weight_kg(-5, 120) == 0


def test_girth_only_averages_two_formulas():
    w2 = 150 * 150 * 0.00065 * 0.454
    w3 = ((150 / 2.54 + 18) ** 2 / 300) * 0.45359
    assert usda_weight_kg(150) == pytest.approx(w2)
    assert cook_weight_kg(150) == pytest.approx(w3)
    assert estimated_live_weight_kg(150, 0) == pytest.approx((w2 + w3) / 2)
    assert estimated_live_weight_kg(150, 0) == pytest.approx(7.8085, abs=1e-3)


def test_with_length_averages_three_formulas():
    w1 = 150 * 150 * 120 * 0.000078 + 40
    assert schaeffer_weight_kg(150, 120) == pytest.approx(250.6)
    expected = (w1 + usda_weight_kg(150) + cook_weight_kg(150)) / 3
    assert estimated_live_weight_kg(150, 120) == pytest.approx(expected)
    assert estimated_live_weight_kg(150, 120) == pytest.approx(88.739, abs=1e-2)


def test_scenario_live_weight():
    girth = math.pi * 80 * 1.08
    live = estimated_live_weight_kg(girth, 120)
    assert round(live, 2) == round(
        (schaeffer_weight_kg(girth, 120) + usda_weight_kg(girth) + cook_weight_kg(girth)) / 3, 2
    )
    assert live == pytest.approx(258.31, abs=0.05)


def test_meat_yield():
    assert estimated_meat_yield_kg(200, 0.6) == pytest.approx(120)


def test_estimate_bundle():
    result = estimate(150, 120, Breed.HOLSTEIN, Condition.THIN)
    assert result.dressing_percentage == pytest.approx(0.51)
    assert result.meat_yield_kg == pytest.approx(result.live_weight_kg * 0.51)
    assert set(result.as_dict()) == {'live_weight_kg', 'meat_yield_kg', 'dressing_percentage'}
