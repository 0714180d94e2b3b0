"""
Weight Estimator - converts girth + body length to live weight and meat yield

Live weight is the mean of three published empirical formulas:
- Schaeffer:  LW = HG^2 * BL * 0.000078 + 40         (needs body length)
- USDA (adj): LW = HG^2 * 0.00065 * 0.454
- Cook:       LW = (HG_in + 18)^2 / 300 * 0.45359

When body length is unavailable only the two girth-only formulas are
averaged. Meat yield is live weight times a dressing percentage adjusted
for breed and body condition.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from .config import (
    BASE_DRESSING_PCT, BEEF_BREED_ADJUSTMENT, DAIRY_BREED_ADJUSTMENT
)

CM_PER_INCH = 2.54


class _NamedEnum(str, Enum):
    """Enum parsed case-insensitively from its display name"""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class Breed(_NamedEnum):
    ANGUS = "Angus"
    HEREFORD = "Hereford"
    CHAROLAIS = "Charolais"
    LIMOUSIN = "Limousin"
    SIMMENTAL = "Simmental"
    BRAHMAN = "Brahman"
    HOLSTEIN = "Holstein"
    JERSEY = "Jersey"
    OTHER = "Other"


class Condition(_NamedEnum):
    """Body condition, thinnest first"""
    THIN = "Thin"
    AVERAGE = "Average"
    GOOD = "Good"
    EXCELLENT = "Excellent"


BEEF_BREEDS = frozenset({Breed.ANGUS, Breed.HEREFORD, Breed.CHAROLAIS, Breed.LIMOUSIN, Breed.SIMMENTAL})
DAIRY_BREEDS = frozenset({Breed.HOLSTEIN, Breed.JERSEY})

CONDITION_ADJUSTMENTS: Dict[Condition, float] = {
    Condition.THIN: -0.04,
    Condition.AVERAGE: 0.0,
    Condition.GOOD: 0.02,
    Condition.EXCELLENT: 0.04,
}


@dataclass(frozen=True)
class WeightEstimate:
    live_weight_kg: float
    meat_yield_kg: float
    dressing_percentage: float

    def as_dict(self) -> Dict[str, float]:
        return {
            'live_weight_kg': self.live_weight_kg,
            'meat_yield_kg': self.meat_yield_kg,
            'dressing_percentage': self.dressing_percentage,
        }


def breed_adjustment(breed: Breed) -> float:
    if breed in BEEF_BREEDS:
        return BEEF_BREED_ADJUSTMENT
    if breed in DAIRY_BREEDS:
        return DAIRY_BREED_ADJUSTMENT
    return 0.0


def dressing_percentage(breed: Breed, condition: Condition) -> float:
    """
    Fraction of live weight expected as carcass.

    Not clamped; unusual breed/condition combinations can land outside
    typical biological bounds.
    """
    return BASE_DRESSING_PCT + breed_adjustment(breed) + CONDITION_ADJUSTMENTS[condition]


def schaeffer_weight_kg(girth_cm: float, length_cm: float) -> float:
    return girth_cm * girth_cm * length_cm * 0.000078 + 40


def usda_weight_kg(girth_cm: float) -> float:
    return (girth_cm * girth_cm * 0.00065) * 0.454


def cook_weight_kg(girth_cm: float) -> float:
    girth_in = girth_cm / CM_PER_INCH
    return ((girth_in + 18) * (girth_in + 18) / 300) * 0.45359


def estimated_live_weight_kg(girth_cm: float, length_cm: float) -> float:
    """
    Average of the applicable formulas.

    Args:
        girth_cm: Heart girth; 0 or less means no estimate (returns 0)
        length_cm: Body length; 0 or less drops the Schaeffer formula

    Returns:
        Estimated live weight in kg
    """
    if girth_cm <= 0:
        return 0.0

    w2 = usda_weight_kg(girth_cm)
    w3 = cook_weight_kg(girth_cm)

    if length_cm > 0:
        w1 = schaeffer_weight_kg(girth_cm, length_cm)
        return (w1 + w2 + w3) / 3

    return (w2 + w3) / 2


def estimated_meat_yield_kg(live_weight_kg: float, dressing: float) -> float:
    return live_weight_kg * dressing


def estimate(girth_cm: float, length_cm: float, breed: Breed, condition: Condition) -> WeightEstimate:
    live_weight = estimated_live_weight_kg(girth_cm, length_cm)
    dressing = dressing_percentage(breed, condition)
    return WeightEstimate(
        live_weight_kg=live_weight,
        meat_yield_kg=estimated_meat_yield_kg(live_weight, dressing),
        dressing_percentage=dressing,
    )
