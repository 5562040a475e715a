"""Tests for item appraisal."""

import random

import pytest

from haulquote.appraisal import appraise
from haulquote.pricing import PriceCalculationError


class _FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__()
        self._value = value

    def random(self) -> float:
        return self._value


def test_appraise_low_end():
    result = appraise("Tritanium", 1_000, rng=_FixedRandom(0.0))
    assert result["appraisedValue"] == 850
    assert result["confidence"] == 75
    assert result["notes"].endswith("Confidence level: 75%")


def test_appraise_high_end():
    result = appraise("Tritanium", 1_000, rng=_FixedRandom(1.0))
    assert result["appraisedValue"] == 1_150
    assert result["confidence"] == 95


def test_appraise_echoes_input():
    result = appraise("Charon", 0, rng=_FixedRandom(0.5))
    assert result["itemDescription"] == "Charon"
    assert result["estimatedValue"] == 0
    assert result["appraisedValue"] == 0


@pytest.mark.parametrize("description, value", [
    ("", 10), (None, 10), ("Charon", -1), ("Charon", float("nan")), ("Charon", float("inf")),
])
def test_appraise_rejects_bad_input(description, value):
    with pytest.raises(PriceCalculationError):
        appraise(description, value)
