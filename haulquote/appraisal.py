"""Rough item appraisal for collateral estimates."""

import math
import random
from typing import Optional

from haulquote.pricing import PriceCalculationError

# Appraised value lands within ±15% of the customer's estimate.
MIN_FACTOR = 0.85
FACTOR_SPREAD = 0.30
BASE_CONFIDENCE = 75
CONFIDENCE_SPREAD = 20


def appraise(item_description: str, estimated_value: float,
             rng: Optional[random.Random] = None) -> dict:
    """Appraise an item around the customer's own estimate.

    Returns:
        ``{"itemDescription", "estimatedValue", "appraisedValue",
        "confidence", "notes"}``.

    Raises:
        PriceCalculationError: If the description is empty or the value negative or not finite.
    """
    if not item_description or not (estimated_value >= 0 and math.isfinite(estimated_value)):
        raise PriceCalculationError(
            "Item description is required and estimated value must be non-negative"
        )

    rng = rng or random.Random()
    appraised_value = round(estimated_value * (MIN_FACTOR + rng.random() * FACTOR_SPREAD))
    confidence = round(BASE_CONFIDENCE + rng.random() * CONFIDENCE_SPREAD)

    return {
        "itemDescription": item_description,
        "estimatedValue": estimated_value,
        "appraisedValue": appraised_value,
        "confidence": confidence,
        "notes": (
            "Appraisal based on current market conditions. "
            f"Confidence level: {confidence}%"
        ),
    }
