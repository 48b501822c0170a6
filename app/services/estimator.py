import math
from typing import Dict

from ..schemas.sizing import Gender, UserBasicData, UserMeasurements


# (height coefficient, weight coefficient) per measurement
COEFFICIENTS: Dict[Gender, Dict[str, tuple[float, float]]] = {
    Gender.FEMININO: {
        "bust": (0.52, 0.15),
        "waist": (0.38, 0.12),
        "hips": (0.54, 0.18),
    },
    Gender.MASCULINO: {
        "bust": (0.50, 0.20),
        "waist": (0.40, 0.15),
        "hips": (0.48, 0.12),
    },
}

# Multipliers applied once age is strictly above AGE_CORRECTION_FROM
AGE_CORRECTION_FROM = 30
AGE_CORRECTION: Dict[Gender, Dict[str, float]] = {
    Gender.FEMININO: {"bust": 1.02, "waist": 1.03, "hips": 1.02},
    Gender.MASCULINO: {"waist": 1.05},
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate(data: UserBasicData) -> UserMeasurements:
    """Estimate bust, waist and hips (cm) from height, weight, sex and age.

    These are coarse anthropometric approximations meant as a starting point
    for manual adjustment. No range validation or clamping happens here:
    out-of-range input yields well-typed but meaningless output.
    """
    gender = Gender(data.gender)
    coefficients = COEFFICIENTS[gender]
    corrections = AGE_CORRECTION[gender] if data.age > AGE_CORRECTION_FROM else {}

    values: Dict[str, int] = {}
    for name, (per_height, per_weight) in coefficients.items():
        raw = data.height * per_height + data.weight * per_weight
        raw *= corrections.get(name, 1.0)
        values[name] = _round_half_up(raw)

    return UserMeasurements(**values)
