import math

from app.schemas.sizing import Gender, UserBasicData, UserMeasurements
from app.services.estimator import estimate


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def test_feminine_at_30_has_no_age_correction():
    result = estimate(UserBasicData(gender="feminino", height=165, weight=65, age=30))

    assert result.bust > 0 and result.waist > 0 and result.hips > 0
    assert result.bust == _round(165 * 0.52 + 65 * 0.15)
    assert result.waist == _round(165 * 0.38 + 65 * 0.12)
    assert result.hips == _round(165 * 0.54 + 65 * 0.18)


def test_feminine_over_30_scales_all_three():
    result = estimate(UserBasicData(gender=Gender.FEMININO, height=165, weight=65, age=31))
    # 95.55 * 1.02, 70.5 * 1.03, 100.8 * 1.02
    assert result == UserMeasurements(bust=97, waist=73, hips=103)


def test_masculine_formulas():
    result = estimate(UserBasicData(gender="masculino", height=180, weight=80, age=25))
    assert result == UserMeasurements(bust=106, waist=84, hips=96)


def test_masculine_over_30_only_waist_grows():
    young = estimate(UserBasicData(gender="masculino", height=180, weight=80, age=30))
    older = estimate(UserBasicData(gender="masculino", height=180, weight=80, age=40))

    assert older.bust == young.bust
    assert older.hips == young.hips
    assert older.waist == 88  # 84 * 1.05 = 88.2


def test_halves_round_up():
    # 0.50 * 101 + 0.20 * 0 = 50.5
    result = estimate(UserBasicData(gender="masculino", height=101, weight=0, age=20))
    assert result.bust == 51


def test_out_of_range_input_is_not_clamped():
    result = estimate(UserBasicData(gender="feminino", height=-100, weight=0, age=5))
    assert result.bust == -52
    assert result.hips == -54


def test_deterministic():
    data = UserBasicData(gender="feminino", height=170, weight=58, age=45)
    assert estimate(data) == estimate(data)
