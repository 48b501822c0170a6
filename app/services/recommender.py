from typing import Any, Dict, List, Optional, Tuple

from ..schemas.sizing import (
    ComparisonEntry,
    FitLevel,
    SizeChart,
    SizeRecommendation,
    UserMeasurements,
)
from .ranges import classify, parse_center


# Canonical measurement -> lowercase synonyms matched as substrings, checked in order
MEASUREMENT_SYNONYMS: List[Tuple[str, Tuple[str, ...]]] = [
    ("bust", ("busto", "bust")),
    ("waist", ("cintura", "waist")),
    ("hips", ("quadril", "hips")),
]

WAIST_WEIGHT = 1.3
DEFAULT_WEIGHT = 1.0

# Differences up to this many cm are halved before weighting
DAMPENING_THRESHOLD_CM = 2.0

EXCELLENT_SCORE = 4.0
GOOD_SCORE = 12.0
ALTERNATIVE_SIZE_MARGIN = 4.0


class InvalidSizeChart(ValueError):
    pass


def _mentions(name: str, key: str) -> bool:
    lowered = name.lower()
    for canonical, synonyms in MEASUREMENT_SYNONYMS:
        if canonical == key:
            return any(s in lowered for s in synonyms)
    return False


def resolve_measurement_key(name: str) -> Optional[str]:
    """Map a free-form chart column ("Busto", "Waist (cm)") to bust/waist/hips."""
    lowered = name.lower()
    for canonical, synonyms in MEASUREMENT_SYNONYMS:
        if any(s in lowered for s in synonyms):
            return canonical
    return None


def _get_metric_weight(name: str) -> float:
    return WAIST_WEIGHT if _mentions(name, "waist") else DEFAULT_WEIGHT


def _score_size(measurements: UserMeasurements, cells: Dict[str, str]) -> Tuple[float, List[ComparisonEntry]]:
    total_score = 0.0
    comparison: List[ComparisonEntry] = []

    for name, cell in cells.items():
        key = resolve_measurement_key(name)
        if key is None:
            continue

        user_value = getattr(measurements, key)
        center = parse_center(cell)
        difference = abs(user_value - center)

        dampened = difference * 0.5 if difference <= DAMPENING_THRESHOLD_CM else difference
        total_score += dampened * _get_metric_weight(name)

        comparison.append(ComparisonEntry(
            measurement=name,
            user_value=user_value,
            product_range=cell,
            product_center=center,
            difference=difference,
            status=classify(user_value, cell),
        ))

    return total_score, comparison


def fit_level_for(score: float) -> FitLevel:
    if score < EXCELLENT_SCORE:
        return FitLevel.EXCELLENT
    if score < GOOD_SCORE:
        return FitLevel.GOOD
    return FitLevel.APPROXIMATE


def rank_sizes(measurements: UserMeasurements, chart: SizeChart) -> List[Tuple[str, float, List[ComparisonEntry]]]:
    """Score every size with at least one recognised measurement, best first."""
    scored = []
    for size, cells in (chart or {}).items():
        score, comparison = _score_size(measurements, cells)
        if comparison:
            scored.append((size, score, comparison))
    # stable: equal scores keep chart order
    scored.sort(key=lambda item: item[1])
    return scored


def recommend(measurements: UserMeasurements, chart: SizeChart) -> Optional[SizeRecommendation]:
    """Pick the closest size in ``chart`` for ``measurements``.

    Returns None when the chart is empty or no size has a recognised
    measurement. Malformed cells never raise; they score as center 0.
    """
    ranked = rank_sizes(measurements, chart)
    if not ranked:
        return None

    best_size, best_score, best_comparison = ranked[0]

    alternative = None
    if len(ranked) > 1:
        second_size, second_score, _ = ranked[1]
        if abs(best_score - second_score) < ALTERNATIVE_SIZE_MARGIN:
            alternative = second_size

    return SizeRecommendation(
        size=best_size,
        fit_level=fit_level_for(best_score),
        score=best_score,
        comparison=best_comparison,
        alternative_size=alternative,
    )


def normalize_chart(raw: Any) -> SizeChart:
    """Check a chart is a non-empty object of objects and stringify its cells."""
    if not isinstance(raw, dict) or not raw:
        raise InvalidSizeChart("size chart must be a non-empty object")
    out: SizeChart = {}
    for size, cells in raw.items():
        if not isinstance(cells, dict):
            raise InvalidSizeChart(f"size '{size}' must map measurement names to values")
        out[str(size)] = {str(k): "" if v is None else str(v) for k, v in cells.items()}
    return out


def summarize_chart(chart: SizeChart) -> Dict[str, List[str]]:
    """Sizes in chart order and the distinct measurement names in first-seen order."""
    measurements: List[str] = []
    for cells in chart.values():
        for name in cells:
            if name not in measurements:
                measurements.append(name)
    return {"sizes": list(chart.keys()), "measurements": measurements}
