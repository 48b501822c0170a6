from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


# size label -> measurement name -> "92 - 96" | "92"
SizeChart = Dict[str, Dict[str, str]]


class Gender(str, Enum):
    FEMININO = "feminino"
    MASCULINO = "masculino"


class MeasurementStatus(str, Enum):
    OK = "ok"
    TIGHT = "tight"
    LOOSE = "loose"


class FitLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    APPROXIMATE = "approximate"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class UserBasicData(_Frozen):
    """Coarse shopper attributes. Range checks belong to the caller."""

    gender: Gender
    height: float
    weight: float
    age: float


class UserMeasurements(_Frozen):
    bust: float
    waist: float
    hips: float


class ComparisonEntry(_Frozen):
    measurement: str
    user_value: float
    product_range: str
    product_center: float
    difference: float
    status: MeasurementStatus


class SizeRecommendation(_Frozen):
    size: str
    fit_level: FitLevel
    score: float
    comparison: List[ComparisonEntry] = Field(default_factory=list)
    alternative_size: Optional[str] = None
