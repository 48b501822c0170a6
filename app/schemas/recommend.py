from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from .sizing import Gender, SizeRecommendation, UserBasicData, UserMeasurements


class BasicDataInput(BaseModel):
    gender: Gender = Gender.FEMININO
    height: float = Field(..., ge=100, le=250, description="cm")
    weight: float = Field(..., ge=30, le=200, description="kg")
    age: float = Field(..., ge=10, le=120, description="years")

    def to_basic_data(self) -> UserBasicData:
        return UserBasicData(**self.model_dump())


class MeasurementInput(BaseModel):
    bust: float = Field(..., gt=0)
    waist: float = Field(..., gt=0)
    hips: float = Field(..., gt=0)

    def to_measurements(self) -> UserMeasurements:
        return UserMeasurements(**self.model_dump())


class RecommendRequest(BaseModel):
    measurements: MeasurementInput
    size_chart: Dict[str, Any]
    include_feedback: bool = False
    tone: Optional[str] = None


class RecommendResponse(BaseModel):
    recommendation: Optional[SizeRecommendation] = None
    message: Optional[str] = None
    feedback: Optional[Dict[str, Any]] = None


class ChartSummaryRequest(BaseModel):
    size_chart: Dict[str, Any]


class ChartSummaryResponse(BaseModel):
    sizes: List[str]
    measurements: List[str]


class SessionCreateRequest(BaseModel):
    user_data: Optional[BasicDataInput] = None
    measurements: Optional[MeasurementInput] = None


class SessionResponse(BaseModel):
    id: str
    step: str
    user_data: Optional[UserBasicData] = None
    measurements: Optional[UserMeasurements] = None


class StepRequest(BaseModel):
    step: Literal["user-data", "adjust", "result"]


class SessionResultRequest(BaseModel):
    size_chart: Dict[str, Any]
    include_feedback: bool = False
    tone: Optional[str] = None
