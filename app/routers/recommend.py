import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..cache import cache_get, cache_key, cache_set
from ..config import settings
from ..schemas.recommend import (
    BasicDataInput,
    ChartSummaryRequest,
    ChartSummaryResponse,
    RecommendRequest,
    RecommendResponse,
)
from ..schemas.sizing import SizeChart, SizeRecommendation, UserMeasurements
from ..security import verify_api_key
from ..services.estimator import estimate
from ..services.llm import FitAdvisor
from ..services.recommender import InvalidSizeChart, normalize_chart, recommend, summarize_chart


logger = structlog.get_logger("fitroom")

router = APIRouter(tags=["sizing"], dependencies=[Depends(verify_api_key)])

NO_RECOMMENDATION_MESSAGE = "We couldn't determine a size from this product's size chart."


def chart_or_400(raw) -> SizeChart:
    try:
        return normalize_chart(raw)
    except InvalidSizeChart as e:
        raise HTTPException(status_code=400, detail=str(e))


def cached_recommendation(measurements: UserMeasurements, chart: SizeChart) -> SizeRecommendation | None:
    key = cache_key("recommend", measurements.model_dump(), chart)
    hit = cache_get(key)
    if hit is not None:
        return hit["recommendation"]
    rec = recommend(measurements, chart)
    cache_set(key, {"recommendation": rec}, settings.cache_ttl_seconds)
    return rec


async def build_response(rec: SizeRecommendation | None, include_feedback: bool, tone: str | None) -> RecommendResponse:
    if rec is None:
        return RecommendResponse(recommendation=None, message=NO_RECOMMENDATION_MESSAGE)
    feedback = await FitAdvisor().generate_feedback(rec, tone=tone) if include_feedback else None
    return RecommendResponse(recommendation=rec, feedback=feedback)


@router.post("/estimate", response_model=UserMeasurements)
async def estimate_measurements(body: BasicDataInput) -> UserMeasurements:
    measurements = estimate(body.to_basic_data())
    logger.info("measurements_estimated", gender=body.gender.value, **measurements.model_dump())
    return measurements


@router.post("/recommend", response_model=RecommendResponse)
async def recommend_size(body: RecommendRequest) -> RecommendResponse:
    chart = chart_or_400(body.size_chart)
    rec = cached_recommendation(body.measurements.to_measurements(), chart)
    logger.info(
        "recommendation_computed",
        sizes=len(chart),
        size=rec.size if rec else None,
        fit_level=rec.fit_level.value if rec else None,
        alternative_size=rec.alternative_size if rec else None,
    )
    return await build_response(rec, body.include_feedback, body.tone)


@router.post("/size-chart/summary", response_model=ChartSummaryResponse)
async def size_chart_summary(body: ChartSummaryRequest) -> ChartSummaryResponse:
    return ChartSummaryResponse(**summarize_chart(chart_or_400(body.size_chart)))
