from fastapi import APIRouter, Depends, HTTPException

from ..config import settings
from ..schemas.recommend import (
    BasicDataInput,
    MeasurementInput,
    RecommendResponse,
    SessionCreateRequest,
    SessionResponse,
    SessionResultRequest,
    StepRequest,
)
from ..security import verify_api_key
from ..services.sessions import SessionNotFound, SessionStateError, SessionStore, TryOnSession
from .recommend import build_response, chart_or_400


router = APIRouter(prefix="/sessions", tags=["sessions"], dependencies=[Depends(verify_api_key)])

# In-memory session store (dev/POC). Replace with persistent store in production.
store = SessionStore(ttl_seconds=settings.session_ttl_seconds)


def _out(session: TryOnSession) -> SessionResponse:
    return SessionResponse(
        id=session.id,
        step=session.step,
        user_data=session.user_data,
        measurements=session.measurements,
    )


def _get_or_404(session_id: str) -> TryOnSession:
    try:
        return store.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(body: SessionCreateRequest | None = None) -> SessionResponse:
    body = body or SessionCreateRequest()
    session = store.create(
        user_data=body.user_data.to_basic_data() if body.user_data else None,
        measurements=body.measurements.to_measurements() if body.measurements else None,
    )
    return _out(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    return _out(_get_or_404(session_id))


@router.put("/{session_id}/basic-data", response_model=SessionResponse)
async def submit_basic_data(session_id: str, body: BasicDataInput) -> SessionResponse:
    _get_or_404(session_id)
    return _out(store.submit_basic_data(session_id, body.to_basic_data()))


@router.put("/{session_id}/measurements", response_model=SessionResponse)
async def submit_measurements(session_id: str, body: MeasurementInput) -> SessionResponse:
    _get_or_404(session_id)
    return _out(store.submit_measurements(session_id, body.to_measurements()))


@router.post("/{session_id}/step", response_model=SessionResponse)
async def go_to_step(session_id: str, body: StepRequest) -> SessionResponse:
    _get_or_404(session_id)
    try:
        return _out(store.go_to(session_id, body.step))
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{session_id}/result", response_model=RecommendResponse)
async def session_result(session_id: str, body: SessionResultRequest) -> RecommendResponse:
    chart = chart_or_400(body.size_chart)
    _get_or_404(session_id)
    try:
        rec = store.result(session_id, chart)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await build_response(rec, body.include_feedback, body.tone)


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str) -> None:
    try:
        store.delete(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
