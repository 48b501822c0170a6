"""In-memory try-on sessions.

Owns the wizard state (current step plus the shopper's stored answers) so the
sizing functions never need to know about steps or storage. Swap this module
for a persistent store in production; the estimator and recommender are
unaffected.
"""
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

import structlog

from ..schemas.sizing import SizeChart, SizeRecommendation, UserBasicData, UserMeasurements
from .estimator import estimate
from .recommender import recommend


logger = structlog.get_logger("fitroom")

STEPS = ("user-data", "adjust", "result")


class SessionNotFound(KeyError):
    pass


class SessionStateError(RuntimeError):
    pass


@dataclass
class TryOnSession:
    id: str
    step: str = "user-data"
    user_data: Optional[UserBasicData] = None
    measurements: Optional[UserMeasurements] = None
    expires_at: float = field(default=0.0)


class SessionStore:
    def __init__(self, ttl_seconds: int) -> None:
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, TryOnSession] = {}

    def _touch(self, session: TryOnSession) -> TryOnSession:
        session.expires_at = time.time() + self.ttl_seconds
        return session

    def _purge_expired(self) -> None:
        now = time.time()
        for sid in [sid for sid, s in self._sessions.items() if s.expires_at <= now]:
            self._sessions.pop(sid, None)
            logger.info("session_expired", session_id=sid)

    def create(
        self,
        user_data: Optional[UserBasicData] = None,
        measurements: Optional[UserMeasurements] = None,
    ) -> TryOnSession:
        """Start a session, optionally restoring answers saved on a previous visit."""
        self._purge_expired()
        session = TryOnSession(id=uuid.uuid4().hex, user_data=user_data, measurements=measurements)
        self._sessions[session.id] = self._touch(session)
        logger.info("session_created", session_id=session.id, restored=bool(user_data or measurements))
        return session

    def get(self, session_id: str) -> TryOnSession:
        self._purge_expired()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return self._touch(session)

    def submit_basic_data(self, session_id: str, data: UserBasicData) -> TryOnSession:
        session = self.get(session_id)
        session.user_data = data
        session.measurements = estimate(data)
        session.step = "adjust"
        logger.info("session_measurements_estimated", session_id=session_id, measurements=session.measurements.model_dump())
        return session

    def submit_measurements(self, session_id: str, measurements: UserMeasurements) -> TryOnSession:
        # Shoppers with saved measurements may skip the basic-data step.
        session = self.get(session_id)
        session.measurements = measurements
        session.step = "result"
        return session

    def go_to(self, session_id: str, step: str) -> TryOnSession:
        if step not in STEPS:
            raise SessionStateError(f"unknown step '{step}'")
        session = self.get(session_id)
        if step != "user-data" and session.measurements is None:
            raise SessionStateError(f"step '{step}' requires measurements")
        session.step = step
        return session

    def result(self, session_id: str, chart: SizeChart) -> Optional[SizeRecommendation]:
        session = self.get(session_id)
        if session.measurements is None:
            raise SessionStateError("measurements are required before a recommendation")
        session.step = "result"
        rec = recommend(session.measurements, chart)
        logger.info("session_recommendation", session_id=session_id, size=rec.size if rec else None)
        return rec

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
        logger.info("session_deleted", session_id=session_id)

    def __len__(self) -> int:
        return len(self._sessions)
