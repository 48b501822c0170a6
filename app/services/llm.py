import json
from typing import Any, Dict, List

import structlog
from openai import AsyncOpenAI

from ..config import settings
from ..schemas.sizing import FitLevel, MeasurementStatus, SizeRecommendation


logger = structlog.get_logger("fitroom")


FIT_LEVEL_HEADLINES = {
    FitLevel.EXCELLENT: "Excellent fit: your measurements are very close to this size.",
    FitLevel.GOOD: "Good fit: this size should work, with small differences.",
    FitLevel.APPROXIMATE: "Approximate fit: this size may work, but review your measurements.",
}

STATUS_TEXT = {
    MeasurementStatus.OK: "fits well",
    MeasurementStatus.TIGHT: "a little tight",
    MeasurementStatus.LOOSE: "a little loose",
}


def _rule_based(rec: SizeRecommendation) -> Dict[str, Any]:
    lines: List[str] = [
        f"{c.measurement}: {STATUS_TEXT[c.status]} ({c.user_value:g}cm vs {c.product_range})"
        for c in rec.comparison
    ]
    alternative = None
    if rec.alternative_size:
        alternative = (
            f"You are between sizes {rec.size} and {rec.alternative_size}. "
            f"We recommend {rec.size} for a closer fit."
        )

    parts = [f"Recommended size: {rec.size}.", FIT_LEVEL_HEADLINES[rec.fit_level]]
    tight = [c.measurement for c in rec.comparison if c.status == MeasurementStatus.TIGHT]
    loose = [c.measurement for c in rec.comparison if c.status == MeasurementStatus.LOOSE]
    if tight:
        parts.append(f"Areas likely tight: {', '.join(tight)}.")
    if loose:
        parts.append(f"Areas with generous ease: {', '.join(loose)}.")
    if alternative:
        parts.append(alternative)

    return {
        "headline": FIT_LEVEL_HEADLINES[rec.fit_level],
        "measurements": lines,
        "alternative": alternative,
        "final": " ".join(parts),
    }


class FitAdvisor:
    """Turns a recommendation into shopper-facing text.

    Rule-based unless OPENAI_API_KEY is configured, in which case the model
    rewrites the summary paragraph. Any model failure falls back to the rules.
    """

    def __init__(self) -> None:
        self.api_key = settings.openai_api_key
        self.client = AsyncOpenAI(api_key=self.api_key) if self.api_key else None

    async def generate_feedback(self, rec: SizeRecommendation, tone: str | None = None) -> Dict[str, Any]:
        feedback = _rule_based(rec)
        if not self.client:
            return feedback

        prompt = (
            "You are a fitting-room assistant. Given a recommended size, its fit level, and a per-measurement "
            "comparison (status ok/tight/loose against the size chart), reply with a JSON object holding one key "
            "'final': a single paragraph (max 60 words) summarizing the fit. If an alternative size is present, "
            "mention the shopper sits between both sizes and that the recommended one is the closer fit.\n"
            "Do not include markdown formatting, just the raw JSON."
        )
        if tone:
            prompt += f"\n\nTone/Style: {tone}"

        content = rec.model_dump(mode="json")
        try:
            resp = await self.client.chat.completions.create(
                model=settings.openai_model,
                messages=[
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": json.dumps(content)},
                ],
                temperature=0.3,
                max_tokens=200,
                response_format={"type": "json_object"},
            )
            raw_content = (resp.choices[0].message.content or "").strip()
            final = json.loads(raw_content).get("final")
            if isinstance(final, str) and final.strip():
                feedback["final"] = final.strip()
        except Exception as e:
            logger.warning("fit_feedback_llm_failed", size=rec.size, error=str(e))
        return feedback
