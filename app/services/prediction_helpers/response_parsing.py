# /app/services/prediction_helpers/response_parsing.py

import json
import math
from typing import Any, List, Optional

from ...models.prediction_model import AIRiskAssessment, AssessmentParseResult, RiskFactor

DEFAULT_AI_CONFIDENCE = 0.8


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _as_number(value: Any) -> Optional[float]:
    """Returns a finite float, or None for anything else (bools included)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _extract_first_json_object(response_text: str) -> dict:
    """
    Finds the first JSON object in a free-text reply. Text around the object,
    such as markdown fences or a trailing sentence, is ignored.
    """
    start_index = response_text.find('{')
    if start_index == -1:
        raise json.JSONDecodeError("No JSON object found in AI response", response_text, 0)
    parsed, _ = json.JSONDecoder().raw_decode(response_text[start_index:])
    if not isinstance(parsed, dict):
        raise json.JSONDecodeError("AI response JSON is not an object", response_text, start_index)
    return parsed


def _parse_factors(raw_factors: Any) -> List[RiskFactor]:
    if not isinstance(raw_factors, list):
        return []
    factors = []
    for raw in raw_factors:
        if not isinstance(raw, dict):
            continue
        impact = _as_number(raw.get("impact"))
        feature = raw.get("feature")
        if impact is None or not isinstance(feature, str) or not feature:
            print(f"WARNING: Dropping malformed risk factor from AI response: {raw}")
            continue
        description = raw.get("description")
        factors.append(RiskFactor(
            feature=feature,
            impact=_clamp(impact, -1.0, 1.0),
            description=description if isinstance(description, str) else "",
        ))
    return factors


def parse_risk_assessment(response_text: Optional[str]) -> AssessmentParseResult:
    """
    Turns the raw Gemini reply into a validated assessment. Every numeric
    field is range-checked before use: riskScore is required and clamped to
    [0, 1], confidence defaults to 0.8 and is clamped to [0, 1], and factor
    impacts are clamped to [-1, 1]. Any problem yields `success=False`.
    """
    if not response_text:
        return AssessmentParseResult(success=False, error="Empty AI response.")

    try:
        parsed = _extract_first_json_object(response_text)
    except json.JSONDecodeError as e:
        return AssessmentParseResult(success=False, error=f"Invalid JSON in AI response: {e}")

    risk_score = _as_number(parsed.get("riskScore"))
    if risk_score is None:
        return AssessmentParseResult(success=False, error=f"riskScore is missing or not a number: {parsed.get('riskScore')!r}")

    confidence = _as_number(parsed.get("confidence"))
    if confidence is None:
        confidence = DEFAULT_AI_CONFIDENCE

    reasoning = parsed.get("reasoning")
    assessment = AIRiskAssessment(
        riskScore=_clamp(risk_score, 0.0, 1.0),
        confidence=_clamp(confidence, 0.0, 1.0),
        factors=_parse_factors(parsed.get("factors")),
        reasoning=reasoning if isinstance(reasoning, str) else None,
    )
    return AssessmentParseResult(success=True, assessment=assessment)
