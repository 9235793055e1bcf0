"""
JSON API response types.

Structured responses for embedding applications.
Can be used with FastAPI, Flask, or any web framework.
"""

from typing import Any, Mapping

from pydantic import BaseModel

from domain import Evaluation, FactorValue
from domain.factors import GROUPS, FACTORS


# ============================================================================
# Response Models
# ============================================================================

class FactorValueResponse(BaseModel):
    """API response for one factor reading."""
    id: str
    label: str
    group: str
    index: int | None
    value: int
    max_value: int
    anchor: str | None = None
    confidence: str
    source: str
    evidence: dict[str, Any]


class ScoreResponse(BaseModel):
    """API response for the composite score breakdown."""
    final: int
    core_raw: int
    timing_raw: int
    core_score: int
    timing_score: int
    timing_multiplier: float
    risk_penalty: int
    risk_deduct: int
    pre_risk: float
    flow_score: int | None = None
    confidence: str
    complete_pct: int
    filled: int
    total: int


class RecommendationResponse(BaseModel):
    """API response for the trade structure."""
    action: str
    reason: str
    detail: str
    rule: str
    matched: list[str]


class NarrativeResponse(BaseModel):
    """API response for the narrative summary."""
    primary_driver: str
    key_risk: str
    all_risks: list[str]
    velocity_alert: str | None = None


class EvaluationResponse(BaseModel):
    """Full evaluation API response."""
    symbol: str | None = None
    final: int
    signal: str
    tier: str
    confidence: str
    score: ScoreResponse
    recommendation: RecommendationResponse
    narrative: NarrativeResponse
    factors: list[FactorValueResponse]


class FactorDefinitionResponse(BaseModel):
    """API response for one factor ladder."""
    id: str
    label: str
    group: str
    description: str
    weight: int
    values: list[int]
    anchors: list[str]
    note: str | None = None


# ============================================================================
# Conversion Functions
# ============================================================================

def _json_safe(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def _factor_to_response(factor_id: str, value: FactorValue) -> FactorValueResponse:
    """Convert FactorValue to API response."""
    definition = FACTORS[factor_id]
    return FactorValueResponse(
        id=factor_id,
        label=definition.label,
        group=definition.group.value,
        index=value.index,
        value=definition.value_at(value.index),
        max_value=definition.weight,
        anchor=definition.anchor_at(value.index),
        confidence=value.confidence.value,
        source=value.source,
        evidence=_json_safe(value.evidence),
    )


def factor_values_response(values: Mapping[str, FactorValue]) -> list[FactorValueResponse]:
    """Factor readings in table order; unknown ids are skipped."""
    return [
        _factor_to_response(factor_id, values[factor_id])
        for group in GROUPS
        for factor_id in group.ids
        if factor_id in values
    ]


def to_api_response(evaluation: Evaluation) -> EvaluationResponse:
    """
    Convert an Evaluation to API response.

    Args:
        evaluation: Result of domain.evaluate

    Returns:
        Structured API response
    """
    score = evaluation.score
    rec = evaluation.recommendation
    narrative = evaluation.narrative

    return EvaluationResponse(
        symbol=evaluation.symbol,
        final=score.final,
        signal=evaluation.signal.label.value,
        tier=evaluation.signal.tier,
        confidence=score.confidence.value,
        score=ScoreResponse(
            final=score.final,
            core_raw=score.core_raw,
            timing_raw=score.timing_raw,
            core_score=score.core_score,
            timing_score=score.timing_score,
            timing_multiplier=score.timing_multiplier,
            risk_penalty=score.risk_penalty,
            risk_deduct=score.risk_deduct,
            pre_risk=score.pre_risk,
            flow_score=score.flow_score,
            confidence=score.confidence.value,
            complete_pct=score.complete_pct,
            filled=score.filled,
            total=score.total,
        ),
        recommendation=RecommendationResponse(
            action=rec.action.value,
            reason=rec.reason,
            detail=rec.detail,
            rule=rec.rule,
            matched=list(rec.matched),
        ),
        narrative=NarrativeResponse(
            primary_driver=narrative.primary_driver,
            key_risk=narrative.key_risk,
            all_risks=list(narrative.all_risks),
            velocity_alert=narrative.velocity_alert,
        ),
        factors=factor_values_response(evaluation.values),
    )


def factor_definitions_response() -> list[FactorDefinitionResponse]:
    """Every factor ladder in table order."""
    return [
        FactorDefinitionResponse(
            id=definition.id,
            label=definition.label,
            group=definition.group.value,
            description=definition.description,
            weight=definition.weight,
            values=list(definition.values),
            anchors=list(definition.anchors),
            note=definition.note,
        )
        for group in GROUPS
        for definition in group
    ]


def to_json(evaluation: Evaluation) -> dict[str, Any]:
    """
    Convert an Evaluation to JSON-serializable dict.

    Args:
        evaluation: Evaluation result

    Returns:
        JSON-serializable dictionary
    """
    return to_api_response(evaluation).model_dump(mode="json")


def factor_values_to_json(values: Mapping[str, FactorValue]) -> list[dict[str, Any]]:
    """Convert an interpreted factor map to a JSON-serializable list."""
    return [r.model_dump(mode="json") for r in factor_values_response(values)]
