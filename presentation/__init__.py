from .json_api import (
    EvaluationResponse,
    FactorDefinitionResponse,
    FactorValueResponse,
    RecommendationResponse,
    ScoreResponse,
    factor_definitions_response,
    factor_values_to_json,
    to_api_response,
    to_json,
)

__all__ = [
    # JSON API
    "EvaluationResponse",
    "FactorDefinitionResponse",
    "FactorValueResponse",
    "RecommendationResponse",
    "ScoreResponse",
    "factor_definitions_response",
    "factor_values_to_json",
    "to_api_response",
    "to_json",
]
