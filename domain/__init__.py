from .enums import (
    ConfidenceLabel,
    ConfidenceTag,
    FactorGroupKind,
    SignalLabel,
    TradeAction,
)
from .errors import (
    ConfigurationInconsistency,
    DecisionTreeExhausted,
    ErrorCode,
    ScorerError,
)
from .models import (
    Evaluation,
    FactorValue,
    Narrative,
    Recommendation,
    ScoreResult,
    Signal,
)
from .normalize import (
    NormalizedRecord,
    coerce_number,
    coerce_string,
    normalize_record,
)
from .scoring import (
    compute_scores,
    get_confidence,
    get_signal,
)
from .trade_structure import (
    RULES,
    TradeInputs,
    TradeRule,
    get_trade_structure,
)
from .engine import (
    evaluate,
    evaluate_batch,
    evaluate_record,
    interpret,
    merge_values,
    rank_evaluations,
)

__all__ = [
    # Enums
    "ConfidenceLabel",
    "ConfidenceTag",
    "FactorGroupKind",
    "SignalLabel",
    "TradeAction",
    # Errors
    "ConfigurationInconsistency",
    "DecisionTreeExhausted",
    "ErrorCode",
    "ScorerError",
    # Models
    "Evaluation",
    "FactorValue",
    "Narrative",
    "Recommendation",
    "ScoreResult",
    "Signal",
    # Field normalizer
    "NormalizedRecord",
    "coerce_number",
    "coerce_string",
    "normalize_record",
    # Scoring
    "compute_scores",
    "get_confidence",
    "get_signal",
    # Trade structure
    "RULES",
    "TradeInputs",
    "TradeRule",
    "get_trade_structure",
    # Engine
    "evaluate",
    "evaluate_batch",
    "evaluate_record",
    "interpret",
    "merge_values",
    "rank_evaluations",
]
