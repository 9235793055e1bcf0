"""
Domain models - immutable result carriers.

Every evaluation builds these from scratch; nothing here is mutated after
construction.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .enums import ConfidenceLabel, ConfidenceTag, SignalLabel, TradeAction


@dataclass(frozen=True)
class FactorValue:
    """
    One observation of one factor for one instrument.

    index is None when there is no usable evidence; such a factor is
    unscored, never treated as bucket 0.
    """
    index: int | None
    confidence: ConfidenceTag = ConfidenceTag.LOW
    evidence: Mapping[str, Any] = field(default_factory=dict)
    source: str = "auto"  # "auto" or "manual"

    def __post_init__(self) -> None:
        if self.index is not None and (isinstance(self.index, bool) or not isinstance(self.index, int)):
            raise TypeError(f"index must be int or None, got {self.index!r}")
        object.__setattr__(self, "evidence", MappingProxyType(dict(self.evidence)))

    @property
    def is_scored(self) -> bool:
        return self.index is not None

    @classmethod
    def missing(cls, reason: str, **evidence: Any) -> "FactorValue":
        """Unscored value with the reason recorded in evidence."""
        return cls(index=None, confidence=ConfidenceTag.LOW, evidence={"reason": reason, **evidence})


@dataclass(frozen=True)
class ScoreResult:
    """Composite score breakdown."""
    core_raw: int
    timing_raw: int
    risk_penalty: int        # before the 15 point cap
    risk_deduct: int         # 0-15
    core_score: int          # 0-80
    timing_score: int        # 0-20
    timing_multiplier: float
    pre_risk: float
    final: int               # 0-100
    flow_score: int | None
    confidence: ConfidenceLabel
    complete_pct: int
    filled: int
    total: int


@dataclass(frozen=True)
class Signal:
    """Tiered signal derived from the final score."""
    label: SignalLabel
    tier: str       # A, B, C, D, F
    threshold: int  # lowest final score in this tier


@dataclass(frozen=True)
class Recommendation:
    """Outcome of the trade-structure decision tree."""
    action: TradeAction
    reason: str
    detail: str
    rule: str
    matched: tuple[str, ...] = ()
    terminal: bool = True


@dataclass(frozen=True)
class Narrative:
    """Plain-language summary of what drives the score."""
    primary_driver: str
    key_risk: str
    all_risks: tuple[str, ...]
    velocity_alert: str | None = None


@dataclass(frozen=True)
class Evaluation:
    """Full result of one evaluation call."""
    values: Mapping[str, FactorValue]
    score: ScoreResult
    signal: Signal
    recommendation: Recommendation
    narrative: Narrative
    symbol: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def final(self) -> int:
        return self.score.final

    @property
    def confidence(self) -> ConfidenceLabel:
        return self.score.confidence
