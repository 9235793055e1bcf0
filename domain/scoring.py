"""
Composite Scoring.

Pure functions that turn a set of factor values into the composite score,
the completeness-gated confidence label and the tiered signal.
No I/O - this is domain layer logic only.

The composite works in stages:
1. Group sums: realized core and timing points, raw risk penalty
2. Normalization: core to 0-80, timing to 0-20, risk capped at 15
3. Timing multiplier: 0.75 + timing_raw / 80 scales the core score
4. Final: core * multiplier - risk, rounded and clamped to 0-100
"""

from typing import Mapping

from .enums import ConfidenceLabel, SignalLabel
from .factors.definitions import (
    CORE_GROUP,
    CORE_MAX,
    GROUPS,
    INSTITUTIONAL_FLOW,
    RISK_GROUP,
    TIMING_GROUP,
    TIMING_MAX,
    FactorGroup,
)
from .models import FactorValue, ScoreResult, Signal
from .normalize import round_half_up

CORE_SCALE = 80
TIMING_SCALE = 20
RISK_CAP = 15
# Fixed divisor for the multiplier, independent of TIMING_MAX
TIMING_MULTIPLIER_BASE = 0.75
TIMING_MULTIPLIER_DIVISOR = 80

# (threshold, label, tier), highest first
SIGNAL_TIERS: tuple[tuple[int, SignalLabel, str], ...] = (
    (78, SignalLabel.STRONG_BUY, "A"),
    (65, SignalLabel.BUY, "B"),
    (50, SignalLabel.WATCH, "C"),
    (35, SignalLabel.WEAK, "D"),
    (0, SignalLabel.NO_SIGNAL, "F"),
)


def _index_of(values: Mapping[str, FactorValue], factor_id: str) -> int | None:
    value = values.get(factor_id)
    return value.index if value is not None else None


def group_sum(group: FactorGroup, values: Mapping[str, FactorValue]) -> int:
    """Sum of realized table values; unscored factors add nothing."""
    return sum(f.value_at(_index_of(values, f.id)) for f in group)


def _scaled(raw: float, maximum: float, scale: int) -> int:
    if maximum <= 0:
        return 0
    return round_half_up(raw / maximum * scale)


def completeness(values: Mapping[str, FactorValue]) -> tuple[int, int, int]:
    """
    Share of all known factors that carry an index.

    Returns:
        (filled, total, complete_pct)
    """
    ids = [f.id for group in GROUPS for f in group]
    filled = sum(1 for factor_id in ids if _index_of(values, factor_id) is not None)
    total = len(ids)
    pct = round_half_up(filled / total * 100) if total else 0
    return filled, total, pct


def get_confidence(final: int, complete_pct: int) -> ConfidenceLabel:
    """
    Confidence label for a score, gated by completeness.

    The completeness gate is checked first: a sparse evaluation is
    INCOMPLETE no matter how high it scores.
    """
    if complete_pct < 50:
        return ConfidenceLabel.INCOMPLETE
    adjusted = final * (0.5 + complete_pct / 200)
    if adjusted >= 70 and complete_pct >= 80:
        return ConfidenceLabel.HIGH
    if adjusted >= 55 and complete_pct >= 60:
        return ConfidenceLabel.MODERATE
    return ConfidenceLabel.LOW


def get_signal(final: int) -> Signal:
    """Map a final score onto one of five ordered tiers."""
    for threshold, label, tier in SIGNAL_TIERS:
        if final >= threshold:
            return Signal(label=label, tier=tier, threshold=threshold)
    threshold, label, tier = SIGNAL_TIERS[-1]
    return Signal(label=label, tier=tier, threshold=threshold)


def compute_scores(values: Mapping[str, FactorValue]) -> ScoreResult:
    """
    Compute the composite score from a factor value map.

    Overlay factors do not enter the composite; the flow value is carried
    through for the trade structure. Missing factors count as zero against
    the full fixed group maximum.
    """
    core_raw = group_sum(CORE_GROUP, values)
    timing_raw = group_sum(TIMING_GROUP, values)
    risk_penalty = group_sum(RISK_GROUP, values)

    core_score = _scaled(core_raw, CORE_MAX, CORE_SCALE)
    timing_score = _scaled(timing_raw, TIMING_MAX, TIMING_SCALE)
    risk_deduct = min(RISK_CAP, risk_penalty)

    timing_multiplier = TIMING_MULTIPLIER_BASE + timing_raw / TIMING_MULTIPLIER_DIVISOR
    pre_risk = core_score * timing_multiplier
    final = max(0, min(100, round_half_up(pre_risk - risk_deduct)))

    flow_index = _index_of(values, INSTITUTIONAL_FLOW.id)
    flow_score = INSTITUTIONAL_FLOW.value_at(flow_index) if flow_index is not None else None

    filled, total, complete_pct = completeness(values)

    return ScoreResult(
        core_raw=core_raw,
        timing_raw=timing_raw,
        risk_penalty=risk_penalty,
        risk_deduct=risk_deduct,
        core_score=core_score,
        timing_score=timing_score,
        timing_multiplier=timing_multiplier,
        pre_risk=pre_risk,
        final=final,
        flow_score=flow_score,
        confidence=get_confidence(final, complete_pct),
        complete_pct=complete_pct,
        filled=filled,
        total=total,
    )
