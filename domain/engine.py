"""
Scoring engine entry points.

    raw record -> normalize_record -> interpreters -> merge_values -> evaluate

interpret() reads provider data, merge_values() applies operator
overrides, evaluate() runs the composite, confidence gate, signal
classifier, decision tree and narrative. Every call builds its result from
scratch, so all of these are safe to call concurrently.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Iterable, Mapping

from .enums import ConfidenceTag
from .factors.definitions import (
    ACCUMULATION,
    ALL_FACTOR_IDS,
    ALWAYS_MANUAL,
    BALANCE_SHEET,
    CATALYST_PROXIMITY,
    CHART_TREND,
    EPS_INFLECTION,
    EPS_SURPRISE,
    FACTORS,
    MACRO_SENSITIVITY,
    REVENUE_MOMENTUM,
    REVISION_VELOCITY,
    REVISIONS,
    VALUATION,
    FactorDefinition,
)
from .factors.earnings import (
    interpret_eps_inflection,
    interpret_eps_surprise,
    interpret_revenue_momentum,
    interpret_revision_velocity,
    interpret_revisions,
)
from .factors.risk import interpret_balance_sheet, interpret_macro_sensitivity
from .factors.tables import DEFAULT_TABLES, SectorTables
from .factors.timing import interpret_accumulation, interpret_catalyst_proximity, interpret_chart_trend
from .factors.valuation import interpret_valuation
from .models import Evaluation, FactorValue
from .narrative import build_narrative
from .normalize import NormalizedRecord, normalize_record
from .scoring import compute_scores, get_signal
from .trade_structure import get_trade_structure

logger = logging.getLogger(__name__)

ManualEntry = FactorValue | int | float | str | None


def interpret_normalized(record: NormalizedRecord, tables: SectorTables = DEFAULT_TABLES) -> dict[str, FactorValue]:
    """Run every interpreter over an already-normalized record."""
    return {
        EPS_SURPRISE.id: interpret_eps_surprise(record),
        REVISIONS.id: interpret_revisions(record),
        REVISION_VELOCITY.id: interpret_revision_velocity(record),
        VALUATION.id: interpret_valuation(record, tables),
        REVENUE_MOMENTUM.id: interpret_revenue_momentum(record),
        EPS_INFLECTION.id: interpret_eps_inflection(record),
        CATALYST_PROXIMITY.id: interpret_catalyst_proximity(record),
        CHART_TREND.id: interpret_chart_trend(record),
        ACCUMULATION.id: interpret_accumulation(record),
        BALANCE_SHEET.id: interpret_balance_sheet(record),
        MACRO_SENSITIVITY.id: interpret_macro_sensitivity(record, tables),
    }


def interpret(
    raw: Any,
    tables: SectorTables | None = None,
    as_of: date | None = None,
) -> dict[str, FactorValue]:
    """
    Interpret a raw provider record into factor values.

    Always-manual factors are never produced here.

    Args:
        raw: Provider record (any shape; junk yields unscored factors)
        tables: Sector tables (defaults to the built-in version)
        as_of: Reference date for catalyst dates

    Returns:
        Map of factor id -> FactorValue for every interpretable factor
    """
    return interpret_normalized(normalize_record(raw, as_of=as_of), tables or DEFAULT_TABLES)


def _manual_value(definition: FactorDefinition, entry: ManualEntry) -> FactorValue:
    if isinstance(entry, FactorValue):
        return _coerce_value(definition, entry)
    index = definition.clamp_index(entry)
    if index is None:
        return FactorValue.missing("no operator entry")
    return FactorValue(
        index=index,
        confidence=ConfidenceTag.HIGH,
        evidence={"entered": entry, "anchor": definition.anchor_at(index)},
        source="manual",
    )


def _coerce_value(definition: FactorDefinition, value: FactorValue) -> FactorValue:
    """Pull an out-of-range index back onto the ladder."""
    if value.index is None or 0 <= value.index < definition.levels:
        return value
    clamped = max(0, min(definition.levels - 1, value.index))
    return FactorValue(
        index=clamped,
        confidence=value.confidence,
        evidence={**value.evidence, "clamped_from": value.index},
        source=value.source,
    )


def merge_values(
    auto: Mapping[str, FactorValue],
    manual_ids: Iterable[str] = (),
    manual_values: Mapping[str, ManualEntry] | None = None,
) -> dict[str, FactorValue]:
    """
    Merge interpreted values with operator entries.

    Operator entries win for always-manual factors and for any id in
    `manual_ids`; an overridden id with no entry is unscored rather than
    falling back to the automatic value.

    Args:
        auto: Interpreter output
        manual_ids: Ids the operator has taken over
        manual_values: Operator entries (ladder index, FactorValue or None)

    Returns:
        Complete map of factor id -> FactorValue
    """
    manual_values = manual_values or {}
    overridden = ALWAYS_MANUAL | set(manual_ids)

    for factor_id in set(auto) | set(manual_values) | overridden:
        if factor_id not in FACTORS:
            logger.debug(f"Ignoring unknown factor id: {factor_id}")

    merged: dict[str, FactorValue] = {}
    for factor_id in ALL_FACTOR_IDS:
        definition = FACTORS[factor_id]
        if factor_id in overridden:
            merged[factor_id] = _manual_value(definition, manual_values.get(factor_id))
        elif factor_id in auto:
            merged[factor_id] = _coerce_value(definition, auto[factor_id])
        else:
            merged[factor_id] = FactorValue.missing("not provided")
    return merged


def _complete_map(values: Mapping[str, ManualEntry]) -> dict[str, FactorValue]:
    out: dict[str, FactorValue] = {}
    for factor_id in values:
        if factor_id not in FACTORS:
            logger.debug(f"Ignoring unknown factor id: {factor_id}")
    for factor_id in ALL_FACTOR_IDS:
        definition = FACTORS[factor_id]
        entry = values.get(factor_id)
        if isinstance(entry, FactorValue):
            out[factor_id] = _coerce_value(definition, entry)
        else:
            out[factor_id] = _manual_value(definition, entry)
    return out


def evaluate(values: Mapping[str, ManualEntry], symbol: str | None = None) -> Evaluation:
    """
    Evaluate a merged factor map.

    Plain numbers are treated as operator-entered ladder levels. Factors
    missing from the map are unscored. Zero evidence still yields a full
    result (final 0, INCOMPLETE, PASS).
    """
    complete = _complete_map(values)
    score = compute_scores(complete)
    return Evaluation(
        values=complete,
        score=score,
        signal=get_signal(score.final),
        recommendation=get_trade_structure(score, complete),
        narrative=build_narrative(complete),
        symbol=symbol,
    )


def evaluate_record(
    raw: Any,
    manual_ids: Iterable[str] = (),
    manual_values: Mapping[str, ManualEntry] | None = None,
    tables: SectorTables | None = None,
    as_of: date | None = None,
    symbol: str | None = None,
) -> Evaluation:
    """Interpret, merge operator entries, evaluate."""
    record = normalize_record(raw, as_of=as_of)
    auto = interpret_normalized(record, tables or DEFAULT_TABLES)
    merged = merge_values(auto, manual_ids, manual_values)
    return evaluate(merged, symbol=symbol or record.symbol)


def evaluate_batch(
    items: Mapping[str, Mapping[str, ManualEntry]],
    max_workers: int | None = None,
) -> list[Evaluation]:
    """
    Evaluate many instruments independently.

    Results come back in input order.
    """
    if not items:
        return []
    logger.debug(f"Evaluating batch of {len(items)} instruments")
    symbols = list(items)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda s: evaluate(items[s], symbol=s), symbols))


def rank_evaluations(evaluations: Iterable[Evaluation]) -> list[Evaluation]:
    """Best final score first; ties broken by symbol."""
    return sorted(evaluations, key=lambda e: (-e.final, e.symbol or ""))
