"""
Trade-Structure Decision Tree.

An ordered list of rules evaluated top to bottom; the first rule whose
conditions all hold decides the recommendation. Order is part of the
semantics: the risk override sits above every options setup, and the
last rule has no conditions so every input resolves to exactly one rule.

Overlay readings feeding the tree:
- IV environment index 2-3 is low IV, 1 moderate, 0 high, 4 stock-only
- catalyst proximity index >= 3 is a strong catalyst
- institutional flow value >= 8 is high flow, <= 2 weak flow
"""

from dataclasses import dataclass
from typing import Callable, Mapping

from .enums import TradeAction
from .errors import DecisionTreeExhausted
from .factors.definitions import CATALYST_PROXIMITY, IV_ENVIRONMENT
from .models import FactorValue, Recommendation, ScoreResult

IV_LOW_LEVELS = frozenset({2, 3})
IV_MODERATE_LEVELS = frozenset({1})
IV_HIGH_LEVELS = frozenset({0})
CATALYST_STRONG_INDEX = 3
FLOW_HIGH = 8
FLOW_WEAK = 2


@dataclass(frozen=True)
class TradeInputs:
    """Everything the decision tree looks at."""
    final: int
    core_score: int
    timing_score: int
    risk_deduct: int
    iv_low: bool = False
    iv_moderate: bool = False
    iv_high: bool = False
    catalyst_strong: bool = False
    flow_high: bool = False
    flow_weak: bool = False


@dataclass(frozen=True)
class Condition:
    """A labelled predicate."""
    label: str
    test: Callable[[TradeInputs], bool]

    def __call__(self, inputs: TradeInputs) -> bool:
        return self.test(inputs)


@dataclass(frozen=True)
class TradeRule:
    """One branch of the tree: conditions plus the outcome they select."""
    name: str
    conditions: tuple[Condition, ...]
    action: TradeAction
    reason: str
    detail: str

    def matches(self, inputs: TradeInputs) -> bool:
        return all(c(inputs) for c in self.conditions)

    def recommend(self) -> Recommendation:
        return Recommendation(
            action=self.action,
            reason=self.reason,
            detail=self.detail,
            rule=self.name,
            matched=tuple(c.label for c in self.conditions),
        )


@dataclass(frozen=True)
class RuleTrace:
    rule: TradeRule
    conditions_hold: bool
    fired: bool


def _c(label: str, test: Callable[[TradeInputs], bool]) -> Condition:
    return Condition(label, test)


FINAL_BELOW_35 = _c("final < 35", lambda i: i.final < 35)
FINAL_BELOW_50 = _c("final < 50", lambda i: i.final < 50)
FINAL_AT_LEAST_65 = _c("final >= 65", lambda i: i.final >= 65)
RISK_HIGH = _c("risk_deduct >= 8", lambda i: i.risk_deduct >= 8)
RISK_BELOW_6 = _c("risk_deduct < 6", lambda i: i.risk_deduct < 6)
IV_LOW = _c("iv_low", lambda i: i.iv_low)
IV_LOW_OR_MODERATE = _c("iv_low or iv_moderate", lambda i: i.iv_low or i.iv_moderate)
IV_HIGH = _c("iv_high", lambda i: i.iv_high)
CATALYST_STRONG = _c("catalyst_strong", lambda i: i.catalyst_strong)
CATALYST_NOT_STRONG = _c("not catalyst_strong", lambda i: not i.catalyst_strong)
FLOW_IS_HIGH = _c("flow_high", lambda i: i.flow_high)
FLOW_IS_WEAK = _c("flow_weak", lambda i: i.flow_weak)
FLOW_NEUTRAL = _c("not flow_high and not flow_weak", lambda i: not i.flow_high and not i.flow_weak)
FLOW_NOT_HIGH = _c("not flow_high", lambda i: not i.flow_high)
CORE_STRONG = _c("core_score >= 60", lambda i: i.core_score >= 60)
TIMING_STRONG = _c("timing_score >= 14", lambda i: i.timing_score >= 14)
TIMING_EARLY = _c("timing_score < 10", lambda i: i.timing_score < 10)

_SHORT_CALLS = (IV_LOW, CATALYST_STRONG, FINAL_AT_LEAST_65)
_MEDIUM_CALLS = (IV_LOW_OR_MODERATE, CATALYST_NOT_STRONG, FINAL_AT_LEAST_65, RISK_BELOW_6)
_LEAPS = (IV_LOW, CATALYST_NOT_STRONG, FINAL_AT_LEAST_65)
_FULL_SIZE = (CORE_STRONG, TIMING_STRONG)

RULES: tuple[TradeRule, ...] = (
    TradeRule(
        "pass", (FINAL_BELOW_35,), TradeAction.PASS,
        "Score below minimum threshold.",
        "No capital deployment. Revisit if revisions accelerate or catalyst clarifies.",
    ),
    TradeRule(
        "watchlist", (FINAL_BELOW_50,), TradeAction.WATCHLIST,
        "Insufficient signal quality for entry.",
        "Add to watch list. Enter only on revision acceleration or cleaner timing setup.",
    ),
    TradeRule(
        "risk_override", (RISK_HIGH,), TradeAction.STOCK_HALF_SIZE,
        "Risk penalty too high for full commitment.",
        "Material binary or thesis risk present. Stock preferred over options. "
        "Size at 50% normal. Reassess after risk event resolves.",
    ),
    TradeRule(
        "short_calls_full_conviction", _SHORT_CALLS + (FLOW_IS_HIGH,), TradeAction.CALLS_FULL_CONVICTION,
        "IV cheap + catalyst < 90 days + institutional accumulation confirmed.",
        "Target 60-90 day expiry, delta 0.35-0.50. Naked call if blowout beat + deep discount. "
        "Spread if modest discount.",
    ),
    TradeRule(
        "short_calls_stock_hedge", _SHORT_CALLS + (FLOW_IS_WEAK,), TradeAction.STOCK_PLUS_SMALL_CALLS,
        "IV cheap + catalyst near, but flow not confirming.",
        "Primary position in stock. Small call position for leverage. "
        "Monitor filings and dark pool volume for accumulation confirmation.",
    ),
    TradeRule(
        "short_calls", _SHORT_CALLS + (FLOW_NEUTRAL,), TradeAction.CALLS,
        "IV cheap post-beat + catalyst < 90 days.",
        "Target 60-90 day expiry, delta 0.30-0.45. "
        "Spread if modest valuation discount; naked call if blowout beat.",
    ),
    TradeRule(
        "medium_calls_full_conviction", _MEDIUM_CALLS + (FLOW_IS_HIGH,), TradeAction.MEDIUM_CALLS_FULL_CONVICTION,
        "IV reasonable + institutional accumulation confirmed + runway.",
        "Target delta 0.35-0.50. Two earnings cycles. "
        "Spread reduces cost; naked call if conviction is high and discount is deep.",
    ),
    TradeRule(
        "medium_calls", _MEDIUM_CALLS + (FLOW_NOT_HIGH,), TradeAction.MEDIUM_CALLS,
        "IV reasonable, catalyst further out, longer expiry fits.",
        "Target delta 0.35-0.50. Consider a bull call spread. If IV rank is high, reduce size or wait.",
    ),
    TradeRule(
        "leaps_full_conviction", _LEAPS + (FLOW_IS_HIGH,), TradeAction.LEAPS_FULL_CONVICTION,
        "IV cheap + institutional accumulation confirmed, catalyst later.",
        "January or later expiry. Delta 0.40-0.50. Thesis needs runway.",
    ),
    TradeRule(
        "leaps", _LEAPS + (FLOW_NOT_HIGH,), TradeAction.LEAPS,
        "IV cheap but catalyst later, extend expiry.",
        "January or later expiry. Avoid short-dated calls. Delta 0.40-0.50 to survive slow re-rating.",
    ),
    TradeRule(
        "stock_now_calls_later", (IV_HIGH,), TradeAction.STOCK_NOW_CALLS_LATER,
        "IV elevated pre-earnings, options expensive.",
        "Buy stock today. If earnings beat occurs and IV collapses, rotate into calls after earnings.",
    ),
    TradeRule(
        "stock_full_overweight", _FULL_SIZE + (FLOW_IS_HIGH,), TradeAction.STOCK_FULL_OVERWEIGHT,
        "Core + timing strong + institutional accumulation confirmed.",
        "Full position. Consider adding on pre-catalyst weakness.",
    ),
    TradeRule(
        "stock_full", _FULL_SIZE + (FLOW_NOT_HIGH,), TradeAction.STOCK_FULL,
        "Core + timing both strong.",
        "Standard full position. Add on weakness. Review after next earnings report.",
    ),
    TradeRule(
        "scale_in", (CORE_STRONG, TIMING_EARLY), TradeAction.STOCK_SCALE_IN,
        "Quality high, timing early.",
        "Build in thirds over 4-6 weeks. Add on dips or revision acceleration.",
    ),
    TradeRule(
        "stock", (), TradeAction.STOCK,
        "Balanced signal across core and timing.",
        "Standard entry. Monitor revision velocity weekly. "
        "Add if acceleration continues into catalyst window.",
    ),
)


def build_inputs(score: ScoreResult, values: Mapping[str, FactorValue]) -> TradeInputs:
    """Derive decision-tree inputs from a score and the overlay factor values."""
    iv = values.get(IV_ENVIRONMENT.id)
    iv_index = iv.index if iv is not None else None
    catalyst = values.get(CATALYST_PROXIMITY.id)
    catalyst_index = catalyst.index if catalyst is not None else None
    flow = score.flow_score

    return TradeInputs(
        final=score.final,
        core_score=score.core_score,
        timing_score=score.timing_score,
        risk_deduct=score.risk_deduct,
        iv_low=iv_index in IV_LOW_LEVELS,
        iv_moderate=iv_index in IV_MODERATE_LEVELS,
        iv_high=iv_index in IV_HIGH_LEVELS,
        catalyst_strong=catalyst_index is not None and catalyst_index >= CATALYST_STRONG_INDEX,
        flow_high=flow is not None and flow >= FLOW_HIGH,
        flow_weak=flow is not None and flow <= FLOW_WEAK,
    )


def select_rule(inputs: TradeInputs, rules: tuple[TradeRule, ...] = RULES) -> TradeRule:
    """First rule whose conditions all hold."""
    for rule in rules:
        if rule.matches(inputs):
            return rule
    raise DecisionTreeExhausted(inputs)


def trace_rules(inputs: TradeInputs, rules: tuple[TradeRule, ...] = RULES) -> list[RuleTrace]:
    """Per-rule audit: whether its own conditions hold and whether it fired."""
    traces: list[RuleTrace] = []
    fired = False
    for rule in rules:
        holds = rule.matches(inputs)
        traces.append(RuleTrace(rule=rule, conditions_hold=holds, fired=holds and not fired))
        fired = fired or holds
    return traces


def recommend(inputs: TradeInputs, rules: tuple[TradeRule, ...] = RULES) -> Recommendation:
    return select_rule(inputs, rules).recommend()


def get_trade_structure(score: ScoreResult, values: Mapping[str, FactorValue]) -> Recommendation:
    """Recommendation for an evaluated instrument."""
    return recommend(build_inputs(score, values))
