"""
Factor tables.

Every factor is a fixed ladder of five anchored levels. Core and timing
factors carry benefit values, risk factors carry penalty values (index 0 is
the most severe), overlay factors gate the trade structure without feeding
the composite. Tables are validated when this module is imported, so a bad
edit fails at startup rather than mid-evaluation.

SCORING FORMULA
    final = core_score * (0.75 + timing_raw / 80) - risk_deduct
    core_score:  0-80 (7 fundamental factors, normalized)
    timing_raw:  0-20 (raw timing points, used directly in the multiplier)
    risk_deduct: 0-15 (convex penalties)
"""

from dataclasses import dataclass, field
from typing import Any, Iterator

from ..enums import FactorGroupKind
from ..errors import ConfigurationInconsistency, ErrorCode
from ..normalize import coerce_number, round_half_up


@dataclass(frozen=True)
class FactorDefinition:
    """Immutable descriptor of one factor ladder."""
    id: str
    label: str
    description: str
    weight: float
    values: tuple[int, ...]
    anchors: tuple[str, ...]
    group: FactorGroupKind
    note: str | None = None

    def __post_init__(self) -> None:
        if len(self.values) != len(self.anchors):
            raise ConfigurationInconsistency(
                f"{self.id}: {len(self.values)} values but {len(self.anchors)} anchors",
                code=ErrorCode.CONFIG_TABLE_MISMATCH,
                factor_id=self.id,
            )
        if not self.values:
            raise ConfigurationInconsistency(
                f"{self.id}: empty value table", code=ErrorCode.CONFIG_TABLE_MISMATCH, factor_id=self.id,
            )
        if self.weight < 0 or any(v < 0 for v in self.values):
            raise ConfigurationInconsistency(
                f"{self.id}: weights and values must be non-negative", factor_id=self.id,
            )
        if self.weight != max(self.values):
            raise ConfigurationInconsistency(
                f"{self.id}: weight {self.weight} != top of table {max(self.values)}",
                code=ErrorCode.CONFIG_WEIGHT_MISMATCH,
                factor_id=self.id,
            )

    @property
    def levels(self) -> int:
        return len(self.values)

    @property
    def is_penalty(self) -> bool:
        return self.group is FactorGroupKind.RISK

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.levels:
            raise ValueError(f"{self.id}: index {index} outside 0-{self.levels - 1}")

    def value_at(self, index: int | None) -> int:
        """Table value for an index; None contributes nothing."""
        if index is None:
            return 0
        self._check_index(index)
        return self.values[index]

    def clamp_index(self, raw: Any) -> int | None:
        """Round and clamp an operator-entered level into range."""
        number = coerce_number(raw)
        if number is None:
            return None
        return max(0, min(self.levels - 1, round_half_up(number)))

    def anchor_at(self, index: int | None) -> str | None:
        if index is None:
            return None
        self._check_index(index)
        return self.anchors[index]


@dataclass(frozen=True)
class FactorGroup:
    """A named, ordered collection of factor definitions."""
    kind: FactorGroupKind
    name: str
    factors: tuple[FactorDefinition, ...]
    max_total: float = field(init=False)

    def __post_init__(self) -> None:
        for f in self.factors:
            if f.group is not self.kind:
                raise ConfigurationInconsistency(
                    f"{f.id} belongs to {f.group.value}, not {self.kind.value}", factor_id=f.id,
                )
        object.__setattr__(self, "max_total", sum(f.weight for f in self.factors))

    def __iter__(self) -> Iterator[FactorDefinition]:
        return iter(self.factors)

    def __len__(self) -> int:
        return len(self.factors)

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(f.id for f in self.factors)


def _core(id: str, label: str, description: str, values, anchors, note: str | None = None) -> FactorDefinition:
    return FactorDefinition(
        id=id, label=label, description=description, weight=max(values),
        values=tuple(values), anchors=tuple(anchors), group=FactorGroupKind.CORE, note=note,
    )


def _timing(id: str, label: str, description: str, values, anchors) -> FactorDefinition:
    return FactorDefinition(
        id=id, label=label, description=description, weight=max(values),
        values=tuple(values), anchors=tuple(anchors), group=FactorGroupKind.TIMING,
    )


def _risk(id: str, label: str, description: str, penalties, anchors) -> FactorDefinition:
    return FactorDefinition(
        id=id, label=label, description=description, weight=max(penalties),
        values=tuple(penalties), anchors=tuple(anchors), group=FactorGroupKind.RISK,
    )


def _overlay(id: str, label: str, description: str, values, anchors) -> FactorDefinition:
    return FactorDefinition(
        id=id, label=label, description=description, weight=max(values),
        values=tuple(values), anchors=tuple(anchors), group=FactorGroupKind.OVERLAY,
    )


# ============================================================================
# Core fundamentals
# ============================================================================

EPS_SURPRISE = _core(
    "eps_surprise", "EPS Surprise Magnitude",
    "Beat vs consensus estimate last quarter",
    [0, 4, 10, 16, 20],
    ["Miss / in-line < 1%", "Small beat 1-5%", "Solid beat 5-10%", "Strong beat 10-20%", "Blowout > 20%"],
)

REVISIONS = _core(
    "revisions", "Estimate Revision Level",
    "Direction of analyst EPS changes, last 90 days",
    [0, 3, 8, 13, 16],
    ["Mostly downward", "Mixed / flat", "More up than down", "Majority upward", "All up, zero down"],
)

REVISION_VELOCITY = _core(
    "revision_velocity", "Revision Acceleration",
    "Speed of revision change, velocity predicts momentum",
    [0, 1, 3, 5, 6],
    ["Decelerating / reversing", "Flat, no acceleration", "Modest pick-up",
     "Clearly accelerating", "Rapid acceleration post-beat"],
)

SECTOR_TAILWIND = _core(
    "sector_tailwind", "Sector Tailwind",
    "Industry revisions, rate cycle, commodity / spend trajectory",
    [0, 3, 7, 11, 14],
    ["Sector headwind", "Neutral", "Modest tailwind", "Strong structural cycle",
     "Dominant cycle (hard market / AI / defense)"],
)

# Moderate discount outranks deep discount: deep discounts are value-trap candidates.
VALUATION = _core(
    "valuation", "Relative Valuation",
    "Forward P/E vs sector median, nonlinear scoring",
    [0, 4, 12, 10, 7],
    ["Premium > 20% above sector", "In-line with sector", "Modest discount 5-15%",
     "Meaningful discount 15-30%", "Deep discount > 30%"],
    note="Deep discount capped, verify not a value trap",
)

REVENUE_MOMENTUM = _core(
    "revenue_momentum", "Revenue Acceleration",
    "Beat quality, real top-line growth, not just cost cuts",
    [0, 1, 3, 5, 6],
    ["Revenue declining", "Flat QoQ", "Growing 1-5% QoQ", "Growing 5-10% QoQ", "Accelerating > 10% QoQ"],
)

EPS_INFLECTION = _core(
    "eps_inflection", "EPS Inflection Profile",
    "Flat this year / exploding next = turnaround asymmetry",
    [0, 1, 3, 6, 6],
    ["Both years declining", "Flat both years", "Moderate growth both",
     "Flat this yr / strong next (inflection)", "Strong this yr + accelerating next"],
)

# ============================================================================
# Timing
# ============================================================================

CATALYST_PROXIMITY = _timing(
    "catalyst_proximity", "Catalyst Proximity",
    "Specific event within 120 days, earnings, investor day, acquisition close",
    [0, 2, 6, 9, 12],
    ["No catalyst identified", "Vague / > 120 days", "Earnings 90-120 days",
     "Earnings + conference 60-90 days", "Hard catalyst < 60 days"],
)

CHART_TREND = _timing(
    "chart_trend", "Trend Health",
    "Price vs 200-day MA + relative strength vs SPY",
    [0, 1, 2, 3, 4],
    ["Below 200-day, underperforming SPY badly", "Below 200-day but resilient",
     "Above 200-day, lagging SPY", "Above 200-day, flat vs SPY (resilience)",
     "Above 200-day, breaking out vs SPY"],
)

ACCUMULATION = _timing(
    "accumulation", "Accumulation Pattern",
    "Volume behavior, institutional buying precedes moves",
    [0, 1, 2, 3, 4],
    ["Distribution: high vol, price falling", "Neutral / no pattern", "Quiet accumulation",
     "Above-avg vol, price holding base", "Clear accumulation: vol surge + base breakout"],
)

# ============================================================================
# Risk (penalties)
# ============================================================================

BINARY_RISK = _risk(
    "binary_risk", "Binary Event Risk",
    "FDA ruling, DOJ action, regulatory decision with +/-30% move potential",
    [5, 3, 1, 0, 0],
    ["Major binary pending, thesis-ending risk", "Significant event risk",
     "Some regulatory exposure", "Minimal event risk", "No binary risk"],
)

BALANCE_SHEET = _risk(
    "balance_sheet", "Balance Sheet Stress",
    "Leverage, debt maturity, covenant risk",
    [4, 2, 1, 0, 0],
    ["Near-distress / covenant breach risk", "Elevated leverage, limited headroom",
     "Moderate leverage, manageable", "Clean balance sheet", "Net cash position"],
)

THESIS_RISK = _risk(
    "thesis_risk", "Thesis Integrity",
    "How likely is the core thesis to hold for 3-6 months?",
    [4, 2, 1, 0, 0],
    ["Thesis actively undermined by new data", "Significant uncertainty",
     "Some noise, core intact", "Thesis well-supported", "Thesis confirmed and accelerating"],
)

MACRO_SENSITIVITY = _risk(
    "macro_sensitivity", "Macro Sensitivity",
    "Exposure to credit cycle, commodity, rate shock, tariffs",
    [2, 1, 0, 0, 0],
    ["Highly exposed, thesis breaks in downturn", "Significant macro sensitivity",
     "Moderate exposure", "Defensive characteristics", "Counter-cyclical / macro-neutral"],
)

# ============================================================================
# Overlay
# ============================================================================

INSTITUTIONAL_FLOW = _overlay(
    "institutional_flow", "Institutional Flow",
    "Long-only initiation + multi-strat accumulation post-beat",
    [0, 2, 5, 8, 11],
    ["Net selling / exiting", "No significant change", "Some long-only initiation",
     "Multiple quality funds entering", "Long-only + multi-strat both accumulating"],
)

IV_ENVIRONMENT = _overlay(
    "iv_environment", "IV Environment",
    "Call buying attractiveness, low IV post-beat is optimal",
    [0, 1, 2, 2, 1],
    ["IV elevated pre-earnings (favor stock)", "IV moderate / neutral",
     "IV collapsed post-beat (calls cheap)", "IV near 52-wk low + catalyst ahead", "N/A, stock only"],
)


CORE_GROUP = FactorGroup(
    FactorGroupKind.CORE, "Core Signal",
    (EPS_SURPRISE, REVISIONS, REVISION_VELOCITY, SECTOR_TAILWIND, VALUATION, REVENUE_MOMENTUM, EPS_INFLECTION),
)
TIMING_GROUP = FactorGroup(
    FactorGroupKind.TIMING, "Timing", (CATALYST_PROXIMITY, CHART_TREND, ACCUMULATION),
)
RISK_GROUP = FactorGroup(
    FactorGroupKind.RISK, "Risk", (BINARY_RISK, BALANCE_SHEET, THESIS_RISK, MACRO_SENSITIVITY),
)
OVERLAY_GROUP = FactorGroup(
    FactorGroupKind.OVERLAY, "Overlay", (INSTITUTIONAL_FLOW, IV_ENVIRONMENT),
)

GROUPS: tuple[FactorGroup, ...] = (CORE_GROUP, TIMING_GROUP, RISK_GROUP, OVERLAY_GROUP)

CORE_MAX = CORE_GROUP.max_total
TIMING_MAX = TIMING_GROUP.max_total

FACTORS: dict[str, FactorDefinition] = {f.id: f for group in GROUPS for f in group}

ALL_FACTOR_IDS: tuple[str, ...] = tuple(FACTORS)

# Operator judgement only; never auto-filled from provider data.
ALWAYS_MANUAL: frozenset[str] = frozenset({
    SECTOR_TAILWIND.id,
    BINARY_RISK.id,
    THESIS_RISK.id,
    INSTITUTIONAL_FLOW.id,
    IV_ENVIRONMENT.id,
})


def get_factor(factor_id: str) -> FactorDefinition:
    """Look up a factor definition by id."""
    try:
        return FACTORS[factor_id]
    except KeyError:
        raise KeyError(f"Unknown factor id: {factor_id}") from None
