"""
Factor Modules for Opportunity Scoring.

This package holds the fixed factor ladders and one interpreter per
factor that can be read from provider data:

- definitions: factor ladders, groups, CORE_MAX / TIMING_MAX, always-manual set
- tables: versioned sector reference P/E and macro-sensitivity tables
- earnings: EPS surprise, revisions, revision acceleration, revenue, EPS inflection
- valuation: relative valuation vs sector (non-monotonic)
- timing: catalyst proximity, trend health, accumulation
- risk: balance-sheet stress, macro sensitivity

All interpreters return a FactorValue with a ladder index 0-4 or None.
"""

from .definitions import (
    ALL_FACTOR_IDS,
    ALWAYS_MANUAL,
    CORE_GROUP,
    CORE_MAX,
    FACTORS,
    GROUPS,
    OVERLAY_GROUP,
    RISK_GROUP,
    TIMING_GROUP,
    TIMING_MAX,
    FactorDefinition,
    FactorGroup,
    get_factor,
)
from .tables import (
    DEFAULT_TABLES,
    UNKNOWN_SECTOR,
    SectorTables,
)
from .earnings import (
    interpret_eps_surprise,
    interpret_revisions,
    interpret_revision_velocity,
    interpret_revenue_momentum,
    interpret_eps_inflection,
)
from .valuation import interpret_valuation
from .timing import (
    interpret_catalyst_proximity,
    interpret_chart_trend,
    interpret_accumulation,
)
from .risk import (
    interpret_balance_sheet,
    interpret_macro_sensitivity,
)

__all__ = [
    # Definitions
    "ALL_FACTOR_IDS",
    "ALWAYS_MANUAL",
    "CORE_GROUP",
    "CORE_MAX",
    "FACTORS",
    "GROUPS",
    "OVERLAY_GROUP",
    "RISK_GROUP",
    "TIMING_GROUP",
    "TIMING_MAX",
    "FactorDefinition",
    "FactorGroup",
    "get_factor",
    # Tables
    "DEFAULT_TABLES",
    "UNKNOWN_SECTOR",
    "SectorTables",
    # Earnings
    "interpret_eps_surprise",
    "interpret_revisions",
    "interpret_revision_velocity",
    "interpret_revenue_momentum",
    "interpret_eps_inflection",
    # Valuation
    "interpret_valuation",
    # Timing
    "interpret_catalyst_proximity",
    "interpret_chart_trend",
    "interpret_accumulation",
    # Risk
    "interpret_balance_sheet",
    "interpret_macro_sensitivity",
]
