"""
Risk Factor Module.

Interprets the risk factors that can be read from provider data:
- Balance-sheet stress (net cash, else debt/equity)
- Macro sensitivity (sector lookup)

Binary event risk and thesis integrity are operator judgements and have
no interpreter.
"""

from ..enums import ConfidenceTag
from ..models import FactorValue
from ..normalize import NormalizedRecord
from .bands import Band, describe_bands, score_bucket
from .tables import DEFAULT_TABLES, SectorTables

# Debt/equity ratio -> ladder index (4 is reserved for net cash)
LEVERAGE_BANDS = (Band(0.3, 3, inclusive=True), Band(1.0, 2, inclusive=True), Band(2.0, 1, inclusive=True))


def interpret_balance_sheet(record: NormalizedRecord) -> FactorValue:
    """Score balance-sheet stress."""
    cash, debt, de = record.total_cash, record.total_debt, record.debt_to_equity
    if cash is not None and debt is not None and cash >= 0 and debt >= 0 and cash > debt:
        return FactorValue(
            index=4,
            confidence=ConfidenceTag.HIGH,
            evidence={"total_cash": cash, "total_debt": debt, "net_cash": cash - debt},
        )
    if de is None:
        return FactorValue.missing("leverage unavailable", total_cash=cash, total_debt=debt)
    if de < 0:
        return FactorValue.missing("negative debt/equity", debt_to_equity=de)

    index = score_bucket(de, LEVERAGE_BANDS, above=0)
    return FactorValue(
        index=index,
        confidence=ConfidenceTag.HIGH,
        evidence={
            "debt_to_equity": de,
            "total_cash": cash,
            "total_debt": debt,
            "bands": ["net cash -> 4", *describe_bands(LEVERAGE_BANDS, 0)],
        },
    )


def interpret_macro_sensitivity(record: NormalizedRecord, tables: SectorTables = DEFAULT_TABLES) -> FactorValue:
    """Look up the sector's macro exposure level."""
    if record.sector is None:
        return FactorValue.missing("sector unavailable")

    index, match = tables.macro_index_for(record.sector)
    return FactorValue(
        index=index,
        confidence=ConfidenceTag.MEDIUM if match.matched else ConfidenceTag.LOW,
        evidence={
            "sector": record.sector,
            "sector_key": match.key,
            "sector_matched": match.matched,
            "table_version": tables.version,
        },
    )
