"""
Relative Valuation Factor Module.

Compares the instrument's P/E (forward preferred, trailing as fallback)
with its sector's reference multiple and buckets the discount.

The ladder is deliberately non-monotonic: a modest 5-15% discount earns
the most points, a meaningful discount slightly fewer, and a deep discount
fewer still because it is often a value trap.
"""

import math

from ..enums import ConfidenceTag
from ..models import FactorValue
from ..normalize import NormalizedRecord
from .bands import Band, describe_bands, score_bucket
from .tables import DEFAULT_TABLES, SectorTables

# Discount vs sector in percent; negative means premium
DISCOUNT_BANDS = (Band(-20.0, 0), Band(5.0, 1), Band(15.0, 2), Band(30.0, 3, inclusive=True))


def compute_discount_pct(pe: float, sector_pe: float) -> float:
    """Percentage discount of `pe` to `sector_pe` (premium is negative)."""
    return (sector_pe - pe) / sector_pe * 100


def interpret_valuation(record: NormalizedRecord, tables: SectorTables = DEFAULT_TABLES) -> FactorValue:
    """
    Score P/E relative to the sector reference multiple.

    Args:
        record: Normalized provider record
        tables: Sector tables supplying the reference P/E

    Returns:
        FactorValue, unscored when no positive P/E or no sector is available
    """
    if record.forward_pe is not None:
        pe, basis = record.forward_pe, "forward"
    elif record.trailing_pe is not None:
        pe, basis = record.trailing_pe, "trailing"
    else:
        return FactorValue.missing("P/E unavailable")

    if pe <= 0:
        return FactorValue.missing("non-positive P/E", pe=pe, basis=basis)
    if record.sector is None:
        return FactorValue.missing("sector unavailable", pe=pe, basis=basis)

    sector_pe, match = tables.reference_pe_for(record.sector)
    discount = compute_discount_pct(pe, sector_pe)
    if not math.isfinite(discount):
        return FactorValue.missing("non-finite discount", pe=pe, sector_pe=sector_pe, basis=basis)
    index = score_bucket(discount, DISCOUNT_BANDS, above=4)

    if not match.matched:
        confidence = ConfidenceTag.LOW
    elif basis == "forward":
        confidence = ConfidenceTag.MEDIUM
    else:
        confidence = ConfidenceTag.LOW

    return FactorValue(
        index=index,
        confidence=confidence,
        evidence={
            "pe": pe,
            "basis": basis,
            "sector": record.sector,
            "sector_key": match.key,
            "sector_matched": match.matched,
            "sector_pe": sector_pe,
            "discount_pct": discount,
            "table_version": tables.version,
            "bands": describe_bands(DISCOUNT_BANDS, 4),
        },
    )
