"""
Timing Factor Module.

Interprets the timing factors that scale the core score:
- Catalyst proximity (days until the next hard event, usually earnings)
- Trend health (price vs 200-day average, relative strength vs SPY)
- Accumulation pattern (volume behaviour against price action)

"No catalyst identified" (index 0) is an operator judgement; a date that
is merely far away still counts as a vague catalyst.
"""

from ..enums import ConfidenceTag
from ..models import FactorValue
from ..normalize import NormalizedRecord
from .bands import Band, describe_bands, score_bucket

CATALYST_BANDS = (Band(60.0, 4), Band(90.0, 3), Band(120.0, 2, inclusive=True))

# Relative strength vs SPY in percentage points
TREND_BADLY_LAGGING = -10.0
TREND_LAGGING = -2.0
TREND_FLAT_CEILING = 5.0

VOLUME_SURGE = 2.0
VOLUME_ELEVATED = 1.2
VOLUME_NORMAL = 0.8
BREAKOUT_PCT = 5.0
FALLING_PCT = -3.0


def interpret_catalyst_proximity(record: NormalizedRecord) -> FactorValue:
    """Score how soon the next catalyst lands."""
    days = record.days_to_catalyst
    if days is None:
        return FactorValue.missing("catalyst date unavailable")
    if days < 0:
        return FactorValue.missing("catalyst date already passed", days=days)

    index = score_bucket(days, CATALYST_BANDS, above=1)
    return FactorValue(
        index=index,
        confidence=ConfidenceTag.HIGH,
        evidence={"days": days, "bands": describe_bands(CATALYST_BANDS, 1)},
    )


def classify_trend(above_ma: bool, relative_strength: float) -> int:
    if not above_ma:
        return 0 if relative_strength <= TREND_BADLY_LAGGING else 1
    if relative_strength < TREND_LAGGING:
        return 2
    if relative_strength <= TREND_FLAT_CEILING:
        return 3
    return 4


def interpret_chart_trend(record: NormalizedRecord) -> FactorValue:
    """Score price against its 200-day average and relative strength vs SPY."""
    price, ma, rs = record.price, record.ma_200, record.relative_strength
    if price is None or ma is None or rs is None:
        return FactorValue.missing("trend inputs unavailable", price=price, ma_200=ma, relative_strength=rs)
    if price <= 0 or ma <= 0:
        return FactorValue.missing("non-positive price or moving average", price=price, ma_200=ma)

    above = price >= ma
    return FactorValue(
        index=classify_trend(above, rs),
        confidence=ConfidenceTag.MEDIUM,
        evidence={
            "price": price,
            "ma_200": ma,
            "above_ma": above,
            "pct_vs_ma": (price - ma) / ma * 100,
            "relative_strength": rs,
            "edges": {
                "badly_lagging": TREND_BADLY_LAGGING,
                "lagging": TREND_LAGGING,
                "flat_ceiling": TREND_FLAT_CEILING,
            },
        },
    )


def classify_accumulation(volume_ratio: float, price_change_pct: float) -> int:
    """Rules in priority order; a quiet tape with no direction is neutral."""
    if volume_ratio >= VOLUME_SURGE and price_change_pct >= BREAKOUT_PCT:
        return 4
    if volume_ratio >= VOLUME_ELEVATED and price_change_pct <= FALLING_PCT:
        return 0
    if volume_ratio >= VOLUME_ELEVATED:
        return 3
    if volume_ratio >= VOLUME_NORMAL and price_change_pct > 0:
        return 2
    return 1


def interpret_accumulation(record: NormalizedRecord) -> FactorValue:
    """
    Score the volume pattern.

    A zero or missing average volume is no evidence and stays unscored
    rather than defaulting to the neutral bucket.
    """
    avg, recent, change = record.volume_avg, record.volume_recent, record.price_change_pct
    if avg is None or recent is None or change is None:
        return FactorValue.missing("volume inputs unavailable")
    if avg <= 0 or recent < 0:
        return FactorValue.missing("no average volume", volume_avg=avg, volume_recent=recent)

    ratio = recent / avg
    return FactorValue(
        index=classify_accumulation(ratio, change),
        confidence=ConfidenceTag.MEDIUM,
        evidence={
            "volume_ratio": ratio,
            "price_change_pct": change,
            "edges": {
                "surge": VOLUME_SURGE,
                "elevated": VOLUME_ELEVATED,
                "normal": VOLUME_NORMAL,
                "breakout_pct": BREAKOUT_PCT,
                "falling_pct": FALLING_PCT,
            },
        },
    )
