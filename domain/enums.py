from enum import Enum


class FactorGroupKind(str, Enum):
    """Which stage of the composite a factor feeds."""
    CORE = "core"
    TIMING = "timing"
    RISK = "risk"          # penalty tables
    OVERLAY = "overlay"    # gates the trade structure only


class ConfidenceTag(str, Enum):
    """How much an individual factor reading can be trusted."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ConfidenceLabel(str, Enum):
    """Overall confidence in a composite score."""
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"
    INCOMPLETE = "INCOMPLETE, score unreliable"


class SignalLabel(str, Enum):
    """Five ordered signal tiers, strongest first."""
    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    WATCH = "WATCH"
    WEAK = "WEAK"
    NO_SIGNAL = "NO SIGNAL"


class TradeAction(str, Enum):
    """Recommended trade structures."""
    PASS = "PASS"
    WATCHLIST = "WATCHLIST"
    STOCK_HALF_SIZE = "STOCK, HALF SIZE"
    CALLS_FULL_CONVICTION = "BUY CALLS, FULL CONVICTION"
    STOCK_PLUS_SMALL_CALLS = "STOCK + SMALL CALLS"
    CALLS = "BUY CALLS"
    MEDIUM_CALLS_FULL_CONVICTION = "BUY 120-210 DTE CALLS, FULL CONVICTION"
    MEDIUM_CALLS = "BUY 120-210 DTE CALLS"
    LEAPS_FULL_CONVICTION = "BUY LEAPS, FULL CONVICTION"
    LEAPS = "BUY LEAPS"
    STOCK_NOW_CALLS_LATER = "STOCK NOW, CALLS AFTER EARNINGS"
    STOCK_FULL_OVERWEIGHT = "STOCK, FULL SIZE + OVERWEIGHT"
    STOCK_FULL = "STOCK, FULL SIZE"
    STOCK_SCALE_IN = "STOCK, SCALE IN"
    STOCK = "STOCK"
