"""
Field Normalizer.

Turns a raw provider record (any shape, any junk) into a NormalizedRecord
whose fields are a finite float, a trimmed non-empty string, or None.
Nothing in this module raises on bad input: a field that cannot be coerced
is simply None, exactly as if the provider had not sent it.

Provider shapes differ, so every canonical field is resolved from an
ordered list of dotted alias paths. Lists resolve to their first element
and Yahoo-style {"raw": x, "fmt": "..."} wrappers are unwrapped.
"""

import math
import re
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Mapping


_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def round_half_up(value: float) -> int:
    """Round .5 away from the floor, the way score thresholds were tuned."""
    return math.floor(value + 0.5)


def _unwrap(value: Any) -> Any:
    if isinstance(value, Mapping) and "raw" in value:
        return value.get("raw")
    return value


def coerce_number(value: Any) -> float | None:
    """Coerce to a finite float, or None."""
    value = _unwrap(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if text.endswith("%"):
            text = text[:-1].strip()
        if not text:
            return None
        value = text
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_string(value: Any) -> str | None:
    """Coerce to a trimmed, non-empty string, or None."""
    value = _unwrap(value)
    if not isinstance(value, str):
        return None
    text = _CONTROL_CHARS.sub("", value).strip()
    return text or None


def resolve_path(record: Any, path: str) -> Any:
    """Walk a dotted path through mappings and lists; None if any hop fails."""
    current = record
    for key in path.split("."):
        if isinstance(current, (list, tuple)):
            if not current:
                return None
            current = current[0]
        if not isinstance(current, Mapping):
            return None
        current = _unwrap(current.get(key))
        if current is None:
            return None
    if isinstance(current, (list, tuple)):
        return current[0] if current else None
    return current


# Canonical field -> provider aliases, first hit wins.
NUMERIC_ALIASES: dict[str, tuple[str, ...]] = {
    "trailing_pe": (
        "trailing_pe", "trailingPE", "summaryDetail.trailingPE",
        "defaultKeyStatistics.trailingPE", "quote.pe", "quote.priceEarningsRatio",
    ),
    "forward_pe": (
        "forward_pe", "forwardPE", "summaryDetail.forwardPE",
        "defaultKeyStatistics.forwardPE", "quote.forwardPE",
    ),
    "eps_actual": (
        "eps_actual", "epsActual", "earnings.earningsChart.quarterly.actual",
        "earningsSurprises.actualEarningResult",
    ),
    "eps_estimate": (
        "eps_estimate", "epsEstimate", "earnings.earningsChart.quarterly.estimate",
        "earningsSurprises.estimatedEarning",
    ),
    "eps_surprise_pct": (
        "eps_surprise_pct", "surprisePercent", "earningsSurprises.surprisePercentage",
        "earningsSurprises.surprisePercent",
    ),
    "revisions_up": ("revisions_up", "epsRevisions.upLast90days", "revisionsUp"),
    "revisions_down": ("revisions_down", "epsRevisions.downLast90days", "revisionsDown"),
    "revisions_up_prior": ("revisions_up_prior", "epsRevisions.upPrior90days", "revisionsUpPrior"),
    "revisions_down_prior": ("revisions_down_prior", "epsRevisions.downPrior90days", "revisionsDownPrior"),
    "revenue_growth_qoq": ("revenue_growth_qoq", "revenueGrowthQoQ", "revenueGrowthPct"),
    "revenue_current": ("revenue_current", "incomeStatement.revenue", "quarterlyRevenue.current"),
    "revenue_prior": ("revenue_prior", "priorIncomeStatement.revenue", "quarterlyRevenue.prior"),
    "eps_growth_current_year": (
        "eps_growth_current_year", "earningsTrend.currentYear.growth", "epsGrowthCurrentYear",
    ),
    "eps_growth_next_year": (
        "eps_growth_next_year", "earningsTrend.nextYear.growth", "epsGrowthNextYear",
    ),
    "days_to_catalyst": ("days_to_catalyst", "daysToCatalyst", "daysToEarnings"),
    "price": ("price", "regularMarketPrice", "quote.price", "price.regularMarketPrice"),
    "ma_200": (
        "ma_200", "twoHundredDayAverage", "summaryDetail.twoHundredDayAverage",
        "quote.priceAvg200",
    ),
    "relative_strength": ("relative_strength", "relativeStrengthVsSpy", "relativeStrength"),
    "volume_avg": (
        "volume_avg", "averageVolume", "summaryDetail.averageVolume", "quote.avgVolume",
    ),
    "volume_recent": (
        "volume_recent", "regularMarketVolume", "summaryDetail.volume", "quote.volume",
    ),
    "price_change_pct": ("price_change_pct", "priceChangePct", "changesPercentage", "quote.changesPercentage"),
    "debt_to_equity": ("debt_to_equity", "debtToEquityRatio", "ratios.debtEquityRatio"),
    "total_cash": ("total_cash", "totalCash", "financialData.totalCash"),
    "total_debt": ("total_debt", "totalDebt", "financialData.totalDebt"),
}

STRING_ALIASES: dict[str, tuple[str, ...]] = {
    "symbol": ("symbol", "ticker", "quote.symbol", "profile.symbol"),
    "company_name": ("company_name", "companyName", "profile.companyName", "profile.name", "longName"),
    "sector": ("sector", "profile.sector", "assetProfile.sector", "summaryProfile.sector"),
    "industry": ("industry", "profile.industry", "assetProfile.industry", "summaryProfile.industry"),
}

CATALYST_DATE_ALIASES: tuple[str, ...] = (
    "next_catalyst_date", "nextEarningsDate", "earningsDate",
    "calendarEvents.earnings.earningsDate", "quote.earningsAnnouncement",
)


@dataclass(frozen=True)
class NormalizedRecord:
    """Typed, nullable view of a provider record."""
    symbol: str | None = None
    company_name: str | None = None
    sector: str | None = None
    industry: str | None = None
    trailing_pe: float | None = None
    forward_pe: float | None = None
    eps_actual: float | None = None
    eps_estimate: float | None = None
    eps_surprise_pct: float | None = None
    revisions_up: float | None = None
    revisions_down: float | None = None
    revisions_up_prior: float | None = None
    revisions_down_prior: float | None = None
    revenue_growth_qoq: float | None = None
    revenue_current: float | None = None
    revenue_prior: float | None = None
    eps_growth_current_year: float | None = None
    eps_growth_next_year: float | None = None
    days_to_catalyst: float | None = None
    price: float | None = None
    ma_200: float | None = None
    relative_strength: float | None = None
    volume_avg: float | None = None
    volume_recent: float | None = None
    price_change_pct: float | None = None
    debt_to_equity: float | None = None
    total_cash: float | None = None
    total_debt: float | None = None

    def present(self) -> list[str]:
        """Names of fields that carry a value."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]


def _parse_date(value: Any) -> date | None:
    value = _unwrap(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    number = coerce_number(value) if not isinstance(value, str) else None
    if number is not None:
        # Epoch seconds, as Yahoo sends them
        try:
            return datetime.fromtimestamp(number).date()
        except (OverflowError, OSError, ValueError):
            return None
    text = coerce_string(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _days_to_catalyst(raw: Mapping[str, Any], as_of: date | None) -> float | None:
    for path in CATALYST_DATE_ALIASES:
        when = _parse_date(resolve_path(raw, path))
        if when is not None:
            return float((when - (as_of or date.today())).days)
    return None


def normalize_record(raw: Any, as_of: date | None = None) -> NormalizedRecord:
    """
    Build a NormalizedRecord from a raw provider record.

    Args:
        raw: Provider payload (mapping); anything else yields an empty record
        as_of: Reference date for converting a catalyst date into days

    Returns:
        NormalizedRecord with every field coerced or None
    """
    if not isinstance(raw, Mapping):
        return NormalizedRecord()

    values: dict[str, Any] = {}
    for name, paths in NUMERIC_ALIASES.items():
        values[name] = next(
            (n for n in (coerce_number(resolve_path(raw, p)) for p in paths) if n is not None),
            None,
        )
    for name, paths in STRING_ALIASES.items():
        values[name] = next(
            (s for s in (coerce_string(resolve_path(raw, p)) for p in paths) if s is not None),
            None,
        )

    if values["days_to_catalyst"] is None:
        values["days_to_catalyst"] = _days_to_catalyst(raw, as_of)

    return NormalizedRecord(**values)
