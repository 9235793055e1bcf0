"""
Earnings Factor Module.

Interprets the earnings-driven core factors:
- EPS surprise magnitude (last quarter beat vs consensus)
- Estimate revision level (share of upward analyst revisions)
- Revision acceleration (change in net revisions vs the prior window)
- Revenue momentum (quarter-over-quarter top-line growth)
- EPS inflection (this year vs next year growth profile)

Each function returns a FactorValue holding a ladder index 0-4, or an
unscored value when the inputs cannot support one.
"""

from ..enums import ConfidenceTag
from ..models import FactorValue
from ..normalize import NormalizedRecord
from .bands import Band, describe_bands, score_bucket

EPS_SURPRISE_BANDS = (Band(1.0, 0), Band(5.0, 1), Band(10.0, 2), Band(20.0, 3))

REVISION_SHARE_BANDS = (Band(0.4, 0), Band(0.5, 1, inclusive=True), Band(0.75, 2))

VELOCITY_BANDS = (Band(-0.1, 0), Band(0.1, 1, inclusive=True), Band(0.3, 2, inclusive=True), Band(0.6, 3, inclusive=True))

REVENUE_BANDS = (Band(-1.0, 0), Band(1.0, 1), Band(5.0, 2), Band(10.0, 3, inclusive=True))

# EPS inflection thresholds, growth in percent
INFLECTION_STRONG = 15.0
INFLECTION_FLAT = 3.0
INFLECTION_SLOW = 5.0


def compute_surprise_pct(actual: float, estimate: float) -> float:
    """Surprise as a percentage of the absolute estimate."""
    return (actual - estimate) / abs(estimate) * 100


def interpret_eps_surprise(record: NormalizedRecord) -> FactorValue:
    """
    Score last quarter's EPS surprise.

    Prefers the actual/estimate pair; falls back to a provider-reported
    surprise percentage. A zero estimate gives no meaningful percentage.
    """
    actual, estimate = record.eps_actual, record.eps_estimate
    if actual is not None and estimate is not None and estimate != 0:
        surprise = compute_surprise_pct(actual, estimate)
        confidence = ConfidenceTag.HIGH
        evidence = {"surprise_pct": surprise, "actual": actual, "estimate": estimate}
    elif record.eps_surprise_pct is not None:
        surprise = record.eps_surprise_pct
        confidence = ConfidenceTag.MEDIUM
        evidence = {"surprise_pct": surprise}
    elif estimate == 0:
        return FactorValue.missing("zero EPS estimate", actual=actual, estimate=estimate)
    else:
        return FactorValue.missing("EPS surprise unavailable")

    index = score_bucket(surprise, EPS_SURPRISE_BANDS, above=4)
    evidence["bands"] = describe_bands(EPS_SURPRISE_BANDS, 4)
    return FactorValue(index=index, confidence=confidence, evidence=evidence)


def compute_up_share(up: float, down: float) -> float:
    return up / (up + down)


def interpret_revisions(record: NormalizedRecord) -> FactorValue:
    """
    Score the balance of analyst EPS revisions over the last 90 days.

    No revisions at all is no evidence, not a "mixed" reading.
    """
    up, down = record.revisions_up, record.revisions_down
    if up is None or down is None:
        return FactorValue.missing("revision counts unavailable")
    if up < 0 or down < 0:
        return FactorValue.missing("negative revision count", up=up, down=down)
    total = up + down
    if total == 0:
        return FactorValue.missing("no revisions in window", up=up, down=down)

    share = compute_up_share(up, down)
    if down == 0:
        index = 4
    else:
        index = score_bucket(share, REVISION_SHARE_BANDS, above=3)

    confidence = ConfidenceTag.MEDIUM if total >= 3 else ConfidenceTag.LOW
    return FactorValue(
        index=index,
        confidence=confidence,
        evidence={
            "up": up,
            "down": down,
            "up_share": share,
            "bands": ["down == 0 -> 4", *describe_bands(REVISION_SHARE_BANDS, 3)],
        },
    )


def compute_net_revisions(up: float, down: float) -> float:
    """Net revision balance in [-1, 1]."""
    return (up - down) / (up + down)


def interpret_revision_velocity(record: NormalizedRecord) -> FactorValue:
    """Score the change in net revisions between the prior and current window."""
    counts = (record.revisions_up, record.revisions_down, record.revisions_up_prior, record.revisions_down_prior)
    if any(c is None for c in counts):
        return FactorValue.missing("revision history unavailable")
    up, down, up_prior, down_prior = counts
    if min(counts) < 0:
        return FactorValue.missing("negative revision count")
    if up + down == 0 or up_prior + down_prior == 0:
        return FactorValue.missing("empty revision window", current=up + down, prior=up_prior + down_prior)

    now = compute_net_revisions(up, down)
    before = compute_net_revisions(up_prior, down_prior)
    delta = now - before
    index = score_bucket(delta, VELOCITY_BANDS, above=4)
    return FactorValue(
        index=index,
        confidence=ConfidenceTag.MEDIUM,
        evidence={
            "net_now": now,
            "net_prior": before,
            "delta": delta,
            "bands": describe_bands(VELOCITY_BANDS, 4),
        },
    )


def compute_growth_pct(current: float, prior: float) -> float:
    return (current - prior) / prior * 100


def interpret_revenue_momentum(record: NormalizedRecord) -> FactorValue:
    """Score quarter-over-quarter revenue growth."""
    if record.revenue_current is not None and record.revenue_prior is not None:
        if record.revenue_prior <= 0:
            return FactorValue.missing("non-positive prior revenue", prior=record.revenue_prior)
        growth = compute_growth_pct(record.revenue_current, record.revenue_prior)
        confidence = ConfidenceTag.HIGH
        evidence = {"growth_pct": growth, "current": record.revenue_current, "prior": record.revenue_prior}
    elif record.revenue_growth_qoq is not None:
        growth = record.revenue_growth_qoq
        confidence = ConfidenceTag.MEDIUM
        evidence = {"growth_pct": growth}
    else:
        return FactorValue.missing("revenue growth unavailable")

    index = score_bucket(growth, REVENUE_BANDS, above=4)
    evidence["bands"] = describe_bands(REVENUE_BANDS, 4)
    return FactorValue(index=index, confidence=confidence, evidence=evidence)


def classify_inflection(current_year: float, next_year: float) -> int:
    """
    Place a (this year, next year) EPS growth pair on the inflection ladder.

    Rules are checked in order; the last one catches flat and mixed profiles.
    """
    if current_year >= INFLECTION_STRONG and next_year >= current_year:
        return 4
    if current_year < INFLECTION_SLOW and next_year >= INFLECTION_STRONG:
        return 3
    if current_year < -INFLECTION_FLAT and next_year < -INFLECTION_FLAT:
        return 0
    if current_year > INFLECTION_FLAT and next_year > INFLECTION_FLAT:
        return 2
    return 1


def interpret_eps_inflection(record: NormalizedRecord) -> FactorValue:
    """Score the EPS growth profile across this year and next."""
    cy, ny = record.eps_growth_current_year, record.eps_growth_next_year
    if cy is None or ny is None:
        return FactorValue.missing("EPS growth estimates unavailable")
    return FactorValue(
        index=classify_inflection(cy, ny),
        confidence=ConfidenceTag.MEDIUM,
        evidence={
            "current_year_pct": cy,
            "next_year_pct": ny,
            "strong_pct": INFLECTION_STRONG,
            "flat_pct": INFLECTION_FLAT,
        },
    )
