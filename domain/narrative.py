"""Plain-language drivers and risks behind a score."""

from typing import Mapping

from .factors.definitions import CORE_GROUP, REVISION_VELOCITY, RISK_GROUP
from .models import FactorValue, Narrative

MATERIAL_PENALTY = 2
VELOCITY_ALERT_INDEX = 3


def _index(values: Mapping[str, FactorValue], factor_id: str) -> int | None:
    value = values.get(factor_id)
    return value.index if value is not None else None


def build_narrative(values: Mapping[str, FactorValue]) -> Narrative:
    """
    Summarize the top two core drivers and any material risk flags.

    Drivers are ranked by the share of their own weight they realize, so a
    small factor at its top anchor outranks a big factor half way up.
    """
    contributions = []
    for f in CORE_GROUP:
        realized = f.value_at(_index(values, f.id))
        if realized > 0:
            contributions.append((realized / f.weight, f.label.lower()))
    # sorted() is stable, ties keep table order
    drivers = [label for _, label in sorted(contributions, key=lambda c: c[0], reverse=True)[:2]]

    risks = tuple(
        f.label.lower()
        for f in RISK_GROUP
        if _index(values, f.id) is not None and f.value_at(_index(values, f.id)) >= MATERIAL_PENALTY
    )

    velocity = _index(values, REVISION_VELOCITY.id)
    alert = (
        "Revision velocity accelerating, momentum building"
        if velocity is not None and velocity >= VELOCITY_ALERT_INDEX
        else None
    )

    return Narrative(
        primary_driver=" + ".join(drivers) if drivers else "insufficient data",
        key_risk=risks[0] if risks else "no material flags",
        all_risks=risks,
        velocity_alert=alert,
    )
