"""Reference instrument presets (operator readings as of Feb 2026)."""

PRESETS: dict[str, dict] = {
    "NA": {
        "name": "National Bank (NA.TO)  Feb 2026",
        "values": {
            "eps_surprise": 3,
            "revisions": 4,
            "revision_velocity": 3,
            "sector_tailwind": 3,
            "valuation": 3,
            "revenue_momentum": 3,
            "eps_inflection": 3,
            "catalyst_proximity": 3,
            "chart_trend": 3,
            "accumulation": 3,
            "binary_risk": 4,
            "balance_sheet": 3,
            "thesis_risk": 4,
            "macro_sensitivity": 2,
            "institutional_flow": 3,
            "iv_environment": 4,
        },
    },
    "ALL": {
        "name": "Allstate (ALL)  Feb 2026",
        "values": {
            "eps_surprise": 4,
            "revisions": 4,
            "revision_velocity": 4,
            "sector_tailwind": 4,
            "valuation": 3,
            "revenue_momentum": 3,
            "eps_inflection": 4,
            "catalyst_proximity": 3,
            "chart_trend": 2,
            "accumulation": 2,
            "binary_risk": 3,
            "balance_sheet": 3,
            "thesis_risk": 4,
            "macro_sensitivity": 2,
            "institutional_flow": 2,
            "iv_environment": 2,
        },
    },
    "COF": {
        "name": "Capital One (COF)  Feb 2026",
        "values": {
            "eps_surprise": 3,
            "revisions": 3,
            "revision_velocity": 2,
            "sector_tailwind": 2,
            "valuation": 4,
            "revenue_momentum": 3,
            "eps_inflection": 3,
            "catalyst_proximity": 3,
            "chart_trend": 1,
            "accumulation": 1,
            "binary_risk": 3,
            "balance_sheet": 2,
            "thesis_risk": 3,
            "macro_sensitivity": 1,
            "institutional_flow": 2,
            "iv_environment": 1,
        },
    },
}


def get_preset(name: str) -> dict:
    """Preset by key, case-insensitive."""
    try:
        return PRESETS[name.upper()]
    except KeyError:
        raise KeyError(f"Unknown preset: {name} (choose from {', '.join(PRESETS)})") from None
