"""
Sector lookup tables.

Reference forward P/E by sector and macro-sensitivity level by sector.
These drift and need periodic manual refresh, so they are versioned data
passed into the interpreters (see config.schema.SectorTablesConfig for
overriding them from a TOML file) rather than constants the interpreters
reach for.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..errors import ConfigurationInconsistency, ErrorCode

UNKNOWN_SECTOR = "Unknown"

# GICS and provider naming variants -> table key
SECTOR_ALIASES: dict[str, str] = {
    "information technology": "Technology",
    "tech": "Technology",
    "financials": "Financial Services",
    "financial": "Financial Services",
    "consumer discretionary": "Consumer Cyclical",
    "consumer staples": "Consumer Defensive",
    "health care": "Healthcare",
    "materials": "Basic Materials",
    "telecommunication services": "Communication Services",
    "communication": "Communication Services",
}

DEFAULT_TABLE_VERSION = "2026-02"

DEFAULT_REFERENCE_PE: dict[str, float] = {
    "Technology": 28.0,
    "Communication Services": 20.0,
    "Consumer Cyclical": 24.0,
    "Consumer Defensive": 21.0,
    "Healthcare": 19.0,
    "Financial Services": 14.0,
    "Industrials": 21.0,
    "Energy": 12.0,
    "Utilities": 17.0,
    "Real Estate": 34.0,
    "Basic Materials": 16.0,
    UNKNOWN_SECTOR: 20.0,
}

# Index into the macro_sensitivity ladder: 0 highly exposed ... 4 counter-cyclical
DEFAULT_MACRO_SENSITIVITY: dict[str, int] = {
    "Technology": 2,
    "Communication Services": 2,
    "Consumer Cyclical": 1,
    "Consumer Defensive": 3,
    "Healthcare": 3,
    "Financial Services": 1,
    "Industrials": 1,
    "Energy": 0,
    "Utilities": 3,
    "Real Estate": 1,
    "Basic Materials": 0,
    UNKNOWN_SECTOR: 2,
}


@dataclass(frozen=True)
class SectorMatch:
    """Result of looking a sector name up in a table."""
    key: str
    matched: bool


@dataclass(frozen=True)
class SectorTables:
    """Versioned sector -> reference constant tables."""
    version: str = DEFAULT_TABLE_VERSION
    reference_pe: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_REFERENCE_PE))
    macro_sensitivity: Mapping[str, int] = field(default_factory=lambda: dict(DEFAULT_MACRO_SENSITIVITY))

    def __post_init__(self) -> None:
        for name, table in (("reference_pe", self.reference_pe), ("macro_sensitivity", self.macro_sensitivity)):
            if UNKNOWN_SECTOR not in table:
                raise ConfigurationInconsistency(
                    f"{name} table has no '{UNKNOWN_SECTOR}' entry",
                    code=ErrorCode.CONFIG_SECTOR_TABLE, table=name, version=self.version,
                )
        for sector, pe in self.reference_pe.items():
            if not (math.isfinite(pe) and pe > 0):
                raise ConfigurationInconsistency(
                    f"reference P/E for {sector} must be a finite positive number, got {pe}",
                    code=ErrorCode.CONFIG_SECTOR_TABLE, sector=sector,
                )
        for sector, level in self.macro_sensitivity.items():
            if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 4:
                raise ConfigurationInconsistency(
                    f"macro sensitivity for {sector} must be an index 0-4, got {level!r}",
                    code=ErrorCode.CONFIG_SECTOR_TABLE, sector=sector,
                )
        object.__setattr__(self, "reference_pe", MappingProxyType(dict(self.reference_pe)))
        object.__setattr__(self, "macro_sensitivity", MappingProxyType(dict(self.macro_sensitivity)))

    @staticmethod
    def _match(sector: str, table: Mapping[str, object]) -> SectorMatch:
        wanted = sector.strip().lower()
        by_lower = {k.lower(): k for k in table}
        if wanted in by_lower:
            return SectorMatch(by_lower[wanted], True)
        alias = SECTOR_ALIASES.get(wanted)
        if alias is not None and alias.lower() in by_lower:
            return SectorMatch(by_lower[alias.lower()], True)
        return SectorMatch(UNKNOWN_SECTOR, False)

    def reference_pe_for(self, sector: str) -> tuple[float, SectorMatch]:
        match = self._match(sector, self.reference_pe)
        return self.reference_pe[match.key], match

    def macro_index_for(self, sector: str) -> tuple[int, SectorMatch]:
        match = self._match(sector, self.macro_sensitivity)
        return self.macro_sensitivity[match.key], match


DEFAULT_TABLES = SectorTables()
