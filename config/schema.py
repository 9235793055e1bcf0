"""
Configuration schema with validation.

All configuration is validated at load time using Pydantic.
"""

import math

from pydantic import BaseModel, Field, field_validator

from domain.factors.tables import (
    DEFAULT_MACRO_SENSITIVITY,
    DEFAULT_REFERENCE_PE,
    DEFAULT_TABLE_VERSION,
    UNKNOWN_SECTOR,
    SectorTables,
)


class SectorTablesConfig(BaseModel):
    """Versioned sector lookup tables. Refresh periodically."""

    version: str = Field(default=DEFAULT_TABLE_VERSION, min_length=1)
    reference_pe: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_REFERENCE_PE),
        description="Sector -> reference forward P/E",
    )
    macro_sensitivity: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_MACRO_SENSITIVITY),
        description="Sector -> macro sensitivity ladder index (0 highly exposed .. 4 counter-cyclical)",
    )

    @field_validator("reference_pe")
    @classmethod
    def validate_reference_pe(cls, v: dict[str, float]) -> dict[str, float]:
        if UNKNOWN_SECTOR not in v:
            raise ValueError(f"reference_pe must contain an '{UNKNOWN_SECTOR}' entry")
        for sector, pe in v.items():
            if not (math.isfinite(pe) and pe > 0):
                raise ValueError(f"reference P/E for {sector} must be a finite positive number, got {pe}")
        return v

    @field_validator("macro_sensitivity")
    @classmethod
    def validate_macro_sensitivity(cls, v: dict[str, int]) -> dict[str, int]:
        if UNKNOWN_SECTOR not in v:
            raise ValueError(f"macro_sensitivity must contain an '{UNKNOWN_SECTOR}' entry")
        for sector, level in v.items():
            if not 0 <= level <= 4:
                raise ValueError(f"macro sensitivity for {sector} must be 0-4, got {level}")
        return v

    def to_tables(self) -> SectorTables:
        return SectorTables(
            version=self.version,
            reference_pe=self.reference_pe,
            macro_sensitivity=self.macro_sensitivity,
        )


class BatchConfig(BaseModel):
    """Batch evaluation settings."""

    max_workers: int | None = Field(default=None, ge=1, le=64, description="None = executor default")


class LoggingConfig(BaseModel):
    """Logging preferences."""

    level: str = Field(default="WARNING")
    format: str = Field(default="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper().strip()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class OppscoreConfig(BaseModel):
    """
    Root configuration model.

    All settings are validated on load.
    """

    sector_tables: SectorTablesConfig = Field(default_factory=SectorTablesConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def tables(self) -> SectorTables:
        """Domain sector tables built from this configuration."""
        return self.sector_tables.to_tables()
