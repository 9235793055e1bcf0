"""
Unit tests for factor tables and interpreters.

Tests cover:
- Factor ladders (weights, group maxima, table validation)
- Sector tables (lookup, aliases, Unknown fallback, validation)
- Threshold bands
- Earnings interpreters (EPS surprise, revisions, acceleration, revenue, inflection)
- Relative valuation (including the non-monotonic ladder)
- Timing interpreters (catalyst proximity, trend health, accumulation)
- Risk interpreters (balance sheet, macro sensitivity)
- Evidence round-trips against hand-written reference formulas
"""

import pytest

from domain.enums import ConfidenceTag, FactorGroupKind
from domain.errors import ConfigurationInconsistency, ErrorCode
from domain.factors import (
    ALL_FACTOR_IDS,
    ALWAYS_MANUAL,
    CORE_GROUP,
    CORE_MAX,
    FACTORS,
    TIMING_GROUP,
    TIMING_MAX,
    FactorDefinition,
    FactorGroup,
    SectorTables,
    get_factor,
    interpret_accumulation,
    interpret_balance_sheet,
    interpret_catalyst_proximity,
    interpret_chart_trend,
    interpret_eps_inflection,
    interpret_eps_surprise,
    interpret_macro_sensitivity,
    interpret_revenue_momentum,
    interpret_revision_velocity,
    interpret_revisions,
    interpret_valuation,
)
from domain.factors.bands import Band, describe_bands, score_bucket
from domain.factors.earnings import EPS_SURPRISE_BANDS, classify_inflection
from domain.factors.valuation import DISCOUNT_BANDS
from domain.normalize import NormalizedRecord


def rec(**fields) -> NormalizedRecord:
    """Shorthand for a normalized record."""
    return NormalizedRecord(**fields)


# ============================================================================
# Factor definitions
# ============================================================================


class TestFactorDefinitions:
    """Tests for the fixed factor ladders."""

    def test_sixteen_factors(self):
        assert len(ALL_FACTOR_IDS) == 16
        assert len(set(ALL_FACTOR_IDS)) == 16

    def test_group_maxima(self):
        """Core sums to 80 and timing to 20 at the top of every ladder."""
        assert CORE_MAX == 80
        assert TIMING_MAX == 20
        assert len(CORE_GROUP) == 7
        assert len(TIMING_GROUP) == 3

    def test_weight_is_top_of_table(self):
        for definition in FACTORS.values():
            assert definition.weight == max(definition.values), definition.id
            assert len(definition.values) == len(definition.anchors) == 5, definition.id

    def test_always_manual_set(self):
        assert ALWAYS_MANUAL == {
            "sector_tailwind", "binary_risk", "thesis_risk", "institutional_flow", "iv_environment",
        }

    @pytest.mark.parametrize("factor_id", ALL_FACTOR_IDS)
    def test_value_at_every_index(self, factor_id):
        """Each index returns exactly its table value; None contributes 0."""
        definition = get_factor(factor_id)
        for index, value in enumerate(definition.values):
            assert definition.value_at(index) == value
        assert definition.value_at(None) == 0

    def test_risk_tables_are_penalties(self):
        for factor_id in ("binary_risk", "balance_sheet", "thesis_risk", "macro_sensitivity"):
            definition = get_factor(factor_id)
            assert definition.is_penalty
            assert definition.values[0] == definition.weight, "index 0 is the most severe"
            assert definition.values[-1] == 0

    @pytest.mark.parametrize("raw,expected", [
        (0, 0), (2, 2), (4, 4), (2.5, 3), (2.49, 2), (-3, 0), (9, 4), ("3", 3), (None, None), ("x", None),
    ])
    def test_clamp_index(self, raw, expected):
        assert get_factor("eps_surprise").clamp_index(raw) == expected

    @pytest.mark.parametrize("index", [-1, 5, 99])
    def test_out_of_range_index_rejected(self, index):
        """Negative indices must not wrap around to the top of the ladder."""
        definition = get_factor("eps_surprise")
        with pytest.raises(ValueError):
            definition.value_at(index)
        with pytest.raises(ValueError):
            definition.anchor_at(index)

    def test_edge_indices(self):
        definition = get_factor("eps_surprise")
        assert definition.value_at(0) == definition.values[0]
        assert definition.value_at(4) == definition.weight
        assert definition.value_at(None) == 0
        assert definition.anchor_at(None) is None

    def test_unknown_factor(self):
        with pytest.raises(KeyError):
            get_factor("dividend_yield")

    def test_table_length_mismatch_fails_fast(self):
        with pytest.raises(ConfigurationInconsistency) as exc_info:
            FactorDefinition(
                id="bad", label="Bad", description="", weight=4,
                values=(0, 1, 4), anchors=("a", "b"), group=FactorGroupKind.CORE,
            )
        assert exc_info.value.code == ErrorCode.CONFIG_TABLE_MISMATCH
        assert exc_info.value.context["factor_id"] == "bad"
        assert str(exc_info.value).startswith("[E501]")

    def test_weight_mismatch_fails_fast(self):
        with pytest.raises(ConfigurationInconsistency) as exc_info:
            FactorDefinition(
                id="bad", label="Bad", description="", weight=10,
                values=(0, 1, 4), anchors=("a", "b", "c"), group=FactorGroupKind.CORE,
            )
        assert exc_info.value.code == ErrorCode.CONFIG_WEIGHT_MISMATCH

    def test_negative_value_fails_fast(self):
        with pytest.raises(ConfigurationInconsistency):
            FactorDefinition(
                id="bad", label="Bad", description="", weight=4,
                values=(-1, 4), anchors=("a", "b"), group=FactorGroupKind.RISK,
            )

    def test_group_rejects_foreign_factor(self):
        with pytest.raises(ConfigurationInconsistency):
            FactorGroup(FactorGroupKind.TIMING, "Timing", (get_factor("eps_surprise"),))


# ============================================================================
# Sector tables
# ============================================================================


class TestSectorTables:
    """Tests for versioned sector lookup tables."""

    def test_exact_match(self):
        pe, match = SectorTables().reference_pe_for("Technology")
        assert pe == 28.0
        assert match.matched

    def test_case_insensitive_and_alias(self):
        tables = SectorTables()
        assert tables.reference_pe_for("  technology ")[0] == 28.0
        pe, match = tables.reference_pe_for("Information Technology")
        assert pe == 28.0
        assert match.key == "Technology"
        assert tables.macro_index_for("Financials")[0] == 1

    def test_unknown_sector_falls_back(self):
        pe, match = SectorTables().reference_pe_for("Crypto Mining")
        assert pe == 20.0
        assert match.key == "Unknown"
        assert not match.matched

    def test_custom_tables(self):
        tables = SectorTables(
            version="test",
            reference_pe={"Technology": 30.0, "Unknown": 18.0},
            macro_sensitivity={"Unknown": 4},
        )
        assert tables.reference_pe_for("Technology")[0] == 30.0
        assert tables.macro_index_for("Technology")[0] == 4

    def test_tables_are_read_only(self):
        tables = SectorTables()
        with pytest.raises(TypeError):
            tables.reference_pe["Technology"] = 1.0

    def test_missing_unknown_entry(self):
        with pytest.raises(ConfigurationInconsistency) as exc_info:
            SectorTables(reference_pe={"Technology": 28.0})
        assert exc_info.value.code == ErrorCode.CONFIG_SECTOR_TABLE

    def test_non_positive_pe(self):
        with pytest.raises(ConfigurationInconsistency):
            SectorTables(reference_pe={"Unknown": 0.0})

    @pytest.mark.parametrize("pe", [float("inf"), float("nan"), float("-inf")])
    def test_non_finite_pe(self, pe):
        with pytest.raises(ConfigurationInconsistency) as exc_info:
            SectorTables(reference_pe={"Technology": pe, "Unknown": 20.0})
        assert exc_info.value.context["sector"] == "Technology"

    @pytest.mark.parametrize("level", [-1, 5, 2.0, True])
    def test_bad_macro_level(self, level):
        with pytest.raises(ConfigurationInconsistency):
            SectorTables(macro_sensitivity={"Unknown": level})


# ============================================================================
# Bands
# ============================================================================


class TestBands:
    """Tests for threshold band lookup."""

    @pytest.mark.parametrize("value,expected", [
        (-50.0, 0), (0.99, 0), (1.0, 1), (4.99, 1), (5.0, 2), (9.99, 2), (10.0, 3), (19.99, 3), (20.0, 4), (1e9, 4),
    ])
    def test_eps_surprise_edges(self, value, expected):
        assert score_bucket(value, EPS_SURPRISE_BANDS, above=4) == expected

    def test_inclusive_upper_edge(self):
        bands = (Band(1.0, 0, inclusive=True),)
        assert score_bucket(1.0, bands, above=1) == 0
        assert score_bucket(1.0001, bands, above=1) == 1

    def test_describe_bands(self):
        assert describe_bands(DISCOUNT_BANDS, 4) == [
            "< -20 -> 0", "< 5 -> 1", "< 15 -> 2", "<= 30 -> 3", "> 30 -> 4",
        ]


# ============================================================================
# Earnings interpreters
# ============================================================================


class TestEpsSurprise:
    """Tests for the EPS surprise interpreter."""

    @pytest.mark.parametrize("actual,estimate,expected", [
        (1.00, 1.00, 0),   # in-line
        (0.90, 1.00, 0),   # miss
        (1.03, 1.00, 1),   # small beat
        (2.14, 2.00, 2),   # 7%
        (2.30, 2.00, 3),   # 15%
        (1.25, 1.00, 4),   # blowout
        (-0.50, -1.00, 4), # smaller loss than expected
    ])
    def test_buckets(self, actual, estimate, expected):
        value = interpret_eps_surprise(rec(eps_actual=actual, eps_estimate=estimate))
        assert value.index == expected
        assert value.confidence == ConfidenceTag.HIGH

    def test_reported_surprise_fallback(self):
        value = interpret_eps_surprise(rec(eps_surprise_pct=7.5))
        assert value.index == 2
        assert value.confidence == ConfidenceTag.MEDIUM

    def test_zero_estimate_is_unscored(self):
        value = interpret_eps_surprise(rec(eps_actual=0.1, eps_estimate=0.0))
        assert value.index is None
        assert value.evidence["reason"] == "zero EPS estimate"

    def test_missing(self):
        assert interpret_eps_surprise(rec()).index is None
        assert interpret_eps_surprise(rec(eps_actual=1.0)).index is None


class TestRevisions:
    """Tests for the revision level interpreter."""

    @pytest.mark.parametrize("up,down,expected", [
        (10, 0, 4),
        (6, 2, 3),   # 75% up
        (8, 2, 3),
        (3, 2, 2),   # 60% up
        (1, 1, 1),   # even
        (4, 5, 1),   # 44% up
        (1, 3, 0),
        (0, 4, 0),
    ])
    def test_buckets(self, up, down, expected):
        assert interpret_revisions(rec(revisions_up=up, revisions_down=down)).index == expected

    def test_no_revisions_is_unscored(self):
        """Zero revisions is no evidence, not a mixed reading."""
        value = interpret_revisions(rec(revisions_up=0, revisions_down=0))
        assert value.index is None

    def test_negative_counts_unscored(self):
        assert interpret_revisions(rec(revisions_up=-1, revisions_down=2)).index is None

    def test_thin_coverage_is_low_confidence(self):
        assert interpret_revisions(rec(revisions_up=1, revisions_down=0)).confidence == ConfidenceTag.LOW
        assert interpret_revisions(rec(revisions_up=3, revisions_down=0)).confidence == ConfidenceTag.MEDIUM


class TestRevisionVelocity:
    """Tests for the revision acceleration interpreter."""

    def test_rapid_acceleration(self):
        value = interpret_revision_velocity(rec(
            revisions_up=10, revisions_down=0, revisions_up_prior=2, revisions_down_prior=8,
        ))
        assert value.index == 4
        assert value.evidence["delta"] == pytest.approx(1.6)

    def test_clear_acceleration(self):
        value = interpret_revision_velocity(rec(
            revisions_up=8, revisions_down=2, revisions_up_prior=5, revisions_down_prior=5,
        ))
        assert value.index == 3

    def test_flat(self):
        value = interpret_revision_velocity(rec(
            revisions_up=5, revisions_down=5, revisions_up_prior=3, revisions_down_prior=3,
        ))
        assert value.index == 1

    def test_reversing(self):
        value = interpret_revision_velocity(rec(
            revisions_up=2, revisions_down=8, revisions_up_prior=8, revisions_down_prior=2,
        ))
        assert value.index == 0

    def test_empty_window_unscored(self):
        value = interpret_revision_velocity(rec(
            revisions_up=4, revisions_down=1, revisions_up_prior=0, revisions_down_prior=0,
        ))
        assert value.index is None

    def test_missing_history(self):
        assert interpret_revision_velocity(rec(revisions_up=4, revisions_down=1)).index is None


class TestRevenueMomentum:
    """Tests for the revenue acceleration interpreter."""

    @pytest.mark.parametrize("current,prior,expected", [
        (90, 100, 0),
        (100, 100, 1),
        (103, 100, 2),
        (107, 100, 3),
        (120, 100, 4),
    ])
    def test_from_revenue_pair(self, current, prior, expected):
        value = interpret_revenue_momentum(rec(revenue_current=current, revenue_prior=prior))
        assert value.index == expected
        assert value.confidence == ConfidenceTag.HIGH

    def test_reported_growth_fallback(self):
        value = interpret_revenue_momentum(rec(revenue_growth_qoq=-5.0))
        assert value.index == 0
        assert value.confidence == ConfidenceTag.MEDIUM

    def test_zero_prior_unscored(self):
        assert interpret_revenue_momentum(rec(revenue_current=10, revenue_prior=0)).index is None

    def test_missing(self):
        assert interpret_revenue_momentum(rec()).index is None


class TestEpsInflection:
    """Tests for the EPS inflection profile."""

    @pytest.mark.parametrize("current_year,next_year,expected", [
        (20, 25, 4),    # strong and accelerating
        (2, 20, 3),     # flat now, strong next
        (-10, -5, 0),   # both declining
        (8, 6, 2),      # moderate both
        (20, 10, 2),    # strong but decelerating
        (1, 2, 1),      # flat both
        (-8, 4, 1),     # mixed
    ])
    def test_profiles(self, current_year, next_year, expected):
        assert classify_inflection(current_year, next_year) == expected
        value = interpret_eps_inflection(rec(eps_growth_current_year=current_year, eps_growth_next_year=next_year))
        assert value.index == expected

    def test_missing_year(self):
        assert interpret_eps_inflection(rec(eps_growth_current_year=10)).index is None


# ============================================================================
# Valuation
# ============================================================================


class TestValuation:
    """Tests for relative valuation vs sector."""

    @pytest.mark.parametrize("pe,expected", [
        (40.0, 0),   # 43% premium
        (28.0, 1),   # in line
        (24.0, 2),   # 14% discount
        (21.0, 3),   # 25% discount
        (14.0, 4),   # 50% discount
    ])
    def test_buckets_vs_technology(self, pe, expected):
        value = interpret_valuation(rec(forward_pe=pe, sector="Technology"))
        assert value.index == expected
        assert value.evidence["sector_pe"] == 28.0
        assert value.evidence["basis"] == "forward"

    def test_moderate_discount_beats_deep_discount(self):
        """The ladder is non-monotonic: deep discounts are value-trap candidates."""
        definition = get_factor("valuation")
        moderate = interpret_valuation(rec(forward_pe=24.0, sector="Technology"))
        deep = interpret_valuation(rec(forward_pe=14.0, sector="Technology"))
        assert definition.value_at(moderate.index) > definition.value_at(deep.index)

    def test_trailing_fallback(self):
        value = interpret_valuation(rec(trailing_pe=14.0, sector="Energy"))
        assert value.evidence["basis"] == "trailing"
        assert value.confidence == ConfidenceTag.LOW

    def test_forward_preferred(self):
        value = interpret_valuation(rec(forward_pe=12.0, trailing_pe=50.0, sector="Energy"))
        assert value.evidence["pe"] == 12.0
        assert value.index == 1

    def test_unknown_sector_uses_fallback_multiple(self):
        value = interpret_valuation(rec(forward_pe=18.0, sector="Crypto Mining"))
        assert value.evidence["sector_pe"] == 20.0
        assert value.evidence["sector_matched"] is False
        assert value.confidence == ConfidenceTag.LOW
        assert value.index == 2

    def test_custom_tables(self):
        tables = SectorTables(version="2026-06", reference_pe={"Technology": 40.0, "Unknown": 20.0})
        value = interpret_valuation(rec(forward_pe=32.0, sector="Technology"), tables)
        assert value.index == 3
        assert value.evidence["table_version"] == "2026-06"

    @pytest.mark.parametrize("fields", [
        {"sector": "Technology"},
        {"forward_pe": -5.0, "sector": "Technology"},
        {"forward_pe": 0.0, "sector": "Technology"},
        {"forward_pe": 20.0},
    ])
    def test_unscored(self, fields):
        assert interpret_valuation(rec(**fields)).index is None

    @pytest.mark.parametrize("pe", [float("inf"), float("nan")])
    def test_non_finite_pe_unscored(self, pe):
        """A non-finite multiple must not land in the deep-discount bucket."""
        value = interpret_valuation(rec(forward_pe=pe, sector="Technology"))
        assert value.index is None
        assert value.evidence["reason"] == "non-finite discount"


# ============================================================================
# Timing interpreters
# ============================================================================


class TestCatalystProximity:
    """Tests for catalyst proximity."""

    @pytest.mark.parametrize("days,expected", [
        (0, 4), (30, 4), (59, 4), (60, 3), (89, 3), (90, 2), (120, 2), (121, 1), (400, 1),
    ])
    def test_buckets(self, days, expected):
        assert interpret_catalyst_proximity(rec(days_to_catalyst=days)).index == expected

    def test_past_catalyst_unscored(self):
        assert interpret_catalyst_proximity(rec(days_to_catalyst=-3)).index is None

    def test_missing(self):
        assert interpret_catalyst_proximity(rec()).index is None


class TestChartTrend:
    """Tests for trend health."""

    @pytest.mark.parametrize("price,ma,rs,expected", [
        (110, 100, 8.0, 4),
        (110, 100, 0.0, 3),
        (110, 100, 5.0, 3),
        (110, 100, -5.0, 2),
        (90, 100, -3.0, 1),
        (90, 100, -15.0, 0),
        (100, 100, 6.0, 4),   # at the average counts as above
    ])
    def test_buckets(self, price, ma, rs, expected):
        value = interpret_chart_trend(rec(price=price, ma_200=ma, relative_strength=rs))
        assert value.index == expected

    def test_missing_relative_strength(self):
        assert interpret_chart_trend(rec(price=110, ma_200=100)).index is None

    def test_non_positive_average(self):
        assert interpret_chart_trend(rec(price=110, ma_200=0, relative_strength=1)).index is None


class TestAccumulation:
    """Tests for the accumulation pattern."""

    @pytest.mark.parametrize("recent,change,expected", [
        (2_500_000, 6.0, 4),    # volume surge + breakout
        (1_500_000, -5.0, 0),   # distribution
        (1_500_000, 1.0, 3),    # elevated volume holding base
        (1_000_000, 1.0, 2),    # quiet accumulation
        (500_000, 0.0, 1),      # no pattern
        (900_000, -1.0, 1),
    ])
    def test_buckets(self, recent, change, expected):
        value = interpret_accumulation(rec(volume_avg=1_000_000, volume_recent=recent, price_change_pct=change))
        assert value.index == expected

    def test_zero_average_volume_unscored(self):
        """No average volume is no evidence, not the neutral bucket."""
        value = interpret_accumulation(rec(volume_avg=0, volume_recent=1000, price_change_pct=1.0))
        assert value.index is None

    def test_missing(self):
        assert interpret_accumulation(rec(volume_avg=1000)).index is None


# ============================================================================
# Risk interpreters
# ============================================================================


class TestBalanceSheet:
    """Tests for balance-sheet stress."""

    def test_net_cash(self):
        value = interpret_balance_sheet(rec(total_cash=10e9, total_debt=2e9))
        assert value.index == 4
        assert value.evidence["net_cash"] == 8e9

    @pytest.mark.parametrize("de,expected", [
        (0.0, 3), (0.3, 3), (0.5, 2), (1.0, 2), (1.5, 1), (2.0, 1), (3.5, 0),
    ])
    def test_leverage_buckets(self, de, expected):
        assert interpret_balance_sheet(rec(debt_to_equity=de)).index == expected

    def test_net_debt_uses_leverage(self):
        value = interpret_balance_sheet(rec(total_cash=1e9, total_debt=5e9, debt_to_equity=0.8))
        assert value.index == 2

    def test_negative_equity_unscored(self):
        assert interpret_balance_sheet(rec(debt_to_equity=-2.0)).index is None

    def test_missing(self):
        assert interpret_balance_sheet(rec(total_cash=1e9)).index is None


class TestMacroSensitivity:
    """Tests for sector macro sensitivity."""

    @pytest.mark.parametrize("sector,expected", [
        ("Energy", 0), ("Financial Services", 1), ("Technology", 2), ("Utilities", 3),
    ])
    def test_sector_lookup(self, sector, expected):
        value = interpret_macro_sensitivity(rec(sector=sector))
        assert value.index == expected
        assert value.confidence == ConfidenceTag.MEDIUM

    def test_unknown_sector(self):
        value = interpret_macro_sensitivity(rec(sector="Space Tourism"))
        assert value.index == 2
        assert value.confidence == ConfidenceTag.LOW

    def test_no_sector(self):
        assert interpret_macro_sensitivity(rec()).index is None


# ============================================================================
# Evidence round-trips
# ============================================================================


class TestEvidenceRoundTrip:
    """Evidence fed through a hand-written reference formula gives the same index."""

    def test_eps_surprise(self):
        for actual in (0.95, 1.02, 1.07, 1.12, 1.40):
            value = interpret_eps_surprise(rec(eps_actual=actual, eps_estimate=1.0))
            e = value.evidence
            surprise = (e["actual"] - e["estimate"]) / abs(e["estimate"]) * 100
            expected = 0 if surprise < 1 else 1 if surprise < 5 else 2 if surprise < 10 else 3 if surprise < 20 else 4
            assert value.index == expected

    def test_valuation(self):
        for pe in (9.0, 16.0, 19.0, 22.0, 30.0):
            value = interpret_valuation(rec(forward_pe=pe, sector="Industrials"))
            e = value.evidence
            discount = (e["sector_pe"] - e["pe"]) / e["sector_pe"] * 100
            if discount < -20:
                expected = 0
            elif discount < 5:
                expected = 1
            elif discount < 15:
                expected = 2
            elif discount <= 30:
                expected = 3
            else:
                expected = 4
            assert value.index == expected

    def test_revisions(self):
        for up, down in ((1, 4), (5, 5), (6, 3), (9, 1), (7, 0)):
            value = interpret_revisions(rec(revisions_up=up, revisions_down=down))
            e = value.evidence
            share = e["up"] / (e["up"] + e["down"])
            if e["down"] == 0:
                expected = 4
            elif share < 0.4:
                expected = 0
            elif share <= 0.5:
                expected = 1
            elif share < 0.75:
                expected = 2
            else:
                expected = 3
            assert value.index == expected

    def test_accumulation(self):
        for recent, change in ((3e6, 8.0), (1.3e6, -4.0), (1.3e6, 0.5), (0.9e6, 0.5), (0.5e6, -0.5)):
            value = interpret_accumulation(rec(volume_avg=1e6, volume_recent=recent, price_change_pct=change))
            e = value.evidence
            ratio, move = e["volume_ratio"], e["price_change_pct"]
            if ratio >= 2.0 and move >= 5.0:
                expected = 4
            elif ratio >= 1.2 and move <= -3.0:
                expected = 0
            elif ratio >= 1.2:
                expected = 3
            elif ratio >= 0.8 and move > 0:
                expected = 2
            else:
                expected = 1
            assert value.index == expected
