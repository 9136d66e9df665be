"""Tests for MCID threshold evaluation."""

import pytest

from app.scoring.mcid import (
    MCID_THRESHOLDS,
    calculate_mcid_achievement,
    calculate_mcid_summary,
    get_mcid_threshold,
    get_outcome_measure_for_region,
    get_score_interpretation,
    has_mcid_achieved,
)


class TestHasMCIDAchieved:
    """Tests for the baseline/final threshold check."""

    def test_thresholds(self) -> None:
        assert MCID_THRESHOLDS == {
            "NDI": 7.5,
            "ODI": 6,
            "QuickDASH": 10,
            "LEFS": 9,
            "RPQ": 8,
        }

    def test_improvement_above_threshold(self) -> None:
        assert has_mcid_achieved(20, 10, "NDI") is True

    def test_improvement_below_threshold(self) -> None:
        assert has_mcid_achieved(20, 15, "NDI") is False

    def test_threshold_is_inclusive(self) -> None:
        assert has_mcid_achieved(20, 12.5, "NDI") is True
        assert has_mcid_achieved(40, 31, "LEFS") is True
        assert has_mcid_achieved(18, 10, "RPQ") is True

    def test_worsening_never_achieves(self) -> None:
        assert has_mcid_achieved(20, 30, "ODI") is False

    def test_unknown_instrument_threshold_is_zero(self) -> None:
        """Any non-negative change counts for an unknown instrument."""
        assert get_mcid_threshold("PSFS") == 0
        assert has_mcid_achieved(10, 10, "PSFS") is True
        assert has_mcid_achieved(10, 11, "PSFS") is False


class TestMCIDAchievement:
    """Tests for per-instrument achievement detail."""

    def test_excellent(self) -> None:
        result = calculate_mcid_achievement("ODI", 40, 28)

        assert result.score_change == 12
        assert result.percent_improvement == pytest.approx(30.0)
        assert result.achievement_percentage == pytest.approx(200.0)
        assert result.achieved_mcid is True
        assert result.achievement_level == "excellent"
        assert result.instrument_name == "Oswestry Disability Index"

    def test_significant(self) -> None:
        result = calculate_mcid_achievement("NDI", 30, 20)

        assert result.achievement_level == "significant"
        assert result.achieved_mcid is True

    def test_moderate(self) -> None:
        result = calculate_mcid_achievement("QuickDASH", 50, 43)

        assert result.achievement_level == "moderate"
        assert result.achieved_mcid is False

    def test_minimal(self) -> None:
        result = calculate_mcid_achievement("QuickDASH", 50, 48)

        assert result.achievement_level == "minimal"

    def test_declined(self) -> None:
        result = calculate_mcid_achievement("NDI", 30, 35)

        assert result.score_change == -5
        assert result.achievement_level == "declined"
        assert result.achieved_mcid is False

    def test_zero_baseline_has_zero_percent_improvement(self) -> None:
        result = calculate_mcid_achievement("NDI", 0, 0)

        assert result.percent_improvement == 0
        assert result.achievement_level == "none"


class TestMCIDSummary:
    """Tests for the multi-instrument summary."""

    def test_only_instruments_scored_at_both_ends(self) -> None:
        summary = calculate_mcid_summary(
            {"NDI": 30, "ODI": 40, "LEFS": 50},
            {"NDI": 20, "ODI": 38},
        )

        assert summary.total_assessments == 2
        assert summary.achieved_mcid == 1
        assert summary.achievement_rate == pytest.approx(50.0)
        assert summary.overall_success is True
        assert summary.success_level == "fair"
        assert summary.average_improvement == pytest.approx((100 / 3 + 5) / 2)
        assert [a.index_type for a in summary.achievements] == ["NDI", "ODI"]

    def test_empty(self) -> None:
        summary = calculate_mcid_summary({}, {})

        assert summary.total_assessments == 0
        assert summary.achievement_rate == 0
        assert summary.overall_success is False
        assert summary.success_level == "poor"

    def test_all_achieved_is_excellent(self) -> None:
        summary = calculate_mcid_summary({"NDI": 40, "RPQ": 30}, {"NDI": 20, "RPQ": 10})

        assert summary.achievement_rate == 100
        assert summary.success_level == "excellent"


class TestScoreInterpretation:
    """Tests for delta interpretation bands."""

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (15, "Excellent improvement - well above MCID"),
            (7.5, "Clinically significant improvement achieved"),
            (4, "Moderate improvement - approaching MCID"),
            (1, "Minimal improvement detected"),
            (0, "No change in functional status"),
            (-2, "Decline in functional status"),
        ],
    )
    def test_ndi_bands(self, delta: float, expected: str) -> None:
        assert get_score_interpretation("NDI", delta) == expected


class TestOutcomeMeasureForRegion:
    """Tests for default instrument selection."""

    @pytest.mark.parametrize(
        "region,expected",
        [
            ("Cervical Spine", "NDI"),
            ("Neck", "NDI"),
            ("Lumbar Spine", "ODI"),
            ("Low back", "ODI"),
            ("Shoulder", "QuickDASH"),
            ("Wrist/Hand", "QuickDASH"),
            ("Knee", "LEFS"),
            ("Lower extremity", "LEFS"),
            ("Concussion", "RPQ"),
            ("Head", "RPQ"),
            (None, "NDI"),
            ("Unspecified", "NDI"),
        ],
    )
    def test_region_mapping(self, region: str | None, expected: str) -> None:
        assert get_outcome_measure_for_region(region) == expected
