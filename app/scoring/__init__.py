"""Scoring modules for clinical outcome instruments."""

from app.scoring.mcid import (
    MCID_THRESHOLDS,
    MCIDAchievement,
    MCIDSummary,
    calculate_mcid_achievement,
    calculate_mcid_summary,
    get_mcid_threshold,
    get_outcome_measure_for_region,
    get_score_interpretation,
    has_mcid_achieved,
)

__all__ = [
    "MCID_THRESHOLDS",
    "MCIDAchievement",
    "MCIDSummary",
    "calculate_mcid_achievement",
    "calculate_mcid_summary",
    "get_mcid_threshold",
    "get_outcome_measure_for_region",
    "get_score_interpretation",
    "has_mcid_achieved",
]
