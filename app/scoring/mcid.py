"""MCID (Minimal Clinically Important Difference) evaluation.

Outcome instruments used by the registry are scored so that a lower number
means less disability. Improvement is therefore ``baseline - final`` and an
episode reaches MCID when that improvement meets the instrument threshold.

Thresholds (points):
- NDI (Neck Disability Index): 7.5
- ODI (Oswestry Disability Index): 6
- QuickDASH: 10
- LEFS (Lower Extremity Functional Scale): 9
- RPQ (Rivermead Post-Concussion Questionnaire): 8

Unknown instruments have a threshold of 0, so any non-negative change counts.
"""

from dataclasses import dataclass, field

MCID_THRESHOLDS: dict[str, float] = {
    "NDI": 7.5,
    "ODI": 6,
    "QuickDASH": 10,
    "LEFS": 9,
    "RPQ": 8,
}

INSTRUMENT_NAMES: dict[str, str] = {
    "NDI": "Neck Disability Index",
    "ODI": "Oswestry Disability Index",
    "LEFS": "Lower Extremity Functional Scale",
    "QuickDASH": "QuickDASH",
    "RPQ": "Rivermead Post-Concussion Symptoms Questionnaire",
}


@dataclass
class MCIDAchievement:
    """MCID result for one instrument."""
    index_type: str
    instrument_name: str
    baseline_score: float
    discharge_score: float
    score_change: float
    percent_improvement: float
    mcid_threshold: float
    achieved_mcid: bool
    achievement_level: str
    achievement_percentage: float  # 150.0 means 1.5x the threshold
    interpretation: str


@dataclass
class MCIDSummary:
    """MCID results across every instrument recorded for an episode."""
    total_assessments: int
    achieved_mcid: int
    achievement_rate: float
    average_improvement: float
    overall_success: bool
    success_level: str
    achievements: list[MCIDAchievement] = field(default_factory=list)


def get_mcid_threshold(index_type: str) -> float:
    """Return the MCID threshold for an instrument, 0 when unknown."""
    return MCID_THRESHOLDS.get(index_type, 0)


def has_mcid_achieved(baseline: float, final: float, index_type: str) -> bool:
    """Check whether the change from baseline reaches the MCID threshold.

    Args:
        baseline: Score at intake
        final: Score at discharge or latest follow-up
        index_type: Instrument code, e.g. "NDI"

    Returns:
        True when ``baseline - final`` is at least the threshold.
    """
    improvement = baseline - final
    return improvement >= get_mcid_threshold(index_type)


def calculate_mcid_achievement(
    index_type: str,
    baseline_score: float,
    discharge_score: float,
) -> MCIDAchievement:
    """Calculate MCID achievement and its interpretation for one instrument."""
    threshold = get_mcid_threshold(index_type)
    score_change = baseline_score - discharge_score

    percent_improvement = (
        (score_change / baseline_score) * 100 if baseline_score != 0 else 0.0
    )
    achievement_percentage = (score_change / threshold) * 100 if threshold != 0 else 0.0
    rounded = round(achievement_percentage)

    if score_change < 0:
        level = "declined"
        interpretation = "Patient condition declined - score increased from baseline"
    elif score_change >= threshold * 2:
        level = "excellent"
        interpretation = f"Outstanding improvement - achieved {rounded}% of MCID threshold"
    elif score_change >= threshold:
        level = "significant"
        interpretation = (
            f"Clinically significant improvement achieved - {rounded}% of MCID threshold"
        )
    elif score_change >= threshold * 0.6:
        level = "moderate"
        interpretation = f"Approaching clinical significance - {rounded}% of MCID threshold"
    elif score_change > 0:
        level = "minimal"
        interpretation = f"Some improvement detected - {rounded}% of MCID threshold"
    else:
        level = "none"
        interpretation = "No measurable improvement detected"

    return MCIDAchievement(
        index_type=index_type,
        instrument_name=INSTRUMENT_NAMES.get(index_type, index_type),
        baseline_score=baseline_score,
        discharge_score=discharge_score,
        score_change=score_change,
        percent_improvement=percent_improvement,
        mcid_threshold=threshold,
        achieved_mcid=score_change >= threshold,
        achievement_level=level,
        achievement_percentage=achievement_percentage,
        interpretation=interpretation,
    )


def get_success_level(achievement_rate: float) -> str:
    """Map an MCID achievement rate (percent) to a success band."""
    if achievement_rate >= 80:
        return "excellent"
    if achievement_rate >= 60:
        return "good"
    if achievement_rate >= 40:
        return "fair"
    return "poor"


def calculate_mcid_summary(
    baseline_scores: dict[str, float],
    discharge_scores: dict[str, float],
) -> MCIDSummary:
    """Summarise MCID achievement over instruments scored at both ends.

    Instruments missing a discharge score are skipped.
    """
    achievements = [
        calculate_mcid_achievement(index_type, baseline, discharge_scores[index_type])
        for index_type, baseline in baseline_scores.items()
        if index_type in discharge_scores
    ]

    total = len(achievements)
    achieved = sum(1 for a in achievements if a.achieved_mcid)
    rate = (achieved / total) * 100 if total else 0.0
    average = sum(a.percent_improvement for a in achievements) / total if total else 0.0

    return MCIDSummary(
        total_assessments=total,
        achieved_mcid=achieved,
        achievement_rate=rate,
        average_improvement=average,
        overall_success=rate >= 50,
        success_level=get_success_level(rate),
        achievements=achievements,
    )


def get_score_interpretation(index_type: str, delta: float) -> str:
    """Describe a score improvement relative to the instrument MCID."""
    mcid = get_mcid_threshold(index_type)

    if delta >= mcid * 2:
        return "Excellent improvement - well above MCID"
    if delta >= mcid:
        return "Clinically significant improvement achieved"
    if delta >= mcid * 0.5:
        return "Moderate improvement - approaching MCID"
    if delta > 0:
        return "Minimal improvement detected"
    if delta == 0:
        return "No change in functional status"
    return "Decline in functional status"


def get_outcome_measure_for_region(region: str | None) -> str:
    """Pick the default outcome instrument for a body region."""
    region_lower = (region or "").lower()

    if any(k in region_lower for k in ("brain", "head", "concussion")):
        return "RPQ"
    if "neck" in region_lower or "cervical" in region_lower:
        return "NDI"
    if any(k in region_lower for k in ("back", "lumbar", "spine")):
        return "ODI"
    if any(k in region_lower for k in ("shoulder", "arm", "hand", "upper")):
        return "QuickDASH"
    if any(k in region_lower for k in ("leg", "knee", "ankle", "hip", "lower extremity")):
        return "LEFS"
    return "NDI"
