"""Schemas for outcome scores and MCID evaluation."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.models.episode import ScoreType


class MCIDCheckRequest(BaseModel):
    """Baseline and final score for one instrument."""

    baseline: float
    final: float
    index_type: str = Field(..., min_length=1, max_length=20)


class MCIDCheckResponse(BaseModel):
    index_type: str
    improvement: float
    threshold: float
    achieved: bool
    interpretation: str


class MCIDAchievementRead(BaseModel):
    index_type: str
    instrument_name: str
    baseline_score: float
    discharge_score: float
    score_change: float
    percent_improvement: float
    mcid_threshold: float
    achieved_mcid: bool
    achievement_level: str
    achievement_percentage: float
    interpretation: str

    model_config = {"from_attributes": True}


class EpisodeOutcomeSummary(BaseModel):
    """MCID summary across the instruments recorded for an episode."""

    episode_id: str
    patient_name: str
    region: str | None = None
    recommended_measure: str
    total_assessments: int
    achieved_mcid: int
    achievement_rate: float
    average_improvement: float
    overall_success: bool
    success_level: str
    achievements: list[MCIDAchievementRead]


class OutcomeScoreCreate(BaseModel):
    index_type: str = Field(..., min_length=1, max_length=20)
    score_type: ScoreType
    score: float = Field(..., ge=0)
    recorded_at: datetime | None = None


class OutcomeScoreRead(BaseModel):
    id: str
    episode_id: str
    index_type: str
    score_type: str
    score: float
    recorded_at: datetime

    model_config = {"from_attributes": True}
