"""Outcome score and MCID endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from app.api.deps import DbSession, StaffUserId
from app.models.episode import ScoreType
from app.schemas.outcomes import (
    EpisodeOutcomeSummary,
    MCIDAchievementRead,
    MCIDCheckRequest,
    MCIDCheckResponse,
    OutcomeScoreCreate,
    OutcomeScoreRead,
)
from app.scoring.mcid import (
    get_mcid_threshold,
    get_outcome_measure_for_region,
    get_score_interpretation,
    has_mcid_achieved,
)
from app.services.outcomes import EpisodeNotFoundError, MCIDReportExporter, OutcomeService

router = APIRouter()


def not_found(e: EpisodeNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/mcid-check", response_model=MCIDCheckResponse, summary="Evaluate MCID")
async def mcid_check(payload: MCIDCheckRequest) -> MCIDCheckResponse:
    """Check a baseline/final pair against the instrument's MCID."""
    improvement = payload.baseline - payload.final
    return MCIDCheckResponse(
        index_type=payload.index_type,
        improvement=improvement,
        threshold=get_mcid_threshold(payload.index_type),
        achieved=has_mcid_achieved(payload.baseline, payload.final, payload.index_type),
        interpretation=get_score_interpretation(payload.index_type, improvement),
    )


@router.get(
    "/episodes/{episode_id}/scores",
    response_model=list[OutcomeScoreRead],
    summary="List outcome scores",
)
async def list_scores(episode_id: str, session: DbSession, user_id: StaffUserId):
    service = OutcomeService(session)
    try:
        await service.get_episode(episode_id)
    except EpisodeNotFoundError as e:
        raise not_found(e)
    return await service.get_scores(episode_id)


@router.post(
    "/episodes/{episode_id}/scores",
    response_model=OutcomeScoreRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record an outcome score",
)
async def record_score(
    episode_id: str,
    payload: OutcomeScoreCreate,
    session: DbSession,
    user_id: StaffUserId,
):
    try:
        return await OutcomeService(session).record_score(
            episode_id,
            index_type=payload.index_type,
            score_type=ScoreType(payload.score_type),
            score=payload.score,
            recorded_at=payload.recorded_at,
        )
    except EpisodeNotFoundError as e:
        raise not_found(e)


@router.get(
    "/episodes/{episode_id}/summary",
    response_model=EpisodeOutcomeSummary,
    summary="MCID summary for an episode",
)
async def episode_summary(episode_id: str, session: DbSession, user_id: StaffUserId):
    """Compare the earliest baseline with the latest discharge per instrument."""
    try:
        episode, summary = await OutcomeService(session).get_episode_summary(episode_id)
    except EpisodeNotFoundError as e:
        raise not_found(e)

    return EpisodeOutcomeSummary(
        episode_id=episode.id,
        patient_name=episode.patient_name,
        region=episode.region,
        recommended_measure=get_outcome_measure_for_region(episode.region),
        total_assessments=summary.total_assessments,
        achieved_mcid=summary.achieved_mcid,
        achievement_rate=summary.achievement_rate,
        average_improvement=summary.average_improvement,
        overall_success=summary.overall_success,
        success_level=summary.success_level,
        achievements=[MCIDAchievementRead.model_validate(a) for a in summary.achievements],
    )


@router.get("/episodes/{episode_id}/report.pdf", summary="MCID report PDF")
async def episode_report_pdf(episode_id: str, session: DbSession, user_id: StaffUserId):
    try:
        episode, summary = await OutcomeService(session).get_episode_summary(episode_id)
    except EpisodeNotFoundError as e:
        raise not_found(e)

    pdf = MCIDReportExporter().generate_pdf(episode, summary)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=outcomes_{episode.id[:8]}.pdf"},
    )
