"""Episode outcome summaries and MCID report export."""

import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import utc_now
from app.models.episode import Episode, OutcomeScore, ScoreType
from app.scoring.mcid import MCIDSummary, calculate_mcid_summary

logger = logging.getLogger(__name__)


class EpisodeNotFoundError(Exception):
    """Raised when an episode does not exist."""

    def __init__(self, episode_id: str):
        self.episode_id = episode_id
        super().__init__(f"Episode {episode_id} not found")


def _as_aware(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def select_endpoint_scores(
    scores: Sequence[OutcomeScore],
) -> tuple[dict[str, float], dict[str, float]]:
    """Pick the earliest baseline and latest discharge per instrument."""
    baseline: dict[str, tuple[datetime, float]] = {}
    discharge: dict[str, tuple[datetime, float]] = {}

    for score in scores:
        recorded = _as_aware(score.recorded_at)
        if score.score_type == ScoreType.BASELINE:
            current = baseline.get(score.index_type)
            if current is None or recorded < current[0]:
                baseline[score.index_type] = (recorded, score.score)
        elif score.score_type == ScoreType.DISCHARGE:
            current = discharge.get(score.index_type)
            if current is None or recorded >= current[0]:
                discharge[score.index_type] = (recorded, score.score)

    return (
        {k: v for k, (_, v) in baseline.items()},
        {k: v for k, (_, v) in discharge.items()},
    )


class OutcomeService:
    """Reads and records outcome scores for episodes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_episode(self, episode_id: str) -> Episode:
        """Load an episode or raise EpisodeNotFoundError."""
        result = await self.session.execute(select(Episode).where(Episode.id == episode_id))
        episode = result.scalar_one_or_none()
        if episode is None:
            raise EpisodeNotFoundError(episode_id)
        return episode

    async def get_scores(self, episode_id: str) -> Sequence[OutcomeScore]:
        """All scores for an episode in recording order."""
        result = await self.session.execute(
            select(OutcomeScore)
            .where(OutcomeScore.episode_id == episode_id)
            .order_by(OutcomeScore.recorded_at)
        )
        return result.scalars().all()

    async def record_score(
        self,
        episode_id: str,
        index_type: str,
        score_type: ScoreType,
        score: float,
        recorded_at: datetime | None = None,
    ) -> OutcomeScore:
        """Record an instrument score against an episode."""
        await self.get_episode(episode_id)

        entry = OutcomeScore(
            episode_id=episode_id,
            index_type=index_type,
            score_type=score_type.value,
            score=score,
            recorded_at=recorded_at or utc_now(),
        )
        self.session.add(entry)
        await self.session.commit()
        await self.session.refresh(entry)

        logger.info(f"Recorded {index_type} {score_type.value} score for episode {episode_id}")
        return entry

    async def get_episode_summary(self, episode_id: str) -> tuple[Episode, MCIDSummary]:
        """Compute the MCID summary for an episode."""
        episode = await self.get_episode(episode_id)
        scores = await self.get_scores(episode_id)
        baseline, discharge = select_endpoint_scores(scores)
        return episode, calculate_mcid_summary(baseline, discharge)


class MCIDReportExporter:
    """Renders an episode MCID summary as a one-page PDF."""

    LEVEL_COLORS = {
        "excellent": colors.darkgreen,
        "significant": colors.green,
        "moderate": colors.orange,
        "minimal": colors.goldenrod,
        "none": colors.grey,
        "declined": colors.red,
    }

    def __init__(self) -> None:
        self.styles = getSampleStyleSheet()
        self._setup_styles()

    def _setup_styles(self) -> None:
        self.styles.add(ParagraphStyle(
            name="ReportTitle",
            parent=self.styles["Heading1"],
            fontSize=16,
            spaceAfter=12,
        ))
        self.styles.add(ParagraphStyle(
            name="SectionHeader",
            parent=self.styles["Heading2"],
            fontSize=12,
            spaceAfter=8,
            textColor=colors.darkblue,
        ))
        self.styles.add(ParagraphStyle(
            name="Footer",
            parent=self.styles["Normal"],
            fontSize=8,
            textColor=colors.grey,
        ))

    def generate_pdf(self, episode: Episode, summary: MCIDSummary) -> bytes:
        """Generate the MCID report.

        Args:
            episode: Episode being reported on
            summary: MCID summary for the episode

        Returns:
            PDF bytes
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=LETTER,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
        )

        story = []
        story.append(Paragraph("CLINICAL OUTCOMES REPORT", self.styles["ReportTitle"]))
        story.append(Spacer(1, 5 * mm))

        episode_data = [
            ["Patient:", episode.patient_name],
            ["Episode:", f"{episode.id[:8]}..."],
            ["Type:", episode.episode_type or "Not recorded"],
            ["Region:", episode.region or "Not recorded"],
            ["Clinician:", episode.clinician or "Not recorded"],
            ["Start:", self._format_date(episode.start_date)],
            ["Discharge:", self._format_date(episode.discharge_date)],
        ]
        episode_table = Table(episode_data, colWidths=[80, 300])
        episode_table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        story.append(episode_table)
        story.append(Spacer(1, 8 * mm))

        story.append(Paragraph("MCID SUMMARY", self.styles["SectionHeader"]))
        summary_data = [
            ["Assessments:", str(summary.total_assessments)],
            ["MCID achieved:", f"{summary.achieved_mcid} of {summary.total_assessments}"],
            ["Achievement rate:", f"{summary.achievement_rate:.0f}%"],
            ["Average improvement:", f"{summary.average_improvement:.1f}%"],
            ["Overall:", summary.success_level.upper()],
        ]
        summary_table = Table(summary_data, colWidths=[120, 260])
        summary_table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
        ]))
        story.append(summary_table)
        story.append(Spacer(1, 6 * mm))

        if summary.achievements:
            story.append(Paragraph("OUTCOME MEASURES", self.styles["SectionHeader"]))
            rows = [["Measure", "Baseline", "Discharge", "Change", "MCID", "Result"]]
            for a in summary.achievements:
                rows.append([
                    a.index_type,
                    f"{a.baseline_score:g}",
                    f"{a.discharge_score:g}",
                    f"{a.score_change:+g}",
                    f"{a.mcid_threshold:g}",
                    a.achievement_level.title(),
                ])

            style = [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ALIGN", (1, 0), (-2, -1), "CENTER"),
            ]
            for row, a in enumerate(summary.achievements, start=1):
                color = self.LEVEL_COLORS.get(a.achievement_level, colors.black)
                style.append(("TEXTCOLOR", (-1, row), (-1, row), color))

            measures_table = Table(rows, colWidths=[70, 60, 60, 55, 45, 90])
            measures_table.setStyle(TableStyle(style))
            story.append(measures_table)
            story.append(Spacer(1, 4 * mm))

            for a in summary.achievements:
                story.append(Paragraph(
                    f"<b>{a.instrument_name}:</b> {a.interpretation}",
                    self.styles["Normal"],
                ))
        else:
            story.append(Paragraph(
                "No instrument has both a baseline and a discharge score.",
                self.styles["Normal"],
            ))

        story.append(Spacer(1, 10 * mm))
        story.append(Paragraph(
            f"Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}",
            self.styles["Footer"],
        ))
        story.append(Paragraph(
            "MCID: minimal clinically important difference. Improvement is measured "
            "as baseline minus discharge score.",
            self.styles["Footer"],
        ))

        doc.build(story)
        return buffer.getvalue()

    def _format_date(self, value) -> str:
        if not value:
            return "Not recorded"
        return value.strftime("%d %B %Y")
