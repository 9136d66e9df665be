"""Tests for outcome score recording, MCID summaries and report export."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from app.models.episode import Episode, OutcomeScore, ScoreType
from app.services.outcomes import select_endpoint_scores
from tests.conftest import auth_headers_for

NO_ROLE_USER_ID = "0f0e0d0c-0b0a-4908-8706-050403020100"
MISSING_EPISODE_ID = "1b2c3d4e-5f60-4718-8293-a4b5c6d7e8f9"

START = datetime(2024, 3, 1, 14, 0, tzinfo=timezone.utc)


def score(index_type: str, score_type: ScoreType, value: float, days: int) -> OutcomeScore:
    return OutcomeScore(
        episode_id="ep",
        index_type=index_type,
        score_type=score_type.value,
        score=value,
        recorded_at=START + timedelta(days=days),
    )


class TestSelectEndpointScores:
    """Tests for picking the baseline and discharge score per instrument."""

    def test_earliest_baseline_and_latest_discharge(self) -> None:
        baseline, discharge = select_endpoint_scores([
            score("NDI", ScoreType.BASELINE, 28, 3),
            score("NDI", ScoreType.BASELINE, 30, 0),
            score("NDI", ScoreType.FOLLOW_UP, 22, 14),
            score("NDI", ScoreType.DISCHARGE, 14, 30),
            score("NDI", ScoreType.DISCHARGE, 10, 42),
        ])

        assert baseline == {"NDI": 30}
        assert discharge == {"NDI": 10}

    def test_instruments_kept_apart(self) -> None:
        baseline, discharge = select_endpoint_scores([
            score("NDI", ScoreType.BASELINE, 30, 0),
            score("RPQ", ScoreType.BASELINE, 24, 0),
            score("RPQ", ScoreType.DISCHARGE, 6, 30),
        ])

        assert baseline == {"NDI": 30, "RPQ": 24}
        assert discharge == {"RPQ": 6}

    def test_naive_timestamps_compared_as_utc(self) -> None:
        naive = score("ODI", ScoreType.BASELINE, 40, 0)
        naive.recorded_at = naive.recorded_at.replace(tzinfo=None)

        baseline, _ = select_endpoint_scores([
            score("ODI", ScoreType.BASELINE, 36, 5),
            naive,
        ])

        assert baseline == {"ODI": 40}


class TestMCIDCheck:
    """Tests for POST /outcomes/mcid-check."""

    @pytest.mark.asyncio
    async def test_significant_improvement(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/outcomes/mcid-check",
            json={"baseline": 30, "final": 20, "index_type": "NDI"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "index_type": "NDI",
            "improvement": 10.0,
            "threshold": 7.5,
            "achieved": True,
            "interpretation": "Clinically significant improvement achieved",
        }

    @pytest.mark.asyncio
    async def test_decline(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/outcomes/mcid-check",
            json={"baseline": 20, "final": 26, "index_type": "ODI"},
        )

        data = response.json()
        assert data["achieved"] is False
        assert data["interpretation"] == "Decline in functional status"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/outcomes/mcid-check", json={"baseline": 20})

        assert response.status_code == 400


class TestEpisodeScores:
    """Tests for recording and listing scores."""

    @pytest.mark.asyncio
    async def test_record_and_list(
        self,
        client: AsyncClient,
        episode: Episode,
        clinician_headers: dict[str, str],
    ) -> None:
        url = f"/api/v1/outcomes/episodes/{episode.id}/scores"

        created = await client.post(
            url,
            json={
                "index_type": "NDI",
                "score_type": "baseline",
                "score": 30,
                "recorded_at": "2024-03-01T14:00:00Z",
            },
            headers=clinician_headers,
        )

        assert created.status_code == 201
        assert created.json()["episode_id"] == episode.id
        assert created.json()["score_type"] == "baseline"

        listed = await client.get(url, headers=clinician_headers)
        assert [s["score"] for s in listed.json()] == [30.0]

    @pytest.mark.asyncio
    async def test_invalid_score_type(
        self,
        client: AsyncClient,
        episode: Episode,
        clinician_headers: dict[str, str],
    ) -> None:
        response = await client.post(
            f"/api/v1/outcomes/episodes/{episode.id}/scores",
            json={"index_type": "NDI", "score_type": "midpoint", "score": 30},
            headers=clinician_headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_episode(
        self,
        client: AsyncClient,
        clinician_headers: dict[str, str],
    ) -> None:
        response = await client.post(
            f"/api/v1/outcomes/episodes/{MISSING_EPISODE_ID}/scores",
            json={"index_type": "NDI", "score_type": "baseline", "score": 30},
            headers=clinician_headers,
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_staff(self, client: AsyncClient, episode: Episode) -> None:
        response = await client.get(
            f"/api/v1/outcomes/episodes/{episode.id}/scores",
            headers=auth_headers_for(NO_ROLE_USER_ID),
        )

        assert response.status_code == 403


class TestEpisodeSummary:
    """Tests for the MCID summary and PDF report."""

    @pytest.fixture
    async def scored_episode(
        self,
        client: AsyncClient,
        episode: Episode,
        clinician_headers: dict[str, str],
    ) -> Episode:
        url = f"/api/v1/outcomes/episodes/{episode.id}/scores"
        for index_type, score_type, value, recorded_at in [
            ("NDI", "baseline", 30, "2024-03-01T14:00:00Z"),
            ("NDI", "follow_up", 24, "2024-03-15T14:00:00Z"),
            ("NDI", "discharge", 20, "2024-04-12T14:00:00Z"),
            ("ODI", "baseline", 40, "2024-03-01T14:00:00Z"),
            ("ODI", "discharge", 38, "2024-04-12T14:00:00Z"),
            ("LEFS", "baseline", 50, "2024-03-01T14:00:00Z"),
        ]:
            await client.post(
                url,
                json={
                    "index_type": index_type,
                    "score_type": score_type,
                    "score": value,
                    "recorded_at": recorded_at,
                },
                headers=clinician_headers,
            )
        return episode

    @pytest.mark.asyncio
    async def test_summary(
        self,
        client: AsyncClient,
        scored_episode: Episode,
        clinician_headers: dict[str, str],
    ) -> None:
        response = await client.get(
            f"/api/v1/outcomes/episodes/{scored_episode.id}/summary",
            headers=clinician_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["patient_name"] == "Sam Smith"
        assert data["recommended_measure"] == "NDI"
        assert data["total_assessments"] == 2
        assert data["achieved_mcid"] == 1
        assert data["achievement_rate"] == 50.0
        assert data["overall_success"] is True
        assert data["success_level"] == "fair"

        by_index = {a["index_type"]: a for a in data["achievements"]}
        assert by_index["NDI"]["score_change"] == 10.0
        assert by_index["NDI"]["achievement_level"] == "significant"
        assert by_index["ODI"]["achievement_level"] == "minimal"
        assert "LEFS" not in by_index

    @pytest.mark.asyncio
    async def test_summary_without_scores(
        self,
        client: AsyncClient,
        episode: Episode,
        clinician_headers: dict[str, str],
    ) -> None:
        response = await client.get(
            f"/api/v1/outcomes/episodes/{episode.id}/summary",
            headers=clinician_headers,
        )

        data = response.json()
        assert data["total_assessments"] == 0
        assert data["achievements"] == []
        assert data["success_level"] == "poor"

    @pytest.mark.asyncio
    async def test_pdf_report(
        self,
        client: AsyncClient,
        scored_episode: Episode,
        clinician_headers: dict[str, str],
    ) -> None:
        response = await client.get(
            f"/api/v1/outcomes/episodes/{scored_episode.id}/report.pdf",
            headers=clinician_headers,
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_unknown_episode(
        self,
        client: AsyncClient,
        clinician_headers: dict[str, str],
    ) -> None:
        for suffix in ("summary", "report.pdf"):
            response = await client.get(
                f"/api/v1/outcomes/episodes/{MISSING_EPISODE_ID}/{suffix}",
                headers=clinician_headers,
            )
            assert response.status_code == 404
