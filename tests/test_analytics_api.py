from __future__ import annotations

import typing as t

import pytest
from fastapi.testclient import TestClient

from assessor.model import Assessment


def submit(client: TestClient, assessment: Assessment, headers: dict[str, str], choice: str) -> dict[str, t.Any]:
    single = assessment.questions[0]
    response = client.post(
        "/api/submissions",
        json={
            "assessment_id": assessment.assessment_id,
            "answers": [{"question_id": single.question_id, "content": choice}],
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


class TestUserAnalytics(object):
    def test_no_submissions(self, client: TestClient, participant_headers: dict[str, str]) -> None:
        response = client.get("/api/analytics/user", headers=participant_headers)

        assert response.status_code == 200
        assert response.json() == {"assessments_taken": 0, "average_score": 0, "recent_submissions": []}

    def test_aggregates_completed_submissions(
        self, client: TestClient, assessment: Assessment, participant_headers: dict[str, str]
    ) -> None:
        # 5 of 7 and 4 of 7
        submit(client, assessment, participant_headers, "def")
        submit(client, assessment, participant_headers, "lambda")

        body = client.get("/api/analytics/user", headers=participant_headers).json()

        assert body["assessments_taken"] == 2
        assert body["average_score"] == pytest.approx(9 / 14 * 100)
        assert [r["score"] for r in body["recent_submissions"]] == [4, 5]
        assert all(r["title"] == assessment.title for r in body["recent_submissions"])

    def test_in_progress_not_counted(
        self, client: TestClient, assessment: Assessment, participant_headers: dict[str, str]
    ) -> None:
        client.post(
            "/api/submissions/start", json={"assessment_id": assessment.assessment_id}, headers=participant_headers
        )

        body = client.get("/api/analytics/user", headers=participant_headers).json()

        assert body["assessments_taken"] == 0

    def test_recent_is_limited(
        self, client: TestClient, assessment: Assessment, participant_headers: dict[str, str]
    ) -> None:
        for _ in range(7):
            submit(client, assessment, participant_headers, "def")

        body = client.get("/api/analytics/user", headers=participant_headers).json()

        assert body["assessments_taken"] == 7
        assert len(body["recent_submissions"]) == 5

    def test_only_own_submissions(
        self,
        client: TestClient,
        assessment: Assessment,
        participant_headers: dict[str, str],
        reviewer_headers: dict[str, str],
    ) -> None:
        submit(client, assessment, participant_headers, "def")

        body = client.get("/api/analytics/user", headers=reviewer_headers).json()

        assert body["assessments_taken"] == 0
