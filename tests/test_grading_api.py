from __future__ import annotations

import typing as t

import pytest
from fastapi.testclient import TestClient

from assessor.model import Assessment, QuestionID, User


@pytest.fixture
def completed(client: TestClient, assessment: Assessment, participant_headers: dict[str, str]) -> dict[str, t.Any]:
    single, free, code = assessment.questions
    response = client.post(
        "/api/submissions",
        json={
            "assessment_id": assessment.assessment_id,
            "answers": [
                {"question_id": single.question_id, "content": "func"},
                {"question_id": free.question_id, "content": "Tuples are immutable."},
                {"question_id": code.question_id, "content": "def reverse(s): return s[::-1]"},
            ],
        },
        headers=participant_headers,
    )
    assert response.status_code == 201
    return response.json()


class TestGradeSubmission(object):
    def test_override_recomputes_totals(
        self,
        client: TestClient,
        assessment: Assessment,
        completed: dict[str, t.Any],
        reviewer_headers: dict[str, str],
    ) -> None:
        free = assessment.questions[1]
        assert completed["total_score"] == 4

        response = client.patch(
            f"/api/submissions/{completed['submission_id']}/grade",
            json={"grades": [{"question_id": free.question_id, "score": 3, "feedback": "Full marks on review."}]},
            headers=reviewer_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total_score"] == 5
        assert body["max_score"] == completed["max_score"]
        result = body["results"][1]
        assert result["score"] == 3
        assert result["feedback"] == "Full marks on review."
        assert result["overridden"] is True
        assert body["results"][0] == completed["results"][0]

    def test_override_is_persisted(
        self,
        client: TestClient,
        assessment: Assessment,
        completed: dict[str, t.Any],
        reviewer_headers: dict[str, str],
        participant_headers: dict[str, str],
    ) -> None:
        single = assessment.questions[0]
        client.patch(
            f"/api/submissions/{completed['submission_id']}/grade",
            json={"grades": [{"question_id": single.question_id, "score": 1}], "feedback": "Generous."},
            headers=reviewer_headers,
        )

        body = client.get(f"/api/submissions/{completed['submission_id']}", headers=participant_headers).json()

        assert body["results"][0]["score"] == 1
        assert body["results"][0]["is_correct"] is True
        assert body["feedback"] == "Generous."

    def test_participant_forbidden(
        self,
        client: TestClient,
        assessment: Assessment,
        completed: dict[str, t.Any],
        participant_headers: dict[str, str],
    ) -> None:
        response = client.patch(
            f"/api/submissions/{completed['submission_id']}/grade",
            json={"grades": [{"question_id": assessment.questions[1].question_id, "score": 3}]},
            headers=participant_headers,
        )
        assert response.status_code == 403

    def test_score_above_maximum(
        self,
        client: TestClient,
        assessment: Assessment,
        completed: dict[str, t.Any],
        reviewer_headers: dict[str, str],
    ) -> None:
        response = client.patch(
            f"/api/submissions/{completed['submission_id']}/grade",
            json={"grades": [{"question_id": assessment.questions[0].question_id, "score": 2}]},
            headers=reviewer_headers,
        )
        assert response.status_code == 422

    def test_negative_score(
        self,
        client: TestClient,
        assessment: Assessment,
        completed: dict[str, t.Any],
        reviewer_headers: dict[str, str],
    ) -> None:
        response = client.patch(
            f"/api/submissions/{completed['submission_id']}/grade",
            json={"grades": [{"question_id": assessment.questions[0].question_id, "score": -1}]},
            headers=reviewer_headers,
        )
        assert response.status_code == 422

    def test_unknown_question(
        self, client: TestClient, completed: dict[str, t.Any], reviewer_headers: dict[str, str]
    ) -> None:
        response = client.patch(
            f"/api/submissions/{completed['submission_id']}/grade",
            json={"grades": [{"question_id": QuestionID(), "score": 1}]},
            headers=reviewer_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Question not found"

    def test_in_progress_cannot_be_graded(
        self,
        client: TestClient,
        assessment: Assessment,
        participant: User,
        participant_headers: dict[str, str],
        reviewer_headers: dict[str, str],
    ) -> None:
        started = client.post(
            "/api/submissions/start", json={"assessment_id": assessment.assessment_id}, headers=participant_headers
        ).json()

        response = client.patch(
            f"/api/submissions/{started['submission_id']}/grade",
            json={"grades": []},
            headers=reviewer_headers,
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Only completed submissions can be graded"
