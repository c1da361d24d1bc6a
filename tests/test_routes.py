"""
Tests for the quiz HTTP routes

Tests cover:
- Authentication
- Full answer / finalize flow through the test client
- Session-held active attempt and resume
- Error mapping to status codes
"""

import pytest

from models import db, QuizAttempt, QuizAttemptAnswer

# make_quiz marks the option at this position correct
CORRECT = 1


@pytest.fixture
def quiz(make_quiz):
    return make_quiz()


def _load(client, quiz_id, headers):
    response = client.get(f"/api/quiz/{quiz_id}", headers=headers)
    assert response.status_code == 200
    return response.get_json()


def _answer(client, quiz_id, headers, question, position):
    return client.post(
        f"/api/quiz/{quiz_id}/answers",
        json={"question_id": question["id"], "option_id": question["option_ids"][position]},
        headers=headers,
    )


class TestAuthentication:

    def test_missing_token(self, client, quiz):
        response = client.get(f"/api/quiz/{quiz.id}")
        assert response.status_code == 401

    def test_invalid_token(self, client, quiz):
        response = client.get(f"/api/quiz/{quiz.id}", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid token"

    def test_cookie_token(self, client, quiz, auth_headers):
        token = auth_headers["Authorization"].split(" ", 1)[1]
        client.set_cookie("access_token", token)

        response = client.get(f"/api/quiz/{quiz.id}")

        assert response.status_code == 200


class TestQuizFlow:

    def test_quiz_is_served_without_answer_key(self, client, quiz, auth_headers):
        data = _load(client, quiz.id, auth_headers)

        assert data["quiz"]["title"] == "Cell structure"
        assert data["quiz"]["course_name"] == "Biology 101"
        assert len(data["quiz"]["questions"]) == 4
        assert all("correct_index" not in q for q in data["quiz"]["questions"])
        assert data["attempts"] == []
        assert data["next_attempt_number"] == 1
        assert data["active_attempt_id"] is None

    def test_unknown_quiz(self, client, auth_headers, app):
        response = client.get("/api/quiz/999", headers=auth_headers)
        assert response.status_code == 404
        assert response.get_json() == {"error": "Quiz not found"}

    def test_answer_and_finalize(self, client, quiz, auth_headers):
        questions = _load(client, quiz.id, auth_headers)["quiz"]["questions"]

        first = _answer(client, quiz.id, auth_headers, questions[0], CORRECT)
        attempt_id = first.get_json()["attempt_id"]
        for question, position in zip(questions[1:], (CORRECT, CORRECT, 0)):
            response = _answer(client, quiz.id, auth_headers, question, position)
            assert response.status_code == 200
            assert response.get_json()["attempt_id"] == attempt_id

        response = client.post(f"/api/quiz/{quiz.id}/finalize", headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data["analysis"]["percentage"] == 75
        assert data["analysis"]["passed"] is True
        assert data["analysis"]["level"] == "good"
        assert data["analysis"]["incorrect_questions"] == [questions[3]["id"]]
        assert all(q["correct_index"] == CORRECT for q in data["quiz"]["questions"])
        assert data["next_attempt_number"] == 2

    def test_resubmitting_same_answer(self, client, quiz, auth_headers):
        question = _load(client, quiz.id, auth_headers)["quiz"]["questions"][0]

        _answer(client, quiz.id, auth_headers, question, 0)
        _answer(client, quiz.id, auth_headers, question, 0)

        assert QuizAttempt.query.count() == 1
        assert QuizAttemptAnswer.query.count() == 1

    def test_second_finalize_conflicts(self, client, quiz, auth_headers):
        question = _load(client, quiz.id, auth_headers)["quiz"]["questions"][0]
        _answer(client, quiz.id, auth_headers, question, CORRECT)
        client.post(f"/api/quiz/{quiz.id}/finalize", headers=auth_headers)

        response = client.post(f"/api/quiz/{quiz.id}/finalize", headers=auth_headers)

        assert response.status_code == 409

    def test_bad_question_id(self, client, quiz, auth_headers):
        response = client.post(
            f"/api/quiz/{quiz.id}/answers", json={"question_id": "abc", "option_id": 1}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_empty_answer(self, client, quiz, auth_headers):
        question = _load(client, quiz.id, auth_headers)["quiz"]["questions"][0]

        response = client.post(
            f"/api/quiz/{quiz.id}/answers", json={"question_id": question["id"]}, headers=auth_headers
        )

        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_course_listing(self, client, quiz, course, auth_headers):
        response = client.get(f"/api/quiz/course/{course.id}", headers=auth_headers)

        assert response.status_code == 200
        quizzes = response.get_json()["quizzes"]
        assert [q["id"] for q in quizzes] == [quiz.id]
        assert quizzes[0]["question_count"] == 4


class TestAttemptRoutes:

    def test_start_and_list(self, client, quiz, auth_headers):
        first = client.post(f"/api/quiz/{quiz.id}/attempts", headers=auth_headers)
        second = client.post(f"/api/quiz/{quiz.id}/attempts", headers=auth_headers)

        assert first.status_code == 201
        assert first.get_json()["attempt_number"] == 1
        assert second.get_json()["attempt_number"] == 2

        listing = client.get(f"/api/quiz/{quiz.id}/attempts", headers=auth_headers).get_json()
        assert [a["attempt_number"] for a in listing["attempts"]] == [1, 2]
        assert listing["next_attempt_number"] == 3

    def test_active_attempt_survives_between_requests(self, client, quiz, auth_headers):
        started = client.post(f"/api/quiz/{quiz.id}/attempts", headers=auth_headers).get_json()

        data = _load(client, quiz.id, auth_headers)

        assert data["active_attempt_id"] == started["attempt_id"]

    def test_clear_and_resume(self, client, quiz, auth_headers):
        questions = _load(client, quiz.id, auth_headers)["quiz"]["questions"]
        _answer(client, quiz.id, auth_headers, questions[0], CORRECT)
        attempt_id = _answer(client, quiz.id, auth_headers, questions[1], 0).get_json()["attempt_id"]

        cleared = client.delete(f"/api/quiz/{quiz.id}/attempts/active", headers=auth_headers)
        assert cleared.status_code == 200
        assert _load(client, quiz.id, auth_headers)["active_attempt_id"] is None

        response = client.post(f"/api/quiz/{quiz.id}/attempts/{attempt_id}/resume", headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data["attempt"]["id"] == attempt_id
        assert data["resume_position"] == 2
        assert data["answers"] == {str(questions[0]["id"]): CORRECT, str(questions[1]["id"]): 0}
        assert _load(client, quiz.id, auth_headers)["active_attempt_id"] == attempt_id

    def test_resume_completed_attempt(self, client, quiz, auth_headers):
        question = _load(client, quiz.id, auth_headers)["quiz"]["questions"][0]
        attempt_id = _answer(client, quiz.id, auth_headers, question, CORRECT).get_json()["attempt_id"]
        client.post(f"/api/quiz/{quiz.id}/finalize", headers=auth_headers)

        response = client.post(f"/api/quiz/{quiz.id}/attempts/{attempt_id}/resume", headers=auth_headers)

        assert response.status_code == 409

    def test_attempt_answers(self, client, quiz, auth_headers):
        questions = _load(client, quiz.id, auth_headers)["quiz"]["questions"]
        attempt_id = _answer(client, quiz.id, auth_headers, questions[2], 2).get_json()["attempt_id"]

        response = client.get(f"/api/quiz/{quiz.id}/attempts/{attempt_id}/answers", headers=auth_headers)

        assert response.status_code == 200
        assert response.get_json()["answers"] == {str(questions[2]["id"]): 2}

    def test_attempt_limit(self, client, make_quiz, auth_headers):
        limited = make_quiz(max_attempts=1)
        client.post(f"/api/quiz/{limited.id}/attempts", headers=auth_headers)

        response = client.post(f"/api/quiz/{limited.id}/attempts", headers=auth_headers)

        assert response.status_code == 403
        assert response.get_json() == {"error": "No attempts left"}


class TestWarnings:

    def test_warnings_for_unresolved_option(self, client, quiz, auth_headers, user):
        question = _load(client, quiz.id, auth_headers)["quiz"]["questions"][0]
        client.post(
            f"/api/quiz/{quiz.id}/answers",
            json={"question_id": question["id"], "option_id": 424242},
            headers=auth_headers,
        )

        response = client.get("/api/quiz/warnings?kind=unresolved_option", headers=auth_headers)

        assert response.status_code == 200
        warnings = response.get_json()["warnings"]
        assert len(warnings) == 1
        assert warnings[0]["user_id"] == user.id
        assert warnings[0]["reference_id"] == "424242"

    def test_warnings_are_scoped_to_caller(self, client, quiz, auth_headers):
        quiz.course_id = 5555
        db.session.commit()
        _load(client, quiz.id, auth_headers)

        response = client.get("/api/quiz/warnings", headers=auth_headers)

        # the missing-course warning is not tied to a user
        assert response.get_json()["warnings"] == []
