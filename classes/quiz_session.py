from flask import current_app

from classes.answer_recorder import AnswerRecorder
from classes.attempt_history import AttemptHistory
from classes.attempt_manager import AttemptManager
from classes.catalog_loader import CatalogLoader
from classes.errors import NoQuizLoaded, InvalidTransition
from classes.scorer import Scorer


class QuizSession:
    """
    One user's working session against one quiz.

    Holds the session-local state the engine needs between calls: the loaded
    quiz view, the active attempt pointer and the last known attempt list.
    ``to_state()`` gives back a plain dict that can be stored (for instance in
    the Flask session) and handed to the constructor on the next request so a
    randomized quiz keeps the order it was answered in.
    """

    def __init__(self, user_id, state=None, rng=None):
        state = state or {}
        self.user_id = user_id
        self.loader = CatalogLoader(rng=rng)
        self.quiz = None
        self.attempts = []
        self.next_attempt_number = 1
        self.active_attempt_id = state.get("active_attempt_id")
        self._question_order = state.get("question_order")

    def to_state(self):
        return {
            "quiz_id": self.quiz.id if self.quiz else None,
            "active_attempt_id": self.active_attempt_id,
            "question_order": self.quiz.question_order if self.quiz else self._question_order,
        }

    def _require_quiz(self):
        if self.quiz is None:
            raise NoQuizLoaded()
        return self.quiz

    # Catalog

    def load_quiz(self, quiz_id):
        self.quiz = self.loader.load(quiz_id, question_order=self._question_order)
        self._question_order = self.quiz.question_order
        self.list_attempts(quiz_id)
        return self.quiz

    def load_quizzes_for_course(self, course_id):
        return self.loader.load_for_course(course_id)

    # Attempts

    def start_attempt(self):
        quiz = self._require_quiz()
        attempt = AttemptManager.start(self.user_id, quiz)
        self.active_attempt_id = attempt.id
        self.next_attempt_number = attempt.attempt_number + 1
        return attempt.id

    def resume_attempt(self, attempt_id):
        quiz = self._require_quiz()
        attempt = AttemptManager.resume(self.user_id, quiz.id, attempt_id)
        self.active_attempt_id = attempt.id
        return attempt

    def clear_active_attempt(self):
        self.active_attempt_id = None

    def resume_position(self, attempt):
        return AttemptManager.resume_position(attempt, self._require_quiz())

    # Answers and scoring

    def submit_answer(self, question_id, option_id=None, answer_text=None):
        quiz = self._require_quiz()
        if not self.active_attempt_id:
            self.start_attempt()
        return AnswerRecorder.submit(
            self.user_id, quiz, self.active_attempt_id, question_id,
            option_id=option_id, answer_text=answer_text,
        )

    def finalize_attempt(self, answers=None):
        """
        Grade the active attempt and close it.

        Without ``answers`` the grade is computed from the answers already
        stored for the attempt, so a caller never needs the answer key.
        """
        quiz = self._require_quiz()
        if not self.active_attempt_id:
            raise InvalidTransition("There is no active attempt to submit.")
        if answers is None:
            answers = AttemptHistory.answers_of(self.active_attempt_id, quiz)

        analysis = Scorer.finalize(
            quiz, self.active_attempt_id, answers,
            allow_rescore=current_app.config.get("QUIZ_ALLOW_RESCORE", False),
        )
        self.clear_active_attempt()
        self.next_attempt_number = AttemptManager.next_attempt_number(self.user_id, quiz.id)
        return analysis

    # History

    def list_attempts(self, quiz_id=None):
        if quiz_id is None:
            quiz_id = self._require_quiz().id
        self.attempts, self.next_attempt_number = AttemptHistory.list(self.user_id, quiz_id)
        return self.attempts

    def get_attempt_answers(self, attempt_id):
        quiz = self._require_quiz()
        attempt = AttemptManager.get_owned(self.user_id, quiz.id, attempt_id)
        return AttemptHistory.answers_of(attempt.id, quiz)
