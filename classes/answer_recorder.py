import uuid
from datetime import datetime

import bleach
from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.question_options import QuestionOption
from models.quiz_attempts import IN_PROGRESS
from models.quiz_attempts_answers import QuizAttemptAnswer
from classes.attempt_manager import AttemptManager
from classes.errors import InvalidAnswer, NoQuizLoaded, NotFound, ResolutionFailure
from classes.validators import validate_answer_payload, validate_length
from utils.degradation import record_warning, UNRESOLVED_OPTION
from utils.helpers import store_operation


class AnswerRecorder:
    """Stores one answer per (attempt, question); the latest submission wins."""

    @staticmethod
    def resolve_option(question_id, option_id):
        option = QuestionOption.query.get(option_id)
        if option is None:
            raise ResolutionFailure(f"Option {option_id} does not exist", reference_id=option_id)
        if option.question_id != question_id:
            raise ResolutionFailure(
                f"Option {option_id} does not belong to question {question_id}", reference_id=option_id
            )
        return option

    @staticmethod
    def clean_text(answer_text):
        if answer_text is None:
            return None
        if not isinstance(answer_text, str):
            raise InvalidAnswer("answer_text must be a string.")
        cleaned = bleach.clean(answer_text, tags=[], strip=True).strip()
        validate_length("Answer", cleaned, current_app.config.get("QUIZ_MAX_TEXT_ANSWER_LENGTH", 5000))
        return cleaned or None

    @staticmethod
    @store_operation("We couldn't save your answer.")
    def submit(user_id, quiz_view, attempt_id, question_id, option_id=None, answer_text=None):
        if quiz_view is None:
            raise NoQuizLoaded()
        answer_text = AnswerRecorder.clean_text(answer_text)
        validate_answer_payload(option_id, answer_text)

        position = quiz_view.position_of(question_id)
        if position is None:
            raise NotFound("Question not found in this quiz")

        attempt = AttemptManager.get_for_quiz(attempt_id, quiz_view.id)
        attempt.transition_to(IN_PROGRESS)

        is_correct = False
        unresolved = None
        if option_id is not None:
            try:
                is_correct = bool(AnswerRecorder.resolve_option(question_id, option_id).is_correct)
            except ResolutionFailure as e:
                unresolved = e

        answer = AnswerRecorder._upsert(
            user_id=user_id,
            attempt_id=attempt.id,
            question_id=question_id,
            option_id=option_id,
            answer_text=answer_text,
            is_correct=is_correct,
        )

        if unresolved is not None:
            record_warning(
                UNRESOLVED_OPTION,
                f"{unresolved.message}; answer recorded as incorrect",
                user_id=user_id,
                quiz_id=quiz_view.id,
                attempt_id=attempt_id,
                question_id=question_id,
                reference_id=unresolved.reference_id,
            )

        attempt.last_answered_index = position
        db.session.commit()

        current_app.logger.debug(
            "Recorded answer for question %s in attempt %s (correct=%s)", question_id, attempt.id, is_correct
        )
        return answer

    @staticmethod
    def _apply(answer, option_id, answer_text, is_correct):
        answer.selected_option_id = option_id
        answer.answer_text = answer_text
        answer.is_correct = is_correct
        answer.answered_at = datetime.utcnow()
        return answer

    @staticmethod
    def _find(attempt_id, question_id):
        return QuizAttemptAnswer.query.filter_by(attempt_id=attempt_id, question_id=question_id).first()

    @staticmethod
    def _upsert(user_id, attempt_id, question_id, option_id, answer_text, is_correct):
        """Update the (attempt, question) row in place, inserting it the first time."""
        existing = AnswerRecorder._find(attempt_id, question_id)
        if existing:
            return AnswerRecorder._apply(existing, option_id, answer_text, is_correct)

        answer = QuizAttemptAnswer(
            id=str(uuid.uuid4()),
            user_id=user_id,
            attempt_id=attempt_id,
            question_id=question_id,
        )
        AnswerRecorder._apply(answer, option_id, answer_text, is_correct)
        db.session.add(answer)
        try:
            db.session.flush()
        except IntegrityError:
            # a concurrent writer inserted the row first; overwrite it instead
            db.session.rollback()
            existing = AnswerRecorder._find(attempt_id, question_id)
            if existing is None:
                raise
            answer = AnswerRecorder._apply(existing, option_id, answer_text, is_correct)
        return answer
