import uuid
from datetime import datetime
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from models import db
from models.quiz_attempts import QuizAttempt, IN_PROGRESS
from classes.errors import NotFound, AttemptLimitReached, InvalidTransition, TransportFailure
from utils.helpers import store_operation


class AttemptManager:
    @staticmethod
    def next_attempt_number(user_id, quiz_id):
        """max(attempt_number) + 1 for this user and quiz, read fresh from storage."""
        current = (
            db.session.query(func.max(QuizAttempt.attempt_number))
            .filter(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
            .scalar()
        )
        return (current or 0) + 1

    @staticmethod
    @store_operation("We couldn't start the quiz attempt.")
    def start(user_id, quiz):
        """Create a new in-progress attempt for ``quiz`` (a QuizView or Quiz)."""
        number = AttemptManager.next_attempt_number(user_id, quiz.id)
        if quiz.max_attempts and number > quiz.max_attempts:
            raise AttemptLimitReached()

        attempt = QuizAttempt(
            id=str(uuid.uuid4()),
            user_id=user_id,
            quiz_id=quiz.id,
            attempt_number=number,
            state=IN_PROGRESS,
            earned_score=0,
            started_at=datetime.utcnow(),
        )
        db.session.add(attempt)
        try:
            db.session.commit()
        except IntegrityError as e:
            # another session took this attempt number between our read and write
            db.session.rollback()
            current_app.logger.warning(
                "Attempt number %s for user %s quiz %s was taken concurrently", number, user_id, quiz.id
            )
            raise TransportFailure("We couldn't start the quiz attempt. Please try again.") from e

        current_app.logger.info("User %s started attempt %s (#%s) of quiz %s", user_id, attempt.id, number, quiz.id)
        return attempt

    @staticmethod
    def get(attempt_id):
        attempt = QuizAttempt.query.get(attempt_id) if attempt_id else None
        if not attempt:
            raise NotFound("Attempt not found")
        return attempt

    @staticmethod
    def get_for_quiz(attempt_id, quiz_id):
        attempt = AttemptManager.get(attempt_id)
        if attempt.quiz_id != quiz_id:
            raise NotFound("Attempt not found for this quiz")
        return attempt

    @staticmethod
    def get_owned(user_id, quiz_id, attempt_id):
        attempt = AttemptManager.get(attempt_id)
        if attempt.user_id != user_id or attempt.quiz_id != quiz_id:
            raise NotFound("Attempt not found")
        return attempt

    @staticmethod
    @store_operation("We couldn't resume the quiz attempt.")
    def resume(user_id, quiz_id, attempt_id):
        attempt = AttemptManager.get_owned(user_id, quiz_id, attempt_id)
        if attempt.state != IN_PROGRESS:
            raise InvalidTransition(f"Attempt {attempt.attempt_number} is already {attempt.state}.")
        return attempt

    @staticmethod
    def resume_position(attempt, quiz_view):
        """Question position a resumed attempt continues from."""
        if quiz_view.randomize_questions or attempt.last_answered_index is None:
            return 0
        last = len(quiz_view.questions) - 1
        return min(attempt.last_answered_index + 1, max(last, 0))
