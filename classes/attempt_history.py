from models import db
from models.quizzes import Quiz
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer
from classes.attempt_manager import AttemptManager
from classes.errors import NoQuizLoaded
from utils.degradation import record_warning, MISSING_QUIZ, UNRESOLVED_ANSWER
from utils.helpers import store_operation


class AttemptHistory:
    @staticmethod
    @store_operation("We couldn't load your previous attempts.")
    def list(user_id, quiz_id):
        """
        All attempts of ``user_id`` on ``quiz_id`` ordered by attempt number,
        each with the quiz title, plus the next attempt number.
        """
        attempts = (
            QuizAttempt.query
            .filter_by(user_id=user_id, quiz_id=quiz_id)
            .order_by(QuizAttempt.attempt_number.asc())
            .all()
        )

        quiz_title = ""
        if attempts:
            quiz = Quiz.query.get(quiz_id)
            if quiz is None:
                record_warning(
                    MISSING_QUIZ,
                    f"Quiz {quiz_id} referenced by {len(attempts)} attempts could not be found",
                    user_id=user_id,
                    quiz_id=quiz_id,
                )
                db.session.commit()
            else:
                quiz_title = quiz.title

        enriched = []
        for attempt in attempts:
            data = attempt.to_dict()
            data["quiz_title"] = quiz_title
            enriched.append(data)

        next_number = max([a.attempt_number for a in attempts], default=0) + 1
        return enriched, next_number

    @staticmethod
    @store_operation("We couldn't load the answers of this attempt.")
    def answers_of(attempt_id, quiz_view):
        """
        Map question id -> position of the stored option in ``quiz_view``.

        Answers that no longer resolve against the loaded questions are left
        out; free-text answers have no position and are skipped.
        """
        if quiz_view is None:
            raise NoQuizLoaded()

        attempt = AttemptManager.get(attempt_id)
        stored = QuizAttemptAnswer.query.filter_by(attempt_id=attempt.id).all()

        positions = {}
        degraded = False
        for answer in stored:
            if answer.selected_option_id is None:
                continue

            question = quiz_view.question(answer.question_id)
            index = question.index_of(answer.selected_option_id) if question else -1
            if index == -1:
                degraded = True
                record_warning(
                    UNRESOLVED_ANSWER,
                    f"Stored option {answer.selected_option_id} for question {answer.question_id} "
                    f"no longer resolves; leaving it out of attempt {attempt.id}",
                    user_id=attempt.user_id,
                    quiz_id=attempt.quiz_id,
                    attempt_id=attempt.id,
                    question_id=answer.question_id,
                    reference_id=answer.selected_option_id,
                )
                continue

            positions[answer.question_id] = index

        if degraded:
            db.session.commit()
        return positions
