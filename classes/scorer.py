from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from flask import current_app

from models import db
from models.quiz_attempts import COMPLETED
from classes.attempt_manager import AttemptManager
from classes.errors import NoQuizLoaded
from classes.validators import validate_answer_index
from utils.helpers import round_half_up, store_operation

# (lower bound, band) checked from the top down
PERFORMANCE_BANDS = (
    (90, "excellent"),
    (75, "good"),
    (60, "needs-improvement"),
)
LOWEST_BAND = "critical"


def performance_band(percentage):
    for threshold, band in PERFORMANCE_BANDS:
        if percentage >= threshold:
            return band
    return LOWEST_BAND


def score_percentage(earned_weight, total_weight):
    if not total_weight:
        return 0
    return round_half_up(Decimal(100 * earned_weight) / Decimal(total_weight))


@dataclass
class QuizAnalysis:
    score: int
    earned_weight: int
    total_weight: int
    percentage: int
    level: str
    passed: bool
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    incorrect_questions: List[int] = field(default_factory=list)
    attempt_id: Optional[str] = None
    attempt_number: Optional[int] = None

    def to_dict(self):
        return asdict(self)


class Scorer:
    @staticmethod
    def analyse(quiz_view, answers):
        """
        Grade every question of ``quiz_view`` against ``answers``.

        ``answers`` maps question id to the position of the chosen option.
        Questions missing from the mapping are graded as incorrect and still
        count toward the total weight.
        """
        highlights = current_app.config.get("QUIZ_ANALYSIS_HIGHLIGHTS", 3)
        answers = answers or {}

        correct_count = 0
        total_weight = 0
        earned_weight = 0
        strengths, weaknesses, incorrect = [], [], []

        for question in quiz_view.questions:
            chosen = answers.get(question.id, answers.get(str(question.id)))
            chosen = validate_answer_index(chosen)
            weight = question.point_weight or 1
            total_weight += weight

            if chosen is not None and chosen == question.correct_index:
                correct_count += 1
                earned_weight += weight
                strengths.append(question.text)
            else:
                incorrect.append(question.id)
                weaknesses.append(question.text)

        percentage = score_percentage(earned_weight, total_weight)
        return QuizAnalysis(
            score=correct_count,
            earned_weight=earned_weight,
            total_weight=total_weight,
            percentage=percentage,
            level=performance_band(percentage),
            passed=percentage >= quiz_view.passing_score,
            strengths=strengths[:highlights],
            weaknesses=weaknesses[:highlights],
            incorrect_questions=incorrect,
        )

    @staticmethod
    @store_operation("We couldn't submit the quiz.")
    def finalize(quiz_view, attempt_id, answers, allow_rescore=False):
        if quiz_view is None:
            raise NoQuizLoaded()

        attempt = AttemptManager.get_for_quiz(attempt_id, quiz_view.id)
        attempt.transition_to(COMPLETED, allow_rescore=allow_rescore)

        analysis = Scorer.analyse(quiz_view, answers)
        analysis.attempt_id = attempt.id
        analysis.attempt_number = attempt.attempt_number

        attempt.earned_score = analysis.earned_weight
        attempt.percentage = analysis.percentage
        attempt.passed = analysis.passed
        attempt.completed_at = datetime.utcnow()
        db.session.commit()

        current_app.logger.info(
            "Attempt %s finalized: %s%% (%s/%s) passed=%s",
            attempt.id, analysis.percentage, analysis.earned_weight, analysis.total_weight, analysis.passed,
        )
        return analysis
