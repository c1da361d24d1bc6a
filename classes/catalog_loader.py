import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from flask import current_app

from models import db, Quiz, Question
from classes.errors import NotFound
from utils.degradation import record_warning, MISSING_OPTIONS, MISSING_COURSE
from utils.helpers import store_operation


@dataclass
class QuestionView:
    id: int
    text: str
    options: List[str]
    option_ids: List[int]
    correct_index: int
    point_weight: int = 1
    explanation: Optional[str] = None
    question_type: str = "multiple_choice"

    def index_of(self, option_id) -> int:
        """Position of ``option_id`` in this question's option order, -1 if absent."""
        try:
            return self.option_ids.index(option_id)
        except ValueError:
            return -1

    def to_dict(self, include_answer_key=False):
        data = {
            "id": self.id,
            "question": self.text,
            "options": list(self.options),
            "option_ids": list(self.option_ids),
            "point_weight": self.point_weight,
            "question_type": self.question_type,
        }
        if include_answer_key:
            data["correct_index"] = self.correct_index
            data["explanation"] = self.explanation
        return data


@dataclass
class QuizView:
    id: int
    title: str
    description: str
    time_limit: int
    passing_score: int
    randomize_questions: bool
    course_id: Optional[int]
    course_name: str
    max_attempts: Optional[int] = None
    questions: List[QuestionView] = field(default_factory=list)

    @property
    def question_order(self) -> List[int]:
        return [q.id for q in self.questions]

    def question(self, question_id) -> Optional[QuestionView]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def position_of(self, question_id) -> Optional[int]:
        for position, q in enumerate(self.questions):
            if q.id == question_id:
                return position
        return None

    def to_dict(self, include_answer_key=False):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "time_limit": self.time_limit,
            "passing_score": self.passing_score,
            "randomize_questions": self.randomize_questions,
            "max_attempts": self.max_attempts,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "total_questions": len(self.questions),
            "questions": [q.to_dict(include_answer_key=include_answer_key) for q in self.questions],
        }


class CatalogLoader:
    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    def shuffle(self, items):
        """Uniform permutation of a copy of ``items`` (Fisher-Yates)."""
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        return shuffled

    @store_operation("We couldn't load the quiz.")
    def load(self, quiz_id, question_order=None) -> QuizView:
        quiz = Quiz.query.get(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")

        questions = sorted(
            Question.query.filter_by(quiz_id=quiz.id).all(),
            key=lambda q: (q.order or 0, q.id),
        )

        pinned = self._apply_order(questions, question_order)
        if pinned is not None:
            questions = pinned
        elif quiz.randomize_questions:
            questions = self.shuffle(questions)

        config = current_app.config
        view = QuizView(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description or "",
            time_limit=quiz.time_limit or config.get("QUIZ_DEFAULT_TIME_LIMIT", 30),
            passing_score=(
                quiz.passing_score if quiz.passing_score is not None
                else config.get("QUIZ_DEFAULT_PASSING_SCORE", 70)
            ),
            randomize_questions=bool(quiz.randomize_questions),
            course_id=quiz.course_id,
            course_name=self._course_name(quiz),
            max_attempts=quiz.max_attempts,
            questions=[self._question_view(quiz, q) for q in questions],
        )
        # persist any degradation warnings staged while building the view
        db.session.commit()
        current_app.logger.debug(
            "Loaded quiz %s with %d questions (randomized=%s)",
            quiz.id, len(view.questions), view.randomize_questions,
        )
        return view

    @store_operation("We couldn't load the quizzes for this course.")
    def load_for_course(self, course_id) -> List[Dict]:
        quizzes = Quiz.query.filter_by(course_id=course_id).order_by(Quiz.id).all()
        return [quiz.to_dict() for quiz in quizzes]

    @staticmethod
    def _apply_order(questions, question_order):
        """Reorder by a previously produced id list if it still covers the bank exactly."""
        if not question_order:
            return None
        by_id = {q.id: q for q in questions}
        if len(question_order) != len(by_id) or set(question_order) != set(by_id):
            current_app.logger.info("Discarding stale question order %s", question_order)
            return None
        return [by_id[qid] for qid in question_order]

    @staticmethod
    def _course_name(quiz):
        if quiz.course_id is None:
            return "Course"
        if quiz.course is None:
            record_warning(
                MISSING_COURSE,
                f"Course {quiz.course_id} of quiz {quiz.id} could not be found",
                quiz_id=quiz.id,
                reference_id=quiz.course_id,
            )
            return "Course"
        return quiz.course.title

    @staticmethod
    def _question_view(quiz, question):
        options = sorted(question.options, key=lambda o: (o.order or 0, o.id))
        if not options and question.question_type != "open":
            record_warning(
                MISSING_OPTIONS,
                f"Question {question.id} has no options; loading it with an empty option set",
                quiz_id=quiz.id,
                question_id=question.id,
            )

        correct_index = next((i for i, o in enumerate(options) if o.is_correct), -1)
        return QuestionView(
            id=question.id,
            text=question.question_text,
            options=[o.option_text for o in options],
            option_ids=[o.id for o in options],
            correct_index=correct_index,
            point_weight=question.point_weight or 1,
            explanation=question.explanation,
            question_type=question.question_type or "multiple_choice",
        )
