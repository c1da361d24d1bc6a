import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from config import TestConfig
from models import db, User, Course, Quiz, Question, QuestionOption
from utils.tokens import get_jwt_token


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(username="student1", full_name="Student One")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(username="student2", full_name="Student Two")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(user):
    token = get_jwt_token({"user_id": user.id, "role": "student"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def course(app):
    course = Course(title="Biology 101", description="Cells and more")
    db.session.add(course)
    db.session.commit()
    return course


@pytest.fixture
def make_quiz(app, course):
    """
    Build a quiz with one question per weight. Each question gets
    ``options_per_question`` options and the option at ``correct_position``
    is marked correct.
    """
    def _make_quiz(weights=(1, 1, 1, 1), passing_score=70, randomize=False,
                   options_per_question=3, correct_position=1, max_attempts=None,
                   title="Cell structure"):
        quiz = Quiz(
            title=title,
            description="Check what you learned",
            time_limit=20,
            passing_score=passing_score,
            randomize_questions=randomize,
            max_attempts=max_attempts,
            course_id=course.id,
        )
        db.session.add(quiz)
        db.session.flush()

        for number, weight in enumerate(weights, start=1):
            question = Question(
                quiz_id=quiz.id,
                question_text=f"Question {number}",
                point_weight=weight,
                explanation=f"Because of reason {number}",
                order=number,
            )
            db.session.add(question)
            db.session.flush()
            for position in range(options_per_question):
                db.session.add(QuestionOption(
                    question_id=question.id,
                    option_text=f"Q{number} option {position}",
                    is_correct=(position == correct_position),
                    order=position,
                ))

        db.session.commit()
        return quiz

    return _make_quiz
