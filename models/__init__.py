from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from models.users import User
from models.courses import Course

from models.quizzes import Quiz
from models.quiz_questions import Question
from models.question_options import QuestionOption
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer

from models.engine_warnings import EngineWarning
