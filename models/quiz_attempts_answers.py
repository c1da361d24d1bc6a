import uuid
from datetime import datetime
from models import db
from utils.helpers import format_datetime

class QuizAttemptAnswer(db.Model):
    __tablename__ = "quiz_attempt_answers"
    __table_args__ = (
        db.UniqueConstraint("attempt_id", "question_id", name="uq_answer_per_question"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    attempt_id = db.Column(db.String(36), db.ForeignKey("quiz_attempts.id"), nullable=False)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id"), nullable=False)
    # No FK: options may be removed from the bank after the answer was stored.
    selected_option_id = db.Column(db.Integer, nullable=True)
    answer_text = db.Column(db.Text, nullable=True)
    is_correct = db.Column(db.Boolean, nullable=False, default=False)
    answered_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    attempt = db.relationship("QuizAttempt", back_populates="answers")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "selected_option_id": self.selected_option_id,
            "answer_text": self.answer_text,
            "is_correct": self.is_correct,
            "answered_at": format_datetime(self.answered_at),
        }
