import uuid
from datetime import datetime
from models import db
from classes.errors import InvalidTransition
from utils.helpers import format_datetime

IN_PROGRESS = "in_progress"
COMPLETED = "completed"

# Allowed lifecycle moves; completed -> completed only when re-scoring is enabled.
TRANSITIONS = {
    IN_PROGRESS: {IN_PROGRESS, COMPLETED},
    COMPLETED: set(),
}


class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        db.UniqueConstraint("user_id", "quiz_id", "attempt_number", name="uq_attempt_number"),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    attempt_number = db.Column(db.Integer, nullable=False)
    state = db.Column(db.String(20), nullable=False, default=IN_PROGRESS)
    earned_score = db.Column(db.Integer, nullable=False, default=0)
    percentage = db.Column(db.Integer, nullable=True)
    passed = db.Column(db.Boolean, nullable=True)
    last_answered_index = db.Column(db.Integer, nullable=True)
    started_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    completed_at = db.Column(db.DateTime, nullable=True)

    quiz = db.relationship("Quiz", backref=db.backref("attempts", lazy=True))
    user = db.relationship("User", backref=db.backref("quiz_attempts", lazy=True))
    answers = db.relationship("QuizAttemptAnswer", back_populates="attempt", lazy=True, cascade="all, delete-orphan")

    @property
    def is_completed(self):
        return self.state == COMPLETED

    def can_transition(self, target, allow_rescore=False):
        if allow_rescore and self.state == COMPLETED and target == COMPLETED:
            return True
        return target in TRANSITIONS.get(self.state, set())

    def transition_to(self, target, allow_rescore=False):
        """Move the attempt to ``target`` or raise ``InvalidTransition``."""
        if not self.can_transition(target, allow_rescore=allow_rescore):
            raise InvalidTransition(
                f"Attempt {self.attempt_number} is {self.state} and cannot move to {target}."
            )
        self.state = target

    def __repr__(self):
        return f"<QuizAttempt {self.id} #{self.attempt_number} ({self.state})>"

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "quiz_id": self.quiz_id,
            "attempt_number": self.attempt_number,
            "state": self.state,
            "earned_score": self.earned_score,
            "percentage": self.percentage,
            "passed": self.passed,
            "last_answered_index": self.last_answered_index,
            "started_at": format_datetime(self.started_at),
            "completed_at": format_datetime(self.completed_at),
        }
