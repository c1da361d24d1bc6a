from datetime import datetime
from models import db
from utils.helpers import format_datetime

class EngineWarning(db.Model):
    """A degraded read or write that was completed with a substitute value."""
    __tablename__ = "engine_warnings"

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(50), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    user_id = db.Column(db.Integer, nullable=True, index=True)
    quiz_id = db.Column(db.Integer, nullable=True)
    attempt_id = db.Column(db.String(36), nullable=True)
    question_id = db.Column(db.Integer, nullable=True)
    reference_id = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "message": self.message,
            "user_id": self.user_id,
            "quiz_id": self.quiz_id,
            "attempt_id": self.attempt_id,
            "question_id": self.question_id,
            "reference_id": self.reference_id,
            "created_at": format_datetime(self.created_at),
        }
