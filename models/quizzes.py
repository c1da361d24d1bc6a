from models import db
from sqlalchemy.orm import relationship

class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    time_limit = db.Column(db.Integer, nullable=True, default=30)
    passing_score = db.Column(db.Integer, nullable=True, default=70)
    randomize_questions = db.Column(db.Boolean, nullable=False, default=False)
    max_attempts = db.Column(db.Integer, nullable=True)

    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=True)
    course = relationship("Course", back_populates="quizzes")

    questions = relationship("Question", back_populates="quiz", cascade="all, delete-orphan")

    @property
    def total_questions(self):
        """Dynamically count total questions without storing in the database"""
        return len(self.questions)

    def __repr__(self):
        return f"<Quiz {self.title}>"

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "time_limit": self.time_limit,
            "passing_score": self.passing_score,
            "randomize_questions": self.randomize_questions,
            "max_attempts": self.max_attempts,
            "course_id": self.course_id,
            "question_count": self.total_questions,
        }
