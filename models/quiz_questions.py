from models import db

class Question(db.Model):
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    question_text = db.Column(db.Text, nullable=False)
    question_type = db.Column(db.String(20), nullable=False, default="multiple_choice")  # or "open"
    point_weight = db.Column(db.Integer, nullable=False, default=1)
    explanation = db.Column(db.Text, nullable=True)
    order = db.Column(db.Integer, nullable=False, default=0)

    quiz = db.relationship("Quiz", back_populates="questions")
    options = db.relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.order",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "question_text": self.question_text,
            "question_type": self.question_type,
            "point_weight": self.point_weight,
            "explanation": self.explanation,
            "order": self.order,
        }
