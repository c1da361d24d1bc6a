from flask import current_app
from models import db
from models.engine_warnings import EngineWarning

MISSING_OPTIONS = "missing_options"
MISSING_COURSE = "missing_course"
MISSING_QUIZ = "missing_quiz"
UNRESOLVED_OPTION = "unresolved_option"
UNRESOLVED_ANSWER = "unresolved_answer"


def record_warning(kind, message, user_id=None, quiz_id=None, attempt_id=None,
                   question_id=None, reference_id=None):
    """
    Log a best-effort substitution and stage an EngineWarning row.

    The row is committed together with the operation that produced it.
    """
    context = {
        "kind": kind,
        "user_id": user_id,
        "quiz_id": quiz_id,
        "attempt_id": attempt_id,
        "question_id": question_id,
        "reference_id": None if reference_id is None else str(reference_id),
    }
    current_app.logger.warning("[%s] %s", kind, message, extra={"engine_warning": context})

    warning = EngineWarning(message=message, **context)
    db.session.add(warning)
    return warning


def recent_warnings(user_id=None, kind=None, limit=50):
    query = EngineWarning.query
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    if kind:
        query = query.filter_by(kind=kind)
    return query.order_by(EngineWarning.created_at.desc(), EngineWarning.id.desc()).limit(limit).all()
