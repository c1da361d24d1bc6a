from flask import Blueprint, jsonify, g, request, session, current_app
from classes.errors import QuizEngineError, InvalidAnswer
from classes.quiz_session import QuizSession
from utils.degradation import recent_warnings
from utils.utils import login_required

# Quiz attempt blueprint
quiz_bp = Blueprint("quiz", __name__)


@quiz_bp.after_request
def add_cors_headers(response):
    origin = request.headers.get('Origin')
    if origin in current_app.config.get("CORS_ORIGINS", []):
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, DELETE, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        response.headers['Access-Control-Allow-Credentials'] = 'true'
    return response


@quiz_bp.errorhandler(QuizEngineError)
def handle_engine_error(error):
    current_app.logger.info("%s on %s: %s", type(error).__name__, request.path, error.message)
    return jsonify(error.to_dict()), error.status_code


def _state_key(quiz_id):
    return f"quiz:{quiz_id}"


def _open_session(quiz_id):
    """Rebuild the caller's quiz session from the server-side session store."""
    user_id = g.user.get("user_id")
    quiz_session = QuizSession(user_id, state=session.get(_state_key(quiz_id)))
    quiz_session.load_quiz(quiz_id)
    return quiz_session


def _save_session(quiz_session):
    session[_state_key(quiz_session.quiz.id)] = quiz_session.to_state()


def _option_id(value):
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidAnswer("option_id must be an integer.")


#                                                         CATALOG
#_____________________________________________________________________________________________________________
@quiz_bp.route("/<int:quiz_id>", methods=["GET"])
@login_required
def get_quiz(quiz_id):
    """Quiz with its questions (no answer key), past attempts and the active attempt."""
    quiz_session = _open_session(quiz_id)
    _save_session(quiz_session)

    return jsonify({
        "quiz": quiz_session.quiz.to_dict(),
        "attempts": quiz_session.attempts,
        "next_attempt_number": quiz_session.next_attempt_number,
        "active_attempt_id": quiz_session.active_attempt_id,
    }), 200


@quiz_bp.route("/course/<int:course_id>", methods=["GET"])
@login_required
def get_course_quizzes(course_id):
    quiz_session = QuizSession(g.user.get("user_id"))
    return jsonify({"quizzes": quiz_session.load_quizzes_for_course(course_id)}), 200


#                                                         ATTEMPTS
#_____________________________________________________________________________________________________________
@quiz_bp.route("/<int:quiz_id>/attempts", methods=["POST"])
@login_required
def start_attempt(quiz_id):
    quiz_session = _open_session(quiz_id)
    attempt_id = quiz_session.start_attempt()
    _save_session(quiz_session)

    return jsonify({
        "attempt_id": attempt_id,
        "attempt_number": quiz_session.next_attempt_number - 1,
    }), 201


@quiz_bp.route("/<int:quiz_id>/attempts/<attempt_id>/resume", methods=["POST"])
@login_required
def resume_attempt(quiz_id, attempt_id):
    quiz_session = _open_session(quiz_id)
    attempt = quiz_session.resume_attempt(attempt_id)
    answers = quiz_session.get_attempt_answers(attempt.id)
    _save_session(quiz_session)

    return jsonify({
        "attempt": attempt.to_dict(),
        "answers": {str(qid): index for qid, index in answers.items()},
        "resume_position": quiz_session.resume_position(attempt),
    }), 200


@quiz_bp.route("/<int:quiz_id>/attempts/active", methods=["DELETE"])
@login_required
def clear_active_attempt(quiz_id):
    quiz_session = _open_session(quiz_id)
    quiz_session.clear_active_attempt()
    _save_session(quiz_session)
    return jsonify({"message": "Active attempt cleared"}), 200


@quiz_bp.route("/<int:quiz_id>/attempts", methods=["GET"])
@login_required
def list_attempts(quiz_id):
    quiz_session = _open_session(quiz_id)
    return jsonify({
        "attempts": quiz_session.list_attempts(quiz_id),
        "next_attempt_number": quiz_session.next_attempt_number,
    }), 200


@quiz_bp.route("/<int:quiz_id>/attempts/<attempt_id>/answers", methods=["GET"])
@login_required
def get_attempt_answers(quiz_id, attempt_id):
    quiz_session = _open_session(quiz_id)
    answers = quiz_session.get_attempt_answers(attempt_id)
    _save_session(quiz_session)
    return jsonify({"answers": {str(qid): index for qid, index in answers.items()}}), 200


#                                                         ANSWERS
#_____________________________________________________________________________________________________________
@quiz_bp.route("/<int:quiz_id>/answers", methods=["POST"])
@login_required
def submit_answer(quiz_id):
    """Record one answer; the first answer of a session opens a new attempt."""
    data = request.get_json(silent=True) or {}
    try:
        question_id = int(data.get("question_id"))
    except (TypeError, ValueError):
        raise InvalidAnswer("question_id must be an integer.")

    quiz_session = _open_session(quiz_id)
    answer = quiz_session.submit_answer(
        question_id,
        option_id=_option_id(data.get("option_id")),
        answer_text=data.get("answer_text"),
    )
    _save_session(quiz_session)

    return jsonify({
        "attempt_id": quiz_session.active_attempt_id,
        "question_id": answer.question_id,
        "selected_option_id": answer.selected_option_id,
        "answer_text": answer.answer_text,
    }), 200


@quiz_bp.route("/<int:quiz_id>/finalize", methods=["POST"])
@login_required
def finalize_attempt(quiz_id):
    """Grades the active attempt from its stored answers and returns the analysis with the answer key."""
    quiz_session = _open_session(quiz_id)
    analysis = quiz_session.finalize_attempt()
    _save_session(quiz_session)

    return jsonify({
        "analysis": analysis.to_dict(),
        "quiz": quiz_session.quiz.to_dict(include_answer_key=True),
        "next_attempt_number": quiz_session.next_attempt_number,
    }), 200


@quiz_bp.route("/warnings", methods=["GET"])
@login_required
def get_warnings():
    kind = request.args.get("kind")
    warnings = recent_warnings(user_id=g.user.get("user_id"), kind=kind)
    return jsonify({"warnings": [w.to_dict() for w in warnings]}), 200
