DEFAULT_MESSAGE = "The action could not be completed. Please try again."


class QuizEngineError(Exception):
    """Base error for the attempt engine; carries an HTTP status and a user-facing message."""
    status_code = 500

    def __init__(self, message=None):
        self.message = message or DEFAULT_MESSAGE
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class NotFound(QuizEngineError):
    status_code = 404


class NoQuizLoaded(QuizEngineError):
    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or "No quiz has been loaded.")


class InvalidAnswer(QuizEngineError):
    status_code = 400


class AttemptLimitReached(QuizEngineError):
    status_code = 403

    def __init__(self, message=None):
        super().__init__(message or "No attempts left")


class InvalidTransition(QuizEngineError):
    status_code = 409


class TransportFailure(QuizEngineError):
    status_code = 503


class ResolutionFailure(QuizEngineError):
    """A referenced record could not be fetched; callers degrade instead of aborting."""

    def __init__(self, message=None, reference_id=None):
        self.reference_id = reference_id
        super().__init__(message)
