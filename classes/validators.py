from classes.errors import InvalidAnswer


def validate_length(field_name, value, max_length):
    if len(value) > max_length:
        raise InvalidAnswer(f"{field_name} must be {max_length} characters or fewer.")


def validate_answer_payload(option_id, answer_text):
    """An answer is either a selected option or some text, never both."""
    has_text = bool(answer_text and answer_text.strip())
    if option_id is None and not has_text:
        raise InvalidAnswer("An answer needs either a selected option or some text.")
    if option_id is not None and has_text:
        raise InvalidAnswer("Send either option_id or answer_text, not both.")
    if option_id is not None and not isinstance(option_id, int):
        raise InvalidAnswer("option_id must be an integer.")


def validate_answer_index(value):
    """Return ``value`` as an option position, or None when it cannot be one."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if value < 0:
        return None
    return value
