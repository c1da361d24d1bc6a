from decimal import Decimal, ROUND_HALF_UP
from functools import wraps
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from classes.errors import TransportFailure


def format_datetime(datetime_obj):
    """Format datetime to an ISO string."""
    if not datetime_obj:
        return None
    return datetime_obj.isoformat()


def round_half_up(value):
    """Round halves away from zero (12.5 -> 13), unlike the built-in round()."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def store_operation(failure_message):
    """
    Wrap an engine operation so store errors roll back, get logged with
    context and reach the caller as a single TransportFailure.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except SQLAlchemyError as e:
                from models import db
                db.session.rollback()
                current_app.logger.error(
                    "%s failed: %s", f.__qualname__, e,
                    extra={"operation": f.__qualname__},
                )
                raise TransportFailure(f"{failure_message} Please try again.") from e
        return wrapper
    return decorator
