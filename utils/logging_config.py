import logging


class ContextFormatter(logging.Formatter):
    """Append the engine warning context, when present, to the log line."""

    def format(self, record):
        line = super().format(record)
        context = getattr(record, "engine_warning", None)
        if context:
            details = " ".join(f"{k}={v}" for k, v in context.items() if v is not None)
            line = f"{line} | {details}"
        return line


def setup_logging(app):
    """Attach a console handler to the Flask app logger at LOG_LEVEL."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s [%(levelname)s] %(module)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(level)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    return app.logger
