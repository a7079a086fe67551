"""Logging setup shared by the web application and the CLI."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Path traversal attempts and similar anomalies go here for auditing
security_logger = logging.getLogger("photoshare.security")


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the ``photoshare`` logger.

    Calling it twice does not duplicate handlers.
    """
    logger = logging.getLogger("photoshare")
    logger.setLevel(level)

    if not any(getattr(h, "_photoshare", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._photoshare = True
        logger.addHandler(handler)
