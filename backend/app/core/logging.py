"""
Application-wide logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this module only
sets the root format and level once, from ``main.py``.
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging settings.

    Logs stream to stderr where Uvicorn picks them up. Unknown level names
    fall back to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    # passlib probes the bcrypt backend version and logs noise on newer releases
    logging.getLogger("passlib.handlers.bcrypt").setLevel(logging.ERROR)

    logging.getLogger(__name__).info("Logging initialized with level %s", level)
