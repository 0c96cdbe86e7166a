"""Root logger setup, applied once at application import."""

import logging


def setup_logging(level: str = "INFO") -> None:
    """Attach a console handler to the root logger unless one is already there.

    Repeated calls (tests importing the app more than once, uvicorn reload)
    leave the existing handlers alone.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
