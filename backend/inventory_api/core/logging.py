"""Process-wide logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger at ``level``."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not any(getattr(h, "_inventory_api", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._inventory_api = True  # type: ignore[attr-defined]
        root.addHandler(handler)
