from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger (idempotent)."""

    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(getattr(h, "_fantasy_relay", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._fantasy_relay = True  # type: ignore[attr-defined]
    root.addHandler(handler)
