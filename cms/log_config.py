"""Logging setup shared by the HTTP and stdio entry points."""

from __future__ import annotations

import logging
import sys
from typing import TextIO


def configure_logging(debug: bool, stream: TextIO | None = None) -> None:
    """Configure application logging.

    The stdio tool server passes ``sys.stderr`` because stdout carries the
    protocol.
    """
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=stream if stream is not None else sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.INFO if debug else logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)
