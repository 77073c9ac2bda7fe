"""
Structured JSON logging for online training runs.

Each record is a single JSON object carrying a timestamp, an event name and
arbitrary fields, e.g.::

    {"ts": 1640995200.0, "event": "truncation", "epoch": 100, "n_keys": 12}

Records go through the stdlib ``logging`` logger ``sparse_sgd`` so the host
application decides where (and whether) they are written.
"""

import json
import logging
import time

logger = logging.getLogger("sparse_sgd")


def log(event: str, level: int = logging.DEBUG, **fields):
    """
    Emit a structured JSON event.

    Args:
        event: Event name (e.g. "update", "merge", "teardown")
        level: ``logging`` level for the record
        **fields: Additional JSON-serializable key-value pairs

    Example:
        >>> log("merge", level=logging.INFO, epoch=200, scaling=0.5)
    """
    if not logger.isEnabledFor(level):
        return
    rec = {"ts": time.time(), "event": event}
    rec.update(fields)
    logger.log(level, json.dumps(rec, default=float))
