"""
Exception types raised by the sparse SGD update engine.

Configuration problems are reported as plain ``ValueError`` at the point
of configuration; only lifecycle violations get a dedicated type.
"""


class TornDownError(RuntimeError):
    """Raised when a model or optimizer is used after ``teardown()``."""
