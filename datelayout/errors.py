"""Exception types raised by ``datelayout``.

Only configuration problems are raised as exceptions. Problems with a
single file (an unparseable path, a failing callback) are logged by the
traversal and never leave it.
"""
from typing import Optional


class DatelayoutError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(DatelayoutError):
    """The run is misconfigured and must not start.

    Args:
        message: Human readable description.
        option: Name of the offending option (e.g. ``--output-structure``)
            when the error can be traced back to one.
    """

    def __init__(self, message: str, option: Optional[str] = None):
        super().__init__(message)
        self.option = option

    def __str__(self):
        msg = super().__str__()
        if self.option:
            return f"{self.option}: {msg}"
        return msg
