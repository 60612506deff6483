"""Exceptions raised while building element queries."""

from __future__ import annotations


class InvalidParamError(ValueError):
    """A query parameter cannot be compiled (e.g. non-numeric id operand)."""


class UnknownStatusError(ValueError):
    """A status name has no registered condition."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Unknown status: {status}")
        self.status = status


class QueryAborted(Exception):
    """Preparation cannot produce any rows.

    Raised inside ``prepare()`` and converted to a ``None`` descriptor; callers
    of the public API never see it.
    """
