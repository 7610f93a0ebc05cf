"""Exceptions raised by the bezarith package."""

from __future__ import annotations


class BezierPathError(Exception):
    """Base exception for Bezier path errors."""


class MalformedPathError(BezierPathError, ValueError):
    """Raised when path or point data does not have the expected shape."""
