"""
Custom exception classes for the YouTrack copy-context tool.
"""

from __future__ import annotations


class CopyContextError(Exception):
    """Base exception for copy-context errors."""


class HostRequestError(CopyContextError):
    """Raised when a request to the YouTrack server fails."""


class MissingContextError(CopyContextError):
    """Raised when no issue or article identifier is available."""
