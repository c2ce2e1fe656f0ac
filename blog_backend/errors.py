"""
Error taxonomy shared by the directory, storage and HTTP layers.
"""

from __future__ import annotations

from typing import Optional


class BlogBackendError(Exception):
    """Base class for errors raised by this package."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlogBackendError):
    """Malformed or missing input."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class Conflict(BlogBackendError):
    """A unique field (email, username, blog_id) is already taken."""

    status_code = 409


class Unauthorized(BlogBackendError):
    """Unknown account or wrong credentials."""

    status_code = 403


class UpstreamError(BlogBackendError):
    """Database or object-storage failure."""

    status_code = 500
