"""
Exceptions raised by the measurement engine and session layer.

The engine degrades to zero readings for missing points; only undefined
geometry is a hard failure.
"""

from typing import Optional


class InvalidGeometry(ValueError):
    """Image or display size is zero or unknown, so coordinates can't be mapped."""

    error_code = "invalid_geometry"

    def __init__(self, message: str, fix: Optional[str] = None):
        super().__init__(message)
        self.fix = fix


class SessionNotFound(KeyError):
    error_code = "session_not_found"

    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id
        self.fix = "Create a session with POST /sessions first"

    def __str__(self) -> str:
        return f"No measurement session with id {self.session_id}"
