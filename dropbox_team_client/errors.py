from __future__ import annotations

from typing import Any


class ApiHttpError(RuntimeError):
    def __init__(
        self,
        status_code: int,
        message: str,
        body: str = "",
        error_summary: str | None = None,
        error_details: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.error_summary = error_summary
        self.error_details = error_details


class AuthenticationError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotAuthenticatedError(AuthenticationError):
    pass


class StateMismatchError(AuthenticationError):
    pass


class MalformedResponseError(RuntimeError):
    pass
