from __future__ import annotations


class AppError(Exception):
    """Base application error; ``status_code`` is the HTTP mapping."""

    status_code = 400

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    status_code = 404


class ForbiddenError(AppError):
    status_code = 403


class ConflictError(AppError):
    status_code = 409


class ValidationError(AppError):
    """Rejected input, e.g. a self-conversation or an empty message."""

    status_code = 422
