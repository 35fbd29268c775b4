class DialysisCareError(Exception):
    """Base error rendered as ``{"message": ...}`` with ``status_code``."""

    status_code = 500

    def __init__(self, message: str, extra: dict = None):
        self.message = message
        self.extra = extra or {}
        super().__init__(message)


class BadRequestError(DialysisCareError):
    status_code = 400


class StateTransitionError(BadRequestError):
    """Action attempted outside the allowed lifecycle state."""


class AuthenticationError(DialysisCareError):
    status_code = 401


class PermissionDeniedError(DialysisCareError):
    status_code = 403


class NotFoundError(DialysisCareError):
    status_code = 404


class StorageError(DialysisCareError):
    status_code = 500
