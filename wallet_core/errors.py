"""
Directory error types

Managers raise these; the directory turns them into JSONResponse values.
They subclass ValueError so callers that only know the generic contract
still catch them.
"""

from .responses import ResponseStatus, JSONResponse


class WalletError(ValueError):
    """Base class for modeled directory failures"""
    status: ResponseStatus = ResponseStatus.BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> JSONResponse:
        return JSONResponse.of(self.status, self.message)


class BadRequestError(WalletError):
    """Malformed or mismatched input, insufficient balance"""
    status = ResponseStatus.BAD_REQUEST


class UnauthorizedError(WalletError):
    """Credential mismatch"""
    status = ResponseStatus.UNAUTHORIZED


class NotFoundError(WalletError):
    """Unresolved login, uid or phone lookup"""
    status = ResponseStatus.NOT_FOUND


class ConflictError(WalletError):
    """Duplicate login or duplicate token"""
    status = ResponseStatus.CONFLICT
