"""
Response Module

The status/text/message triple every directory operation returns, modelled
on an HTTP response.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ResponseStatus(Enum):
    """Status codes with their reason phrases"""
    OK = (200, "OK")
    BAD_REQUEST = (400, "Bad Request")
    UNAUTHORIZED = (401, "Unauthorized")
    NOT_FOUND = (404, "Not Found")
    CONFLICT = (409, "Conflict")

    def __init__(self, code: int, phrase: str):
        self.code = code
        self.phrase = phrase


@dataclass(frozen=True)
class JSONResponse:
    """Immutable result of a directory operation"""
    status: int
    text: str
    message: str

    @classmethod
    def of(cls, status: ResponseStatus, message: str) -> 'JSONResponse':
        return cls(status=status.code, text=status.phrase, message=message)

    @classmethod
    def ok(cls, message: str) -> 'JSONResponse':
        return cls.of(ResponseStatus.OK, message)

    @property
    def is_success(self) -> bool:
        return self.status == ResponseStatus.OK.code

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "text": self.text, "message": self.message}

    def __eq__(self, other) -> bool:
        # Plain dicts compare equal so callers can assert against literals
        if isinstance(other, dict):
            return self.to_dict() == other
        if not isinstance(other, JSONResponse):
            return NotImplemented
        return (self.status, self.text, self.message) == (other.status, other.text, other.message)

    def __hash__(self) -> int:
        return hash((self.status, self.text, self.message))
