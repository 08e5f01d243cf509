"""
Domain Error Taxonomy

Every rule violation in the domain layer is raised as one of four kinds.
The kind decides the HTTP status at the API edge; ``code`` is the stable
machine identifier clients switch on. ``message`` is English display text
and is not part of the error's identity.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = 'not_found'
    FORBIDDEN = 'forbidden'
    BAD_REQUEST = 'bad_request'
    CONFLICT = 'conflict'


class DomainError(Exception):
    """Base class for typed, user-facing domain errors"""

    kind: ErrorKind = ErrorKind.BAD_REQUEST
    default_code = 'BAD_REQUEST'
    default_message = 'The request could not be processed.'

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {
            'kind': self.kind.value,
            'code': self.code,
            'message': self.message,
        }
        if self.details:
            payload['details'] = self.details
        return payload

    def __repr__(self):
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class NotFound(DomainError):
    """Site, property, booking or review is missing"""
    kind = ErrorKind.NOT_FOUND
    default_code = 'NOT_FOUND'
    default_message = 'The requested resource was not found.'


class Forbidden(DomainError):
    """Actor is not a party allowed to perform the action"""
    kind = ErrorKind.FORBIDDEN
    default_code = 'FORBIDDEN'
    default_message = 'You do not have permission to perform this action.'


class BadRequest(DomainError):
    """Capacity, stay policy, date or state violations"""
    kind = ErrorKind.BAD_REQUEST
    default_code = 'BAD_REQUEST'
    default_message = 'The request could not be processed.'


class Conflict(DomainError):
    """Date range unavailable, duplicates, double review"""
    kind = ErrorKind.CONFLICT
    default_code = 'CONFLICT'
    default_message = 'The request conflicts with the current state of the resource.'
