"""
DRF exception handler

Turns ``DomainError`` subclasses into HTTP responses and gives DRF's own
errors the same envelope:

    {"success": false, "error": {"kind": ..., "code": ..., "message": ...}}
"""

import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from shared.domain.exceptions import DomainError, ErrorKind

logger = logging.getLogger(__name__)


STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}

KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: ErrorKind.BAD_REQUEST,
    status.HTTP_403_FORBIDDEN: ErrorKind.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorKind.CONFLICT,
}


def domain_exception_handler(exc, context) -> Optional[Response]:
    """
    Exception handler wired through ``REST_FRAMEWORK['EXCEPTION_HANDLER']``.

    Unknown exceptions return ``None`` so Django's 500 handling applies.
    """
    if isinstance(exc, DomainError):
        view = context.get('view')
        logger.info(
            f"Domain error {exc.code} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
        )
        return Response(
            {'success': False, 'error': exc.to_dict()},
            status=STATUS_BY_KIND[exc.kind],
        )

    if isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return Response(
            {
                'success': False,
                'error': {
                    'kind': ErrorKind.BAD_REQUEST.value,
                    'code': 'VALIDATION_ERROR',
                    'message': 'Validation error',
                    'details': errors,
                },
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    return format_error_response(exc, response)


def format_error_response(exc, response: Response) -> Response:
    """Wrap DRF's response data into the shared error envelope"""
    kind = KIND_BY_STATUS.get(response.status_code)
    if isinstance(exc, Http404):
        code = 'NOT_FOUND'
    elif isinstance(exc, APIException):
        code = str(exc.default_code).upper()
    else:
        code = 'ERROR'

    error = {
        'kind': kind.value if kind else None,
        'code': code,
        'message': get_error_message(response),
    }
    if isinstance(response.data, (dict, list)) and not (
        isinstance(response.data, dict) and set(response.data) == {'detail'}
    ):
        error['details'] = response.data

    response.data = {'success': False, 'error': error}
    return response


def get_error_message(response: Response) -> str:
    data = response.data
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail'])
        return 'Validation error'
    if isinstance(data, list) and data:
        return str(data[0])
    return str(data)
