"""
Uniform result dictionaries returned by every service operation.

Services never let backend exceptions escape; they return either
``{'success': True, ...payload}`` or ``{'success': False, 'error': message}``.
"""
from typing import Any, Dict, Optional

UNAUTHORIZED_ADMIN = 'Unauthorized access. Admin privileges required.'
NOT_AUTHENTICATED = 'User not authenticated'

# Substrings checked in order against the lower-cased error message
ERROR_CATEGORIES = (
    ('permission', ('permission', 'row-level security', 'unauthorized', 'not allowed', 'jwt')),
    ('storage', ('storage', 'bucket', 'upload')),
    ('rpc', ('rpc', 'function')),
    ('not_found', ('not found', 'no rows', 'multiple (or no) rows')),
    ('validation', ('invalid', 'required', 'must be')),
)

USER_MESSAGES = {
    'permission': 'You do not have permission to perform this action.',
    'storage': 'The file could not be stored. Check the storage bucket and try again.',
    'rpc': 'A server function failed while processing the request.',
    'not_found': 'The requested item was not found.',
    'validation': 'The request contains invalid data.',
    'unknown': 'An unexpected error occurred.',
}


def ok(**payload: Any) -> Dict[str, Any]:
    result = {'success': True}
    result.update(payload)
    return result


def fail(error: Any, status: Optional[int] = None, **payload: Any) -> Dict[str, Any]:
    message = error if isinstance(error, str) else error_message(error)
    result = {'success': False, 'error': message or 'Unknown error'}
    if status is not None:
        result['status'] = status
    result.update(payload)
    return result


def error_message(exc: BaseException) -> str:
    """
    Extract a readable, non-empty message from a backend exception.

    postgrest ``APIError`` and the storage/functions/auth errors all expose a
    ``message`` attribute; anything else falls back to ``str(exc)`` and finally
    the exception class name.
    """
    message = getattr(exc, 'message', None)
    if isinstance(message, dict):
        message = message.get('message') or message.get('error')
    if not message:
        message = str(exc)
    return message or exc.__class__.__name__


def classify_error(message: str) -> str:
    """Loosely classify an error message by substring."""
    lowered = (message or '').lower()
    for category, needles in ERROR_CATEGORIES:
        if any(needle in lowered for needle in needles):
            return category
    return 'unknown'


def user_facing_message(message: str) -> str:
    return USER_MESSAGES[classify_error(message)]
