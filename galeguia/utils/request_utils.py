"""
Helpers that turn the incoming Flask request into a Supabase client and
service results into JSON responses.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from flask import abort, current_app, g, jsonify, make_response, request

from ..services.storage_service import UploadedFile
from .result_utils import NOT_AUTHENTICATED, UNAUTHORIZED_ADMIN, classify_error, error_message, fail

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    'permission': 403,
    'not_found': 404,
    'validation': 400,
}


def bearer_token() -> Optional[str]:
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip() or None
    return None


def request_client():
    """
    Supabase client for the current request, created once and kept on ``g``.
    The factory comes from ``app.config['SUPABASE_CLIENT_FACTORY']``.

    A bearer token the auth client cannot turn into a session (malformed, or
    expired without a usable refresh token) aborts the request with 401.
    """
    if 'supabase' not in g:
        factory = current_app.config['SUPABASE_CLIENT_FACTORY']
        access_token = bearer_token()
        try:
            g.supabase = factory(access_token, request.headers.get('X-Refresh-Token'))
        except Exception as e:
            if not access_token:
                raise
            logger.warning(f"Rejected session token for {request.path}: {error_message(e)}")
            abort(make_response(*respond(fail(NOT_AUTHENTICATED))))
    return g.supabase


def json_body() -> Dict[str, Any]:
    """JSON object body, or an empty dict when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def status_for(result: Dict[str, Any]) -> int:
    if 'status' in result:
        return result['status']
    error = result.get('error', '')
    if error == NOT_AUTHENTICATED:
        return 401
    if error == UNAUTHORIZED_ADMIN:
        return 403
    return STATUS_BY_CATEGORY.get(classify_error(error), 500)


def respond(result: Dict[str, Any], success_status: int = 200) -> Tuple[Any, int]:
    """
    Serialize a service result.
    @param result: dict - {'success': bool, ...}
    @param success_status: int - status used when the operation succeeded
    @returns: tuple - (response, status)
    """
    if result.get('success'):
        return jsonify(result), success_status

    status = status_for(result)
    logger.warning(f"Request {request.method} {request.path} failed ({status}): {result.get('error')}")
    body = {key: value for key, value in result.items() if key != 'status'}
    return jsonify(body), status


def missing_fields(data: Dict[str, Any], fields) -> Optional[Tuple[Any, int]]:
    for field in fields:
        if data.get(field) in (None, ''):
            return jsonify({
                'success': False,
                'error': f'Missing required field: {field}'
            }), 400
    return None


def uploaded_file(field: str) -> Optional[UploadedFile]:
    """Read a multipart upload into memory, or None when the field is absent or empty."""
    storage = request.files.get(field)
    if storage is None or not storage.filename:
        return None
    return UploadedFile(
        content=storage.read(),
        filename=storage.filename,
        content_type=storage.mimetype or None
    )


def form_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('1', 'true', 'yes', 'on')
