"""
Auth Controller Module
Sign-up, sign-in, sign-out, session and profile endpoints
"""
from flask import Blueprint, jsonify, request
import logging

from ..services.auth_service import AuthService
from ..utils.request_utils import json_body, missing_fields, request_client, respond
from ..utils.result_utils import NOT_AUTHENTICATED, fail

logger = logging.getLogger(__name__)
auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/auth/signup', methods=['POST'])
def signup():
    """
    Register a new account
    @body: {"email": str, "password": str, "full_name": str (optional)}
    @returns: 201 with user and session, or error
    """
    data = json_body()
    missing = missing_fields(data, ['email', 'password'])
    if missing:
        return missing

    result = AuthService(request_client()).sign_up(data['email'], data['password'], data.get('full_name'))
    return respond(result, 201)


@auth_bp.route('/auth/login', methods=['POST'])
def login():
    """
    Sign in with email and password
    @body: {"email": str, "password": str}
    @returns: user and session (access and refresh tokens for later requests)
    """
    data = json_body()
    missing = missing_fields(data, ['email', 'password'])
    if missing:
        return missing

    result = AuthService(request_client()).sign_in(data['email'], data['password'])
    if not result['success']:
        # credential failures are reported as 401 whatever the message says
        return jsonify(result), 401
    return respond(result)


@auth_bp.route('/auth/logout', methods=['POST'])
def logout():
    return respond(AuthService(request_client()).sign_out())


@auth_bp.route('/auth/user', methods=['GET'])
def get_user():
    result = AuthService(request_client()).get_current_user()
    if result['success'] and not result['user']:
        return respond(fail(NOT_AUTHENTICATED))
    return respond(result)


@auth_bp.route('/auth/reset-password', methods=['POST'])
def reset_password():
    data = json_body()
    missing = missing_fields(data, ['email'])
    if missing:
        return missing
    return respond(AuthService(request_client()).reset_password(data['email']))


@auth_bp.route('/auth/password', methods=['POST'])
def update_password():
    data = json_body()
    missing = missing_fields(data, ['password'])
    if missing:
        return missing
    return respond(AuthService(request_client()).update_password(data['password']))


@auth_bp.route('/auth/profile', methods=['GET', 'PATCH'])
def profile():
    """
    Read or update the caller's profile
    @body (PATCH): profile fields such as username or full_name
    """
    service = AuthService(request_client())
    user = service.get_current_user()
    if not user['success']:
        return respond(user)
    if not user['user']:
        return respond(fail(NOT_AUTHENTICATED))

    user_id = user['user']['id']
    if request.method == 'PATCH':
        return respond(service.update_profile(user_id, json_body()))
    return respond(service.get_profile(user_id))
