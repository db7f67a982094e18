"""
Admin Controller Module
Cross-user endpoints; every call re-checks the caller's admin flag
"""
from flask import Blueprint
import logging

from ..logger import custom_logger
from ..services.admin_service import AdminService
from ..utils.request_utils import json_body, request_client, respond
from ..utils.result_utils import fail

logger = logging.getLogger(__name__)
admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/admin/courses', methods=['GET'])
def all_courses():
    return respond(AdminService(request_client()).get_all_courses())


@admin_bp.route('/admin/stats', methods=['GET'])
def statistics():
    return respond(AdminService(request_client()).get_user_statistics())


@admin_bp.route('/admin/courses/<course_id>', methods=['GET'])
def course_with_enrollments(course_id):
    return respond(AdminService(request_client()).get_course_with_enrolled_users(course_id))


@admin_bp.route('/admin/courses/<course_id>', methods=['PATCH'])
@custom_logger.log_function_call
def update_course(course_id):
    updates = json_body()
    if not updates:
        return respond(fail('No fields to update', status=400))
    return respond(AdminService(request_client()).update_any_course(course_id, updates))
