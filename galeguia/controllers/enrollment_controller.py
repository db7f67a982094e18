"""
Enrollment Controller Module
Enrollment and lesson progress endpoints for the signed-in user
"""
from flask import Blueprint
import logging

from ..services.auth_service import AuthService
from ..services.enrollment_service import EnrollmentService
from ..utils.request_utils import json_body, missing_fields, request_client, respond
from ..utils.result_utils import NOT_AUTHENTICATED, fail

logger = logging.getLogger(__name__)
enrollment_bp = Blueprint('enrollment', __name__)


@enrollment_bp.route('/courses/<course_id>/enroll', methods=['POST'])
def enroll(course_id):
    """
    Enroll the caller in a published course
    @returns: 201 for a new enrollment, 200 when already enrolled
    """
    result = EnrollmentService(request_client()).enroll_in_course(course_id)
    if result['success'] and result['already_enrolled']:
        return respond(result, 200)
    return respond(result, 201)


@enrollment_bp.route('/me/courses', methods=['GET'])
def my_courses():
    client = request_client()
    user = AuthService(client).get_current_user()
    if not user['success']:
        return respond(user)
    if not user['user']:
        return respond(fail(NOT_AUTHENTICATED))
    return respond(EnrollmentService(client).get_user_enrolled_courses(user['user']['id']))


@enrollment_bp.route('/courses/<course_id>/progress', methods=['GET'])
def course_progress(course_id):
    return respond(EnrollmentService(request_client()).get_course_progress(course_id))


@enrollment_bp.route('/courses/<course_id>/next-lesson', methods=['GET'])
def next_lesson(course_id):
    return respond(EnrollmentService(request_client()).get_next_lesson(course_id))


@enrollment_bp.route('/lessons/<lesson_id>/complete', methods=['POST'])
def complete_lesson(lesson_id):
    """
    Mark a lesson as completed
    @body: {"last_position": number (optional)}
    """
    data = json_body()
    return respond(EnrollmentService(request_client()).mark_lesson_as_completed(
        lesson_id, data.get('last_position')
    ))


@enrollment_bp.route('/lessons/<lesson_id>/progress', methods=['PUT'])
def lesson_progress(lesson_id):
    """
    Store the video playhead
    @body: {"position": number}
    """
    data = json_body()
    missing = missing_fields(data, ['position'])
    if missing:
        return missing
    return respond(EnrollmentService(request_client()).update_lesson_progress(lesson_id, data['position']))
