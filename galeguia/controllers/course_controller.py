"""
Course Controller Module
Handles course-related HTTP requests and responses
"""
from flask import Blueprint, request
import logging

from ..logger import custom_logger
from ..services.course_service import CourseService
from ..services.dashboard_service import CourseDashboard
from ..services.storage_service import StorageService
from ..utils.request_utils import (
    form_flag, json_body, missing_fields, request_client, respond, uploaded_file
)
from ..utils.result_utils import fail

logger = logging.getLogger(__name__)
course_bp = Blueprint('course', __name__)


def _course_fields():
    """Course fields from a multipart form or a JSON body."""
    if request.form:
        data = request.form.to_dict()
        if 'is_published' in data:
            data['is_published'] = form_flag(data['is_published'])
        return data
    return json_body()


@course_bp.route('/courses', methods=['GET'])
def list_courses():
    """
    Courses visible to the caller with module counts (and creators for admins)
    @returns: {"success": true, "courses": [...], "is_admin": bool}
    """
    return respond(CourseDashboard(request_client()).load_user_courses())


@course_bp.route('/courses/published', methods=['GET'])
def published_courses():
    return respond(CourseService(request_client()).get_published_courses())


@course_bp.route('/courses/mine', methods=['GET'])
def created_courses():
    return respond(CourseService(request_client()).get_created_courses())


@course_bp.route('/courses', methods=['POST'])
@custom_logger.log_function_call
def create_course():
    """
    Create a new course
    @body: JSON or multipart form with title, description, is_published and
           an optional ``cover_image`` file
    @returns: 201 with the created course
    """
    data = _course_fields()
    missing = missing_fields(data, ['title'])
    if missing:
        return missing

    result = CourseDashboard(request_client()).save_course(
        title=data['title'],
        description=data.get('description'),
        is_published=form_flag(data.get('is_published', False)),
        cover=uploaded_file('cover_image')
    )
    return respond(result, 201)


@course_bp.route('/courses/<course_id>', methods=['GET'])
def get_course(course_id):
    """Open a course for editing: the course plus its modules and lessons"""
    return respond(CourseDashboard(request_client()).open_course(course_id))


@course_bp.route('/courses/<course_id>/content', methods=['GET'])
def get_course_content(course_id):
    return respond(CourseService(request_client()).get_course_with_content(course_id))


@course_bp.route('/courses/<course_id>', methods=['PATCH'])
def update_course(course_id):
    data = _course_fields()
    if not data:
        return respond(fail('No fields to update', status=400))
    return respond(CourseService(request_client()).update_course(course_id, data))


@course_bp.route('/courses/<course_id>', methods=['DELETE'])
@custom_logger.log_function_call
def delete_course(course_id):
    return respond(CourseService(request_client()).delete_course(course_id))


@course_bp.route('/courses/<course_id>/publish', methods=['POST'])
def publish_course(course_id):
    """
    Publish or unpublish a course
    @body: {"is_published": bool}, defaults to publishing
    """
    is_published = form_flag(json_body().get('is_published', True))
    return respond(CourseService(request_client()).toggle_course_published(course_id, is_published))


@course_bp.route('/courses/<course_id>/cover', methods=['POST'])
@custom_logger.log_function_call
def upload_cover(course_id):
    """
    Upload a cover image
    @form: cover_image (file), replace_previous (bool, optional)
    @returns: updated course and the public URL of the image
    """
    cover = uploaded_file('cover_image')
    if cover is None:
        return respond(fail('No cover image file provided', status=400))

    result = StorageService(request_client()).upload_course_cover_image(
        course_id,
        cover.content,
        cover.filename,
        cover.content_type,
        replace_previous=form_flag(request.form.get('replace_previous', False))
    )
    return respond(result, 201)
