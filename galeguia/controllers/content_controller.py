"""
Controller for the modules and lessons of a course.
"""
from flask import Blueprint, request
import logging

from ..services.lesson_service import LessonService
from ..services.module_service import ModuleService
from ..services.storage_service import StorageService
from ..utils.request_utils import (
    form_flag, json_body, missing_fields, request_client, respond, uploaded_file
)
from ..utils.result_utils import fail

logger = logging.getLogger(__name__)
content_bp = Blueprint('content', __name__)


def _order_items():
    """
    Read ``{"order": [{"id": ..., "order": ...}, ...]}`` (or a bare list).
    @returns: list or None when the body is not a list of id/order pairs
    """
    data = request.get_json(silent=True)
    items = data.get('order') if isinstance(data, dict) else data
    if not isinstance(items, list):
        return None
    if not all(isinstance(item, dict) and 'id' in item and 'order' in item for item in items):
        return None
    return items


# Modules

@content_bp.route('/courses/<course_id>/modules', methods=['GET'])
def list_modules(course_id):
    return respond(ModuleService(request_client()).list_modules(course_id))


@content_bp.route('/courses/<course_id>/modules', methods=['POST'])
def create_module(course_id):
    """
    Append a module to a course
    @body: {"title": str, "description": str (optional)}
    """
    data = json_body()
    missing = missing_fields(data, ['title'])
    if missing:
        return missing
    return respond(ModuleService(request_client()).create_module(course_id, data), 201)


@content_bp.route('/courses/<course_id>/modules/order', methods=['PUT'])
def reorder_modules(course_id):
    items = _order_items()
    if items is None:
        return respond(fail('Body must be a list of {id, order} entries', status=400))
    return respond(ModuleService(request_client()).reorder_modules(course_id, items))


@content_bp.route('/modules/<module_id>', methods=['PATCH'])
def update_module(module_id):
    return respond(ModuleService(request_client()).update_module(module_id, json_body()))


@content_bp.route('/modules/<module_id>', methods=['DELETE'])
def delete_module(module_id):
    return respond(ModuleService(request_client()).delete_module(module_id))


# Lessons

@content_bp.route('/modules/<module_id>/lessons', methods=['GET'])
def list_lessons(module_id):
    return respond(LessonService(request_client()).list_lessons(module_id))


@content_bp.route('/modules/<module_id>/lessons', methods=['POST'])
def create_lesson(module_id):
    """
    Append a lesson to a module
    @body: {"title": str, "type": "text"|"video", "content": str, "video_url": str}
    """
    data = json_body()
    missing = missing_fields(data, ['title'])
    if missing:
        return missing
    return respond(LessonService(request_client()).create_lesson(module_id, data), 201)


@content_bp.route('/modules/<module_id>/lessons/order', methods=['PUT'])
def reorder_lessons(module_id):
    items = _order_items()
    if items is None:
        return respond(fail('Body must be a list of {id, order} entries', status=400))
    return respond(LessonService(request_client()).reorder_lessons(module_id, items))


@content_bp.route('/lessons/<lesson_id>', methods=['GET'])
def get_lesson(lesson_id):
    return respond(LessonService(request_client()).get_lesson(lesson_id))


@content_bp.route('/lessons/<lesson_id>', methods=['PATCH'])
def update_lesson(lesson_id):
    return respond(LessonService(request_client()).update_lesson(lesson_id, json_body()))


@content_bp.route('/lessons/<lesson_id>', methods=['DELETE'])
def delete_lesson(lesson_id):
    return respond(LessonService(request_client()).delete_lesson(lesson_id))


@content_bp.route('/lessons/<lesson_id>/video', methods=['POST'])
def upload_video(lesson_id):
    """
    Upload a lesson video
    @form: video (file), replace_previous (bool, optional)
    """
    video = uploaded_file('video')
    if video is None:
        return respond(fail('No video file provided', status=400))

    result = StorageService(request_client()).upload_lesson_video(
        lesson_id,
        video.content,
        video.filename,
        video.content_type,
        replace_previous=form_flag(request.form.get('replace_previous', False))
    )
    return respond(result, 201)
