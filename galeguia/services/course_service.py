"""
Course Service Module
Handles course CRUD and course reads, both as plain table selects and
through the row-level-checked remote functions
"""
from typing import Any, Dict, List, Optional
import logging

from supabase import Client

from ..logger import custom_logger
from ..models.course import Course
from ..utils.result_utils import NOT_AUTHENTICATED, error_message, fail, ok
from ..utils.supabase_utils import first_row, with_updated_at
from .auth_service import current_user

logger = logging.getLogger(__name__)

COURSE_LIST_COLUMNS = 'id, title, description, cover_image_url, is_published, created_at, created_by, updated_at'


def attach_lessons(modules: List[Dict], lessons: List[Dict]) -> List[Dict]:
    """
    Nest lessons under their modules, both sorted ascending by ``order``.
    Returns new module dicts; the inputs are left untouched.
    """
    by_module = {}
    for lesson in lessons:
        by_module.setdefault(lesson.get('module_id'), []).append(lesson)

    nested = []
    for module in sorted(modules, key=lambda m: m.get('order') or 0):
        children = sorted(by_module.get(module['id'], []), key=lambda l: l.get('order') or 0)
        nested.append({**module, 'lessons': children})
    return nested


class CourseService:
    """
    Service class for handling course-related operations
    """
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @custom_logger.log_function_call
    def get_published_courses(self) -> Dict:
        try:
            response = self.supabase.table('courses')\
                .select('id, title, description, cover_image_url, created_at')\
                .eq('is_published', True)\
                .order('created_at', desc=True)\
                .execute()
            return ok(courses=response.data or [])
        except Exception as e:
            logger.error(f"Error fetching published courses: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_course_with_content(self, course_id: str) -> Dict:
        """
        Get a course with its modules and their lessons
        @param course_id: str - course primary key
        @returns: dict - {'success': True, 'course': {..., 'modules': [{..., 'lessons': [...]}]}}
        """
        try:
            course_response = self.supabase.table('courses')\
                .select('*')\
                .eq('id', course_id)\
                .single()\
                .execute()

            modules_response = self.supabase.table('modules')\
                .select('*')\
                .eq('course_id', course_id)\
                .order('order')\
                .execute()
            modules = modules_response.data or []

            lessons = []
            if modules:
                lessons_response = self.supabase.table('lessons')\
                    .select('*')\
                    .in_('module_id', [module['id'] for module in modules])\
                    .order('order')\
                    .execute()
                lessons = lessons_response.data or []

            course = dict(course_response.data)
            course['modules'] = attach_lessons(modules, lessons)
            return ok(course=course)
        except Exception as e:
            logger.error(f"Error fetching course with content: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def create_course(self, course_data: Dict[str, Any]) -> Dict:
        """
        Create a new course owned by the current user.
        New courses start unpublished unless ``is_published`` is given.
        """
        try:
            user = current_user(self.supabase)
            if not user:
                return fail(NOT_AUTHENTICATED)

            if not course_data.get('title'):
                return fail('Course title is required', status=400)

            data = dict(course_data)
            data['created_by'] = user.id
            data.setdefault('is_published', False)
            course = Course.from_row(data)

            response = self.supabase.table('courses').insert(course.to_row()).execute()
            return ok(course=first_row(response))
        except Exception as e:
            logger.error(f"Error creating course: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def create_course_secure(self, title: str, description: Optional[str] = None, is_published: bool = False) -> Dict:
        """Create a course through the ``create_course_secure`` remote function."""
        try:
            user = current_user(self.supabase)
            if not user:
                return fail(NOT_AUTHENTICATED)
            if not title:
                return fail('Course title is required', status=400)

            response = self.supabase.rpc('create_course_secure', {
                'p_title': title,
                'p_description': description,
                'p_is_published': is_published,
                'p_creator_id': user.id
            }).execute()
            return ok(course=first_row(response))
        except Exception as e:
            logger.error(f"Error creating course via rpc: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def update_course(self, course_id: str, updates: Dict[str, Any]) -> Dict:
        try:
            data = {key: value for key, value in updates.items() if key not in ('id', 'created_by')}
            response = self.supabase.table('courses')\
                .update(with_updated_at(data))\
                .eq('id', course_id)\
                .execute()

            course = first_row(response)
            if course is None:
                return fail('Course not found', status=404)
            return ok(course=course)
        except Exception as e:
            logger.error(f"Error updating course: {error_message(e)}")
            return fail(e)

    def toggle_course_published(self, course_id: str, is_published: bool) -> Dict:
        return self.update_course(course_id, {'is_published': bool(is_published)})

    @custom_logger.log_function_call
    def delete_course(self, course_id: str) -> Dict:
        # modules, lessons and enrollments are removed by the database cascade
        try:
            self.supabase.table('courses').delete().eq('id', course_id).execute()
            return ok()
        except Exception as e:
            logger.error(f"Error deleting course: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_created_courses(self) -> Dict:
        try:
            user = current_user(self.supabase)
            if not user:
                return fail(NOT_AUTHENTICATED)

            response = self.supabase.table('courses')\
                .select('id, title, description, cover_image_url, is_published, created_at, modules:modules(count)')\
                .eq('created_by', user.id)\
                .order('created_at', desc=True)\
                .execute()
            return ok(courses=response.data or [])
        except Exception as e:
            logger.error(f"Error getting created courses: {error_message(e)}")
            return fail(e)

    def list_courses(self) -> Dict:
        """Every course the caller can see under row-level security, newest first."""
        try:
            response = self.supabase.table('courses')\
                .select(COURSE_LIST_COLUMNS)\
                .order('created_at', desc=True)\
                .execute()
            return ok(courses=response.data or [])
        except Exception as e:
            logger.error(f"Error listing courses: {error_message(e)}")
            return fail(e)

    # Remote-function reads: authorization is evaluated server-side

    def _rpc_rows(self, function: str, params: Dict[str, Any]) -> List[Dict]:
        response = self.supabase.rpc(function, params).execute()
        data = response.data
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    @custom_logger.log_function_call
    def get_accessible_courses(self, user_id: str) -> Dict:
        try:
            courses = self._rpc_rows('get_user_accessible_courses', {'p_user_id': user_id})
            return ok(courses=courses)
        except Exception as e:
            logger.error(f"Error fetching accessible courses: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_course_by_id(self, course_id: str, user_id: str) -> Dict:
        try:
            rows = self._rpc_rows('get_course_by_id', {'p_course_id': course_id, 'p_user_id': user_id})
            if not rows:
                return fail('Course not found', status=404)
            return ok(course=rows[0])
        except Exception as e:
            logger.error(f"Error fetching course {course_id}: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_course_modules(self, course_id: str, user_id: str) -> Dict:
        try:
            modules = self._rpc_rows('get_course_modules', {'p_course_id': course_id, 'p_user_id': user_id})
            return ok(modules=sorted(modules, key=lambda m: m.get('order') or 0))
        except Exception as e:
            logger.error(f"Error fetching modules for course {course_id}: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_module_lessons(self, module_id: str, user_id: str) -> Dict:
        try:
            lessons = self._rpc_rows('get_module_lessons', {'p_module_id': module_id, 'p_user_id': user_id})
            return ok(lessons=sorted(lessons, key=lambda l: l.get('order') or 0))
        except Exception as e:
            logger.error(f"Error fetching lessons for module {module_id}: {error_message(e)}")
            return fail(e)
