"""
Dashboard Service Module
The course editor workflow of the admin dashboard: list the caller's courses,
open one, and save or delete courses, modules and lessons. UI state lives in
an explicit ``DashboardState``; its lists are replaced wholesale on every reload.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from supabase import Client

from ..config import Config
from ..utils.result_utils import NOT_AUTHENTICATED, error_message, fail, ok
from .admin_service import AdminService
from .auth_service import AuthService, to_plain
from .course_service import CourseService, attach_lessons
from .lesson_service import LessonService
from .module_service import ModuleService
from .storage_service import StorageService, UploadedFile

logger = logging.getLogger(__name__)


@dataclass
class DashboardState:
    current_user: Optional[Dict[str, Any]] = None
    is_admin: bool = False
    current_course_id: Optional[str] = None
    user_courses: List[Dict[str, Any]] = field(default_factory=list)
    current_course_modules: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def user_id(self) -> Optional[str]:
        return self.current_user.get('id') if self.current_user else None

    def reset(self):
        self.current_user = None
        self.is_admin = False
        self.current_course_id = None
        self.user_courses = []
        self.current_course_modules = []


class CourseDashboard:
    def __init__(self, supabase: Client, secure_reads: Optional[bool] = None, state: Optional[DashboardState] = None):
        self.supabase = supabase
        self.secure_reads = Config.USE_SECURE_RPC if secure_reads is None else secure_reads
        self.state = state or DashboardState()

        self.auth = AuthService(supabase)
        self.admin = AdminService(supabase)
        self.courses = CourseService(supabase)
        self.modules = ModuleService(supabase)
        self.lessons = LessonService(supabase)
        self.storage = StorageService(supabase)

    # Session

    def bind_auth(self):
        """Follow sign-in / sign-out notifications from the auth client."""
        return self.auth.on_auth_state_change(self.handle_auth_event)

    def handle_auth_event(self, event, session):
        if event == 'SIGNED_IN' and session:
            self.state.current_user = to_plain(session.user)
        elif event == 'SIGNED_OUT':
            self.state.reset()

    def check_session(self) -> Dict:
        result = self.auth.get_session()
        if not result['success'] or not result['session']:
            self.state.reset()
            return ok(authenticated=False) if result['success'] else result

        self.state.current_user = result['session'].get('user')
        return ok(authenticated=True, user=self.state.current_user)

    def _ensure_user(self) -> bool:
        if self.state.current_user:
            return True
        result = self.auth.get_current_user()
        if result['success'] and result['user']:
            self.state.current_user = result['user']
            return True
        return False

    # Courses

    def load_user_courses(self) -> Dict:
        """
        Refresh ``state.user_courses``: every visible course with its module
        count and, for admins, the creator profile.
        """
        if not self._ensure_user():
            return fail(NOT_AUTHENTICATED)

        self.state.is_admin = self.admin.is_current_user_admin()

        if self.secure_reads:
            result = self.courses.get_accessible_courses(self.state.user_id)
        else:
            result = self.courses.list_courses()
        if not result['success']:
            return result

        courses = [dict(course) for course in result['courses']]
        try:
            self._annotate_courses(courses)
        except Exception as e:
            logger.error(f"Error loading courses: {error_message(e)}")
            return fail(e)

        self.state.user_courses = courses
        return ok(courses=courses, is_admin=self.state.is_admin)

    def _annotate_courses(self, courses: List[Dict[str, Any]]) -> None:
        if not courses:
            return

        course_ids = [course['id'] for course in courses]
        modules = self.supabase.table('modules')\
            .select('course_id, id')\
            .in_('course_id', course_ids)\
            .execute().data or []

        module_counts = {}
        for module in modules:
            module_counts[module['course_id']] = module_counts.get(module['course_id'], 0) + 1
        for course in courses:
            course['modules'] = [{'count': module_counts.get(course['id'], 0)}]

        if not self.state.is_admin:
            return

        creator_ids = list({course.get('created_by') for course in courses if course.get('created_by')})
        if not creator_ids:
            return
        creators = self.supabase.table('profiles')\
            .select('id, username, full_name')\
            .in_('id', creator_ids)\
            .execute().data or []
        creator_map = {creator['id']: creator for creator in creators}
        for course in courses:
            course['creator'] = creator_map.get(course.get('created_by'))

    def open_course(self, course_id: str) -> Dict:
        if not self._ensure_user():
            return fail(NOT_AUTHENTICATED)

        if self.secure_reads:
            result = self.courses.get_course_by_id(course_id, self.state.user_id)
        else:
            result = self.courses.get_course_with_content(course_id)
        if not result['success']:
            return result

        course = dict(result['course'])
        course.pop('modules', None)
        creator_id = course.get('created_by')
        if creator_id and creator_id != self.state.user_id and self.admin.is_current_user_admin():
            profile = self.auth.get_profile(creator_id)
            course['creator'] = profile.get('data') if profile['success'] else None

        self.state.current_course_id = course_id
        modules = self.load_course_modules(course_id)
        if not modules['success']:
            return modules
        return ok(course=course, modules=modules['modules'])

    def load_course_modules(self, course_id: str) -> Dict:
        """Refresh ``state.current_course_modules`` with modules and their sorted lessons."""
        try:
            if self.secure_reads:
                result = self.courses.get_course_modules(course_id, self.state.user_id)
                if not result['success']:
                    return result
                modules = result['modules']
                lessons = []
                for module in modules:
                    lesson_result = self.courses.get_module_lessons(module['id'], self.state.user_id)
                    if not lesson_result['success']:
                        return lesson_result
                    lessons.extend(lesson_result['lessons'])
            else:
                result = self.modules.list_modules(course_id)
                if not result['success']:
                    return result
                modules = result['modules']
                lessons = []
                if modules:
                    lessons = self.supabase.table('lessons')\
                        .select('id, title, type, order, module_id')\
                        .in_('module_id', [module['id'] for module in modules])\
                        .execute().data or []
        except Exception as e:
            logger.error(f"Error loading modules: {error_message(e)}")
            return fail(e)

        self.state.current_course_modules = attach_lessons(modules, lessons)
        return ok(modules=self.state.current_course_modules)

    def save_course(self, title: str, description: Optional[str] = None, is_published: bool = False,
                    cover: Optional[UploadedFile] = None) -> Dict:
        """
        Create the course, or update the open one, then upload the cover if given.
        The course list is reloaded afterwards.
        """
        if not self._ensure_user():
            return fail(NOT_AUTHENTICATED)

        fields = {'title': title, 'description': description, 'is_published': bool(is_published)}
        if self.state.current_course_id:
            result = self.courses.update_course(self.state.current_course_id, fields)
        elif self.secure_reads:
            result = self.courses.create_course_secure(title, description, bool(is_published))
        else:
            result = self.courses.create_course(fields)
        if not result['success']:
            return result

        course = result['course']
        self.state.current_course_id = course['id']

        if cover is not None:
            upload = self.storage.upload_course_cover_image(
                course['id'], cover.content, cover.filename, cover.content_type
            )
            if not upload['success']:
                return upload
            course = upload['course'] or dict(course, cover_image_url=upload['publicUrl'])

        self.load_user_courses()
        return ok(course=course)

    def delete_course(self) -> Dict:
        if not self.state.current_course_id:
            return fail('No course selected', status=400)

        result = self.courses.delete_course(self.state.current_course_id)
        if not result['success']:
            return result

        self.state.current_course_id = None
        self.state.current_course_modules = []
        self.load_user_courses()
        return ok()

    # Modules and lessons

    def save_module(self, title: str, description: Optional[str] = None, module_id: Optional[str] = None) -> Dict:
        if module_id:
            result = self.modules.update_module(module_id, {'title': title, 'description': description})
        elif not self.state.current_course_id:
            return fail('No course selected', status=400)
        else:
            result = self.modules.create_module(
                self.state.current_course_id, {'title': title, 'description': description}
            )
        if not result['success']:
            return result

        if self.state.current_course_id:
            self.load_course_modules(self.state.current_course_id)
        return result

    def delete_module(self, module_id: str) -> Dict:
        result = self.modules.delete_module(module_id)
        if result['success'] and self.state.current_course_id:
            self.load_course_modules(self.state.current_course_id)
        return result

    def save_lesson(self, module_id: str, title: str, lesson_type: str = 'text', content: Optional[str] = None,
                    video: Optional[UploadedFile] = None, lesson_id: Optional[str] = None) -> Dict:
        """
        Create or update a lesson; a video file is uploaded only for video lessons.
        """
        fields = {'title': title, 'type': lesson_type, 'content': content if lesson_type == 'text' else None}
        if lesson_id:
            result = self.lessons.update_lesson(lesson_id, fields)
        else:
            result = self.lessons.create_lesson(module_id, fields)
        if not result['success']:
            return result

        lesson = result['lesson']
        if lesson_type == 'video' and video is not None:
            upload = self.storage.upload_lesson_video(
                lesson['id'], video.content, video.filename, video.content_type
            )
            if not upload['success']:
                return upload
            lesson = upload['lesson'] or dict(lesson, video_url=upload['publicUrl'])

        if self.state.current_course_id:
            self.load_course_modules(self.state.current_course_id)
        return ok(lesson=lesson)

    def delete_lesson(self, lesson_id: str) -> Dict:
        result = self.lessons.delete_lesson(lesson_id)
        if result['success'] and self.state.current_course_id:
            self.load_course_modules(self.state.current_course_id)
        return result
