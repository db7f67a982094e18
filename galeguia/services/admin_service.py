"""
Admin Service Module
Privilege check and cross-user queries reserved for admins.

Admin status is re-read from ``profiles.is_admin`` before every privileged
operation; nothing is cached between calls.
"""
import logging
from typing import Any, Dict

from supabase import Client

from ..logger import custom_logger
from ..models.profile import Profile
from ..utils.result_utils import UNAUTHORIZED_ADMIN, error_message, fail, ok
from ..utils.supabase_utils import first_row, with_updated_at
from .auth_service import current_user

logger = logging.getLogger(__name__)

COURSE_ADMIN_COLUMNS = """
    id,
    title,
    description,
    cover_image_url,
    is_published,
    created_at,
    updated_at,
    created_by,
    creator:created_by(id, email, username)
"""


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def is_current_user_admin(self) -> bool:
        """
        Check the is_admin flag on the caller's profile.
        @returns: bool - False when signed out or on any lookup error
        """
        try:
            user = current_user(self.supabase)
            if not user:
                return False

            response = self.supabase.table('profiles')\
                .select('id, is_admin')\
                .eq('id', user.id)\
                .single()\
                .execute()

            if not response.data:
                return False
            return Profile.from_row(response.data).is_admin is True
        except Exception as e:
            logger.error(f"Error checking admin status: {error_message(e)}")
            return False

    @custom_logger.log_function_call
    def get_all_courses(self) -> Dict:
        """All courses with creator info and module counts, newest first."""
        if not self.is_current_user_admin():
            return fail(UNAUTHORIZED_ADMIN)

        try:
            response = self.supabase.table('courses')\
                .select(COURSE_ADMIN_COLUMNS + ', modules:modules(count)')\
                .order('created_at', desc=True)\
                .execute()
            return ok(courses=response.data or [])
        except Exception as e:
            logger.error(f"Error fetching all courses: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_user_statistics(self) -> Dict:
        """
        Platform totals from exact head counts.

        Returns:
            Dict: ``stats`` with totalUsers, totalCourses, publishedCourses
            and totalEnrollments
        """
        if not self.is_current_user_admin():
            return fail(UNAUTHORIZED_ADMIN)

        try:
            total_users = self._count('profiles')
            total_courses = self._count('courses')
            published_courses = self._count('courses', is_published=True)
            total_enrollments = self._count('enrollments')

            return ok(stats={
                'totalUsers': total_users,
                'totalCourses': total_courses,
                'publishedCourses': published_courses,
                'totalEnrollments': total_enrollments
            })
        except Exception as e:
            logger.error(f"Error fetching user statistics: {error_message(e)}")
            return fail(e)

    def _count(self, table: str, **filters: Any) -> int:
        query = self.supabase.table(table).select('*', count='exact', head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.execute().count or 0

    @custom_logger.log_function_call
    def get_course_with_enrolled_users(self, course_id: str) -> Dict:
        if not self.is_current_user_admin():
            return fail(UNAUTHORIZED_ADMIN)

        try:
            course_response = self.supabase.table('courses')\
                .select(COURSE_ADMIN_COLUMNS)\
                .eq('id', course_id)\
                .single()\
                .execute()

            enrollments_response = self.supabase.table('enrollments')\
                .select('id, enrolled_at, user_id, user:user_id(id, email, username, full_name)')\
                .eq('course_id', course_id)\
                .execute()

            course = dict(course_response.data)
            course['enrollments'] = enrollments_response.data or []
            return ok(course=course)
        except Exception as e:
            logger.error(f"Error fetching course with enrolled users: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def update_any_course(self, course_id: str, updates: Dict[str, Any]) -> Dict:
        if not self.is_current_user_admin():
            return fail(UNAUTHORIZED_ADMIN)

        try:
            response = self.supabase.table('courses')\
                .update(with_updated_at(updates))\
                .eq('id', course_id)\
                .execute()

            course = first_row(response)
            if course is None:
                return fail('Course not found', status=404)
            return ok(course=course)
        except Exception as e:
            logger.error(f"Error updating course as admin: {error_message(e)}")
            return fail(e)
