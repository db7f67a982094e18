"""
Enrollment Service Module
Course enrollment through the ``enroll-user`` edge function, lesson progress
upserts and progress reads through remote functions
"""
import logging
from typing import Dict, Optional

from supabase import Client

from ..logger import custom_logger
from ..models.profile import Progress
from ..utils.result_utils import NOT_AUTHENTICATED, error_message, fail, ok
from ..utils.supabase_utils import utc_now_iso
from .auth_service import current_user

logger = logging.getLogger(__name__)

ENROLL_FUNCTION = 'enroll-user'
ALREADY_ENROLLED = 'User already enrolled'

PROGRESS_WITH_LESSON = """
    lesson_id,
    completed,
    completed_at,
    last_position,
    lessons:lesson_id!inner (
        id,
        title,
        module_id,
        modules:module_id!inner (
            id,
            title,
            course_id
        )
    )
"""


class EnrollmentService:
    """
    Service class for enrollment and progress tracking
    """
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @custom_logger.log_function_call
    def enroll_in_course(self, course_id: str) -> Dict:
        """
        Enroll the caller through the edge function, which checks that the
        course exists, is published and that the caller is not enrolled yet.

        Returns:
            Dict: ``data`` with the function reply and ``already_enrolled``;
            failures carry the function's HTTP ``status``
        """
        if not course_id:
            return fail('Course ID is required', status=400)

        try:
            data = self.supabase.functions.invoke(ENROLL_FUNCTION, invoke_options={
                'body': {'courseId': course_id},
                'responseType': 'json'
            })
            already_enrolled = isinstance(data, dict) and data.get('message') == ALREADY_ENROLLED
            return ok(data=data, already_enrolled=already_enrolled)
        except Exception as e:
            logger.error(f"Error enrolling in course: {error_message(e)}")
            status = getattr(e, 'status', None)
            if isinstance(status, int) and status >= 400:
                return fail(e, status=status)
            return fail(e)

    @custom_logger.log_function_call
    def get_user_enrolled_courses(self, user_id: str) -> Dict:
        try:
            response = self.supabase.rpc('get_user_courses_with_progress', {'p_user_id': user_id}).execute()
            return ok(courses=response.data or [])
        except Exception as e:
            logger.error(f"Error fetching user enrolled courses: {error_message(e)}")
            return fail(e)

    def _upsert_progress(self, progress: Progress) -> Dict:
        response = self.supabase.table('progress')\
            .upsert(progress.to_row(), on_conflict='user_id,lesson_id')\
            .execute()
        return ok(data=response.data or [])

    @custom_logger.log_function_call
    def mark_lesson_as_completed(self, lesson_id: str, last_position: Optional[float] = None) -> Dict:
        try:
            user = current_user(self.supabase)
            if not user:
                return fail(NOT_AUTHENTICATED)

            return self._upsert_progress(Progress(
                user_id=user.id,
                lesson_id=lesson_id,
                completed=True,
                completed_at=utc_now_iso(),
                last_position=last_position
            ))
        except Exception as e:
            logger.error(f"Error marking lesson as completed: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def update_lesson_progress(self, lesson_id: str, current_position: float) -> Dict:
        """Store the video playhead; concurrent writers simply overwrite each other."""
        try:
            user = current_user(self.supabase)
            if not user:
                return fail(NOT_AUTHENTICATED)

            return self._upsert_progress(Progress(
                user_id=user.id,
                lesson_id=lesson_id,
                last_position=current_position,
                updated_at=utc_now_iso()
            ))
        except Exception as e:
            logger.error(f"Error updating lesson progress: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_next_lesson(self, course_id: str) -> Dict:
        try:
            user = current_user(self.supabase)
            if not user:
                return fail(NOT_AUTHENTICATED)

            response = self.supabase.rpc('get_next_lesson_for_user', {
                'p_user_id': user.id,
                'p_course_id': course_id
            }).execute()

            rows = response.data or []
            if isinstance(rows, dict):
                return ok(lesson=rows)
            return ok(lesson=rows[0] if rows else None)
        except Exception as e:
            logger.error(f"Error getting next lesson: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def get_course_progress(self, course_id: str) -> Dict:
        """
        Completion percentage from ``get_course_completion`` plus the caller's
        progress rows for lessons of the course.
        """
        try:
            user = current_user(self.supabase)
            if not user:
                return fail(NOT_AUTHENTICATED)

            completion_response = self.supabase.rpc('get_course_completion', {
                'course_uuid': course_id,
                'user_uuid': user.id
            }).execute()

            progress_response = self.supabase.table('progress')\
                .select(PROGRESS_WITH_LESSON)\
                .eq('user_id', user.id)\
                .eq('lessons.modules.course_id', course_id)\
                .execute()

            return ok(
                completion=completion_response.data or 0,
                progress=progress_response.data or []
            )
        except Exception as e:
            logger.error(f"Error getting course progress: {error_message(e)}")
            return fail(e)
