"""
Lesson Service Module
Create, update, delete, list and reorder the lessons of a module
"""
import logging
from typing import Any, Dict, List

from supabase import Client

from ..logger import custom_logger
from ..models.course import Lesson, normalize_lesson_fields
from ..utils.result_utils import error_message, fail, ok
from ..utils.supabase_utils import bulk_upsert, first_row, next_order_index, order_updates, with_updated_at

logger = logging.getLogger(__name__)


class LessonService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @custom_logger.log_function_call
    def create_lesson(self, module_id: str, lesson_data: Dict[str, Any]) -> Dict:
        """
        Create a lesson at the end of the module.

        Args:
            module_id (str): Parent module
            lesson_data (Dict[str, Any]): ``title``, ``type`` ('text' or 'video'),
                ``content`` for text lessons, ``video_url`` for video lessons

        Returns:
            Dict: ``lesson`` holding the inserted row
        """
        if not lesson_data.get('title'):
            return fail('Lesson title is required', status=400)

        try:
            lesson = Lesson(
                module_id=module_id,
                title=lesson_data['title'],
                type=lesson_data.get('type', 'text'),
                content=lesson_data.get('content'),
                video_url=lesson_data.get('video_url'),
                order=0
            )
        except ValueError as e:
            return fail(str(e), status=400)

        try:
            lesson.order = next_order_index(self.supabase, 'lessons', 'module_id', module_id)
            response = self.supabase.table('lessons').insert(lesson.to_row()).execute()
            return ok(lesson=first_row(response))
        except Exception as e:
            logger.error(f"Error creating lesson: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def update_lesson(self, lesson_id: str, updates: Dict[str, Any]) -> Dict:
        try:
            data = normalize_lesson_fields(
                {key: value for key, value in updates.items() if key not in ('id', 'module_id')}
            )
        except ValueError as e:
            return fail(str(e), status=400)

        try:
            response = self.supabase.table('lessons')\
                .update(with_updated_at(data))\
                .eq('id', lesson_id)\
                .execute()

            lesson = first_row(response)
            if lesson is None:
                return fail('Lesson not found', status=404)
            return ok(lesson=lesson)
        except Exception as e:
            logger.error(f"Error updating lesson: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def delete_lesson(self, lesson_id: str) -> Dict:
        try:
            self.supabase.table('lessons').delete().eq('id', lesson_id).execute()
            return ok()
        except Exception as e:
            logger.error(f"Error deleting lesson: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def reorder_lessons(self, module_id: str, lesson_order: List[Dict[str, Any]]) -> Dict:
        """Same contract as ``ModuleService.reorder_modules``, for the lessons of one module."""
        try:
            lessons = bulk_upsert(self.supabase, 'lessons', order_updates(lesson_order))
            return ok(lessons=lessons)
        except (KeyError, TypeError) as e:
            return fail(f"Invalid lesson order entry: {error_message(e)}", status=400)
        except Exception as e:
            logger.error(f"Error reordering lessons of module {module_id}: {error_message(e)}")
            return fail(e)

    def get_lesson(self, lesson_id: str) -> Dict:
        try:
            response = self.supabase.table('lessons')\
                .select('*')\
                .eq('id', lesson_id)\
                .single()\
                .execute()
            return ok(lesson=response.data)
        except Exception as e:
            logger.error(f"Error loading lesson: {error_message(e)}")
            return fail(e)

    def list_lessons(self, module_id: str) -> Dict:
        try:
            response = self.supabase.table('lessons')\
                .select('*')\
                .eq('module_id', module_id)\
                .order('order')\
                .execute()
            return ok(lessons=response.data or [])
        except Exception as e:
            logger.error(f"Error listing lessons: {error_message(e)}")
            return fail(e)
