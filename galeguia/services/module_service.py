"""
Module Service Module
Create, update, delete, list and reorder the modules of a course
"""
import logging
from typing import Any, Dict, List

from supabase import Client

from ..logger import custom_logger
from ..models.course import Module
from ..utils.result_utils import error_message, fail, ok
from ..utils.supabase_utils import bulk_upsert, first_row, next_order_index, order_updates, with_updated_at

logger = logging.getLogger(__name__)


class ModuleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @custom_logger.log_function_call
    def create_module(self, course_id: str, module_data: Dict[str, Any]) -> Dict:
        """
        Create a module at the end of the course.

        Args:
            course_id (str): Parent course
            module_data (Dict[str, Any]): ``title`` and optional ``description``

        Returns:
            Dict: ``module`` holding the inserted row
        """
        try:
            if not module_data.get('title'):
                return fail('Module title is required', status=400)

            order = next_order_index(self.supabase, 'modules', 'course_id', course_id)
            module = Module(
                course_id=course_id,
                title=module_data['title'],
                description=module_data.get('description'),
                order=order
            )

            response = self.supabase.table('modules').insert(module.to_row()).execute()
            return ok(module=first_row(response))
        except Exception as e:
            logger.error(f"Error creating module: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def update_module(self, module_id: str, updates: Dict[str, Any]) -> Dict:
        try:
            data = {key: value for key, value in updates.items() if key not in ('id', 'course_id')}
            response = self.supabase.table('modules')\
                .update(with_updated_at(data))\
                .eq('id', module_id)\
                .execute()

            module = first_row(response)
            if module is None:
                return fail('Module not found', status=404)
            return ok(module=module)
        except Exception as e:
            logger.error(f"Error updating module: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def delete_module(self, module_id: str) -> Dict:
        try:
            self.supabase.table('modules').delete().eq('id', module_id).execute()
            return ok()
        except Exception as e:
            logger.error(f"Error deleting module: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def reorder_modules(self, course_id: str, module_order: List[Dict[str, Any]]) -> Dict:
        """
        Write new order values for the given modules.
        @param course_id: str - parent course, kept for symmetry with the UI call
        @param module_order: list - [{'id': ..., 'order': ...}, ...]; gaps and duplicates are accepted as given
        @returns: dict - {'success': True, 'modules': [...]}
        """
        try:
            modules = bulk_upsert(self.supabase, 'modules', order_updates(module_order))
            return ok(modules=modules)
        except (KeyError, TypeError) as e:
            return fail(f"Invalid module order entry: {error_message(e)}", status=400)
        except Exception as e:
            logger.error(f"Error reordering modules of course {course_id}: {error_message(e)}")
            return fail(e)

    def list_modules(self, course_id: str) -> Dict:
        try:
            response = self.supabase.table('modules')\
                .select('*')\
                .eq('course_id', course_id)\
                .order('order')\
                .execute()
            return ok(modules=response.data or [])
        except Exception as e:
            logger.error(f"Error listing modules: {error_message(e)}")
            return fail(e)
