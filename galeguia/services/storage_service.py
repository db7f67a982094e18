"""
Storage Service Module
Uploads course covers and lesson videos to the course materials bucket and
records their public URLs on the owning rows.

Each upload is three sequential calls (upload, public URL, row update) with
no transaction; a failed row update leaves the stored object behind.
"""
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import unquote, urlsplit

from supabase import Client
from werkzeug.utils import secure_filename

from ..config import Config
from ..logger import custom_logger
from ..utils.result_utils import error_message, fail, ok
from ..utils.supabase_utils import first_row, with_updated_at

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    content: bytes
    filename: str
    content_type: Optional[str] = None


def _timestamp_ms(timestamp: Optional[int]) -> int:
    return timestamp if timestamp is not None else int(time.time() * 1000)


def _object_name(filename: str, timestamp: Optional[int]) -> str:
    return f"{_timestamp_ms(timestamp)}_{secure_filename(filename) or 'upload'}"


def course_cover_path(course_id: str, filename: str, timestamp: Optional[int] = None) -> str:
    """``course_covers/{course_id}/{ms}_{filename}``"""
    return f"course_covers/{course_id}/{_object_name(filename, timestamp)}"


def lesson_video_path(
    course_id: str,
    module_id: str,
    lesson_id: str,
    filename: str,
    timestamp: Optional[int] = None
) -> str:
    """``courses/{course_id}/modules/{module_id}/lessons/{lesson_id}/{ms}_{filename}``"""
    return (
        f"courses/{course_id}/modules/{module_id}/lessons/{lesson_id}/"
        f"{_object_name(filename, timestamp)}"
    )


def object_path_from_public_url(public_url: Optional[str], bucket: str) -> Optional[str]:
    """
    Recover the object path from a public URL of ``bucket``.
    @returns: str or None when the URL does not point into the bucket
    """
    if not public_url:
        return None
    marker = f"/object/public/{bucket}/"
    path = urlsplit(public_url).path
    if marker not in path:
        return None
    return unquote(path.split(marker, 1)[1]) or None


class StorageService:
    def __init__(self, supabase: Client, bucket: Optional[str] = None):
        self.supabase = supabase
        self.bucket = bucket or Config.STORAGE_BUCKET

    def _bucket(self):
        return self.supabase.storage.from_(self.bucket)

    def upload_file(self, path: str, file_bytes: bytes, content_type: Optional[str] = None) -> str:
        """
        Upload (overwriting) and return the public URL.
        Storage errors propagate to the caller.
        """
        file_options = {
            'cache-control': Config.STORAGE_CACHE_CONTROL,
            'upsert': 'true'
        }
        if content_type:
            file_options['content-type'] = content_type

        self._bucket().upload(path=path, file=file_bytes, file_options=file_options)
        logger.info(f"Uploaded {len(file_bytes)} bytes to {self.bucket}/{path}")
        return self._bucket().get_public_url(path)

    def remove_previous(self, public_url: Optional[str]) -> None:
        """Best-effort delete of the object behind a previous public URL; errors are only logged."""
        path = object_path_from_public_url(public_url, self.bucket)
        if not path:
            return
        try:
            self._bucket().remove([path])
            logger.info(f"Removed previous object {self.bucket}/{path}")
        except Exception as e:
            logger.warning(f"Could not remove previous object {path}: {error_message(e)}")

    @custom_logger.log_function_call
    def upload_course_cover_image(
        self,
        course_id: str,
        file_bytes: bytes,
        filename: str,
        content_type: Optional[str] = None,
        replace_previous: bool = False
    ) -> Dict:
        """
        Upload a course cover and store its public URL on the course.

        Returns:
            Dict: ``course`` (updated row) and ``publicUrl``
        """
        try:
            if replace_previous:
                existing = self.supabase.table('courses')\
                    .select('id, cover_image_url')\
                    .eq('id', course_id)\
                    .single()\
                    .execute()
                self.remove_previous((existing.data or {}).get('cover_image_url'))

            public_url = self.upload_file(course_cover_path(course_id, filename), file_bytes, content_type)

            response = self.supabase.table('courses')\
                .update(with_updated_at({'cover_image_url': public_url}))\
                .eq('id', course_id)\
                .execute()

            return ok(course=first_row(response), publicUrl=public_url)
        except Exception as e:
            logger.error(f"Error uploading course cover image: {error_message(e)}")
            return fail(e)

    @custom_logger.log_function_call
    def upload_lesson_video(
        self,
        lesson_id: str,
        file_bytes: bytes,
        filename: str,
        content_type: Optional[str] = None,
        replace_previous: bool = False
    ) -> Dict:
        """
        Upload a lesson video under its course/module path and turn the
        lesson into a video lesson pointing at it.

        Returns:
            Dict: ``lesson`` (updated row) and ``publicUrl``
        """
        try:
            lesson = self.supabase.table('lessons')\
                .select('id, module_id, video_url')\
                .eq('id', lesson_id)\
                .single()\
                .execute().data

            module = self.supabase.table('modules')\
                .select('id, course_id')\
                .eq('id', lesson['module_id'])\
                .single()\
                .execute().data

            if replace_previous:
                self.remove_previous(lesson.get('video_url'))

            path = lesson_video_path(module['course_id'], module['id'], lesson_id, filename)
            public_url = self.upload_file(path, file_bytes, content_type)

            response = self.supabase.table('lessons')\
                .update(with_updated_at({'video_url': public_url, 'type': 'video', 'content': None}))\
                .eq('id', lesson_id)\
                .execute()

            return ok(lesson=first_row(response), publicUrl=public_url)
        except Exception as e:
            logger.error(f"Error uploading lesson video: {error_message(e)}")
            return fail(e)
