"""
Course Model Module
Defines the course, module and lesson records as stored in Supabase
"""
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Optional


class LessonType(str, Enum):
    TEXT = 'text'
    VIDEO = 'video'

    @classmethod
    def parse(cls, value: Any) -> 'LessonType':
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid lesson type '{value}': must be 'text' or 'video'")


class _Row:
    """Shared conversion between dataclass records and table rows."""

    @classmethod
    def from_row(cls, row: Dict[str, Any]):
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in row.items() if key in names})

    def to_row(self) -> Dict[str, Any]:
        """Row for insert; unset (None) columns are left to the database defaults."""
        row = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            row[key] = value.value if isinstance(value, Enum) else value
        return row


@dataclass
class Course(_Row):
    """
    Course Model
    Owned by its creator; unpublished courses are only visible to the owner and admins
    """
    title: str
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    is_published: bool = False
    created_by: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Module(_Row):
    course_id: str
    title: str
    order: int
    description: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Lesson(_Row):
    """
    Lesson Model
    ``content`` is only kept for text lessons and ``video_url`` only for video lessons
    """
    module_id: str
    title: str
    order: int
    type: LessonType = LessonType.TEXT
    content: Optional[str] = None
    video_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.type = LessonType.parse(self.type)
        if self.type is LessonType.VIDEO:
            self.content = None
        else:
            self.video_url = None


def normalize_lesson_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply the lesson type rules to a partial update.

    Raises:
        ValueError: if ``type`` is present and not a known lesson type
    """
    normalized = dict(data)
    if 'type' not in normalized:
        return normalized

    lesson_type = LessonType.parse(normalized['type'])
    normalized['type'] = lesson_type.value
    if lesson_type is LessonType.VIDEO:
        normalized['content'] = None
    else:
        normalized['video_url'] = None
    return normalized
