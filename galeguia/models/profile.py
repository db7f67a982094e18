"""
Profile and progress records
"""
from dataclasses import dataclass
from typing import Optional

from .course import _Row


@dataclass
class Profile(_Row):
    """One row per auth user; ``id`` equals the auth user id."""
    id: str
    email: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    is_admin: bool = False


@dataclass
class Progress(_Row):
    """Keyed by (user_id, lesson_id); always written with an upsert."""
    user_id: str
    lesson_id: str
    completed: Optional[bool] = None
    completed_at: Optional[str] = None
    last_position: Optional[float] = None
    updated_at: Optional[str] = None
