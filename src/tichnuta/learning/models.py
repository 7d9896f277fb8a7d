"""Data models for lesson access and progress."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tichnuta.site_store import Lesson, LessonProgress


@dataclass(frozen=True)
class Viewer:
    """Who is asking for course content.

    Anonymous visitors have neither ID nor e-mail. Access granted by the back
    office is keyed by e-mail; purchases are keyed by user ID.
    """

    user_id: str | None = None
    email: str | None = None
    is_admin: bool = False


@dataclass
class LessonView:
    """A lesson as shown to one viewer.

    A locked lesson is listed, but its video and slides are withheld.
    """

    lesson: Lesson
    locked: bool
    progress: LessonProgress | None = None
