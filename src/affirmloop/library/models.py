"""Data models for the affirmation library."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Goal(str, Enum):
    """Goal category a session is built for."""

    SLEEP = "sleep"
    FOCUS = "focus"
    CALM = "calm"
    MANIFEST = "manifest"


@dataclass(frozen=True)
class Line:
    """A single affirmation sentence in the shared pool.

    Attributes:
        id: Unique line identifier
        text: Affirmation text, immutable once created
        goal: Goal partition the line belongs to
        tags: Theme tags used by pooled assembly
        emotion: Dominant emotion tag
        use_count: Number of sessions the line has been served in
        avg_rating: Running average of positive ratings, None until rated
        positive_ratings: Number of ratings >= 4 folded into avg_rating
        created_at: When the line was first stored
    """

    id: str
    text: str
    goal: Goal
    tags: frozenset[str]
    emotion: str
    use_count: int = 0
    avg_rating: float | None = None
    positive_ratings: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def tag_set(self) -> frozenset[str]:
        """All tags including the dominant emotion."""
        return self.tags | {self.emotion}


@dataclass(frozen=True)
class Template:
    """A named, pre-built line set bound to one goal and intent.

    Attributes:
        id: Unique template identifier
        title: Display title
        goal: Goal the template serves
        intent: Canonical intent text the template was authored for
        keywords: Keyword set derived from the intent
        line_ids: Ordered references into the line pool
        use_count: Number of exact-match resolutions served
        avg_rating: Running average of positive ratings, None until rated
        positive_ratings: Number of ratings >= 4 folded into avg_rating
        is_protected: Seed templates cannot be deleted
        created_at: When the template was stored
    """

    id: str
    title: str
    goal: Goal
    intent: str
    keywords: frozenset[str]
    line_ids: tuple[str, ...]
    use_count: int = 0
    avg_rating: float | None = None
    positive_ratings: int = 0
    is_protected: bool = False
    created_at: datetime = field(default_factory=datetime.now)
