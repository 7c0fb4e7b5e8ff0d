"""Default library content: protected templates and their lines."""

import logging
from dataclasses import dataclass

from ..resolution.normalizer import extract_keywords, line_tags
from .models import Goal, Template
from .storage import LibraryStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedSession:
    id: str
    title: str
    goal: Goal
    intent: str
    lines: tuple[str, ...]


DEFAULT_SESSIONS: tuple[SeedSession, ...] = (
    SeedSession(
        id="default-sleep-1",
        title="Evening Wind Down",
        goal=Goal.SLEEP,
        intent="help me sleep better",
        lines=(
            "I let my body soften and release the day.",
            "My breath slows, and my whole system settles into safety.",
            "I trust my body to move into deep, nourishing rest.",
            "I release tension, effort, and pressure with every exhale.",
            "I am safe to let go and drift into sleep.",
            "My mind quiets, my body heals, and I sink into deep recovery.",
        ),
    ),
    SeedSession(
        id="default-focus-1",
        title="Morning Momentum",
        goal=Goal.FOCUS,
        intent="help me focus and be productive",
        lines=(
            "I start my day grounded, clear, and ready.",
            "My mind wakes up with purpose and steady energy.",
            "I move into focus with calm confidence.",
            "I take meaningful action toward what matters most.",
            "I trust my ability to create momentum today.",
            "I choose clarity, discipline, and aligned effort.",
        ),
    ),
    SeedSession(
        id="default-calm-1",
        title="Midday Reset",
        goal=Goal.CALM,
        intent="help me feel calm and peaceful",
        lines=(
            "I pause and come back to myself.",
            "My breath resets my nervous system with every slow exhale.",
            "I release what's pulling me out of balance.",
            "I return to the moment with grounded awareness.",
            "I feel calmer, softer, and more centered now.",
            "I move forward with a clearer mind and a relaxed body.",
        ),
    ),
    SeedSession(
        id="default-manifest-1",
        title="Abundance Flow",
        goal=Goal.MANIFEST,
        intent="help me manifest my goals and dreams",
        lines=(
            "I am a magnet for abundance",
            "My dreams are manifesting right now",
            "I attract success with ease and joy",
            "My desires flow to me effortlessly",
            "I am worthy of unlimited prosperity",
            "My reality reflects my highest vision",
        ),
    ),
)


def seed_library(
    storage: LibraryStorage, sessions: tuple[SeedSession, ...] = DEFAULT_SESSIONS
) -> tuple[int, int]:
    """Insert the default sessions as protected templates.

    Safe to run repeatedly: lines are matched by (text, goal) and existing
    templates are refreshed in place.

    Returns:
        Tuple of (lines created, templates created)
    """
    lines_created = 0
    templates_created = 0

    for session in sessions:
        line_ids = []
        for text in session.lines:
            tags, emotion = line_tags(text, session.intent, session.goal)
            line_id, created = storage.ensure_seed_line(
                text, session.goal, tags, emotion
            )
            lines_created += int(created)
            line_ids.append(line_id)

        existing = storage.get_template(session.id)
        storage.save_template(
            Template(
                id=session.id,
                title=session.title,
                goal=session.goal,
                intent=session.intent,
                keywords=extract_keywords(session.intent),
                line_ids=tuple(line_ids),
                is_protected=True,
            )
        )
        if existing is None:
            templates_created += 1
            logger.info(f"Created template: {session.title}")
        else:
            logger.info(f"Updated template: {session.title}")

    return lines_created, templates_created
