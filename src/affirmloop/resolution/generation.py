"""Tier 3: paid generation with a static fallback."""

import asyncio
import logging
import re

from ..errors import GenerationError
from ..generation.base import TextGenerator
from ..generation.prompts import build_prompt
from ..library.models import Goal
from ..library.storage import LibraryStorage
from .models import FallbackOutcome, GeneratedOutcome
from .normalizer import NormalizedIntent, line_tags

logger = logging.getLogger(__name__)

MAX_GENERATED_LINES = 10

_NUMBERING = re.compile(r"^\d+[.)]\s*")
_BULLET = re.compile(r"^[-*•]\s*")
_QUOTES = "\"'“”‘’"

FALLBACK_LINES: dict[Goal, tuple[str, ...]] = {
    Goal.SLEEP: (
        "I am safe and ready to rest",
        "My body knows how to relax deeply",
        "I deserve peaceful and restorative sleep",
        "My mind is calm and quiet",
        "I release all tension from my day",
        "I trust my body to restore itself",
    ),
    Goal.FOCUS: (
        "I am focused and in control",
        "My mind is clear and sharp",
        "I accomplish tasks with ease and confidence",
        "I am capable of great things",
        "My energy flows toward my goals",
        "I work with purpose and clarity",
    ),
    Goal.CALM: (
        "I am at peace with this moment",
        "My breath brings me back to center",
        "I am safe and supported right now",
        "I release what I cannot control",
        "My heart is open and at ease",
        "I trust the journey I am on",
    ),
    Goal.MANIFEST: (
        "I am a powerful creator of my reality",
        "My dreams are becoming my reality now",
        "I attract abundance with ease and joy",
        "My goals are aligning perfectly for me",
        "I am worthy of all I desire",
        "My success is inevitable and natural",
    ),
}


def fallback_lines(goal: Goal) -> tuple[tuple[str, str], ...]:
    """Static (id, text) pairs served when generation fails."""
    goal = Goal(goal)
    return tuple(
        (f"fallback-{goal.value}-{n}", text)
        for n, text in enumerate(FALLBACK_LINES[goal], start=1)
    )


def parse_response(raw_lines: list[str], count: int) -> list[str]:
    """Clean generator output into affirmation lines.

    Strips numbering, bullets and surrounding quotes, drops empty and
    repeated lines, and keeps at most ten.

    Raises:
        GenerationError: If fewer than count usable lines remain
    """
    lines: list[str] = []
    for raw in raw_lines:
        line = raw.strip()
        line = _NUMBERING.sub("", line)
        line = _BULLET.sub("", line)
        line = line.strip().strip(_QUOTES).strip()
        if line and line not in lines:
            lines.append(line)
        if len(lines) == MAX_GENERATED_LINES:
            break

    if len(lines) < count:
        raise GenerationError(
            f"Malformed generation response: {len(lines)} usable lines, "
            f"expected at least {count}"
        )
    return lines


class GenerationFallback:
    """Generates a bespoke line set and grows the pool with it.

    The only writer of new pool lines. Any GenerationError, including a
    timeout, degrades to the goal's static line set.
    """

    def __init__(
        self,
        library: LibraryStorage,
        generator: TextGenerator,
        line_count: int = 6,
        timeout: float = 20.0,
    ) -> None:
        self.library = library
        self.generator = generator
        self.line_count = line_count
        self.timeout = timeout

    async def resolve(
        self, intent_text: str, intent: NormalizedIntent
    ) -> tuple[GeneratedOutcome | FallbackOutcome, tuple[str, ...]]:
        """Generate lines for the intent, or fall back to static lines.

        Returns:
            Tuple of (outcome, line texts in delivery order)
        """
        try:
            lines = await self._generate(intent_text, intent.goal)
        except GenerationError as e:
            logger.warning(f"Generation failed, serving fallback lines: {e}")
            pairs = fallback_lines(intent.goal)
            return (
                FallbackOutcome(static_ids=tuple(line_id for line_id, _ in pairs)),
                tuple(text for _, text in pairs),
            )

        line_ids = self._persist(lines, intent_text, intent)
        return GeneratedOutcome(line_ids=line_ids), tuple(lines)

    async def _generate(self, intent_text: str, goal: Goal) -> list[str]:
        prompt = build_prompt(intent_text, goal, self.line_count)
        try:
            raw = await asyncio.wait_for(
                self.generator.generate(prompt, self.line_count),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            raise GenerationError(
                f"Generation timed out after {self.timeout}s", e
            ) from e
        return parse_response(raw, self.line_count)

    def _persist(
        self, lines: list[str], intent_text: str, intent: NormalizedIntent
    ) -> tuple[str, ...]:
        line_ids = []
        created_count = 0
        for text in lines:
            tags, emotion = line_tags(text, intent_text, intent.goal)
            line_id, created = self.library.add_generated_line(
                text, intent.goal, tags, emotion
            )
            line_ids.append(line_id)
            created_count += int(created)

        logger.info(
            f"Generated {len(lines)} lines for {intent.goal.value}, "
            f"{created_count} new to the pool"
        )
        return tuple(line_ids)
