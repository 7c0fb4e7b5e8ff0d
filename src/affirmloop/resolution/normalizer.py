"""Intent normalization into keyword and theme sets."""

import re
from dataclasses import dataclass

from ..library.models import Goal

_TOKEN_PATTERN = re.compile(r"[a-z0-9']+")

STOPWORDS = frozenset(
    {
        "help",
        "want",
        "need",
        "feel",
        "make",
        "have",
        "get",
        # pronouns
        "me",
        "my",
        "myself",
        "mine",
        "you",
        "your",
        "yours",
        "they",
        "them",
        "their",
        "this",
        "that",
        "these",
        "those",
    }
)

# Per goal: (trigger substrings, themes added when any trigger matches)
THEME_GROUPS: dict[Goal, tuple[tuple[tuple[str, ...], tuple[str, str]], ...]] = {
    Goal.SLEEP: (
        (("sleep", "rest"), ("sleep", "rest")),
        (("anxiety", "stress"), ("anxiety", "stress")),
        (("calm", "peace"), ("calm", "peace")),
    ),
    Goal.FOCUS: (
        (("focus", "concentrat"), ("focus", "concentration")),
        (("productiv", "work"), ("productivity", "work")),
        (("energy", "motivat"), ("energy", "motivation")),
    ),
    Goal.CALM: (
        (("anxiety", "stress"), ("anxiety", "stress")),
        (("calm", "peace"), ("calm", "peace")),
        (("relax", "rest"), ("relaxation", "rest")),
    ),
    Goal.MANIFEST: (
        (("goal", "dream"), ("goals", "dreams")),
        (("abund", "success"), ("abundance", "success")),
        (("wealth", "money"), ("wealth", "prosperity")),
    ),
}


@dataclass(frozen=True)
class NormalizedIntent:
    """Keyword and theme view of a free-text intent.

    Attributes:
        goal: Goal the intent was normalized for
        keywords: Meaningful lower-cased tokens of the intent
        themes: Goal-specific themes, always including the goal itself
    """

    goal: Goal
    keywords: frozenset[str]
    themes: frozenset[str]

    @property
    def specific_themes(self) -> frozenset[str]:
        """Themes other than the goal itself."""
        return self.themes - {self.goal.value}


def extract_keywords(text: str) -> frozenset[str]:
    """Lower-cased tokens longer than three characters, minus stopwords."""
    tokens = _TOKEN_PATTERN.findall(text.lower())
    return frozenset(
        token for token in tokens if len(token) > 3 and token not in STOPWORDS
    )


def match_themes(text: str, goal: Goal) -> list[str]:
    """Goal-specific themes triggered by the text, in table order.

    A theme can share the goal's name, as "sleep" does for the sleep goal.
    """
    lowered = text.lower()
    themes: list[str] = []
    for triggers, group in THEME_GROUPS[Goal(goal)]:
        if any(trigger in lowered for trigger in triggers):
            themes.extend(theme for theme in group if theme not in themes)
    return themes


def line_tags(text: str, intent_text: str, goal: Goal) -> tuple[frozenset[str], str]:
    """Tags and dominant emotion for a line written for an intent.

    Tags combine the goal, the intent's themes, themes found in the line
    and the line's own keywords, so different lines carry different tag
    sets. The emotion is the first line theme, else the first intent
    theme, else the goal.

    Returns:
        Tuple of (tags, emotion)
    """
    goal = Goal(goal)
    intent_themes = [t for t in match_themes(intent_text, goal) if t != goal.value]
    line_themes = [t for t in match_themes(text, goal) if t != goal.value]

    tags = (
        frozenset(intent_themes)
        | frozenset(line_themes)
        | extract_keywords(text)
        | {goal.value}
    )
    emotion = (line_themes or intent_themes or [goal.value])[0]
    return tags, emotion


def normalize(text: str, goal: Goal) -> NormalizedIntent:
    """Normalize an intent for the given goal.

    Pure and deterministic. Empty or all-stopword input yields no keywords
    and only the goal as a theme.
    """
    goal = Goal(goal)
    return NormalizedIntent(
        goal=goal,
        keywords=extract_keywords(text),
        themes=frozenset(match_themes(text, goal)) | {goal.value},
    )
