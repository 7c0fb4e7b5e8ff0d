"""Prompt construction for affirmation generation."""

from ..library.models import Goal

STYLE_GUIDES: dict[Goal, str] = {
    Goal.SLEEP: "Focus on release, relaxation, and peace. Use calming language.",
    Goal.FOCUS: (
        "Emphasize clarity, capability, and completion. "
        "Use action-oriented language."
    ),
    Goal.CALM: "Center on presence, acceptance, and groundedness. Stay in the NOW.",
    Goal.MANIFEST: "Balance desire with deserving. Use magnetic, receiving language.",
}

TONE_EXAMPLES: dict[Goal, tuple[str, ...]] = {
    Goal.SLEEP: (
        "I release the day and welcome deep rest",
        "I am safe, supported, and at peace",
    ),
    Goal.FOCUS: (
        "I complete what I start with clarity",
        "I am capable of achieving this goal",
    ),
    Goal.CALM: (
        "I breathe and center myself right now",
        "I am grounded in this present moment",
    ),
    Goal.MANIFEST: (
        "I am ready to receive what I desire",
        "I deserve the abundance I'm creating",
    ),
}

PROMPT_TEMPLATE = """\
You are an expert affirmation writer specializing in {goal} and personal transformation.

USER'S SPECIFIC INTENTION:

"{intent}"

Your task: Create {count}-10 affirmations that feel personally crafted for THIS person's unique situation.

CRITICAL REQUIREMENTS:

1. FIRST PERSON ONLY: Start with "I am", "I", or "My"
2. PRESENT TENSE: Write as if it's already happening now
3. ULTRA-SPECIFIC: Reference their exact words/situation, not generic platitudes
4. CONCISE: Maximum 12 words per affirmation
5. VARIED STRUCTURE: Mix "I am" / "I [verb]" / "My [noun]", don't repeat patterns
6. EMOTIONAL: Make them FEEL something, not just read words
7. NO FLUFF: No therapy jargon, medical claims, or abstract metaphors

STYLE GUIDE FOR {goal_upper}:

{style_guide}

TONE EXAMPLES (for inspiration):

{tone_examples}

STRUCTURAL VARIETY:

- At least 2 start with "I am [quality/state]"
- At least 2 start with "I [action verb]"
- At least 1 starts with "My [noun]"
- Mix 6-8 word affirmations with 9-12 word affirmations
- No more than 2 consecutive lines with the same opening

OUTPUT FORMAT:

Plain text only. One affirmation per line. No numbering. No bullets. No markdown.

Between {count}-10 total lines.

Now create deeply personalized affirmations for: "{intent}"
"""


def build_prompt(intent: str, goal: Goal, count: int = 6) -> str:
    """Build the generation prompt for an intent and goal."""
    goal = Goal(goal)
    return PROMPT_TEMPLATE.format(
        goal=goal.value,
        goal_upper=goal.value.upper(),
        intent=intent.strip(),
        count=count,
        style_guide=STYLE_GUIDES[goal],
        tone_examples="\n".join(TONE_EXAMPLES[goal]),
    )
