"""affirmloop - tiered affirmation sessions with cost-aware generation."""

__version__ = "0.1.0"
__all__ = ["AffirmationEngine"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "AffirmationEngine":
        from .engine import AffirmationEngine

        return AffirmationEngine
    raise AttributeError(f"module 'affirmloop' has no attribute {name!r}")
