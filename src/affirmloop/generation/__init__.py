"""Paid text generation for new affirmations."""

from .base import TextGenerator
from .openai_client import OpenAITextGenerator
from .prompts import build_prompt

__all__ = ["OpenAITextGenerator", "TextGenerator", "build_prompt"]
