"""Abstract base class for text generators."""

from abc import ABC, abstractmethod


class TextGenerator(ABC):
    """Abstract base class for paid affirmation text generators.

    All generators must implement generate. Any failure, including an
    unusable response, must be raised as GenerationError.
    """

    @abstractmethod
    async def generate(self, prompt: str, count: int) -> list[str]:
        """Generate candidate affirmation lines.

        Args:
            prompt: Complete instruction prompt
            count: Minimum number of lines wanted

        Returns:
            Raw response lines, one candidate affirmation per entry

        Raises:
            GenerationError: If the call fails or returns too little
        """
        pass
