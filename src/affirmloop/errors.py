"""Exception hierarchy for affirmloop."""


class AffirmloopError(Exception):
    """Base exception for affirmloop errors."""


class ExternalServiceError(AffirmloopError):
    """A paid external collaborator (text generation, speech) failed.

    This typically occurs when:
    - The call timed out
    - The account is out of quota or rate limited
    - The response was empty or malformed
    """

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class GenerationError(ExternalServiceError):
    """Text generation failed. Recovered at Tier 3 with static lines."""

    pass


class SynthesisError(ExternalServiceError):
    """Speech synthesis failed. Never recovered silently."""

    pass


class DataIntegrityError(AffirmloopError):
    """Persisted state violates an invariant.

    Raised for a template referencing a missing line or a cache entry
    without its audio artifact. Treated as fatal.
    """

    pass


class RecordNotFoundError(AffirmloopError, KeyError):
    """No resolution record exists with the given id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class LineInUseError(AffirmloopError):
    """A line cannot be deleted while a template references it."""

    pass


class ProtectedTemplateError(AffirmloopError):
    """Seed templates cannot be deleted."""

    pass


class SessionAudioError(AffirmloopError):
    """One or more lines of a session could not be synthesized.

    Attributes:
        failures: Mapping of line text to the error raised for it
    """

    def __init__(self, message: str, failures: dict[str, Exception]) -> None:
        super().__init__(message)
        self.failures = failures
