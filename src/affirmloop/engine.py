"""High-level entry points for affirmloop library usage."""

import asyncio
import logging
from pathlib import Path

from .cache.manager import AudioCache
from .cache.storage import CacheStorage
from .config import AffirmloopConfig, load_config
from .errors import SessionAudioError
from .generation.base import TextGenerator
from .generation.openai_client import OpenAITextGenerator
from .library.models import Goal
from .library.storage import LibraryStorage
from .providers import ProviderRegistry
from .providers.base import TTSProvider
from .resolution.generation import GenerationFallback
from .resolution.models import ResolutionResult
from .resolution.orchestrator import ResolutionOrchestrator
from .resolution.pool import PoolResolver
from .resolution.template import TemplateResolver
from .telemetry.buffer import TelemetryBuffer
from .telemetry.models import FeedbackResult
from .telemetry.recorder import FeedbackRecorder
from .telemetry.storage import RecordStorage

logger = logging.getLogger(__name__)


class AffirmationEngine:
    """Wires storage, resolution tiers, audio cache and feedback together.

    The speech provider is created on first synthesis, so resolving and
    recording feedback work without speech credentials.
    """

    def __init__(
        self,
        config: AffirmloopConfig,
        generator: TextGenerator,
        provider: TTSProvider | None = None,
        buffer: TelemetryBuffer | None = None,
    ) -> None:
        self.config = config
        db_path = config.storage.db_path

        self.library = LibraryStorage(db_path)
        self.records = RecordStorage(db_path)
        self.cache_storage = CacheStorage(db_path)
        self.buffer = buffer or TelemetryBuffer(config.telemetry.buffer_size)

        self.orchestrator = ResolutionOrchestrator(
            templates=TemplateResolver(self.library),
            pool=PoolResolver(
                self.library,
                line_count=config.engine.line_count,
                min_viable=config.engine.min_pool_lines,
            ),
            generation=GenerationFallback(
                self.library,
                generator,
                line_count=config.engine.line_count,
                timeout=config.generation.timeout,
            ),
            records=self.records,
            buffer=self.buffer,
            engine_config=config.engine,
            costs=config.costs,
        )
        self.feedback = FeedbackRecorder(self.records, self.library)

        self._provider = provider
        self._audio_cache: AudioCache | None = None

    @classmethod
    def from_config(
        cls,
        config: AffirmloopConfig | None = None,
        provider: TTSProvider | None = None,
        buffer: TelemetryBuffer | None = None,
    ) -> "AffirmationEngine":
        """Build an engine with the OpenAI generator from configuration.

        Args:
            config: Loaded configuration (defaults to load_config())
            provider: Speech provider (defaults to the configured one)
            buffer: Telemetry buffer (defaults to a fresh bounded buffer)
        """
        config = config or load_config()
        generator = OpenAITextGenerator(
            model=config.generation.model,
            temperature=config.generation.temperature,
            max_tokens=config.generation.max_tokens,
        )
        return cls(config, generator, provider=provider, buffer=buffer)

    @property
    def audio_cache(self) -> AudioCache:
        """Audio cache, creating the configured speech provider on first use.

        Raises:
            KeyError: If the configured provider is unknown
            TTSAuthError: If the provider has no credentials
        """
        if self._audio_cache is None:
            provider = self._provider or ProviderRegistry.create(
                self.config.speech.provider
            )
            self._audio_cache = AudioCache(
                self.cache_storage,
                provider,
                self.config.storage.audio_dir,
                timeout=self.config.speech.timeout,
            )
        return self._audio_cache

    async def resolve(
        self, intent_text: str, goal: Goal | str, is_first_session: bool = False
    ) -> ResolutionResult:
        """Resolve an intent into a session's lines."""
        return await self.orchestrator.resolve(
            intent_text, Goal(goal), is_first_session
        )

    async def synthesize(
        self, text: str, voice: str | None = None, pace: str | None = None
    ) -> Path:
        """Audio file for one line, synthesized only if not cached."""
        return await self.audio_cache.get_or_synthesize(
            text,
            voice or self.config.speech.voice,
            pace or self.config.speech.pace,
        )

    async def render(
        self,
        result: ResolutionResult,
        voice: str | None = None,
        pace: str | None = None,
    ) -> list[Path]:
        """Audio files for every line of a resolution, in line order.

        Raises:
            SessionAudioError: If any line could not be synthesized
        """
        outcomes = await asyncio.gather(
            *(self.synthesize(line, voice, pace) for line in result.lines),
            return_exceptions=True,
        )

        failures = {
            line: outcome
            for line, outcome in zip(result.lines, outcomes)
            if isinstance(outcome, Exception)
        }
        if failures:
            logger.error(
                f"{len(failures)} of {len(result.lines)} lines failed to synthesize"
            )
            raise SessionAudioError(
                f"{len(failures)} of {len(result.lines)} lines could not be "
                f"synthesized",
                failures,
            )
        return list(outcomes)

    def record_feedback(
        self,
        record_id: str,
        rating: int | None = None,
        was_replayed: bool | None = None,
    ) -> FeedbackResult:
        """Attach a rating and/or replay flag to a resolution."""
        return self.feedback.record_feedback(record_id, rating, was_replayed)
