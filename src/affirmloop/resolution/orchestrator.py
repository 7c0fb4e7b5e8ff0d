"""Tiered resolution: template, then pool, then generation."""

import logging
import uuid

from ..config import CostConfig, EngineConfig
from ..library.models import Goal
from ..telemetry.buffer import TelemetryBuffer
from ..telemetry.models import ResolutionRecord
from ..telemetry.storage import RecordStorage
from .generation import GenerationFallback
from .models import (
    ExactOutcome,
    GeneratedOutcome,
    Outcome,
    PooledOutcome,
    ResolutionResult,
)
from .normalizer import normalize
from .pool import PoolResolver
from .template import TemplateResolver

logger = logging.getLogger(__name__)


class ResolutionOrchestrator:
    """Runs the three tiers in order and records exactly one outcome.

    A first session always goes straight to generation.
    """

    def __init__(
        self,
        templates: TemplateResolver,
        pool: PoolResolver,
        generation: GenerationFallback,
        records: RecordStorage,
        buffer: TelemetryBuffer,
        engine_config: EngineConfig,
        costs: CostConfig,
    ) -> None:
        self.templates = templates
        self.pool = pool
        self.generation = generation
        self.records = records
        self.buffer = buffer
        self.engine_config = engine_config
        self.costs = costs

    async def resolve(
        self, intent_text: str, goal: Goal, is_first_session: bool = False
    ) -> ResolutionResult:
        """Resolve an intent into a session's lines.

        Raises:
            DataIntegrityError: If the chosen template references a missing line
        """
        goal = Goal(goal)
        intent = normalize(intent_text, goal)
        logger.debug(
            f"Resolving {goal.value} intent: keywords={sorted(intent.keywords)}, "
            f"themes={sorted(intent.themes)}"
        )

        if not is_first_session:
            match = self.templates.find(intent)
            if match and match.confidence >= self.engine_config.exact_threshold:
                self.templates.accept(match)
                outcome = ExactOutcome(template_id=match.template.id)
                return self._finish(
                    intent_text,
                    goal,
                    is_first_session,
                    outcome,
                    tuple(line.text for line in match.lines),
                    tuple(line.id for line in match.lines),
                    match.confidence,
                    self.costs.exact,
                    match.template.id,
                )

            pooled = self.pool.find(intent)
            if pooled and pooled.confidence >= self.engine_config.pooled_threshold:
                self.pool.accept(pooled)
                line_ids = tuple(line.id for line in pooled.lines)
                outcome = PooledOutcome(line_ids=line_ids, confidence=pooled.confidence)
                return self._finish(
                    intent_text,
                    goal,
                    is_first_session,
                    outcome,
                    tuple(line.text for line in pooled.lines),
                    line_ids,
                    pooled.confidence,
                    self.costs.pooled,
                )
        else:
            logger.info("First session, skipping template and pool tiers")

        generated, lines = await self.generation.resolve(intent_text, intent)
        if isinstance(generated, GeneratedOutcome):
            line_ids, cost = generated.line_ids, self.costs.generated
        else:
            line_ids, cost = generated.static_ids, self.costs.fallback
        return self._finish(
            intent_text,
            goal,
            is_first_session,
            generated,
            lines,
            line_ids,
            0.0,
            cost,
        )

    def _finish(
        self,
        intent_text: str,
        goal: Goal,
        is_first_session: bool,
        outcome: Outcome,
        lines: tuple[str, ...],
        line_ids: tuple[str, ...],
        confidence: float,
        cost: float,
        template_id: str | None = None,
    ) -> ResolutionResult:
        record = ResolutionRecord(
            id=uuid.uuid4().hex,
            tier=outcome.tier,
            cost=cost,
            confidence=confidence,
            goal=goal,
            intent=intent_text,
            is_first_session=is_first_session,
            line_ids=line_ids,
            template_id=template_id,
        )
        self.records.insert(record)
        self.buffer.append(record)

        logger.info(
            f"Resolved {goal.value} intent via {outcome.tier.value} "
            f"(confidence {confidence:.2f}, cost ${cost:.2f})"
        )
        return ResolutionResult(
            record_id=record.id,
            lines=lines,
            outcome=outcome,
            confidence=confidence,
            cost=cost,
        )
