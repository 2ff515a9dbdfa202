"""Task-spec generation orchestration."""
from __future__ import annotations

import asyncio
import math
import time
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import structlog
from opentelemetry import metrics, trace

from ..config import SpecgenSettings, get_settings
from .ai_client import Completion, CompletionProvider
from .dod import merge_definitions_of_done
from .integration import generate_integration_strategy
from .platform_spec import PlatformSpecResult, PlatformStatus, generate_platform_spec
from .platforms import PlatformId
from .types import Confidence, DefinitionOfDone, GeneratedSpecs, GeneratedTask, HierarchicalContext, UserStoryInput
from .verification import verify_specs

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

platform_results_counter = meter.create_counter(
    "specgen.platform.results",
    description="Per-platform generation outcomes by status",
)
generation_duration = meter.create_histogram(
    "specgen.generate.duration",
    unit="ms",
    description="Wall time of a full generation run",
)

CONFIDENCE_SCORES: dict[Confidence, int] = {
    Confidence.high: 90,
    Confidence.medium: 70,
    Confidence.low: 50,
}


@dataclass
class GenerationOptions:
    selected_platforms: Sequence[PlatformId]
    additional_context: str | None = None
    hierarchical_context: HierarchicalContext | None = None
    verify: bool = False


@dataclass
class GenerationRun:
    specs: GeneratedSpecs
    platform_results: list[PlatformSpecResult] = field(default_factory=list)
    wall_time_ms: int = 0

    @property
    def platform_status(self) -> dict[str, str]:
        return {result.platform.value: result.status.value for result in self.platform_results}


class _AttemptCounter:
    """Counts the requests one platform has issued."""

    def __init__(self, provider: CompletionProvider) -> None:
        self._provider = provider
        self.attempts = 0

    async def complete(self, system: str, user: str, max_output_tokens: int) -> Completion:
        self.attempts += 1
        return await self._provider.complete(system, user, max_output_tokens)


def compute_overall_confidence(tasks: Iterable[GeneratedTask]) -> int:
    scores = [CONFIDENCE_SCORES[task.confidence] for task in tasks]
    if not scores:
        return 0
    # half-up rounding
    return int(math.floor(sum(scores) / len(scores) + 0.5))


def empty_specs() -> GeneratedSpecs:
    return GeneratedSpecs(
        tasks=[],
        definition_of_done=DefinitionOfDone(platform_dod=[]),
        assumptions=[],
        overall_confidence=0,
    )


class TaskSpecGenerator:
    def __init__(self, provider: CompletionProvider, settings: SpecgenSettings | None = None) -> None:
        self._provider = provider
        self._settings = settings or get_settings()

    async def generate(self, story: UserStoryInput, options: GenerationOptions) -> GenerationRun:
        platforms = [PlatformId(platform) for platform in options.selected_platforms]
        if not platforms:
            return GenerationRun(specs=empty_specs())

        start = time.perf_counter()
        self._log_context(story, options.hierarchical_context)
        with tracer.start_as_current_span(
            "specgen.generate",
            attributes={"specgen.story_id": story.id, "specgen.platforms": [p.value for p in platforms]},
        ):
            platform_results = await self._fan_out(story, platforms, options)

            tasks = [task for result in platform_results for task in result.tasks]
            assumptions = [assumption for result in platform_results for assumption in result.assumptions]

            integration_strategy = None
            if len(platforms) > 1:
                integration_strategy = await generate_integration_strategy(
                    self._provider, story, platform_results, self._settings
                )

            specs = GeneratedSpecs(
                tasks=tasks,
                integration_strategy=integration_strategy,
                definition_of_done=merge_definitions_of_done(platform_results, integration_strategy),
                assumptions=assumptions,
                overall_confidence=compute_overall_confidence(tasks),
            )
            if options.verify:
                specs.verification = await verify_specs(self._provider, specs, self._settings)

        run = GenerationRun(
            specs=specs,
            platform_results=platform_results,
            wall_time_ms=int((time.perf_counter() - start) * 1000),
        )
        for result in platform_results:
            platform_results_counter.add(1, {"platform": result.platform.value, "status": result.status.value})
        generation_duration.record(run.wall_time_ms, {"platform_count": len(platforms)})
        logger.info(
            "specgen.generate.completed",
            story_id=story.id,
            platform_status=run.platform_status,
            task_count=len(tasks),
            has_integration_strategy=integration_strategy is not None,
            overall_confidence=specs.overall_confidence,
            wall_time_ms=run.wall_time_ms,
        )
        return run

    async def _fan_out(
        self,
        story: UserStoryInput,
        platforms: list[PlatformId],
        options: GenerationOptions,
    ) -> list[PlatformSpecResult]:
        tuning = self._settings.generation
        semaphore = asyncio.Semaphore(tuning.max_concurrency) if tuning.max_concurrency else None

        async def run_platform(platform: PlatformId) -> PlatformSpecResult:
            counter = _AttemptCounter(self._provider)
            async with AsyncExitStack() as stack:
                if semaphore is not None:
                    await stack.enter_async_context(semaphore)
                try:
                    async with asyncio.timeout(tuning.platform_timeout_s):
                        return await generate_platform_spec(
                            counter,
                            story,
                            platform,
                            options.additional_context,
                            options.hierarchical_context,
                            self._settings,
                        )
                except TimeoutError:
                    logger.error(
                        "specgen.platform.timeout",
                        platform=platform.value,
                        timeout_s=tuning.platform_timeout_s,
                        attempts=counter.attempts,
                    )
                    return PlatformSpecResult.empty_result(platform, PlatformStatus.failed, attempts=counter.attempts)

        async with asyncio.TaskGroup() as group:
            pending = [group.create_task(run_platform(platform)) for platform in platforms]
        # dispatch order, not completion order
        return [task.result() for task in pending]

    @staticmethod
    def _log_context(story: UserStoryInput, context: HierarchicalContext | None) -> None:
        if context is None:
            logger.info("specgen.context.missing", story_id=story.id)
            return
        logger.info(
            "specgen.context.injected",
            story_id=story.id,
            project=context.project.name,
            has_project_brief=context.project.project_brief is not None,
            has_context_document=bool(context.project.context_document),
            epic=context.epic.name if context.epic else None,
        )


async def generate_task_specs(
    story: UserStoryInput,
    options: GenerationOptions,
    provider: CompletionProvider,
    settings: SpecgenSettings | None = None,
) -> GeneratedSpecs:
    run = await TaskSpecGenerator(provider, settings).generate(story, options)
    return run.specs


__all__ = [
    "CONFIDENCE_SCORES",
    "GenerationOptions",
    "GenerationRun",
    "TaskSpecGenerator",
    "compute_overall_confidence",
    "empty_specs",
    "generate_task_specs",
]
