"""Cross-platform integration strategy generation."""
from __future__ import annotations

from typing import Sequence

import structlog
from opentelemetry import trace
from pydantic import ValidationError

from ..config import SpecgenSettings, get_settings
from .ai_client import CompletionProvider
from .parsing import JsonExtractionError, parse_first_json_object
from .platform_spec import PlatformSpecResult
from .platforms import PLATFORM_CONFIG
from .prompts import INTEGRATION_STRATEGY_PROMPT
from .types import IntegrationStrategy, UserStoryInput

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


def summarize_platform_results(platform_results: Sequence[PlatformSpecResult]) -> str:
    sections: list[str] = []
    for result in platform_results:
        config = PLATFORM_CONFIG[result.platform]
        task_lines = "\n".join(f"- {task.name}: {task.objective}" for task in result.tasks)
        output_lines = "\n".join(f"- {output}" for task in result.tasks for output in task.outputs)
        sections.append(
            f"## {config.icon} {config.name} ({result.platform.value})\n"
            f"Tasks:\n{task_lines}\n"
            f"Outputs:\n{output_lines}"
        )
    return "\n\n".join(sections)


def build_integration_message(story: UserStoryInput, platform_results: Sequence[PlatformSpecResult]) -> str:
    return (
        "Generate integration strategy for this multi-platform implementation.\n\n"
        f'## User Story\n"{story.narrative}"\n\n'
        f"## Platform Specs\n{summarize_platform_results(platform_results)}\n\n"
        "Provide the integration strategy as valid JSON."
    )


async def generate_integration_strategy(
    provider: CompletionProvider,
    story: UserStoryInput,
    platform_results: Sequence[PlatformSpecResult],
    settings: SpecgenSettings | None = None,
) -> IntegrationStrategy | None:
    """Reconcile per-platform tasks into shared contracts; ``None`` when not applicable or on failure."""
    if len(platform_results) < 2:
        return None

    tuning = (settings or get_settings()).generation
    log = logger.bind(story_id=story.id, platforms=[result.platform.value for result in platform_results])
    with tracer.start_as_current_span("specgen.integration", attributes={"specgen.platform_count": len(platform_results)}):
        try:
            completion = await provider.complete(
                INTEGRATION_STRATEGY_PROMPT,
                build_integration_message(story, platform_results),
                tuning.integration_max_output_tokens,
            )
        except Exception as exc:
            log.exception("specgen.integration.request_failed", error=str(exc))
            return None

        if completion.truncated:
            log.warning("specgen.integration.truncated", output_tokens=completion.output_tokens)
        try:
            strategy = IntegrationStrategy.model_validate(
                parse_first_json_object(completion.text, tuning.response_preview_chars)
            )
        except JsonExtractionError as exc:
            log.error("specgen.integration.parse_failed", error=str(exc), preview=exc.preview)
            return None
        except ValidationError as exc:
            log.error("specgen.integration.invalid_payload", errors=exc.error_count())
            return None

    log.info(
        "specgen.integration.generated",
        contracts=len(strategy.api_contracts),
        shared_types=len(strategy.shared_types),
        tests=len(strategy.integration_tests),
    )
    return strategy


__all__ = ["build_integration_message", "generate_integration_strategy", "summarize_platform_results"]
