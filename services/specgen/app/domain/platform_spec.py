"""Per-platform spec generation: one completion, one strict retry on truncation."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

import structlog
from opentelemetry import trace
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from ..config import SpecgenSettings, get_settings
from .ai_client import Completion, CompletionProvider
from .context import build_context, build_story_block
from .parsing import JsonExtractionError, parse_first_json_object
from .platforms import PLATFORM_CONFIG, PLATFORM_PROMPTS, PlatformId
from .prompts import STRICT_RETRY_INSTRUCTIONS, TASK_DECOMPOSITION_INSTRUCTIONS
from .types import Assumption, GeneratedTask, HierarchicalContext, UserStoryInput, validate_each

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)


class PlatformStatus(str, enum.Enum):
    ok = "ok"
    empty = "empty"
    truncated = "truncated"
    parse_error = "parse_error"
    failed = "failed"


@dataclass
class PlatformSpecResult:
    platform: PlatformId
    status: PlatformStatus
    tasks: list[GeneratedTask] = field(default_factory=list)
    assumptions: list[Assumption] = field(default_factory=list)
    attempts: int = 0

    @classmethod
    def empty_result(cls, platform: PlatformId, status: PlatformStatus, attempts: int) -> "PlatformSpecResult":
        return cls(platform=platform, status=status, attempts=attempts)


class _PlatformPayload(BaseModel):
    tasks: list[GeneratedTask] = Field(default_factory=list)
    assumptions: list[Assumption] = Field(default_factory=list)

    @field_validator("tasks", mode="before")
    @classmethod
    def _valid_tasks(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(GeneratedTask, value, info.field_name)

    @field_validator("assumptions", mode="before")
    @classmethod
    def _valid_assumptions(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(Assumption, value, info.field_name)


def build_platform_message(
    story: UserStoryInput,
    platform: PlatformId,
    additional_context: str | None = None,
    hierarchical_context: HierarchicalContext | None = None,
    strict: bool = False,
) -> str:
    config = PLATFORM_CONFIG[platform]
    story_context = "\n\n".join(
        part for part in (build_context(hierarchical_context), build_story_block(story, additional_context)) if part
    )
    if strict:
        return (
            f"Generate implementation specs for the {config.name} platform.\n\n"
            f'Platform ID: "{platform.value}"\n\n'
            f"{STRICT_RETRY_INSTRUCTIONS}\n\n"
            f"{story_context}"
        )
    return (
        f"Generate detailed implementation specs for the {config.name} platform.\n\n"
        f'Platform ID to use in JSON output: "{platform.value}" (use exactly this letter, not the emoji)\n\n'
        f"{TASK_DECOMPOSITION_INSTRUCTIONS}\n\n"
        f"{story_context}"
    )


def parse_platform_response(text: str, platform: PlatformId, preview_chars: int = 500) -> tuple[list[GeneratedTask], list[Assumption]]:
    """Parse a platform completion, forcing every task onto the requested platform.

    Raises ``JsonExtractionError`` when no JSON object can be read and
    ``ValidationError`` when ``tasks`` or ``assumptions`` is not a list. Single
    malformed entries are dropped and logged.
    """
    parsed = parse_first_json_object(text, preview_chars)
    raw_tasks = parsed.get("tasks") or []
    if isinstance(raw_tasks, list):
        # the model's own platform label is never trusted
        raw_tasks = [{**raw, "platform": platform.value} if isinstance(raw, dict) else raw for raw in raw_tasks]
    payload = _PlatformPayload.model_validate({"tasks": raw_tasks, "assumptions": parsed.get("assumptions") or []})
    return payload.tasks, payload.assumptions


async def generate_platform_spec(
    provider: CompletionProvider,
    story: UserStoryInput,
    platform: PlatformId,
    additional_context: str | None = None,
    hierarchical_context: HierarchicalContext | None = None,
    settings: SpecgenSettings | None = None,
) -> PlatformSpecResult:
    """Generate tasks and assumptions for one platform. Never raises."""
    tuning = (settings or get_settings()).generation
    system_prompt = PLATFORM_PROMPTS[platform]
    log = logger.bind(platform=platform.value, story_id=story.id)
    attempts = 0

    with tracer.start_as_current_span("specgen.platform", attributes={"specgen.platform": platform.value}) as span:
        try:
            attempts += 1
            completion: Completion = await provider.complete(
                system_prompt,
                build_platform_message(story, platform, additional_context, hierarchical_context),
                tuning.max_output_tokens,
            )
            if completion.truncated:
                log.warning("specgen.platform.truncated", output_tokens=completion.output_tokens)
                attempts += 1
                completion = await provider.complete(
                    system_prompt,
                    build_platform_message(story, platform, additional_context, hierarchical_context, strict=True),
                    tuning.retry_max_output_tokens,
                )
                if completion.truncated:
                    log.error("specgen.platform.retry_truncated", output_tokens=completion.output_tokens)
                    span.set_attribute("specgen.status", PlatformStatus.truncated.value)
                    return PlatformSpecResult.empty_result(platform, PlatformStatus.truncated, attempts)
        except Exception as exc:
            log.exception("specgen.platform.request_failed", error=str(exc))
            span.set_attribute("specgen.status", PlatformStatus.failed.value)
            return PlatformSpecResult.empty_result(platform, PlatformStatus.failed, attempts)

        try:
            tasks, assumptions = parse_platform_response(completion.text, platform, tuning.response_preview_chars)
        except JsonExtractionError as exc:
            log.error("specgen.platform.parse_failed", error=str(exc), preview=exc.preview)
            span.set_attribute("specgen.status", PlatformStatus.parse_error.value)
            return PlatformSpecResult.empty_result(platform, PlatformStatus.parse_error, attempts)
        except ValidationError as exc:
            log.error(
                "specgen.platform.invalid_payload",
                errors=exc.error_count(),
                preview=completion.text[: tuning.response_preview_chars],
            )
            span.set_attribute("specgen.status", PlatformStatus.parse_error.value)
            return PlatformSpecResult.empty_result(platform, PlatformStatus.parse_error, attempts)

        status = PlatformStatus.ok if tasks else PlatformStatus.empty
        if not tasks:
            log.warning("specgen.platform.no_tasks", preview=completion.text[: tuning.response_preview_chars])
        else:
            log.info("specgen.platform.generated", task_count=len(tasks), assumption_count=len(assumptions))
        span.set_attribute("specgen.status", status.value)
        span.set_attribute("specgen.task_count", len(tasks))
        return PlatformSpecResult(
            platform=platform,
            status=status,
            tasks=tasks,
            assumptions=assumptions,
            attempts=attempts,
        )


__all__ = [
    "PlatformSpecResult",
    "PlatformStatus",
    "build_platform_message",
    "generate_platform_spec",
    "parse_platform_response",
]
