"""Spec generation API."""
from __future__ import annotations

import uuid
from typing import Any, List

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from ..domain.ai_client import CompletionProvider
from ..domain.generator_service import GenerationOptions, TaskSpecGenerator
from ..domain.platforms import PLATFORM_CONFIG, PlatformId, estimate_generation_time
from ..domain.types import GeneratedSpecs, HierarchicalContext, UserStoryInput
from ..domain.verification import verify_specs
from .deps import get_completion_provider

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


class UserStoryPayload(BaseModel):
    id: str | None = None
    narrative: str | None = None
    persona: str | None = None
    feature_area: str | None = None
    acceptance_criteria: List[str] | None = None
    priority: str | None = None

    def to_input(self) -> UserStoryInput:
        if not self.narrative:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User story with narrative is required")
        return UserStoryInput(
            id=self.id or "NEW",
            narrative=self.narrative,
            persona=self.persona or "member",
            feature_area=self.feature_area or "general",
            acceptance_criteria=self.acceptance_criteria or None,
            priority=self.priority or "P1",
        )


class GenerateSpecsRequest(BaseModel):
    user_story: UserStoryPayload | None = Field(default=None, alias="userStory")
    selected_platforms: List[str] = Field(default_factory=list, alias="selectedPlatforms")
    additional_context: str | None = Field(default=None, alias="additionalContext")
    hierarchical_context: HierarchicalContext | None = Field(default=None, alias="hierarchicalContext")
    verify: bool = False

    model_config = ConfigDict(populate_by_name=True)

    def require_story(self) -> UserStoryInput:
        if self.user_story is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User story with narrative is required")
        return self.user_story.to_input()

    def require_platforms(self) -> list[PlatformId]:
        if not self.selected_platforms:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="At least one platform must be selected"
            )
        valid = {platform.value for platform in PlatformId}
        invalid = [platform for platform in self.selected_platforms if platform not in valid]
        if invalid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid platform IDs: {', '.join(invalid)}"
            )
        return [PlatformId(platform) for platform in self.selected_platforms]


def _platform_listing() -> dict[str, str]:
    return {platform.value: config.name for platform, config in PLATFORM_CONFIG.items()}


@router.post("/generate-specs")
async def generate_specs(
    request: GenerateSpecsRequest,
    provider: CompletionProvider = Depends(get_completion_provider),
):
    story = request.require_story()
    platforms = request.require_platforms()
    correlation_id = str(uuid.uuid4())
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    try:
        run = await TaskSpecGenerator(provider).generate(
            story,
            GenerationOptions(
                selected_platforms=platforms,
                additional_context=request.additional_context,
                hierarchical_context=request.hierarchical_context,
                verify=request.verify,
            ),
        )
    finally:
        structlog.contextvars.unbind_contextvars("correlation_id")

    specs = run.specs
    return {
        "success": True,
        "data": specs.to_payload(),
        "metadata": {
            "correlation_id": correlation_id,
            "platforms_generated": len(platforms),
            "tasks_generated": len(specs.tasks),
            "has_integration_strategy": specs.integration_strategy is not None,
            "assumptions_count": len(specs.assumptions),
            "overall_confidence": specs.overall_confidence,
            "platform_status": run.platform_status,
            "estimated_seconds": estimate_generation_time(platforms),
            "wall_time_ms": run.wall_time_ms,
        },
    }


@router.get("/generate-specs")
async def describe_generate_specs() -> dict[str, Any]:
    return {
        "endpoint": "/ai/generate-specs",
        "method": "POST",
        "description": "Generate platform-specific task specs from a user story",
        "body": {
            "userStory": {
                "id": "US-001 (optional)",
                "narrative": "As a member, I want to...",
                "persona": "member | admin | staff | business | guest",
                "feature_area": "auth | events | reservations | ...",
                "acceptance_criteria": ["criterion 1", "criterion 2"],
                "priority": "P0 | P1 | P2",
            },
            "selectedPlatforms": [platform.value for platform in PlatformId],
            "additionalContext": "Optional extra context for generation",
            "hierarchicalContext": "Optional project/epic context",
            "verify": "Optional: run static checks and critic review on the result",
        },
        "platforms": _platform_listing(),
    }


@router.get("/platforms")
async def list_platforms() -> list[dict[str, str]]:
    return [
        {
            "id": config.id.value,
            "name": config.name,
            "icon": config.icon,
            "color": config.color,
            "description": config.description,
        }
        for config in PLATFORM_CONFIG.values()
    ]


@router.post("/verify-specs")
async def verify_generated_specs(
    specs: GeneratedSpecs,
    provider: CompletionProvider = Depends(get_completion_provider),
):
    report = await verify_specs(provider, specs)
    return report.model_dump(mode="json")


__all__ = ["router"]
