"""Definition-of-done merging across platforms."""
from __future__ import annotations

from typing import Iterable, Sequence

from .platform_spec import PlatformSpecResult
from .platforms import PLATFORM_CONFIG
from .types import (
    DefinitionOfDone,
    IntegrationDefinitionOfDone,
    IntegrationStrategy,
    PlatformDefinitionOfDone,
)

INTEGRATION_CHECKLIST = (
    "All API contracts match between platforms",
    "Shared TypeScript types compile without errors",
    "No runtime type mismatches in integration",
)


def _unique(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def merge_definitions_of_done(
    platform_results: Sequence[PlatformSpecResult],
    integration_strategy: IntegrationStrategy | None,
) -> DefinitionOfDone:
    platform_dod = [
        PlatformDefinitionOfDone(
            platform=result.platform,
            platform_name=PLATFORM_CONFIG[result.platform].name,
            checklist=_unique(item for task in result.tasks for item in task.definition_of_done),
        )
        for result in platform_results
    ]

    integration_dod: IntegrationDefinitionOfDone | None = None
    if integration_strategy is not None and len(platform_results) > 1:
        platform_names = " ↔ ".join(PLATFORM_CONFIG[result.platform].name for result in platform_results)
        integration_dod = IntegrationDefinitionOfDone(
            description=f"Cross-platform verification ({platform_names})",
            checklist=[f"E2E: {test.name}" for test in integration_strategy.integration_tests] + list(INTEGRATION_CHECKLIST),
        )

    return DefinitionOfDone(platform_dod=platform_dod, integration_dod=integration_dod)


__all__ = ["INTEGRATION_CHECKLIST", "merge_definitions_of_done"]
