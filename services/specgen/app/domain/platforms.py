"""Platform registry: the fixed set of expert roles a story is fanned out to."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable

from .prompts import ADMIN_PROMPT, BACKEND_PROMPT, INFRA_PROMPT, MOBILE_PROMPT


class PlatformId(str, enum.Enum):
    backend = "A"
    mobile = "B"
    admin = "C"
    infrastructure = "D"


@dataclass(frozen=True)
class PlatformConfig:
    id: PlatformId
    name: str
    icon: str
    color: str
    description: str


PLATFORM_CONFIG: dict[PlatformId, PlatformConfig] = {
    PlatformId.backend: PlatformConfig(
        id=PlatformId.backend,
        name="Backend",
        icon="🔧",
        color="#3B82F6",
        description="APIs, Supabase, Edge Functions, Database",
    ),
    PlatformId.mobile: PlatformConfig(
        id=PlatformId.mobile,
        name="Mobile App",
        icon="📱",
        color="#10B981",
        description="React Native/Expo, UI Components, Navigation",
    ),
    PlatformId.admin: PlatformConfig(
        id=PlatformId.admin,
        name="Admin Dashboard",
        icon="🖥️",
        color="#8B5CF6",
        description="Next.js, Admin UI, Data Tables, Charts",
    ),
    PlatformId.infrastructure: PlatformConfig(
        id=PlatformId.infrastructure,
        name="Infrastructure",
        icon="⚙️",
        color="#F59E0B",
        description="Deployment, CI/CD, Monitoring, Security",
    ),
}

PLATFORM_PROMPTS: dict[PlatformId, str] = {
    PlatformId.backend: BACKEND_PROMPT,
    PlatformId.mobile: MOBILE_PROMPT,
    PlatformId.admin: ADMIN_PROMPT,
    PlatformId.infrastructure: INFRA_PROMPT,
}

_BASE_GENERATION_SECONDS = 15
_INTEGRATION_SECONDS = 10


def get_platform_info(platform_id: PlatformId | str) -> PlatformConfig:
    return PLATFORM_CONFIG[PlatformId(platform_id)]


def resolve_platform(value: object) -> PlatformId | None:
    """Map an id, display name or icon the model may have used back to a ``PlatformId``."""
    if isinstance(value, PlatformId):
        return value
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    for config in PLATFORM_CONFIG.values():
        if candidate.upper() == config.id.value:
            return config.id
        if candidate.lower() == config.name.lower() or candidate.lower() == config.id.name:
            return config.id
        # icons may arrive with or without the variation selector
        if candidate and candidate.rstrip("\ufe0f") == config.icon.rstrip("\ufe0f"):
            return config.id
    return None


def estimate_generation_time(platforms: Iterable[PlatformId | str]) -> int:
    """Rough wall-clock estimate in seconds; platforms run concurrently, integration adds a pass."""
    count = len(list(platforms))
    return _BASE_GENERATION_SECONDS + (_INTEGRATION_SECONDS if count > 1 else 0)


__all__ = [
    "PLATFORM_CONFIG",
    "PLATFORM_PROMPTS",
    "PlatformConfig",
    "PlatformId",
    "estimate_generation_time",
    "get_platform_info",
    "resolve_platform",
]
