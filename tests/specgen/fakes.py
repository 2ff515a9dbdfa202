"""Test doubles and payload builders shared by the specgen tests."""
import asyncio
import json
from typing import Any

from services.specgen.app.domain.ai_client import Completion
from services.specgen.app.domain.platforms import PLATFORM_PROMPTS
from services.specgen.app.domain.prompts import CRITIC_AGENT_PROMPT, INTEGRATION_STRATEGY_PROMPT

_SYSTEM_KEYS = {prompt: platform.value for platform, prompt in PLATFORM_PROMPTS.items()}
_SYSTEM_KEYS[INTEGRATION_STRATEGY_PROMPT] = "integration"
_SYSTEM_KEYS[CRITIC_AGENT_PROMPT] = "critic"


class FakeCompletionProvider:
    """Scripted provider keyed by the system prompt it receives.

    Each key holds a queue of completions (or exceptions to raise); the last
    entry is repeated once the queue runs dry.
    """

    def __init__(self, script: dict[str, list[Any]] | None = None, delays: dict[str, float] | None = None) -> None:
        self.script = {key: list(values) for key, values in (script or {}).items()}
        self.delays = delays or {}
        self.calls: list[dict[str, Any]] = []
        self.completed: list[str] = []

    def calls_for(self, key: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["key"] == key]

    async def complete(self, system: str, user: str, max_output_tokens: int) -> Completion:
        key = _SYSTEM_KEYS[system]
        self.calls.append({"key": key, "system": system, "user": user, "max_output_tokens": max_output_tokens})
        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        queue = self.script.get(key)
        if not queue:
            raise RuntimeError(f"no scripted completion for {key}")
        entry = queue.pop(0) if len(queue) > 1 else queue[0]
        self.completed.append(key)
        if isinstance(entry, BaseException):
            raise entry
        return entry


def make_task(name: str, confidence: str = "HIGH", dod: list[str] | None = None, **extra: Any) -> dict[str, Any]:
    task = {
        "name": name,
        "platform": "🔧",
        "priority": "P1",
        "estimate": "6 hours",
        "confidence": confidence,
        "objective": f"Deliver {name.lower()}",
        "rationale": "Keeps the story independently testable",
        "implementation_steps": [{"step": 1, "title": "Build it", "details": "Do the work"}],
        "outputs": [f"src/{name.lower().replace(' ', '_')}.ts"],
        "validation": "Run the integration suite",
        "definition_of_done": dod if dod is not None else ["Tests pass"],
        "sub_tasks": ["Write code", "Write tests"],
    }
    task.update(extra)
    return task


def completion(payload: Any, truncated: bool = False, prose: bool = True) -> Completion:
    body = json.dumps(payload)
    text = f"Here are the specs:\n```json\n{body}\n```\nLet me know." if prose else body
    return Completion(text=text, truncated=truncated, output_tokens=1200)


def platform_completion(*tasks: dict[str, Any], assumptions: list[dict[str, Any]] | None = None, truncated: bool = False) -> Completion:
    return completion({"tasks": list(tasks), "assumptions": assumptions or []}, truncated=truncated)
