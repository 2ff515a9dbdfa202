"""Verification of generated specs: deterministic static checks plus an LLM critic pass."""
from __future__ import annotations

import json
import re
from typing import Callable, Iterable

import structlog
from pydantic import ValidationError

from ..config import SpecgenSettings, get_settings
from .ai_client import CompletionProvider
from .parsing import JsonExtractionError, parse_first_json_object
from .prompts import CRITIC_AGENT_PROMPT
from .types import (
    CodeSnippet,
    GeneratedSpecs,
    GeneratedTask,
    StaticAnalysisResult,
    StaticCheckResult,
    VerificationReport,
    VerificationResult,
)

logger = structlog.get_logger(__name__)

STATIC_CHECKS = (
    "typescript_syntax",
    "sql_syntax",
    "file_paths",
    "estimates_reasonable",
    "has_validation",
)

_TS_LANGUAGES = {"typescript", "ts", "tsx", "javascript", "js", "jsx"}
_SQL_KEYWORDS = ("select", "insert", "update", "delete", "create", "alter", "drop", "with", "grant", "revoke", "begin", "comment")
_BRACKETS = {")": "(", "]": "[", "}": "{"}
_STRING_LITERAL = re.compile(r"'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"|`(?:\\.|[^`\\])*`")
_TS_COMMENT = re.compile(r"//[^\n]*|/\*[\s\S]*?\*/")
_SQL_COMMENT = re.compile(r"--[^\n]*|/\*[\s\S]*?\*/")
_ESTIMATE = re.compile(
    r"(?P<low>\d+(?:\.\d+)?)\s*(?:-|–|to)?\s*(?P<high>\d+(?:\.\d+)?)?\s*(?P<unit>min(?:ute)?s?|h(?:ou)?rs?|h|days?|d|weeks?|w)\b",
    re.IGNORECASE,
)
_UNIT_HOURS = {"min": 1 / 60, "h": 1.0, "d": 8.0, "w": 40.0}
MIN_ESTIMATE_HOURS = 0.25
MAX_ESTIMATE_HOURS = 40.0


def _snippets(tasks: Iterable[GeneratedTask]) -> list[tuple[GeneratedTask, CodeSnippet]]:
    return [(task, snippet) for task in tasks for snippet in task.code_snippets or []]


def brackets_balanced(code: str, comments: re.Pattern[str] = _TS_COMMENT) -> bool:
    stripped = comments.sub("", _STRING_LITERAL.sub("''", code))
    stack: list[str] = []
    for char in stripped:
        if char in "([{":
            stack.append(char)
        elif char in _BRACKETS:
            if not stack or stack.pop() != _BRACKETS[char]:
                return False
    return not stack


def estimate_hours(estimate: str) -> float | None:
    match = _ESTIMATE.search(estimate or "")
    if match is None:
        return None
    amount = float(match.group("high") or match.group("low"))
    unit = match.group("unit").lower()
    if unit.startswith("min"):
        key = "min"
    else:
        key = unit[0]
    return amount * _UNIT_HOURS[key]


def _check_typescript(specs: GeneratedSpecs) -> StaticCheckResult:
    failures = [
        f"{task.name}: {snippet.title or 'snippet'}"
        for task, snippet in _snippets(specs.tasks)
        if snippet.language.lower() in _TS_LANGUAGES and not brackets_balanced(snippet.code)
    ]
    return StaticCheckResult(
        name="typescript_syntax",
        passed=not failures,
        details="Unbalanced brackets in " + "; ".join(failures) if failures else None,
    )


def _check_sql(specs: GeneratedSpecs) -> StaticCheckResult:
    failures: list[str] = []
    for task, snippet in _snippets(specs.tasks):
        if snippet.language.lower() != "sql":
            continue
        statement = _SQL_COMMENT.sub("", snippet.code).strip().lower()
        if not statement.startswith(_SQL_KEYWORDS) or not brackets_balanced(snippet.code, _SQL_COMMENT):
            failures.append(f"{task.name}: {snippet.title or 'snippet'}")
    return StaticCheckResult(
        name="sql_syntax",
        passed=not failures,
        details="Suspicious SQL in " + "; ".join(failures) if failures else None,
    )


def _check_file_paths(specs: GeneratedSpecs) -> StaticCheckResult:
    bad_paths = [
        snippet.file_path
        for _, snippet in _snippets(specs.tasks)
        if snippet.file_path
        and (
            snippet.file_path.startswith(("/", "~"))
            or ".." in snippet.file_path.split("/")
            or any(char.isspace() for char in snippet.file_path)
        )
    ]
    return StaticCheckResult(
        name="file_paths",
        passed=not bad_paths,
        details="Unexpected paths: " + ", ".join(bad_paths) if bad_paths else None,
    )


def _check_estimates(specs: GeneratedSpecs) -> StaticCheckResult:
    problems: list[str] = []
    for task in specs.tasks:
        hours = estimate_hours(task.estimate)
        if hours is None:
            problems.append(f"{task.name}: unparseable estimate {task.estimate!r}")
        elif not MIN_ESTIMATE_HOURS <= hours <= MAX_ESTIMATE_HOURS:
            problems.append(f"{task.name}: {task.estimate}")
    return StaticCheckResult(
        name="estimates_reasonable",
        passed=not problems,
        details="; ".join(problems) if problems else None,
    )


def _check_validation(specs: GeneratedSpecs) -> StaticCheckResult:
    missing = [task.name for task in specs.tasks if not task.validation.strip() or not task.definition_of_done]
    return StaticCheckResult(
        name="has_validation",
        passed=not missing,
        details="Missing validation or definition of done: " + ", ".join(missing) if missing else None,
    )


_CHECKS: dict[str, Callable[[GeneratedSpecs], StaticCheckResult]] = {
    "typescript_syntax": _check_typescript,
    "sql_syntax": _check_sql,
    "file_paths": _check_file_paths,
    "estimates_reasonable": _check_estimates,
    "has_validation": _check_validation,
}


def run_static_checks(specs: GeneratedSpecs) -> StaticAnalysisResult:
    checks = [_CHECKS[name](specs) for name in STATIC_CHECKS]
    failed = [check.name for check in checks if not check.passed]
    summary = (
        f"All {len(checks)} static checks passed"
        if not failed
        else f"{len(failed)} of {len(checks)} static checks failed: {', '.join(failed)}"
    )
    return StaticAnalysisResult(checks=checks, all_passed=not failed, summary=summary)


def build_critic_message(specs: GeneratedSpecs) -> str:
    tasks = [task.model_dump(mode="json", exclude_none=True) for task in specs.tasks]
    return (
        "Review these generated implementation specs.\n\n"
        f"## Tasks\n```json\n{json.dumps(tasks, indent=2)}\n```\n\n"
        "Return your review as valid JSON."
    )


async def review_specs(
    provider: CompletionProvider,
    specs: GeneratedSpecs,
    settings: SpecgenSettings | None = None,
) -> VerificationResult | None:
    """Adversarial critic pass; ``None`` on any failure."""
    if not specs.tasks:
        return None
    tuning = (settings or get_settings()).generation
    try:
        completion = await provider.complete(
            CRITIC_AGENT_PROMPT,
            build_critic_message(specs),
            tuning.critic_max_output_tokens,
        )
    except Exception as exc:
        logger.exception("specgen.critic.request_failed", error=str(exc))
        return None
    try:
        return VerificationResult.model_validate(parse_first_json_object(completion.text, tuning.response_preview_chars))
    except JsonExtractionError as exc:
        logger.error("specgen.critic.parse_failed", error=str(exc), preview=exc.preview)
    except ValidationError as exc:
        logger.error("specgen.critic.invalid_payload", errors=exc.error_count())
    return None


async def verify_specs(
    provider: CompletionProvider,
    specs: GeneratedSpecs,
    settings: SpecgenSettings | None = None,
) -> VerificationReport:
    static = run_static_checks(specs)
    critic = await review_specs(provider, specs, settings)
    logger.info(
        "specgen.verification.completed",
        static_passed=static.all_passed,
        critic_score=critic.score if critic else None,
    )
    return VerificationReport(static=static, critic=critic)


__all__ = [
    "STATIC_CHECKS",
    "brackets_balanced",
    "estimate_hours",
    "review_specs",
    "run_static_checks",
    "verify_specs",
]
