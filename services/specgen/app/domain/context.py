"""Prompt context assembly.

Outer context (project) comes first and the narrower epic section last, so it
sits directly above the story block the platform prompt is about.
"""
from __future__ import annotations

from typing import Iterable

from .types import EpicContext, HierarchicalContext, ProjectBrief, UserStoryInput


def _bullets(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def format_project_brief(brief: ProjectBrief | None) -> str:
    if brief is None:
        return ""

    sections: list[str] = []
    if brief.vision:
        sections.append(f"**Vision**: {brief.vision}")
    if brief.target_users:
        sections.append(f"**Target Users**: {', '.join(brief.target_users)}")
    if brief.key_features:
        sections.append(f"**Key Features**:\n{_bullets(brief.key_features)}")
    if brief.tech_stack:
        stack = [f"{layer}: {value}" for layer, value in brief.tech_stack.model_dump().items() if value]
        if stack:
            sections.append(f"**Tech Stack**:\n{_bullets(stack)}")
    if brief.business_goals:
        sections.append(f"**Business Goals**:\n{_bullets(brief.business_goals)}")
    if brief.constraints:
        sections.append(f"**Constraints**:\n{_bullets(brief.constraints)}")
    return "\n\n".join(sections)


def _format_epic(epic: EpicContext) -> str:
    lines = ["# EPIC CONTEXT", f"**Epic**: {epic.name}"]
    if epic.description:
        lines.append(f"**Description**: {epic.description}")
    if epic.user_value:
        lines.append(f"**User Value**: {epic.user_value}")
    if epic.business_objectives:
        lines.append(f"**Business Objectives**:\n{_bullets(epic.business_objectives)}")
    if epic.technical_context:
        lines.append(f"**Technical Context**: {epic.technical_context}")
    return "\n".join(lines)


def build_context(context: HierarchicalContext | None) -> str:
    """Render the project/epic layers injected ahead of every platform prompt."""
    if context is None:
        return ""

    project = context.project
    sections = [f"# PROJECT CONTEXT\n**Project**: {project.name}"]
    brief = format_project_brief(project.project_brief)
    if brief:
        sections.append(brief)
    if project.context_document:
        sections.append(f"## Project Documentation\n{project.context_document}")
    if context.epic is not None:
        sections.append(_format_epic(context.epic))
    return "\n\n".join(sections)


def build_story_block(story: UserStoryInput, additional_context: str | None = None) -> str:
    lines = [
        "# USER STORY",
        f"**ID**: {story.id}",
        f'**Narrative**: "{story.narrative}"',
        f"**Persona**: {story.persona}",
        f"**Feature Area**: {story.feature_area}",
        f"**Priority**: {story.priority}",
    ]
    if story.acceptance_criteria:
        numbered = "\n".join(f"{idx}. {criterion}" for idx, criterion in enumerate(story.acceptance_criteria, start=1))
        lines.append(f"**Acceptance Criteria**:\n{numbered}")
    if additional_context:
        lines.append(f"\n**Additional Context**:\n{additional_context}")
    return "\n".join(lines)


__all__ = ["build_context", "build_story_block", "format_project_brief"]
