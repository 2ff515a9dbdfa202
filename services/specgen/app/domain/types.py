"""Domain models for story inputs and generated specs.

Generated entities are validated from model output: nulls read as defaults,
enum-like fields are read leniently, and a malformed list entry is dropped on
its own instead of failing its parent.
"""
from __future__ import annotations

import enum
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator, model_validator

from .platforms import PlatformId, resolve_platform

logger = structlog.get_logger(__name__)

_NULL_REFERENCES = {"", "none", "null", "n/a", "na", "-"}


class Confidence(str, enum.Enum):
    high = "HIGH"
    medium = "MEDIUM"
    low = "LOW"

    @classmethod
    def coerce(cls, value: Any) -> "Confidence":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        return cls.low


class AssumptionCategory(str, enum.Enum):
    architecture = "architecture"
    permissions = "permissions"
    data_model = "data_model"
    performance = "performance"
    integration = "integration"
    ux = "ux"
    security = "security"
    infrastructure = "infrastructure"


def _resolve_platforms(values: Any) -> list[PlatformId]:
    if values is None:
        return []
    if not isinstance(values, list):
        values = [values]
    resolved: list[PlatformId] = []
    for value in values:
        platform = resolve_platform(value)
        if platform is None:
            raise ValueError(f"unknown platform reference: {value!r}")
        resolved.append(platform)
    return resolved


def _none_to_default(cls: type[BaseModel], value: Any, info: ValidationInfo) -> Any:
    if value is None:
        return cls.model_fields[info.field_name].get_default(call_default_factory=True)
    return value


def validate_each(model: type[BaseModel], values: Any, field_name: str | None) -> Any:
    """Validate list entries one by one, dropping (and logging) the ones that fail."""
    if values is None:
        return []
    if not isinstance(values, list):
        return values
    kept: list[BaseModel] = []
    for value in values:
        try:
            kept.append(model.model_validate(value))
        except ValidationError as exc:
            logger.warning(
                "specgen.model_output.item_dropped",
                model=model.__name__,
                field=field_name,
                errors=exc.error_count(),
            )
    return kept


# --- inputs -----------------------------------------------------------------


class UserStoryInput(BaseModel):
    id: str
    narrative: str
    persona: str
    feature_area: str
    acceptance_criteria: list[str] | None = None
    priority: str

    model_config = ConfigDict(frozen=True)


class TechStack(BaseModel):
    frontend: str | None = None
    backend: str | None = None
    admin: str | None = None
    mobile: str | None = None
    infrastructure: str | None = None

    model_config = ConfigDict(frozen=True)


class ProjectBrief(BaseModel):
    vision: str | None = None
    target_users: list[str] | None = None
    key_features: list[str] | None = None
    tech_stack: TechStack | None = None
    business_goals: list[str] | None = None
    constraints: list[str] | None = None

    model_config = ConfigDict(frozen=True)


class ProjectContext(BaseModel):
    id: str | None = None
    name: str
    context_document: str | None = None
    project_brief: ProjectBrief | None = None

    model_config = ConfigDict(frozen=True)


class EpicContext(BaseModel):
    id: str | None = None
    name: str
    description: str | None = None
    business_objectives: list[str] | None = None
    technical_context: str | None = None
    user_value: str | None = None

    model_config = ConfigDict(frozen=True)


class HierarchicalContext(BaseModel):
    project: ProjectContext
    epic: EpicContext | None = None
    user_story: UserStoryInput | None = None

    model_config = ConfigDict(frozen=True)


# --- generated specs --------------------------------------------------------


class Assumption(BaseModel):
    topic: str
    decision: str
    rationale: str = ""
    confidence: Confidence = Confidence.low
    category: AssumptionCategory
    alternatives: list[str] | None = None
    unknowns: list[str] | None = None
    questions_to_ask: list[str] | None = None
    where_to_look: list[str] | None = None
    risk_if_skipped: str | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> Confidence:
        return Confidence.coerce(value)

    @field_validator("rationale", mode="before")
    @classmethod
    def _default_rationale(cls, value: Any, info: ValidationInfo) -> Any:
        return _none_to_default(cls, value, info)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower().replace(" ", "_").replace("-", "_")
        return value

    @model_validator(mode="after")
    def _drop_escalation_when_confident(self) -> "Assumption":
        # escalation fields only flag MEDIUM/LOW items for human review
        if self.confidence is Confidence.high:
            self.unknowns = None
            self.questions_to_ask = None
            self.where_to_look = None
            self.risk_if_skipped = None
        return self

    @property
    def needs_review(self) -> bool:
        return self.confidence is not Confidence.high


class ImplementationStep(BaseModel):
    step: int
    title: str
    details: str = ""
    code_example: str | None = None
    estimated_time: str | None = None
    potential_blockers: list[str] | None = None


class CodeSnippet(BaseModel):
    language: str = ""
    title: str = ""
    code: str = ""
    file_path: str | None = None
    explanation: str | None = None


class GeneratedTask(BaseModel):
    name: str
    platform: PlatformId
    priority: str = "P1"
    estimate: str = ""
    confidence: Confidence = Confidence.low
    objective: str = ""
    rationale: str = ""
    implementation_steps: list[ImplementationStep] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    validation: str = ""
    definition_of_done: list[str] = Field(default_factory=list)
    code_snippets: list[CodeSnippet] | None = None
    dependencies: list[str] | None = None
    sub_tasks: list[str] = Field(default_factory=list)
    risks: list[str] | None = None
    testing_strategy: str | None = None
    assumptions: list[Assumption] = Field(default_factory=list)

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> Confidence:
        return Confidence.coerce(value)

    @field_validator(
        "priority", "estimate", "objective", "rationale", "validation", "outputs", "definition_of_done", "sub_tasks",
        mode="before",
    )
    @classmethod
    def _null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        return _none_to_default(cls, value, info)

    @field_validator("implementation_steps", mode="before")
    @classmethod
    def _valid_steps(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(ImplementationStep, value, info.field_name)

    @field_validator("code_snippets", mode="before")
    @classmethod
    def _valid_snippets(cls, value: Any, info: ValidationInfo) -> Any:
        return None if value is None else validate_each(CodeSnippet, value, info.field_name)

    @field_validator("assumptions", mode="before")
    @classmethod
    def _valid_assumptions(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(Assumption, value, info.field_name)


class IntegrationContract(BaseModel):
    endpoint: str
    method: str = "GET"
    platforms: list[PlatformId] = Field(default_factory=list)
    request_schema: str | None = None
    response_schema: str | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any, info: ValidationInfo) -> Any:
        # realtime channels (SUBSCRIBE, WS, ...) are kept as given
        return value.strip().upper() if isinstance(value, str) else _none_to_default(cls, value, info)

    @field_validator("platforms", mode="before")
    @classmethod
    def _platforms(cls, value: Any) -> list[PlatformId]:
        return _resolve_platforms(value)


class SharedType(BaseModel):
    name: str
    definition: str = ""
    used_by: list[PlatformId] = Field(default_factory=list)

    @field_validator("definition", mode="before")
    @classmethod
    def _default_definition(cls, value: Any, info: ValidationInfo) -> Any:
        return _none_to_default(cls, value, info)

    @field_validator("used_by", mode="before")
    @classmethod
    def _platforms(cls, value: Any) -> list[PlatformId]:
        return _resolve_platforms(value)


class IntegrationStep(BaseModel):
    order: int
    platform: PlatformId
    dependency: PlatformId | None = None
    deliverable: str = ""

    @field_validator("platform", "dependency", mode="before")
    @classmethod
    def _platform(cls, value: Any, info: ValidationInfo) -> PlatformId | None:
        if value is None:
            return None
        if info.field_name == "dependency" and isinstance(value, str) and value.strip().lower() in _NULL_REFERENCES:
            return None
        platform = resolve_platform(value)
        if platform is None:
            raise ValueError(f"unknown platform reference: {value!r}")
        return platform

    @field_validator("deliverable", mode="before")
    @classmethod
    def _default_deliverable(cls, value: Any, info: ValidationInfo) -> Any:
        return _none_to_default(cls, value, info)


class IntegrationTest(BaseModel):
    name: str
    platforms_involved: list[PlatformId] = Field(default_factory=list)
    test_scenario: str = ""

    @field_validator("test_scenario", mode="before")
    @classmethod
    def _default_scenario(cls, value: Any, info: ValidationInfo) -> Any:
        return _none_to_default(cls, value, info)

    @field_validator("platforms_involved", mode="before")
    @classmethod
    def _platforms(cls, value: Any) -> list[PlatformId]:
        return _resolve_platforms(value)


class IntegrationStrategy(BaseModel):
    """Cross-platform plan; entries that fail validation are dropped individually."""

    api_contracts: list[IntegrationContract] = Field(default_factory=list)
    shared_types: list[SharedType] = Field(default_factory=list)
    integration_sequence: list[IntegrationStep] = Field(default_factory=list)
    integration_tests: list[IntegrationTest] = Field(default_factory=list)

    @field_validator("api_contracts", mode="before")
    @classmethod
    def _valid_contracts(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(IntegrationContract, value, info.field_name)

    @field_validator("shared_types", mode="before")
    @classmethod
    def _valid_types(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(SharedType, value, info.field_name)

    @field_validator("integration_sequence", mode="before")
    @classmethod
    def _valid_sequence(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(IntegrationStep, value, info.field_name)

    @field_validator("integration_tests", mode="before")
    @classmethod
    def _valid_tests(cls, value: Any, info: ValidationInfo) -> Any:
        return validate_each(IntegrationTest, value, info.field_name)


class PlatformDefinitionOfDone(BaseModel):
    platform: PlatformId
    platform_name: str
    checklist: list[str] = Field(default_factory=list)


class IntegrationDefinitionOfDone(BaseModel):
    description: str
    checklist: list[str] = Field(default_factory=list)


class DefinitionOfDone(BaseModel):
    platform_dod: list[PlatformDefinitionOfDone] = Field(default_factory=list)
    integration_dod: IntegrationDefinitionOfDone | None = None


class GeneratedSpecs(BaseModel):
    tasks: list[GeneratedTask] = Field(default_factory=list)
    integration_strategy: IntegrationStrategy | None = None
    definition_of_done: DefinitionOfDone = Field(default_factory=DefinitionOfDone)
    assumptions: list[Assumption] = Field(default_factory=list)
    overall_confidence: int = Field(default=0, ge=0, le=100)
    verification: VerificationReport | None = None

    def to_payload(self) -> dict[str, Any]:
        """Render the response shape, leaving out optional sections that were not produced."""
        payload = self.model_dump(mode="json")
        for key in ("integration_strategy", "verification"):
            if payload.get(key) is None:
                payload.pop(key, None)
        if payload["definition_of_done"].get("integration_dod") is None:
            payload["definition_of_done"].pop("integration_dod", None)
        return payload


# --- verification -----------------------------------------------------------


class VerificationIssue(BaseModel):
    severity: Literal["error", "warning", "info"] = "warning"
    category: Literal["hallucination", "syntax", "logic", "completeness", "feasibility"] = "completeness"
    description: str
    location: str | None = None
    suggestion: str | None = None


class VerificationResult(BaseModel):
    passed: bool
    score: int = Field(ge=0, le=100)
    issues: list[VerificationIssue] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    summary: str = ""


class StaticCheckResult(BaseModel):
    name: str
    passed: bool
    details: str | None = None


class StaticAnalysisResult(BaseModel):
    checks: list[StaticCheckResult] = Field(default_factory=list)
    all_passed: bool
    summary: str


class VerificationReport(BaseModel):
    static: StaticAnalysisResult
    critic: VerificationResult | None = None


GeneratedSpecs.model_rebuild()


__all__ = [
    "Assumption",
    "AssumptionCategory",
    "CodeSnippet",
    "Confidence",
    "DefinitionOfDone",
    "EpicContext",
    "GeneratedSpecs",
    "GeneratedTask",
    "HierarchicalContext",
    "ImplementationStep",
    "IntegrationContract",
    "IntegrationDefinitionOfDone",
    "IntegrationStep",
    "IntegrationStrategy",
    "IntegrationTest",
    "PlatformDefinitionOfDone",
    "ProjectBrief",
    "ProjectContext",
    "SharedType",
    "StaticAnalysisResult",
    "StaticCheckResult",
    "TechStack",
    "UserStoryInput",
    "VerificationIssue",
    "VerificationReport",
    "VerificationResult",
    "validate_each",
]
