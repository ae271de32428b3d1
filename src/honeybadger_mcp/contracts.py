"""
Parameter contracts for every tool.

Each tool declares one pydantic model. The model is both the JSON schema
advertised to the MCP client and the validator that runs before any
network activity. Rules shared by all contracts:

- Identifiers are strict positive integers; "123" and True are rejected.
- Unknown fields are rejected.
- Page sizes are clamped to their maximum instead of rejected.
- Timestamps are parsed and normalized to UTC ("2026-02-16T10:00:00Z").
- project_id falls back to HONEYBADGER_PROJECT_ID when omitted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from .config import PROJECT_ID_ENV, Configuration
from .exceptions import ValidationError

MAX_PROJECT_LIMIT = 100
MAX_FAULT_LIMIT = 25
MAX_NOTICE_LIMIT = 25

TIMESTAMP_FORMAT_HINT = "ISO 8601 (e.g. 2026-02-16T10:00:00Z)"

SCOPE_REQUIRED_MESSAGE = (
    f"project_id is required: pass project_id or set the {PROJECT_ID_ENV} "
    "environment variable"
)

PositiveId = Annotated[int, Field(strict=True, gt=0)]

OrderMode = Literal["recent", "frequent"]
Period = Literal["hour", "day", "week", "month"]
ReportKind = Literal[
    "notices_by_class",
    "notices_by_location",
    "notices_by_user",
    "notices_per_day",
]


# =============================================================================
# Normalization Helpers
# =============================================================================


def normalize_timestamp(value: str) -> str:
    """Parse an ISO 8601 timestamp and render it in UTC with a Z suffix.

    Naive timestamps are taken as UTC. Sub-second precision is kept when
    present so the instant is never shifted.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Offsets near year 1 or 9999 can leave the datetime range
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError):
        raise ValueError(
            f"invalid timestamp, expected {TIMESTAMP_FORMAT_HINT}, got {value!r}"
        ) from None

    timespec = "microseconds" if parsed.microsecond else "seconds"
    return parsed.isoformat(timespec=timespec) + "Z"


def _timestamp_field(description: str) -> Any:
    return Field(default=None, description=f"{description} ({TIMESTAMP_FORMAT_HINT})")


# =============================================================================
# Base Contracts
# =============================================================================


class Contract(BaseModel):
    """Base class for tool parameter contracts."""

    model_config = ConfigDict(extra="forbid")

    def query(self, *fields: str) -> dict[str, Any]:
        """Return the named fields that are set, for use as query parameters."""
        return self.model_dump(include=set(fields), exclude_none=True)


class ProjectScoped(Contract):
    """Contract for tools that act inside one project."""

    project_id: Optional[PositiveId] = Field(
        default=None,
        description=f"Project ID (defaults to {PROJECT_ID_ENV} when omitted)",
    )

    @model_validator(mode="after")
    def _resolve_project_scope(self, info: ValidationInfo) -> "ProjectScoped":
        if self.project_id is None:
            default = (info.context or {}).get("default_project_id")
            if default is None:
                raise ValueError(SCOPE_REQUIRED_MESSAGE)
            self.project_id = default
        return self


class FaultScoped(ProjectScoped):
    """Contract for tools that act on one fault."""

    fault_id: PositiveId = Field(description="The ID of the fault")


# =============================================================================
# Project Contracts
# =============================================================================


class ListProjectsParams(Contract):
    MAX_LIMIT: ClassVar[int] = MAX_PROJECT_LIMIT

    account_id: Optional[str] = Field(
        default=None,
        description="Only list projects belonging to this account",
    )
    page: Optional[PositiveId] = Field(default=None, description="Page number (starts at 1)")
    limit: int = Field(
        default=25,
        strict=True,
        ge=1,
        description=f"Number of projects per page (default 25, max {MAX_PROJECT_LIMIT})",
    )

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        return min(value, cls.MAX_LIMIT)


class GetProjectParams(ProjectScoped):
    pass


class GetProjectIntegrationsParams(ProjectScoped):
    pass


class ProjectOccurrenceCountsParams(ProjectScoped):
    period: Period = Field(default="day", description="Bucket size for the counts")
    environment: Optional[str] = Field(
        default=None,
        description="Only count occurrences from this environment",
    )


class ProjectReportParams(ProjectScoped):
    report: ReportKind = Field(description="Which report to generate")
    start: Optional[str] = _timestamp_field("Report window start")
    stop: Optional[str] = _timestamp_field("Report window end")
    environment: Optional[str] = Field(
        default=None,
        description="Only include notices from this environment",
    )

    @field_validator("start", "stop")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[str]) -> Optional[str]:
        return normalize_timestamp(value) if value is not None else None


class ProjectSettings(Contract):
    """Writable project attributes shared by create and update."""

    SETTINGS_FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "resolve_errors_on_deploy",
        "disable_public_links",
        "user_url",
        "source_url",
        "purge_days",
        "user_search_field",
    )

    resolve_errors_on_deploy: Optional[StrictBool] = Field(
        default=None,
        description="Resolve all errors when a deploy is recorded",
    )
    disable_public_links: Optional[StrictBool] = Field(
        default=None,
        description="Disable public links to notices",
    )
    user_url: Optional[str] = Field(
        default=None,
        description="URL template for linking users, e.g. https://example.com/users/[user_id]",
    )
    source_url: Optional[str] = Field(
        default=None,
        description="URL template for linking source files",
    )
    purge_days: Optional[PositiveId] = Field(
        default=None,
        description="Days to keep notices before purging",
    )
    user_search_field: Optional[str] = Field(
        default=None,
        description="Context field used to search for users",
    )

    def project_payload(self) -> dict[str, Any]:
        """Build the ``{"project": {...}}`` request body from the set fields."""
        return {"project": self.query(*self.SETTINGS_FIELDS)}


class CreateProjectParams(ProjectSettings):
    name: str = Field(strict=True, min_length=1, max_length=255, description="Project name")
    account_id: Optional[str] = Field(
        default=None,
        description="Account to create the project in (defaults to the token owner's account)",
    )


class UpdateProjectParams(ProjectSettings):
    project_id: PositiveId = Field(description="The ID of the project to update")
    name: Optional[str] = Field(
        default=None,
        strict=True,
        min_length=1,
        max_length=255,
        description="New project name",
    )

    @model_validator(mode="after")
    def _require_a_change(self) -> "UpdateProjectParams":
        if not self.query(*self.SETTINGS_FIELDS):
            raise ValueError(
                "at least one project attribute to update is required "
                f"({', '.join(self.SETTINGS_FIELDS)})"
            )
        return self


class DeleteProjectParams(Contract):
    project_id: PositiveId = Field(description="The ID of the project to delete")
    confirm: StrictBool = Field(
        default=False,
        description="Must be true to delete; deleting a project cannot be undone",
    )


# =============================================================================
# Fault Contracts
# =============================================================================


class ListFaultsParams(ProjectScoped):
    MAX_LIMIT: ClassVar[int] = MAX_FAULT_LIMIT

    q: Optional[str] = Field(
        default=None,
        description='Search string, e.g. "-is:resolved environment:production"',
    )
    created_after: Optional[str] = _timestamp_field("Only faults first seen after this time")
    occurred_after: Optional[str] = _timestamp_field("Only faults that occurred after this time")
    occurred_before: Optional[str] = _timestamp_field("Only faults that occurred before this time")
    order: OrderMode = Field(
        default="recent",
        description="Sort by most recent occurrence or by frequency",
    )
    limit: int = Field(
        default=25,
        strict=True,
        ge=1,
        description=f"Number of faults to fetch (default 25, max {MAX_FAULT_LIMIT})",
    )
    page: Optional[PositiveId] = Field(default=None, description="Page number (starts at 1)")
    environment: Optional[str] = Field(
        default=None,
        description="Filter by environment (e.g. production, staging)",
    )
    resolved: Optional[StrictBool] = Field(default=None, description="Filter by resolved status")

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        return min(value, cls.MAX_LIMIT)

    @field_validator("created_after", "occurred_after", "occurred_before")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[str]) -> Optional[str]:
        return normalize_timestamp(value) if value is not None else None


class GetFaultParams(FaultScoped):
    pass


class FaultCountsParams(ProjectScoped):
    q: Optional[str] = Field(default=None, description="Search string to narrow the counted faults")
    created_after: Optional[str] = _timestamp_field("Only faults first seen after this time")
    occurred_after: Optional[str] = _timestamp_field("Only faults that occurred after this time")
    occurred_before: Optional[str] = _timestamp_field("Only faults that occurred before this time")

    @field_validator("created_after", "occurred_after", "occurred_before")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[str]) -> Optional[str]:
        return normalize_timestamp(value) if value is not None else None


class ListFaultNoticesParams(FaultScoped):
    MAX_LIMIT: ClassVar[int] = MAX_NOTICE_LIMIT

    created_after: Optional[str] = _timestamp_field("Only notices received after this time")
    created_before: Optional[str] = _timestamp_field("Only notices received before this time")
    limit: int = Field(
        default=10,
        strict=True,
        ge=1,
        description=f"Number of notices to fetch (default 10, max {MAX_NOTICE_LIMIT})",
    )

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        return min(value, cls.MAX_LIMIT)

    @field_validator("created_after", "created_before")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[str]) -> Optional[str]:
        return normalize_timestamp(value) if value is not None else None


class ListFaultAffectedUsersParams(FaultScoped):
    q: Optional[str] = Field(default=None, description="Search string to filter users")


class FaultOccurrenceCountsParams(FaultScoped):
    period: Period = Field(default="day", description="Bucket size for the counts")


class AnalyzeFaultParams(FaultScoped):
    include_context: StrictBool = Field(
        default=True,
        description="Include request context and parameters in the analysis",
    )


# =============================================================================
# Validation Entry Point
# =============================================================================


def validate_arguments(
    contract: type[Contract],
    arguments: Optional[dict[str, Any]],
    config: Configuration,
    operation: Optional[str] = None,
) -> Contract:
    """Validate raw tool arguments against a contract.

    Args:
        contract: The operation's contract model
        arguments: Arguments as received from the protocol layer
        config: Gateway configuration (supplies the default project)
        operation: Tool name, for error details

    Returns:
        The validated, normalized contract instance

    Raises:
        ValidationError: With one ``field: reason`` clause per violation
    """
    try:
        return contract.model_validate(
            arguments if arguments is not None else {},
            context={"default_project_id": config.default_project_id},
        )
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e), operation=operation, cause=e) from None


def describe_errors(error: PydanticValidationError) -> list[tuple[str, str]]:
    """Flatten pydantic errors into ``(field, reason)`` pairs."""
    described = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ()))
        reason = item.get("msg", "invalid value")
        if reason.startswith("Value error, "):
            reason = reason[len("Value error, "):]
        described.append((field, reason))
    return described
