"""Operation catalog: every tool the gateway can expose.

Each ``OperationSpec`` ties a tool name to its parameter contract and an
async handler. Handlers receive an already validated contract instance and
return a result from ``formatting``; they never catch errors themselves.

Read operations:
    list_projects, get_project, get_project_occurrence_counts,
    get_project_integrations, get_project_report, list_faults, get_fault,
    get_fault_counts, list_fault_notices, list_fault_affected_users,
    get_fault_occurrence_counts, analyze_fault

Write operations (registered only when writes are enabled):
    create_project, update_project, delete_project (destructive)
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Optional

from . import contracts as c
from .analysis import analyze_fault
from .client import HoneybadgerClient
from .formatting import (
    CREATED_PROJECT,
    DELETED_PROJECT,
    UPDATED_PROJECT,
    ResourceList,
    Result,
    SingleResource,
    TextReport,
    WriteConfirmation,
)

Handler = Callable[[HoneybadgerClient, Any], Awaitable[Result]]


@dataclass(frozen=True)
class OperationSpec:
    """Declaration of one tool.

    Attributes:
        name: Tool name advertised to the client
        description: Tool description advertised to the client
        contract: Pydantic model validating the tool's arguments
        handler: Coroutine turning validated params into a result
        read_only: False for operations that change remote state
        destructive: True when the change cannot be undone (needs confirm)
        confirm_action: What a destructive call will do, for the prompt
    """
    name: str
    description: str
    contract: type[c.Contract]
    handler: Handler
    read_only: bool = True
    destructive: bool = False
    confirm_action: Optional[str] = None

    @property
    def annotations(self) -> dict[str, Any]:
        """MCP tool annotations derived from the operation's kind."""
        return {
            "title": self.name.replace("_", " ").title(),
            "readOnlyHint": self.read_only,
            "destructiveHint": self.destructive,
            "openWorldHint": True,
        }


# ============================================
# Project Handlers
# ============================================

async def list_projects(client: HoneybadgerClient, params: c.ListProjectsParams) -> Result:
    payload = await client.get("/projects", params=params.query("account_id", "page", "limit"))
    return ResourceList.from_payload(payload)


async def get_project(client: HoneybadgerClient, params: c.GetProjectParams) -> Result:
    return SingleResource(await client.get(f"/projects/{params.project_id}"))


async def get_project_occurrence_counts(
    client: HoneybadgerClient,
    params: c.ProjectOccurrenceCountsParams,
) -> Result:
    payload = await client.get(
        f"/projects/{params.project_id}/occurrences",
        params=params.query("period", "environment"),
    )
    return SingleResource(payload)


async def get_project_integrations(
    client: HoneybadgerClient,
    params: c.GetProjectIntegrationsParams,
) -> Result:
    return SingleResource(await client.get(f"/projects/{params.project_id}/integrations"))


async def get_project_report(client: HoneybadgerClient, params: c.ProjectReportParams) -> Result:
    payload = await client.get(
        f"/projects/{params.project_id}/reports/{params.report}",
        params=params.query("start", "stop", "environment"),
    )
    return SingleResource(payload)


async def create_project(client: HoneybadgerClient, params: c.CreateProjectParams) -> Result:
    payload = await client.post(
        "/projects",
        json_body=params.project_payload(),
        params=params.query("account_id"),
    )
    return WriteConfirmation(CREATED_PROJECT, payload)


async def update_project(client: HoneybadgerClient, params: c.UpdateProjectParams) -> Result:
    payload = await client.put(
        f"/projects/{params.project_id}",
        json_body=params.project_payload(),
    )
    return WriteConfirmation(UPDATED_PROJECT, payload)


async def delete_project(client: HoneybadgerClient, params: c.DeleteProjectParams) -> Result:
    payload = await client.delete(f"/projects/{params.project_id}")
    return WriteConfirmation(DELETED_PROJECT, payload)


# ============================================
# Fault Handlers
# ============================================

async def list_faults(client: HoneybadgerClient, params: c.ListFaultsParams) -> Result:
    payload = await client.get(
        f"/projects/{params.project_id}/faults",
        params=params.query(
            "q",
            "created_after",
            "occurred_after",
            "occurred_before",
            "order",
            "limit",
            "page",
            "environment",
            "resolved",
        ),
    )
    return ResourceList.from_payload(payload)


async def get_fault(client: HoneybadgerClient, params: c.GetFaultParams) -> Result:
    return SingleResource(
        await client.get(f"/projects/{params.project_id}/faults/{params.fault_id}")
    )


async def get_fault_counts(client: HoneybadgerClient, params: c.FaultCountsParams) -> Result:
    payload = await client.get(
        f"/projects/{params.project_id}/faults/summary",
        params=params.query("q", "created_after", "occurred_after", "occurred_before"),
    )
    return SingleResource(payload)


async def list_fault_notices(client: HoneybadgerClient, params: c.ListFaultNoticesParams) -> Result:
    payload = await client.get(
        f"/projects/{params.project_id}/faults/{params.fault_id}/notices",
        params=params.query("created_after", "created_before", "limit"),
    )
    return ResourceList.from_payload(payload)


async def list_fault_affected_users(
    client: HoneybadgerClient,
    params: c.ListFaultAffectedUsersParams,
) -> Result:
    payload = await client.get(
        f"/projects/{params.project_id}/faults/{params.fault_id}/affected_users",
        params=params.query("q"),
    )
    return ResourceList.from_payload(payload)


async def get_fault_occurrence_counts(
    client: HoneybadgerClient,
    params: c.FaultOccurrenceCountsParams,
) -> Result:
    payload = await client.get(
        f"/projects/{params.project_id}/faults/{params.fault_id}/occurrences",
        params=params.query("period"),
    )
    return SingleResource(payload)


async def analyze_fault_handler(client: HoneybadgerClient, params: c.AnalyzeFaultParams) -> Result:
    report = await analyze_fault(
        client,
        params.project_id,
        params.fault_id,
        include_context=params.include_context,
    )
    return TextReport(report)


# ============================================
# Catalog
# ============================================

OPERATIONS: tuple[OperationSpec, ...] = (
    OperationSpec(
        name="list_projects",
        description="List all Honeybadger projects the API token can access.",
        contract=c.ListProjectsParams,
        handler=list_projects,
    ),
    OperationSpec(
        name="get_project",
        description="Get details of a single Honeybadger project.",
        contract=c.GetProjectParams,
        handler=get_project,
    ),
    OperationSpec(
        name="get_project_occurrence_counts",
        description="Get occurrence counts for all faults in a project, bucketed by period.",
        contract=c.ProjectOccurrenceCountsParams,
        handler=get_project_occurrence_counts,
    ),
    OperationSpec(
        name="get_project_integrations",
        description="List the notification integrations configured for a project.",
        contract=c.GetProjectIntegrationsParams,
        handler=get_project_integrations,
    ),
    OperationSpec(
        name="get_project_report",
        description=(
            "Get a project report: notices grouped by class, location or user, "
            "or notices per day."
        ),
        contract=c.ProjectReportParams,
        handler=get_project_report,
    ),
    OperationSpec(
        name="list_faults",
        description="List faults (errors) in a Honeybadger project, with optional filtering.",
        contract=c.ListFaultsParams,
        handler=list_faults,
    ),
    OperationSpec(
        name="get_fault",
        description="Get detailed information about a specific fault.",
        contract=c.GetFaultParams,
        handler=get_fault,
    ),
    OperationSpec(
        name="get_fault_counts",
        description="Get fault counts for a project, grouped by environment and status.",
        contract=c.FaultCountsParams,
        handler=get_fault_counts,
    ),
    OperationSpec(
        name="list_fault_notices",
        description="List individual occurrences (notices) of a fault, newest first.",
        contract=c.ListFaultNoticesParams,
        handler=list_fault_notices,
    ),
    OperationSpec(
        name="list_fault_affected_users",
        description="List the users affected by a fault and how often each hit it.",
        contract=c.ListFaultAffectedUsersParams,
        handler=list_fault_affected_users,
    ),
    OperationSpec(
        name="get_fault_occurrence_counts",
        description="Get occurrence counts for a single fault, bucketed by period.",
        contract=c.FaultOccurrenceCountsParams,
        handler=get_fault_occurrence_counts,
    ),
    OperationSpec(
        name="analyze_fault",
        description=(
            "Analyze a fault: overview, stack trace, request context, occurrence "
            "trend, impact and fix suggestions."
        ),
        contract=c.AnalyzeFaultParams,
        handler=analyze_fault_handler,
    ),
    OperationSpec(
        name="create_project",
        description="Create a new Honeybadger project.",
        contract=c.CreateProjectParams,
        handler=create_project,
        read_only=False,
    ),
    OperationSpec(
        name="update_project",
        description="Update the settings of an existing Honeybadger project.",
        contract=c.UpdateProjectParams,
        handler=update_project,
        read_only=False,
    ),
    OperationSpec(
        name="delete_project",
        description=(
            "Permanently delete a Honeybadger project and all of its data. "
            "Requires confirm=true."
        ),
        contract=c.DeleteProjectParams,
        handler=delete_project,
        read_only=False,
        destructive=True,
        confirm_action="permanently delete the project and all of its faults",
    ),
)
