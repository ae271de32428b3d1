"""Uniform result shapes returned by every tool.

Handlers never build protocol payloads themselves. They return one of the
result types below and the MCP surface renders it into a single text block.
Only ``ErrorResult`` is flagged as an error.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

# Labels used by the write operations
CREATED_PROJECT = "created project"
UPDATED_PROJECT = "updated project"
DELETED_PROJECT = "deleted project"


def to_json(data: Any) -> str:
    """Pretty-print a payload the way every result renders it."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _first_present(payload: dict[str, Any], *keys: str) -> Optional[Any]:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class SingleResource:
    """One resource, rendered unmodified."""

    data: Any
    is_error: bool = field(default=False, init=False)

    def render(self) -> str:
        return to_json(self.data)


@dataclass(frozen=True)
class ResourceList:
    """A page of resources plus whatever pagination metadata was reported.

    Attributes:
        items: The returned resources (never None)
        total_count: Total matching resources, if the service reported it
        page: Current page number, if reported
        per_page: Page size, if reported
    """

    items: list[Any]
    total_count: Optional[int] = None
    page: Optional[int] = None
    per_page: Optional[int] = None
    is_error: bool = field(default=False, init=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "ResourceList":
        """Build a list result from a listing response.

        The ``results`` envelope key is optional. A payload without it (or
        with a non-list value) yields an empty list. A bare JSON array is
        taken as the items themselves.
        """
        if isinstance(payload, list):
            return cls(items=list(payload))
        if not isinstance(payload, dict):
            return cls(items=[])

        results = payload.get("results")
        return cls(
            items=list(results) if isinstance(results, list) else [],
            total_count=_first_present(payload, "total_count", "total"),
            page=_first_present(payload, "current_page", "page"),
            per_page=_first_present(payload, "per_page", "limit"),
        )

    @property
    def summary(self) -> str:
        text = f"Found {len(self.items)} items"
        if self.total_count is not None:
            text += f" (total: {self.total_count})"
        if self.page is not None:
            text += f" (page {self.page})"
        return text

    def render(self) -> str:
        return f"{self.summary}\n\n{to_json(self.items)}"


@dataclass(frozen=True)
class WriteConfirmation:
    """Acknowledgement of a successful write."""

    operation_label: str
    resource: Any = None
    is_error: bool = field(default=False, init=False)

    def render(self) -> str:
        text = f"Successfully {self.operation_label}"
        if self.resource:
            text += f"\n\n{to_json(self.resource)}"
        return text


@dataclass(frozen=True)
class TextReport:
    """Free-form markdown, returned verbatim."""

    text: str
    is_error: bool = field(default=False, init=False)

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class ErrorResult:
    """A failed call. ``message`` is already safe to show the caller."""

    message: str
    is_error: bool = field(default=True, init=False)

    def render(self) -> str:
        return self.message


Result = Union[SingleResource, ResourceList, WriteConfirmation, TextReport, ErrorResult]
