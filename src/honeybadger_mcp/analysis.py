"""Fault analysis: concurrent evidence gathering and the markdown report.

``analyze_fault`` fetches four things at once:

    fault detail        required
    latest notices      required
    occurrence trend    best-effort
    affected users      best-effort

A failure in a required fetch fails the call. A ``HoneybadgerError`` in a
best-effort fetch only drops that report section; the other fetches are
never cancelled because of it.

``generate_analysis`` is a pure template over the gathered payloads.
"""
from __future__ import annotations

import asyncio
import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from .client import HoneybadgerClient
from .exceptions import HoneybadgerError
from .formatting import ResourceList

logger = logging.getLogger(__name__)

NOTICE_SAMPLE_SIZE = 10
BACKTRACE_DEPTH = 10
BACKTRACE_SHOWN = 5
TREND_BUCKETS_SHOWN = 7
TOP_USERS_SHOWN = 5

TREND_PERIOD = "day"
_PERIOD_LABELS = {"hour": "hours", "day": "days", "week": "weeks", "month": "months"}

# (substring of the error class, what it suggests, quick fixes)
_ERROR_HINTS: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    (
        "NoMethodError",
        (
            "A method is being called on an object that doesn't respond to it",
            "Possible nil object or wrong object type",
            "Missing method definition or typo in method name",
        ),
        (
            "Add nil checks: `object&.method_name`",
            "Verify object type before method calls",
            "Check method spelling and availability",
        ),
    ),
    (
        "NameError",
        (
            "Undefined variable or constant",
            "Typo in variable/constant name",
            "Scope issues",
        ),
        (),
    ),
    (
        "ArgumentError",
        (
            "Wrong number of arguments passed to a method",
            "Invalid argument values",
            "Method signature mismatch",
        ),
        (
            "Review method signatures",
            "Validate input parameters",
            "Add parameter validation",
        ),
    ),
    (
        "ActiveRecord",
        (
            "Database-related error",
            "Possible migration issues",
            "Invalid queries or constraints",
        ),
        (
            "Check database migrations",
            "Validate model associations",
            "Review query syntax",
        ),
    ),
)

_GENERIC_HINTS = (
    "Review the specific error class documentation",
    "Check for common patterns in this error type",
)


@dataclass
class FaultEvidence:
    """Everything the report is built from. Optional parts may be None."""

    fault: dict[str, Any]
    notices: list[dict[str, Any]]
    occurrences: Optional[Any] = None
    affected_users: Optional[list[dict[str, Any]]] = None


# ============================================
# Evidence Gathering
# ============================================

async def gather_fault_evidence(
    client: HoneybadgerClient,
    project_id: int,
    fault_id: int,
) -> FaultEvidence:
    """Fetch the fault, its notices, trend and affected users concurrently.

    Raises:
        HoneybadgerError: If the fault or notices fetch fails
    """
    fault_path = f"/projects/{project_id}/faults/{fault_id}"

    fault, notices, occurrences, users = await asyncio.gather(
        client.get(fault_path),
        client.get(f"{fault_path}/notices", params={"limit": NOTICE_SAMPLE_SIZE}),
        client.get(f"{fault_path}/occurrences", params={"period": TREND_PERIOD}),
        client.get(f"{fault_path}/affected_users"),
        return_exceptions=True,
    )

    # Required fetches propagate whatever went wrong
    for outcome in (fault, notices):
        if isinstance(outcome, BaseException):
            raise outcome

    return FaultEvidence(
        fault=fault if isinstance(fault, dict) else {},
        notices=ResourceList.from_payload(notices).items,
        occurrences=_best_effort("occurrence trend", fault_id, occurrences),
        affected_users=_best_effort_list("affected users", fault_id, users),
    )


def _best_effort(section: str, fault_id: int, outcome: Any) -> Optional[Any]:
    if isinstance(outcome, HoneybadgerError):
        logger.warning(f"Omitting {section} for fault {fault_id}: {outcome.user_message}")
        return None
    if isinstance(outcome, BaseException):
        raise outcome
    return outcome


def _best_effort_list(section: str, fault_id: int, outcome: Any) -> Optional[list]:
    payload = _best_effort(section, fault_id, outcome)
    if payload is None:
        return None
    return ResourceList.from_payload(payload).items


async def analyze_fault(
    client: HoneybadgerClient,
    project_id: int,
    fault_id: int,
    include_context: bool = True,
) -> str:
    """Gather evidence for a fault and render the analysis report."""
    evidence = await gather_fault_evidence(client, project_id, fault_id)
    return generate_analysis(evidence, include_context=include_context)


# ============================================
# Report Template
# ============================================

def generate_analysis(evidence: FaultEvidence, include_context: bool = True) -> str:
    """Render the markdown analysis report. Deterministic for a given input."""
    fault = evidence.fault
    klass = str(fault.get("klass") or "UnknownError")
    latest_notice = evidence.notices[0] if evidence.notices else None

    sections = [
        "# Honeybadger Issue Analysis",
        _overview_section(fault, klass),
        _error_analysis_section(klass),
    ]

    if latest_notice:
        sections.append(_stack_trace_section(latest_notice))
        if include_context:
            sections.extend(_context_sections(latest_notice))

    if evidence.occurrences is not None:
        trend = _trend_section(evidence.occurrences)
        if trend:
            sections.append(trend)

    if evidence.affected_users is not None:
        sections.append(_impact_section(fault, evidence.affected_users))

    sections.append(_fix_strategies_section(klass))
    sections.append(_next_steps_section())
    sections.append(f"---\n*Analysis generated from Honeybadger fault #{fault.get('id')}*")

    return "\n\n".join(sections)


def _hints_for(klass: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    for marker, meaning, fixes in _ERROR_HINTS:
        if marker in klass:
            return meaning, fixes
    return _GENERIC_HINTS, ()


def _overview_section(fault: dict[str, Any], klass: str) -> str:
    status = "Resolved" if fault.get("resolved") else "Unresolved"
    lines = [
        "## Fault Overview",
        f"- **ID**: {fault.get('id')}",
        f"- **Error Class**: {klass}",
        f"- **Message**: {fault.get('message')}",
        f"- **Environment**: {fault.get('environment')}",
        f"- **Occurrences**: {fault.get('notices_count')}",
        f"- **First Seen**: {fault.get('created_at')}",
        f"- **Last Seen**: {fault.get('last_notice_at')}",
        f"- **Status**: {status}",
        f"- **URL**: {fault.get('url')}",
    ]
    return "\n".join(lines)


def _error_analysis_section(klass: str) -> str:
    meaning, _ = _hints_for(klass)
    lines = ["## Error Analysis", "", "### Error Type", f'The error "{klass}" suggests:']
    lines.extend(f"- {item}" for item in meaning)
    return "\n".join(lines)


def _stack_trace_section(notice: dict[str, Any]) -> str:
    backtrace = (notice.get("backtrace") or [])[:BACKTRACE_DEPTH]
    lines = ["### Stack Trace Analysis"]

    for index, frame in enumerate(backtrace[:BACKTRACE_SHOWN]):
        if not isinstance(frame, dict):
            continue
        if index == 0:
            lines.extend([
                "",
                "**Primary Error Location:**",
                f"- File: `{frame.get('file')}`",
                f"- Method: `{frame.get('method')}`",
                f"- Line: {frame.get('number')}",
            ])
            source = frame.get("source")
            if isinstance(source, dict) and source:
                lines.append("- Context:")
                lines.append("```")
                lines.extend(f"{number}: {code}" for number, code in source.items())
                lines.append("```")
        else:
            lines.append(f"- {frame.get('file')}:{frame.get('number')} in `{frame.get('method')}`")

    if len(lines) == 1:
        lines.append("No backtrace was recorded for the latest notice.")
    return "\n".join(lines)


def _context_sections(notice: dict[str, Any]) -> list[str]:
    sections = []
    context = notice.get("context")
    if context:
        sections.append(f"### Request Context\n```json\n{json.dumps(context, indent=2)}\n```")
    params = notice.get("params")
    if isinstance(params, dict) and params:
        sections.append(f"### Request Parameters\n```json\n{json.dumps(params, indent=2)}\n```")
    return sections


def _trend_section(occurrences: Any) -> Optional[str]:
    """Summarize ``[[epoch_seconds, count], ...]`` buckets, newest last."""
    buckets = []
    for bucket in occurrences if isinstance(occurrences, list) else []:
        if (
            isinstance(bucket, (list, tuple))
            and len(bucket) == 2
            and isinstance(bucket[0], (int, float))
            and isinstance(bucket[1], (int, float))
            and math.isfinite(bucket[1])
        ):
            buckets.append((bucket[0], int(bucket[1])))
    if not buckets:
        return None

    total = sum(count for _, count in buckets)
    peak_at, peak = max(buckets, key=lambda item: item[1])
    try:
        peak_label = _bucket_date(peak_at)
        rows = [
            f"| {_bucket_date(at)} | {count} |" for at, count in buckets[-TREND_BUCKETS_SHOWN:]
        ]
    except (OverflowError, OSError, ValueError) as e:
        logger.warning(f"Omitting occurrence trend: unusable bucket timestamp ({e})")
        return None

    unit = _PERIOD_LABELS[TREND_PERIOD]
    lines = [
        "## Occurrence Trend",
        f"- **Total (last {len(buckets)} {unit})**: {total}",
        f"- **Peak**: {peak} on {peak_label}",
        "",
        f"| {TREND_PERIOD.title()} | Occurrences |",
        "|---|---|",
    ]
    lines.extend(rows)
    return "\n".join(lines)


def _bucket_date(epoch_seconds: float) -> str:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).strftime("%Y-%m-%d")


def _user_count(user: dict[str, Any]) -> float:
    """Numeric occurrence count for ranking; unusable values rank last."""
    count = user.get("count")
    if isinstance(count, bool):
        return 0
    if isinstance(count, (int, float)):
        return count
    if isinstance(count, str):
        try:
            return float(count)
        except ValueError:
            return 0
    return 0


def _impact_section(fault: dict[str, Any], users: list[dict[str, Any]]) -> str:
    lines = [
        "## Impact Assessment",
        f"- **Affected Users**: {len(users)}",
        f"- **Total Occurrences**: {fault.get('notices_count')}",
    ]
    if users:
        ranked = sorted(
            (user for user in users if isinstance(user, dict)),
            key=_user_count,
            reverse=True,
        )
        lines.append("")
        lines.append("**Most affected:**")
        lines.extend(
            f"- {user.get('user')} ({user.get('count')} occurrences)"
            for user in ranked[:TOP_USERS_SHOWN]
        )
    else:
        lines.append("- No affected users were reported for this fault")
    return "\n".join(lines)


def _fix_strategies_section(klass: str) -> str:
    _, quick_fixes = _hints_for(klass)
    lines = [
        "## Recommended Fix Strategies",
        "",
        "### Immediate Actions",
        "1. **Reproduce the Error**",
        "   - Use the provided context and parameters",
        "   - Set up similar conditions in development",
        "   - Add logging around the error location",
        "",
        "2. **Quick Fixes**",
    ]
    lines.extend(f"   - {fix}" for fix in quick_fixes)
    lines.extend([
        "",
        "### Long-term Solutions",
        "1. **Add Error Handling**",
        "   - Implement proper exception handling",
        "   - Add user-friendly error messages",
        "   - Log detailed error information",
        "",
        "2. **Add Tests**",
        "   - Write unit tests covering the error scenario",
        "   - Add integration tests for the affected flow",
        "   - Include edge case testing",
        "",
        "3. **Code Review**",
        "   - Review similar patterns in codebase",
        "   - Look for related potential issues",
        "",
        "### Monitoring",
        "- Set up alerts for this error pattern",
        "- Monitor error frequency after fixes",
        "- Track related errors that might emerge",
    ])
    return "\n".join(lines)


def _next_steps_section() -> str:
    return "\n".join([
        "## Next Steps",
        "1. Examine the code at the primary error location",
        "2. Set up local reproduction using the provided context",
        "3. Implement the recommended fixes",
        "4. Add appropriate tests",
        "5. Deploy and monitor the fix effectiveness",
    ])
