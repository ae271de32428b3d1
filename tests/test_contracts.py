#!/usr/bin/env python3
"""Unit tests for tool parameter contracts.

Tests cover:
    - Strict positive identifiers
    - Project scope resolution against the configured default
    - Page size clamping
    - Timestamp normalization and error messages
    - Enum fields and unknown fields
    - Aggregated ValidationError messages
"""
import sys

import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.honeybadger_mcp.config import Configuration
from src.honeybadger_mcp.contracts import (
    AnalyzeFaultParams,
    CreateProjectParams,
    DeleteProjectParams,
    GetFaultParams,
    GetProjectParams,
    ListFaultNoticesParams,
    ListFaultsParams,
    ListProjectsParams,
    ProjectReportParams,
    UpdateProjectParams,
    normalize_timestamp,
    validate_arguments,
)
from src.honeybadger_mcp.exceptions import ValidationError

WITH_DEFAULT = Configuration(api_key="k", default_project_id=41227)
NO_DEFAULT = Configuration(api_key="k")


# ============================================
# Identifiers
# ============================================

class TestIdentifiers:
    """Test strict positive integer identifiers."""

    def test_valid_ids(self):
        """Should accept positive integers."""
        params = validate_arguments(GetFaultParams, {"project_id": 1, "fault_id": 127320184}, NO_DEFAULT)

        assert params.project_id == 1
        assert params.fault_id == 127320184

    @pytest.mark.parametrize("bad", [0, -1, "123", "abc", True, 1.5])
    def test_rejects_non_positive_or_non_int(self, bad):
        """Should reject anything that is not a positive int, without casting."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(GetFaultParams, {"project_id": 1, "fault_id": bad}, NO_DEFAULT)

        assert "fault_id" in exc_info.value.fields

    def test_missing_required_field_named(self):
        """Should name the missing field in the message."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(GetFaultParams, {"project_id": 1}, NO_DEFAULT)

        assert "fault_id: Field required" in exc_info.value.message
        assert exc_info.value.message.startswith("Invalid parameters: ")


# ============================================
# Scope Resolution
# ============================================

class TestScopeResolution:
    """Test project_id fallback to the configured default."""

    def test_explicit_project_wins(self):
        """Should keep an explicit project_id over the default."""
        params = validate_arguments(GetProjectParams, {"project_id": 7}, WITH_DEFAULT)
        assert params.project_id == 7

    def test_default_project_used(self):
        """Should fall back to the configured default."""
        params = validate_arguments(GetProjectParams, {}, WITH_DEFAULT)
        assert params.project_id == 41227

    def test_no_project_anywhere_fails(self):
        """Should fail with an actionable message when nothing is available."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(GetFaultParams, {"fault_id": 127320184}, NO_DEFAULT)

        message = exc_info.value.message
        assert "project_id is required" in message
        assert "HONEYBADGER_PROJECT_ID" in message

    def test_none_arguments_treated_as_empty(self):
        """Should accept a missing argument dict."""
        params = validate_arguments(GetProjectParams, None, WITH_DEFAULT)
        assert params.project_id == 41227

    def test_update_requires_explicit_project(self):
        """Should not fall back to the default for updates."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(UpdateProjectParams, {"name": "web"}, WITH_DEFAULT)

        assert "project_id" in exc_info.value.fields

    def test_delete_requires_explicit_project(self):
        """Should not fall back to the default for deletes."""
        with pytest.raises(ValidationError):
            validate_arguments(DeleteProjectParams, {"confirm": True}, WITH_DEFAULT)


# ============================================
# Clamping
# ============================================

class TestPageSizeClamping:
    """Test page sizes clamped to their maximum."""

    def test_list_faults_clamped_to_25(self):
        """Should clamp limit=30 to 25."""
        params = validate_arguments(ListFaultsParams, {"project_id": 41227, "limit": 30}, NO_DEFAULT)
        assert params.limit == 25

    def test_list_faults_default_limit(self):
        params = validate_arguments(ListFaultsParams, {}, WITH_DEFAULT)
        assert params.limit == 25
        assert params.order == "recent"

    def test_notices_default_and_clamp(self):
        """Should default to 10 and clamp to 25."""
        default = validate_arguments(ListFaultNoticesParams, {"fault_id": 1}, WITH_DEFAULT)
        clamped = validate_arguments(ListFaultNoticesParams, {"fault_id": 1, "limit": 500}, WITH_DEFAULT)

        assert default.limit == 10
        assert clamped.limit == 25

    def test_list_projects_clamped_to_100(self):
        params = validate_arguments(ListProjectsParams, {"limit": 1000}, NO_DEFAULT)
        assert params.limit == 100

    def test_limit_below_one_rejected(self):
        """Should reject sizes below 1 instead of clamping."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(ListFaultsParams, {"limit": 0}, WITH_DEFAULT)

        assert "limit" in exc_info.value.fields


# ============================================
# Timestamps
# ============================================

class TestTimestamps:
    """Test timestamp parsing and normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2026-02-16T10:00:00Z", "2026-02-16T10:00:00Z"),
            ("2026-02-16T10:00:00", "2026-02-16T10:00:00Z"),
            ("2026-02-16T12:00:00+02:00", "2026-02-16T10:00:00Z"),
            ("2026-02-16T10:00:00.250Z", "2026-02-16T10:00:00.250000Z"),
            ("2026-02-16", "2026-02-16T00:00:00Z"),
        ],
    )
    def test_normalize(self, raw, expected):
        """Should render the same instant in UTC with a Z suffix."""
        assert normalize_timestamp(raw) == expected

    def test_normalized_value_is_stable(self):
        """Should leave an already normalized value unchanged."""
        once = normalize_timestamp("2026-02-16T12:00:00+02:00")
        assert normalize_timestamp(once) == once

    def test_contract_normalizes(self):
        params = validate_arguments(
            ListFaultsParams,
            {"occurred_after": "2026-02-16T12:00:00+02:00"},
            WITH_DEFAULT,
        )
        assert params.occurred_after == "2026-02-16T10:00:00Z"

    def test_malformed_timestamp_message(self):
        """Should name the field, the expected format and the bad value."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(ListFaultsParams, {"created_after": "yesterday"}, WITH_DEFAULT)

        message = exc_info.value.message
        assert "created_after: invalid timestamp, expected ISO 8601" in message
        assert "2026-02-16T10:00:00Z" in message
        assert "'yesterday'" in message

    def test_offset_past_datetime_range_message(self):
        """Should report an out-of-range UTC instant as an invalid timestamp."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(
                ListFaultsParams,
                {"created_after": "0001-01-01T00:00:00+01:00"},
                WITH_DEFAULT,
            )

        message = exc_info.value.message
        assert "created_after: invalid timestamp, expected ISO 8601" in message
        assert "'0001-01-01T00:00:00+01:00'" in message

    def test_negative_offset_at_year_end_rejected(self):
        with pytest.raises(ValueError, match="invalid timestamp"):
            normalize_timestamp("9999-12-31T23:59:59-01:00")

    def test_report_window_normalized(self):
        params = validate_arguments(
            ProjectReportParams,
            {"report": "notices_per_day", "start": "2026-02-01T00:00:00"},
            WITH_DEFAULT,
        )
        assert params.start == "2026-02-01T00:00:00Z"
        assert params.stop is None


# ============================================
# Enums and Unknown Fields
# ============================================

class TestEnumsAndExtras:
    """Test enum validation and unknown field rejection."""

    def test_invalid_order(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(ListFaultsParams, {"order": "oldest"}, WITH_DEFAULT)
        assert "order" in exc_info.value.fields

    def test_invalid_report(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(ProjectReportParams, {"report": "notices_by_day"}, WITH_DEFAULT)
        assert "report" in exc_info.value.fields

    def test_unknown_field_rejected(self):
        """Should reject fields the contract does not declare."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(GetProjectParams, {"projectId": 1}, WITH_DEFAULT)
        assert "projectId" in exc_info.value.fields

    def test_errors_aggregated(self):
        """Should report every failing field in one message."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(
                ListFaultsParams,
                {"order": "oldest", "limit": -3, "created_after": "nope"},
                WITH_DEFAULT,
            )

        assert set(exc_info.value.fields) == {"order", "limit", "created_after"}
        assert exc_info.value.message.count(";") == 2

    def test_include_context_defaults_true(self):
        params = validate_arguments(AnalyzeFaultParams, {"fault_id": 5}, WITH_DEFAULT)
        assert params.include_context is True


# ============================================
# Project Writes
# ============================================

class TestProjectWriteContracts:
    """Test create/update/delete contracts."""

    def test_create_payload(self):
        """Should wrap set fields in a project envelope."""
        params = validate_arguments(
            CreateProjectParams,
            {"name": "web", "account_id": "abc", "resolve_errors_on_deploy": True},
            NO_DEFAULT,
        )

        assert params.project_payload() == {
            "project": {"name": "web", "resolve_errors_on_deploy": True}
        }

    @pytest.mark.parametrize("name", ["", "x" * 256])
    def test_create_name_length(self, name):
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(CreateProjectParams, {"name": name}, NO_DEFAULT)
        assert "name" in exc_info.value.fields

    def test_update_needs_a_change(self):
        """Should reject an update with nothing to change."""
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments(UpdateProjectParams, {"project_id": 3}, NO_DEFAULT)

        assert "at least one project attribute" in exc_info.value.message

    def test_delete_confirm_defaults_false(self):
        params = validate_arguments(DeleteProjectParams, {"project_id": 3}, NO_DEFAULT)
        assert params.confirm is False

    def test_delete_confirm_must_be_bool(self):
        with pytest.raises(ValidationError):
            validate_arguments(DeleteProjectParams, {"project_id": 3, "confirm": "yes"}, NO_DEFAULT)
