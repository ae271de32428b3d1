#!/usr/bin/env python3
"""Unit tests for result formatting."""
import json
import sys

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from src.honeybadger_mcp.formatting import (
    CREATED_PROJECT,
    DELETED_PROJECT,
    ErrorResult,
    ResourceList,
    SingleResource,
    TextReport,
    WriteConfirmation,
)


class TestResourceList:
    """Test list payload normalization and summary lines."""

    def test_missing_results_key(self):
        """Should return an empty list when the envelope has no results."""
        result = ResourceList.from_payload({"links": {}})

        assert result.items == []
        assert result.summary == "Found 0 items"

    def test_non_list_results(self):
        result = ResourceList.from_payload({"results": None})
        assert result.items == []

    def test_non_dict_payload(self):
        assert ResourceList.from_payload("unexpected").items == []
        assert ResourceList.from_payload(None).items == []

    def test_bare_list_payload(self):
        """Should accept a bare JSON array as the items."""
        result = ResourceList.from_payload([{"user": "a@example.com", "count": 3}])

        assert len(result.items) == 1
        assert result.summary == "Found 1 items"

    def test_total_and_page(self):
        """Should report total and page when present."""
        result = ResourceList.from_payload(
            {"results": [{"id": 1}, {"id": 2}], "total_count": 40, "current_page": 2, "per_page": 2}
        )

        assert result.summary == "Found 2 items (total: 40) (page 2)"
        assert result.per_page == 2

    def test_alternate_metadata_keys(self):
        result = ResourceList.from_payload({"results": [], "total": 0, "page": 1, "limit": 25})

        assert result.total_count == 0
        assert result.summary == "Found 0 items (total: 0) (page 1)"
        assert result.per_page == 25

    def test_render_has_summary_then_json(self):
        result = ResourceList.from_payload({"results": [{"id": 1}]})
        summary, body = result.render().split("\n\n", 1)

        assert summary == "Found 1 items"
        assert json.loads(body) == [{"id": 1}]
        assert result.is_error is False


class TestOtherResults:
    """Test single, write, text and error results."""

    def test_single_resource_pretty_json(self):
        result = SingleResource({"id": 5, "klass": "NoMethodError"})

        assert result.render() == json.dumps({"id": 5, "klass": "NoMethodError"}, indent=2)
        assert result.is_error is False

    def test_write_confirmation_with_resource(self):
        text = WriteConfirmation(CREATED_PROJECT, {"id": 9}).render()

        assert text.startswith("Successfully created project\n\n")
        assert json.loads(text.split("\n\n", 1)[1]) == {"id": 9}

    def test_write_confirmation_without_resource(self):
        """Should render only the label when the service returned nothing."""
        assert WriteConfirmation(DELETED_PROJECT, {}).render() == "Successfully deleted project"

    def test_text_report_verbatim(self):
        assert TextReport("# Report\n\nbody").render() == "# Report\n\nbody"

    def test_only_error_result_is_error(self):
        result = ErrorResult("Not found: /projects/1")

        assert result.is_error is True
        assert result.render() == "Not found: /projects/1"
