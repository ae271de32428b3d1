#!/usr/bin/env python3
"""Tests for the FastMCP server surface.

Tests cover:
    - Tool listing in read-only and write-enabled mode
    - Input schemas and annotations advertised per tool
    - GatewayTool results (text content, isError flag)
"""
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

sys.path.insert(0, str(__file__).rsplit("/tests", 1)[0])
from server import GatewayTool, create_server
from src.honeybadger_mcp.client import HoneybadgerClient
from src.honeybadger_mcp.config import Configuration
from src.honeybadger_mcp.registry import ToolRegistry, select_operations

WRITE_TOOLS = {"create_project", "update_project", "delete_project"}


# ============================================
# Tool Listing
# ============================================

class TestToolListing:
    """Test which tools the server advertises."""

    @pytest.mark.asyncio
    async def test_read_only_server_hides_write_tools(self):
        """Should not list write tools when read-only."""
        mcp = create_server(Configuration(api_key="k"))

        names = {tool.name for tool in await mcp.list_tools()}

        assert "list_faults" in names
        assert "analyze_fault" in names
        assert not names & WRITE_TOOLS
        assert len(names) == 12

    @pytest.mark.asyncio
    async def test_write_enabled_server_lists_write_tools(self):
        mcp = create_server(Configuration(api_key="k", write_enabled=True))

        names = {tool.name for tool in await mcp.list_tools()}

        assert WRITE_TOOLS <= names
        assert len(names) == 15

    @pytest.mark.asyncio
    async def test_input_schema_from_contract(self):
        """Should advertise the contract's JSON schema."""
        mcp = create_server(Configuration(api_key="k"))
        tools = {tool.name: tool for tool in await mcp.list_tools()}

        schema = tools["list_faults"].parameters
        assert schema["type"] == "object"
        assert {"project_id", "limit", "order", "created_after"} <= set(schema["properties"])
        assert schema["additionalProperties"] is False
        assert "fault_id" in tools["get_fault"].parameters["required"]

    @pytest.mark.asyncio
    async def test_annotations(self):
        mcp = create_server(Configuration(api_key="k", write_enabled=True))
        tools = {tool.name: tool for tool in await mcp.list_tools()}

        assert tools["get_fault"].annotations.read_only_hint is True
        assert tools["delete_project"].annotations.read_only_hint is False
        assert tools["delete_project"].annotations.destructive_hint is True


# ============================================
# Tool Execution
# ============================================

class TestGatewayTool:
    """Test GatewayTool.run against a mocked client."""

    @pytest.fixture
    def mock_client(self):
        client = MagicMock(spec=HoneybadgerClient)
        client.get = AsyncMock(return_value={"results": [{"id": 1}, {"id": 2}], "total_count": 2})
        return client

    def make_tool(self, name, client, **config_kwargs):
        config = Configuration(api_key="k", **config_kwargs)
        registry = ToolRegistry(select_operations(config), client, config)
        return GatewayTool.from_operation(registry[name], registry)

    @pytest.mark.asyncio
    async def test_success_result(self, mock_client):
        tool = self.make_tool("list_faults", mock_client, default_project_id=41227)

        result = await tool.run({"limit": 5})

        assert result.is_error is False
        assert result.content[0].text.startswith("Found 2 items (total: 2)")

    @pytest.mark.asyncio
    async def test_error_result(self, mock_client):
        """Should flag contract violations as error results."""
        tool = self.make_tool("get_fault", mock_client)

        result = await tool.run({"fault_id": 127320184})

        assert result.is_error is True
        assert "project_id is required" in result.content[0].text
        mock_client.get.assert_not_called()
