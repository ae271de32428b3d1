"""
Policy Gate and Tool Registry.

``select_operations`` decides, once at startup, which operations exist for
this process. ``ToolRegistry`` holds the result as an immutable name ->
OperationSpec mapping and routes calls through the operation boundary:

    validate arguments -> confirm destructive calls -> handler -> result

Every failure inside ``invoke`` comes back as an ``ErrorResult``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, Optional

from .client import HoneybadgerClient
from .config import Configuration
from .contracts import validate_arguments
from .exceptions import ConfirmationRequiredError, HoneybadgerError
from .formatting import ErrorResult, Result
from .operations import OPERATIONS, OperationSpec

logger = logging.getLogger(__name__)


def select_operations(
    config: Configuration,
    catalog: Iterable[OperationSpec] = OPERATIONS,
) -> tuple[OperationSpec, ...]:
    """Return the operations this process exposes.

    Write-capable operations are left out entirely unless writes are
    enabled, so a read-only gateway does not know their names at all.
    """
    return tuple(op for op in catalog if op.read_only or config.write_enabled)


class ToolRegistry(Mapping[str, OperationSpec]):
    """Immutable registry of the operations exposed by this gateway.

    Usage:
        registry = ToolRegistry(select_operations(config), client, config)

        if "list_faults" in registry:
            result = await registry.invoke("list_faults", {"limit": 5})
    """

    def __init__(
        self,
        operations: Iterable[OperationSpec],
        client: HoneybadgerClient,
        config: Configuration,
    ):
        """Initialize the registry.

        Args:
            operations: Operations to expose (normally from select_operations)
            client: Request executor shared by every handler
            config: Gateway configuration (default project for scope resolution)

        Raises:
            ValueError: If two operations share a name
        """
        by_name: dict[str, OperationSpec] = {}
        for op in operations:
            if op.name in by_name:
                raise ValueError(f"Duplicate operation name: {op.name}")
            by_name[op.name] = op

        self._operations = MappingProxyType(by_name)
        self.client = client
        self.config = config

        read_count = sum(1 for op in by_name.values() if op.read_only)
        logger.info(
            f"Tool registry loaded {len(by_name)} tools "
            f"({read_count} read, {len(by_name) - read_count} write)"
        )

    def __getitem__(self, name: str) -> OperationSpec:
        return self._operations[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    @property
    def write_tool_names(self) -> list[str]:
        return [name for name, op in self._operations.items() if not op.read_only]

    async def invoke(self, name: str, arguments: Optional[dict[str, Any]] = None) -> Result:
        """Run one tool call and return its result.

        Args:
            name: Registered operation name
            arguments: Raw arguments from the protocol layer

        Returns:
            The handler's result, or an ErrorResult describing the failure

        Raises:
            KeyError: If no operation with this name is registered
        """
        op = self._operations[name]
        logger.info(f"Invoking tool: {name}")

        try:
            params = validate_arguments(op.contract, arguments, self.config, operation=name)

            if op.destructive and not getattr(params, "confirm", False):
                raise ConfirmationRequiredError(name, op.confirm_action or "modify data")

            return await op.handler(self.client, params)

        except HoneybadgerError as e:
            logger.info(f"Tool {name} failed: {e.user_message}")
            logger.debug(f"Tool {name} error details: {e.to_dict()}")
            return ErrorResult(e.user_message)

        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return ErrorResult(f"Unexpected error: {e}")
