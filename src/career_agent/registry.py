# registry.py
# Tool contract and registry.
#
# The registry is the only path from a model-requested tool call to a tool
# implementation. It validates input, catches every tool-side exception and
# always answers with a ToolResult. It also owns the confirmation policy,
# which is a pure function of tool metadata and the global level.
#
# Construct one registry at startup and pass it to each executor. It is
# read-only during execution and safe to share.

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Union

from career_agent.models import (
    ConfirmationLevel,
    ToolCall,
    ToolCategory,
    ToolDescriptor,
    ToolFailure,
    ToolInputSchema,
    ToolResult,
    ToolSuccess,
)
from career_agent.schema import InputSchema, SchemaValidationError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
ToolHandler = Callable[
    [dict[str, Any], Union[ProgressCallback, None]],
    Union[ToolResult, Awaitable[ToolResult]],
]


# ---------------------------------------------------------------------------
# Tool contract
# ---------------------------------------------------------------------------


@dataclass
class Tool:
    """
    A named, schema-validated operation the agent may invoke.

    The handler receives the validated input dict and an optional progress
    callback. It may be a plain function or a coroutine function and should
    return a ToolSuccess or ToolFailure. Exceptions are allowed to escape; the
    registry converts them to failures.
    """

    name: str
    description: str
    category: ToolCategory
    input_schema: InputSchema
    execute: ToolHandler
    requires_confirmation: bool = False
    confirmation_message: Callable[[dict[str, Any]], str] | None = None

    def __post_init__(self) -> None:
        self.category = ToolCategory(self.category)

    def validate(self, raw: dict[str, Any] | None) -> dict[str, Any]:
        return self.input_schema.validate(raw)

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=ToolInputSchema(**self.input_schema.to_json_schema()),
        )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ToolRegistry:
    """Catalog of tools, keyed by name, in registration order."""

    def __init__(self, tools: Iterable[Tool] | None = None) -> None:
        self._tools: dict[str, Tool] = {}
        if tools is not None:
            self.register_all(tools)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            logger.warning("Tool %r is already registered. Overwriting.", tool.name)
        self._tools[tool.name] = tool
        logger.debug("Registered tool %r (%s)", tool.name, tool.category.value)

    def register_all(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def get_all(self) -> list[Tool]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    # ------------------------------------------------------------------
    # Provider catalog
    # ------------------------------------------------------------------

    def render_catalog(self) -> list[ToolDescriptor]:
        """
        Describe every tool in the shape model providers expect.

        A tool whose schema cannot be rendered is still listed, with an empty
        object schema, so one bad tool never hides the rest of the catalog.
        """
        catalog: list[ToolDescriptor] = []
        for tool in self._tools.values():
            try:
                catalog.append(tool.descriptor())
            except Exception as exc:
                logger.warning("Could not render schema for tool %r: %s", tool.name, exc)
                catalog.append(ToolDescriptor(name=tool.name, description=tool.description))
        return catalog

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, call: ToolCall, on_progress: ProgressCallback | None = None) -> ToolResult:
        tool = self._tools.get(call.name)
        if tool is None:
            return ToolFailure(error=f"Unknown tool: {call.name}")

        try:
            validated = tool.validate(call.input)
        except SchemaValidationError as exc:
            return ToolFailure(error=f"Invalid input: {exc}")

        logger.info("Executing tool %r (call %s)", call.name, call.id)
        try:
            outcome = tool.execute(validated, on_progress)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as exc:
            logger.warning("Tool %r raised: %s", call.name, exc)
            return ToolFailure(error=str(exc) or "Unknown error during tool execution")

        if isinstance(outcome, (ToolSuccess, ToolFailure)):
            return outcome
        return ToolSuccess(data=outcome)

    # ------------------------------------------------------------------
    # Confirmation policy
    # ------------------------------------------------------------------

    def needs_confirmation(self, tool_name: str, level: ConfirmationLevel | str) -> bool:
        tool = self._tools.get(tool_name)
        if tool is None:
            return False

        level = ConfirmationLevel(level)
        if level is ConfirmationLevel.NEVER:
            return False
        if level is ConfirmationLevel.ALL:
            return True
        if level is ConfirmationLevel.WRITE_ONLY:
            return tool.category == ToolCategory.WRITE
        return tool.category == ToolCategory.WRITE and tool.requires_confirmation

    def confirmation_message(self, tool_name: str, tool_input: dict[str, Any]) -> str:
        tool = self._tools.get(tool_name)
        if tool is None or tool.confirmation_message is None:
            return f"Execute {tool_name}?"
        try:
            return tool.confirmation_message(tool_input)
        except Exception as exc:
            logger.warning("Confirmation message for %r failed: %s", tool_name, exc)
            return f"Execute {tool_name}?"
