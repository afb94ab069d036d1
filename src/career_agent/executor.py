# executor.py
# Agent executor: the bounded tool-calling loop.
#
# The executor owns the transcript and the execution state. Each iteration
# calls the model provider, then either finishes or runs the requested tool
# calls one by one, pausing for human confirmation where policy requires.
# Every state change is pushed synchronously to on_state_change.
#
# Control flow:
#   user message → provider → end_turn   → complete
#                           → max_tokens → error (soft, returns text)
#                           → tool_use   → [confirm?] → registry → results → provider …
#   iteration limit reached → error (soft, returns text)

import logging
from typing import Any, Callable

from pydantic import BaseModel, Field

from career_agent.confirmation import ConfirmationHandler
from career_agent.models import (
    AgentStatus,
    ConfirmationLevel,
    ConfirmationRequest,
    ContentBlock,
    ExecutionState,
    LastToolResult,
    Message,
    ProviderResponse,
    TextBlock,
    ToolCall,
    ToolFailure,
    ToolResultBlock,
    ToolUseBlock,
)
from career_agent.providers import ModelProvider
from career_agent.registry import ToolRegistry
from career_agent.settings import AgentSettings, ProviderConfig

logger = logging.getLogger(__name__)

StateObserver = Callable[[ExecutionState], None]

DECLINED_MESSAGE = "User declined to execute this action"
TRUNCATED_NOTICE = "\n\n(Response was truncated)"
STOPPED_NOTICE = "\n\n(Stopped: too many tool calls)"
GIVE_UP_MESSAGE = "I apologize, but I was unable to complete the request. Please try a simpler command."

AGENT_SYSTEM_PROMPT = """\
You are a helpful assistant for a job application tracker.
You can help users manage their job applications by searching, viewing details, \
updating statuses, adding notes, and more.

When a user asks you to do something:
1. Think about what tools you need to use
2. Call the appropriate tools to get information or make changes
3. Provide a helpful response based on the results

Be conversational and helpful. If you need to make changes, explain what you're doing.
If something fails, explain the error and suggest alternatives.
If the user declines an action, acknowledge it and do not retry it unless asked.

Available statuses: Interested, Applied, Screening, Interviewing, Offer, Rejected, Withdrawn\
"""


class AgentBusyError(Exception):
    """Raised when run() is called on an executor that is already running."""


class AgentConfig(BaseModel):
    """Per-executor overrides. Unset fields fall back to AgentSettings."""

    max_iterations: int | None = Field(None, ge=1)
    confirmation_level: ConfirmationLevel | None = None
    system_prompt: str | None = None
    initial_messages: list[Message] = Field(default_factory=list)


def extract_text(content: list[ContentBlock]) -> str:
    """Join the text blocks of a response with newlines."""
    return "\n".join(block.text for block in content if isinstance(block, TextBlock))


def extract_tool_calls(content: list[ContentBlock]) -> list[ToolUseBlock]:
    return [block for block in content if isinstance(block, ToolUseBlock)]


class AgentExecutor:
    """
    Runs one natural-language request to completion against a tool registry.

    Example:
        executor = AgentExecutor(
            registry,
            OpenAICompatibleProvider(),
            AgentConfig(confirmation_level="destructive-only"),
            on_state_change=print,
            on_confirmation_request=channel.request,
        )
        answer = await executor.run("Move my Acme application to Interviewing")
        history = executor.get_messages()
    """

    def __init__(
        self,
        registry: ToolRegistry,
        provider: ModelProvider,
        config: AgentConfig | None = None,
        *,
        provider_config: ProviderConfig | None = None,
        settings: AgentSettings | None = None,
        on_state_change: StateObserver | None = None,
        on_confirmation_request: ConfirmationHandler | None = None,
    ) -> None:
        config = config or AgentConfig()
        settings = settings or AgentSettings.from_env()

        self._registry = registry
        self._provider = provider
        self._provider_config = provider_config
        self._on_state_change = on_state_change
        self._on_confirmation_request = on_confirmation_request

        self.max_iterations = config.max_iterations or settings.max_iterations
        self.confirmation_level = ConfirmationLevel(config.confirmation_level or settings.confirmation_level)
        self.system_prompt = config.system_prompt if config.system_prompt is not None else AGENT_SYSTEM_PROMPT
        self._initial_messages = [message.model_copy(deep=True) for message in config.initial_messages]

        self._messages: list[Message] = []
        self._state = ExecutionState(max_iterations=self.max_iterations)
        self._running = False

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    def get_state(self) -> ExecutionState:
        return self._state.model_copy(deep=True)

    def get_messages(self) -> list[Message]:
        return [message.model_copy(deep=True) for message in self._messages]

    async def run(self, user_message: str) -> str:
        """
        Drive the conversation until the model finishes or the loop gives up.

        Returns the final answer text in every non-fatal case, including
        truncation and iteration exhaustion (status is then ``error``).
        Provider failures set status ``error`` and are re-raised.
        """
        if self._running:
            raise AgentBusyError("This executor is already running a request.")
        self._running = True
        try:
            return await self._run(user_message)
        finally:
            self._running = False

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _run(self, user_message: str) -> str:
        self._messages = [message.model_copy(deep=True) for message in self._initial_messages]
        self._messages.append(Message(role="user", content=user_message))
        self._state = ExecutionState(max_iterations=self.max_iterations)
        self._update_state(status=AgentStatus.THINKING)

        try:
            for iteration in range(1, self.max_iterations + 1):
                self._update_state(iteration_count=iteration)

                response = await self._call_provider()
                self._messages.append(Message(role="assistant", content=response.content))

                if response.stop_reason == "end_turn":
                    self._update_state(status=AgentStatus.COMPLETE)
                    return extract_text(response.content)

                if response.stop_reason == "max_tokens":
                    self._update_state(status=AgentStatus.ERROR, error="Response exceeded maximum length")
                    return extract_text(response.content) + TRUNCATED_NOTICE

                results = await self._execute_tools(extract_tool_calls(response.content))
                if results:
                    self._messages.append(Message(role="user", content=results))

        except Exception as exc:
            self._update_state(status=AgentStatus.ERROR, error=str(exc) or type(exc).__name__)
            raise

        self._update_state(
            status=AgentStatus.ERROR,
            error=f"Max iterations ({self.max_iterations}) exceeded",
        )
        text = self._last_assistant_text()
        if text:
            return text + STOPPED_NOTICE
        return GIVE_UP_MESSAGE

    async def _call_provider(self) -> ProviderResponse:
        catalog = self._registry.render_catalog()
        logger.debug(
            "Iteration %d/%d: calling provider with %d messages",
            self._state.iteration_count,
            self.max_iterations,
            len(self._messages),
        )
        return await self._provider.call_with_tools(
            list(self._messages),
            catalog,
            self.system_prompt,
            self._provider_config,
        )

    def _last_assistant_text(self) -> str:
        for message in reversed(self._messages):
            if message.role != "assistant":
                continue
            if isinstance(message.content, str):
                return message.content
            return extract_text(message.content)
        return ""

    # ------------------------------------------------------------------
    # Tool calls
    # ------------------------------------------------------------------

    async def _execute_tools(self, calls: list[ToolUseBlock]) -> list[ToolResultBlock]:
        """Run a turn's tool calls strictly in order, one at a time."""
        results: list[ToolResultBlock] = []

        for call in calls:
            if self._registry.needs_confirmation(call.name, self.confirmation_level):
                request = ConfirmationRequest(
                    tool_name=call.name,
                    tool_id=call.id,
                    input=call.input,
                    description=self._registry.confirmation_message(call.name, call.input),
                )
                self._update_state(
                    status=AgentStatus.WAITING_CONFIRMATION,
                    current_tool=call.name,
                    current_tool_id=call.id,
                    pending_confirmation=request,
                )

                if not await self._request_confirmation(request):
                    logger.info("User declined %r", call.name)
                    self._update_state(
                        pending_confirmation=None,
                        last_tool_result=LastToolResult(
                            tool_name=call.name,
                            tool_id=call.id,
                            success=False,
                            error=DECLINED_MESSAGE,
                        ),
                    )
                    results.append(ToolResultBlock(tool_use_id=call.id, content=DECLINED_MESSAGE, is_error=True))
                    continue

            self._update_state(
                status=AgentStatus.EXECUTING_TOOL,
                current_tool=call.name,
                current_tool_id=call.id,
                tool_progress=None,
                pending_confirmation=None,
            )

            result = await self._registry.execute(
                ToolCall(id=call.id, name=call.name, input=call.input),
                self._report_progress,
            )

            self._update_state(
                tools_executed=[*self._state.tools_executed, call.name],
                last_tool_result=LastToolResult(
                    tool_name=call.name,
                    tool_id=call.id,
                    success=result.success,
                    error=result.error if isinstance(result, ToolFailure) else None,
                    description=result.description,
                ),
            )
            results.append(
                ToolResultBlock(
                    tool_use_id=call.id,
                    content=result.model_dump_json(),
                    is_error=not result.success,
                )
            )

        self._update_state(
            status=AgentStatus.THINKING,
            current_tool=None,
            current_tool_id=None,
            tool_progress=None,
        )
        return results

    async def _request_confirmation(self, request: ConfirmationRequest) -> bool:
        if self._on_confirmation_request is None:
            # No handler means confirmation is switched off, not denied.
            return True
        return bool(await self._on_confirmation_request(request))

    def _report_progress(self, message: str) -> None:
        self._update_state(tool_progress=message)

    # ------------------------------------------------------------------
    # State broadcasting
    # ------------------------------------------------------------------

    def _update_state(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        if self._on_state_change is not None:
            self._on_state_change(self.get_state())


async def run_agent(
    message: str,
    registry: ToolRegistry,
    provider: ModelProvider,
    config: AgentConfig | None = None,
    **kwargs: Any,
) -> str:
    """Build a one-off executor and run a single message through it."""
    executor = AgentExecutor(registry, provider, config, **kwargs)
    return await executor.run(message)
