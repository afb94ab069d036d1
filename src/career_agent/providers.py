# providers.py
# Model provider boundary.
#
# The executor only knows the ModelProvider protocol. OpenAICompatibleProvider
# speaks the chat-completions API (OpenRouter by default) and translates the
# block-based transcript to and from that wire format.

import json
import logging
from typing import Any, Protocol

from openai import AsyncOpenAI

from career_agent.models import (
    ContentBlock,
    Message,
    ProviderResponse,
    StopReason,
    TextBlock,
    ToolDescriptor,
    ToolResultBlock,
    ToolUseBlock,
)
from career_agent.settings import ProviderConfig

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when the provider answers with something we cannot use."""


class ModelProvider(Protocol):
    async def call_with_tools(
        self,
        messages: list[Message],
        tools: list[ToolDescriptor],
        system_prompt: str,
        config: ProviderConfig | None = None,
    ) -> ProviderResponse: ...


# ---------------------------------------------------------------------------
# Wire translation
# ---------------------------------------------------------------------------


def to_openai_tools(tools: list[ToolDescriptor]) -> list[dict[str, Any]]:
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.input_schema.model_dump(),
            },
        }
        for tool in tools
    ]


def to_openai_messages(messages: list[Message], system_prompt: str) -> list[dict[str, Any]]:
    """Flatten the transcript into chat-completions messages."""
    out: list[dict[str, Any]] = []
    if system_prompt:
        out.append({"role": "system", "content": system_prompt})

    for message in messages:
        if isinstance(message.content, str):
            out.append({"role": message.role, "content": message.content})
            continue

        texts = [block.text for block in message.content if isinstance(block, TextBlock)]

        if message.role == "assistant":
            entry: dict[str, Any] = {"role": "assistant", "content": "\n".join(texts) or None}
            calls = [
                {
                    "id": block.id,
                    "type": "function",
                    "function": {"name": block.name, "arguments": json.dumps(block.input)},
                }
                for block in message.content
                if isinstance(block, ToolUseBlock)
            ]
            if calls:
                entry["tool_calls"] = calls
            out.append(entry)
            continue

        # Tool results must directly follow the assistant turn that asked for them.
        for block in message.content:
            if isinstance(block, ToolResultBlock):
                out.append({"role": "tool", "tool_call_id": block.tool_use_id, "content": block.content})
        if texts:
            out.append({"role": "user", "content": "\n".join(texts)})

    return out


def _stop_reason(finish_reason: str | None, has_tool_calls: bool) -> StopReason:
    if has_tool_calls or finish_reason in ("tool_calls", "function_call"):
        return "tool_use"
    if finish_reason == "length":
        return "max_tokens"
    return "end_turn"


def from_openai_response(response: Any) -> ProviderResponse:
    if not getattr(response, "choices", None):
        raise ProviderError("Provider returned no choices.")

    choice = response.choices[0]
    message = choice.message
    content: list[ContentBlock] = []

    if message.content:
        content.append(TextBlock(text=message.content))

    tool_calls = message.tool_calls or []
    for call in tool_calls:
        raw = call.function.arguments or "{}"
        try:
            arguments = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProviderError(f"Tool call {call.function.name!r} has malformed arguments: {exc}") from exc
        if not isinstance(arguments, dict):
            raise ProviderError(f"Tool call {call.function.name!r} arguments are not an object.")
        content.append(ToolUseBlock(id=call.id, name=call.function.name, input=arguments))

    return ProviderResponse(
        content=content,
        stop_reason=_stop_reason(choice.finish_reason, bool(tool_calls)),
    )


# ---------------------------------------------------------------------------
# OpenAI-compatible provider
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    ModelProvider backed by any chat-completions endpoint.

    Example:
        provider = OpenAICompatibleProvider(ProviderConfig.from_env())
        response = await provider.call_with_tools(messages, catalog, prompt)
    """

    def __init__(self, config: ProviderConfig | None = None, client: AsyncOpenAI | None = None) -> None:
        self._config = config or ProviderConfig.from_env()
        self._client = client or AsyncOpenAI(
            base_url=self._config.base_url,
            api_key=self._config.api_key,
        )

    @property
    def config(self) -> ProviderConfig:
        return self._config

    async def call_with_tools(
        self,
        messages: list[Message],
        tools: list[ToolDescriptor],
        system_prompt: str,
        config: ProviderConfig | None = None,
    ) -> ProviderResponse:
        config = config or self._config
        params: dict[str, Any] = {
            "model": config.model,
            "messages": to_openai_messages(messages, system_prompt),
            "max_tokens": config.max_tokens,
        }
        if tools:
            params["tools"] = to_openai_tools(tools)
        if config.temperature is not None:
            params["temperature"] = config.temperature

        logger.debug("Calling %s with %d messages and %d tools", config.model, len(messages), len(tools))
        response = await self._client.chat.completions.create(**params)
        return from_openai_response(response)
