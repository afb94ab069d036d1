# run.py
# Entry point. Config and wiring only; the REPL hands each line to a fresh
# executor seeded with the transcript so far.

import asyncio
import logging

from rich.logging import RichHandler

from career_agent import display
from career_agent.confirmation import ConfirmationChannel
from career_agent.executor import AgentConfig, AgentExecutor
from career_agent.models import Message
from career_agent.providers import OpenAICompatibleProvider
from career_agent.registry import ToolRegistry
from career_agent.settings import AgentSettings, ProviderConfig
from career_agent.tools import JobStore, build_job_tools

# Sample board so the assistant has something to work with.
SAMPLE_JOBS = [
    ("Acme Corp", "Senior Backend Engineer", "Applied"),
    ("Globex", "Platform Engineer", "Interviewing"),
    ("Initech", "Data Engineer", "Interested"),
    ("Umbrella", "Staff Engineer", "Rejected"),
]


async def _answer_confirmations(channel: ConfirmationChannel) -> None:
    while True:
        request = await channel.receive()
        if request is None:
            return
        approved = await asyncio.to_thread(display.confirm, request)
        if channel.pending is request:
            channel.respond(approved)


async def _ask(executor: AgentExecutor, channel: ConfirmationChannel, prompt: str) -> str:
    responder = asyncio.create_task(_answer_confirmations(channel))
    try:
        return await executor.run(prompt)
    finally:
        channel.close()
        await responder


async def chat(registry: ToolRegistry, provider: OpenAICompatibleProvider, settings: AgentSettings) -> None:
    history: list[Message] = []

    while True:
        try:
            prompt = (await asyncio.to_thread(display.console.input, "[bold cyan]> [/bold cyan]")).strip()
        except EOFError:
            return
        if not prompt:
            return

        display.prompt_received(prompt)
        channel = ConfirmationChannel()
        executor = AgentExecutor(
            registry,
            provider,
            AgentConfig(initial_messages=history),
            settings=settings,
            on_state_change=display.state_observer(),
            on_confirmation_request=channel.request,
        )

        try:
            answer = await _ask(executor, channel, prompt)
        except Exception as exc:
            display.halt(f"Request failed: {exc}")
            continue

        display.final_result(answer, executor.get_state())
        history = executor.get_messages()


def main() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=display.console, show_path=False)],
    )

    settings = AgentSettings.from_env()
    provider_config = ProviderConfig.from_env()
    if not provider_config.api_key:
        display.missing_api_key()
        return

    store = JobStore()
    for company, title, status in SAMPLE_JOBS:
        store.add(company, title, status)

    registry = ToolRegistry(build_job_tools(store))
    provider = OpenAICompatibleProvider(provider_config)

    display.banner(provider_config.model, settings.confirmation_level.value, len(registry))
    try:
        asyncio.run(chat(registry, provider, settings))
    except KeyboardInterrupt:
        display.halt("Interrupted.")


if __name__ == "__main__":
    main()
