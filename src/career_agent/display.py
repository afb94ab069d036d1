# display.py
# All terminal output for the career agent console.
#
# This module owns presentation entirely. The executor never formats strings;
# the console wires state_observer() and confirm() into it.
#
# Colour language:
#   cyan    : request routing and thinking
#   magenta : tool execution and progress
#   yellow  : confirmation prompts
#   green   : success / final answer
#   red     : failures, declines, halts

import json
from typing import Callable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.rule import Rule
from rich.text import Text

from career_agent.models import AgentStatus, ConfirmationRequest, ExecutionState

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        return value[:max_len] + "…"
    return value


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def banner(model: str, confirmation_level: str, tool_count: int) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Career Agent[/bold cyan]\n"
            "[dim]Ask about your job applications in plain language. Empty line or Ctrl-D to quit.[/dim]\n\n"
            f"[dim]Model        :[/dim] [white]{escape(model)}[/white]\n"
            f"[dim]Confirmation :[/dim] [white]{escape(confirmation_level)}[/white]\n"
            f"[dim]Tools        :[/dim] [white]{tool_count}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def prompt_received(prompt: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW REQUEST[/cyan]", style="cyan"))
    console.print(_label("USER", "cyan"), f"[white]{escape(prompt)}[/white]")


def missing_api_key() -> None:
    halt("No API key configured. Set LLM_API_KEY (or OPENROUTER_API_KEY) in the environment or .env.")


# ---------------------------------------------------------------------------
# Execution state
# ---------------------------------------------------------------------------


def state_observer() -> Callable[[ExecutionState], None]:
    """Return an on_state_change callback that prints each transition once."""
    last: dict[str, object] = {}

    def observe(state: ExecutionState) -> None:
        if (
            state.status is AgentStatus.THINKING
            and state.iteration_count > 0
            and last.get("iteration") != state.iteration_count
        ):
            console.print(
                _label("THINKING", "cyan"),
                f"[dim]iteration {state.iteration_count}/{state.max_iterations}[/dim]",
            )
        elif state.status is AgentStatus.EXECUTING_TOOL and last.get("tool_id") != state.current_tool_id:
            console.print(f"  [magenta]Tool[/magenta]     [bold white]{escape(state.current_tool or '')}[/bold white]")

        if state.tool_progress and state.tool_progress != last.get("progress"):
            console.print(f"  [magenta]Progress[/magenta] [dim]{escape(_mono(state.tool_progress))}[/dim]")

        result = state.last_tool_result
        if result is not None and result.tool_id != last.get("result_id"):
            if result.success:
                detail = result.description or "ok"
                console.print(f"  [bold green]✓[/bold green] [dim]{escape(_mono(detail))}[/dim]")
            else:
                console.print(f"  [bold red]✗[/bold red] [white]{escape(_mono(result.error or 'failed'))}[/white]")

        last.update(
            iteration=state.iteration_count,
            tool_id=state.current_tool_id,
            progress=state.tool_progress,
            result_id=result.tool_id if result else last.get("result_id"),
        )

    return observe


def confirm(request: ConfirmationRequest) -> bool:
    """Ask the user to approve a tool call. Blocks on stdin."""
    console.print()
    console.print(
        Panel(
            f"[bold white]{escape(request.description)}[/bold white]\n\n"
            f"[dim]{escape(request.tool_name)}  {escape(_mono(json.dumps(request.input), 100))}[/dim]",
            title=_label("CONFIRM", "yellow"),
            border_style="yellow",
            padding=(0, 2),
        )
    )
    approved = Confirm.ask("[yellow]Proceed?[/yellow]", console=console, default=False)
    if not approved:
        console.print("  [red]Declined.[/red]")
    return approved


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------


def final_result(result: str, state: ExecutionState) -> None:
    color = "green" if state.status is AgentStatus.COMPLETE else "yellow"
    subtitle = f"[dim]{len(state.tools_executed)} tool call(s), {state.iteration_count} iteration(s)[/dim]"
    if state.error:
        subtitle += f"  [red]{escape(state.error)}[/red]"
    console.print()
    console.print(
        Panel(
            f"[white]{escape(result)}[/white]",
            title=_label("ASSISTANT", color),
            subtitle=subtitle,
            border_style=color,
            padding=(1, 2),
        )
    )


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{escape(reason)}[/bold white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()
