# models.py
# Data contracts for the career agent.
# No business logic lives here. Pure schema and validation.

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class ToolCategory(str, Enum):
    READ = "read"
    WRITE = "write"


class ConfirmationLevel(str, Enum):
    """Global policy deciding which tool calls need human approval."""

    ALL = "all"
    WRITE_ONLY = "write-only"
    DESTRUCTIVE_ONLY = "destructive-only"
    NEVER = "never"


class AgentStatus(str, Enum):
    IDLE = "idle"
    THINKING = "thinking"
    EXECUTING_TOOL = "executing_tool"
    WAITING_CONFIRMATION = "waiting_confirmation"
    COMPLETE = "complete"
    ERROR = "error"


StopReason = Literal["end_turn", "tool_use", "max_tokens"]


# ---------------------------------------------------------------------------
# Tool calls and results
# ---------------------------------------------------------------------------


class ToolCall(BaseModel):
    """A single tool invocation requested by the model."""

    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolSuccess(BaseModel):
    success: Literal[True] = True
    data: Any = None
    description: str | None = None


class ToolFailure(BaseModel):
    success: Literal[False] = False
    error: str
    description: str | None = None


ToolResult = Union[ToolSuccess, ToolFailure]


class ConfirmationRequest(BaseModel):
    """Describes a tool call that is about to run and needs approval."""

    tool_name: str
    tool_id: str
    input: dict[str, Any] = Field(default_factory=dict)
    description: str = Field(..., description="Human-readable summary of the action.")


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]


class Message(BaseModel):
    """One entry of the conversation transcript."""

    role: Literal["user", "assistant"]
    content: str | list[ContentBlock]


class ProviderResponse(BaseModel):
    """What the model provider returns for one turn."""

    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: StopReason


class ToolInputSchema(BaseModel):
    type: Literal["object"] = "object"
    properties: dict[str, Any] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class ToolDescriptor(BaseModel):
    """Provider-facing description of one registered tool."""

    name: str
    description: str
    input_schema: ToolInputSchema = Field(default_factory=ToolInputSchema)


# ---------------------------------------------------------------------------
# Execution state
# ---------------------------------------------------------------------------


class LastToolResult(BaseModel):
    tool_name: str
    tool_id: str
    success: bool
    error: str | None = None
    description: str | None = None


class ExecutionState(BaseModel):
    """Progress of one executor run, broadcast to observers on every change."""

    status: AgentStatus = AgentStatus.IDLE
    iteration_count: int = 0
    max_iterations: int
    tools_executed: list[str] = Field(default_factory=list)
    current_tool: str | None = None
    current_tool_id: str | None = None
    tool_progress: str | None = None
    pending_confirmation: ConfirmationRequest | None = None
    error: str | None = None
    last_tool_result: LastToolResult | None = None
