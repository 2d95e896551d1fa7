import json
import logging
import time
import uuid
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from langchain_core.messages import AIMessage, AIMessageChunk, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_core.tools import BaseTool, StructuredTool
from langchain_openai import ChatOpenAI

from .config import CHAT_MAX_DURATION_SECONDS, CHAT_MAX_STEPS, CHAT_MODEL, OPENAI_API_KEY
from .hangang_service import fetch_han_river_temperature
from .prompts import HAN_RIVER_TOOL_DESCRIPTION, HAN_RIVER_TOOL_NAME, TWIN_PERSONA_SYSTEM_PROMPT
from .schemas import ChatMessage

LOGGER = logging.getLogger("kairos_chat.agent")

FINISH_REASONS = {
    "stop": "stop",
    "length": "length",
    "tool_calls": "tool-calls",
    "function_call": "tool-calls",
    "content_filter": "content-filter",
}


class ChatTimeoutError(TimeoutError):
    pass


@dataclass
class StepStart:
    message_id: str


@dataclass
class TextDelta:
    text: str


@dataclass
class ToolCallEvent:
    tool_call_id: str
    tool_name: str
    args: dict[str, Any]


@dataclass
class ToolResultEvent:
    tool_call_id: str
    result: Any


@dataclass
class StepFinish:
    finish_reason: str
    usage: dict[str, int] = field(default_factory=dict)
    is_continued: bool = False


@dataclass
class Finish:
    finish_reason: str
    usage: dict[str, int] = field(default_factory=dict)
    text: str = ""


def create_chat_model() -> ChatOpenAI | None:
    if not OPENAI_API_KEY:
        LOGGER.warning("OPENAI_API_KEY is not set; chat is disabled")
        return None
    return ChatOpenAI(
        model=CHAT_MODEL,
        api_key=OPENAI_API_KEY,
        streaming=True,
        stream_usage=True,
        timeout=CHAT_MAX_DURATION_SECONDS,
        max_retries=0,
    )


def get_han_river_temp() -> Any:
    return fetch_han_river_temperature()


han_river_temp_tool = StructuredTool.from_function(
    func=get_han_river_temp,
    name=HAN_RIVER_TOOL_NAME,
    description=HAN_RIVER_TOOL_DESCRIPTION,
)

CHAT_TOOLS: list[BaseTool] = [han_river_temp_tool]


def to_langchain_messages(messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    """Convert chat page messages into LangChain messages.

    Finished tool invocations of an assistant turn are replayed as the
    tool-calling ``AIMessage`` followed by one ``ToolMessage`` per call, ahead
    of the turn's text.
    """
    converted: list[BaseMessage] = []
    for message in messages:
        if message.role == "system":
            converted.append(SystemMessage(content=message.content))
            continue
        if message.role == "user":
            converted.append(HumanMessage(content=message.content))
            continue

        finished = [item for item in message.tool_invocations or [] if item.state == "result"]
        if finished:
            converted.append(
                AIMessage(
                    content="",
                    tool_calls=[
                        {"id": item.tool_call_id, "name": item.tool_name, "args": dict(item.args)}
                        for item in finished
                    ],
                )
            )
            converted.extend(
                ToolMessage(content=_tool_content(item.result), tool_call_id=item.tool_call_id)
                for item in finished
            )
        if message.content:
            converted.append(AIMessage(content=message.content))
    return converted


def _tool_content(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


def _chunk_text(chunk: AIMessageChunk) -> str:
    content = chunk.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text") or ""))
    return "".join(parts)


def _add_usage(total: dict[str, int], usage: dict[str, Any] | None) -> dict[str, int]:
    usage = usage or {}
    return {
        "input_tokens": total.get("input_tokens", 0) + int(usage.get("input_tokens") or 0),
        "output_tokens": total.get("output_tokens", 0) + int(usage.get("output_tokens") or 0),
    }


def _step_finish_reason(message: AIMessageChunk, has_tool_calls: bool) -> str:
    if has_tool_calls:
        return "tool-calls"
    raw = str((message.response_metadata or {}).get("finish_reason") or "stop")
    return FINISH_REASONS.get(raw, "other")


def _check_deadline(deadline: float | None) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise ChatTimeoutError(f"Chat exceeded {CHAT_MAX_DURATION_SECONDS}s")


def _run_tool(tools_by_name: dict[str, BaseTool], name: str, args: dict[str, Any]) -> Any:
    selected = tools_by_name.get(name)
    if selected is None:
        LOGGER.warning("Model requested unknown tool %r", name)
        return {"status": "error", "message": f"Unknown tool: {name}"}
    return selected.invoke(args)


def stream_chat(
    llm: Any,
    messages: Sequence[ChatMessage],
    max_steps: int = CHAT_MAX_STEPS,
    deadline: float | None = None,
    tools: Sequence[BaseTool] = CHAT_TOOLS,
) -> Iterator[Any]:
    """Stream a multi-step, tool-calling answer as events.

    Each step streams one model turn. Tool calls requested in the turn are
    executed and their results fed back for the next step, until the model
    answers without calling a tool or ``max_steps`` steps have run.
    ``deadline`` is a ``time.monotonic()`` value.
    """
    bound = llm.bind_tools(list(tools))
    tools_by_name = {item.name: item for item in tools}
    conversation: list[BaseMessage] = [SystemMessage(content=TWIN_PERSONA_SYSTEM_PROMPT)]
    conversation.extend(to_langchain_messages(messages))

    total_usage: dict[str, int] = {}
    text_parts: list[str] = []
    finish_reason = "tool-calls"

    for step in range(max_steps):
        _check_deadline(deadline)
        yield StepStart(message_id=f"msg-{uuid.uuid4().hex[:24]}")

        aggregate: AIMessageChunk | None = None
        for chunk in bound.stream(conversation):
            _check_deadline(deadline)
            aggregate = chunk if aggregate is None else aggregate + chunk
            delta = _chunk_text(chunk)
            if delta:
                text_parts.append(delta)
                yield TextDelta(text=delta)

        if aggregate is None:
            aggregate = AIMessageChunk(content="")

        tool_calls = [
            {"id": call.get("id") or f"call_{uuid.uuid4().hex[:24]}", "name": call["name"], "args": call.get("args") or {}}
            for call in aggregate.tool_calls
        ]
        step_usage = _add_usage({}, aggregate.usage_metadata)
        total_usage = _add_usage(total_usage, step_usage)
        finish_reason = _step_finish_reason(aggregate, bool(tool_calls))

        conversation.append(AIMessage(content=_chunk_text(aggregate), tool_calls=tool_calls))
        if not tool_calls:
            yield StepFinish(finish_reason=finish_reason, usage=step_usage)
            break

        for call in tool_calls:
            yield ToolCallEvent(tool_call_id=call["id"], tool_name=call["name"], args=call["args"])
            LOGGER.info("Step %d: calling tool %s", step + 1, call["name"])
            result = _run_tool(tools_by_name, call["name"], call["args"])
            _check_deadline(deadline)
            yield ToolResultEvent(tool_call_id=call["id"], result=result)
            conversation.append(ToolMessage(content=_tool_content(result), tool_call_id=call["id"]))

        yield StepFinish(finish_reason=finish_reason, usage=step_usage)
    else:
        LOGGER.warning("Chat stopped after reaching %d steps", max_steps)

    yield Finish(finish_reason=finish_reason, usage=total_usage, text="".join(text_parts))
