"""Line-oriented data stream format read by the chat page.

Every part is one line, ``<code>:<json>\\n``. Text deltas are plain JSON
strings; tool calls, tool results and step/message boundaries are JSON
objects with camelCase keys.
"""
import json
from typing import Any

DATA_STREAM_HEADERS = {
    "X-Vercel-AI-Data-Stream": "v1",
    "Cache-Control": "no-cache",
}
DATA_STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"

TEXT = "0"
ERROR = "3"
TOOL_CALL = "9"
TOOL_RESULT = "a"
FINISH_MESSAGE = "d"
FINISH_STEP = "e"
START_STEP = "f"

PART_NAMES = {
    TEXT: "text",
    ERROR: "error",
    TOOL_CALL: "tool_call",
    TOOL_RESULT: "tool_result",
    FINISH_MESSAGE: "finish_message",
    FINISH_STEP: "finish_step",
    START_STEP: "start_step",
}


def format_part(code: str, value: Any) -> str:
    if code not in PART_NAMES:
        raise ValueError(f"Unknown stream part code: {code!r}")
    return f"{code}:{json.dumps(value, ensure_ascii=False, separators=(',', ':'))}\n"


def parse_part(line: str) -> tuple[str, Any]:
    """Parse one stream line into ``(part_name, value)``."""
    payload = str(line or "").rstrip("\n")
    code, sep, raw_value = payload.partition(":")
    if not sep:
        raise ValueError(f"Malformed stream part: {payload[:40]!r}")
    if code not in PART_NAMES:
        raise ValueError(f"Unknown stream part code: {code!r}")
    return PART_NAMES[code], json.loads(raw_value)


def _usage_payload(usage: dict[str, int] | None) -> dict[str, int]:
    usage = usage or {}
    return {
        "promptTokens": int(usage.get("input_tokens") or 0),
        "completionTokens": int(usage.get("output_tokens") or 0),
    }


def text_part(delta: str) -> str:
    return format_part(TEXT, delta)


def error_part(message: str) -> str:
    return format_part(ERROR, message)


def tool_call_part(tool_call_id: str, tool_name: str, args: dict[str, Any]) -> str:
    return format_part(TOOL_CALL, {"toolCallId": tool_call_id, "toolName": tool_name, "args": args})


def tool_result_part(tool_call_id: str, result: Any) -> str:
    return format_part(TOOL_RESULT, {"toolCallId": tool_call_id, "result": result})


def start_step_part(message_id: str) -> str:
    return format_part(START_STEP, {"messageId": message_id})


def finish_step_part(finish_reason: str, usage: dict[str, int] | None, is_continued: bool = False) -> str:
    return format_part(
        FINISH_STEP,
        {"finishReason": finish_reason, "usage": _usage_payload(usage), "isContinued": is_continued},
    )


def finish_message_part(finish_reason: str, usage: dict[str, int] | None) -> str:
    return format_part(FINISH_MESSAGE, {"finishReason": finish_reason, "usage": _usage_payload(usage)})
