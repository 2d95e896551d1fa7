import logging
import time
from collections.abc import Iterator, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import FileResponse, StreamingResponse

from .agent_service import (
    ChatTimeoutError,
    Finish,
    StepFinish,
    StepStart,
    TextDelta,
    ToolCallEvent,
    ToolResultEvent,
    create_chat_model,
    stream_chat,
)
from .config import CHAT_MAX_DURATION_SECONDS, CHAT_PAGE_PATH, IMAGE_PAGE_PATH
from .data_stream import (
    DATA_STREAM_HEADERS,
    DATA_STREAM_MEDIA_TYPE,
    error_part,
    finish_message_part,
    finish_step_part,
    start_step_part,
    text_part,
    tool_call_part,
    tool_result_part,
)
from .image_service import ImageGenerationError, create_image_client, generate_images
from .personas import list_personas, missing_personas
from .schemas import ChatMessage, ChatRequest, ImageRequest, ImageResponse

LOGGER = logging.getLogger("kairos_chat.api")

CHAT_STREAM_ERROR_MESSAGE = "An error occurred."
CHAT_TIMEOUT_MESSAGE = "응답 시간이 초과되었습니다. 잠시 후 다시 시도해 주세요."
IMAGE_PROMPT_REQUIRED = "프롬프트를 입력해주세요"
IMAGE_GENERATION_FAILED = "이미지 생성에 실패했습니다"

app = FastAPI(title="kairos-chat")


@lru_cache(maxsize=1)
def get_chat_model() -> Any | None:
    return create_chat_model()


@lru_cache(maxsize=1)
def get_image_client() -> Any | None:
    return create_image_client()


@app.get("/")
def root() -> dict[str, Any]:
    return {
        "service": "kairos-chat",
        "status": "ok",
        "routes": {
            "chat_ui": "/ui",
            "image_ui": "/image",
            "chat_post": "/api/chat",
            "image_post": "/api/gen-image",
            "personas": "/api/personas",
            "docs": "/docs",
        },
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def _page(path: Path) -> FileResponse:
    if not path.exists():
        raise HTTPException(status_code=404, detail="UI not found")
    return FileResponse(path, media_type="text/html")


@app.get("/ui", include_in_schema=False)
def chat_ui() -> FileResponse:
    return _page(CHAT_PAGE_PATH)


@app.get("/image", include_in_schema=False)
def image_ui() -> FileResponse:
    return _page(IMAGE_PAGE_PATH)


@app.get("/api/personas")
def personas() -> list[dict[str, Any]]:
    return list_personas()


def _encode_event(event: Any) -> str:
    if isinstance(event, TextDelta):
        return text_part(event.text)
    if isinstance(event, StepStart):
        return start_step_part(event.message_id)
    if isinstance(event, ToolCallEvent):
        return tool_call_part(event.tool_call_id, event.tool_name, event.args)
    if isinstance(event, ToolResultEvent):
        return tool_result_part(event.tool_call_id, event.result)
    if isinstance(event, StepFinish):
        return finish_step_part(event.finish_reason, event.usage, event.is_continued)
    if isinstance(event, Finish):
        return finish_message_part(event.finish_reason, event.usage)
    raise TypeError(f"Unsupported stream event: {type(event).__name__}")


def _chat_data_stream(llm: Any, messages: Sequence[ChatMessage]) -> Iterator[str]:
    deadline = time.monotonic() + CHAT_MAX_DURATION_SECONDS
    # the response status is already sent, so failures become error parts
    try:
        for event in stream_chat(llm, messages, deadline=deadline):
            if isinstance(event, Finish):
                silent = missing_personas(event.text)
                if event.text and silent:
                    LOGGER.warning("Answer is missing persona(s): %s", ", ".join(silent))
            yield _encode_event(event)
    except ChatTimeoutError as exc:
        LOGGER.warning("Chat stream timed out: %s", exc)
        yield error_part(CHAT_TIMEOUT_MESSAGE)
    except Exception:
        LOGGER.exception("Chat stream failed")
        yield error_part(CHAT_STREAM_ERROR_MESSAGE)


@app.post("/api/chat")
def chat(payload: ChatRequest, llm: Any = Depends(get_chat_model)) -> StreamingResponse:
    if not payload.messages:
        raise HTTPException(status_code=400, detail="Provide at least one message")
    if llm is None:
        raise HTTPException(status_code=503, detail="Chat model is not configured")

    return StreamingResponse(
        _chat_data_stream(llm, payload.messages),
        media_type=DATA_STREAM_MEDIA_TYPE,
        headers=DATA_STREAM_HEADERS,
    )


@app.post("/api/gen-image", response_model=ImageResponse)
def gen_image(payload: ImageRequest, client: Any = Depends(get_image_client)) -> ImageResponse:
    if not payload.prompt.strip():
        raise HTTPException(status_code=400, detail=IMAGE_PROMPT_REQUIRED)
    if client is None:
        raise HTTPException(status_code=503, detail="Image generation is not configured")

    try:
        images = generate_images(client, payload)
    except ImageGenerationError:
        raise HTTPException(status_code=502, detail=IMAGE_GENERATION_FAILED)

    return ImageResponse(image=images[0], images=images, format=payload.format)
