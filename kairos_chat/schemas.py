from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import IMAGE_MAX_COUNT

ImageFormat = Literal["png", "jpeg", "webp"]
ImageSize = Literal["1024x1024", "1536x1024", "1024x1536"]


class ToolInvocation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    args: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    state: str = "result"


class ChatMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: Literal["system", "user", "assistant"]
    content: str = ""
    tool_invocations: list[ToolInvocation] | None = Field(default=None, alias="toolInvocations")


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)


class ImageRequest(BaseModel):
    prompt: str = ""
    count: int = Field(default=1, ge=1, le=IMAGE_MAX_COUNT)
    format: ImageFormat = "png"
    transparent: bool = False
    size: ImageSize = "1024x1024"

    @model_validator(mode="after")
    def _transparent_needs_alpha(self) -> "ImageRequest":
        # jpeg has no alpha channel
        if self.transparent and self.format == "jpeg":
            self.format = "png"
        return self


class ImageResponse(BaseModel):
    image: str
    images: list[str] = Field(default_factory=list)
    format: ImageFormat = "png"
