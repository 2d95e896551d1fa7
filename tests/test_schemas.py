import pytest
from pydantic import ValidationError

from kairos_chat.schemas import ChatRequest, ImageRequest


def test_image_request_defaults():
    request = ImageRequest(prompt="한강 노을")

    assert (request.count, request.format, request.transparent, request.size) == (1, "png", False, "1024x1024")


def test_transparent_jpeg_becomes_png():
    assert ImageRequest(prompt="로고", format="jpeg", transparent=True).format == "png"
    assert ImageRequest(prompt="로고", format="webp", transparent=True).format == "webp"
    assert ImageRequest(prompt="사진", format="jpeg").format == "jpeg"


@pytest.mark.parametrize(
    "overrides",
    [{"count": 0}, {"count": 11}, {"format": "gif"}, {"size": "1792x1024"}],
)
def test_image_request_rejects_out_of_range_values(overrides):
    with pytest.raises(ValidationError):
        ImageRequest(prompt="x", **overrides)


def test_chat_request_ignores_extra_message_fields():
    request = ChatRequest.model_validate(
        {
            "id": "chat-1",
            "messages": [{"id": "m1", "role": "user", "content": "안녕", "parts": [{"type": "text", "text": "안녕"}]}],
        }
    )

    assert request.messages[0].content == "안녕"
    assert request.messages[0].tool_invocations is None


def test_long_image_prompt_is_accepted():
    request = ImageRequest(prompt="한강 위로 지는 노을, " * 1000)

    assert len(request.prompt) > 5000
