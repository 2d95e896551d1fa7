import base64
import binascii
import logging
from typing import Any

from openai import OpenAI, OpenAIError

from .config import IMAGE_MODEL, OPENAI_API_KEY
from .schemas import ImageRequest

LOGGER = logging.getLogger("kairos_chat.image")


class ImageGenerationError(RuntimeError):
    pass


def create_image_client() -> OpenAI | None:
    if not OPENAI_API_KEY:
        LOGGER.warning("OPENAI_API_KEY is not set; image generation is disabled")
        return None
    return OpenAI(api_key=OPENAI_API_KEY)


def _is_base64(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def generate_images(client: Any, request: ImageRequest) -> list[str]:
    """Generate ``request.count`` images and return them base64-encoded."""
    try:
        result = client.images.generate(
            model=IMAGE_MODEL,
            prompt=request.prompt.strip(),
            n=request.count,
            size=request.size,
            output_format=request.format,
            background="transparent" if request.transparent else "auto",
        )
    except OpenAIError as exc:
        LOGGER.error("Image generation failed: %s", exc)
        raise ImageGenerationError(str(exc)) from exc

    images = [getattr(item, "b64_json", None) for item in (getattr(result, "data", None) or [])]
    if not images or not all(_is_base64(item) for item in images):
        raise ImageGenerationError("Provider returned no base64 image data")

    LOGGER.info("Generated %d %s image(s) at %s", len(images), request.format, request.size)
    return images
