import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent
FRONTEND_DIR = BASE_DIR / "frontend"
CHAT_PAGE_PATH = FRONTEND_DIR / "chat.html"
IMAGE_PAGE_PATH = FRONTEND_DIR / "image.html"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = str(raw).strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value >= minimum else default


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

CHAT_MODEL = os.getenv("CHAT_MODEL") or "gpt-4o"
CHAT_MAX_STEPS = _env_int("CHAT_MAX_STEPS", 10)
CHAT_MAX_DURATION_SECONDS = _env_int("CHAT_MAX_DURATION_SECONDS", 30)

HANGANG_API_URL = os.getenv("HANGANG_API_URL") or "https://api.hangang.life/"
HANGANG_TIMEOUT_SECONDS = 10
TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}

IMAGE_MODEL = os.getenv("IMAGE_MODEL") or "gpt-image-1"
IMAGE_MAX_COUNT = 10

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
HOST = os.getenv("HOST") or "127.0.0.1"
PORT = _env_int("PORT", 8000)
RELOAD = _env_flag("RELOAD", False)
