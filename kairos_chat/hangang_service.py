import logging
from typing import Any

import requests

from .config import HANGANG_API_URL, HANGANG_TIMEOUT_SECONDS, TRANSIENT_STATUS_CODES

LOGGER = logging.getLogger("kairos_chat.hangang")

HANGANG_LIVE_DATA_UNAVAILABLE = "한강 수온 데이터를 지금은 가져올 수 없습니다"
MAX_ATTEMPTS = 2


def _unavailable_payload() -> dict[str, Any]:
    return {"status": "service_unavailable", "message": HANGANG_LIVE_DATA_UNAVAILABLE}


def _request_hangang(endpoint_url: str = HANGANG_API_URL) -> requests.Response | None:
    last_response = None

    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            response = requests.get(endpoint_url, timeout=HANGANG_TIMEOUT_SECONDS)
        except requests.RequestException as exc:
            LOGGER.warning("Han river request failed (attempt %d): %s", attempt, exc)
            continue

        last_response = response
        if response.status_code in TRANSIENT_STATUS_CODES:
            LOGGER.warning("Han river API returned %d (attempt %d)", response.status_code, attempt)
            continue
        return response

    return last_response


def fetch_han_river_temperature(endpoint_url: str = HANGANG_API_URL) -> Any:
    """Return the body of the Han river temperature API as-is.

    Never raises: on network failure, a non-200 status or a body that is not
    JSON, a ``service_unavailable`` status payload is returned instead so the
    model can relay it.
    """
    response = _request_hangang(endpoint_url)
    if response is None or response.status_code != 200:
        return _unavailable_payload()

    try:
        return response.json()
    except ValueError:
        LOGGER.warning("Han river API returned a non-JSON body")
        return _unavailable_payload()
