"""Talk to a running brightness daemon over HTTP.

Useful for integrations that know about content changes the built-in
watchers cannot see, e.g. a window manager hook for workspace switches.
"""

from typing import Any

import requests

from content_brightness.logger import logger
from content_brightness.model.models import KeyEvent, TriggerReason

# HTTP status codes
HTTP_OK = 200

DEFAULT_URL = "http://127.0.0.1:5578"


def check_api_availability(base_url: str = DEFAULT_URL) -> bool:
    """APIの可用性をチェック."""
    try:
        response = requests.get(f"{base_url}/status", timeout=3)
    except requests.RequestException:
        return False
    status_code = int(getattr(response, "status_code", 0))
    return status_code == HTTP_OK


def _post(
    base_url: str, path: str, payload: dict[str, str]
) -> dict[str, Any] | None:
    response = requests.post(f"{base_url}{path}", json=payload, timeout=3)
    ok = int(getattr(response, "status_code", 0)) == HTTP_OK
    logger.info("POST %s %s -> %s", path, payload, ok)
    if ok:
        result: dict[str, Any] = response.json()
        return result
    return None


def send_trigger(
    reason: TriggerReason | str, base_url: str = DEFAULT_URL
) -> dict[str, Any] | None:
    """トリガーを送信する

    Args:
        reason: トリガー種別 (例: ``TriggerReason.SPACE_SWITCH`` / "space_switch")
        base_url: デーモンのURL

    Returns:
        成功時はレスポンスJSON、失敗時は None

    """
    value = reason.value if isinstance(reason, TriggerReason) else reason
    return _post(base_url, "/events", {"reason": value})


def send_key(
    key: KeyEvent | str, base_url: str = DEFAULT_URL
) -> dict[str, Any] | None:
    """キーイベントを送信する."""
    value = key.value if isinstance(key, KeyEvent) else key
    return _post(base_url, "/keys", {"key": value})
