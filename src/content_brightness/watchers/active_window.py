import sys
import threading
from collections.abc import Callable
from typing import Any, cast

import psutil

from content_brightness.logger import logger
from content_brightness.model.models import TriggerReason

if sys.platform == "win32":
    import pywintypes  # pyright: ignore[reportMissingImports]
    import win32gui  # pyright: ignore[reportMissingImports]
    import win32process  # pyright: ignore[reportMissingImports]
else:  # pragma: no cover
    pywintypes = cast("Any", None)
    win32gui = cast("Any", None)
    win32process = cast("Any", None)

log = logger.getChild("active_window")


def get_active_app() -> dict[str, str | None]:
    """Return the foreground application on Windows."""
    if sys.platform != "win32":
        return {"active_app": None, "title": None}

    hwnd = win32gui.GetForegroundWindow()
    if not hwnd:
        return {"active_app": None, "title": None}

    try:
        title = win32gui.GetWindowText(hwnd)
        _, pid = win32process.GetWindowThreadProcessId(hwnd)
    except pywintypes.error:
        return {"active_app": None, "title": None}

    try:
        process = psutil.Process(pid)
        process_name = process.name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return {"active_app": None, "title": None}
    return {"active_app": process_name, "title": title}


def classify_change(
    previous: dict[str, str | None], current: dict[str, str | None]
) -> TriggerReason | None:
    """前面ウィンドウの変化をトリガー種別に変換する.

    A different process is an app switch; the same process with a new
    title (page navigation, tab switch) is a title change.
    """
    if current["active_app"] is None:
        return None
    if current["active_app"] != previous["active_app"]:
        return TriggerReason.APP_SWITCH
    if current["title"] != previous["title"]:
        return TriggerReason.TITLE_CHANGE
    return None


class ActiveWindowWatcher:
    """Poll the foreground window on a daemon thread and report changes."""

    def __init__(
        self,
        emit: Callable[[TriggerReason], None],
        interval: float = 0.25,
        probe: Callable[[], dict[str, str | None]] = get_active_app,
    ) -> None:
        self._emit = emit
        self.interval = interval
        self._probe = probe
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._last: dict[str, str | None] = {"active_app": None, "title": None}

    def poll_once(self) -> TriggerReason | None:
        current = self._probe()
        reason = classify_change(self._last, current)
        if current["active_app"] is not None:
            self._last = current
        if reason is not None:
            log.info("%s: %s", reason.value, current["active_app"])
            self._emit(reason)
        return reason

    def _run(self) -> None:
        # 起動時のウィンドウは BOOTUP で評価済みなので基準値としてのみ使う
        self._last = self._probe()
        while not self._stop.wait(self.interval):
            try:
                self.poll_once()
            except Exception:
                log.exception("active window poll failed")

    def start(self) -> None:
        if sys.platform != "win32":
            log.warning("active window watching is only available on Windows")
            return
        self._thread = threading.Thread(
            target=self._run, name="active-window-watcher", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval * 4)
            self._thread = None
