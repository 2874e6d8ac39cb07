"""Global key hooks: brightness keys and tab open/close shortcuts."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import keyboard  # pyright: ignore[reportMissingImports]

from content_brightness.logger import logger
from content_brightness.model.models import KeyEvent

log = logger.getChild("keys")

BRIGHTNESS_KEYS = frozenset({"brightness up", "brightness down"})
TAB_HOTKEYS = ("ctrl+t", "ctrl+w")


def classify_key(name: str | None, event_type: str) -> KeyEvent | None:
    """キーイベントを KeyEvent に変換する (押下のみ対象)."""
    if event_type != keyboard.KEY_DOWN or not name:
        return None
    if name.lower() in BRIGHTNESS_KEYS:
        return KeyEvent.BRIGHTNESS_KEY_PRESSED
    return None


class KeyListener:
    """Forward brightness keys and tab shortcuts as :class:`KeyEvent`.

    ``keyboard`` runs its own listener thread; ``emit`` must be safe to
    call from it.
    """

    def __init__(
        self,
        emit: Callable[[KeyEvent], None],
        tab_hotkeys: Iterable[str] = TAB_HOTKEYS,
    ) -> None:
        self._emit = emit
        self.tab_hotkeys = tuple(tab_hotkeys)
        self._hooks: list[Callable[[], None]] = []
        self._hotkeys: list[object] = []

    def _on_key(self, event: keyboard.KeyboardEvent) -> None:
        key = classify_key(event.name, event.event_type)
        if key is not None:
            log.info("Brightness key pressed! (%s)", event.name)
            self._emit(key)

    def _on_tab(self) -> None:
        log.info("tab shortcut detected")
        self._emit(KeyEvent.TAB_NAVIGATED)

    def start(self) -> None:
        try:
            self._hooks.append(keyboard.hook(self._on_key))
            for combo in self.tab_hotkeys:
                self._hotkeys.append(keyboard.add_hotkey(combo, self._on_tab))
        except (ImportError, OSError) as e:
            # keyboard needs root on Linux and accessibility rights on macOS
            log.warning("key listener unavailable: %s", e)
            return
        log.info(
            "key listener started (brightness keys + %s)", ", ".join(self.tab_hotkeys)
        )

    def stop(self) -> None:
        for remove in self._hooks:
            remove()
        for hotkey in self._hotkeys:
            keyboard.remove_hotkey(hotkey)
        self._hooks.clear()
        self._hotkeys.clear()
