"""Hardware brightness access via ``screen_brightness_control``."""

import screen_brightness_control as sbc  # pyright: ignore[reportMissingImports]

from content_brightness.errors import BrightnessDriverError
from content_brightness.logger import logger

log = logger.getChild("driver")


class ScreenBrightnessDriver:
    """ディスプレイ輝度を [0, 1] で読み書きする.

    ``screen_brightness_control`` works in whole percent; writes that round
    to the percent already set are skipped so a 50 Hz animation does not
    hammer the backlight interface.
    """

    def __init__(self, display: int | str = 0) -> None:
        self.display = display
        self._last_written: int | None = None
        log.info("ScreenBrightnessDriver initialized | display=%s", display)

    def get(self) -> float:
        try:
            values = sbc.get_brightness(display=self.display)
        except sbc.exceptions.ScreenBrightnessError as e:
            msg = f"cannot read brightness of display {self.display}"
            raise BrightnessDriverError(msg) from e
        if not values:
            msg = f"display {self.display} reported no brightness"
            raise BrightnessDriverError(msg)
        percent = int(values[0])
        self._last_written = percent
        return percent / 100.0

    def set(self, level: float) -> None:
        percent = round(max(0.0, min(1.0, level)) * 100)
        if percent == self._last_written:
            return
        try:
            sbc.set_brightness(percent, display=self.display)
        except sbc.exceptions.ScreenBrightnessError as e:
            msg = f"cannot set brightness of display {self.display} to {percent}%"
            raise BrightnessDriverError(msg) from e
        self._last_written = percent
