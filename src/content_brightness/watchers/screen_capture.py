import asyncio
import time
from typing import cast

import mss  # pyright: ignore[reportMissingImports]
import mss.exception  # pyright: ignore[reportMissingImports]
from PIL import Image, ImageStat  # pyright: ignore[reportMissingImports]

from content_brightness.errors import LumaSampleError
from content_brightness.logger import logger

log = logger.getChild("capture")


def mean_luma(image: Image.Image) -> float:
    """画像の平均輝度 (ITU-R 601 luma) を 0-1 で返す."""
    gray = image.convert("L")
    return float(ImageStat.Stat(gray).mean[0]) / 255.0


class LumaSampler:
    """スクリーンキャプチャから画面の平均輝度を取得するクラス."""

    def __init__(
        self, capture_size: int = 50, bbox: dict[str, int] | None = None
    ) -> None:
        """初期化する

        Args:
        capture_size: 輝度計算前に縮小する一辺のピクセル数
        bbox: キャプチャ領域 {"top": int, "left": int, "width": int, "height": int}
             Noneの場合はプライマリモニター全体

        """
        self.capture_size = capture_size
        self._bbox = bbox
        self.last_capture_time: float = 0.0
        self.last_luma: float | None = None

    @property
    def bbox(self) -> dict[str, int]:
        if self._bbox is None:
            self._bbox = self._get_primary_monitor_bbox()
            log.info("LumaSampler initialized | bbox=%s", self._bbox)
        return self._bbox

    def _get_primary_monitor_bbox(self) -> dict[str, int]:
        """プライマリモニターの実際の解像度を取得"""
        with mss.mss() as sct:
            monitors = sct.monitors
            chosen = cast(
                "dict[str, int]",
                monitors[1] if len(monitors) > 1 else monitors[0],
            )
            log.info("Monitors detected: %s | chosen=%s", len(monitors) - 1, chosen)
            return chosen

    def capture(self) -> Image.Image:
        try:
            with mss.mss() as sct:
                screenshot = sct.grab(self.bbox)
        except mss.exception.ScreenShotError as e:
            msg = f"screen capture failed: {e}"
            raise LumaSampleError(msg) from e
        image = Image.frombytes("RGB", screenshot.size, screenshot.bgra, "raw", "BGRX")
        size = (self.capture_size, self.capture_size)
        return image.resize(size, Image.Resampling.BILINEAR)

    def sample(self) -> float:
        """Blocking capture; raises :class:`LumaSampleError`."""
        luma = mean_luma(self.capture())
        self.last_capture_time = time.time()
        self.last_luma = luma
        return luma

    async def sample_async(self) -> float | None:
        """Run :meth:`sample` off the control loop; None when capture fails."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self.sample)
        except LumaSampleError as e:
            log.warning("no luma sample: %s", e)
            return None
