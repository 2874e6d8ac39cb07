from unittest.mock import MagicMock, patch

import mss.exception
import pytest
from PIL import Image

from content_brightness.errors import LumaSampleError
from content_brightness.watchers.screen_capture import LumaSampler, mean_luma

BBOX = {"top": 0, "left": 0, "width": 200, "height": 100}


def _fake_shot(color: tuple[int, int, int]) -> MagicMock:
    """mss の ScreenShot を模したオブジェクト (BGRA)."""
    width, height = BBOX["width"], BBOX["height"]
    r, g, b = color
    shot = MagicMock()
    shot.size = (width, height)
    shot.bgra = bytes([b, g, r, 255]) * (width * height)
    return shot


def _patched_mss(shot: MagicMock | None = None, error: Exception | None = None):
    sct = MagicMock()
    if error is not None:
        sct.grab.side_effect = error
    else:
        sct.grab.return_value = shot
    ctx = MagicMock()
    ctx.__enter__.return_value = sct
    return patch("mss.mss", return_value=ctx)


class TestMeanLuma:
    """平均輝度計算のテスト"""

    def test_white_and_black(self) -> None:
        assert mean_luma(Image.new("RGB", (10, 10), (255, 255, 255))) == 1.0
        assert mean_luma(Image.new("RGB", (10, 10), (0, 0, 0))) == 0.0

    def test_mid_gray(self) -> None:
        luma = mean_luma(Image.new("RGB", (10, 10), (128, 128, 128)))
        assert luma == pytest.approx(128 / 255)


class TestLumaSampler:
    """スクリーンキャプチャのテスト"""

    def test_sample_white_screen(self) -> None:
        sampler = LumaSampler(capture_size=8, bbox=BBOX)
        with _patched_mss(_fake_shot((255, 255, 255))):
            assert sampler.sample() == pytest.approx(1.0)
        assert sampler.last_luma == pytest.approx(1.0)
        assert sampler.last_capture_time > 0

    def test_capture_is_downscaled(self) -> None:
        sampler = LumaSampler(capture_size=8, bbox=BBOX)
        with _patched_mss(_fake_shot((10, 20, 30))):
            image = sampler.capture()
        assert image.size == (8, 8)

    def test_capture_error_is_wrapped(self) -> None:
        sampler = LumaSampler(bbox=BBOX)
        error = mss.exception.ScreenShotError("no display")
        with _patched_mss(error=error), pytest.raises(LumaSampleError):
            sampler.sample()

    @pytest.mark.asyncio
    async def test_sample_async_returns_none_on_error(self) -> None:
        sampler = LumaSampler(bbox=BBOX)
        with patch.object(sampler, "sample", side_effect=LumaSampleError("x")):
            assert await sampler.sample_async() is None

    @pytest.mark.asyncio
    async def test_sample_async_value(self) -> None:
        sampler = LumaSampler(bbox=BBOX)
        with patch.object(sampler, "sample", return_value=0.25):
            assert await sampler.sample_async() == 0.25

    def test_primary_monitor_is_resolved_lazily(self) -> None:
        sct = MagicMock()
        sct.monitors = [{"top": 0, "left": 0, "width": 3840, "height": 1080}, BBOX]
        ctx = MagicMock()
        ctx.__enter__.return_value = sct
        with patch("mss.mss", return_value=ctx) as factory:
            sampler = LumaSampler()
            factory.assert_not_called()
            assert sampler.bbox == BBOX
