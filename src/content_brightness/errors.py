"""Exception types raised by the brightness engine and its collaborators."""


class BrightnessError(Exception):
    """Base class for all content_brightness errors."""


class LumaSampleError(BrightnessError):
    """画面の輝度サンプルを取得できなかった (権限なし・ディスプレイなし等)."""


class BrightnessDriverError(BrightnessError):
    """ハードウェア輝度の取得・設定に失敗した."""


class InvariantViolation(BrightnessError, AssertionError):
    """The control state machine reached a state its transitions forbid."""
