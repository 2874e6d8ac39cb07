from content_brightness.logger import logger
from content_brightness.model.models import TargetsModel

log = logger.getChild("learner")

LUMA_MIDPOINT = 0.5


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class TargetLearner:
    """明るい画面用・暗い画面用の2つの目標輝度を保持し、ユーザー操作から学習する.

    The binary light/dark split keeps learning stable with very few
    corrections: one manual adjustment fully defines a class.
    """

    def __init__(self, light_target: float = 0.45, dark_target: float = 1.0) -> None:
        for name, value in (("light_target", light_target), ("dark_target", dark_target)):
            if not 0.0 <= value <= 1.0:
                msg = f"{name} must be within [0, 1], got {value}"
                raise ValueError(msg)
        self.light_target = light_target
        self.dark_target = dark_target

    @staticmethod
    def is_light(luma: float) -> bool:
        """Exactly the midpoint counts as dark."""
        return luma > LUMA_MIDPOINT

    def target_for(self, luma: float) -> float:
        return self.light_target if self.is_light(luma) else self.dark_target

    def commit(self, observed_luma: float, final_hw: float) -> None:
        level = _clamp(final_hw)
        if self.is_light(observed_luma):
            self.light_target = level
        else:
            self.dark_target = level
        log.info(
            "LEARNED: new %s target %.2f (luma %.2f)",
            "light" if self.is_light(observed_luma) else "dark",
            level,
            observed_luma,
        )

    def snapshot(self) -> TargetsModel:
        return {"light_target": self.light_target, "dark_target": self.dark_target}
