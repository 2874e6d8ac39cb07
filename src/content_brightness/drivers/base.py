from typing import Protocol


class BrightnessDriver(Protocol):
    """Hardware brightness in [0, 1]; both calls raise BrightnessDriverError."""

    def get(self) -> float: ...

    def set(self, level: float) -> None: ...
