__all__ = [
    "Animating",
    "ControlState",
    "EngineSnapshot",
    "Idle",
    "KeyEvent",
    "KeyPress",
    "TargetsModel",
    "Training",
    "TriggerEvent",
    "TriggerReason",
]


from dataclasses import dataclass
from enum import Enum
from typing import TypedDict


class TriggerReason(Enum):
    """輝度の再評価を要求するイベントの種類."""

    BOOTUP = "bootup"
    APP_SWITCH = "app_switch"
    SPACE_SWITCH = "space_switch"
    TAB_CHANGE = "tab_change"
    TITLE_CHANGE = "title_change"


class KeyEvent(Enum):
    """Raw hardware key signals."""

    BRIGHTNESS_KEY_PRESSED = "brightness_key_pressed"
    TAB_NAVIGATED = "tab_navigated"


@dataclass(frozen=True)
class TriggerEvent:
    reason: TriggerReason
    at: float


@dataclass(frozen=True)
class KeyPress:
    key: KeyEvent
    at: float

    def as_trigger(self) -> TriggerEvent | None:
        """Tab navigation is handled as a content trigger; other keys are not."""
        if self.key is KeyEvent.TAB_NAVIGATED:
            return TriggerEvent(TriggerReason.TAB_CHANGE, self.at)
        return None


@dataclass(frozen=True)
class Idle:
    name = "idle"


@dataclass(frozen=True)
class Animating:
    target: float
    name = "animating"


@dataclass(frozen=True)
class Training:
    started_at: float
    observed_luma: float
    name = "training"


ControlState = Idle | Animating | Training


class TargetsModel(TypedDict):
    """学習済みターゲット."""

    light_target: float
    dark_target: float


class EngineSnapshot(TypedDict):
    """Status payload exposed by the API."""

    state: str
    animating_target: float | None
    training_luma: float | None
    current_target: float
    last_settled_hw: float | None
    last_luma: float
    sample_in_flight: bool
    targets: TargetsModel
    admitted: int
    dropped: int
