"""Static tunables for the brightness engine.

Values are read once at startup from ``.env.local`` (if present) and
``CAB_*`` environment variables. Nothing here is mutable while running.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

from dotenv import load_dotenv

from content_brightness.model.models import TriggerReason

ENV_PREFIX = "CAB_"
REPO_ROOT = Path.cwd()

DEFAULT_SETTLE_DELAYS: dict[TriggerReason, float] = {
    TriggerReason.SPACE_SWITCH: 0.5,
    TriggerReason.TAB_CHANGE: 0.3,
    TriggerReason.TITLE_CHANGE: 0.3,
}


@dataclass(frozen=True)
class Settings:
    """エンジンの調整パラメータ."""

    capture_size: int = 50
    tick_interval: float = 0.02
    ease_factor: float = 0.1
    debounce_interval: float = 0.5
    target_tolerance: float = 0.03
    animation_threshold: float = 0.003
    training_delay: float = 5.0
    light_target: float = 0.45
    dark_target: float = 1.0
    queue_size: int = 64
    poll_interval: float = 0.25
    api_host: str = "127.0.0.1"
    api_port: int = 5578
    log_level: str = "INFO"
    settle_delays: dict[TriggerReason, float] = field(
        default_factory=lambda: dict(DEFAULT_SETTLE_DELAYS)
    )

    def __post_init__(self) -> None:
        for name in ("tick_interval", "debounce_interval", "poll_interval"):
            if getattr(self, name) <= 0:
                msg = f"{name} must be positive"
                raise ValueError(msg)
        if not 0.0 < self.ease_factor <= 1.0:
            msg = "ease_factor must be in (0, 1]"
            raise ValueError(msg)
        for name in ("light_target", "dark_target"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                msg = f"{name} must be within [0, 1]"
                raise ValueError(msg)
        if self.training_delay < 0 or self.target_tolerance < 0:
            msg = "training_delay and target_tolerance must not be negative"
            raise ValueError(msg)
        if self.animation_threshold <= 0:
            msg = "animation_threshold must be positive"
            raise ValueError(msg)
        if self.capture_size < 1 or self.queue_size < 1:
            msg = "capture_size and queue_size must be at least 1"
            raise ValueError(msg)


def _coerce(raw: str, current: object) -> object:
    if isinstance(current, bool):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    return raw


def load_local_env(root: Path = REPO_ROOT) -> None:
    """``.env.local`` を環境変数として読み込む."""
    load_dotenv(dotenv_path=root / ".env.local", override=False)


def load_settings(env: dict[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``CAB_*`` variables.

    Args:
        env: mapping to read instead of ``os.environ`` (``.env.local`` is
            only loaded when reading the real environment).

    Raises:
        ValueError: a variable cannot be parsed or is out of range.

    """
    if env is None:
        load_local_env()
        env = dict(os.environ)

    defaults = Settings()
    overrides: dict[str, object] = {}
    for f in fields(Settings):
        if f.name == "settle_delays":
            continue
        raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None:
            continue
        try:
            overrides[f.name] = _coerce(raw, getattr(defaults, f.name))
        except ValueError as e:
            msg = f"invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}"
            raise ValueError(msg) from e
    return Settings(**overrides)  # type: ignore[arg-type]
