"""FastAPI app exposing the brightness engine and a simple monitoring UI."""

import logging
import time
from collections import deque
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, field_validator

from content_brightness.config import load_settings
from content_brightness.daemon import BrightnessDaemon, create_daemon
from content_brightness.logger import LOG_DIR, logger
from content_brightness.model.models import (
    KeyEvent,
    KeyPress,
    TriggerEvent,
    TriggerReason,
)

app = FastAPI(
    title="Content-Aware Brightness",
    description="Adapts display brightness to on-screen content",
)

# グローバルな状態管理
STATE: dict[str, Any] = {
    "daemon": None,
    "logs": deque(maxlen=100),  # ログを保存 (最大100件)
}

# --- ロギング ---


class _RecentLogHandler(logging.Handler):
    """エンジンのログをモニタリング用のキューにも追加する."""

    def emit(self, record: logging.LogRecord) -> None:
        STATE["logs"].append(self.format(record))


_recent = _RecentLogHandler()
_recent.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
logger.addHandler(_recent)


def _get_log_tail(max_lines: int = 200) -> list[str]:
    """ログファイル `log/brightness.log` の末尾を取得する."""
    path = LOG_DIR / "brightness.log"
    try:
        lines = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError:
        return []
    return lines[-max_lines:]


# --- Pydanticモデル定義 ---


class TriggerRequest(BaseModel):
    """トリガー注入リクエストのモデル."""

    reason: TriggerReason

    @field_validator("reason", mode="before")
    @classmethod
    def reason_must_be_known(cls, v: Any) -> Any:
        """大文字・小文字を区別しない"""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class KeyRequest(BaseModel):
    """キーイベント注入リクエストのモデル."""

    key: KeyEvent

    @field_validator("key", mode="before")
    @classmethod
    def key_must_be_known(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


# --- アプリケーションのライフサイクルイベント ---


def _require_daemon() -> BrightnessDaemon:
    daemon: BrightnessDaemon | None = STATE["daemon"]
    if daemon is None or not daemon.running:
        raise HTTPException(status_code=503, detail="Brightness engine not running")
    return daemon


# Deprecated on_event usage is temporarily retained for simplicity.
@app.on_event("startup")  # pyright: ignore[reportDeprecated]
async def startup_event() -> None:
    """アプリケーション起動時にエンジンを初期化."""
    settings = load_settings()
    logger.setLevel(settings.log_level.upper())
    daemon = create_daemon(settings)
    await daemon.start()
    STATE["daemon"] = daemon


@app.on_event("shutdown")  # pyright: ignore[reportDeprecated]
async def shutdown_event() -> None:
    daemon: BrightnessDaemon | None = STATE["daemon"]
    if daemon is not None:
        await daemon.stop()
    STATE["daemon"] = None


# --- APIエンドポイント定義 ---


@app.get("/status")
async def get_current_status() -> dict[str, Any]:
    """現在のエンジン状態を取得する."""
    daemon = _require_daemon()
    return {"running": daemon.running, **daemon.orchestrator.snapshot()}


@app.get("/targets")
async def get_targets() -> dict[str, Any]:
    """学習済みの目標輝度を取得する."""
    daemon = _require_daemon()
    return dict(daemon.orchestrator.learner.snapshot())


@app.post("/events")
async def ingest_event(req: TriggerRequest) -> dict[str, Any]:
    """外部ソース (ブラウザ拡張・仮想デスクトップ等) からのトリガーを取り込む."""
    daemon = _require_daemon()
    daemon.channel.publish(TriggerEvent(req.reason, time.monotonic()))
    return {"ok": True, "reason": req.reason.value}


@app.post("/keys")
async def ingest_key(req: KeyRequest) -> dict[str, Any]:
    """キーイベントを取り込む."""
    daemon = _require_daemon()
    daemon.channel.publish(KeyPress(req.key, time.monotonic()))
    return {"ok": True, "key": req.key.value}


# --- モニタリング用エンドポイント ---


@app.get("/api/monitoring_data")
async def get_monitoring_data() -> dict[str, Any]:
    """モニタリングUIに最新データを提供する."""
    daemon: BrightnessDaemon | None = STATE["daemon"]
    return {
        "engine": daemon.orchestrator.snapshot() if daemon is not None else None,
        "logs": list(STATE["logs"]),
        "file_logs": _get_log_tail(),
    }


@app.get("/monitoring", response_class=HTMLResponse)
async def get_monitoring_page() -> HTMLResponse:
    """モニタリング用のWebページを返す."""
    html_content = """
    <!DOCTYPE html>
    <html lang="ja">
    <head>
        <meta charset="UTF-8">
        <title>Content-Aware Brightness Monitor</title>
        <style>
            body { font-family: sans-serif; padding: 20px; background-color: #f4f4f4; color: #333; }
            .container { max-width: 1000px; margin: auto; background: #fff; padding: 20px; border-radius: 8px; }
            pre { background: #eee; padding: 10px; border-radius: 5px; white-space: pre-wrap; }
            #logs { height: 300px; overflow-y: scroll; border: 1px solid #ddd; padding: 10px; }
        </style>
    </head>
    <body>
        <div class="container">
            <h1>Content-Aware Brightness</h1>
            <h2>Engine</h2>
            <pre id="engine">No data yet.</pre>
            <h2>Logs</h2>
            <div id="logs"></div>
        </div>
        <script>
            async function fetchData() {
                try {
                    const response = await fetch('/api/monitoring_data');
                    const data = await response.json();
                    document.getElementById('engine').textContent = JSON.stringify(data.engine, null, 2);
                    const logsDiv = document.getElementById('logs');
                    logsDiv.innerHTML = data.logs.map(log => `<div>${log}</div>`).join('');
                    logsDiv.scrollTop = logsDiv.scrollHeight;
                } catch (error) {
                    console.error('Error fetching monitoring data:', error);
                }
            }

            setInterval(fetchData, 1000);
            window.onload = fetchData;
        </script>
    </body>
    </html>
    """  # noqa: E501
    return HTMLResponse(content=html_content)
