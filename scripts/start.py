#!/usr/bin/env python3
"""Content-aware brightness launcher (Windows/macOS/Linux)"""

from __future__ import annotations

import os
import platform
import subprocess
import sys
import time
from typing import TYPE_CHECKING

from utils import (
    DAEMON_PID_FILE,
    LOG_DIR,
    REPO_ROOT,
    http_ok,
    info,
    ok,
    warn,
)

if TYPE_CHECKING:
    from pathlib import Path


CREATE_NEW_PROCESS_GROUP = 0x00000200
DETACHED_PROCESS = 0x00000008
DEFAULT_STATUS_URL = "http://127.0.0.1:5578/status"


def wait_http(url: str, attempts: int = 30, interval: float = 1.0) -> bool:
    for _ in range(attempts):
        if http_ok(url):
            return True
        time.sleep(interval)
        sys.stdout.write(".")
        sys.stdout.flush()
    sys.stdout.write("\n")
    return http_ok(url)


def background_popen(
    cmd: list[str], stdout_path: Path, stderr_path: Path, env: dict[str, str]
) -> subprocess.Popen:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    with stdout_path.open("ab", buffering=0) as stdout_f, stderr_path.open(
        "ab", buffering=0
    ) as stderr_f:
        creationflags = 0
        start_new_session = False
        if platform.system() == "Windows":
            creationflags = CREATE_NEW_PROCESS_GROUP | DETACHED_PROCESS
        else:
            start_new_session = True

        return subprocess.Popen(  # noqa: S603
            cmd,
            cwd=str(REPO_ROOT),
            stdout=stdout_f,
            stderr=stderr_f,
            env=env,
            creationflags=creationflags,
            start_new_session=start_new_session,
        )


def start_daemon(env: dict[str, str], status_url: str = DEFAULT_STATUS_URL) -> int:
    info("Starting brightness daemon (uvicorn)...")
    proc = background_popen(
        [sys.executable, "-m", "content_brightness", "run"],
        stdout_path=LOG_DIR / "daemon.log",
        stderr_path=LOG_DIR / "daemon.err.log",
        env=env,
    )
    DAEMON_PID_FILE.write_text(str(proc.pid), encoding="ascii")
    sys.stdout.write("   Waiting for daemon to respond...\n")
    if wait_http(status_url, attempts=30):
        ok(f"Brightness daemon up (PID {proc.pid})")
    else:
        warn("Daemon did not respond in time. Check logs under ./log/")
    return proc.pid


def main() -> int:
    os.chdir(REPO_ROOT)
    if http_ok(DEFAULT_STATUS_URL):
        ok("Brightness daemon already running")
        return 0
    start_daemon(dict(os.environ))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
