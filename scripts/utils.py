#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path
from typing import cast

import requests

# Paths used by both start and stop scripts
REPO_ROOT = Path(__file__).resolve().parent.parent
LOG_DIR = REPO_ROOT / "log"
DAEMON_PID_FILE = REPO_ROOT / "brightness_daemon.pid"

HTTP_OK_MIN = 200
HTTP_OK_MAX = 400


# Lightweight logging helpers used in both scripts
def info(msg: str) -> None:
    sys.stdout.write(f"[INFO] {msg}\n")


def ok(msg: str) -> None:
    sys.stdout.write(f"[OK] {msg}\n")


def warn(msg: str) -> None:
    sys.stdout.write(f"[WARN] {msg}\n")


def http_ok(url: str, timeout: float = 2.5) -> bool:
    if not url.lower().startswith(("http://", "https://")):
        return False
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException:
        return False
    else:
        status = cast("int", getattr(resp, "status_code", 0))
        return HTTP_OK_MIN <= status < HTTP_OK_MAX
