#!/usr/bin/env python3
import contextlib
import os
from pathlib import Path

import psutil
from utils import DAEMON_PID_FILE, REPO_ROOT, info, ok


def stop_by_pid_file(path: Path) -> bool:
    """Terminate the process recorded in ``path``; True if one was signalled."""
    if not path.exists():
        return False
    pid = int(path.read_text(encoding="ascii"))
    stopped = False
    try:
        proc = psutil.Process(pid)
        proc.terminate()
        stopped = True
    except psutil.NoSuchProcess:
        info("すでに停止済みです")
    with contextlib.suppress(OSError):
        path.unlink(missing_ok=True)
    return stopped


def main() -> int:
    os.chdir(REPO_ROOT)
    if stop_by_pid_file(DAEMON_PID_FILE):
        ok("Brightness daemon stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
