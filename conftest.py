"""Pytest configuration.

Ensures that ``src`` is importable so that ``content_brightness`` resolves
when the tests run from a plain checkout without ``pip install -e .``, and
keeps the engine's log file out of the repository root.
"""

import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# logger.py reads this at import time
os.environ.setdefault("CAB_LOG_DIR", str(Path(tempfile.gettempdir()) / "cab-test-log"))
