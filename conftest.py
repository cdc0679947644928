"""Root conftest: loads .env.test before any realtime_service module is imported.

``realtime_service.config.settings`` is built at import time, so the test
environment has to be in place before test collection starts.
"""
from __future__ import annotations

import os
from pathlib import Path

ENV_FILE = Path(__file__).resolve().parent / ".env.test"


def _load_env_file(path: Path) -> None:
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip().strip("\"'"))


if ENV_FILE.exists():
    _load_env_file(ENV_FILE)
