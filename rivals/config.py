"""Runtime configuration, read once from the environment.

Values may also come from a ``.env`` file in the working directory; it is
loaded here so every module sees the same settings.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    try:
        value = float(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 and value != float("inf") else default


LOG_LEVEL = os.getenv("CR_LOGLEVEL", "INFO").upper()

# Opaque key-value store backing the rival list
STORE_PATH = Path(os.getenv("CR_STORE_PATH", "data/store.json"))
STORAGE_KEY = os.getenv("CR_STORAGE_KEY", "code_rivals_users")

# Cap on in-flight syncs when refreshing every rival
MAX_WORKERS = max(1, _int_env("CR_MAX_WORKERS", 8) or 1)

# Per-request timeout in seconds
HTTP_TIMEOUT = _float_env("CR_HTTP_TIMEOUT", 15.0)

# None fetches the full Codeforces submission list
CF_SUBMISSION_COUNT = _int_env("CR_CF_SUBMISSION_COUNT", None)

SIMILAR_NAME_THRESHOLD = _int_env("CR_SIMILAR_NAME_THRESHOLD", 88)

REPORT_PATH = Path(os.getenv("CR_REPORT_PATH", "report.md"))
