#!/usr/bin/env python3
"""
Central configuration for ChatNotePad.

- Loads `.env`
- Provides backend URL / credentials / timeout settings
- Provides history and scroll-sync tuning
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv  # make sure python-dotenv is installed


# ----------------- Paths & env loading -----------------

BASE_DIR = Path(__file__).resolve().parent

# Load .env from project root explicitly
DOTENV_PATH = BASE_DIR / ".env"
if DOTENV_PATH.exists():
    load_dotenv(DOTENV_PATH)
else:
    # fall back to a .env in the working directory, if any
    load_dotenv(Path.cwd() / ".env")


def _int_env(name, default):
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        print(f"[config] Warning: {name}={raw!r} is not an integer, using {default}.",
              file=sys.stderr)
        return default


# ----------------- Backend -----------------

def _clean_api_url(url):
    """Strip trailing slashes so paths can be joined with a single '/'."""
    url = (url or "").strip()
    if not url:
        return "http://localhost:8000"
    return url.rstrip("/")


API_URL = _clean_api_url(os.getenv("CHATNOTEPAD_API_URL"))
API_TOKEN = os.getenv("CHATNOTEPAD_API_TOKEN") or None
REQUEST_TIMEOUT = _int_env("CHATNOTEPAD_REQUEST_TIMEOUT", 30)  # seconds


# ----------------- Command history -----------------

def _default_history_path():
    raw = os.getenv("CHATNOTEPAD_HISTORY_PATH")
    if raw is None:
        return str(Path.home() / ".chatnotepad" / "history.json")
    # An explicit empty value keeps history in memory only
    return raw.strip() or None


HISTORY_PATH = _default_history_path()
HISTORY_KEY = os.getenv("CHATNOTEPAD_HISTORY_KEY", "commandHistory")
HISTORY_LIMIT = _int_env("CHATNOTEPAD_HISTORY_LIMIT", 50)


# ----------------- Dispatcher -----------------

MAX_RETRIES = _int_env("CHATNOTEPAD_MAX_RETRIES", 3)
MIN_COMMAND_LENGTH = 3


# ----------------- Editor panes -----------------

SCROLL_SYNC_DELAY_MS = _int_env("CHATNOTEPAD_SCROLL_SYNC_DELAY_MS", 50)


# ----------------- Logging -----------------

LOG_LEVEL = os.getenv("CHATNOTEPAD_LOG_LEVEL", "INFO")
