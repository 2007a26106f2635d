# perfdemo/helpers.py
import json
from pathlib import Path
from typing import Optional

import backoff

from .constants import BYTES_PER_ITEM, DEFAULT_CONFIG
from .errors import FetchError


def validate_key(key: str) -> str:
    if not isinstance(key, str) or not key.strip():
        raise ValueError(f"key must be a non-empty string, got {key!r}")
    return key


def format_bytes(n: int) -> str:
    if n < 1024:
        return f"{n} B"
    if n < 1024 * 1024:
        return f"{n / 1024:.2f} KB"
    return f"{n / (1024 * 1024):.2f} MB"


def estimate_memory_usage(item_count: int) -> str:
    # Rough figure for the list examples, not a measurement
    return format_bytes(item_count * BYTES_PER_ITEM)


def load_config(path: Optional[Path] = None) -> dict:
    config = dict(DEFAULT_CONFIG)
    if path is not None:
        with open(path) as f:
            config.update(json.load(f))
    return config


# Caller-side retry using backoff; the clients themselves never retry
def simple_retry(fn, max_tries: int = 3, factor: float = 1):
    """Wrap a sync or async callable so FetchError is retried with exponential backoff."""
    return backoff.on_exception(backoff.expo, FetchError, max_tries=max_tries, factor=factor)(fn)
