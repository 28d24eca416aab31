import time
from contextlib import contextmanager
from datetime import datetime, timezone


@contextmanager
def timer():
    start = time.perf_counter()
    try:
        yield lambda: (time.perf_counter() - start)
    finally:
        pass


def now_iso() -> str:
    """UTC timestamp with millisecond precision, e.g. 2026-01-02T03:04:05.678Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def clip(text: str, limit: int = 200) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


def shorten(text: str, limit: int) -> str:
    """Keep the tail of a long string, e.g. for deep paths."""
    if len(text) <= limit:
        return text
    return "…" + text[len(text) - (limit - 1) :]
