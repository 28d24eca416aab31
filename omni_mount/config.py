"""
Runtime settings, read from `OMNI_MOUNT_*` environment variables.
"""
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_USER_AGENT = "Omni-MCP/3.0.0 (Resource Fetcher)"


@dataclass
class Settings:
    config_path: Path
    default_dir: Path
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float | None = None  # None waits forever
    dashboard: bool = True

    @classmethod
    def from_env(cls, cwd: str | Path | None = None) -> "Settings":
        base = Path(cwd) if cwd is not None else Path.cwd()
        config_path = os.environ.get("OMNI_MOUNT_CONFIG") or base / "config.json"
        default_dir = os.environ.get("OMNI_MOUNT_DEFAULT_DIR") or base / "test-resources"
        return cls(
            config_path=Path(config_path).expanduser().resolve(),
            default_dir=Path(default_dir).expanduser().resolve(),
            user_agent=os.environ.get("OMNI_MOUNT_USER_AGENT") or DEFAULT_USER_AGENT,
            fetch_timeout=_float_or_none(os.environ.get("OMNI_MOUNT_FETCH_TIMEOUT")),
            dashboard=os.environ.get("OMNI_MOUNT_DASHBOARD", "1").strip().lower()
            not in ("0", "false", "no", "off"),
        )


def _float_or_none(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None
