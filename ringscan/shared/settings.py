"""Runtime settings, resolved from the environment and overridden by the CLI."""

import os
import pathlib
from typing import NamedTuple, Optional

from ringscan.shared.fragment_guard import DEFAULT_MAX_FRAGMENT_CHARS

DEFAULT_INPUT = "galaxy_1month.json"
DEFAULT_DB = "galaxy.db"
DEFAULT_BATCH_SIZE = 500
DEFAULT_REPORT_EVERY = 500
DEFAULT_CHUNK_KB = 2048
DEFAULT_RATE_PRECISION = 3


class IngestSettings(NamedTuple):
    db_path: pathlib.Path = pathlib.Path(DEFAULT_DB)
    batch_size: int = DEFAULT_BATCH_SIZE
    report_every: int = DEFAULT_REPORT_EVERY
    chunk_kb: int = DEFAULT_CHUNK_KB
    max_fragment_chars: int = DEFAULT_MAX_FRAGMENT_CHARS
    rate_precision: int = DEFAULT_RATE_PRECISION
    metrics_file: Optional[pathlib.Path] = None
    debug: bool = False

    @property
    def chunk_size(self) -> int:
        return self.chunk_kb * 1024


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid {name} value: {raw!r} (expected integer)") from exc
    if value < minimum:
        raise SystemExit(f"Invalid {name} value: {raw!r} (must be >= {minimum})")
    return value


def env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def settings_from_env() -> IngestSettings:
    """Build settings from RINGSCAN_* variables, falling back to defaults."""
    metrics = os.getenv("RINGSCAN_METRICS_FILE")
    return IngestSettings(
        db_path=pathlib.Path(os.getenv("RINGSCAN_DB") or DEFAULT_DB),
        batch_size=env_int("RINGSCAN_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        report_every=env_int("RINGSCAN_REPORT_EVERY", DEFAULT_REPORT_EVERY),
        chunk_kb=env_int("RINGSCAN_CHUNK_KB", DEFAULT_CHUNK_KB),
        max_fragment_chars=env_int("RINGSCAN_MAX_FRAGMENT_CHARS", DEFAULT_MAX_FRAGMENT_CHARS),
        rate_precision=env_int("RINGSCAN_RATE_PRECISION", DEFAULT_RATE_PRECISION, minimum=0),
        metrics_file=pathlib.Path(metrics) if metrics else None,
        debug=env_flag("DEBUG"),
    )
