from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path


def _base_root() -> Path:
    env_root = os.getenv("EXPORTS_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[2] / "exports"


def export_path(prefix: str, suffix: str) -> Path:
    """Return a fresh, timestamped file path under the exports directory."""

    root = _base_root()
    root.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
    return root / f"{prefix}_{stamp}.{suffix.lstrip('.')}"
