"""Environment variable loading helpers.

Deployments on a small box are usually configured through a dotenv file
next to the project.

Load order (first found wins; existing process env vars are never overridden):
- .env
- .env.dev (only when DEPLOY_ENV=dev)

In production, prefer real environment variables instead of dotenv files.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


def _should_load_dev_env() -> bool:
    return os.environ.get("DEPLOY_ENV", "").lower() in {"dev", "development", "local"}


def env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag ("1", "true", "yes", "on") from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_float(name: str) -> float | None:
    """Read an optional float from the environment (unset or empty is None)."""
    value = os.environ.get(name, "").strip()
    return float(value) if value else None


def load_env(base_dir: Path | None = None) -> None:
    """Load .env files into process environment.

    Safe to call multiple times.

    Args:
        base_dir: Project root directory. Defaults to config/.., the same
            BASE_DIR config/settings.py uses.
    """

    if base_dir is None:
        base_dir = Path(__file__).resolve().parent.parent

    load_dotenv(base_dir / ".env", override=False)

    if _should_load_dev_env():
        load_dotenv(base_dir / ".env.dev", override=False)
