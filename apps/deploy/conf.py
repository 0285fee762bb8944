"""Deploy config loading.

The JSON file named by settings.DEPLOY_CONFIG_FILE is read once and turned
into an immutable DeployConfig. Any problem with the file is fatal: the
loader raises DeployConfigError, which Django reports as ImproperlyConfigured.

Expected shape:
    {
        "addr": "127.0.0.1:8000",
        "root": "/deploy",
        "rpc": "127.0.0.1:9001",
        "apps": {"<repository>": {"proc": ..., "path": ..., "build_command": ...}}
    }
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from django.core.exceptions import ImproperlyConfigured

from apps.deploy.registry import ApplicationRegistry

logger = logging.getLogger(__name__)

DEFAULT_ADDR = "127.0.0.1:8000"


class DeployConfigError(ImproperlyConfigured):
    """Raised when the deploy config file is missing or invalid."""


def normalize_root(root: str) -> str:
    """Make sure the webhook path starts with a slash ("" becomes "/")."""
    if not root or not root.startswith("/"):
        root = "/" + root
    return root


@dataclass(frozen=True)
class DeployConfig:
    """Everything the webhook endpoint needs, fixed at startup."""

    addr: str = DEFAULT_ADDR
    root: str = "/"
    rpc: str = ""
    registry: ApplicationRegistry = field(default_factory=ApplicationRegistry)

    @property
    def url_path(self) -> str:
        """The root without its leading slash."""
        return self.root.lstrip("/")

    @property
    def url_pattern(self) -> str:
        """
        The root as a Django re_path() regex.

        A root ending in "/" matches its whole subtree, so "/" matches every
        path. Any other root matches only itself.
        """
        pattern = "^" + re.escape(self.url_path)
        if self.root.endswith("/"):
            return pattern
        return pattern + "$"

    @classmethod
    def from_dict(cls, data: Any) -> "DeployConfig":
        if not isinstance(data, dict):
            raise DeployConfigError("Deploy config must be a JSON object")

        for key in ("addr", "root", "rpc"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise DeployConfigError(f"Deploy config: {key!r} must be a string")

        apps_config = data.get("apps") or {}
        if not isinstance(apps_config, dict):
            raise DeployConfigError("Deploy config: 'apps' must be a JSON object")

        try:
            registry = ApplicationRegistry.from_config(apps_config)
        except ValueError as e:
            raise DeployConfigError(f"Deploy config: {e}") from e

        return cls(
            addr=data.get("addr") or DEFAULT_ADDR,
            root=normalize_root(data.get("root") or ""),
            rpc=data.get("rpc") or "",
            registry=registry,
        )


def load_config(path: str | Path) -> DeployConfig:
    """
    Read and validate a deploy config file.

    Args:
        path: Path to the JSON config file.

    Raises:
        DeployConfigError: If the file cannot be read or is not a valid config.
    """
    config_path = Path(path)
    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise DeployConfigError(f"Deploy config file not found: {config_path}")
    except json.JSONDecodeError as e:
        raise DeployConfigError(f"Invalid JSON in deploy config {config_path}: {e}")
    except OSError as e:
        raise DeployConfigError(f"Cannot read deploy config {config_path}: {e}")

    config = DeployConfig.from_dict(data)
    logger.info(
        f"Loaded deploy config from {config_path}: {len(config.registry)} app(s), "
        f"root={config.root}, rpc={config.rpc or 'disabled'}"
    )
    return config


@lru_cache(maxsize=1)
def get_config() -> DeployConfig:
    """Load the config named by settings.DEPLOY_CONFIG_FILE (once per process)."""
    from django.conf import settings

    return load_config(getattr(settings, "DEPLOY_CONFIG_FILE", "config.json"))
