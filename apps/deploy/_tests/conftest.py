"""Shared test fixtures for the deploy app."""

import json

import pytest

from apps.deploy.conf import get_config


@pytest.fixture(autouse=True)
def _fresh_deploy_config():
    """get_config() caches per process; start and end every test uncached."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def demo_config_data():
    """A config with one bracketed app and one plain app."""
    return {
        "addr": ":8080",
        "root": "deploy",
        "rpc": "127.0.0.1:9001",
        "apps": {
            "demo": {
                "path": "/srv/demo",
                "build_command": "make",
                "test_command": "",
                "release_command": "make deploy",
            },
            "web-app": {
                "proc": "web",
                "path": "/srv/web",
                "update_command": "git pull origin main",
                "build_command": "npm run build",
            },
        },
    }


@pytest.fixture
def deploy_config_file(tmp_path, demo_config_data):
    """Write demo_config_data to a temporary JSON file and return its path."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(demo_config_data))
    return path
