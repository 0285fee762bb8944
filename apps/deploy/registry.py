"""
Application registry.

Maps repository names to the applications they deploy. Built once from the
deploy config and never mutated afterwards, so lookups are safe from any
request thread.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from apps.deploy.models import DeployStage

DEFAULT_UPDATE_COMMAND = "git pull origin master"

# JSON key for each stage command in an app entry
STAGE_CONFIG_KEYS = {
    DeployStage.UPDATE: "update_command",
    DeployStage.BUILD: "build_command",
    DeployStage.TEST: "test_command",
    DeployStage.RELEASE: "release_command",
}


@dataclass(frozen=True)
class ApplicationDefinition:
    """
    One deployable unit.

    Attributes:
        name: Repository name this application is deployed from.
        working_directory: Directory every stage command runs in.
        process_name: Supervisor process to stop/start around the run
            (empty disables bracketing).
        update_command: Falls back to DEFAULT_UPDATE_COMMAND when empty.
        build_command, test_command, release_command: Empty skips the stage.
    """

    name: str
    working_directory: str
    process_name: str = ""
    update_command: str = ""
    build_command: str = ""
    test_command: str = ""
    release_command: str = ""

    @property
    def effective_update_command(self) -> str:
        return self.update_command or DEFAULT_UPDATE_COMMAND

    def stages(self) -> list[tuple[str, str]]:
        """Return (stage, command) pairs in execution order, update defaulted."""
        return [
            (DeployStage.UPDATE, self.effective_update_command),
            (DeployStage.BUILD, self.build_command),
            (DeployStage.TEST, self.test_command),
            (DeployStage.RELEASE, self.release_command),
        ]

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "ApplicationDefinition":
        """
        Build a definition from one entry of the config's "apps" object.

        Raises:
            ValueError: If the entry is not an object or a field is not a string.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"app {name!r} must be a JSON object")

        # JSON key -> dataclass field; stage keys share their field name
        fields = {"proc": "process_name", "path": "working_directory"}
        fields.update({key: key for key in STAGE_CONFIG_KEYS.values()})

        values: dict[str, str] = {}
        for key, attr in fields.items():
            value = data.get(key, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(f"app {name!r}: {key!r} must be a string")
            values[attr] = value

        return cls(name=name, **values)


class ApplicationRegistry:
    """Read-only mapping of repository name to ApplicationDefinition."""

    def __init__(self, applications: Mapping[str, ApplicationDefinition] | None = None):
        self._apps = MappingProxyType(dict(applications or {}))

    @classmethod
    def from_config(cls, apps_config: Mapping[str, Any]) -> "ApplicationRegistry":
        return cls(
            {name: ApplicationDefinition.from_dict(name, data) for name, data in apps_config.items()}
        )

    def lookup(self, repository_name: str) -> ApplicationDefinition | None:
        """Exact, case-sensitive match on the configured key."""
        return self._apps.get(repository_name)

    def names(self) -> list[str]:
        return sorted(self._apps)

    def __contains__(self, repository_name: object) -> bool:
        return repository_name in self._apps

    def __iter__(self) -> Iterator[ApplicationDefinition]:
        return iter(self._apps[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._apps)
