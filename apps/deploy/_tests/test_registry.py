"""Tests for ApplicationDefinition and ApplicationRegistry."""

import dataclasses

import pytest
from django.test import SimpleTestCase

from apps.deploy.models import DeployStage
from apps.deploy.registry import (
    DEFAULT_UPDATE_COMMAND,
    ApplicationDefinition,
    ApplicationRegistry,
)


class ApplicationDefinitionTests(SimpleTestCase):
    def test_from_dict_maps_config_keys(self):
        app = ApplicationDefinition.from_dict(
            "demo",
            {
                "proc": "web",
                "path": "/srv/demo",
                "update_command": "git fetch && git reset --hard origin/main",
                "build_command": "make",
                "test_command": "make test",
                "release_command": "make deploy",
            },
        )

        assert app.name == "demo"
        assert app.process_name == "web"
        assert app.working_directory == "/srv/demo"
        assert app.update_command == "git fetch && git reset --hard origin/main"
        assert app.build_command == "make"
        assert app.test_command == "make test"
        assert app.release_command == "make deploy"

    def test_missing_and_null_fields_are_empty(self):
        app = ApplicationDefinition.from_dict("demo", {"path": "/srv/demo", "proc": None})

        assert app.process_name == ""
        assert app.build_command == ""

    def test_stages_in_order_with_update_default(self):
        app = ApplicationDefinition(name="demo", working_directory=".", build_command="make")

        assert app.stages() == [
            (DeployStage.UPDATE, DEFAULT_UPDATE_COMMAND),
            (DeployStage.BUILD, "make"),
            (DeployStage.TEST, ""),
            (DeployStage.RELEASE, ""),
        ]

    def test_definition_is_immutable(self):
        app = ApplicationDefinition(name="demo", working_directory=".")
        with pytest.raises(dataclasses.FrozenInstanceError):
            app.build_command = "make"

    def test_non_string_field_rejected(self):
        with pytest.raises(ValueError, match="build_command"):
            ApplicationDefinition.from_dict("demo", {"build_command": ["make"]})

    def test_non_object_entry_rejected(self):
        with pytest.raises(ValueError, match="JSON object"):
            ApplicationDefinition.from_dict("demo", "make")


class ApplicationRegistryTests(SimpleTestCase):
    def setUp(self):
        self.registry = ApplicationRegistry.from_config(
            {
                "demo": {"path": "/srv/demo"},
                "api": {"path": "/srv/api", "proc": "api"},
            }
        )

    def test_lookup_exact_match(self):
        app = self.registry.lookup("demo")
        assert app is not None
        assert app.working_directory == "/srv/demo"

    def test_lookup_miss(self):
        assert self.registry.lookup("missing") is None

    def test_lookup_is_case_sensitive(self):
        assert self.registry.lookup("Demo") is None
        assert self.registry.lookup(" demo") is None

    def test_container_protocol(self):
        assert len(self.registry) == 2
        assert "api" in self.registry
        assert self.registry.names() == ["api", "demo"]
        assert [app.name for app in self.registry] == ["api", "demo"]

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            self.registry._apps["new"] = ApplicationDefinition(name="new", working_directory=".")

    def test_empty_registry(self):
        registry = ApplicationRegistry()
        assert len(registry) == 0
        assert registry.lookup("demo") is None
