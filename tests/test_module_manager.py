from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from app.features.modules.manager import Module, ModuleManager, UnknownModuleError


def test_register_keeps_installation_order() -> None:
    manager = ModuleManager([Module("monitoring"), Module("reporting")])
    manager.register(Module("director"))

    assert manager.list_installed_modules() == ["monitoring", "reporting", "director"]
    assert manager.get_module("reporting").name == "reporting"


def test_get_unknown_module_raises() -> None:
    with pytest.raises(UnknownModuleError):
        ModuleManager().get_module("missing")


def test_from_manifest(tmp_path: Path) -> None:
    manifest = tmp_path / "modules.json"
    manifest.write_text(json.dumps({
        "modules": [
            {
                "name": "monitoring",
                "permissions": [{"name": "monitoring/command/*", "description": "Allow all commands"}],
                "restrictions": [{"name": "monitoring/filter/objects", "description": "Restrict objects"}],
            },
            {"name": "reporting"},
        ]
    }))

    manager = ModuleManager.from_manifest(manifest)

    assert manager.list_installed_modules() == ["monitoring", "reporting"]
    monitoring = manager.get_module("monitoring")
    assert [p.name for p in monitoring.get_provided_permissions()] == ["monitoring/command/*"]
    assert [r.name for r in monitoring.get_provided_restrictions()] == ["monitoring/filter/objects"]
    assert manager.get_module("reporting").get_provided_permissions() == []


def test_from_manifest_rejects_module_without_name(tmp_path: Path) -> None:
    manifest = tmp_path / "modules.json"
    manifest.write_text(json.dumps({"modules": [{"permissions": []}]}))

    with pytest.raises(ValidationError):
        ModuleManager.from_manifest(manifest)
