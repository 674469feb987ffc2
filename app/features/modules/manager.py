"""
Registry of installed modules.

The registry is the catalog provider consumed by the role editor. Modules are
either registered programmatically or read from the JSON manifest named by
the MODULE_MANIFEST setting:

    {
        "modules": [
            {
                "name": "monitoring",
                "permissions": [{"name": "monitoring/command/*", "description": "Allow all commands"}],
                "restrictions": [{"name": "monitoring/filter/objects", "description": "Restrict views"}]
            }
        ]
    }
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from app.core import config
from app.features.modules.schemas import (
    ModuleManifest,
    ModuleSpec,
    ProvidedPermission,
    ProvidedRestriction,
)
from app.utils import get_logger


log = get_logger(__name__)

# Prefix of the permission granting general access to a module
MODULE_PERMISSION_NS = "module/"


class UnknownModuleError(LookupError):
    """Raised when asking for a module that is not installed."""

    def __init__(self, name: str):
        super().__init__(f"Module {name!r} is not installed")
        self.name = name


class Module:
    """An installed module and the permissions and restrictions it provides."""

    def __init__(
        self,
        name: str,
        permissions: Optional[List[ProvidedPermission]] = None,
        restrictions: Optional[List[ProvidedRestriction]] = None,
    ):
        self.name = name
        self._permissions = list(permissions or [])
        self._restrictions = list(restrictions or [])

    @classmethod
    def from_spec(cls, spec: ModuleSpec) -> "Module":
        return cls(spec.name, spec.permissions, spec.restrictions)

    def get_provided_permissions(self) -> List[ProvidedPermission]:
        return list(self._permissions)

    def get_provided_restrictions(self) -> List[ProvidedRestriction]:
        return list(self._restrictions)

    def __repr__(self) -> str:
        return f"<Module(name={self.name!r}, permissions={len(self._permissions)}, restrictions={len(self._restrictions)})>"


class ModuleManager:
    """Keeps the installed modules in registration order."""

    def __init__(self, modules: Optional[List[Module]] = None):
        self._modules: dict[str, Module] = {}
        for module in modules or []:
            self.register(module)

    def register(self, module: Module) -> None:
        if module.name in self._modules:
            log.warning("Module %s registered twice, replacing previous definition", module.name)
        self._modules[module.name] = module

    def list_installed_modules(self) -> List[str]:
        return list(self._modules)

    def get_module(self, name: str) -> Module:
        try:
            return self._modules[name]
        except KeyError:
            raise UnknownModuleError(name) from None

    @classmethod
    def from_manifest(cls, path: str | Path) -> "ModuleManager":
        """Build a registry from a JSON manifest file."""
        manifest = ModuleManifest.model_validate_json(Path(path).read_text(encoding="utf-8"))
        log.info("Loaded %d module(s) from %s", len(manifest.modules), path)
        return cls([Module.from_spec(spec) for spec in manifest.modules])


@lru_cache
def get_module_manager() -> ModuleManager:
    """
    FastAPI dependency returning the process-wide module registry.

    Without MODULE_MANIFEST no modules are installed.
    """
    if config.MODULE_MANIFEST:
        return ModuleManager.from_manifest(config.MODULE_MANIFEST)
    log.info("No module manifest configured, running without installed modules")
    return ModuleManager()
