"""
Permission and restriction catalog.

Collects the definitions contributed by the application itself and by every
installed module. Definition names may contain characters such as '/', '*'
or '.', so each one is also given a field-safe key.

Implements:
- Reversible name sanitizing
- Catalog building with per-module error isolation
- Presentation ordering of permissions
"""
import re
from functools import cmp_to_key
from typing import Dict, Iterator, List, Optional, Tuple

from app.features.modules.manager import MODULE_PERMISSION_NS, ModuleManager
from app.features.roles.schemas import (
    CatalogNamespace,
    CatalogPermission,
    CatalogResponse,
    CatalogRestriction,
    PermissionDefinition,
    RestrictionDefinition,
)
from app.utils import get_logger


log = get_logger(__name__)

APPLICATION_NAMESPACE = "application"

# Keys of the fixed role fields, unavailable to permissions
EDITOR_FIELD_KEYS = frozenset({"name", "users", "groups", "wildcard"})

APPLICATION_PERMISSIONS = [
    PermissionDefinition(
        name="application/share/navigation",
        description="Allow to share navigation items",
    ),
    PermissionDefinition(
        name="application/stacktraces",
        description="Allow to adjust in the preferences whether to show stacktraces",
    ),
    PermissionDefinition(
        name="application/log",
        description="Allow to view the application log",
    ),
    PermissionDefinition(
        name="admin",
        description="Grant admin permissions, e.g. manage announcements",
    ),
    PermissionDefinition(
        name="config/*",
        description="Allow config access",
    ),
]

APPLICATION_RESTRICTIONS = [
    RestrictionDefinition(
        name="application/share/users",
        description="Restrict which users this role can share items and information with",
    ),
    RestrictionDefinition(
        name="application/share/groups",
        description="Restrict which groups this role can share items and information with",
    ),
]


class CatalogError(ValueError):
    """A module provided a definition the catalog cannot use."""

    def __init__(self, module: str, message: str):
        super().__init__(f"Module {module}: {message}")
        self.module = module
        self.message = message


# ============================================================================
# Name Handling
# ============================================================================

_ESCAPES = {
    "_": "__",
    "/": "_s",
    "*": "_a",
    ".": "_d",
    "-": "_h",
}


def sanitize_name(name: str) -> str:
    """
    Map a definition name to a key made of [A-Za-z0-9_] only.

    Every escape sequence starts with '_' followed by a fixed-length code, so
    distinct names always produce distinct keys.

    Example:
        sanitize_name("config/*") == "config_s_a"
    """
    parts = []
    for char in name:
        if char.isascii() and char.isalnum():
            parts.append(char)
        elif char in _ESCAPES:
            parts.append(_ESCAPES[char])
        else:
            parts.append(f"_u{ord(char):06x}")
    return "".join(parts)


def restriction_key(name: str) -> str:
    """
    Key of a restriction field.

    The '_r' prefix can never start a sanitized permission key, so restriction
    and permission keys never collide.
    """
    return "_r" + sanitize_name(name)


def _natural_key(value: str) -> list:
    # Alternates text and number chunks, always starting with text
    return [int(chunk) if i % 2 else chunk for i, chunk in enumerate(re.split(r"(\d+)", value))]


def natural_compare(a: str, b: str) -> int:
    """Compare strings treating digit runs as numbers ('item2' < 'item10')."""
    key_a, key_b = _natural_key(a), _natural_key(b)
    return (key_a > key_b) - (key_a < key_b)


def compare_permission_names(a: str, b: str) -> int:
    """
    Compare two hierarchical names on their first differing path segment.

    A name that runs out of segments sorts before the longer one.
    """
    a_parts = a.split("/")
    b_parts = b.split("/")
    for a_part, b_part in zip(a_parts, b_parts):
        if a_part != b_part:
            return natural_compare(a_part, b_part)
    return (len(a_parts) > len(b_parts)) - (len(a_parts) < len(b_parts))


def compare_permissions(a: PermissionDefinition, b: PermissionDefinition) -> int:
    """Usage permission first, full permission last, the rest by path."""
    if a.is_usage_permission != b.is_usage_permission:
        return -1 if a.is_usage_permission else 1
    if a.is_full_permission != b.is_full_permission:
        return 1 if a.is_full_permission else -1
    return compare_permission_names(a.name, b.name)


# ============================================================================
# Catalog
# ============================================================================

class PermissionCatalog:
    """
    Permissions and restrictions grouped by namespace.

    `permissions` and `restrictions` map a namespace to an ordered mapping of
    key -> definition, in declaration order. Use `sorted_permissions()` for
    presentation order.
    """

    def __init__(self):
        self.permissions: Dict[str, Dict[str, PermissionDefinition]] = {}
        self.restrictions: Dict[str, Dict[str, RestrictionDefinition]] = {}
        self.errors: Dict[str, str] = {}
        self._permission_lookup: Dict[str, Tuple[str, PermissionDefinition]] = {}
        self._restriction_lookup: Dict[str, Tuple[str, RestrictionDefinition]] = {}

    @classmethod
    def build(cls, module_manager: Optional[ModuleManager] = None) -> "PermissionCatalog":
        """
        Build the catalog for one editing session.

        A module with a malformed definition is left out entirely and its
        error is recorded in `errors`; other modules are unaffected.
        """
        catalog = cls()
        catalog.add_namespace(APPLICATION_NAMESPACE, APPLICATION_PERMISSIONS, APPLICATION_RESTRICTIONS)
        if module_manager is None:
            return catalog

        for module_name in module_manager.list_installed_modules():
            try:
                permissions, restrictions = cls._collect_module(module_manager, module_name)
            except CatalogError as e:
                log.warning("Skipping permissions of module %s: %s", module_name, e.message)
                catalog.errors[module_name] = e.message
                continue
            catalog.add_namespace(module_name, permissions, restrictions)

        return catalog

    @staticmethod
    def _collect_module(
        module_manager: ModuleManager,
        module_name: str,
    ) -> Tuple[List[PermissionDefinition], List[RestrictionDefinition]]:
        if module_name == APPLICATION_NAMESPACE:
            raise CatalogError(module_name, f"'{APPLICATION_NAMESPACE}' is a reserved namespace")

        module = module_manager.get_module(module_name)
        permissions = [
            PermissionDefinition(
                name=MODULE_PERMISSION_NS + module_name,
                label="General Module Access",
                description=f"Allow access to module {module_name}",
                is_usage_permission=True,
            ),
            PermissionDefinition(
                name=f"{module_name}/*",
                label="Full Module Access",
                is_full_permission=True,
            ),
        ]
        for permission in module.get_provided_permissions():
            if not permission.name:
                raise CatalogError(module_name, "provides a permission without a name")
            if sanitize_name(permission.name) in EDITOR_FIELD_KEYS:
                raise CatalogError(module_name, f"permission name '{permission.name}' is reserved")
            permissions.append(PermissionDefinition(name=permission.name, description=permission.description))

        restrictions = []
        for restriction in module.get_provided_restrictions():
            if not restriction.name:
                raise CatalogError(module_name, "provides a restriction without a name")
            restrictions.append(RestrictionDefinition(name=restriction.name, description=restriction.description))

        return permissions, restrictions

    def add_namespace(
        self,
        namespace: str,
        permissions: List[PermissionDefinition],
        restrictions: List[RestrictionDefinition],
    ) -> None:
        permission_list = self.permissions.setdefault(namespace, {})
        for definition in permissions:
            key = sanitize_name(definition.name)
            owner = self._permission_lookup.get(key)
            if owner is not None and owner[0] != namespace:
                log.warning(
                    "Permission %s of %s is already provided by %s, ignoring it",
                    definition.name, namespace, owner[0]
                )
                continue
            permission_list[key] = definition
            self._permission_lookup[key] = (namespace, definition)

        restriction_list = self.restrictions.setdefault(namespace, {})
        for definition in restrictions:
            key = restriction_key(definition.name)
            owner = self._restriction_lookup.get(key)
            if owner is not None and owner[0] != namespace:
                log.warning(
                    "Restriction %s of %s is already provided by %s, ignoring it",
                    definition.name, namespace, owner[0]
                )
                continue
            restriction_list[key] = definition
            self._restriction_lookup[key] = (namespace, definition)

    # ------------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------------

    def namespaces(self) -> List[str]:
        names = list(self.permissions)
        names.extend(ns for ns in self.restrictions if ns not in self.permissions)
        return names

    def iter_permissions(self) -> Iterator[Tuple[str, str, PermissionDefinition]]:
        """Yield (namespace, key, definition) in catalog order."""
        for namespace, permission_list in self.permissions.items():
            for key, definition in permission_list.items():
                yield namespace, key, definition

    def iter_restrictions(self) -> Iterator[Tuple[str, str, RestrictionDefinition]]:
        for namespace, restriction_list in self.restrictions.items():
            for key, definition in restriction_list.items():
                yield namespace, key, definition

    def get_permission(self, key: str) -> Optional[PermissionDefinition]:
        entry = self._permission_lookup.get(key)
        return entry[1] if entry else None

    def get_restriction(self, key: str) -> Optional[RestrictionDefinition]:
        entry = self._restriction_lookup.get(key)
        return entry[1] if entry else None

    def has_restriction_name(self, name: str) -> bool:
        return restriction_key(name) in self._restriction_lookup

    def full_permission_key(self, namespace: str) -> Optional[str]:
        for key, definition in self.permissions.get(namespace, {}).items():
            if definition.is_full_permission:
                return key
        return None

    def sorted_permissions(self, namespace: str) -> List[Tuple[str, PermissionDefinition]]:
        """Permissions of a namespace in presentation order."""
        entries = list(self.permissions.get(namespace, {}).items())
        return sorted(entries, key=cmp_to_key(lambda a, b: compare_permissions(a[1], b[1])))

    def to_response(self) -> CatalogResponse:
        return CatalogResponse(
            namespaces=[
                CatalogNamespace(
                    namespace=namespace,
                    permissions=[
                        CatalogPermission(key=key, definition=definition)
                        for key, definition in self.sorted_permissions(namespace)
                    ],
                    restrictions=[
                        CatalogRestriction(key=key, definition=definition)
                        for key, definition in self.restrictions.get(namespace, {}).items()
                    ],
                )
                for namespace in self.namespaces()
            ],
            errors=dict(self.errors),
        )
