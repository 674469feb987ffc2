"""
Conversion between selected permission keys and the stored permission string.

A role stores its permissions as one comma-separated list of permission
names, or as the wildcard '*' when it has administrative access.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional, Set

from app.features.roles.catalog import PermissionCatalog
from app.utils import get_logger, trim_split


log = get_logger(__name__)

WILDCARD = "*"


@dataclass
class DecodedPermissions:
    wildcard: bool = False
    selected: Set[str] = field(default_factory=set)


@dataclass
class CascadeState:
    """
    Checkbox state after applying full module access.

    `disabled` keys cannot be changed by the user, `excluded` keys are not
    submitted at all.
    """
    selected: Set[str] = field(default_factory=set)
    disabled: Set[str] = field(default_factory=set)
    excluded: Set[str] = field(default_factory=set)

    @property
    def submitted(self) -> Set[str]:
        return self.selected - self.excluded


def encode(selected: Iterable[str], wildcard: bool, catalog: PermissionCatalog) -> str:
    """
    Collapse selected permission keys into the stored permission string.

    Args:
        selected: Keys of the selected permissions
        wildcard: Whether administrative access is granted
        catalog: Catalog of the current session

    Returns:
        '*' for administrative access, otherwise the comma-joined permission
        names in catalog order. Keys unknown to the catalog are ignored.
    """
    if wildcard:
        return WILDCARD

    selected = set(selected)
    return ",".join(
        definition.name
        for _, key, definition in catalog.iter_permissions()
        if key in selected
    )


def decode(stored: Optional[str], catalog: PermissionCatalog) -> DecodedPermissions:
    """
    Expand a stored permission string into selected permission keys.

    Names no longer provided by any module are dropped.
    """
    if stored == WILDCARD:
        return DecodedPermissions(wildcard=True)

    names = set(trim_split(stored))
    selected = {key for _, key, definition in catalog.iter_permissions() if definition.name in names}

    known = {catalog.get_permission(key).name for key in selected}
    unknown = names - known
    if unknown:
        log.debug("Ignoring unknown permissions %s", ", ".join(sorted(unknown)))

    return DecodedPermissions(wildcard=False, selected=selected)


def cascade(selected: Iterable[str], catalog: PermissionCatalog) -> CascadeState:
    """
    Apply full module access to a checkbox selection.

    Once a namespace's full permission is selected, all its other permissions
    are selected and disabled. They are excluded from submission, except for
    the usage permission which stays submitted.
    """
    state = CascadeState(selected=set(selected))
    for namespace, permission_list in catalog.permissions.items():
        full_key = catalog.full_permission_key(namespace)
        if full_key is None or full_key not in state.selected:
            continue

        for key, definition in permission_list.items():
            if key == full_key:
                continue
            state.selected.add(key)
            state.disabled.add(key)
            if not definition.is_usage_permission:
                state.excluded.add(key)

    return state
