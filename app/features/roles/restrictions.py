"""
Restriction values between the stored role and its editable form.

Stored roles key restriction values by the restriction name, editable roles
by the sanitized key.
"""
from typing import Dict, Mapping, Optional

from app.features.roles.catalog import PermissionCatalog
from app.features.roles.schemas import RoleRecord


def to_editable(role: RoleRecord, catalog: PermissionCatalog) -> Dict[str, str]:
    """Copy the values of all known restrictions set on the role."""
    stored = role.restrictions or {}
    return {
        key: stored[definition.name]
        for _, key, definition in catalog.iter_restrictions()
        if definition.name in stored
    }


def to_storage(editable: Mapping[str, Optional[str]], catalog: PermissionCatalog) -> Dict[str, Optional[str]]:
    """Re-key editable restriction values by restriction name, dropping unknown keys."""
    values = {}
    for key, value in editable.items():
        definition = catalog.get_restriction(key)
        if definition is not None:
            values[definition.name] = value
    return values
