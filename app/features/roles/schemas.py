"""
Pydantic schemas for role management.

Catalog definitions, the editable role, the presentation field set and API responses.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field as PydanticField, ConfigDict


# ============================================================================
# Catalog Schemas
# ============================================================================

class PermissionDefinition(BaseModel):
    """A grantable permission, e.g. 'application/log' or 'monitoring/*'."""
    name: str = PydanticField(..., min_length=1, description="Hierarchical, slash separated permission name")
    description: Optional[str] = None
    label: Optional[str] = None
    is_usage_permission: bool = False
    is_full_permission: bool = False

    model_config = ConfigDict(frozen=True)


class RestrictionDefinition(BaseModel):
    """A named constraint narrowing what a granted permission covers."""
    name: str = PydanticField(..., min_length=1)
    description: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class CatalogPermission(BaseModel):
    key: str
    definition: PermissionDefinition


class CatalogRestriction(BaseModel):
    key: str
    definition: RestrictionDefinition


class CatalogNamespace(BaseModel):
    """Definitions of one namespace, permissions in presentation order."""
    namespace: str
    permissions: List[CatalogPermission] = []
    restrictions: List[CatalogRestriction] = []


class CatalogResponse(BaseModel):
    namespaces: List[CatalogNamespace]
    errors: Dict[str, str] = {}


# ============================================================================
# Role Schemas
# ============================================================================

class RoleRecord(BaseModel):
    """Role as persisted: permissions collapsed into one string, restrictions keyed by real name."""
    name: str
    users: Optional[str] = None
    groups: Optional[str] = None
    permissions: Optional[str] = None
    restrictions: Dict[str, str] = {}

    model_config = ConfigDict(from_attributes=True)


class EditableRole(BaseModel):
    """Role as edited: one flag per permission key, one value per restriction key."""
    name: str = PydanticField(..., min_length=1, description="The name of the role")
    users: Optional[str] = PydanticField(None, description="Comma-separated list of users that are assigned to the role")
    groups: Optional[str] = PydanticField(None, description="Comma-separated list of groups that are assigned to the role")
    wildcard: bool = PydanticField(False, description="Administrative access, everything is allowed")
    permissions: Dict[str, bool] = {}
    restrictions: Dict[str, Optional[str]] = {}


class RoleResponse(RoleRecord):
    id: str
    created_at: datetime
    updated_at: datetime


class EditorResultResponse(BaseModel):
    success: bool
    message: str


# ============================================================================
# Presentation Schemas
# ============================================================================

class Field(BaseModel):
    """One editable field handed to the presentation layer."""
    key: str
    kind: Literal["text", "textarea", "checkbox", "hidden"]
    label: Optional[str] = None
    description: Optional[str] = None
    value: Union[bool, str, None] = None
    required: bool = False
    disabled: bool = False
    # Ignored fields are displayed but never submitted
    ignored: bool = False
    autosubmit: bool = False


class FieldGroup(BaseModel):
    namespace: str
    legend: str
    fields: List[Field] = []


class FieldSet(BaseModel):
    fields: List[Field]
    groups: List[FieldGroup] = []
