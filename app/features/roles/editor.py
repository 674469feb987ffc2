"""
Role editing session.

Ties the catalog, the permission encoder and the restriction binder together:
- load: stored role -> editable role
- save: editable role -> stored role
- build_fields: editable role -> field set for the presentation layer
- insert/update/delete through the role repository
"""
from dataclasses import dataclass
from typing import Optional

from app.features.roles import encoder, restrictions
from app.features.roles.catalog import APPLICATION_NAMESPACE, PermissionCatalog
from app.features.roles.repository import RoleRepository
from app.features.roles.schemas import EditableRole, Field, FieldGroup, FieldSet, RoleRecord
from app.utils import empty_to_none, get_logger


log = get_logger(__name__)


class RoleNotFoundError(LookupError):
    """No role with the given name exists."""

    def __init__(self, name: str):
        super().__init__(f"Role {name!r} not found")
        self.name = name


@dataclass
class EditorResult:
    success: bool
    message: str


class RoleEditor:
    """
    One role editing session.

    The catalog is expected to be built fresh for each session, see
    `PermissionCatalog.build()`.
    """

    def __init__(self, catalog: PermissionCatalog, repository: Optional[RoleRepository] = None):
        self.catalog = catalog
        self.repository = repository

    # ========================================================================
    # Conversion
    # ========================================================================

    def load(self, role: RoleRecord) -> EditableRole:
        """
        Populate the editable form of a stored role.

        Restrictions are loaded even for administrative access, so they
        survive the next save.
        """
        decoded = encoder.decode(role.permissions, self.catalog)
        if decoded.wildcard:
            permissions = {}
        else:
            permissions = {key: key in decoded.selected for _, key, _ in self.catalog.iter_permissions()}

        return EditableRole(
            name=role.name,
            users=role.users,
            groups=role.groups,
            wildcard=decoded.wildcard,
            permissions=permissions,
            restrictions=restrictions.to_editable(role, self.catalog),
        )

    def save(self, editable: EditableRole) -> RoleRecord:
        """Serialize an editable role for storage. Empty values become None."""
        if editable.wildcard:
            permissions = encoder.encode((), True, self.catalog)
        else:
            selected = {key for key, checked in editable.permissions.items() if checked}
            state = encoder.cascade(selected, self.catalog)
            permissions = encoder.encode(state.submitted, False, self.catalog)

        restriction_values = empty_to_none(restrictions.to_storage(editable.restrictions, self.catalog))
        values = empty_to_none({
            "name": editable.name,
            "users": editable.users,
            "groups": editable.groups,
            "permissions": permissions,
        })

        return RoleRecord(
            **values,
            restrictions={name: value for name, value in restriction_values.items() if value is not None},
        )

    def build_fields(self, editable: EditableRole) -> FieldSet:
        """
        Describe the fields to present for the given (possibly submitted) state.

        With administrative access no permission fields are shown and every
        restriction becomes a hidden field holding its current value.
        """
        fields = [
            Field(key="name", kind="text", label="Role Name", description="The name of the role",
                  value=editable.name, required=True),
            Field(key="users", kind="textarea", label="Users",
                  description="Comma-separated list of users that are assigned to the role",
                  value=editable.users),
            Field(key="groups", kind="textarea", label="Groups",
                  description="Comma-separated list of groups that are assigned to the role",
                  value=editable.groups),
            Field(key="wildcard", kind="checkbox", label="Administrative Access",
                  description="Everything is allowed", value=editable.wildcard, autosubmit=True),
        ]

        if editable.wildcard:
            fields.extend(
                Field(key=key, kind="hidden", value=editable.restrictions.get(key))
                for _, key, _ in self.catalog.iter_restrictions()
            )
            return FieldSet(fields=fields)

        selected = {key for key, checked in editable.permissions.items() if checked}
        state = encoder.cascade(selected, self.catalog)

        groups = []
        for namespace in self.catalog.namespaces():
            group = FieldGroup(
                namespace=namespace,
                legend="Icinga Web 2" if namespace == APPLICATION_NAMESPACE else f"Module: {namespace}",
            )
            for key, definition in self.catalog.sorted_permissions(namespace):
                group.fields.append(Field(
                    key=key,
                    kind="checkbox",
                    label=definition.label or definition.name,
                    description=definition.description or definition.name,
                    value=key in state.selected,
                    disabled=key in state.disabled,
                    ignored=key in state.excluded,
                    autosubmit=definition.is_full_permission,
                ))
            for key, definition in self.catalog.restrictions.get(namespace, {}).items():
                group.fields.append(Field(
                    key=key,
                    kind="text",
                    label=definition.name,
                    description=definition.description,
                    value=editable.restrictions.get(key),
                ))
            groups.append(group)

        return FieldSet(fields=fields, groups=groups)

    # ========================================================================
    # Persistence
    # ========================================================================

    def _require_repository(self) -> RoleRepository:
        if self.repository is None:
            raise RuntimeError("RoleEditor has no repository")
        return self.repository

    async def edit(self, name: str) -> EditableRole:
        """Load the stored role with the given name for editing."""
        role = await self._require_repository().find(name)
        if role is None:
            raise RoleNotFoundError(name)
        return self.load(RoleRecord.model_validate(role))

    async def insert(self, editable: EditableRole) -> EditorResult:
        success = await self._require_repository().insert(self.save(editable))
        log.info("Creating role %s %s", editable.name, "succeeded" if success else "failed")
        return EditorResult(success, self.get_insert_message(success))

    async def update(self, name: str, editable: EditableRole) -> EditorResult:
        """
        Replace the stored role with the edited one.

        Restrictions of modules that are no longer installed are kept.
        """
        repository = self._require_repository()
        existing = await repository.find(name)
        if existing is None:
            raise RoleNotFoundError(name)

        record = self.save(editable)
        preserved = {
            restriction: value
            for restriction, value in (existing.restrictions or {}).items()
            if not self.catalog.has_restriction_name(restriction)
        }
        record.restrictions = {**preserved, **record.restrictions}

        success = await repository.update(name, record)
        log.info("Updating role %s %s", name, "succeeded" if success else "failed")
        return EditorResult(success, self.get_update_message(success))

    async def delete(self, name: str) -> EditorResult:
        repository = self._require_repository()
        if await repository.find(name) is None:
            raise RoleNotFoundError(name)

        success = await repository.delete(name)
        log.info("Removing role %s %s", name, "succeeded" if success else "failed")
        return EditorResult(success, self.get_delete_message(success))

    # ========================================================================
    # Messages
    # ========================================================================

    @staticmethod
    def get_insert_message(success: bool) -> str:
        return "Role created" if success else "Role creation failed"

    @staticmethod
    def get_update_message(success: bool) -> str:
        return "Role updated" if success else "Role update failed"

    @staticmethod
    def get_delete_message(success: bool) -> str:
        return "Role removed" if success else "Role removal failed"

