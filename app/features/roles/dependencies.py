"""
FastAPI dependencies for role editing.
"""
from typing import Annotated, List
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.audit.hook import AuditHook, DatabaseAuditHook, LoggerAuditHook
from app.features.modules.manager import ModuleManager, get_module_manager
from app.features.roles.catalog import PermissionCatalog
from app.features.roles.editor import RoleEditor
from app.features.roles.repository import RoleRepository


def get_catalog(
    module_manager: Annotated[ModuleManager, Depends(get_module_manager)]
) -> PermissionCatalog:
    """Build a fresh catalog for the current request."""
    return PermissionCatalog.build(module_manager)


def get_role_editor(
    catalog: Annotated[PermissionCatalog, Depends(get_catalog)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> RoleEditor:
    """
    Role editor for the current request.

    Usage:
        @router.get("/{name}")
        async def get_role(name: str, editor: RoleEditor = Depends(get_role_editor)):
            return await editor.edit(name)
    """
    return RoleEditor(catalog, RoleRepository(db))


def get_audit_hooks(
    db: Annotated[AsyncSession, Depends(get_db)]
) -> List[AuditHook]:
    return [LoggerAuditHook(), DatabaseAuditHook(db)]


def get_audit_context(request: Request) -> dict:
    """Identity and client details recorded with each audit entry."""
    return {
        "identity": request.headers.get("x-remote-user"),
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }
