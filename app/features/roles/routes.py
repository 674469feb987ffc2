"""
Role management API routes.

Provides the permission catalog, the field set for the role form, and role CRUD.
"""
from typing import Annotated, List
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.audit.hook import AuditHook, log_activity
from app.features.roles.catalog import PermissionCatalog
from app.features.roles.dependencies import (
    get_audit_context,
    get_audit_hooks,
    get_catalog,
    get_role_editor,
)
from app.features.roles.editor import RoleEditor, RoleNotFoundError, EditorResult
from app.features.roles.repository import RoleRepository
from app.features.roles.schemas import (
    CatalogResponse,
    EditableRole,
    EditorResultResponse,
    FieldSet,
    RoleResponse,
)


router = APIRouter()
# Catalog and field set live apart from /roles so no role name can shadow them
form_router = APIRouter()


def _result_response(result: EditorResult, success_status: int, failure_status: int) -> JSONResponse:
    return JSONResponse(
        status_code=success_status if result.success else failure_status,
        content=EditorResultResponse(success=result.success, message=result.message).model_dump(),
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")


# ============================================================================
# Catalog Routes
# ============================================================================

@form_router.get("/catalog", response_model=CatalogResponse)
async def get_permission_catalog(
    catalog: Annotated[PermissionCatalog, Depends(get_catalog)]
):
    """List all selectable permissions and restrictions, grouped by namespace."""
    return catalog.to_response()


@form_router.post("/fields", response_model=FieldSet)
async def get_role_fields(
    role: EditableRole,
    editor: Annotated[RoleEditor, Depends(get_role_editor)]
):
    """
    Describe the role form for the submitted state.

    Called again whenever an autosubmit field (administrative access, full
    module access) changes.
    """
    return editor.build_fields(role)


# ============================================================================
# Role Routes
# ============================================================================

@router.get("", response_model=List[RoleResponse])
async def list_roles(
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = 100
):
    """List all roles."""
    return await RoleRepository(db).list(skip=skip, limit=limit)


@router.get("/{name:path}", response_model=EditableRole)
async def get_role(
    name: str,
    editor: Annotated[RoleEditor, Depends(get_role_editor)]
):
    """Get a role in its editable form."""
    try:
        return await editor.edit(name)
    except RoleNotFoundError:
        raise _not_found()


@router.post("", response_model=EditorResultResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    role: EditableRole,
    editor: Annotated[RoleEditor, Depends(get_role_editor)],
    hooks: Annotated[List[AuditHook], Depends(get_audit_hooks)],
    audit_context: Annotated[dict, Depends(get_audit_context)]
):
    """Create a new role."""
    result = await editor.insert(role)
    if result.success:
        await log_activity(hooks, "role/create", "Role {{role}} created", {"role": role.name}, **audit_context)
    return _result_response(result, status.HTTP_201_CREATED, status.HTTP_409_CONFLICT)


@router.put("/{name:path}", response_model=EditorResultResponse)
async def update_role(
    name: str,
    role: EditableRole,
    editor: Annotated[RoleEditor, Depends(get_role_editor)],
    hooks: Annotated[List[AuditHook], Depends(get_audit_hooks)],
    audit_context: Annotated[dict, Depends(get_audit_context)]
):
    """Update a role. The role may be renamed through `role.name`."""
    try:
        result = await editor.update(name, role)
    except RoleNotFoundError:
        raise _not_found()

    if result.success:
        await log_activity(
            hooks,
            "role/update",
            "Role {{role.name}} updated",
            {"role": {"name": role.name, "previous_name": name}},
            **audit_context
        )
    return _result_response(result, status.HTTP_200_OK, status.HTTP_409_CONFLICT)


@router.delete("/{name:path}", response_model=EditorResultResponse)
async def delete_role(
    name: str,
    editor: Annotated[RoleEditor, Depends(get_role_editor)],
    hooks: Annotated[List[AuditHook], Depends(get_audit_hooks)],
    audit_context: Annotated[dict, Depends(get_audit_context)]
):
    """Delete a role."""
    try:
        result = await editor.delete(name)
    except RoleNotFoundError:
        raise _not_found()

    if result.success:
        await log_activity(hooks, "role/delete", "Role {{role}} removed", {"role": name}, **audit_context)
    return _result_response(result, status.HTTP_200_OK, status.HTTP_500_INTERNAL_SERVER_ERROR)
