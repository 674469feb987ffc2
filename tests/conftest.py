from __future__ import annotations

import asyncio
import os
import tempfile
from collections.abc import AsyncGenerator

# Must be set before app.core.config is imported
_DB_DIR = tempfile.mkdtemp(prefix="role-editor-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ.pop("MODULE_MANIFEST", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from app.core.database.base import Base  # noqa: E402
from app.core.database.engine import AsyncSessionLocal, engine, init_db  # noqa: E402
from app.features.modules.manager import Module, ModuleManager  # noqa: E402
from app.features.modules.schemas import ProvidedPermission, ProvidedRestriction  # noqa: E402
from app.features.roles.catalog import PermissionCatalog  # noqa: E402


async def _reset_db() -> None:
    await init_db()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture()
def module_manager() -> ModuleManager:
    return ModuleManager([
        Module(
            "monitoring",
            permissions=[
                ProvidedPermission(name="monitoring/command/*", description="Allow all commands"),
                ProvidedPermission(name="monitoring/command/schedule-check", description="Allow scheduling checks"),
            ],
            restrictions=[
                ProvidedRestriction(name="monitoring/filter/objects", description="Restrict access to objects"),
            ],
        ),
        Module(
            "reporting",
            permissions=[
                ProvidedPermission(name="reporting/reports", description="Allow managing reports"),
            ],
        ),
    ])


@pytest.fixture()
def catalog(module_manager: ModuleManager) -> PermissionCatalog:
    return PermissionCatalog.build(module_manager)


@pytest.fixture()
def clean_db() -> None:
    asyncio.run(_reset_db())


@pytest_asyncio.fixture()
async def db() -> AsyncGenerator[AsyncSession, None]:
    await _reset_db()
    async with AsyncSessionLocal() as session:
        yield session
