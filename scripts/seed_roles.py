"""
Seed script to create the default roles.

Run this script after database initialization to create:
- An administrative role holding the wildcard
- A read-only role for the application log

Roles that already exist are left untouched.

Usage:
    uv run python -m scripts.seed_roles
"""
import asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db, init_db
from app.features.modules.manager import get_module_manager
from app.features.roles.catalog import PermissionCatalog, sanitize_name
from app.features.roles.editor import RoleEditor
from app.features.roles.repository import RoleRepository
from app.features.roles.schemas import EditableRole
from app.utils import get_logger


log = get_logger(__name__)


DEFAULT_ROLES = {
    "Administrators": {
        "groups": "Administrators",
        "permissions": "ALL",  # Special case - administrative access
    },
    "Log Viewers": {
        "groups": "Operators",
        "permissions": ["application/log", "application/stacktraces"],
    },
}


async def seed_roles(db: AsyncSession):
    """
    Create default roles through the role editor.

    Args:
        db: Database session
    """
    log.info("Creating default roles...")
    catalog = PermissionCatalog.build(get_module_manager())
    editor = RoleEditor(catalog, RoleRepository(db))

    for role_name, role_config in DEFAULT_ROLES.items():
        if await editor.repository.find(role_name) is not None:
            log.debug("Role '%s' already exists, skipping", role_name)
            continue

        if role_config["permissions"] == "ALL":
            role = EditableRole(name=role_name, groups=role_config["groups"], wildcard=True)
        else:
            role = EditableRole(
                name=role_name,
                groups=role_config["groups"],
                permissions={sanitize_name(name): True for name in role_config["permissions"]},
            )

        result = await editor.insert(role)
        log.info("%s: %s", role_name, result.message)


async def main():
    """Main function to seed roles."""
    log.info("Initializing database tables...")
    await init_db()

    async for db in get_db():
        try:
            await seed_roles(db)
            log.info("Role seeding completed successfully!")
        except Exception as e:
            log.error(f"Error seeding roles: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
