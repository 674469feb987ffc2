"""
Role model.

A role bundles permissions and restrictions and assigns them to users and groups:
- permissions are stored as one comma-separated list of names, or '*'
- restrictions are stored as a JSON mapping of restriction name to value
"""
from typing import Dict
from sqlalchemy import String, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin, generate_ulid


class Role(Base, TimestampMixin):
    """
    Role model.

    Roles are identified by their unique name.
    Examples: Administrators, Viewers, Operators
    """
    __tablename__ = "roles"

    # Primary key using ULID
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    # Comma-separated user and group names
    users: Mapped[str | None] = mapped_column(Text, nullable=True)
    groups: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Comma-separated permission names, or '*' for administrative access
    permissions: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Example: {"application/share/users": "alice,bob"}
    restrictions: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name!r}, permissions={self.permissions!r})>"
