"""
Audit hooks.

Activity messages are templates with `{{name}}` placeholders. Dots walk into
nested mappings, so `{{role.name}}` reads data["role"]["name"]. Any other
character, single braces included, is part of the parameter name.

Usage:
    await log_activity(
        [LoggerAuditHook(), DatabaseAuditHook(db)],
        "role/create",
        "Role {{role}} created",
        {"role": "Administrators"},
    )
"""
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.features.audit.models import AuditLog
from app.utils import get_logger


log = get_logger(__name__)

_PLACEHOLDER = re.compile(r"\{\{(.+?)\}\}")


class AuditMessageError(ValueError):
    """A message template references a parameter that cannot be rendered."""


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def _extract(path: List[str], data: Optional[Mapping[str, Any]]) -> Any:
    name = path[0]
    if data is None or data.get(name) is None:
        raise AuditMessageError(f"Required parameter '{name}' missing")

    value = data[name]
    if len(path) > 1:
        if not isinstance(value, Mapping):
            raise AuditMessageError(f"Parameter '{name}' is not an array")
        return _extract(path[1:], value)
    if not isinstance(value, (str, int, float, bool)):
        raise AuditMessageError(f"Parameter '{name}' is not scalar")
    return value


def format_message(message: str, data: Optional[Mapping[str, Any]] = None) -> str:
    """
    Substitute the placeholders of a message template.

    Raises:
        AuditMessageError: If a parameter is missing, is not scalar, or a
            dotted path walks into something that is not a mapping
    """
    return _PLACEHOLDER.sub(lambda match: _render(_extract(match.group(1).split("."), data)), message)


class AuditHook(ABC):
    """Base class for audit log backends."""

    def format_message(self, message: str, data: Optional[Mapping[str, Any]] = None) -> str:
        return format_message(message, data)

    @abstractmethod
    async def log_message(
        self,
        time: datetime,
        identity: Optional[str],
        activity_type: str,
        message: str,
        data: Optional[Mapping[str, Any]] = None,
        **context: Any,
    ) -> None:
        """Record one formatted activity message."""

    async def log_activity(
        self,
        activity_type: str,
        message: str,
        data: Optional[Mapping[str, Any]] = None,
        identity: Optional[str] = None,
        **context: Any,
    ) -> None:
        await self.log_message(
            datetime.now(timezone.utc),
            identity,
            activity_type,
            self.format_message(message, data),
            data,
            **context,
        )


class LoggerAuditHook(AuditHook):
    """Writes audit messages to the application log."""

    async def log_message(self, time, identity, activity_type, message, data=None, **context):
        log.info("[%s] %s %s: %s", time.isoformat(), identity or "-", activity_type, message)


class DatabaseAuditHook(AuditHook):
    """Stores audit messages in the audit_logs table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log_message(self, time, identity, activity_type, message, data=None, **context):
        self.db.add(AuditLog(
            identity=identity,
            activity_type=activity_type,
            message=message,
            details=dict(data) if data else None,
            ip_address=context.get("ip_address"),
            user_agent=context.get("user_agent"),
        ))
        await self.db.commit()


async def log_activity(
    hooks: Iterable[AuditHook],
    activity_type: str,
    message: str,
    data: Optional[Mapping[str, Any]] = None,
    identity: Optional[str] = None,
    **context: Any,
) -> None:
    """Hand an activity to every hook."""
    for hook in hooks:
        await hook.log_activity(activity_type, message, data, identity, **context)
