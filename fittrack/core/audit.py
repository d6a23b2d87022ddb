"""Audit log for payments, sign-ups and account deletion."""

from typing import Any

import structlog

from fittrack.models.audit_log import AuditLog


async def log_event(
    user_id: str | None,
    event_type: str,
    entity_type: str,
    entity_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Append to audit_logs, tagged with the current request id if one is bound."""
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    await AuditLog(
        user_id=user_id,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=entity_id,
        request_id=request_id,
        metadata=metadata or {},
    ).insert()
