"""Audit trail recording and the audit report view."""
from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..filters import apply_search, clean, filter_state
from ..models import AuditLog, User
from ..presenters.badges import badge
from ..presenters.formatting import format_change_value, format_timestamp, relative_time

logger = logging.getLogger(__name__)

AUDIT_ACTIONS = (
    "created",
    "updated",
    "deleted",
    "calculated",
    "adjusted",
    "approved",
    "rejected",
    "finalized",
    "generated",
    "uploaded",
    "submitted",
    "deducted",
    "paid",
    "cancelled",
)

AUDIT_PAGE_SIZE = 200


class AuditTrail:
    """Adds audit rows to the caller's session; the caller commits."""

    def __init__(self, session: AsyncSession, user: User, ip_address: Optional[str] = None):
        self.session = session
        self.user = user
        self.ip_address = ip_address

    def record(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int] = None,
        entity_name: str = "",
        description: str = "",
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        if action not in AUDIT_ACTIONS:
            raise ValueError(f"Unknown audit action: {action}")
        log = AuditLog(
            account_id=self.user.account_id,
            user_id=self.user.id,
            user_name=self.user.display_name,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=description,
            old_values=_jsonable(old_values),
            new_values=_jsonable(new_values),
            ip_address=self.ip_address,
            created_at=datetime.utcnow(),
        )
        self.session.add(log)
        logger.debug("Audit %s %s#%s by %s", action, entity_type, entity_id, log.user_name)
        return log


def _jsonable(values: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if values is None:
        return None
    return {
        key: value.isoformat() if isinstance(value, (date, datetime)) else value
        for key, value in values.items()
    }


def infer_value_type(field: str) -> str:
    """Guess how a changed field should be displayed from its name."""

    if field == "amount" or field.endswith(("_pay", "_amount", "_deductions", "_balance")):
        return "currency"
    if field.endswith(("_date", "_at")):
        return "date"
    if field.endswith(("_count", "_employees")):
        return "number"
    return "string"


def field_label(field: str) -> str:
    return field.replace("_", " ").title()


def build_change_history(logs: List[AuditLog]) -> List[Dict[str, Any]]:
    """Flatten old/new value pairs into one row per changed field."""

    history: List[Dict[str, Any]] = []
    for log in logs:
        old_values = log.old_values or {}
        new_values = log.new_values or {}
        for field in sorted(set(old_values) | set(new_values)):
            old, new = old_values.get(field), new_values.get(field)
            if old == new:
                continue
            value_type = infer_value_type(field)
            history.append(
                {
                    "id": f"{log.id}-{field}",
                    "audit_log_id": log.id,
                    "entity_type": log.entity_type,
                    "entity_id": log.entity_id,
                    "entity_name": log.entity_name,
                    "field_name": field,
                    "field_label": field_label(field),
                    "old_value": old,
                    "new_value": new,
                    "formatted_old_value": format_change_value(old, value_type),
                    "formatted_new_value": format_change_value(new, value_type),
                    "value_type": value_type,
                    "user_name": log.user_name,
                    "timestamp": log.created_at.isoformat(),
                    "formatted_timestamp": format_timestamp(log.created_at),
                }
            )
    return history


def audit_log_props(log: AuditLog, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "id": log.id,
        "user_id": log.user_id,
        "user_name": log.user_name,
        "action": log.action,
        "action_badge": badge("audit_action", log.action),
        "entity_type": log.entity_type,
        "entity_badge": badge("audit_entity", log.entity_type),
        "entity_id": log.entity_id,
        "entity_name": log.entity_name,
        "description": log.description,
        "old_values": log.old_values,
        "new_values": log.new_values,
        "ip_address": log.ip_address,
        "timestamp": log.created_at.isoformat(),
        "formatted_timestamp": format_timestamp(log.created_at),
        "relative_time": relative_time(log.created_at, now),
    }


async def audit_report_props(
    session: AsyncSession,
    account_id: str,
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    user_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    statement = select(AuditLog).where(AuditLog.account_id == account_id)
    if clean(action):
        statement = statement.where(AuditLog.action == action)
    if clean(entity_type):
        statement = statement.where(AuditLog.entity_type == entity_type)
    if user_id:
        statement = statement.where(AuditLog.user_id == user_id)
    if date_from:
        statement = statement.where(AuditLog.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        statement = statement.where(AuditLog.created_at <= datetime.combine(date_to, time.max))
    statement = apply_search(
        statement, search, AuditLog.entity_name, AuditLog.description, AuditLog.user_name
    )
    statement = statement.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(AUDIT_PAGE_SIZE)
    logs = list((await session.execute(statement)).scalars().all())

    now = datetime.utcnow()
    return {
        "auditLogs": [audit_log_props(log, now) for log in logs],
        "changeHistory": build_change_history(logs),
        "filters": filter_state(
            action=action,
            entity_type=entity_type,
            user_id=user_id,
            date_from=date_from.isoformat() if date_from else None,
            date_to=date_to.isoformat() if date_to else None,
            search=search,
        ),
    }
