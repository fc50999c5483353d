"""Delegation tool — records a task handed off to another agent."""
import logging
import re

from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_CHARS = 1000

_TARGET_RES = [
    re.compile(r"\b(?:delegate|assign|hand)\b.*?\bto\s+(?:the\s+|an?\s+)?(?!me\b|us\b)([a-z][\w-]*)", re.IGNORECASE),
    re.compile(r"\bhave\s+([a-z][\w-]*)\s+(?:handle|do|take care of)\b", re.IGNORECASE),
]


def delegation_target(query: str) -> str:
    for regex in _TARGET_RES:
        m = regex.search(query or "")
        if m:
            return m.group(1).lower()
    return ""


@register_executor(
    ToolCategory.DELEGATE,
    description="Record a task delegated to another agent",
    side_effects=True,
)
async def delegate_task(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import DelegatedTask

    target = delegation_target(query)
    description = (query or "").strip()[:MAX_DESCRIPTION_CHARS]

    async with db_session("delegate") as db:
        task = DelegatedTask(
            tenant_id=context_id,
            from_agent=agent_id or "",
            to_agent=target,
            description=description,
        )
        db.add(task)
        await db.commit()
        await db.refresh(task)

    logger.info(f"[{context_id}] Delegated task #{task.id} from {agent_id or '-'} to {target or 'next available'}")
    assignee = target or "the next available agent"
    return f"Task #{task.id} delegated to {assignee} (status: {task.status}): {description}"
