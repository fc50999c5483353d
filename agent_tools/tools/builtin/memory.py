"""Memory tool — recent conversation turns for this tenant and agent."""
import logging

from sqlalchemy import select

from ...config import settings
from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 2000


@register_executor(ToolCategory.MEMORY, description="Earlier conversation turns with this agent")
async def agent_memory(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import AgentMemory

    stmt = select(AgentMemory).where(AgentMemory.tenant_id == context_id)
    if agent_id:
        stmt = stmt.where(AgentMemory.agent_id == agent_id)
    stmt = stmt.order_by(AgentMemory.created_at.desc(), AgentMemory.id.desc()).limit(settings.memory_turns)

    async with db_session("memory") as db:
        result = await db.execute(stmt)
        rows = list(result.scalars().all())

    if not rows:
        return "No earlier conversation recorded for this agent."

    rows.reverse()  # oldest first
    lines = [f"{r.role}: {(r.content or '')[:MAX_CONTENT_CHARS]}" for r in rows]
    return f"Recent conversation ({len(rows)} turns, oldest first):\n" + "\n".join(lines)
