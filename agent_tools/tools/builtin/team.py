"""Team tool — roster with roles and join dates."""
import logging
import re

from sqlalchemy import select

from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

MAX_MEMBERS = 50

_ROLE_RE = re.compile(r"\b(owner|admin|viewer)s?\b", re.IGNORECASE)


@register_executor(ToolCategory.TEAM, description="Team roster with roles and join dates")
async def team_members(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import TenantMember

    role_match = _ROLE_RE.search(query or "")
    role = role_match.group(1).lower() if role_match else ""

    stmt = select(TenantMember).where(TenantMember.tenant_id == context_id)
    if role:
        stmt = stmt.where(TenantMember.role.ilike(f"%{role}%"))
    stmt = stmt.order_by(TenantMember.created_at).limit(MAX_MEMBERS)

    async with db_session("team") as db:
        result = await db.execute(stmt)
        members = result.scalars().all()

    if not members:
        if role:
            return f"No team members with role '{role}' found for this account."
        return "No team members found for this account."

    lines = []
    for i, m in enumerate(members, 1):
        joined = m.created_at.strftime("%Y-%m-%d") if m.created_at else "—"
        lines.append(f"{i}. userId: {m.user_id} | role: {m.role} | joined: {joined}")
    return f"Team members ({len(members)}):\n" + "\n".join(lines)
