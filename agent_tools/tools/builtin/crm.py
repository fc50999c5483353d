"""CRM tool — contact lookup by name, or the most recent contacts."""
import logging
import re

from sqlalchemy import select

from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

MAX_CONTACTS = 20

_NAME_RE = re.compile(r"\b(?:named|called)\s+([A-Za-z][\w'.-]*(?:\s+[A-Z][\w'.-]*)?)")


def contact_name(query: str) -> str:
    m = _NAME_RE.search(query or "")
    return m.group(1).strip(" .?!") if m else ""


@register_executor(ToolCategory.CRM, description="Look up CRM contacts and leads")
async def crm_contacts(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import Contact

    name = contact_name(query)
    stmt = select(Contact).where(Contact.tenant_id == context_id)
    if name:
        stmt = stmt.where(Contact.name.ilike(f"%{name}%")).order_by(Contact.name)
    else:
        stmt = stmt.order_by(Contact.created_at.desc())
    stmt = stmt.limit(MAX_CONTACTS)

    async with db_session("crm") as db:
        result = await db.execute(stmt)
        contacts = result.scalars().all()

    if not contacts:
        if name:
            return f"No contacts found matching '{name}'."
        return "No contacts recorded for this account."

    lines = []
    for i, c in enumerate(contacts, 1):
        email = f" <{c.email}>" if c.email else ""
        company = c.company or "—"
        lines.append(f"{i}. {c.name}{email} | company: {company} | stage: {c.stage}")
    return f"Contacts ({len(contacts)}):\n" + "\n".join(lines)
