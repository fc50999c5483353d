"""Ledger tool — most recent ledger entries with a running total."""
import logging

from sqlalchemy import select

from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

MAX_ENTRIES = 10


@register_executor(ToolCategory.LEDGER, description="Recent ledger entries and spend totals")
async def ledger_entries(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import LedgerEntry

    async with db_session("ledger") as db:
        result = await db.execute(
            select(LedgerEntry)
            .where(LedgerEntry.tenant_id == context_id)
            .order_by(LedgerEntry.occurred_at.desc())
            .limit(MAX_ENTRIES)
        )
        entries = result.scalars().all()

    if not entries:
        return "No ledger entries recorded for this account."

    lines = []
    for e in entries:
        when = e.occurred_at.strftime("%Y-%m-%d") if e.occurred_at else "—"
        lines.append(f"- {when} | {e.category or 'uncategorized'} | {e.amount_cents / 100:.2f} USD | {e.description}")
    total = sum(e.amount_cents for e in entries) / 100
    return (
        f"Last {len(entries)} ledger entries (total {total:.2f} USD):\n"
        + "\n".join(lines)
    )
