"""Subscription tool — plan, seats, connected platforms and recent compute spend."""
import logging

from sqlalchemy import select, func

from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

RECENT_SPEND_RUNS = 5


@register_executor(
    ToolCategory.SUBSCRIPTION,
    description="Account plan, seat usage, connected platforms and recent compute spend",
)
async def subscription_info(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import Tenant, TenantMember, Integration, LedgerEntry

    async with db_session("subscription") as db:
        tenant = await db.get(Tenant, context_id)
        seats = await db.scalar(
            select(func.count()).select_from(TenantMember).where(TenantMember.tenant_id == context_id)
        )
        result = await db.execute(
            select(LedgerEntry.amount_cents)
            .where(LedgerEntry.tenant_id == context_id, LedgerEntry.category == "token_spend")
            .order_by(LedgerEntry.occurred_at.desc())
            .limit(RECENT_SPEND_RUNS)
        )
        spend_cents = sum(result.scalars().all())
        result = await db.execute(
            select(Integration.provider)
            .where(Integration.tenant_id == context_id, Integration.connected.is_(True))
            .order_by(Integration.provider)
        )
        providers = result.scalars().all()

    since = tenant.created_at.strftime("%Y-%m-%d") if tenant and tenant.created_at else "—"
    lines = [
        f"Account: {tenant.name if tenant and tenant.name else context_id}",
        f"Account slug: {tenant.slug if tenant else '—'}",
        f"Member since: {since}",
        f"Team seats used: {seats or 0}",
        f"Connected platforms: {', '.join(providers) or 'none'}",
        f"Recent compute spend (last {RECENT_SPEND_RUNS} runs): {spend_cents / 100:.4f} USD",
    ]
    return "\n".join(lines)
