"""Notification tool — pushes a message to the tenant's notification webhook."""
import logging

from ...config import settings
from ..errors import MissingCredentialError
from ..registry import register_executor, ToolCategory
from ._common import post_json

logger = logging.getLogger(__name__)


@register_executor(
    ToolCategory.NOTIFY,
    description="Send a notification to the team channel",
    side_effects=True,
)
async def send_notification(context_id: str, query: str = "", agent_id=None) -> str:
    if not settings.notify_webhook_url:
        raise MissingCredentialError("notification webhook is not configured")

    data = await post_json(
        settings.notify_webhook_url,
        {"context_id": context_id, "agent_id": agent_id, "text": query},
    )
    logger.info(f"[{context_id}] Notification sent by {agent_id or '-'}")

    ref = data.get("id") or data.get("message_id")
    return f"Notification sent (ref {ref})." if ref else "Notification sent."
