"""Social tool — posts a draft to a social platform through the publishing webhook."""
import logging
import re

from ...config import settings
from ..errors import MissingCredentialError
from ..registry import register_executor, ToolCategory
from ..router import SOCIAL_PLATFORMS
from ._common import post_json

logger = logging.getLogger(__name__)

_NAMED = "|".join(p for p in SOCIAL_PLATFORMS if p != "x")
_TARGETED_RE = re.compile(rf"\b(?:on|to)\s+({'|'.join(SOCIAL_PLATFORMS)})\b", re.IGNORECASE)
_NAMED_RE = re.compile(rf"\b({_NAMED})\b", re.IGNORECASE)
_TWEET_RE = re.compile(r"\btweet\b", re.IGNORECASE)


def target_platform(query: str) -> str:
    """Return the platform the query targets, normalising x to twitter."""
    q = query or ""
    m = _TARGETED_RE.search(q) or _NAMED_RE.search(q)
    if m:
        platform = m.group(1).lower()
        return "twitter" if platform == "x" else platform
    if _TWEET_RE.search(q):
        return "twitter"
    return ""


@register_executor(
    ToolCategory.SOCIAL,
    description="Publish a post to a connected social platform",
    side_effects=True,
)
async def publish_post(context_id: str, query: str = "", agent_id=None) -> str:
    platform = target_platform(query)
    if not platform:
        supported = ", ".join(p for p in SOCIAL_PLATFORMS if p != "x")
        return f"No target platform recognised. Ask which platform to post on ({supported})."

    if not settings.social_webhook_url or not settings.social_webhook_token:
        raise MissingCredentialError("social publishing webhook is not configured")

    data = await post_json(
        settings.social_webhook_url,
        {"platform": platform, "context_id": context_id, "agent_id": agent_id, "draft": query},
        token=settings.social_webhook_token,
    )
    logger.info(f"[{context_id}] Social post queued on {platform} by {agent_id or '-'}")

    url = data.get("url")
    status = data.get("status", "queued")
    return f"Post {status} on {platform}" + (f": {url}" if url else ".")
