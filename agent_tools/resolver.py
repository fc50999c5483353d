"""Tool context resolver — detect, gate, execute in parallel, merge.

Usage:
    context = await resolve_tool_context(tenant_id, user_text, agent_id)
    if context:
        system_parts.append(context)
"""
import asyncio
import logging
from typing import Mapping, Optional

from .config import settings
from .tools.context import aggregate
from .tools.executor import dispatch
from .tools.permissions import CapabilityTable, default_capability_table, load_capability_table
from .tools.registry import ToolCategory, ToolRequest, Executor, all_executors, missing_categories, ordered
from .tools.router import classify

logger = logging.getLogger(__name__)


class ToolResolver:
    """One configured pipeline. Build once at startup and share between requests."""

    def __init__(
        self,
        capabilities: CapabilityTable,
        executors: Mapping[ToolCategory, Executor],
        timeout: float = 10.0,
    ):
        self.capabilities = capabilities
        self.executors = executors
        self.timeout = timeout

        missing = missing_categories(executors)
        if missing:
            logger.warning(f"No executor registered for: {[c.value for c in missing]}")

    @classmethod
    def from_settings(cls) -> "ToolResolver":
        if settings.capabilities_file:
            table = load_capability_table(settings.capabilities_file)
        else:
            table = default_capability_table()
        return cls(table, all_executors(), timeout=settings.tool_timeout_s)

    def eligible(self, request: ToolRequest):
        """classify(query) ∩ permitted(agent), in declaration order."""
        matched = classify(request.query)
        if not matched:
            return []

        allowed = self.capabilities.permitted(request.agent_id)
        denied = matched - allowed
        if request.agent_id is not None and not self.capabilities.knows(request.agent_id):
            logger.info(
                f"[{request.context_id}] Unknown agent {request.agent_id!r}, denied: "
                f"{[c.value for c in ordered(denied)]}"
            )
        elif denied:
            logger.info(
                f"[{request.context_id}] Agent {request.agent_id or '-'} not permitted: "
                f"{[c.value for c in ordered(denied)]}"
            )
        return ordered(matched & allowed)

    async def resolve(self, context_id: str, query: str, agent_id: Optional[str] = None) -> str:
        request = ToolRequest(context_id=context_id, query=query, agent_id=agent_id)
        categories = self.eligible(request)
        if not categories:
            return ""

        logger.info(f"[{context_id}] Resolving tools: {[c.value for c in categories]}")
        results = await dispatch(categories, request, self.executors, self.timeout)
        return aggregate(results)


_resolver: Optional[ToolResolver] = None


def get_resolver() -> ToolResolver:
    global _resolver
    if _resolver is None:
        _resolver = ToolResolver.from_settings()
    return _resolver


async def resolve_tool_context(context_id: str, query: str, agent_id: Optional[str] = None) -> str:
    """Return the tool context block for a query, or "" when no tool applies."""
    return await get_resolver().resolve(context_id, query, agent_id)


def resolve_tool_context_sync(context_id: str, query: str, agent_id: Optional[str] = None) -> str:
    """Blocking variant for callers outside an event loop."""
    return asyncio.run(resolve_tool_context(context_id, query, agent_id))
