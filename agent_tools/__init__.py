"""Server-side tool resolution for agent chat."""
from .resolver import ToolResolver, get_resolver, resolve_tool_context, resolve_tool_context_sync
