"""Tool system — registry, classifier, capability gate, dispatcher, aggregator."""
from .registry import (
    ToolCategory, ToolRequest, ToolResult, register_executor, get_executor, all_executors,
    tool_descriptions, ordered,
)
from .router import classify
from .permissions import CapabilityTable, default_capability_table, load_capability_table
from .executor import dispatch, execute_tool, ERROR_MARKER
from .context import aggregate
from .errors import (
    ToolError, UpstreamUnavailableError, MalformedDataError, MissingCredentialError,
    ToolTimeoutError, ToolNotFoundError, ToolCancelledError,
)

# Auto-import builtin executors to trigger @register_executor decorators
from .builtin import *  # noqa
