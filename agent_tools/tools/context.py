"""Context aggregator — renders tool results into one block for the model call."""
from typing import Sequence

from .registry import ToolResult

CONTEXT_HEADER = (
    "[AGENT TOOL RESULTS]\n"
    "The following live data was retrieved to answer this question accurately:"
)
BLOCK_SEPARATOR = "\n\n---\n\n"


def format_timestamp(result: ToolResult) -> str:
    return result.used_at.isoformat(timespec="milliseconds")


def format_block(result: ToolResult) -> str:
    return f"### Tool: {result.tool}\n_Retrieved: {format_timestamp(result)}_\n\n{result.text}"


def aggregate(results: Sequence[ToolResult]) -> str:
    """Join result blocks under the context header. No results -> empty string."""
    if not results:
        return ""
    blocks = BLOCK_SEPARATOR.join(format_block(r) for r in results)
    return f"{CONTEXT_HEADER}\n\n{blocks}"
