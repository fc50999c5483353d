"""Tool dispatcher — runs eligible executors concurrently with per-tool failure isolation."""
import asyncio
import inspect
import logging
import re
import time
from typing import Iterable, List, Mapping

from .errors import ToolError, ToolTimeoutError, ToolNotFoundError, ToolCancelledError, MalformedDataError
from .registry import ToolCategory, ToolRequest, ToolResult, Executor, ordered

logger = logging.getLogger(__name__)

ERROR_MARKER = re.compile(r"^\[error: (?P<tool>[\w.-]+) tool failed \((?P<code>[A-Z_]+)\): .*\]$", re.DOTALL)


def error_text(tool: str, code: str, message: str) -> str:
    return f"[error: {tool} tool failed ({code}): {message}]"


async def _call(handler: Executor, request: ToolRequest) -> str:
    args = (request.context_id, request.query, request.agent_id)
    if inspect.iscoroutinefunction(handler):
        result = await handler(*args)
    else:
        # Plain callables run in a worker thread so the deadline still applies
        result = await asyncio.to_thread(handler, *args)
        if inspect.isawaitable(result):
            result = await result
    if not isinstance(result, str):
        raise MalformedDataError(f"executor returned {type(result).__name__}, expected text")
    return result


async def execute_tool(
    category: ToolCategory,
    request: ToolRequest,
    executors: Mapping[ToolCategory, Executor],
    timeout: float,
) -> ToolResult:
    """Run one executor. Never raises; failures become error results.

    Cancellation of the dispatching task itself is re-raised.
    """
    name = category.value
    handler = executors.get(category)
    t0 = time.monotonic()

    try:
        if handler is None:
            raise ToolNotFoundError(name)
        logger.info(f"[{request.context_id}] Executing tool: {name}")
        try:
            async with asyncio.timeout(timeout) as deadline:
                text = await _call(handler, request)
        except TimeoutError:
            if deadline.expired():
                raise ToolTimeoutError(timeout) from None
            raise
        except asyncio.CancelledError:
            if asyncio.current_task().cancelling():
                raise
            raise ToolCancelledError() from None
    except ToolError as e:
        logger.warning(f"[{request.context_id}] Tool {name} failed ({e.code}): {e}")
        return ToolResult(tool=name, text=error_text(name, e.code, str(e)), is_error=True)
    except Exception as e:
        logger.error(f"[{request.context_id}] Tool {name} failed: {e}", exc_info=True)
        return ToolResult(
            tool=name,
            text=error_text(name, "EXECUTION_FAILED", f"{type(e).__name__}: {e}"),
            is_error=True,
        )

    elapsed = time.monotonic() - t0
    logger.info(f"[{request.context_id}] Tool {name}: {elapsed:.2f}s -> {len(text)} chars")
    return ToolResult(tool=name, text=text)


async def dispatch(
    eligible: Iterable[ToolCategory],
    request: ToolRequest,
    executors: Mapping[ToolCategory, Executor],
    timeout: float,
) -> List[ToolResult]:
    """Run every eligible executor at once and wait for all of them.

    Results come back in category declaration order.
    """
    categories = ordered(eligible)
    if not categories:
        return []

    return list(await asyncio.gather(
        *[execute_tool(c, request, executors, timeout) for c in categories]
    ))
