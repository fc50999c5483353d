"""Tool registry — categories, request/result types, decorator-based executor registration."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class ToolCategory(str, Enum):
    """Closed set of tool categories. Declaration order is the output order."""
    SUBSCRIPTION = "subscription"
    TEAM = "team"
    KNOWLEDGE = "knowledge"
    CALENDAR = "calendar"
    CRM = "crm"
    LEDGER = "ledger"
    MEMORY = "memory"
    DELEGATE = "delegate"
    NOTIFY = "notify"
    SOCIAL = "social"


def ordered(categories: Iterable[ToolCategory]) -> List[ToolCategory]:
    """Return categories in declaration order."""
    wanted = set(categories)
    return [c for c in ToolCategory if c in wanted]


@dataclass(frozen=True)
class ToolRequest:
    context_id: str
    query: str = ""
    agent_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.context_id, str) or not self.context_id.strip():
            raise ValueError("context_id is required")
        if self.query is None:
            object.__setattr__(self, "query", "")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ToolResult:
    tool: str
    text: str = ""
    used_at: datetime = field(default_factory=_utcnow)
    is_error: bool = False


Executor = Callable[..., Union[str, Awaitable[str]]]


@dataclass(frozen=True)
class ExecutorDef:
    category: ToolCategory
    description: str
    handler: Executor
    side_effects: bool = False


_executors: Dict[ToolCategory, ExecutorDef] = {}


def register_executor(
    category: ToolCategory,
    description: str = "",
    side_effects: bool = False,
):
    """Decorator to register the executor for a category."""
    def decorator(func):
        if category in _executors:
            logger.warning(f"Replacing executor for {category.value}")
        _executors[category] = ExecutorDef(
            category=category,
            description=description or (func.__doc__ or "").strip(),
            handler=func,
            side_effects=side_effects,
        )
        logger.info(f"Registered executor: {category.value}")
        return func
    return decorator


def get_executor(category: ToolCategory) -> Optional[ExecutorDef]:
    return _executors.get(category)


def all_executors() -> Mapping[ToolCategory, Executor]:
    """Read-only snapshot of category -> handler."""
    return MappingProxyType({c: d.handler for c, d in _executors.items()})


def missing_categories(executors: Mapping[ToolCategory, Any]) -> List[ToolCategory]:
    return [c for c in ToolCategory if c not in executors]


def tool_descriptions() -> str:
    """Human-readable list of registered tools (for system prompts and logs)."""
    lines = []
    for category in ordered(_executors):
        d = _executors[category]
        flag = " (performs actions)" if d.side_effects else ""
        lines.append(f"- {category.value}: {d.description}{flag}")
    return "\n".join(lines)
