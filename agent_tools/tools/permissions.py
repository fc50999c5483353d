"""Capability gate — which tool categories each agent may trigger.

The table is built once at startup and shared read-only between requests.
Unknown agents get nothing; a missing agent id means unrestricted.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional

from .registry import ToolCategory

logger = logging.getLogger(__name__)

C = ToolCategory

DEFAULT_CAPABILITIES = {
    "orchestrator": list(ToolCategory),
    "support": [C.SUBSCRIPTION, C.TEAM, C.KNOWLEDGE, C.MEMORY],
    "finance": [C.SUBSCRIPTION, C.LEDGER],
    "scheduler": [C.CALENDAR, C.CRM, C.DELEGATE, C.NOTIFY, C.MEMORY],
    "outreach": [C.CRM, C.SOCIAL, C.NOTIFY, C.MEMORY],
    "research": [C.KNOWLEDGE, C.MEMORY],
}


@dataclass(frozen=True)
class CapabilityTable:
    entries: Mapping[str, FrozenSet[ToolCategory]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable]) -> "CapabilityTable":
        """Build a table from agent -> category names or ToolCategory values.

        Raises ValueError on an unknown category name.
        """
        entries = {}
        for agent, categories in mapping.items():
            resolved = set()
            for c in categories:
                try:
                    resolved.add(ToolCategory(c))
                except ValueError:
                    raise ValueError(f"Unknown tool category {c!r} for agent {agent!r}") from None
            entries[str(agent).strip().lower()] = frozenset(resolved)
        return cls(entries=MappingProxyType(entries))

    @property
    def everything(self) -> FrozenSet[ToolCategory]:
        allowed = set()
        for categories in self.entries.values():
            allowed |= categories
        return frozenset(allowed)

    def permitted(self, agent_id: Optional[str] = None) -> FrozenSet[ToolCategory]:
        if agent_id is None:
            return self.everything
        return self.entries.get(agent_id.strip().lower(), frozenset())

    def knows(self, agent_id: str) -> bool:
        return agent_id.strip().lower() in self.entries


def load_capability_table(path: str) -> CapabilityTable:
    """Load an agent -> categories table from a JSON object file."""
    with open(Path(path)) as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Capability file {path} must contain a JSON object")
    table = CapabilityTable.from_mapping(raw)
    logger.info(f"Loaded capabilities for {len(table.entries)} agents from {path}")
    return table


def default_capability_table() -> CapabilityTable:
    return CapabilityTable.from_mapping(DEFAULT_CAPABILITIES)
