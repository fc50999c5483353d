"""Rule-based intent classifier — maps query text to candidate tool categories.

Every category owns independent patterns; a query may match several categories.
"""
import re
import logging
from typing import FrozenSet, Iterable, List, Optional, Tuple

from .registry import ToolCategory, ordered

logger = logging.getLogger(__name__)

Rule = Tuple[ToolCategory, re.Pattern]

_RULES: List[Rule] = []

# Platforms a social post can target. "x" is only matched after "on"/"to".
SOCIAL_PLATFORMS = ("linkedin", "facebook", "twitter", "threads", "reddit", "tiktok", "pinterest", "tumblr", "x")


def _build_rules():
    global _RULES
    platforms = "|".join(SOCIAL_PLATFORMS)

    rules = [
        # ── Subscription / billing ───────────────────────
        (ToolCategory.SUBSCRIPTION, r"\b(plan|billing|invoices?|payments?|charged?|subscriptions?|renewal|renew|seats?|pricing|price)\b"),
        (ToolCategory.SUBSCRIPTION, r"\bwhen (does|is|will) (my|the|our) (plan|subscription|billing|renewal)\b"),
        (ToolCategory.SUBSCRIPTION, r"\bwhat (plan|tier|subscription) (am i|are we|is this) on\b"),
        (ToolCategory.SUBSCRIPTION, r"\b(upgrade|downgrade|cancel\b.*\b(plan|subscription))\b"),

        # ── Team ─────────────────────────────────────────
        (ToolCategory.TEAM, r"\b(team ?members?|members? of (the|my|our) team|who('s| is)? on (the|my|our) team)\b"),
        (ToolCategory.TEAM, r"\bwho (has|have|is|are) (an? )?(access|role|permission|admin|owner)s?\b"),
        (ToolCategory.TEAM, r"\b(add|remove|invite)\b.*\busers?\b|\b(user roles?|change\b.*\brole)\b"),
        (ToolCategory.TEAM, r"\bhow many (people|users|members|seats) (are|is|on|do)\b"),

        # ── Product knowledge ────────────────────────────
        (ToolCategory.KNOWLEDGE, r"\b(how (do|does|can) (i|we|you)|how to|what is|explain|tell me about)\b"),
        (ToolCategory.KNOWLEDGE, r"\b(set ?up|configure|integrate|enable|disable|turn (on|off))\b"),
        (ToolCategory.KNOWLEDGE, r"\b(not working|broken|troubleshoot|knowledge base|docs?|documentation)\b"),
        (ToolCategory.KNOWLEDGE, r"\bwhere (do|can) (i|we) (find|see|change)\b"),

        # ── Calendar ─────────────────────────────────────
        (ToolCategory.CALENDAR, r"\b(calendar|agenda|appointments?|meetings?|schedule[ds]?)\b"),
        (ToolCategory.CALENDAR, r"\b(what'?s|anything) on (my|our|the) (plate|calendar|agenda)\b"),
        (ToolCategory.CALENDAR, r"\b(am i|are (we|you|they)|is (he|she|everyone|anyone)) (free|busy|available)\b"),
        (ToolCategory.CALENDAR, r"\b(free|busy|available) (at \d|on (mon|tues|wednes|thurs|fri|satur|sun)day|tomorrow|today|tonight|this (morning|afternoon|evening|week)|next week)\b"),

        # ── CRM ──────────────────────────────────────────
        (ToolCategory.CRM, r"\b(crm|contacts?|leads?|prospects?|pipeline)\b"),
        (ToolCategory.CRM, r"\b(look ?up|find|who is)\b.*\b(customer|client|contact)s?\b"),

        # ── Ledger ───────────────────────────────────────
        (ToolCategory.LEDGER, r"\b(ledger|spend|spending|spent|expenses?|transactions?|revenue|budget|burn rate)\b"),
        (ToolCategory.LEDGER, r"\bhow much (did|have|has) (we|i|it) (spend|spent|cost|pay|paid)\b"),

        # ── Memory ───────────────────────────────────────
        (ToolCategory.MEMORY, r"\b(remember|recall|last time|previously|earlier today|yesterday)\b"),
        (ToolCategory.MEMORY, r"\bwhat (did|have) (i|we|you) (say|said|ask|asked|tell|told)\b"),
        (ToolCategory.MEMORY, r"\bwe (talked|discussed|spoke) about\b"),

        # ── Delegation (side effect) ─────────────────────
        (ToolCategory.DELEGATE, r"\b(delegate|hand (this |it )?off|assign (this|it|a task))\b"),
        (ToolCategory.DELEGATE, r"\b(create|open|add) (a |new )?task\b"),

        # ── Notifications (side effect) ──────────────────
        (ToolCategory.NOTIFY, r"\b(notify|alert)\b"),
        (ToolCategory.NOTIFY, r"\bsend (a |an )?(message|notification|reminder|text|dm)\b"),
        (ToolCategory.NOTIFY, r"\blet (me|us|them|him|her|the team) know\b"),

        # ── Social posting (side effect) ─────────────────
        (ToolCategory.SOCIAL, rf"\b(post|publish|tweet|share)\b.*\b(on|to)\s+({platforms})\b"),
        (ToolCategory.SOCIAL, r"\b(tweet|social media post|linkedin post)\b"),
    ]

    _RULES.clear()
    for category, pattern in rules:
        _RULES.append((category, re.compile(pattern, re.IGNORECASE)))


def classify(query: str, rules: Optional[Iterable[Rule]] = None) -> FrozenSet[ToolCategory]:
    """Return every category with at least one matching rule."""
    text = (query or "").strip()
    if not text:
        return frozenset()

    matched = set()
    for category, regex in (_RULES if rules is None else rules):
        if category in matched:
            continue
        if regex.search(text):
            matched.add(category)

    if matched:
        logger.debug(f"Classifier matched: {[c.value for c in ordered(matched)]}")
    return frozenset(matched)


_build_rules()
