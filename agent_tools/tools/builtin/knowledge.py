"""Knowledge tool — keyword search over the tenant's product documentation."""
import logging
import re

from sqlalchemy import select, or_

from ...config import settings
from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

MAX_TERMS = 8
MAX_CANDIDATES = 50
MAX_DOCS = 5
EXCERPT_CHARS = 500

_STOP_WORDS = frozenset(
    "the and for are but not you your our with this that what how does can do "
    "is to of in on it me my we i a an be tell about explain where when why".split()
)
_WORD_RE = re.compile(r"[a-z0-9][a-z0-9_-]+")


def _terms(query: str):
    terms = []
    for word in _WORD_RE.findall(query.lower()):
        if len(word) < 3 or word in _STOP_WORDS or word in terms:
            continue
        terms.append(word)
    return terms[:MAX_TERMS]


def _score(doc, terms) -> int:
    title = (doc.title or "").lower()
    body = (doc.body or "").lower()
    return sum(2 * title.count(t) + body.count(t) for t in terms)


@register_executor(ToolCategory.KNOWLEDGE, description="Search product documentation for how-to questions")
async def search_knowledge(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import KbDocument

    terms = _terms((query or "")[:settings.knowledge_query_chars])
    docs = []
    if terms:
        clauses = []
        for t in terms:
            clauses.append(KbDocument.title.ilike(f"%{t}%"))
            clauses.append(KbDocument.body.ilike(f"%{t}%"))
        async with db_session("knowledge") as db:
            result = await db.execute(
                select(KbDocument)
                .where(KbDocument.tenant_id == context_id, or_(*clauses))
                .limit(MAX_CANDIDATES)
            )
            docs = result.scalars().all()

    if not docs:
        return "No matching documentation found. Answer from general product knowledge."

    ranked = sorted(docs, key=lambda d: (-_score(d, terms), d.id))[:MAX_DOCS]
    sections = []
    for doc in ranked:
        body = (doc.body or "").strip()
        if len(body) > EXCERPT_CHARS:
            body = body[:EXCERPT_CHARS - 3] + "..."
        sections.append(f"## {doc.title or doc.slug}\n{body}")
    return f"Found {len(ranked)} relevant docs:\n\n" + "\n\n".join(sections)
