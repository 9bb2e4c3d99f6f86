"""Reference documents and the context retriever used to ground answers.

Documents are stored as JSON (title, content, keywords) under ``doc:<id>`` in
the knowledge store. Relevance lookup is not implemented yet: whether the
backend should do keyword matching or vector similarity is still an open
product decision, so both retrieval and search return no matches.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

import redis

from logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReferenceDocument:
    """A titled passage of reference material."""
    title: str
    content: str
    keywords: List[str] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, data: str) -> "ReferenceDocument":
        parsed = json.loads(data)
        return cls(
            title=parsed["title"],
            content=parsed["content"],
            keywords=list(parsed.get("keywords") or []),
        )

    def summary(self) -> Dict[str, str]:
        """Public shape returned by the search endpoint."""
        return {"title": self.title, "content": self.content}


class KnowledgeStore:
    """Redis-backed document store for reference material."""

    def __init__(self, url: str, prefix: str = "doc:") -> None:
        self.url = url
        self.prefix = prefix
        self._client = redis.Redis.from_url(url, decode_responses=True)

    def _key(self, doc_id: str) -> str:
        return f"{self.prefix}{doc_id}"

    def put(self, doc_id: str, doc: ReferenceDocument) -> None:
        self._client.set(self._key(doc_id), doc.to_json())

    def get(self, doc_id: str) -> Optional[ReferenceDocument]:
        raw = self._client.get(self._key(doc_id))
        if raw is None:
            return None
        return ReferenceDocument.from_json(raw)

    def delete_all(self) -> int:
        """Delete every document under the prefix and return how many were removed."""
        removed = 0
        for key in self._client.scan_iter(match=f"{self.prefix}*"):
            removed += self._client.delete(key)
        return removed


class ContextRetriever:
    """Look up reference documents relevant to a question.

    Results are ordered by relevance and capped at ``top_k``; callers keep that
    order. Zero matches is an empty list, never an error.
    """

    def __init__(self, store: Optional[KnowledgeStore] = None, top_k: int = 5) -> None:
        self.store = store
        self.top_k = top_k

    def retrieve(self, question: str) -> List[ReferenceDocument]:
        # TODO: query self.store once the keyword-vs-vector backend is chosen.
        logger.debug("Context lookup for %d-char question returned 0 documents", len(question))
        return []

    def search(self, query: Optional[str]) -> List[ReferenceDocument]:
        """Full-text search over the knowledge store (not implemented; always empty)."""
        if query:
            logger.debug("Full-text search is not available; returning no results")
        return []
