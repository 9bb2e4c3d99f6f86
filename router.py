"""Request routing for the gateway.

``Gateway.handle`` maps (method, path) onto the chat and search handlers,
adds the CORS headers to every response, and is the one place where failures
are turned into HTTP error responses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from auth import Authenticator, BasicPasswordAuth
from config import GatewayConfig
from errors import AuthError, GatewayError, QuotaExceeded, RouteNotFound, ValidationError
from logger import get_logger
from quota import QuotaTracker, RedisStore, client_identity
from rag import ChatService, GeminiClient
from retrieval import ContextRetriever, KnowledgeStore

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@dataclass
class Response:
    status: int = 200
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(cls, payload: Any, status: int = 200) -> "Response":
        return cls(
            status=status,
            body=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def text(cls, text: str, status: int = 200) -> "Response":
        return cls(status=status, body=text.encode("utf-8"), headers={"Content-Type": "text/plain; charset=utf-8"})

    def with_cors(self) -> "Response":
        self.headers = {**CORS_HEADERS, **self.headers}
        return self


def error_response(exc: Exception) -> Response:
    """Convert any failure into the JSON error envelope (plain text for 404)."""
    if isinstance(exc, RouteNotFound):
        return Response.text(str(exc), status=exc.status).with_cors()
    if isinstance(exc, GatewayError):
        return Response.json({"error": str(exc)}, status=exc.status).with_cors()
    logger.exception("Unhandled error while serving request")
    return Response.json({"error": str(exc)}, status=500).with_cors()


def parse_question(body: bytes) -> str:
    """Extract a ``question`` string with visible text from a JSON request body.

    An empty or whitespace-only body counts as a body without a question.
    """
    try:
        data = json.loads(body.strip() or b"{}")
    except ValueError:
        raise ValidationError("Invalid JSON body") from None
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")

    question = data.get("question")
    if not isinstance(question, str) or not question.strip():
        raise ValidationError("Question is required")
    return question


class Gateway:
    """Dispatch one HTTP exchange through auth, quota, and the chat pipeline."""

    def __init__(
        self,
        authenticator: Authenticator,
        quota: QuotaTracker,
        chat: ChatService,
        retriever: ContextRetriever,
        client_ip_header: str = "CF-Connecting-IP",
    ) -> None:
        self.authenticator = authenticator
        self.quota = quota
        self.chat = chat
        self.retriever = retriever
        self.client_ip_header = client_ip_header

    def handle(self, method: str, target: str, headers: Mapping[str, str], body: bytes = b"") -> Response:
        method = method.upper()
        parts = urlsplit(target)
        normalized = {k.lower(): v for k, v in headers.items()}

        try:
            response = self._route(method, parts.path, parse_qs(parts.query), normalized, body)
        except Exception as exc:
            response = error_response(exc)

        logger.info("%s %s -> %d", method, parts.path, response.status)
        return response

    def _route(self, method, path, query, headers, body) -> Response:
        if method == "OPTIONS":
            return Response().with_cors()
        if method == "POST" and path == "/api/chat":
            return self.handle_chat(headers, body).with_cors()
        if method == "GET" and path == "/api/search":
            return self.handle_search(query).with_cors()
        raise RouteNotFound()

    def handle_chat(self, headers: Mapping[str, str], body: bytes) -> Response:
        """Flow: auth → quota → parse → retrieve → prompt → complete."""
        if not self.authenticator.authenticate(headers.get("authorization")):
            logger.warning("Rejected chat request with missing or invalid credentials")
            raise AuthError()

        identity = client_identity(headers, self.client_ip_header)
        if not self.quota.admit(identity):
            raise QuotaExceeded(self.quota.daily_limit)

        question = parse_question(body)
        return Response.json(self.chat.answer(question))

    def handle_search(self, query: Mapping[str, list]) -> Response:
        q: Optional[str] = (query.get("q") or [None])[0]
        results = self.retriever.search(q)
        return Response.json([doc.summary() for doc in results])


def build_gateway(cfg: GatewayConfig) -> Gateway:
    """Wire the production collaborators from configuration."""
    retriever = ContextRetriever(store=KnowledgeStore(cfg.knowledge_index_url), top_k=cfg.top_k)
    completion = GeminiClient(
        api_key=cfg.gemini_api_key,
        model=cfg.gemini_model,
        base_url=cfg.gemini_base_url,
        timeout=cfg.request_timeout,
    )
    return Gateway(
        authenticator=BasicPasswordAuth(cfg.access_password),
        quota=QuotaTracker(RedisStore(cfg.rate_limit_url), daily_limit=cfg.daily_limit, ttl_seconds=cfg.rate_limit_ttl),
        chat=ChatService(retriever, completion, daily_limit=cfg.daily_limit),
        retriever=retriever,
        client_ip_header=cfg.client_ip_header,
    )
