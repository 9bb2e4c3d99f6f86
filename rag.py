"""Core chat pipeline: context retrieval, prompt construction, and Gemini completion."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Sequence

import requests

from errors import ProviderError
from logger import get_logger
from retrieval import ContextRetriever, ReferenceDocument

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an expert in Single-Cell Omics and Bioinformatics.\n"
    "Use the following context to answer the user's question.\n"
    "If the answer is not in the context, use your general knowledge but mention that it's general info."
)

ANSWER_STYLE = "Answer in a professional, academic tone. Use Markdown."


def format_context(context: Sequence[ReferenceDocument]) -> str:
    """Render documents as Title/Content blocks separated by blank lines, in the given order."""
    return "\n\n".join(f"Title: {doc.title}\nContent: {doc.content}" for doc in context)


def build_prompt(question: str, context: Sequence[ReferenceDocument]) -> str:
    """Stitch the domain instruction, retrieved context, and the user's question together."""
    return (
        f"{SYSTEM_PROMPT}\n\n"
        f"Context:\n{format_context(context)}\n\n"
        f"User Question: {question}\n\n"
        f"{ANSWER_STYLE}\n"
    )


class GeminiClient:
    """Single-turn text completion against the Gemini generateContent endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-pro",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 60,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"

    def complete(self, prompt: str) -> str:
        """Send the prompt as the only content part and return the first candidate's text."""
        if not self.api_key:
            raise ProviderError("Missing GEMINI_API_KEY")

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        started = time.perf_counter()
        resp = requests.post(
            self.url,
            params={"key": self.api_key},
            headers={"Content-Type": "application/json"},
            json=payload,
            timeout=self.timeout,
        )
        elapsed = time.perf_counter() - started

        if not resp.ok:
            logger.error("Gemini request failed with %s after %.2fs", resp.status_code, elapsed)
            raise ProviderError(
                f"Gemini API Error: {resp.status_code} - {resp.text}",
                upstream_status=resp.status_code,
                body=resp.text,
            )

        logger.debug("Gemini responded in %.2fs", elapsed)
        data = resp.json()
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(f"Unexpected Gemini response: {str(data)[:500]}") from exc


class ChatService:
    """Retrieve context, build the prompt, and ask the completion provider."""

    def __init__(self, retriever: ContextRetriever, completion: GeminiClient, daily_limit: int = 100) -> None:
        self.retriever = retriever
        self.completion = completion
        self.daily_limit = daily_limit

    def answer(self, question: str) -> Dict[str, Any]:
        """Run retrieve → prompt → complete for an already validated question.

        Returns:
            The chat response payload: the model answer, the titles of the
            documents used (retrieval order), and informational quota metadata.
        """
        context: List[ReferenceDocument] = self.retriever.retrieve(question)
        prompt = build_prompt(question, context)
        answer = self.completion.complete(prompt)
        return {
            "answer": answer,
            "references": [doc.title for doc in context],
            "quota": {"used": "tracked_internally", "total": self.daily_limit},
        }
