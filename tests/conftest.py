"""Shared fixtures for gateway tests."""

import base64
from datetime import date
from unittest.mock import Mock

import pytest

from auth import BasicPasswordAuth
from quota import QuotaTracker
from rag import ChatService
from retrieval import ContextRetriever
from router import Gateway

PASSWORD = "s3cret"
DAY = date(2025, 1, 3)


class MemoryStore:
    """In-memory KeyValueStore that records every write."""

    def __init__(self):
        self.data = {}
        self.writes = []

    def get(self, key):
        return self.data.get(key)

    def put(self, key, value, ttl_seconds):
        self.data[key] = value
        self.writes.append((key, value, ttl_seconds))


def basic_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return f"Basic {token}"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def today():
    """Mutable clock: set ``today.value`` to move the tracker to another day."""
    clock = Mock()
    clock.value = DAY
    clock.side_effect = lambda: clock.value
    return clock


@pytest.fixture
def tracker(store, today):
    return QuotaTracker(store, daily_limit=100, ttl_seconds=86400, today=today)


@pytest.fixture
def completion():
    client = Mock()
    client.complete.return_value = "scRNA-seq measures gene expression in individual cells."
    return client


@pytest.fixture
def retriever():
    return ContextRetriever()


@pytest.fixture
def gateway(tracker, completion, retriever):
    return Gateway(
        authenticator=BasicPasswordAuth(PASSWORD),
        quota=tracker,
        chat=ChatService(retriever, completion, daily_limit=100),
        retriever=retriever,
        client_ip_header="CF-Connecting-IP",
    )


@pytest.fixture
def auth_headers():
    return {
        "Authorization": basic_header("alice", PASSWORD),
        "CF-Connecting-IP": "1.2.3.4",
        "Content-Type": "application/json",
    }
