"""Configuration management for the chat gateway.

Reads settings from environment variables (and a local .env file) with
sensible defaults.
"""

from dataclasses import dataclass, field
import os

from dotenv import load_dotenv


def _env(name: str, default: str):
    return field(default_factory=lambda: os.getenv(name, default))


def _env_int(name: str, default: int):
    return field(default_factory=lambda: int(os.getenv(name, str(default))))


@dataclass(frozen=True)
class GatewayConfig:
    """Immutable configuration values sourced from environment variables."""
    access_password: str = _env("ACCESS_PASSWORD", "")

    gemini_api_key: str = _env("GEMINI_API_KEY", "")
    gemini_model: str = _env("GEMINI_MODEL", "gemini-pro")
    gemini_base_url: str = _env("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    request_timeout: int = _env_int("REQUEST_TIMEOUT", 60)

    daily_limit: int = _env_int("DAILY_REQUEST_LIMIT", 100)
    rate_limit_ttl: int = _env_int("RATE_LIMIT_TTL", 86400)
    rate_limit_url: str = _env("RATE_LIMIT_URL", "redis://localhost:6379/0")
    client_ip_header: str = _env("CLIENT_IP_HEADER", "CF-Connecting-IP")

    knowledge_index_url: str = _env("KNOWLEDGE_INDEX_URL", "redis://localhost:6379/1")
    top_k: int = _env_int("TOP_K", 5)


def require_env(name: str) -> str:
    """Fetch a required environment variable or raise."""
    val = os.getenv(name)
    if not val:
        raise RuntimeError(f"Missing required env var: {name}")
    return val


def get_config() -> GatewayConfig:
    """Load .env (without overriding real env vars) and return the configuration."""
    load_dotenv()
    return GatewayConfig()
