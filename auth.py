"""Shared-secret HTTP Basic authentication.

Only the password half of ``username:password`` is checked; the username is
accepted as-is. The comparison is a plain equality check with no hashing or
lockout, so this is a placeholder until a stronger scheme replaces it behind
the same ``authenticate(header) -> bool`` interface.
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional, Protocol, Tuple

from logger import get_logger

logger = get_logger(__name__)


class Authenticator(Protocol):
    def authenticate(self, authorization: Optional[str]) -> bool:
        ...


def parse_basic_credentials(authorization: Optional[str]) -> Optional[Tuple[str, str]]:
    """Decode a ``Basic`` Authorization header into (username, password).

    Returns None when the header is missing, uses another scheme, or carries a
    payload that is not valid base64 ``username:password``.
    """
    if not authorization or not authorization.startswith("Basic "):
        return None
    encoded = authorization.split(" ", 1)[1].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    if ":" not in decoded:
        return None
    username, _, password = decoded.partition(":")
    return username, password


class BasicPasswordAuth:
    """Admit any username whose password equals the configured secret."""

    def __init__(self, password: str) -> None:
        self.password = password

    def authenticate(self, authorization: Optional[str]) -> bool:
        # An unset secret must never match an empty password.
        if not self.password:
            logger.warning("ACCESS_PASSWORD is not configured; denying request")
            return False
        credentials = parse_basic_credentials(authorization)
        if credentials is None:
            return False
        return credentials[1] == self.password
