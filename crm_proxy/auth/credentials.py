"""Credential value type and the single-slot token cache."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

ACCESS_TOKEN_TTL = 2 * 60 * 60
JWT_ASSERTION_TTL = 3 * 60


class CredentialSource(str, Enum):
    PASSWORD_FLOW = "password_flow"
    JWT_FLOW = "jwt_flow"
    CLI_FLOW = "cli_flow"
    OFFLINE = "offline"


@dataclass(frozen=True)
class Credential:
    """An opaque bearer value plus the instant it stops being usable."""

    value: str = field(repr=False)
    expires_at: float
    source: CredentialSource
    instance_url: Optional[str] = None

    @classmethod
    def issue(
        cls,
        value: str,
        source: CredentialSource,
        *,
        instance_url: Optional[str] = None,
        ttl: int = ACCESS_TOKEN_TTL,
    ) -> "Credential":
        """Create a credential expiring ``ttl`` seconds from now."""
        return cls(
            value=value,
            expires_at=time.time() + ttl,
            source=source,
            instance_url=instance_url,
        )

    @property
    def is_offline(self) -> bool:
        return self.source is CredentialSource.OFFLINE

    def is_valid(self, now: Optional[float] = None) -> bool:
        current = time.time() if now is None else now
        return current < self.expires_at


OFFLINE_CREDENTIAL = Credential(
    value="offline",
    expires_at=math.inf,
    source=CredentialSource.OFFLINE,
)


class TokenCache:
    """Holds at most one credential; expiry is checked on read."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._credential: Optional[Credential] = None

    def get(self) -> Optional[Credential]:
        with self._lock:
            credential = self._credential
        if credential is not None and credential.is_valid():
            return credential
        return None

    def set(self, credential: Credential) -> None:
        with self._lock:
            self._credential = credential

    def invalidate(self, credential: Optional[Credential] = None) -> bool:
        """Clear the slot.

        When ``credential`` is given the slot is only cleared if it still holds
        that exact credential, so a newer token written by another request is
        left alone.
        """
        with self._lock:
            if self._credential is None:
                return False
            if credential is not None and self._credential is not credential:
                return False
            self._credential = None
            return True
