"""OAuth 2.0 JWT bearer grant."""

from __future__ import annotations

import logging
import time
from typing import Dict

import jwt

from ..credentials import JWT_ASSERTION_TTL, CredentialSource
from ..errors import StrategyFailure
from .base import OAuthTokenStrategy

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class JwtBearerStrategy(OAuthTokenStrategy):
    """Sign an RS256 assertion with the connected app's key and exchange it.

    The assertion is only valid for three minutes; the access token it buys
    follows the usual two-hour window.
    """

    name = "jwt"
    source = CredentialSource.JWT_FLOW
    required_fields = ("client_id", "username", "jwt_private_key")

    def build_assertion(self) -> str:
        now = int(time.time())
        payload = {
            "iss": self.config.client_id,
            "sub": self.config.username,
            "aud": self.config.instance_url,
            "iat": now,
            "exp": now + JWT_ASSERTION_TTL,
        }
        try:
            return jwt.encode(
                payload,
                self.config.jwt_private_key,
                algorithm="RS256",
                headers={"typ": "JWT"},
            )
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            # The exception text may quote key material; report the type only.
            raise StrategyFailure(
                self.name, f"could not sign assertion ({type(exc).__name__})"
            ) from None

    def _grant_payload(self) -> Dict[str, str]:
        assertion = self.build_assertion()
        logger.debug("Signed JWT assertion for %s", self.config.username)
        return {"grant_type": JWT_BEARER_GRANT, "assertion": assertion}
