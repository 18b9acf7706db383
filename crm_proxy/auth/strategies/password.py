"""OAuth 2.0 username-password grant."""

from typing import Dict

from ..credentials import CredentialSource
from .base import OAuthTokenStrategy


class PasswordStrategy(OAuthTokenStrategy):
    """Exchange the integration user's password for an access token.

    Salesforce expects the user's security token appended to the password,
    so both are sent concatenated in the single ``password`` form field. An
    empty ``security_token`` (trusted IP ranges) sends the password alone.
    """

    name = "password"
    source = CredentialSource.PASSWORD_FLOW
    required_fields = ("client_id", "client_secret", "username", "password")

    def _grant_payload(self) -> Dict[str, str]:
        return {
            "grant_type": "password",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "username": self.config.username,
            "password": f"{self.config.password}{self.config.security_token}",
        }
