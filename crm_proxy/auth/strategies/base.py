"""Base credential strategy interface.

This module defines the abstract base class for credential strategies,
allowing different Salesforce authentication mechanisms to be plugged into
the broker in a fixed priority order.

The module provides:
- CredentialStrategy: Core strategy interface
- OAuthTokenStrategy: Shared token-endpoint exchange for the OAuth grants
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

import requests

from ...config import BrokerConfig, get_api_timeout
from ..credentials import Credential, CredentialSource
from ..errors import ConfigurationIncomplete, StrategyFailure

logger = logging.getLogger(__name__)


class CredentialStrategy(ABC):
    """Base class for all credential strategies.

    A strategy is eligible only when every field named by
    :attr:`required_fields` is non-empty in its :class:`BrokerConfig`.
    Ineligible strategies are skipped by the broker rather than attempted.
    """

    name: str = "strategy"
    source: CredentialSource
    required_fields: tuple = ()

    def __init__(self, config: BrokerConfig):
        self.config = config

    def missing_fields(self) -> List[str]:
        """Return the required config fields that are empty.

        :return: Names of missing :class:`BrokerConfig` fields
        :rtype: List[str]
        """
        return [name for name in self.required_fields if not getattr(self.config, name)]

    @property
    def is_configured(self) -> bool:
        return not self.missing_fields()

    def attempt(self) -> Credential:
        """Try to obtain a credential.

        :return: A freshly issued credential
        :rtype: Credential
        :raises ConfigurationIncomplete: If required configuration is missing
        :raises StrategyFailure: If the strategy ran and did not succeed
        """
        missing = self.missing_fields()
        if missing:
            raise ConfigurationIncomplete(self.name, missing)
        return self._attempt()

    @abstractmethod
    def _attempt(self) -> Credential:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


class OAuthTokenStrategy(CredentialStrategy):
    """Strategy that posts a form-encoded grant to the OAuth token endpoint."""

    @abstractmethod
    def _grant_payload(self) -> Dict[str, str]:
        pass

    def _attempt(self) -> Credential:
        payload = self._grant_payload()
        try:
            response = requests.post(
                self.config.token_url,
                data=payload,
                timeout=get_api_timeout(),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except requests.RequestException as exc:
            raise StrategyFailure(
                self.name, f"token request failed: {type(exc).__name__}"
            ) from exc

        if response.status_code != 200:
            raise StrategyFailure(
                self.name,
                f"token endpoint returned HTTP {response.status_code}: "
                f"{_error_description(response)}",
            )

        try:
            token_data = response.json()
        except ValueError as exc:
            raise StrategyFailure(self.name, "token response was not JSON") from exc

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise StrategyFailure(self.name, "token response did not include access_token")

        logger.info("New Salesforce access token obtained via %s", self.name)
        return Credential.issue(
            access_token,
            self.source,
            instance_url=token_data.get("instance_url") or None,
        )


def _error_description(response) -> str:
    """Summarize an OAuth error body without echoing anything sensitive."""
    try:
        body = response.json()
    except ValueError:
        return "unparseable error body"
    if isinstance(body, dict):
        error = body.get("error") or "unknown_error"
        description = body.get("error_description")
        return f"{error} ({description})" if description else str(error)
    return "unexpected error body"
