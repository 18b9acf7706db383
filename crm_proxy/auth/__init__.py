"""Salesforce credential acquisition, caching and fallback."""

from .broker import CredentialBroker, build_strategies, get_broker
from .credentials import (
    ACCESS_TOKEN_TTL,
    JWT_ASSERTION_TTL,
    OFFLINE_CREDENTIAL,
    Credential,
    CredentialSource,
    TokenCache,
)
from .errors import AuthenticationError, ConfigurationIncomplete, StrategyFailure

__all__ = [
    "ACCESS_TOKEN_TTL",
    "JWT_ASSERTION_TTL",
    "OFFLINE_CREDENTIAL",
    "AuthenticationError",
    "ConfigurationIncomplete",
    "Credential",
    "CredentialBroker",
    "CredentialSource",
    "StrategyFailure",
    "TokenCache",
    "build_strategies",
    "get_broker",
]
