"""Credential strategies package.

Each strategy implements one way of obtaining a Salesforce access token.
:data:`DEFAULT_STRATEGY_ORDER` is the priority the broker tries them in,
cheapest first.
"""

from .base import CredentialStrategy, OAuthTokenStrategy
from .jwt_bearer import JwtBearerStrategy
from .password import PasswordStrategy
from .session import CliStrategy, SessionTokenStrategy

DEFAULT_STRATEGY_ORDER = (
    SessionTokenStrategy,
    PasswordStrategy,
    JwtBearerStrategy,
    CliStrategy,
)

__all__ = [
    "CredentialStrategy",
    "OAuthTokenStrategy",
    "SessionTokenStrategy",
    "PasswordStrategy",
    "JwtBearerStrategy",
    "CliStrategy",
    "DEFAULT_STRATEGY_ORDER",
]
