"""Credential broker: cached token first, then strategies, then offline."""

from __future__ import annotations

import threading
from typing import List, Optional, Sequence

from crm_proxy.config import BrokerConfig
from crm_proxy.utils.logging import get_logger

from .credentials import OFFLINE_CREDENTIAL, Credential, TokenCache
from .errors import AuthenticationError
from .strategies import DEFAULT_STRATEGY_ORDER, CredentialStrategy

logger = get_logger("broker")


def build_strategies(config: BrokerConfig) -> List[CredentialStrategy]:
    """Instantiate the default strategies, in priority order, for ``config``."""
    return [strategy_cls(config) for strategy_cls in DEFAULT_STRATEGY_ORDER]


class CredentialBroker:
    """Hand out a usable Salesforce credential for every proxied request.

    A cached, unexpired credential is returned without any I/O. Otherwise one
    resolution pass at a time walks the strategies in order and caches the
    first credential obtained. When nothing works the offline credential is
    returned instead, so :meth:`resolve` never raises.
    """

    def __init__(
        self,
        config: BrokerConfig,
        strategies: Optional[Sequence[CredentialStrategy]] = None,
        cache: Optional[TokenCache] = None,
    ) -> None:
        self.config = config
        self.strategies: List[CredentialStrategy] = (
            list(strategies) if strategies is not None else build_strategies(config)
        )
        self.cache = cache or TokenCache()
        self._resolve_lock = threading.Lock()

    def eligible_strategies(self) -> List[CredentialStrategy]:
        return [strategy for strategy in self.strategies if strategy.is_configured]

    def resolve(self) -> Credential:
        cached = self.cache.get()
        if cached is not None:
            return cached

        with self._resolve_lock:
            # Another request may have refreshed the cache while we waited.
            cached = self.cache.get()
            if cached is not None:
                return cached
            return self._resolve_uncached()

    def _resolve_uncached(self) -> Credential:
        for strategy in self.strategies:
            missing = strategy.missing_fields()
            if missing:
                logger.debug(
                    "Skipping %s strategy, not configured (missing %s)",
                    strategy.name,
                    ", ".join(missing),
                )
                continue

            try:
                credential = strategy.attempt()
            except AuthenticationError as exc:
                logger.warning("%s", exc)
                continue
            except Exception:
                logger.exception("Unexpected error in %s strategy", strategy.name)
                continue

            self.cache.set(credential)
            logger.info(
                "Cached Salesforce credential from %s strategy", strategy.name
            )
            return credential

        logger.warning(
            "All Salesforce authentication strategies failed, serving offline data"
        )
        return OFFLINE_CREDENTIAL

    def invalidate(self, credential: Optional[Credential] = None) -> None:
        """Drop the cached credential, e.g. after upstream rejected it."""
        if self.cache.invalidate(credential):
            logger.info("Cleared cached Salesforce credential")

    def describe(self) -> List[str]:
        """Names of the strategies that will be attempted, in order."""
        return [strategy.name for strategy in self.eligible_strategies()]


_BROKER_INSTANCE: Optional[CredentialBroker] = None


def get_broker() -> CredentialBroker:
    """Return the shared ``CredentialBroker`` singleton."""
    global _BROKER_INSTANCE
    if _BROKER_INSTANCE is None:
        _BROKER_INSTANCE = CredentialBroker(BrokerConfig.from_env())
    return _BROKER_INSTANCE
