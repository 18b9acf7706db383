"""HTTP client that attaches a Salesforce credential to outgoing requests.

This module provides an authenticated HTTP client that manages headers
for Salesforce REST API calls made on behalf of the browser client.
"""

import logging

import httpx

from crm_proxy.auth.credentials import Credential
from crm_proxy.config import get_api_timeout
from crm_proxy.utils.security import mask_token

logger = logging.getLogger(__name__)


def default_timeout() -> httpx.Timeout:
    """Build the upstream timeout from ``SF_API_TIMEOUT``."""
    connect, read = get_api_timeout()
    return httpx.Timeout(read, connect=connect)


class AuthenticatedClient(httpx.AsyncClient):
    """HTTP client that injects the broker's credential into every request.

    Any ``Authorization`` or ``Cookie`` header that leaked in from the
    inbound browser request is removed before the Salesforce bearer token
    is attached, so upstream only ever sees the broker's credential.

    :param credential: Credential to present to Salesforce
    :type credential: Credential
    """

    # anything we consider "polluted" and must remove if present
    _FORBID_SUBSTRS = (
        "authorization",
        "cookie",
    )

    def __init__(self, *args, credential: Credential, **kwargs):
        kwargs.setdefault("timeout", default_timeout())
        super().__init__(*args, **kwargs)
        self.credential = credential

    async def send(self, request: httpx.Request, **kwargs) -> httpx.Response:
        """Single interception point for all HTTP requests.

        :param request: The HTTP request to send
        :type request: httpx.Request
        :return: The HTTP response
        :rtype: httpx.Response
        """
        if not request.extensions.get("auth_injected"):
            self._inject_headers(request)
            request.extensions["auth_injected"] = True

        logger.debug("=== SEND: %s %s", request.method, request.url)
        for k, v in request.headers.items():
            if k.lower() == "authorization":
                logger.debug("  %s: Bearer %s", k, mask_token(self.credential.value))
            else:
                logger.debug("  %s: %s", k, v)

        resp = await super().send(request, **kwargs)
        logger.debug(
            "=== RESPONSE: %s for %s %s", resp.status_code, request.method, request.url
        )
        return resp

    def _inject_headers(self, request: httpx.Request) -> None:
        removed = []
        for key in list(request.headers.keys()):
            if any(s in key.lower() for s in self._FORBID_SUBSTRS):
                removed.append(key)
                del request.headers[key]
        if removed:
            logger.debug("Scrubbed headers from request: %s", removed)

        request.headers["Authorization"] = f"Bearer {self.credential.value}"
        request.headers["Content-Type"] = "application/json"
        request.headers["Accept"] = "application/json"
