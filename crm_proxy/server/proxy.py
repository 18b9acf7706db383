"""Forward duplicate-review API calls to Salesforce with the broker's credential."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx
from starlette.concurrency import run_in_threadpool

from crm_proxy.auth.broker import CredentialBroker, get_broker
from crm_proxy.auth.credentials import Credential
from crm_proxy.server import offline
from crm_proxy.utils.http_client import AuthenticatedClient
from crm_proxy.utils.logging import get_logger

logger = get_logger("proxy")

APEX_REST_PATH = "/services/apexrest/duplicates"
PENDING_PATH = "/pending"


def resolve_path(match_id: str) -> str:
    return f"/{quote(match_id, safe='')}/resolve"


class ProxyTransportError(RuntimeError):
    """Salesforce could not be reached at all (as opposed to an error status)."""


@dataclass(frozen=True)
class ProxyRequest:
    method: str
    path_suffix: str
    query: str = ""
    body: Any = None


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and body to relay to the caller.

    ``body`` holds the decoded JSON payload. When upstream answered with
    something that is not JSON, ``body`` is ``None`` and the raw payload is
    kept in ``text`` together with its ``content_type``.
    """

    status_code: int
    body: Any = None
    text: Optional[str] = None
    content_type: str = "application/json"
    offline: bool = False

    @property
    def is_json(self) -> bool:
        return self.text is None

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


class RequestProxy:
    """Relays :class:`ProxyRequest` objects to the Apex REST duplicates resource."""

    def __init__(
        self,
        broker: Optional[CredentialBroker] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.broker = broker or get_broker()
        self._transport = transport

    def upstream_url(self, credential: Credential, request: ProxyRequest) -> str:
        base = (credential.instance_url or self.broker.config.instance_url).rstrip("/")
        url = f"{base}{APEX_REST_PATH}{request.path_suffix}"
        if request.query:
            url = f"{url}?{request.query}"
        return url

    async def forward(self, request: ProxyRequest) -> UpstreamResponse:
        """Send ``request`` upstream, or answer it locally when offline.

        :raises ProxyTransportError: If Salesforce could not be reached, or the
            upstream URL or credential header could not be built
        """
        credential = await run_in_threadpool(self.broker.resolve)

        if credential.is_offline:
            logger.info(
                "Offline mode: answering %s %s locally", request.method, request.path_suffix
            )
            return self._offline_response(request)

        url = self.upstream_url(credential, request)
        method = request.method.upper()
        content = None
        if method != "GET" and request.body is not None:
            content = json.dumps(request.body)

        try:
            async with AuthenticatedClient(
                credential=credential, transport=self._transport
            ) as client:
                response = await client.request(method, url, content=content)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.error("Proxy error calling %s %s: %s", method, url, exc)
            raise ProxyTransportError(str(exc) or type(exc).__name__) from exc

        if response.status_code == 401:
            logger.warning("Salesforce rejected the %s credential", credential.source.value)
            self.broker.invalidate(credential)

        return _relay(response)

    def _offline_response(self, request: ProxyRequest) -> UpstreamResponse:
        if request.method.upper() == "GET":
            return UpstreamResponse(200, offline.pending_matches(), offline=True)
        return UpstreamResponse(200, offline.acknowledgement(), offline=True)


def _relay(response: httpx.Response) -> UpstreamResponse:
    content_type = response.headers.get("content-type", "application/json")
    if not response.content:
        return UpstreamResponse(response.status_code, None, text="", content_type=content_type)
    try:
        body = response.json()
    except ValueError:
        return UpstreamResponse(
            response.status_code, None, text=response.text, content_type=content_type
        )
    return UpstreamResponse(response.status_code, body)
