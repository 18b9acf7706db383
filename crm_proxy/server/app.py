from datetime import datetime, timezone
from typing import List, Optional

from fastmcp import FastMCP
from pydantic import ValidationError
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from crm_proxy.config import ServerSettings
from crm_proxy.models import ErrorResponse, ResolveRequest
from crm_proxy.server.proxy import (
    PENDING_PATH,
    ProxyRequest,
    ProxyTransportError,
    RequestProxy,
    resolve_path,
)
from crm_proxy.server.tools import duplicates as duplicates_tools
from crm_proxy.utils.logging import get_logger

logger = get_logger("server")

OFFLINE_HEADER = "X-Proxy-Mode"


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message).model_dump()
    return JSONResponse(body, status_code=status_code)


async def proxy_response(proxy: RequestProxy, request: ProxyRequest) -> Response:
    """Forward ``request`` and turn the outcome into a Starlette response."""
    try:
        upstream = await proxy.forward(request)
    except ProxyTransportError as exc:
        return _error_response(500, "Proxy request failed", str(exc))

    headers = {OFFLINE_HEADER: "offline"} if upstream.offline else None
    if upstream.is_json:
        return JSONResponse(upstream.body, status_code=upstream.status_code, headers=headers)
    return Response(
        content=upstream.text,
        status_code=upstream.status_code,
        media_type=upstream.content_type,
        headers=headers,
    )


def create_http_middleware(settings: Optional[ServerSettings] = None) -> List[Middleware]:
    """Return the Starlette middleware stack for the browser-facing routes."""
    settings = settings or ServerSettings.from_env()
    return [
        Middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allow_origins),
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )
    ]


def create_server(proxy: Optional[RequestProxy] = None) -> FastMCP:
    """Create the proxy server with its REST routes and MCP tools."""
    proxy = proxy or duplicates_tools.get_proxy()

    mcp = FastMCP(
        name="CRM Duplicate Proxy",
        instructions="Review and resolve duplicate customer records stored in Salesforce.",
    )

    mcp.tool(
        name='get_pending_duplicates',
        description='List duplicate customer matches awaiting review. Returns match records with both customers and a match score.',
    )(duplicates_tools.get_pending_duplicates)
    mcp.tool(
        name='resolve_duplicate',
        description='Resolve a duplicate match by ID with action "merge" or "ignore". Returns success and a message.',
    )(duplicates_tools.resolve_duplicate)

    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> JSONResponse:
        """Liveness probe; does not touch Salesforce credentials."""
        return JSONResponse({
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @mcp.custom_route("/api/duplicates/pending", methods=["GET"])
    async def pending_duplicates(request: Request) -> Response:
        return await proxy_response(
            proxy, ProxyRequest("GET", PENDING_PATH, query=request.url.query)
        )

    @mcp.custom_route("/api/duplicates/{match_id}/resolve", methods=["POST"])
    async def resolve_duplicate(request: Request) -> Response:
        match_id = request.path_params["match_id"]
        try:
            payload = ResolveRequest.model_validate(await request.json())
        except (ValueError, ValidationError) as exc:
            logger.debug("Rejected resolve request for %s: %s", match_id, exc)
            return _error_response(
                400, "Invalid request", "Body must be {\"action\": \"merge\" | \"ignore\"}"
            )

        return await proxy_response(
            proxy,
            ProxyRequest(
                "POST",
                resolve_path(match_id),
                query=request.url.query,
                body=payload.model_dump(),
            ),
        )

    return mcp
