import json

import httpx
import pytest
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from crm_proxy.auth.broker import CredentialBroker
from crm_proxy.auth.credentials import Credential, CredentialSource
from crm_proxy.config import BrokerConfig, ServerSettings
from crm_proxy.server import app
from crm_proxy.server.proxy import RequestProxy

INSTANCE = "https://acme.my.salesforce.com"


class FakeFastMCP:
    def __init__(self, *, name, instructions):
        self.name = name
        self.instructions = instructions
        self.registered_tools = {}
        self.custom_routes = {}

    def tool(self, *, name, description):
        def decorator(func):
            self.registered_tools[name] = {"description": description, "func": func}
            return func

        return decorator

    def custom_route(self, path, *, methods):
        def decorator(func):
            self.custom_routes[path] = {"methods": methods, "func": func}
            return func

        return decorator


def make_request(method, path, *, query=b"", body=None, path_params=None):
    payload = body if isinstance(body, bytes) else json.dumps(body).encode() if body is not None else b""

    async def receive():
        return {"type": "http.request", "body": payload, "more_body": False}

    scope = {
        "type": "http",
        "method": method,
        "scheme": "http",
        "server": ("testserver", 80),
        "root_path": "",
        "path": path,
        "query_string": query,
        "headers": [(b"content-type", b"application/json")],
        "path_params": path_params or {},
    }
    return Request(scope, receive)


def build_server(monkeypatch, *, credential=None, handler=None):
    monkeypatch.setattr(app, "FastMCP", FakeFastMCP)
    broker = CredentialBroker(BrokerConfig(instance_url=INSTANCE, cli_enabled=False), strategies=[])
    if credential is not None:
        broker.cache.set(credential)
    seen = []

    def default_handler(request):
        seen.append(request)
        return httpx.Response(200, json=[{"id": "a01"}])

    transport = httpx.MockTransport(handler or default_handler)
    server = app.create_server(RequestProxy(broker, transport=transport))
    return server, seen


def route(server, path):
    return server.custom_routes[path]["func"]


def online_credential():
    return Credential.issue("00Dxx!token", CredentialSource.PASSWORD_FLOW)


def test_create_server_registers_routes_and_tools(monkeypatch):
    server, _ = build_server(monkeypatch)

    assert set(server.registered_tools) == {"get_pending_duplicates", "resolve_duplicate"}
    assert server.custom_routes["/health"]["methods"] == ["GET"]
    assert server.custom_routes["/api/duplicates/pending"]["methods"] == ["GET"]
    assert server.custom_routes["/api/duplicates/{match_id}/resolve"]["methods"] == ["POST"]


@pytest.mark.asyncio
async def test_health_is_independent_of_credentials(monkeypatch):
    server, seen = build_server(monkeypatch)

    response = await route(server, "/health")(make_request("GET", "/health"))
    body = json.loads(response.body)

    assert response.status_code == 200
    assert body["status"] == "OK"
    assert "T" in body["timestamp"]
    assert seen == []


@pytest.mark.asyncio
async def test_pending_route_forwards_query_string(monkeypatch):
    server, seen = build_server(monkeypatch, credential=online_credential())

    response = await route(server, "/api/duplicates/pending")(
        make_request("GET", "/api/duplicates/pending", query=b"limit=5")
    )

    assert response.status_code == 200
    assert json.loads(response.body) == [{"id": "a01"}]
    assert str(seen[0].url) == f"{INSTANCE}/services/apexrest/duplicates/pending?limit=5"


@pytest.mark.asyncio
async def test_pending_route_serves_offline_data(monkeypatch):
    server, seen = build_server(monkeypatch)

    response = await route(server, "/api/duplicates/pending")(
        make_request("GET", "/api/duplicates/pending")
    )

    assert response.status_code == 200
    assert response.headers[app.OFFLINE_HEADER] == "offline"
    assert len(json.loads(response.body)) == 2
    assert seen == []


@pytest.mark.asyncio
async def test_resolve_route_forwards_action(monkeypatch):
    server, seen = build_server(monkeypatch, credential=online_credential())

    response = await route(server, "/api/duplicates/{match_id}/resolve")(
        make_request(
            "POST",
            "/api/duplicates/a01XX000001234/resolve",
            body={"action": "ignore"},
            path_params={"match_id": "a01XX000001234"},
        )
    )

    assert response.status_code == 200
    assert seen[0].url.path == "/services/apexrest/duplicates/a01XX000001234/resolve"
    assert json.loads(seen[0].content) == {"action": "ignore"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"action": "delete"}, {}, b"not json"])
async def test_resolve_route_rejects_invalid_body(monkeypatch, body):
    server, seen = build_server(monkeypatch, credential=online_credential())

    response = await route(server, "/api/duplicates/{match_id}/resolve")(
        make_request(
            "POST",
            "/api/duplicates/a01/resolve",
            body=body,
            path_params={"match_id": "a01"},
        )
    )

    assert response.status_code == 400
    assert json.loads(response.body)["error"] == "Invalid request"
    assert seen == []


@pytest.mark.asyncio
async def test_offline_resolve_route_acknowledges(monkeypatch):
    server, _ = build_server(monkeypatch)

    response = await route(server, "/api/duplicates/{match_id}/resolve")(
        make_request(
            "POST",
            "/api/duplicates/a01/resolve",
            body={"action": "merge"},
            path_params={"match_id": "a01"},
        )
    )

    assert json.loads(response.body) == {
        "success": True,
        "message": "Mock operation completed successfully",
    }


@pytest.mark.asyncio
async def test_upstream_error_status_is_relayed(monkeypatch):
    def handler(request):
        return httpx.Response(500, json=[{"errorCode": "APEX_ERROR"}])

    server, _ = build_server(monkeypatch, credential=online_credential(), handler=handler)

    response = await route(server, "/api/duplicates/pending")(
        make_request("GET", "/api/duplicates/pending")
    )

    assert response.status_code == 500
    assert json.loads(response.body) == [{"errorCode": "APEX_ERROR"}]


@pytest.mark.asyncio
async def test_transport_failure_becomes_proxy_error(monkeypatch):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    server, _ = build_server(monkeypatch, credential=online_credential(), handler=handler)

    response = await route(server, "/api/duplicates/pending")(
        make_request("GET", "/api/duplicates/pending")
    )

    assert response.status_code == 500
    assert json.loads(response.body) == {"error": "Proxy request failed", "message": "timed out"}


@pytest.mark.asyncio
async def test_malformed_instance_url_becomes_proxy_error(monkeypatch):
    credential = Credential.issue(
        "00Dxx!token", CredentialSource.CLI_FLOW, instance_url="https://[::1"
    )
    server, seen = build_server(monkeypatch, credential=credential)

    response = await route(server, "/api/duplicates/pending")(
        make_request("GET", "/api/duplicates/pending")
    )

    assert response.status_code == 500
    assert json.loads(response.body)["error"] == "Proxy request failed"
    assert seen == []


def test_http_middleware_configures_cors():
    middleware = app.create_http_middleware(ServerSettings(cors_allow_origins=("http://localhost:5173",)))

    assert len(middleware) == 1
    assert middleware[0].cls is CORSMiddleware
    assert middleware[0].kwargs["allow_origins"] == ["http://localhost:5173"]
