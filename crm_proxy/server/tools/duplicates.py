from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from crm_proxy.models import ErrorResponse, ResolveRequest
from crm_proxy.server.proxy import (
    PENDING_PATH,
    ProxyRequest,
    ProxyTransportError,
    RequestProxy,
    resolve_path,
)
from crm_proxy.utils.logging import get_logger

logger = get_logger("duplicates")

_PROXY: Optional[RequestProxy] = None


def get_proxy() -> RequestProxy:
    """Return the shared ``RequestProxy`` used by tools and routes."""
    global _PROXY
    if _PROXY is None:
        _PROXY = RequestProxy()
    return _PROXY


def _error(error: str, message: str) -> Dict[str, Any]:
    return ErrorResponse(error=error, message=message).model_dump()


async def get_pending_duplicates() -> Union[List[Dict[str, Any]], Dict[str, Any]]:
    """
    List duplicate customer matches awaiting review.
    Returns:
        List[Dict[str, Any]]: Match records with id, customerA, customerB, matchScore and status,
        or an error dictionary if Salesforce could not be queried.
    """
    try:
        response = await get_proxy().forward(ProxyRequest("GET", PENDING_PATH))
    except ProxyTransportError as exc:
        return _error("Proxy request failed", str(exc))

    if response.is_error or not response.is_json:
        logger.error("Failed to retrieve pending duplicates: %s", response.status_code)
        return response.body if isinstance(response.body, dict) else _error(
            "Upstream error", f"Salesforce returned HTTP {response.status_code}"
        )
    logger.debug("Retrieved %d pending duplicates", len(response.body or []))
    return response.body


async def resolve_duplicate(match_id: str, action: str) -> Dict[str, Any]:
    """
    Resolve a duplicate match.
    Args:
        match_id (str): The ID of the duplicate match record.
        action (str): Either "merge" or "ignore".
    Returns:
        Dict[str, Any]: {"success": bool, "message": str} from Salesforce, or an error dictionary.
    """
    try:
        payload = ResolveRequest(action=action)
    except ValidationError:
        return _error("Invalid request", "action must be 'merge' or 'ignore'")

    try:
        response = await get_proxy().forward(
            ProxyRequest("POST", resolve_path(match_id), body=payload.model_dump())
        )
    except ProxyTransportError as exc:
        return _error("Proxy request failed", str(exc))

    if isinstance(response.body, dict):
        return response.body
    return _error("Upstream error", f"Salesforce returned HTTP {response.status_code}")
