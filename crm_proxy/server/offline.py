"""Canned responses served while no Salesforce credential is available."""

from typing import Any, Dict, List

from crm_proxy.models import CustomerInfo, DuplicateMatch, ResolveResponse

MOCK_ACK_MESSAGE = "Mock operation completed successfully"

_PENDING_MATCHES = (
    DuplicateMatch(
        id="a01XX000001234",
        customerA=CustomerInfo(
            id="a00XX000001111",
            firstName="John",
            lastName="Smith",
            email="john.smith@example.com",
            phone="555-1234",
        ),
        customerB=CustomerInfo(
            id="a00XX000002222",
            firstName="Jon",
            lastName="Smith",
            email="jon.smith@example.com",
            phone="555-1234",
        ),
        matchScore=70,
        status="Pending Review",
    ),
    DuplicateMatch(
        id="a01XX000005678",
        customerA=CustomerInfo(
            id="a00XX000003333",
            firstName="Jane",
            lastName="Doe",
            email="jane.doe@example.com",
            phone="555-5678",
        ),
        customerB=CustomerInfo(
            id="a00XX000004444",
            firstName="Jane",
            lastName="D.",
            email="j.doe@example.com",
            phone="555-5678",
        ),
        matchScore=50,
        status="Pending Review",
    ),
)


def pending_matches() -> List[Dict[str, Any]]:
    """Return a fresh copy of the offline duplicate matches."""
    return [match.model_dump() for match in _PENDING_MATCHES]


def acknowledgement() -> Dict[str, Any]:
    return ResolveResponse(success=True, message=MOCK_ACK_MESSAGE).model_dump()
