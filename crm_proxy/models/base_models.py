"""Pydantic models for the duplicate-review API.

These mirror the payloads of the Salesforce Apex REST resource at
``/services/apexrest/duplicates`` that the proxy fronts. They describe the
wire shape; the proxy relays upstream bodies unchanged and only uses the
models to validate inbound requests and to build offline responses.
"""

from typing import Literal

from pydantic import BaseModel


class CustomerInfo(BaseModel):
    id: str
    firstName: str
    lastName: str
    email: str
    phone: str


class DuplicateMatch(BaseModel):
    """A pair of customer records suspected to be the same person.

    :param id: Match record ID
    :type id: str
    :param customerA: First customer of the pair
    :type customerA: CustomerInfo
    :param customerB: Second customer of the pair
    :type customerB: CustomerInfo
    :param matchScore: Matching rule score, 0-100
    :type matchScore: int
    :param status: Review status, e.g. ``Pending Review``
    :type status: str
    """

    id: str
    customerA: CustomerInfo
    customerB: CustomerInfo
    matchScore: int
    status: str


class ResolveRequest(BaseModel):
    action: Literal["merge", "ignore"]


class ResolveResponse(BaseModel):
    success: bool
    message: str


class ErrorResponse(BaseModel):
    error: str
    message: str
