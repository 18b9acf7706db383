from .base_models import (
    CustomerInfo,
    DuplicateMatch,
    ErrorResponse,
    ResolveRequest,
    ResolveResponse,
)

__all__ = [
    "CustomerInfo",
    "DuplicateMatch",
    "ErrorResponse",
    "ResolveRequest",
    "ResolveResponse",
]
