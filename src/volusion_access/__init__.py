"""Client for the Volusion product catalog web service."""

from volusion_access.config import VolusionConfig
from volusion_access.errors import (
    DeserializationError,
    PaginationLimitError,
    RetryExhaustedError,
    TransportError,
    VolusionError,
)
from volusion_access.factory import VolusionFactory
from volusion_access.fetch.models import GET_POLICY, SUBMIT_POLICY, RetryPolicy
from volusion_access.products import ProductRecord, VolusionProductsService


__all__ = [
    "GET_POLICY",
    "SUBMIT_POLICY",
    "DeserializationError",
    "PaginationLimitError",
    "ProductRecord",
    "RetryExhaustedError",
    "RetryPolicy",
    "TransportError",
    "VolusionConfig",
    "VolusionError",
    "VolusionFactory",
    "VolusionProductsService",
]
