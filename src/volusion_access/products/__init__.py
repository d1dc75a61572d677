"""Product catalog operations: paged reads, snapshots, and batch updates."""

from volusion_access.products.delay import ApiDelay
from volusion_access.products.endpoints import EndpointBuilder
from volusion_access.products.models import Page, ProductRecord
from volusion_access.products.serializer import decode_products, encode_products
from volusion_access.products.service import TransportProtocol, VolusionProductsService


__all__ = [
    "ApiDelay",
    "EndpointBuilder",
    "Page",
    "ProductRecord",
    "TransportProtocol",
    "VolusionProductsService",
    "decode_products",
    "encode_products",
]
