"""Product record model."""

import re
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator


TAG_SKU = "ProductCode"
TAG_QUANTITY = "StockStatus"
TAG_PRICE = "ProductPrice"
TAG_NAME = "ProductName"

MODELED_TAGS = frozenset({TAG_SKU, TAG_QUANTITY, TAG_PRICE, TAG_NAME})

# Unprefixed XML element name
_TAG_PATTERN = re.compile(r"^[^\W\d][\w.\-]*$")


class ProductRecord(BaseModel):
    """A single catalog entry as exchanged with the store.

    The SKU (``ProductCode`` on the wire) is the key the store uses when
    applying updates. Attributes the model does not name are kept in
    ``extra`` under their XML tag so they survive a read/write cycle.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sku: Annotated[str, Field(min_length=1, description="Product code")]
    quantity: int | None = Field(default=None, description="Units in stock")
    price: Decimal | None = Field(default=None, description="Unit price")
    name: str | None = Field(default=None, description="Display name")
    extra: dict[str, str] = Field(
        default_factory=dict, description="Other product columns by XML tag"
    )

    @field_validator("extra")
    @classmethod
    def validate_extra_tags(cls, v: dict[str, str]) -> dict[str, str]:
        """Only accept well-formed tags the model does not already carry."""
        for tag in v:
            if tag in MODELED_TAGS:
                msg = f"<{tag}> is a modeled field and cannot be set through extra"
                raise ValueError(msg)
            if not _TAG_PATTERN.match(tag):
                msg = f"{tag!r} is not a valid XML element name"
                raise ValueError(msg)
        return v


Page = list[ProductRecord]
