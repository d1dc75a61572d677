"""XML (de)serialization for Volusion product documents.

The store exchanges products as::

    <xmldata>
      <Products>
        <ProductCode>ah-chairbamboo</ProductCode>
        <StockStatus>26</StockStatus>
      </Products>
    </xmldata>

Parsing goes through defusedxml to refuse entity expansion attacks.
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from xml.etree.ElementTree import Element, ParseError, SubElement, tostring

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException
from pydantic import ValidationError

from volusion_access.errors import DeserializationError
from volusion_access.products.models import (
    TAG_NAME,
    TAG_PRICE,
    TAG_QUANTITY,
    TAG_SKU,
    Page,
    ProductRecord,
)


ROOT_TAG = "xmldata"
PRODUCT_TAG = "Products"


def encode_products(records: Iterable[ProductRecord]) -> bytes:
    """Serialize records into an update document.

    Args:
        records: Products to write. Order is preserved.

    Returns:
        UTF-8 encoded XML document.
    """
    root = Element(ROOT_TAG)
    for record in records:
        product = SubElement(root, PRODUCT_TAG)
        SubElement(product, TAG_SKU).text = record.sku
        if record.quantity is not None:
            SubElement(product, TAG_QUANTITY).text = str(record.quantity)
        if record.price is not None:
            SubElement(product, TAG_PRICE).text = str(record.price)
        if record.name is not None:
            SubElement(product, TAG_NAME).text = record.name
        for tag, value in record.extra.items():
            SubElement(product, tag).text = value

    return tostring(root, encoding="utf-8", xml_declaration=True)


def decode_products(body: bytes) -> Page | None:
    """Parse a products response.

    Args:
        body: Raw response body.

    Returns:
        Records in document order, an empty list for a document without
        products, or None for an empty body.

    Raises:
        DeserializationError: If the body is not a well-formed products
            document.
    """
    if not body.strip():
        return None

    try:
        root = DefusedET.fromstring(body)
    except ParseError as e:
        line, column = e.position
        msg = f"Malformed products XML: {e}"
        raise DeserializationError(msg, line=line, column=column) from e
    except DefusedXmlException as e:
        msg = f"Refused unsafe products XML: {e}"
        raise DeserializationError(msg) from e

    if root.tag != ROOT_TAG:
        msg = f"Unexpected root element <{root.tag}>, expected <{ROOT_TAG}>"
        raise DeserializationError(msg)

    return [_parse_product(element) for element in root.findall(PRODUCT_TAG)]


def _parse_product(element: Element) -> ProductRecord:
    sku: str | None = None
    quantity: int | None = None
    price: Decimal | None = None
    name: str | None = None
    extra: dict[str, str] = {}

    for child in element:
        text = (child.text or "").strip()
        if child.tag == TAG_SKU:
            sku = text
        elif child.tag == TAG_QUANTITY:
            quantity = _parse_int(text, sku)
        elif child.tag == TAG_PRICE:
            price = _parse_decimal(text, sku)
        elif child.tag == TAG_NAME:
            name = text or None
        else:
            extra[child.tag] = text

    if not sku:
        msg = f"Product element without <{TAG_SKU}>"
        raise DeserializationError(msg)

    try:
        return ProductRecord(
            sku=sku, quantity=quantity, price=price, name=name, extra=extra
        )
    except ValidationError as e:
        msg = f"Invalid product {sku!r}: {e}"
        raise DeserializationError(msg) from e


def _parse_int(text: str, sku: str | None) -> int | None:
    if not text:
        return None
    try:
        return int(text)
    except ValueError as e:
        msg = f"Invalid <{TAG_QUANTITY}> {text!r} for product {sku!r}"
        raise DeserializationError(msg) from e


def _parse_decimal(text: str, sku: str | None) -> Decimal | None:
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation as e:
        msg = f"Invalid <{TAG_PRICE}> {text!r} for product {sku!r}"
        raise DeserializationError(msg) from e
