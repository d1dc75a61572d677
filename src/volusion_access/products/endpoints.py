"""URL construction for the Volusion web service."""

from urllib.parse import urlencode

from volusion_access.config import VolusionConfig


WEB_SERVICE_PATH = "/net/WebService.aspx"

PRODUCTS_EDI_NAME = "Generic\\Products"

# Columns read by the paged export and the public snapshot
PRODUCT_COLUMNS = (
    "p.ProductCode",
    "p.ProductName",
    "p.ProductPrice",
    "p.StockStatus",
)


class EndpointBuilder:
    """Builds fully-qualified request URLs for one store."""

    def __init__(self, config: VolusionConfig) -> None:
        self._config = config

    def public_products_url(self) -> str:
        """Snapshot of every product visible on the storefront."""
        return self._build(
            {
                "API_Name": PRODUCTS_EDI_NAME,
                "SELECT_Columns": ",".join(PRODUCT_COLUMNS),
            }
        )

    def products_url(self) -> str:
        """Paged export of the full catalog.

        The store tracks the export position itself, so the same URL is
        requested until it answers with an empty page.
        """
        return self._build(
            {
                "EDI_Name": PRODUCTS_EDI_NAME,
                "SELECT_Columns": ",".join(PRODUCT_COLUMNS),
            }
        )

    def update_products_url(self) -> str:
        """Target for product update documents."""
        return self._build({"Import": "Update"})

    def _build(self, params: dict[str, str]) -> str:
        query = urlencode(
            {
                "Login": self._config.login,
                "EncryptedPassword": self._config.encrypted_password,
                **params,
            },
            safe="\\,",
        )
        return f"{self._config.shop_url}{WEB_SERVICE_PATH}?{query}"
