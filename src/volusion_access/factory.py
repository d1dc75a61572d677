"""Entry point for building store services."""

from volusion_access.config import VolusionConfig
from volusion_access.products.service import VolusionProductsService
from volusion_access.settings import get_settings


class VolusionFactory:
    """Creates services bound to a store configuration."""

    def create_products_service(
        self, config: VolusionConfig | None = None
    ) -> VolusionProductsService:
        """Create a products service.

        Args:
            config: Store connection settings. Read from VOLUSION_*
                environment variables when omitted.

        Returns:
            Service using the default HTTP transport and retry policies.
        """
        if config is None:
            config = get_settings().to_config()
        return VolusionProductsService(config)
