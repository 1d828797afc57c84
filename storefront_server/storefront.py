"""Storefront state shared by the MCP and HTTP front ends."""

import logging
import os
from typing import Optional

from .cart import CartStore
from .catalog import ProductCatalog
from .filters import FilterSortEngine
from .models import Product, Settings
from .storage import FileStorage, KeyValueStorage
from .store_client import StoreApiClient

logger = logging.getLogger(__name__)


def load_settings() -> Settings:
    """Read configuration from STOREFRONT_* environment variables."""
    settings = Settings()
    api_url = os.environ.get("STOREFRONT_API_URL")
    cart_file = os.environ.get("STOREFRONT_CART_FILE")
    timeout = os.environ.get("STOREFRONT_TIMEOUT")

    if api_url:
        settings.api_url = api_url
    if cart_file:
        settings.cart_file = cart_file
    if timeout:
        try:
            settings.timeout = float(timeout)
        except ValueError:
            logger.warning(f"Ignoring invalid STOREFRONT_TIMEOUT: {timeout}")
    return settings


class Storefront:
    """One cart, one catalog listing and its filter engine."""

    def __init__(
        self,
        client: StoreApiClient,
        storage: KeyValueStorage,
    ) -> None:
        self.client = client
        self.catalog = ProductCatalog(client)
        self.cart = CartStore(storage)
        self.engine = FilterSortEngine()
        self.badge_count = 0
        self.cart.subscribe(self._update_badge)
        self.cart.load()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Storefront":
        settings = settings or load_settings()
        logger.info(f"Using catalog API at {settings.api_url}")
        client = StoreApiClient(base_url=settings.api_url, timeout=settings.timeout)
        return cls(client, FileStorage(settings.cart_file))

    def _update_badge(self, count: int) -> None:
        self.badge_count = count

    def browse(
        self,
        category: Optional[str] = None,
        price_bracket: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> list[Product]:
        """
        Load a listing and apply filters to it.

        The catalog is refetched only when the requested category differs
        from the cached listing or nothing has been loaded yet. The filter
        engine always works on the catalog's current listing and its filters
        reset whenever that listing is replaced.

        Raises:
            FetchError: If the catalog cannot be loaded
            ValueError: If the price bracket or sort key is unknown
        """
        if not self.catalog.products or category != self.catalog.category:
            if category:
                products = self.catalog.fetch_by_category(category)
            else:
                products = self.catalog.fetch_all()
            self.engine.set_products(products)
            self.engine.clear_filters()
        elif self.engine.products != self.catalog.products:
            logger.debug("Catalog listing changed, resetting filters")
            self.engine.set_products(self.catalog.products)
            self.engine.clear_filters()

        return self.engine.update(price_bracket=price_bracket, search_term=search, sort_key=sort)

    def add_product(self, product_id: int) -> tuple[Product, int]:
        """
        Add a product to the cart by id, looking it up in the catalog.

        Raises:
            NotFoundError: If the product does not exist
            FetchError: If the product had to be fetched and the API failed
        """
        product = self.catalog.fetch_product(product_id)
        count = self.cart.add(product.id, product.title, product.price, product.image)
        return product, count

    def close(self) -> None:
        self.client.close()
