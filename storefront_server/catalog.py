"""Read-only product cache for the current listing."""

import logging
import random
from typing import Optional

from .exceptions import NotFoundError
from .models import CategorySummary, Product
from .store_client import StoreApiClient

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x300?text=No+Image"


class ProductCatalog:
    """Products fetched for one listing: the whole store or a single category.

    Every fetch replaces the cache. Concurrent fetches are not fenced, the
    last one to finish wins.
    """

    def __init__(self, client: StoreApiClient) -> None:
        self.client = client
        self.products: list[Product] = []
        self.category: Optional[str] = None
        self.categories: list[str] = []

    def fetch_all(self) -> list[Product]:
        """Load every product. Raises FetchError on failure."""
        products = self.client.get_products()
        self.products = products
        self.category = None
        return list(products)

    def fetch_by_category(self, category: str) -> list[Product]:
        """Load the products of one category. Raises FetchError on failure."""
        products = [p for p in self.client.get_products() if p.category == category]
        logger.info(f"Category '{category}' has {len(products)} product(s)")
        self.products = products
        self.category = category
        return list(products)

    def fetch_categories(self) -> list[str]:
        self.categories = self.client.get_categories()
        return list(self.categories)

    def fetch_product(self, product_id: int) -> Product:
        """Fetch one product, preferring the cached copy."""
        try:
            return self.find(product_id)
        except NotFoundError:
            return self.client.get_product(product_id)

    def find(self, product_id: int) -> Product:
        for product in self.products:
            if product.id == product_id:
                return product
        raise NotFoundError("Product", product_id)

    @property
    def product_count(self) -> int:
        return len(self.products)

    def category_counts(
        self,
        categories: Optional[list[str]] = None,
        products: Optional[list[Product]] = None,
    ) -> dict[str, int]:
        """Count products per category, including categories with none.

        Counts the cached listing unless another product list is given.
        """
        names = categories if categories is not None else self.categories
        counts = {name: 0 for name in names}
        for product in products if products is not None else self.products:
            if product.category in counts:
                counts[product.category] += 1
        return counts

    def category_image(self, category: str, products: Optional[list[Product]] = None) -> str:
        """Image of the first product in a category, used as the category thumbnail."""
        for product in products if products is not None else self.products:
            if product.category == category and product.image:
                return product.image
        return PLACEHOLDER_IMAGE

    def _store_products(self) -> list[Product]:
        """Every product in the store, read from the cache when it holds them."""
        if self.category is None and self.products:
            return self.products
        return self.client.get_products()

    def category_overview(self) -> list[CategorySummary]:
        """
        Every category with its store-wide product count and thumbnail.

        When the cached listing is a single category the full product list is
        fetched on the side, so the cached listing stays as it was.

        Raises:
            FetchError: If categories or products cannot be loaded
        """
        categories = self.fetch_categories()
        products = self._store_products()

        counts = self.category_counts(categories, products)
        return [
            CategorySummary(
                name=name,
                product_count=counts[name],
                image=self.category_image(name, products),
            )
            for name in categories
        ]

    def featured_product(self, rng: Optional[random.Random] = None) -> Optional[Product]:
        """A random product from the whole store, None when the store is empty."""
        products = self._store_products()
        if not products:
            return None
        return (rng or random).choice(products)
