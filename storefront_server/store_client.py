"""Catalog API client."""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .exceptions import FetchError, NotFoundError
from .models import Product

logger = logging.getLogger(__name__)


class StoreApiClient:
    """Client for the read-only product catalog API."""

    BASE_URL = "https://fakestoreapi.com"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize the catalog client.

        Args:
            base_url: API root (default: https://fakestoreapi.com)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
            headers={
                "User-Agent": "storefront-mcp-server/0.1",
                "Accept": "application/json",
            },
        )

    def _get_json(self, path: str) -> Any:
        """GET a path and decode the JSON body, raising FetchError on any failure."""
        logger.info(f"GET {path}")
        try:
            response = self.client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"API error for {path}: status={e.response.status_code}")
            raise FetchError(
                f"Catalog API returned {e.response.status_code} for {path}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Network error for {path}: {e}")
            raise FetchError(f"Could not reach catalog API: {e}") from e

        # The API answers unknown product ids with 200 and an empty body
        if not response.content.strip():
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {path}: {e}")
            raise FetchError(f"Catalog API returned invalid JSON for {path}") from e

    def _parse_products(self, data: Any) -> list[Product]:
        if not isinstance(data, list):
            raise FetchError(f"Expected a product list, got {type(data).__name__}")

        products = []
        for item in data:
            try:
                products.append(Product.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Failed to parse product: {e}")
                continue
        return products

    def get_products(self) -> list[Product]:
        """Fetch every product in the catalog."""
        products = self._parse_products(self._get_json("/products"))
        logger.info(f"Fetched {len(products)} product(s)")
        return products

    def get_categories(self) -> list[str]:
        """Fetch category names."""
        data = self._get_json("/products/categories")
        if not isinstance(data, list):
            raise FetchError(f"Expected a category list, got {type(data).__name__}")
        return [str(category) for category in data]

    def get_product(self, product_id: int) -> Product:
        """
        Fetch a single product.

        Raises:
            NotFoundError: If the API has no product with this id
            FetchError: On network or API failure
        """
        data = self._get_json(f"/products/{product_id}")
        if not data:
            raise NotFoundError("Product", product_id)
        try:
            return Product.model_validate(data)
        except ValidationError as e:
            raise FetchError(f"Invalid product data for {product_id}: {e}") from e

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()
