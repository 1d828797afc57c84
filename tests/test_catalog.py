"""Tests for the catalog API client and the product cache."""

import random
from decimal import Decimal

import httpx
import pytest

from storefront_server.catalog import PLACEHOLDER_IMAGE, ProductCatalog
from storefront_server.exceptions import FetchError, NotFoundError
from storefront_server.store_client import StoreApiClient


class TestStoreApiClient:
    """HTTP calls against the stubbed API."""

    def test_get_products_parses_models(self, client: StoreApiClient, api):
        products = client.get_products()

        assert [p.id for p in products] == [1, 2, 5, 9, 10]
        assert products[0].price == Decimal("109.95")
        assert products[0].rating.rate == Decimal("3.9")
        assert api.requests == ["/products"]

    def test_get_categories(self, client: StoreApiClient):
        assert client.get_categories() == [
            "electronics",
            "jewelery",
            "men's clothing",
            "women's clothing",
        ]

    def test_get_product(self, client: StoreApiClient):
        product = client.get_product(9)

        assert product.title == "WD 2TB Elements Portable Hard Drive"

    def test_unknown_product_raises_not_found(self, client: StoreApiClient):
        with pytest.raises(NotFoundError):
            client.get_product(999)

    def test_http_error_raises_fetch_error(self, client: StoreApiClient, api):
        api.fail = True

        with pytest.raises(FetchError) as exc_info:
            client.get_products()

        assert exc_info.value.status_code == 503

    def test_network_error_raises_fetch_error(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        broken = StoreApiClient(base_url="https://store.test", transport=httpx.MockTransport(refuse))

        with pytest.raises(FetchError):
            broken.get_products()
        broken.close()

    def test_invalid_products_are_skipped(self, client: StoreApiClient, api):
        api.products = [
            {"id": 1, "title": "Good", "price": 5},
            {"id": "x", "title": "Bad"},
        ]

        products = client.get_products()

        assert [p.id for p in products] == [1]

    def test_non_list_body_raises_fetch_error(self, client: StoreApiClient, api):
        api.products = {"unexpected": True}

        with pytest.raises(FetchError):
            client.get_products()


class TestProductCatalog:
    """Per-listing product cache."""

    def test_fetch_by_category_scopes_products(self, client: StoreApiClient, api):
        catalog = ProductCatalog(client)

        products = catalog.fetch_by_category("electronics")

        assert [p.id for p in products] == [9, 10]
        assert catalog.category == "electronics"
        assert api.requests == ["/products"]

    def test_fetch_all_replaces_category_listing(self, client: StoreApiClient):
        catalog = ProductCatalog(client)
        catalog.fetch_by_category("jewelery")

        catalog.fetch_all()

        assert catalog.category is None
        assert catalog.product_count == 5

    def test_failed_fetch_keeps_previous_cache(self, client: StoreApiClient, api):
        catalog = ProductCatalog(client)
        catalog.fetch_all()
        api.fail = True

        with pytest.raises(FetchError):
            catalog.fetch_by_category("electronics")

        assert catalog.product_count == 5

    def test_find_uses_cache(self, client: StoreApiClient):
        catalog = ProductCatalog(client)
        catalog.fetch_all()

        assert catalog.find(5).title == "Dragon Station Chain Bracelet"
        with pytest.raises(NotFoundError):
            catalog.find(42)

    def test_fetch_product_falls_back_to_api(self, client: StoreApiClient, api):
        catalog = ProductCatalog(client)

        product = catalog.fetch_product(2)

        assert product.id == 2
        assert api.requests == ["/products/2"]

    def test_category_counts_include_empty_categories(self, client: StoreApiClient):
        catalog = ProductCatalog(client)
        catalog.fetch_all()
        categories = catalog.fetch_categories()

        assert catalog.category_counts(categories) == {
            "electronics": 2,
            "jewelery": 1,
            "men's clothing": 2,
            "women's clothing": 0,
        }

    def test_category_image(self, client: StoreApiClient):
        catalog = ProductCatalog(client)
        catalog.fetch_all()

        assert catalog.category_image("electronics") == "https://example.com/9.jpg"
        assert catalog.category_image("women's clothing") == PLACEHOLDER_IMAGE

    def test_category_overview_leaves_category_listing_cached(self, client: StoreApiClient):
        catalog = ProductCatalog(client)
        catalog.fetch_by_category("jewelery")

        overview = catalog.category_overview()

        assert [(s.name, s.product_count) for s in overview] == [
            ("electronics", 2),
            ("jewelery", 1),
            ("men's clothing", 2),
            ("women's clothing", 0),
        ]
        assert overview[3].image == PLACEHOLDER_IMAGE
        assert catalog.category == "jewelery"
        assert [p.id for p in catalog.products] == [5]

    def test_category_overview_reuses_full_listing(self, client: StoreApiClient, api):
        catalog = ProductCatalog(client)
        catalog.fetch_all()

        catalog.category_overview()

        assert api.requests == ["/products", "/products/categories"]

    def test_featured_product(self, client: StoreApiClient):
        catalog = ProductCatalog(client)
        catalog.fetch_by_category("jewelery")

        product = catalog.featured_product(random.Random(0))

        assert product is not None
        assert product.id in {1, 2, 5, 9, 10}
        assert catalog.category == "jewelery"

    def test_featured_product_of_empty_store(self, client: StoreApiClient, api):
        api.products = []

        assert ProductCatalog(client).featured_product() is None
