"""Shared fixtures: a stubbed catalog API and an in-memory storefront."""

import httpx
import pytest

from storefront_server.storage import MemoryStorage
from storefront_server.store_client import StoreApiClient
from storefront_server.storefront import Storefront

PRODUCTS = [
    {
        "id": 1,
        "title": "Fjallraven Backpack",
        "price": 109.95,
        "description": "Your perfect pack for everyday use",
        "category": "men's clothing",
        "image": "https://example.com/1.jpg",
        "rating": {"rate": 3.9, "count": 120},
    },
    {
        "id": 2,
        "title": "Casual Slim Fit T-Shirt",
        "price": 22.3,
        "description": "Slim-fitting style, lightweight fabric",
        "category": "men's clothing",
        "image": "https://example.com/2.jpg",
        "rating": {"rate": 4.1, "count": 259},
    },
    {
        "id": 5,
        "title": "Dragon Station Chain Bracelet",
        "price": 695,
        "description": "From our Legends Collection",
        "category": "jewelery",
        "image": "https://example.com/5.jpg",
        "rating": {"rate": 4.6, "count": 400},
    },
    {
        "id": 9,
        "title": "WD 2TB Elements Portable Hard Drive",
        "price": 64,
        "description": "USB 3.0 and USB 2.0 compatibility",
        "category": "electronics",
        "image": "https://example.com/9.jpg",
        "rating": {"rate": 3.3, "count": 203},
    },
    {
        "id": 10,
        "title": "SanDisk SSD PLUS 1TB",
        "price": 25,
        "description": "Easy upgrade for faster boot up",
        "category": "electronics",
        "image": "https://example.com/10.jpg",
        "rating": {"rate": 2.9, "count": 470},
    },
]

CATEGORIES = ["electronics", "jewelery", "men's clothing", "women's clothing"]


class FakeStoreApi:
    """Request handler standing in for the catalog API."""

    def __init__(self) -> None:
        self.products = list(PRODUCTS)
        self.categories = list(CATEGORIES)
        self.fail = False
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)

        if self.fail:
            return httpx.Response(503, text="Service Unavailable")

        if path == "/products":
            return httpx.Response(200, json=self.products)
        if path == "/products/categories":
            return httpx.Response(200, json=self.categories)
        if path.startswith("/products/"):
            product_id = int(path.rsplit("/", 1)[1])
            for product in self.products:
                if product["id"] == product_id:
                    return httpx.Response(200, json=product)
            # Unknown ids come back as an empty 200 response
            return httpx.Response(200, content=b"")
        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def api() -> FakeStoreApi:
    return FakeStoreApi()


@pytest.fixture
def client(api: FakeStoreApi):
    store_client = StoreApiClient(base_url="https://store.test", transport=httpx.MockTransport(api))
    yield store_client
    store_client.close()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def storefront(client: StoreApiClient, storage: MemoryStorage) -> Storefront:
    return Storefront(client, storage)

