"""HTTP server for the storefront."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .checkout import order_summary, place_order
from .exceptions import CheckoutError, FetchError, NotFoundError
from .models import CheckoutForm, PriceBracket, SortKey
from .storefront import Storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("storefront-http-server")

RETRY_DETAIL = "Could not load products from the store. Please try again."


# Request Models
class AddToCartRequest(BaseModel):
    product_id: int


class UpdateCartRequest(BaseModel):
    product_id: int
    delta: int


class RemoveFromCartRequest(BaseModel):
    product_id: int


def _fetch_failed(e: FetchError) -> HTTPException:
    logger.error(f"Catalog fetch failed: {e}")
    return HTTPException(status_code=502, detail=RETRY_DETAIL)


def create_app(storefront: Optional[Storefront] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        storefront: Storefront to serve. When omitted one is built from the
            environment at startup and closed at shutdown.
    """
    state: dict[str, Storefront] = {}
    if storefront is not None:
        state["storefront"] = storefront

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown."""
        owned = "storefront" not in state
        if owned:
            logger.info("Starting Storefront HTTP Server...")
            state["storefront"] = Storefront.from_settings()

        yield

        if owned:
            logger.info("Shutting down Storefront HTTP Server...")
            state.pop("storefront").close()

    app = FastAPI(
        title="Storefront MCP Server",
        description="HTTP API for browsing the product catalog and managing the cart",
        version=__version__,
        lifespan=lifespan,
    )

    def current() -> Storefront:
        return state["storefront"]

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": "Storefront MCP Server",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "catalog": {
                    "categories": "GET /categories",
                    "products": "GET /products?category=&price_bracket=&search=&sort=",
                    "featured": "GET /products/featured",
                    "product": "GET /products/{product_id}",
                },
                "cart": {
                    "get": "GET /cart",
                    "add": "POST /cart/add",
                    "update": "POST /cart/update",
                    "remove": "POST /cart/remove",
                    "clear": "POST /cart/clear",
                },
                "checkout": {
                    "summary": "GET /checkout/summary",
                    "place": "POST /checkout",
                },
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "cart_items": current().badge_count}

    @app.get("/categories")
    async def list_categories():
        """Categories with store-wide product counts and thumbnails."""
        try:
            overview = current().catalog.category_overview()
        except FetchError as e:
            raise _fetch_failed(e)

        return {
            "count": len(overview),
            "categories": [summary.model_dump(mode="json") for summary in overview],
        }

    @app.get("/products")
    async def list_products(
        category: Optional[str] = None,
        price_bracket: PriceBracket = PriceBracket.ALL,
        search: str = "",
        sort: SortKey = SortKey.DEFAULT,
    ):
        """List products of the store or one category, filtered and sorted."""
        storefront = current()
        try:
            products = storefront.browse(
                category=category,
                price_bracket=price_bracket,
                search=search,
                sort=sort,
            )
        except FetchError as e:
            raise _fetch_failed(e)

        return {
            "category": category,
            "total": storefront.catalog.product_count,
            "count": len(products),
            "filters": storefront.engine.state.model_dump(mode="json"),
            "products": [product.model_dump(mode="json") for product in products],
        }

    @app.get("/products/featured")
    async def featured_product():
        """A randomly picked product from the whole store."""
        try:
            product = current().catalog.featured_product()
        except FetchError as e:
            raise _fetch_failed(e)
        if product is None:
            raise HTTPException(status_code=404, detail="No products available")
        return product.model_dump(mode="json")

    @app.get("/products/{product_id}")
    async def get_product(product_id: int):
        try:
            product = current().catalog.fetch_product(product_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except FetchError as e:
            raise _fetch_failed(e)
        return product.model_dump(mode="json")

    @app.get("/cart")
    async def get_cart():
        """Get current shopping cart."""
        return current().cart.snapshot().model_dump(mode="json")

    @app.post("/cart/add")
    async def add_to_cart(request: AddToCartRequest):
        """Add one unit of a product to the cart."""
        try:
            product, count = current().add_product(request.product_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except FetchError as e:
            raise _fetch_failed(e)
        return {
            "success": True,
            "message": f"Added {product.title} to cart",
            "item_count": count,
        }

    @app.post("/cart/update")
    async def update_cart(request: UpdateCartRequest):
        """Change a cart line quantity by a delta."""
        cart = current().cart.change_quantity(request.product_id, request.delta)
        return cart.model_dump(mode="json")

    @app.post("/cart/remove")
    async def remove_from_cart(request: RemoveFromCartRequest):
        """Remove a product from the cart."""
        cart = current().cart.remove(request.product_id)
        return cart.model_dump(mode="json")

    @app.post("/cart/clear")
    async def clear_cart():
        cart = current().cart.clear()
        return cart.model_dump(mode="json")

    @app.get("/checkout/summary")
    async def checkout_summary():
        """Order summary including shipping."""
        return order_summary(current().cart).model_dump(mode="json")

    @app.post("/checkout")
    async def checkout(form: CheckoutForm):
        """Place a simulated order."""
        try:
            confirmation = place_order(current().cart, form)
        except CheckoutError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return confirmation.model_dump(mode="json")

    return app


app = create_app()


def run_http_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """
    Run the HTTP server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable hot reloading (default: False)
    """
    import uvicorn

    logger.info(f"Starting server on {host}:{port} (reload={'enabled' if reload else 'disabled'})")

    if reload:
        uvicorn.run(
            "storefront_server.http_server:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["storefront_server"],
            log_level="info",
        )
    else:
        uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_http_server(reload=True)
