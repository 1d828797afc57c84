"""MCP Server for the storefront."""

import asyncio
import logging
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl, ValidationError

from . import presentation
from .checkout import order_summary, place_order
from .exceptions import CheckoutError, FetchError, NotFoundError
from .models import CheckoutForm, PriceBracket, SortKey
from .storefront import Storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("storefront-mcp-server")

CART_URI = "storefront://cart"

TOOLS = [
    Tool(
        name="storefront_list_categories",
        description="List product categories with the number of products in each",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="storefront_featured_product",
        description="Show a randomly picked product from the whole store",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="storefront_list_products",
        description="List products, optionally for one category, filtered by price and search term and sorted",
        inputSchema={
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "description": "Category name (omit for all products)",
                },
                "price_bracket": {
                    "type": "string",
                    "enum": [b.value for b in PriceBracket],
                    "description": "Price range filter (default: all)",
                },
                "search": {
                    "type": "string",
                    "description": "Case-insensitive text to find in title or description",
                },
                "sort": {
                    "type": "string",
                    "enum": [s.value for s in SortKey],
                    "description": "Sort order (default: catalog order)",
                },
            },
        },
    ),
    Tool(
        name="storefront_get_product",
        description="Get full details for a product",
        inputSchema={
            "type": "object",
            "properties": {
                "product_id": {"type": "integer", "description": "Product ID"},
            },
            "required": ["product_id"],
        },
    ),
    Tool(
        name="storefront_add_to_cart",
        description="Add one unit of a product to the cart",
        inputSchema={
            "type": "object",
            "properties": {
                "product_id": {"type": "integer", "description": "Product ID to add"},
            },
            "required": ["product_id"],
        },
    ),
    Tool(
        name="storefront_update_cart_quantity",
        description="Change a cart line quantity by a delta; lines reaching zero are removed",
        inputSchema={
            "type": "object",
            "properties": {
                "product_id": {"type": "integer", "description": "Product ID in the cart"},
                "delta": {"type": "integer", "description": "Quantity change, e.g. 1 or -1"},
            },
            "required": ["product_id", "delta"],
        },
    ),
    Tool(
        name="storefront_remove_from_cart",
        description="Remove a product from the cart",
        inputSchema={
            "type": "object",
            "properties": {
                "product_id": {"type": "integer", "description": "Product ID to remove"},
            },
            "required": ["product_id"],
        },
    ),
    Tool(
        name="storefront_clear_cart",
        description="Remove every item from the cart",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="storefront_get_cart",
        description="Get cart contents with subtotal, tax and total",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="storefront_checkout_summary",
        description="Get the order summary including shipping",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="storefront_place_order",
        description="Place a simulated order (no payment is taken) and empty the cart",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "email": {"type": "string"},
                "address": {"type": "string"},
                "card_number": {"type": "string"},
                "expiry": {"type": "string", "description": "MM/YY"},
                "cvv": {"type": "string"},
            },
            "required": ["name", "email", "address", "card_number", "expiry", "cvv"],
        },
    ),
]


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def _in_cart(storefront: Storefront, product_id: int) -> bool:
    try:
        storefront.cart.get_line(product_id)
    except NotFoundError:
        return False
    return True


async def handle_tool(storefront: Storefront, name: str, arguments: Any) -> list[TextContent]:
    """Run one tool call against the storefront."""
    arguments = arguments or {}
    try:
        if name == "storefront_list_categories":
            overview = storefront.catalog.category_overview()
            counts = {summary.name: summary.product_count for summary in overview}
            return _text(presentation.render_categories([summary.name for summary in overview], counts))

        elif name == "storefront_featured_product":
            return _text(presentation.render_featured(storefront.catalog.featured_product()))

        elif name == "storefront_list_products":
            category = arguments.get("category")
            products = storefront.browse(
                category=category,
                price_bracket=arguments.get("price_bracket", PriceBracket.ALL),
                search=arguments.get("search", ""),
                sort=arguments.get("sort", SortKey.DEFAULT),
            )
            text = presentation.render_product_list(products, storefront.engine.results_summary())
            if category:
                header = presentation.render_category_header(category, storefront.catalog.product_count)
                text = f"{header}\n\n{text}"
            return _text(text)

        elif name == "storefront_get_product":
            product = storefront.catalog.fetch_product(int(arguments["product_id"]))
            return _text(presentation.render_product(product))

        elif name == "storefront_add_to_cart":
            product, count = storefront.add_product(int(arguments["product_id"]))
            return _text(presentation.render_added(product.title, count))

        elif name == "storefront_update_cart_quantity":
            product_id = int(arguments["product_id"])
            if not _in_cart(storefront, product_id):
                return _text(f"Product {product_id} is not in the cart")
            cart = storefront.cart.change_quantity(product_id, int(arguments["delta"]))
            return _text(f"✅ Cart updated\n\n{presentation.render_cart(cart)}")

        elif name == "storefront_remove_from_cart":
            product_id = int(arguments["product_id"])
            if not _in_cart(storefront, product_id):
                return _text(f"Product {product_id} is not in the cart")
            cart = storefront.cart.remove(product_id)
            return _text(f"✅ Item removed from cart\n\n{presentation.render_cart(cart)}")

        elif name == "storefront_clear_cart":
            storefront.cart.clear()
            return _text("✅ Cart cleared")

        elif name == "storefront_get_cart":
            cart = storefront.cart.snapshot()
            return _text(f"{presentation.render_badge(cart.item_count)}\n\n{presentation.render_cart(cart)}")

        elif name == "storefront_checkout_summary":
            return _text(presentation.render_order_summary(order_summary(storefront.cart)))

        elif name == "storefront_place_order":
            form = CheckoutForm.model_validate(arguments)
            confirmation = place_order(storefront.cart, form)
            return _text(presentation.render_order_confirmation(confirmation))

        else:
            return _text(f"Unknown tool: {name}")

    except FetchError as e:
        logger.error(f"Catalog fetch failed during {name}: {e}")
        return _text(presentation.FETCH_ERROR_TEXT)
    except NotFoundError as e:
        return _text(f"Error: {e}")
    except (CheckoutError, ValidationError) as e:
        return _text(f"❌ Could not place order: {e}")
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return _text(f"Error: {str(e)}")


def create_server(storefront: Storefront) -> Server:
    """Create an MCP server bound to a storefront."""
    app = Server("storefront-mcp-server")

    @app.list_resources()
    async def list_resources() -> list[Resource]:
        """List available resources."""
        return [
            Resource(
                uri=AnyUrl(CART_URI),
                name="Shopping Cart",
                mimeType="application/json",
                description="Current shopping cart contents",
            )
        ]

    @app.read_resource()
    async def read_resource(uri: AnyUrl) -> str:
        """Read a resource by URI."""
        if str(uri) == CART_URI:
            return storefront.cart.snapshot().model_dump_json(indent=2)
        raise ValueError(f"Unknown resource: {uri}")

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return TOOLS

    @app.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        return await handle_tool(storefront, name, arguments)

    return app


async def main() -> None:
    """Main entry point."""
    storefront = Storefront.from_settings()
    app = create_server(storefront)

    logger.info("Starting Storefront MCP Server...")

    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        storefront.close()


if __name__ == "__main__":
    asyncio.run(main())
