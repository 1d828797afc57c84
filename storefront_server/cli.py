"""CLI entry point for the Storefront MCP server."""

import argparse
import asyncio
import os
import sys

ENVIRONMENT_HELP = """\
environment variables:
  STOREFRONT_API_URL    Catalog API base URL (default: https://fakestoreapi.com)
  STOREFRONT_CART_FILE  Cart snapshot file (default: ~/.storefront_cart.json)
  STOREFRONT_TIMEOUT    Catalog request timeout in seconds (default: 30)
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storefront-mcp-server",
        description="Storefront MCP Server - browse a product catalog, keep a persistent cart and place simulated orders",
        epilog=ENVIRONMENT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default="stdio",
        help="stdio serves the storefront_* tools to an MCP client, http serves the catalog/cart/checkout REST API",
    )
    parser.add_argument(
        "--api-url",
        help="Catalog API base URL, overrides STOREFRONT_API_URL",
    )
    parser.add_argument(
        "--cart-file",
        help="Where the cart is persisted between runs, overrides STOREFRONT_CART_FILE",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host the REST API binds to (http mode only, default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port the REST API listens on (http mode only, default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the REST API when storefront_server sources change (http mode only)",
    )
    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    # Settings are read from the environment when the storefront starts.
    if args.api_url:
        os.environ["STOREFRONT_API_URL"] = args.api_url
    if args.cart_file:
        os.environ["STOREFRONT_CART_FILE"] = args.cart_file

    try:
        if args.mode == "http":
            from .http_server import run_http_server

            print(f"API documentation available at http://{args.host}:{args.port}/docs", file=sys.stderr)
            run_http_server(host=args.host, port=args.port, reload=args.reload)
        else:
            from .server import main as server_main

            asyncio.run(server_main())
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
