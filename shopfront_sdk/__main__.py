# python -m shopfront_sdk <command> ...
import argparse
import os
import sys

from rich import print
from rich.markup import escape

from .client import StoreAPIError, StoreClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shopfront_sdk", description="shopfront API client")
    parser.add_argument(
        "--base-url",
        default=os.getenv("SHOPFRONT_API_URL", "http://127.0.0.1:4000/api"),
        help="API base URL (env SHOPFRONT_API_URL)",
    )
    parser.add_argument("--token", default=os.getenv("SHOPFRONT_TOKEN"), help="Bearer token (env SHOPFRONT_TOKEN)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---------------------------
    # Storefront commands
    # ---------------------------
    lp = subparsers.add_parser("list-products", help="List products")
    lp.add_argument("--category-id", type=int, help="Filter by category id")
    lp.add_argument("--search", help="Match name or description")

    gp = subparsers.add_parser("get-product", help="Get a product by its id")
    gp.add_argument("--product-id", type=int, required=True)

    subparsers.add_parser("categories", help="List categories")

    po = subparsers.add_parser("place-order", help="Place an order")
    po.add_argument("--name", required=True, help="Customer name")
    po.add_argument("--phone", required=True, help="Customer phone")
    po.add_argument("--email")
    po.add_argument("--address")
    po.add_argument("--city")
    po.add_argument("--notes")
    po.add_argument(
        "--item",
        action="append",
        required=True,
        metavar="VARIANT_ID:QTY",
        help="Repeat for each line, e.g. --item 3:2",
    )

    st = subparsers.add_parser("order-status", help="Show an order's status")
    st.add_argument("--order-number", required=True)

    # ---------------------------
    # Back-office commands
    # ---------------------------
    li = subparsers.add_parser("login", help="Log in and print the access token")
    li.add_argument("--employee-code", required=True)
    li.add_argument("--password", required=True)

    inv = subparsers.add_parser("inventory", help="Inventory with stock status")
    inv.add_argument("--low-stock", action="store_true", help="Only low and out of stock")

    subparsers.add_parser("alerts", help="Low and out of stock variants")

    lo = subparsers.add_parser("list-orders", help="List orders")
    lo.add_argument("--status")

    us = subparsers.add_parser("update-status", help="Change an order's status")
    us.add_argument("--order-id", type=int, required=True)
    us.add_argument("--status", required=True)

    subparsers.add_parser("health", help="API health")
    return parser


def _parse_item(raw: str) -> dict:
    variant_id, _, qty = raw.partition(":")
    return {"variantId": int(variant_id), "quantity": int(qty or 1)}


def run(args: argparse.Namespace) -> object:
    c = StoreClient(base_url=args.base_url, token=args.token)

    if args.command == "list-products":
        return c.get_products(category_id=args.category_id, search=args.search)
    elif args.command == "get-product":
        return c.get_product(args.product_id)
    elif args.command == "categories":
        return c.get_categories()
    elif args.command == "place-order":
        return c.create_order({
            "customerName": args.name,
            "customerPhone": args.phone,
            "customerEmail": args.email,
            "customerAddress": args.address,
            "customerCity": args.city,
            "notes": args.notes,
            "items": [_parse_item(i) for i in args.item],
        })
    elif args.command == "order-status":
        return c.get_order_status(args.order_number)
    elif args.command == "login":
        return c.login(args.employee_code, args.password)
    elif args.command == "inventory":
        return c.get_inventory(low_stock=args.low_stock)
    elif args.command == "alerts":
        return c.get_inventory_alerts()
    elif args.command == "list-orders":
        return c.list_orders(status=args.status)
    elif args.command == "update-status":
        return c.update_order_status(args.order_id, args.status)
    elif args.command == "health":
        return c.health()
    raise ValueError(f"unknown command {args.command}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        print(run(args))
    except StoreAPIError as e:
        print(f"[red]Error:[/red] {escape(e.message)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
