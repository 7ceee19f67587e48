# cli.py: interactive storefront over the shopfront API
import os
import sys
from datetime import datetime
from typing import Dict, List, Optional

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from shopfront_sdk import StoreAPIError, StoreClient
from shopfront_sdk.types import Category, OrderStatus, Product

console = Console()
c = StoreClient(base_url=os.getenv("SHOPFRONT_API_URL", "http://127.0.0.1:4000/api"))

status_message = "Ready"
product_cache: List[Product] = []
# variant id -> (product, variant, quantity); mirrors the web storefront's cart
cart: Dict[int, tuple] = {}

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Product]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="📦 Products",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True,
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Category", width=14)
    table.add_column("Variants (id · sku · price)", width=44)

    for p in products:
        variants = "\n".join(
            f"{v.id} · {v.sku}{' · ' + v.name if v.name else ''} · {v.price:.2f}" for v in p.variants
        )
        table.add_row(str(p.id), p.name, p.category_name or "-", variants or "-")
    console.print(table)


def show_categories(categories: List[Category]):
    table = Table(title="🏷️ Categories", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Description", width=40)
    for cat in categories:
        table.add_row(str(cat.id), cat.name, cat.description or "")
    console.print(table)


def cart_total() -> float:
    return sum(variant.price * qty for _, variant, qty in cart.values())


def show_cart():
    if not cart:
        console.print(Panel("Your cart is empty 🛍️", title="🛒 Cart", style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Variant", style="dim", width=8)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Subtotal", justify="right", width=12)

    for variant_id, (product, variant, qty) in cart.items():
        label = f"{product.name} - {variant.name}" if variant.name else product.name
        table.add_row(
            str(variant_id), label, str(qty), f"{variant.price:.2f}", f"{variant.price * qty:.2f}"
        )
    console.print(Panel(table, title=f"🛒 Cart - Total: {cart_total():.2f}", border_style="blue"))


def show_order_status(order: OrderStatus):
    style = "green" if order.status in ("completed", "ready") else "yellow"
    console.print(Panel.fit(
        f"Order: [bold]{order.order_number}[/bold]\n"
        f"Status: [{style}]{order.status}[/{style}]\n"
        f"Total: [bold]{order.total:.2f}[/bold]",
        title="📋 Order Status",
    ))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after printing the API error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except StoreAPIError as e:
        status_message = f"Error: {escape(e.message)}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_products() -> List[Product]:
    global product_cache
    page = try_api(c.get_products)
    if page is not None:
        product_cache = page.products
    return product_cache


def find_variant(variant_id: int) -> Optional[tuple]:
    for product in product_cache:
        for variant in product.variants:
            if variant.id == variant_id:
                return product, variant
    return None


def get_variant_completer():
    if not product_cache:
        refresh_products()
    return WordCompleter([str(v.id) for p in product_cache for v in p.variants])


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)
    header.add_row(
        "🛍️ shopfront",
        "[bold blue]Storefront CLI[/bold blue]",
        f"[dim]{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}[/dim]",
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Actions
# ---------------------------
def add_to_cart():
    raw = prompt_with_autocomplete("Enter variant ID", completer=get_variant_completer()).strip()
    if not raw.isdigit():
        console.print("[red]Variant ID must be a number.[/red]")
        return
    found = find_variant(int(raw))
    if found is None:
        console.print(f"[red]Variant {raw} is not in the catalog.[/red]")
        return
    product, variant = found
    qty = IntPrompt.ask("Quantity", default=1)
    if qty < 1:
        console.print("[red]Quantity must be at least 1.[/red]")
        return
    _, _, current = cart.get(variant.id, (product, variant, 0))
    cart[variant.id] = (product, variant, current + qty)
    show_cart()


def remove_from_cart():
    raw = prompt_with_autocomplete(
        "Variant ID to remove", completer=WordCompleter([str(k) for k in cart])
    ).strip()
    if raw.isdigit() and int(raw) in cart:
        del cart[int(raw)]
    show_cart()


def checkout():
    if not cart:
        console.print("[italic yellow]Cart is empty[/italic yellow]")
        return
    show_cart()
    name = Prompt.ask("👤 Name")
    phone = Prompt.ask("📞 Phone")
    email = Prompt.ask("✉️ Email (optional)", default="")
    address = Prompt.ask("🏠 Address (optional)", default="")
    city = Prompt.ask("🏙️ City (optional)", default="")
    notes = Prompt.ask("📝 Notes (optional)", default="")

    order = {
        "customerName": name,
        "customerPhone": phone,
        "customerEmail": email or None,
        "customerAddress": address or None,
        "customerCity": city or None,
        "notes": notes or None,
        "items": [{"variantId": vid, "quantity": qty} for vid, (_, _, qty) in cart.items()],
    }
    resp = try_api(c.create_order, order, success_msg="Order placed")
    if resp is None:
        return
    cart.clear()
    console.print(Panel.fit(
        f"[green]{resp.message}[/green]\n"
        f"Order Number: [bold]{resp.order_number}[/bold]\n"
        f"Total: [bold]{resp.total:.2f}[/bold]",
        title="✅ Order Confirmation",
    ))


# ---------------------------
# Main menu
# ---------------------------
def menu():
    console.clear()
    console.print(create_header())
    refresh_products()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        for row in [
            ("1", "📦 List products", "5", "🛒 View cart"),
            ("2", "🏷️ List categories", "6", "➖ Remove from cart"),
            ("3", "🔍 Products in category", "7", "✅ Place order"),
            ("4", "➕ Add to cart", "8", "📋 Order status"),
            ("", "", "q", "👋 Quit"),
        ]:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 9)] + ["q", "quit", "exit"]),
        ).strip()

        if choice == "1":
            show_products(refresh_products())

        elif choice == "2":
            categories = try_api(c.get_categories, success_msg="Categories loaded")
            if categories is not None:
                show_categories(categories)

        elif choice == "3":
            category_id = IntPrompt.ask("Category ID")
            page = try_api(c.get_products, category_id=category_id)
            if page is not None:
                show_products(page.products)

        elif choice == "4":
            add_to_cart()

        elif choice == "5":
            show_cart()

        elif choice == "6":
            remove_from_cart()

        elif choice == "7":
            checkout()

        elif choice == "8":
            number = prompt_with_autocomplete("Order number").strip()
            order = try_api(c.get_order_status, number)
            if order is not None:
                show_order_status(order)

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thanks for shopping! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
