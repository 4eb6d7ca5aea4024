# cli.py
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import PathCompleter, WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from app.logging_config import setup_logging
from sdk.admin import AdminPanel, CategoryForm, ProductForm, form_errors
from sdk.cart import Cart
from sdk.client import ApiError, AuthSession, StoreClient
from sdk.receipt import checkout
from sdk.storage import LocalStorage

console = Console()

# Status line shown above the menu after every action
status_message = "Ready"

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], client: StoreClient, categories: Optional[Dict[int, str]] = None):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="👕 Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=22)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=14)
    table.add_column("Image", width=40, overflow="fold")

    categories = categories or {}
    for p in products:
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name", "N/A"),
            f"${float(p.get('price', 0)):.2f}",
            categories.get(p.get("categoryId"), str(p.get("categoryId", ""))),
            client.image_url(p) or "[dim]-[/dim]"
        )
    console.print(table)


def show_categories(categories: List[Dict[str, Any]]):
    if not categories:
        console.print("[italic yellow]No categories yet[/italic yellow]")
        return
    table = Table(title="🏷️ Categories", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=30)
    for c in categories:
        table.add_row(str(c.get("id")), c.get("name", ""))
    console.print(table)


def show_cart(cart: Cart):
    title = Text()
    title.append("🛒 Your Cart", style="bold")
    title.append(f" - {cart.count()} item(s) - Total: ${cart.total():.2f}", style="bold green")

    if len(cart) == 0:
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Product", style="bold", width=28)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Subtotal", justify="right", width=12)

    for line in cart:
        table.add_row(
            str(line.product_id),
            line.product.get("name", "Unknown"),
            str(line.quantity),
            f"${float(line.product.get('price', 0)):.2f}",
            f"${line.line_total:.2f}"
        )
    console.print(Panel(table, title=title, border_style="blue"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def show_form_errors(errors: Dict[str, str]):
    for field, message in errors.items():
        console.print(f"[red]{field}:[/red] {message}")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Any failure becomes a red status panel and a None result.
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
    except ApiError as e:
        status_message = f"Error: {e.message}"
        console.print(show_status(status_message, False))
        return None
    except Exception as e:
        # network errors, receipt rendering (OSError, KeyError, ValueError) and the rest
        status_message = f"Error: {e}"
        console.print(show_status(status_message, False))
        return None

    if success_msg:
        status_message = success_msg
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Layout and input helpers
# ---------------------------
def create_header(auth: AuthSession, cart: Cart):
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    who = auth.user.get("name", "user") if auth.user else "guest"
    header.add_row(
        "👕 Clothify",
        f"[bold blue]Signed in as {who}[/bold blue] · 🛒 {cart.count()}",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


def prompt_with_autocomplete(message: str, completer=None, default: str = "", is_password: bool = False):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default, is_password=is_password)


def product_completer(products: List[Dict[str, Any]]):
    return WordCompleter([str(p.get("id")) for p in products], ignore_case=True)


def find_product(products: List[Dict[str, Any]], raw_id: str) -> Optional[Dict[str, Any]]:
    for p in products:
        if str(p.get("id")) == raw_id.strip():
            return p
    return None


# ---------------------------
# Menu actions
# ---------------------------
def storefront_actions(choice: str, client: StoreClient, cart: Cart, panel: AdminPanel):
    global status_message

    if choice == "1":
        if try_api(panel.refresh, success_msg="Catalog loaded") is not None:
            show_products(panel.products, client, {c["id"]: c["name"] for c in panel.categories})

    elif choice == "2":
        raw = prompt_with_autocomplete("Product ID to add", completer=product_completer(panel.products))
        product = find_product(panel.products, raw)
        if product is None:
            status_message = f"Error: no product with id {raw!r} (list the catalog first)"
            return
        line = cart.add(product)
        status_message = f"{product['name']} x{line.quantity} in cart"
        show_cart(cart)

    elif choice == "3":
        show_cart(cart)
        if len(cart) == 0:
            return
        raw = prompt_with_autocomplete("Product ID", completer=WordCompleter([str(line.product_id) for line in cart]))
        line = next((l for l in cart if str(l.product_id) == raw.strip()), None)
        if line is None:
            status_message = f"Error: {raw!r} is not in the cart"
            return
        if Confirm.ask("Remove this item from the cart?", default=False):
            cart.remove(line.product_id)
            status_message = "Item removed"
        else:
            qty = IntPrompt.ask("New quantity", default=line.quantity)
            if qty < 1:
                # decrementing stops at one; removal is explicit
                qty = 1
            cart.set_quantity(line.product_id, qty)
            status_message = "Quantity updated"
        show_cart(cart)

    elif choice == "4":
        if len(cart) == 0:
            status_message = "Error: your cart is empty"
            return
        show_cart(cart)
        target = Prompt.ask("Save receipt to", default="receipt.pdf")
        if Confirm.ask(f"Buy now for ${cart.total():.2f}?"):
            path = try_api(checkout, cart, Path(target), success_msg=f"Receipt saved to {target}")
            if path is None:
                return
            console.print(Panel.fit(f"[green]Thank you for shopping with us![/green]\nReceipt: [bold]{path}[/bold]",
                                    title="✅ Order Complete"))


def account_actions(choice: str, auth: AuthSession):
    global status_message

    if choice == "5":
        email = prompt_with_autocomplete("Email")
        password = prompt_with_autocomplete("Password", is_password=True)
        user = try_api(auth.login, email, password, success_msg="Login successful")
        if user:
            console.print(Panel.fit(f"Welcome back, [bold]{user.get('name')}[/bold]!"))

    elif choice == "6":
        name = prompt_with_autocomplete("Name")
        email = prompt_with_autocomplete("Email")
        password = prompt_with_autocomplete("Password", is_password=True)
        try_api(auth.register, name, email, password, success_msg="Registration Successful 🎉")

    elif choice == "7":
        auth.logout()
        status_message = "Logged out successfully 👍"


def admin_actions(choice: str, client: StoreClient, panel: AdminPanel):
    global status_message

    if choice == "8":
        if try_api(panel.refresh) is None:
            return
        show_categories(panel.categories)
        try:
            form = ProductForm(
                name=prompt_with_autocomplete("Product name"),
                price=Prompt.ask("💰 Price", default="0"),
                description=prompt_with_autocomplete("Description"),
                image=prompt_with_autocomplete("Image file", completer=PathCompleter(expanduser=True)),
                category=prompt_with_autocomplete(
                    "Category ID", completer=WordCompleter([str(c["id"]) for c in panel.categories])
                ),
            )
        except ValidationError as e:
            status_message = "Error: please fix the highlighted fields"
            show_form_errors(form_errors(e))
            return
        product = try_api(panel.add_product, form, success_msg=f"Product '{form.name}' added")
        if product:
            show_products([product], client)

    elif choice == "9":
        try:
            form = CategoryForm(name=prompt_with_autocomplete("Category name"))
        except ValidationError as e:
            status_message = "Error: please fix the highlighted fields"
            show_form_errors(form_errors(e))
            return
        if try_api(panel.add_category, form, success_msg=f"Category '{form.name}' added"):
            show_categories(panel.categories)

    elif choice == "10":
        raw = prompt_with_autocomplete("Product ID to delete", completer=product_completer(panel.products))
        if not raw.strip().isdigit():
            status_message = "Error: product id must be a number"
            return
        if Confirm.ask(f"[red]Delete product {raw}?[/red]"):
            try_api(panel.delete_product, int(raw), success_msg=f"Product {raw} deleted")

    elif choice == "11":
        raw = prompt_with_autocomplete(
            "Category ID to delete", completer=WordCompleter([str(c["id"]) for c in panel.categories])
        )
        if not raw.strip().isdigit():
            status_message = "Error: category id must be a number"
            return
        if Confirm.ask(f"[red]Delete category {raw}?[/red]"):
            try_api(panel.delete_category, int(raw), success_msg=f"Category {raw} deleted")


# ---------------------------
# Main menu
# ---------------------------
def menu(client: StoreClient, storage: LocalStorage):
    auth = AuthSession(client, storage)
    cart = Cart(storage)
    panel = AdminPanel(client)

    console.clear()
    try_api(auth.restore)
    console.print(create_header(auth, cart))
    try_api(panel.refresh)

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 Browse catalog", "8", "➕ Add product (admin)"),
            ("2", "🛒 Add to cart", "9", "🏷️ Add category (admin)"),
            ("3", "✏️ Edit cart", "10", "🗑️ Delete product (admin)"),
            ("4", "🧾 Checkout", "11", "🗑️ Delete category (admin)"),
            ("5", "🔑 Login", "", ""),
            ("6", "📝 Register", "", ""),
            ("7", "🚪 Logout", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 12)] + ["q", "quit", "exit"])
        ).strip()

        if choice in ("1", "2", "3", "4"):
            storefront_actions(choice, client, cart, panel)
        elif choice in ("5", "6", "7"):
            account_actions(choice, auth)
        elif choice in ("8", "9", "10", "11"):
            admin_actions(choice, client, panel)
        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Visit our store again soon! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


def main():
    setup_logging()
    try:
        menu(StoreClient(), LocalStorage())
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
