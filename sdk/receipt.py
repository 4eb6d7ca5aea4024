"""
Printable order receipt rendered locally with Pillow and saved as a multi-page PDF.
"""
import logging
from collections import namedtuple
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional

from PIL import Image, ImageDraw, ImageFont

from sdk.cart import Cart, CartLine

logger = logging.getLogger(__name__)

PAGE_SIZE = (827, 1169)  # A4 at 100 DPI
MARGIN = 60
LINE_HEIGHT = 40
PRICE_COLUMN = 560
RULE = "-" * 48

Row = namedtuple("Row", ["kind", "left", "right"])

FONT_SIZES = {"title": 30, "total": 24, "text": 20, "item": 20, "rule": 20}


def rows_per_page(page_size=PAGE_SIZE, margin: int = MARGIN, line_height: int = LINE_HEIGHT) -> int:
    return max(1, (page_size[1] - 2 * margin) // line_height)


def receipt_rows(lines: Iterable[CartLine], total: Decimal, store_name: str = "Clothify") -> List[Row]:
    rows = [
        Row("title", f"{store_name} - Order Receipt", ""),
        Row("rule", RULE, ""),
        Row("text", "Items:", ""),
    ]
    for line in lines:
        rows.append(Row("item", f"{line.product.get('name', 'Item')} (x{line.quantity})", f"${line.line_total:.2f}"))
    rows.extend([
        Row("rule", RULE, ""),
        Row("total", f"Total: ${total:.2f}", ""),
        Row("rule", RULE, ""),
        Row("text", "Thank you for shopping with us!", ""),
    ])
    return rows


def closing_rows(store_name: str = "Clothify") -> List[Row]:
    return [
        Row("title", f"{store_name} - Thank You!", ""),
        Row("text", "", ""),
        Row("text", "Visit our store again soon!", ""),
    ]


def paginate(rows: List[Row], per_page: int) -> List[List[Row]]:
    if per_page < 1:
        raise ValueError("per_page must be positive")
    return [rows[i:i + per_page] for i in range(0, len(rows), per_page)] or [[]]


def _font(kind: str):
    return ImageFont.load_default(size=FONT_SIZES.get(kind, 20))


def _draw_page(rows: List[Row], page_no: int, page_count: int) -> Image.Image:
    page = Image.new("RGB", PAGE_SIZE, "white")
    draw = ImageDraw.Draw(page)
    y = MARGIN
    for row in rows:
        font = _font(row.kind)
        draw.text((MARGIN, y), row.left, fill="black", font=font)
        if row.right:
            draw.text((PRICE_COLUMN, y), row.right, fill="black", font=font)
        y += LINE_HEIGHT
    footer = f"Page {page_no} of {page_count}"
    draw.text((MARGIN, PAGE_SIZE[1] - MARGIN // 2 - 10), footer, fill="grey", font=_font("text"))
    return page


def render_receipt(lines: Iterable[CartLine], total: Decimal, path, store_name: str = "Clothify",
                   per_page: Optional[int] = None) -> int:
    """
    Write the receipt for ``lines`` to ``path`` as a PDF.

    Item rows that do not fit on a page continue on the next one, and a closing
    thank-you page is always appended. Returns the number of pages written.
    """
    per_page = per_page or rows_per_page()
    pages = paginate(receipt_rows(lines, total, store_name), per_page)
    pages.append(closing_rows(store_name))

    images = [_draw_page(rows, i + 1, len(pages)) for i, rows in enumerate(pages)]
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    images[0].save(target, "PDF", save_all=True, append_images=images[1:], resolution=100.0)
    logger.info("Receipt written to %s (%d pages)", target, len(images))
    return len(images)


def checkout(cart: Cart, path, store_name: str = "Clothify") -> Path:
    """Print the receipt for the cart, then empty it."""
    if len(cart) == 0:
        raise ValueError("cart is empty")
    render_receipt(list(cart), cart.total(), path, store_name=store_name)
    cart.clear()
    return Path(path)
