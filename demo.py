#!/usr/bin/env python
import io
import tempfile
from pathlib import Path

from PIL import Image

from sdk.cart import Cart
from sdk.client import AuthSession, StoreClient
from sdk.receipt import checkout
from sdk.storage import LocalStorage


def main():
    c = StoreClient()
    workdir = Path(tempfile.mkdtemp(prefix="clothify-demo-"))
    storage = LocalStorage(workdir / "storage.json")

    # -----------------------------
    # Register and log in
    # -----------------------------
    print("Registering demo user...")
    auth = AuthSession(c, storage)
    email = f"demo-{workdir.name}@example.com"
    print(auth.register("Demo Shopper", email, "demo-password"))
    print(auth.login(email, "demo-password"))

    # -----------------------------
    # Category and product
    # -----------------------------
    print("\nCreating category and product...")
    category = c.create_category("Shoes")
    print(category)

    buf = io.BytesIO()
    Image.new("RGB", (64, 64), "navy").save(buf, "PNG")
    image_path = workdir / "sneaker.png"
    image_path.write_bytes(buf.getvalue())
    product = c.create_product("Sneaker", "49.99", category["id"], description="Canvas upper", image_path=image_path)
    print(product)
    print("Image served at", c.image_url(product))

    # -----------------------------
    # Cart and checkout
    # -----------------------------
    print("\nFilling the cart...")
    cart = Cart(storage)
    cart.add(product)
    cart.add(product)
    print(f"{cart.count()} item(s), total ${cart.total():.2f}")

    receipt = checkout(cart, workdir / "receipt.pdf")
    print("Receipt written to", receipt)

    # -----------------------------
    # Clean up
    # -----------------------------
    print("\nRemoving demo data...")
    print(c.delete_product(product["id"]))
    print(c.delete_category(category["id"]))
    auth.logout()
    print(c.list_products())


if __name__ == "__main__":
    main()
