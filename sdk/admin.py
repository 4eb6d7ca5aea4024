# sdk/admin.py
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError, field_validator

from sdk.client import StoreClient


class ProductForm(BaseModel):
    name: str = Field(min_length=1)
    price: float = Field(gt=0)
    description: str = ""
    image: Path
    category: str = Field(min_length=1)

    @field_validator("name", "category", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("image")
    @classmethod
    def _image_exists(cls, value: Path) -> Path:
        if not value.is_file():
            raise ValueError("Product image is required")
        return value

    @field_validator("category")
    @classmethod
    def _category_id(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError("Category is required")
        return value


class CategoryForm(BaseModel):
    name: str = Field(min_length=1)

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


def form_errors(exc: ValidationError) -> Dict[str, str]:
    """Field name -> first error message, for display next to each input."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "__all__"
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


class AdminPanel:
    """
    Local mirror of the product and category lists for the admin dashboard.
    Creates append the server's response and deletes filter the list once the
    server confirms; nothing is re-fetched to double check.
    """

    def __init__(self, client: StoreClient):
        self.client = client
        self.products: List[Dict[str, Any]] = []
        self.categories: List[Dict[str, Any]] = []

    def refresh(self):
        self.products = self.client.list_products()
        self.categories = self.client.list_categories()
        return self.products

    def add_product(self, form: ProductForm) -> Dict[str, Any]:
        product = self.client.create_product(
            form.name, form.price, form.category, description=form.description, image_path=form.image
        )
        self.products.append(product)
        return product

    def delete_product(self, product_id: int):
        self.client.delete_product(product_id)
        self.products = [p for p in self.products if p.get("id") != product_id]

    def add_category(self, form: CategoryForm) -> Dict[str, Any]:
        category = self.client.create_category(form.name)
        self.categories.append(category)
        return category

    def delete_category(self, category_id: int):
        self.client.delete_category(category_id)
        self.categories = [c for c in self.categories if c.get("id") != category_id]

    def category_name(self, category_id) -> str:
        for c in self.categories:
            if c.get("id") == category_id:
                return c.get("name", "")
        return ""
