# tests/test_admin.py
import pytest
from pydantic import ValidationError

from sdk.admin import AdminPanel, CategoryForm, ProductForm, form_errors
from sdk.client import ApiError, StoreClient


@pytest.fixture
def panel(client):
    return AdminPanel(StoreClient(base_url="http://testserver", session=client))


def test_product_form_rules(image_file, tmp_path):
    form = ProductForm(name=" Sneaker ", price="49.99", image=str(image_file), category="1")
    assert form.name == "Sneaker"
    assert form.price == 49.99

    with pytest.raises(ValidationError) as exc:
        ProductForm(name="", price="-1", image=str(tmp_path / "missing.png"), category="")
    errors = form_errors(exc.value)
    assert set(errors) == {"name", "price", "image", "category"}
    assert errors["image"] == "Product image is required"


def test_category_form_rules():
    assert CategoryForm(name="Hats").name == "Hats"
    with pytest.raises(ValidationError) as exc:
        CategoryForm(name="  ")
    assert "name" in form_errors(exc.value)


def test_lists_mirror_creates_and_deletes(panel, image_file):
    panel.refresh()
    assert panel.products == [] and panel.categories == []

    cat = panel.add_category(CategoryForm(name="Shoes"))
    product = panel.add_product(
        ProductForm(name="Sneaker", price=49.99, image=image_file, category=str(cat["id"]))
    )
    assert panel.categories == [cat]
    assert panel.products == [product]
    assert panel.category_name(product["categoryId"]) == "Shoes"

    panel.delete_product(product["id"])
    assert panel.products == []
    assert panel.client.list_products() == []

    panel.delete_category(cat["id"])
    assert panel.categories == []


def test_failed_delete_keeps_local_list(panel):
    cat = panel.add_category(CategoryForm(name="Shoes"))
    panel.client.delete_category(cat["id"])
    with pytest.raises(ApiError):
        panel.delete_category(cat["id"])
    assert panel.categories == [cat]
