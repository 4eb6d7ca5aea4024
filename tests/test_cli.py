# tests/test_cli.py
import cli
from sdk.client import ApiError


def test_try_api_returns_result_and_sets_status():
    assert cli.try_api(lambda x: x * 2, 21, success_msg="Doubled") == 42
    assert cli.status_message == "Doubled"


def test_try_api_reports_api_errors():
    def failing():
        raise ApiError(404, "Product not found")

    assert cli.try_api(failing) is None
    assert cli.status_message == "Error: Product not found"


def test_try_api_reports_receipt_failures():
    # a cart line naming a product the catalog no longer has
    def broken_checkout():
        raise KeyError("price")

    assert cli.try_api(broken_checkout) is None
    assert cli.status_message.startswith("Error:")

    def unwritable():
        raise PermissionError("receipt.pdf")

    assert cli.try_api(unwritable) is None
    assert "receipt.pdf" in cli.status_message
