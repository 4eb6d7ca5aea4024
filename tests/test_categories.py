# tests/test_categories.py
from conftest import png_bytes


def test_create_and_list(client):
    assert client.get("/api/categories").json() == []
    a = client.post("/api/categories", json={"name": "Shirts"}).json()
    b = client.post("/api/categories", json={"name": "Shirts"}).json()
    # names are not unique
    assert a["id"] != b["id"]
    assert client.get("/api/categories").json() == [a, b]


def test_blank_or_missing_name(client):
    assert client.post("/api/categories", json={"name": "   "}).status_code == 400
    assert client.post("/api/categories", json={}).status_code == 400
    assert client.post("/api/categories", content=b"{oops", headers={"Content-Type": "application/json"}).status_code == 400


def test_delete(client):
    cat = client.post("/api/categories", json={"name": "Hats"}).json()
    r = client.delete(f"/api/categories/{cat['id']}")
    assert r.status_code == 200
    assert r.json() == cat
    assert client.get("/api/categories").json() == []
    assert client.delete(f"/api/categories/{cat['id']}").status_code == 404


def test_delete_rejects_out_of_range_ids(client):
    assert client.delete("/api/categories/0").status_code == 400
    assert client.delete("/api/categories/99999999999999999999").status_code == 400


def test_delete_refused_while_products_reference_it(client):
    cat = client.post("/api/categories", json={"name": "Shoes"}).json()
    product = client.post(
        "/api/products",
        data={"name": "Boot", "price": "80", "categoryId": str(cat["id"])},
        files={"image": ("boot.png", png_bytes(), "image/png")},
    ).json()

    r = client.delete(f"/api/categories/{cat['id']}")
    assert r.status_code == 409
    assert client.get("/api/categories").json() == [cat]

    client.delete(f"/api/products/{product['id']}")
    assert client.delete(f"/api/categories/{cat['id']}").status_code == 200


def test_root_liveness(client):
    assert client.get("/").json() == {"message": "Server is running"}
