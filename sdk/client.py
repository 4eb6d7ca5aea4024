# sdk/client.py
import mimetypes
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from sdk.storage import LocalStorage

DEFAULT_BASE_URL = "http://127.0.0.1:5000"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StoreClient:
    def __init__(self, base_url: Optional[str] = None, session: Any = None, timeout: int = 10):
        self.base_url = (base_url or os.getenv("STORE_API_URL", DEFAULT_BASE_URL)).rstrip("/")
        # any object with requests-style get/post/delete works, e.g. fastapi's TestClient
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api{path}"

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _json(self, r) -> Any:
        if r.status_code >= 400:
            try:
                message = r.json().get("detail", r.text)
            except (ValueError, AttributeError):
                message = r.text
            raise ApiError(r.status_code, str(message))
        return r.json()

    def set_token(self, token: str):
        self.token = token

    def clear_token(self):
        self.token = None

    # Auth
    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        r = self.session.post(self._url("/register"), json={
            "name": name, "email": email, "password": password
        }, timeout=self.timeout)
        return self._json(r)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        r = self.session.post(self._url("/login"), json={"email": email, "password": password}, timeout=self.timeout)
        return self._json(r)

    def me(self) -> Dict[str, Any]:
        r = self.session.get(self._url("/me"), headers=self._headers(), timeout=self.timeout)
        return self._json(r)

    # Products
    def list_products(self) -> List[Dict[str, Any]]:
        r = self.session.get(self._url("/products"), timeout=self.timeout)
        return self._json(r)

    def create_product(self, name: str, price: Any, category_id: Any, description: str = "",
                       image_path: Optional[os.PathLike] = None) -> Dict[str, Any]:
        data = {
            "name": name,
            "price": str(price),
            "description": description or "",
            "categoryId": str(category_id),
        }
        if image_path is None:
            r = self.session.post(self._url("/products"), data=data, headers=self._headers(), timeout=self.timeout)
            return self._json(r)

        path = Path(image_path)
        mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        with path.open("rb") as fh:
            r = self.session.post(self._url("/products"), data=data, files={"image": (path.name, fh, mime)},
                                  headers=self._headers(), timeout=self.timeout)
        return self._json(r)

    def delete_product(self, product_id: int) -> Dict[str, Any]:
        r = self.session.delete(self._url(f"/products/{product_id}"), headers=self._headers(), timeout=self.timeout)
        return self._json(r)

    def image_url(self, product: Dict[str, Any]) -> Optional[str]:
        path = product.get("imageUrl")
        if not path:
            return None
        return urljoin(self.base_url + "/", path.lstrip("/"))

    # Categories
    def list_categories(self) -> List[Dict[str, Any]]:
        r = self.session.get(self._url("/categories"), timeout=self.timeout)
        return self._json(r)

    def create_category(self, name: str) -> Dict[str, Any]:
        r = self.session.post(self._url("/categories"), json={"name": name}, headers=self._headers(), timeout=self.timeout)
        return self._json(r)

    def delete_category(self, category_id: int) -> Dict[str, Any]:
        r = self.session.delete(self._url(f"/categories/{category_id}"), headers=self._headers(), timeout=self.timeout)
        return self._json(r)


class AuthSession:
    """Login/register/logout on top of a StoreClient, holding the current user."""

    TOKEN_KEY = "token"

    def __init__(self, client: StoreClient, storage: Optional[LocalStorage] = None):
        self.client = client
        self.storage = storage if storage is not None else LocalStorage()
        self.user: Optional[Dict[str, Any]] = None

    @property
    def logged_in(self) -> bool:
        return self.user is not None

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self.client.login(email, password)
        token = body.get("token")
        if token:
            self.storage.set_item(self.TOKEN_KEY, token)
            self.client.set_token(token)
        self.user = body.get("user")
        return self.user

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        self.user = self.client.register(name, email, password)
        return self.user

    def logout(self):
        self.storage.remove_item(self.TOKEN_KEY)
        self.client.clear_token()
        self.user = None

    def restore(self) -> Optional[Dict[str, Any]]:
        token = self.storage.get_item(self.TOKEN_KEY)
        if not token:
            return None
        self.client.set_token(token)
        try:
            self.user = self.client.me()
        except ApiError as e:
            if e.status_code != 401:
                raise
            # stale token from an earlier session
            self.logout()
        return self.user
