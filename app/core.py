from pydantic import BaseModel
from typing import Optional, Dict, Any

from app.media import MediaStore
from app.models import Category, Product, User

# Request schemas and the helpers that shape ORM rows into JSON.

class RegisterIn(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class CategoryIn(BaseModel):
    name: Optional[str] = None

def _clean(value: Optional[str]) -> str:
    return (value or "").strip()

def _make_user_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
    }

def _make_category_dict(category: Category) -> Dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
    }

def _make_product_dict(product: Product, media: MediaStore) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "description": product.description or "",
        "imageUrl": media.url_for(product.image),
        "categoryId": product.category_id,
    }
