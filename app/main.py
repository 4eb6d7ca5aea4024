# app/main.py
import logging
import math
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Header, Path, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings
from app.core import (
    RegisterIn, LoginIn, CategoryIn,
    _clean, _make_user_dict, _make_category_dict, _make_product_dict
)
from app.database import Store, get_db
from app.errors import (
    AuthError, ConflictError, NotFoundError, StoreError, ValidationError,
    install_error_handlers
)
from app.logging_config import setup_logging
from app.media import MediaStore
from app.models import Category, Product, User
from app.security import hash_password, issue_token, password_too_long, read_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()

# ids are stored as signed 64-bit integers
MAX_ID = 2**63 - 1


# ---------------------------
# Dependencies
# ---------------------------
def get_media(request: Request) -> MediaStore:
    return request.app.state.media


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise AuthError("Missing bearer token")
    user_id = read_token(authorization[7:].strip(), settings.secret_key, settings.token_ttl_seconds)
    if user_id is None:
        raise AuthError("Invalid or expired token")
    user = db.get(User, user_id)
    if user is None:
        raise AuthError("Invalid or expired token")
    return user


def require_writer(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if settings.require_auth:
        current_user(authorization, db, settings)


# ---------------------------
# Parsing helpers
# ---------------------------
def _parse_price(raw: Optional[str]) -> float:
    try:
        price = float(_clean(raw))
    except ValueError:
        raise ValidationError("Invalid data types for price or categoryId")
    if not math.isfinite(price) or price <= 0:
        raise ValidationError("Price must be positive")
    return price


def _parse_category_id(raw: Optional[str]) -> int:
    try:
        category_id = int(_clean(raw), 10)
    except ValueError:
        raise ValidationError("Invalid data types for price or categoryId")
    if not 1 <= category_id <= MAX_ID:
        raise ValidationError("categoryId is out of range")
    return category_id


def _commit(db: Session, what: str):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not %s", what)
        raise StoreError()


# ---------------------------
# Auth endpoints
# ---------------------------
@router.post("/register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    name, email, password = _clean(payload.name), _clean(payload.email).lower(), payload.password or ""
    if not name or not email or not password:
        raise ValidationError("All fields are required")
    if password_too_long(password):
        raise ValidationError("Password must be at most 72 bytes")

    if db.scalar(select(User).where(User.email == email)) is not None:
        raise ConflictError("User already exists")

    user = User(name=name, email=email, password=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Registration error")
        raise StoreError("Internal server error")
    logger.info("Registered user %s", user.id)
    return _make_user_dict(user)


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    email, password = _clean(payload.email).lower(), payload.password or ""
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        logger.warning("Login for unknown email")
        raise NotFoundError("User not found")
    if not verify_password(password, user.password):
        logger.warning("Rejected password for user %s", user.id)
        raise AuthError("Invalid password")

    token = issue_token(user.id, settings.secret_key)
    return {"message": "Login successful", "token": token, "user": _make_user_dict(user)}


@router.get("/me")
def me(user: User = Depends(current_user)):
    return _make_user_dict(user)


# ---------------------------
# Product endpoints
# ---------------------------
@router.get("/products")
def list_products(db: Session = Depends(get_db), media: MediaStore = Depends(get_media)):
    products = db.scalars(select(Product).order_by(Product.id)).all()
    return [_make_product_dict(p, media) for p in products]


@router.post("/products", status_code=201, dependencies=[Depends(require_writer)])
def create_product(
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    categoryId: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media),
):
    name = _clean(name)
    if not name or not _clean(categoryId):
        raise ValidationError("Missing required fields")
    parsed_price = _parse_price(price)
    parsed_category_id = _parse_category_id(categoryId)
    logger.debug("Received product data: name=%r price=%r categoryId=%r", name, parsed_price, parsed_category_id)

    # browsers send an empty part when no file is chosen
    image_data, image_name = None, None
    if image is not None and image.filename:
        image_data = media.read_upload(image)
        image_name = media.new_name(image.filename)

    if db.get(Category, parsed_category_id) is None:
        raise NotFoundError("Category not found")

    product = Product(
        name=name,
        price=parsed_price,
        description=description or "",
        image=image_name,
        category_id=parsed_category_id,
    )
    db.add(product)
    try:
        db.flush()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Product creation error")
        raise StoreError("Could not create product")

    if image_data is not None:
        try:
            media.save(image_name, image_data)
        except OSError:
            db.rollback()
            logger.exception("Could not store image for product %r", name)
            raise StoreError("Could not store the uploaded image")

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        media.delete(image_name)
        logger.exception("Product creation error")
        raise StoreError("Could not create product")

    logger.info("Created product %s in category %s", product.id, product.category_id)
    return _make_product_dict(product, media)


@router.delete("/products/{product_id}", dependencies=[Depends(require_writer)])
def delete_product(product_id: int = Path(ge=1, le=MAX_ID), db: Session = Depends(get_db), media: MediaStore = Depends(get_media)):
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    body = _make_product_dict(product, media)
    image_name = product.image
    db.delete(product)
    _commit(db, f"delete product {product_id}")
    media.delete(image_name)
    logger.info("Deleted product %s", product_id)
    return body


# ---------------------------
# Category endpoints
# ---------------------------
@router.post("/categories", status_code=201, dependencies=[Depends(require_writer)])
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    name = _clean(payload.name)
    if not name:
        raise ValidationError("Category name is required")
    category = Category(name=name)
    db.add(category)
    _commit(db, "create category")
    logger.info("Created category %s", category.id)
    return _make_category_dict(category)


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    categories = db.scalars(select(Category).order_by(Category.id)).all()
    return [_make_category_dict(c) for c in categories]


@router.delete("/categories/{category_id}", dependencies=[Depends(require_writer)])
def delete_category(category_id: int = Path(ge=1, le=MAX_ID), db: Session = Depends(get_db)):
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    in_use = db.scalar(select(func.count(Product.id)).where(Product.category_id == category_id))
    if in_use:
        raise ConflictError(f"Category is used by {in_use} product(s)")
    body = _make_category_dict(category)
    db.delete(category)
    _commit(db, f"delete category {category_id}")
    logger.info("Deleted category %s", category_id)
    return body


# ---------------------------
# App factory
# ---------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    store = Store(settings.database_url)
    media = MediaStore(settings.media_root, settings.media_url, settings.max_upload_bytes)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        media.open()
        store.open()
        try:
            yield
        finally:
            store.close()

    app = FastAPI(title="Clothify store API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.media = media

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.include_router(router, prefix="/api")
    app.mount(settings.media_url, StaticFiles(directory=str(media.root), check_dir=False), name="uploads")

    @app.get("/")
    def read_root():
        return {"message": "Server is running"}

    return app


app = create_app()


def run():
    import uvicorn

    settings = app.state.settings
    setup_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
