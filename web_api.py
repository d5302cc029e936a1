from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.api.contracts import HealthResponse
from storefront.api.http_setup import register_exception_handlers, register_http_middleware
from storefront.auth.middleware import create_auth_middleware
from storefront.auth.repository import UserRepository
from storefront.auth.router import create_auth_router
from storefront.auth.service import AuthService
from storefront.auth.tokens import TokenService
from storefront.catalog.image_store import ImageStore, LocalImageStore
from storefront.catalog.repository import ProductRepository
from storefront.catalog.router import create_catalog_router
from storefront.catalog.service import CatalogService
from storefront.core.config import AppConfig
from storefront.core.logging import setup_logging
from storefront.core.mongo import connect_database
from storefront.core.mongo_migrations import apply_mongo_migrations
from storefront.shopping.router import create_shopping_list_router
from storefront.shopping.service import ShoppingListService

LOGGER = logging.getLogger(__name__)


def create_app(
    config: AppConfig,
    *,
    token_service: TokenService | None = None,
    image_store: ImageStore | None = None,
) -> FastAPI:
    app = FastAPI(title="Storefront API", version="1.0.0")

    runtime_dir = config.storage.runtime_dir
    media_dir = runtime_dir / "media"
    media_dir.mkdir(parents=True, exist_ok=True)

    database = connect_database(config.storage)
    apply_mongo_migrations(database)

    users = UserRepository(runtime_dir=runtime_dir, database=database)
    products = ProductRepository(runtime_dir=runtime_dir, database=database)
    auth_service = AuthService(users, token_service or TokenService(config.auth))
    catalog_service = CatalogService(
        repo=products,
        image_store=image_store or LocalImageStore(media_dir),
        upload_max_bytes=config.security.upload_max_bytes,
    )
    shopping_service = ShoppingListService(users=users, products=products)

    # Registered first so the logging middleware below wraps auth rejections.
    app.middleware("http")(create_auth_middleware(auth_service))
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.mount("/media", StaticFiles(directory=str(media_dir)), name="media")

    app.include_router(create_auth_router(auth_service, config.auth))
    app.include_router(create_catalog_router(catalog_service))
    app.include_router(create_shopping_list_router(shopping_service, "cart"))
    app.include_router(create_shopping_list_router(shopping_service, "wishlist"))

    @app.get("/")
    def index() -> dict[str, str]:
        return {
            "/products": "Get all products",
            "/auth": "Signup, login, refresh, logout and profile",
            "/cart": "Manage the signed-in user's cart",
            "/wishlist": "Manage the signed-in user's wishlist",
        }

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    return app


load_dotenv()
APP_CONFIG = AppConfig.from_env()
setup_logging(APP_CONFIG.logging.level)
app = create_app(APP_CONFIG)
