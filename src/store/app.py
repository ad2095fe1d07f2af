# src/store/app.py
import os
import logging
import mimetypes
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException as FastAPIHTTPException

from starlette.middleware.sessions import SessionMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.store.config import settings
from src.store.middleware.cors import install_cors
from src.store.middleware.security_headers import security_headers_middleware
from src.store.utils.csrf import csrf_cookie_middleware
from src.store.utils.database import init_models
from src.store.utils.error_handler import custom_exception_handler
from src.store.utils.errors import StoreError
from src.store.utils.image_host import configure_cloudinary
from src.store.utils.logging_setup import configure_logging

from src.store.routes.health import router as health_router
from src.store.routes.banners_api import router as banners_api_router
from src.store.routes.users_api import router as users_api_router
from src.store.routes.categories_api import (
    categories_router,
    subcategories_router,
    subsubcategories_router,
)
from src.store.routes.products_api import router as products_api_router
from src.store.routes.offers_api import router as offers_api_router
from src.store.routes.orders_api import router as orders_api_router
from src.store.routes.reports_api import router as reports_api_router
from src.store.routes.settings_api import router as settings_api_router
from src.store.routes.upload_api import router as upload_api_router
from src.store.routes.import_api import router as import_api_router
from src.store.routes.admin_auth_pages import router as admin_auth_router
from src.store.routes.routes_banner_pages import router as banner_pages_router

configure_logging()
logger = logging.getLogger(__name__)

mimetypes.add_type("image/avif", ".avif")
mimetypes.add_type("image/webp", ".webp")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    configure_cloudinary()
    logger.info("Server running in %s on port %s", settings.ENVIRONMENT, settings.PORT)
    logger.info("Health check -> http://localhost:%s/health", settings.PORT)
    yield
    logger.info("Shutting down")


app = FastAPI(title="ave-store", version="1.0", lifespan=lifespan)

# ----------------------------------------------------------
# ABSOLUTE PATHS
# ----------------------------------------------------------
current_dir = os.path.dirname(os.path.abspath(__file__))            # src/store
project_root = os.path.abspath(os.path.join(current_dir, "../../")) # repo root
frontend_static_path = os.path.join(project_root, "frontend", "static")

if os.path.isdir(frontend_static_path):
    app.mount("/static", StaticFiles(directory=frontend_static_path), name="static")

# ----------------------------------------------------------
# SESSION
# ----------------------------------------------------------
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    same_site=(
        settings.SESSION_SAMESITE
        if settings.SESSION_SAMESITE in ("lax", "strict", "none")
        else "lax"
    ),
    https_only=settings.SESSION_HTTPS_ONLY,
)

# ----------------------------------------------------------
# CSP & SECURITY HEADERS
# ----------------------------------------------------------
app.middleware("http")(security_headers_middleware)


# ----------------------------------------------------------
# GLOBAL XSRF TOKEN SEEDING
# ----------------------------------------------------------
app.middleware("http")(csrf_cookie_middleware)


# ----------------------------------------------------------
# CORS (outermost, so error responses carry the headers too)
# ----------------------------------------------------------
install_cors(app, settings.cors_origins)

# ----------------------------------------------------------
# ERROR HANDLERS
# ----------------------------------------------------------
# routing 404 etc.
app.add_exception_handler(StarletteHTTPException, custom_exception_handler)
# the ones raised by routes and dependencies
app.add_exception_handler(FastAPIHTTPException, custom_exception_handler)
app.add_exception_handler(RequestValidationError, custom_exception_handler)
# ValidationError / NotFoundError / ConflictError / UploadError / NetworkError
app.add_exception_handler(StoreError, custom_exception_handler)
# catch-all
app.add_exception_handler(Exception, custom_exception_handler)

# ----------------------------------------------------------
# ROUTERS
# ----------------------------------------------------------
app.include_router(health_router)
app.include_router(products_api_router)
app.include_router(users_api_router)
app.include_router(orders_api_router)
app.include_router(categories_router)
app.include_router(subcategories_router)
app.include_router(subsubcategories_router)
app.include_router(upload_api_router)
app.include_router(offers_api_router)
app.include_router(reports_api_router)
app.include_router(settings_api_router)
app.include_router(import_api_router)
app.include_router(banners_api_router)
app.include_router(admin_auth_router)
app.include_router(banner_pages_router)
