import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.core.config import settings
from app.core.exceptions import MarketplaceError
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.api.routes import auth
from app.api.routes import users as users_router
from app.api.routes import admin as admin_router
from app.api.routes import admin_dashboard as admin_dashboard_router
from app.api.routes import providers as providers_router
from app.api.routes import categories as categories_router
from app.api.routes import services as services_router
from app.api.routes import requests as requests_router
from app.api.routes import quotes as quotes_router
from app.api.routes import bookings as bookings_router
from app.api.routes import review as review_router

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Local Services Marketplace API", version="0.1.0")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

allow_any_origin = settings.CORS_ORIGINS == ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    # Browsers reject wildcard CORS with credentials enabled.
    allow_credentials=not allow_any_origin,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("%s %s refused (%s): %s", request.method, request.url.path, exc.kind, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": exc.kind})


@app.on_event("startup")
def startup():
    init_db()

@app.get("/")
def root():
    return {"message": "Local Services Marketplace API running"}


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(auth.router, prefix="/api/auth")
app.include_router(users_router.router)
app.include_router(admin_router.router)
app.include_router(admin_dashboard_router.router)
app.include_router(providers_router.router)
app.include_router(categories_router.router)
app.include_router(services_router.router)
app.include_router(requests_router.router)
app.include_router(quotes_router.router)
app.include_router(bookings_router.router)
app.include_router(review_router.router)
