import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from discount_app.database import create_db_and_tables
from discount_app.config import settings
from discount_app.routes import (
    analytics,
    cart_pricing,
    discounts,
    health,
    proxy,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Product Discounts API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cart_pricing.router, prefix="/api/cart", tags=["Cart Pricing"])
app.include_router(discounts.router, prefix="/api/discounts", tags=["Discounts"])
app.include_router(proxy.router, prefix="/apps/proxy", tags=["Storefront Proxy"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(health.router, prefix="/health", tags=["Health"])

@app.get("/")
def root():
    return {
        "cart_endpoints": [
            "/api/cart/apply-discount"
        ],
        "discount_endpoints": [
            "/api/discounts", "/api/discounts/{rule_id}",
            "/api/discounts/function-configuration"
        ],
        "storefront_endpoints": [
            "/apps/proxy/product-discount"
        ],
        "analytics_endpoints": [
            "/api/analytics/track-view", "/api/analytics/weekly",
            "/api/analytics/export"
        ],
        "health": [
            "/health/check"
        ]
    }
