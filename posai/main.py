from fastapi import FastAPI
from posai.core.config import get_settings
from posai.core.lifespan import lifespan
from posai.api.v1.routers.health import router as health_router
from posai.api.v1.routers.demand import router as demand_router
from posai.api.v1.routers.pricing import router as pricing_router
from posai.api.v1.routers.inventory import router as inventory_router
from posai.api.v1.routers.engine import router as engine_router
from posai.core.logging import configure_logging

from fastapi.middleware.cors import CORSMiddleware
import logging, os

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

app = FastAPI(title=settings.APP_NAME, version=settings.ai_model_version, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://pos.example.com,http://localhost:5173"
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if allowed_origins else [
        # POS frontend dev servers
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

# ------- Routes -------
app.include_router(health_router)
app.include_router(demand_router, prefix=settings.api_prefix)       # /ai/demand/...
app.include_router(pricing_router, prefix=settings.api_prefix)      # /ai/pricing/...
app.include_router(inventory_router, prefix=settings.api_prefix)    # /ai/inventory/...
app.include_router(engine_router, prefix=settings.api_prefix)       # /ai/engine/...
