# posai/core/lifespan.py
from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI

from posai.core.config import get_settings
from posai.db import mongo, redis as r
from posai.domain.engine.facade import build_engine
from posai.domain.repositories.product_repo import InMemoryProductRepo, ProductRepo
from posai.domain.repositories.sample_catalog import SAMPLE_PRODUCTS
from posai.domain.repositories.token_repo import TokenRepo

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo optional: without it the engine runs on the sample catalog
    if settings.MONGO_URI:
        await mongo.connect()
    else:
        logger.warning("No MONGO_URI provided, using the in-memory sample catalog")

    # Redis optional: only holds the auth token
    if settings.REDIS_URL:
        await r.connect()
    else:
        logger.warning("No REDIS_URL provided, requests go out without a bearer token")

    db = mongo.get_db()
    catalog = ProductRepo(db) if db is not None else InMemoryProductRepo(SAMPLE_PRODUCTS)
    http_client = httpx.AsyncClient(timeout=settings.AI_REQUEST_TIMEOUT_S)

    app.state.engine = build_engine(
        settings.engine_config(),
        base_url=settings.AI_API_BASE_URL,
        use_backend=not settings.AI_MOCK_MODE,
        http_client=http_client,
        token_repo=TokenRepo(r.get_redis(), settings.auth_token_key),
        catalog=catalog,
    )

    # Application runs
    yield

    # --- Shutdown ---
    await app.state.engine.aclose()
    await http_client.aclose()
    if settings.REDIS_URL:
        await r.disconnect()
    if settings.MONGO_URI:
        await mongo.disconnect()
    logger.info("Shutdown complete")
