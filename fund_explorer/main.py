"""
Fund Explorer — FastAPI app factory with startup data loading.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fund_explorer import __version__
from fund_explorer.api.dependencies import set_store
from fund_explorer.api.router_funds import router as funds_router
from fund_explorer.api.router_meta import router as meta_router
from fund_explorer.api.router_upload import router as upload_router
from fund_explorer.config import DATA_FOLDER
from fund_explorer.data.store import FundStore
from fund_explorer.logging_setup import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(data_dir: Optional[Path] = None) -> FastAPI:
    source_dir = data_dir or DATA_FOLDER

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load every profile's snapshot at startup."""
        configure_logging()
        source_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Source folder: %s", source_dir)

        store = FundStore(source_dir).load()
        set_store(store)

        loaded = store.profiles_loaded()
        if loaded:
            logger.info(
                "Fund Explorer ready — %d funds across %s",
                store.row_count(), ", ".join(p.value for p in loaded),
            )
        else:
            logger.warning("Fund Explorer ready — no data yet. Upload an export via /api/upload.")
        yield

    app = FastAPI(
        title="Fund Explorer API",
        description="Browse, filter and compare investment funds from semicolon-delimited exports",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(funds_router)
    app.include_router(upload_router)

    return app


app = create_app()
