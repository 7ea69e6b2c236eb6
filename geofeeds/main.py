# geofeeds/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

# Load <repo>/.env (main.py is <repo>/geofeeds/main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from geofeeds.api import api_router
from geofeeds.api.deps import get_hub
from geofeeds.services.feed_source import HttpxFeedSource
from geofeeds.services.hub import FeedHub

logger = logging.getLogger(__name__)

app = FastAPI(title="GeoFeeds", version="1.0.0")

# ── Compression (must be added before CORS) ──
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        # Local map client
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ──────────────────────────────────────────────────────────────
# Feed hub (one per process)
# ──────────────────────────────────────────────────────────────

_hub = FeedHub(source=HttpxFeedSource())


def provide_hub() -> FeedHub:
    return _hub


app.dependency_overrides[get_hub] = provide_hub

# Routes
app.include_router(api_router)

# ──────────────────────────────────────────────────────────────
# Startup / shutdown
# ──────────────────────────────────────────────────────────────

@app.on_event("startup")
async def startup():
    logger.info("[app] Starting feeds")
    await _hub.start()


@app.on_event("shutdown")
async def shutdown():
    logger.info("[app] Shutting down — cancelling timers and closing HTTP client")
    try:
        await _hub.close()
    except Exception as e:
        logger.warning(f"[app] Error closing feed hub: {e}")
