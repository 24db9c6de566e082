# main.py
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

BASE_DIR = Path(__file__).resolve().parent

# Load .env before the routers read their settings
load_dotenv(BASE_DIR / ".env")

from synrewrite.app import search_api  # noqa: E402

# ---------- Logging ----------
DEBUG = os.getenv("DEBUG", "0") == "1"
logger = logging.getLogger("synrewrite")
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.DEBUG if DEBUG else logging.INFO)

logger.info(
    "Flags: SYNONYMS_ENABLED=%s SYNONYMS_PATH=%s SYNONYMS_REFRESH_SECONDS=%.0f SYNONYMS_BIDIRECTIONAL=%s",
    search_api.SYNONYMS_ENABLED,
    search_api.SYNONYMS_PATH,
    search_api.SYNONYMS_REFRESH_SECONDS,
    search_api.SYNONYMS_BIDIRECTIONAL,
)

_origins_env = os.getenv("FRONTEND_ORIGINS", "")
ALLOWED_ORIGINS = [origin.strip() for origin in _origins_env.split(",") if origin.strip()] or ["*"]


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    if search_api.SYNONYMS_ENABLED:
        search_api.get_synonym_loader().get_synonyms()
    logger.info("Startup complete")
    yield


app = FastAPI(title="Synonym Rewrite Service", lifespan=_lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(search_api.router)


@app.get("/api/health")
def api_health():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


# ---------- Local start ----------
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("synrewrite.main:app", host="0.0.0.0", port=port, reload=False)
