"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn tubegrow.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tubegrow import __version__
from tubegrow.ai.providers import gemini_provider, grok_provider, openai_provider
from tubegrow.ai.registry import KeyRegistry
from tubegrow.core.config import settings
from tubegrow.deps import get_key_registry
from tubegrow.routers import channel, chat, settings as settings_router, stats, studio, tools

# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the SDK connection pools held by the shared adapters
    for provider in (gemini_provider, openai_provider, grok_provider):
        await provider.aclose()


# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# The dashboard is served from a different origin than the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# tools.router: /tools/* growth tools
# studio.router: /studio/speech, /studio/transcribe, /studio/video
# chat.router: /chat, /chat/stream
# settings_router.router: /settings/keys
# channel.router: /channel, /channel/videos
# stats.router: /ai/stats
app.include_router(tools.router)
app.include_router(studio.router)
app.include_router(chat.router)
app.include_router(settings_router.router)
app.include_router(channel.router)
app.include_router(stats.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check(registry: KeyRegistry = Depends(get_key_registry)):
    """
    Liveness check plus which AI providers currently have a key.

    Returns:
        {"status": "ok", "providers": {"gemini": true, "openai": false, "grok": false}}
    """
    return {"status": "ok", "providers": registry.status()}
