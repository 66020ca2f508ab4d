import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moodtrip.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"

_log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

_handlers: list[logging.Handler] = [logging.StreamHandler()]
if settings.log_to_file:
    _LOG_DIR.mkdir(exist_ok=True)
    _handlers.append(
        RotatingFileHandler(
            _LOG_DIR / "moodtrip.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
    )

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=_handlers,
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("anthropic").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from moodtrip.routers import personalization

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from moodtrip.services.llm_client import llm_client

    if not llm_client.configured:
        logger.warning("No LLM provider configured, all generators will serve fallbacks")
    logger.info("MoodTrip personalization API started")
    yield

    from moodtrip.database import engine
    await engine.dispose()
    logger.info("MoodTrip personalization API stopped")


app = FastAPI(
    title="MoodTrip",
    description="Traveler profiles and personalized trip planning",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(personalization.router, prefix="/api/personalization", tags=["personalization"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "moodtrip-personalization"}
