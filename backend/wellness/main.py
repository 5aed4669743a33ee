# wellness/main.py
"""
FastAPI app: CORS, lifespan (startup/shutdown), routers + request logging middleware.
"""
import logging, time
from datetime import datetime, timezone

# load .env BEFORE importing anything that reads settings
from dotenv import load_dotenv, find_dotenv
load_dotenv(find_dotenv(usecwd=True), override=False)

from contextlib import asynccontextmanager
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .db.mongo import connect_to_mongo, disconnect_from_mongo
from .core.config import settings
from .core.error_handlers import register_error_handlers
from .routes import auth, users, questionnaire
from .telemetry.logging import setup_logging

setup_logging()
http_logger = logging.getLogger("wellness.http")

@asynccontextmanager
async def lifespan(app: FastAPI):
    connect_to_mongo()
    yield
    disconnect_from_mongo()

app = FastAPI(title="Wellness Screening API", version="0.1.0", lifespan=lifespan)

# ---------------- CORS ----------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# ---------------- Request logging ----------------
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        dur = round(time.time() - start, 4)
        http_logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {dur}s")
        return response
    except Exception as e:
        dur = round(time.time() - start, 4)
        http_logger.exception(f"{request.method} {request.url.path} EXC after {dur}s: {e}")
        raise

# ---------------- Routers ----------------
api = APIRouter(prefix=settings.API_PREFIX)

@api.get("/health", tags=["misc"])
async def health():
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}

api.include_router(auth.router,          prefix="/auth",          tags=["auth"])
api.include_router(users.router,         prefix="/users",         tags=["users"])
api.include_router(questionnaire.router, prefix="/questionnaire", tags=["questionnaire"])

app.include_router(api)
