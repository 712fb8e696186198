import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from plancanvas.api.routes import router
from plancanvas.config import CORS_ORIGINS, configure_logging
from plancanvas.db.models import Base
from plancanvas.db.session import engine

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Planning Canvas Sync",
    version="0.1.0",
)

# Middleware before routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.on_event("startup")
def startup():
    retries = 5
    delay = 2

    for attempt in range(retries):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("[DB] Database connected")
            return
        except OperationalError:
            logger.warning("[DB] Waiting for database... (%d/%d)", attempt + 1, retries)
            time.sleep(delay)

    # Canvas sync works without the database; only /save and /load need it
    logger.warning("[DB] Database not ready, running without persistence")
