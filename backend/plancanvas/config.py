import logging
import os

from dotenv import load_dotenv

# Load .env from project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./plancanvas.db")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PLACEMENT_MAX_RINGS = int(os.getenv("PLACEMENT_MAX_RINGS", "12"))
LAYOUT_MAX_ITERATIONS = int(os.getenv("LAYOUT_MAX_ITERATIONS", "300"))


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
