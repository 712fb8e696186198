from typing import Iterator, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from plancanvas.config import DATABASE_URL
from plancanvas.db.models import CanvasSnapshot


def make_engine(url: str = DATABASE_URL, **kwargs):
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def save_snapshot(db: Session, project_id: str, snapshot: dict) -> CanvasSnapshot:
    """Insert or overwrite the stored snapshot for `project_id`."""
    row = db.execute(
        select(CanvasSnapshot).where(CanvasSnapshot.project_id == project_id)
    ).scalar_one_or_none()
    if row is None:
        row = CanvasSnapshot(project_id=project_id)
        db.add(row)

    row.nodes = snapshot.get("nodes", [])
    row.edges = snapshot.get("edges", [])
    row.last_processed = snapshot.get("lastProcessed", {})
    row.auto_edges = snapshot.get("autoEdges", {})
    row.viewport = snapshot.get("viewport")
    db.commit()
    db.refresh(row)
    return row


def load_snapshot(db: Session, project_id: str) -> Optional[dict]:
    row = db.execute(
        select(CanvasSnapshot).where(CanvasSnapshot.project_id == project_id)
    ).scalar_one_or_none()
    return row.to_snapshot() if row is not None else None
