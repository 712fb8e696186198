from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class CanvasSnapshot(Base):
    __tablename__ = "canvas_snapshots"

    id = Column(Integer, primary_key=True)
    project_id = Column(String(128), nullable=False, unique=True, index=True)
    nodes = Column(JSON, nullable=False, default=list)
    edges = Column(JSON, nullable=False, default=list)
    last_processed = Column(JSON, nullable=False, default=dict)
    auto_edges = Column(JSON, nullable=False, default=dict)
    viewport = Column(JSON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_snapshot(self) -> dict:
        data = {
            "nodes": self.nodes or [],
            "edges": self.edges or [],
            "lastProcessed": self.last_processed or {},
            "autoEdges": self.auto_edges or {},
        }
        if self.viewport:
            data["viewport"] = self.viewport
        return data
