from .store import GraphStore

__all__ = ["GraphStore"]
