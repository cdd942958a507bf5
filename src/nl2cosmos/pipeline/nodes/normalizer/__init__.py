from .node import normalize

__all__ = ["normalize"]
