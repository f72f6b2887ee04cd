from .connection import DocumentStore

__all__ = ["DocumentStore"]
