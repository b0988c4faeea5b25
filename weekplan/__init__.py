"""Weekly schedule board with movable, resizable cards."""

from .config import AppConfig, DisplayConfig, GridConfig, StorageConfig
from .models import Card
from .store import CardStore, JsonFileBlobStore, MemoryBlobStore

__all__ = [
    "AppConfig",
    "Card",
    "CardStore",
    "DisplayConfig",
    "GridConfig",
    "JsonFileBlobStore",
    "MemoryBlobStore",
    "StorageConfig",
]

__version__ = "0.1.0"
