"""Profile stores and the facade that chooses between them."""

from profile_manager.storage.base import ProfileBackend
from profile_manager.storage.context import StorageContext, get_storage
from profile_manager.storage.facade import StorageFacade
from profile_manager.storage.local import LocalBackend
from profile_manager.storage.memory import MemoryBackend
from profile_manager.storage.sql import SqlBackend

__all__ = [
    "ProfileBackend",
    "StorageContext",
    "StorageFacade",
    "LocalBackend",
    "MemoryBackend",
    "SqlBackend",
    "get_storage",
]
