# (c) Copyright Datacraft, 2026
"""Storage backend abstraction layer."""
from .base import ObjectNotFoundError, StorageBackend, StorageError, UploadResult
from .factory import StorageConfig, get_storage_backend, reset_storage_backend


def get_storage() -> StorageBackend:
	"""Request dependency for the configured backend."""
	return get_storage_backend()


__all__ = [
	"ObjectNotFoundError",
	"StorageBackend",
	"StorageError",
	"UploadResult",
	"StorageConfig",
	"get_storage",
	"get_storage_backend",
	"reset_storage_backend",
]
