# (c) Copyright Datacraft, 2026
"""Storage backend factory."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from caseledger.core.config import Settings, get_settings

from .base import StorageBackend


class StorageBackendType(str, Enum):
	"""Supported storage backend types."""
	LOCAL = "local"


@dataclass
class StorageConfig:
	"""Storage configuration."""
	backend: StorageBackendType = StorageBackendType.LOCAL
	local_path: Path = Path("media")
	base_url: str = "/media"

	@classmethod
	def from_settings(cls, settings: Settings | None = None) -> "StorageConfig":
		"""Create config from application settings."""
		settings = settings or get_settings()
		return cls(
			local_path=settings.media_root,
			base_url=settings.media_url,
		)


_storage_backend: StorageBackend | None = None


def get_storage_backend(config: StorageConfig | None = None) -> StorageBackend:
	"""Get configured storage backend.

	Args:
		config: Storage configuration (uses settings if None)

	Returns:
		Storage backend instance
	"""
	global _storage_backend

	if _storage_backend is not None and config is None:
		return _storage_backend

	if config is None:
		config = StorageConfig.from_settings()

	backend = _create_backend(config)

	if _storage_backend is None:
		_storage_backend = backend

	return backend


def _create_backend(config: StorageConfig) -> StorageBackend:
	"""Create storage backend from config."""
	if config.backend == StorageBackendType.LOCAL:
		from .local import LocalStorageBackend
		return LocalStorageBackend(
			base_path=config.local_path,
			base_url=config.base_url,
		)

	raise ValueError(f"Unknown storage backend: {config.backend}")


def reset_storage_backend() -> None:
	"""Reset cached storage backend (for testing)."""
	global _storage_backend
	_storage_backend = None
