# (c) Copyright Datacraft, 2026
"""Local filesystem storage backend for development and testing."""

import hashlib
from pathlib import Path

import aiofiles
import aiofiles.os

from .base import (
	ObjectNotFoundError,
	StorageBackend,
	StorageError,
	UploadResult,
)


class LocalStorageBackend(StorageBackend):
	"""Local filesystem storage backend for development and testing."""

	def __init__(self, base_path: str | Path, base_url: str = "/media"):
		"""Initialize local storage backend.

		Args:
			base_path: Base directory for storage
			base_url: URL prefix the media directory is served under
		"""
		self.base_path = Path(base_path)
		self.base_url = base_url.rstrip("/")
		self.base_path.mkdir(parents=True, exist_ok=True)

	def _full_path(self, key: str) -> Path:
		path = (self.base_path / key.lstrip("/")).resolve()
		if self.base_path.resolve() not in path.parents:
			raise StorageError(f"Key escapes storage root: {key}")
		return path

	def _compute_etag(self, data: bytes) -> str:
		"""Compute MD5 ETag for data."""
		return hashlib.md5(data).hexdigest()

	def url_for(self, key: str) -> str:
		return f"{self.base_url}/{key.lstrip('/')}"

	async def put(
		self,
		key: str,
		data: bytes,
		content_type: str | None = None,
	) -> UploadResult:
		path = self._full_path(key)

		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			async with aiofiles.open(path, "wb") as f:
				await f.write(data)
		except OSError as e:
			raise StorageError(f"Failed to upload {key}", e) from e

		return UploadResult(
			key=key,
			url=self.url_for(key),
			etag=self._compute_etag(data),
			size=len(data),
			content_type=content_type,
		)

	async def get(self, key: str) -> bytes:
		path = self._full_path(key)

		if not path.exists():
			raise ObjectNotFoundError(key)

		try:
			async with aiofiles.open(path, "rb") as f:
				return await f.read()
		except OSError as e:
			raise StorageError(f"Failed to get {key}", e) from e

	async def delete(self, key: str) -> None:
		path = self._full_path(key)

		try:
			if path.exists():
				await aiofiles.os.remove(path)
		except OSError as e:
			raise StorageError(f"Failed to delete {key}", e) from e

	async def exists(self, key: str) -> bool:
		return self._full_path(key).exists()
