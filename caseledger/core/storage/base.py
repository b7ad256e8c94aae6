# (c) Copyright Datacraft, 2026
"""Abstract storage backend interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class UploadResult:
	"""Result of an upload operation."""
	key: str
	url: str
	etag: str
	size: int = 0
	content_type: str | None = None


class StorageBackend(ABC):
	"""Abstract base class for object storage used by case documents."""

	@abstractmethod
	async def put(
		self,
		key: str,
		data: bytes,
		content_type: str | None = None,
	) -> UploadResult:
		"""Upload data to storage.

		Args:
			key: Object key/path
			data: Binary data
			content_type: MIME type

		Returns:
			Upload result carrying the public URL
		"""
		...

	@abstractmethod
	async def get(self, key: str) -> bytes:
		"""Download object data.

		Raises:
			ObjectNotFoundError: If object doesn't exist
		"""
		...

	@abstractmethod
	async def delete(self, key: str) -> None:
		"""Delete an object. Missing objects are ignored."""
		...

	@abstractmethod
	async def exists(self, key: str) -> bool:
		...

	@abstractmethod
	def url_for(self, key: str) -> str:
		"""Public URL for a stored key."""
		...

	def key_from_url(self, url: str) -> str | None:
		"""Reverse of ``url_for``; None when the URL is not ours."""
		base = self.url_for("")
		if url.startswith(base):
			return url[len(base):]
		return None


class StorageError(Exception):
	"""Base storage error."""

	def __init__(self, message: str, cause: Exception | None = None):
		super().__init__(message)
		self.cause = cause


class ObjectNotFoundError(StorageError):
	"""Object not found in storage."""

	def __init__(self, key: str):
		super().__init__(f"Object not found: {key}")
		self.key = key
