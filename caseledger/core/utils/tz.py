# (c) Copyright Datacraft, 2026
"""Time helpers. Timestamps are stored as naive UTC."""
from datetime import datetime, timezone


def utc_now() -> datetime:
	return datetime.now(timezone.utc).replace(tzinfo=None)
