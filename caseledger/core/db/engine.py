# (c) Copyright Datacraft, 2026
"""Async engine and request scoped sessions for the ledger database."""
import logging
import ssl

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from caseledger.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def engine_options(settings: Settings) -> dict:
	"""Keyword arguments for ``create_async_engine``.

	Without ``db_pool_size`` every session opens its own connection, which
	is what short lived workers and the test suite want. SSL applies to
	the asyncpg driver only.
	"""
	options = {"echo": settings.db_echo}
	if settings.db_pool_size is None:
		options["poolclass"] = NullPool
	else:
		options["pool_size"] = settings.db_pool_size
		options["pool_pre_ping"] = True

	if settings.db_ssl and settings.async_db_url.startswith("postgresql+asyncpg"):
		# asyncpg requires an SSL context, not sslmode
		ssl_context = ssl.create_default_context()
		ssl_context.check_hostname = False
		ssl_context.verify_mode = ssl.CERT_NONE
		options["connect_args"] = {"ssl": ssl_context}
	elif settings.db_ssl:
		logger.warning("cl_db_ssl is only honoured for PostgreSQL; ignoring it")
	return options


engine = create_async_engine(get_settings().async_db_url, **engine_options(get_settings()))

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db():
	"""One session per request; routers commit, services only flush."""
	async with AsyncSessionLocal() as session:
		yield session
