import logging
import os
from contextlib import asynccontextmanager
from logging.config import dictConfig
from pathlib import Path

import yaml
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from caseledger.core.config import get_settings
from caseledger.core.exceptions import LedgerError, error_body
from caseledger.core.router_loader import discover_routers
from caseledger.core.version import __version__

logger = logging.getLogger(__name__)
config = get_settings()
prefix = config.api_prefix


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Application lifespan handler for startup/shutdown events."""
	logger.info("Starting CaseLedger API server...")
	yield
	logger.info("Shutting down CaseLedger API server...")


app = FastAPI(
	title="CaseLedger REST API",
	version=__version__,
	lifespan=lifespan,
)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
	expose_headers=[
		"Content-Disposition",
		"Content-Type",
		"Content-Length",
	]
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
	if exc.status_code >= 500:
		logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
	return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	errors = exc.errors()
	message = "Invalid input"
	if errors:
		first = errors[0]
		location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
		message = f"{location}: {first.get('msg')}" if location else first.get("msg", message)
	return JSONResponse(status_code=400, content=error_body("VALIDATION_ERROR", message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
	logger.exception(f"Unhandled error on {request.method} {request.url.path}")
	return JSONResponse(
		status_code=500,
		content=error_body("SERVER_ERROR", "Internal server error"),
	)


# Auto-discover and register all feature routers
features_path = Path(__file__).parent / "core" / "features"
routers = discover_routers(features_path)

for router, feature_name in routers:
	app.include_router(router, prefix=prefix)


logging_config_path = Path(
	os.environ.get("CASELEDGER_LOGGING_CFG", str(config.log_config or ""))
)

if logging_config_path.is_file():
	with open(logging_config_path, "r") as stream:
		logging_config = yaml.safe_load(stream)

	dictConfig(logging_config)
