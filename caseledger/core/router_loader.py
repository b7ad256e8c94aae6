# (c) Copyright Datacraft, 2026
"""
Feature router discovery.

Each package under ``caseledger/core/features`` that ships a ``router``
module exposing ``router`` gets mounted on the application.
"""
import importlib
import logging
import pkgutil
from pathlib import Path

from fastapi import APIRouter

logger = logging.getLogger(__name__)

FEATURES_PACKAGE = "caseledger.core.features"


def discover_routers(features_path: Path) -> list[tuple[APIRouter, str]]:
	routers = []
	for module_info in sorted(pkgutil.iter_modules([str(features_path)]), key=lambda m: m.name):
		if not module_info.ispkg:
			continue
		feature_name = module_info.name
		if not (features_path / feature_name / "router.py").exists():
			continue

		module = importlib.import_module(f"{FEATURES_PACKAGE}.{feature_name}.router")
		router = getattr(module, "router", None)
		if not isinstance(router, APIRouter):
			logger.warning(f"Feature {feature_name} has a router module without a router")
			continue

		routers.append((router, feature_name))
		logger.debug(f"Discovered router for feature {feature_name}")

	return routers
