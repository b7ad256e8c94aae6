# (c) Copyright Datacraft, 2026
"""
API router for dashboard reports.
"""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from caseledger.core.auth import CurrentActor, require_elevated
from caseledger.core.db.engine import get_db

from .periods import ReportPeriod
from .schema import DashboardAlerts, DashboardCharts, DashboardStats, EnhancedStats
from .service import ReportService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	period: ReportPeriod = ReportPeriod.MONTH,
):
	return await ReportService(db).stats(period)


@router.get("/enhanced", response_model=EnhancedStats)
async def get_enhanced_stats(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	period: ReportPeriod = ReportPeriod.MONTH,
):
	"""Operational and financial figures; elevated actors only."""
	require_elevated(actor)
	return await ReportService(db).enhanced(period)


@router.get("/charts", response_model=DashboardCharts)
async def get_charts(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
	period: ReportPeriod = ReportPeriod.MONTH,
):
	return await ReportService(db).charts(period)


@router.get("/alerts", response_model=DashboardAlerts)
async def get_alerts(
	db: Annotated[AsyncSession, Depends(get_db)],
	actor: CurrentActor,
):
	return await ReportService(db).alerts()
