import asyncio
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from gym_api.database import get_session_factory
from gym_api.analytics.cruds.analytics import (
    ReportSourceError,
    get_dashboard_stats as build_stats,
    get_popular_classes as build_popular_classes,
    get_recent_activity as build_recent_activity,
    get_recent_members as build_recent_members,
    get_reporting_analytics as build_report,
    get_upcoming_classes as build_upcoming_classes,
)
from gym_api.analytics.export import build_dashboard_csv, export_filename
from gym_api.analytics.panels import UPCOMING_WINDOW_DAYS
from gym_api.analytics.schemas.report import (
    ActivityEntry,
    DashboardStats,
    RecentMemberEntry,
    ReportingAnalytics,
    ScheduledClassEntry,
    UpcomingClasses,
)


router = APIRouter(prefix="/analytics")


@router.get("/reports", response_model=ReportingAnalytics)
async def get_reporting_analytics(session_factory=Depends(get_session_factory)):
    """Return the full reporting & analytics snapshot."""
    try:
        return await build_report(session_factory)
    except ReportSourceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(session_factory=Depends(get_session_factory)):
    """Return current totals with their change against the previous calendar month."""
    try:
        return await build_stats(session_factory)
    except ReportSourceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/upcoming-classes", response_model=UpcomingClasses)
async def get_upcoming_classes(
    days: int = Query(UPCOMING_WINDOW_DAYS, ge=1, le=90),
    session_factory=Depends(get_session_factory),
):
    try:
        return await build_upcoming_classes(session_factory, days=days)
    except ReportSourceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/popular-classes", response_model=List[ScheduledClassEntry])
async def get_popular_classes(session_factory=Depends(get_session_factory)):
    try:
        return await build_popular_classes(session_factory)
    except ReportSourceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/recent-activity", response_model=List[ActivityEntry])
async def get_recent_activity(session_factory=Depends(get_session_factory)):
    try:
        return await build_recent_activity(session_factory)
    except ReportSourceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/recent-members", response_model=List[RecentMemberEntry])
async def get_recent_members(session_factory=Depends(get_session_factory)):
    try:
        return await build_recent_members(session_factory)
    except ReportSourceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/export")
async def export_dashboard(session_factory=Depends(get_session_factory)):
    """Download the dashboard summary, daily revenue and recent activity as CSV."""
    now = datetime.now(timezone.utc)
    try:
        stats, analytics, activity = await asyncio.gather(
            build_stats(session_factory, now),
            build_report(session_factory, now),
            build_recent_activity(session_factory, now),
        )
    except ReportSourceError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return Response(
        content=build_dashboard_csv(now, stats, analytics, activity),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(now)}"'},
    )
