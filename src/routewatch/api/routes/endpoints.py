"""Dashboard snapshot and manual check endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse

from routewatch.api.contracts import SnapshotResponse, build_snapshot
from routewatch.monitor.runner import MonitorRunner

logger = logging.getLogger(__name__)

router = APIRouter()


def get_runner(request: Request) -> MonitorRunner:
    return request.app.state.runner


@router.get("/", response_model=SnapshotResponse)
async def snapshot(request: Request):
    """Current state of every endpoint, grouped by swap pair."""
    endpoints = await get_runner(request).store.snapshot()
    return build_snapshot(endpoints)


@router.post("/check/{name:path}")
async def check_endpoint(name: str, request: Request):
    """Run an immediate full check of one endpoint, then go back to the dashboard."""
    runner = get_runner(request)
    if name not in runner.store:
        raise HTTPException(status_code=404, detail=f"Endpoint {name} not found")

    logger.info(f"Manual check requested for {name}")
    await runner.check_endpoint(name)
    return RedirectResponse(url="/", status_code=303)
