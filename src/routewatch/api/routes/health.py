"""Health check endpoints."""

from fastapi import APIRouter, Request

from routewatch.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "routewatch"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Health check with monitor progress and redacted configuration."""
    runner = request.app.state.runner
    return {
        "status": "healthy",
        "service": "routewatch",
        "version": "0.1.0",
        "endpoints": len(runner.store),
        "cycles": runner.cycles,
        "route_solvers": runner.registry.route_solvers,
        "config": get_settings().get_safe_dict(),
    }
