"""FastAPI application factory."""

from fastapi import FastAPI

from routewatch.config import get_settings
from routewatch.monitor.runner import MonitorRunner


def create_app(runner: MonitorRunner) -> FastAPI:
    """Create the dashboard API around a monitor runner."""
    settings = get_settings()

    app = FastAPI(
        title="RouteWatch API",
        description="Swap aggregator quote monitor",
        version="0.1.0",
        debug=settings.debug,
    )
    app.state.runner = runner

    # Register routes
    from routewatch.api.routes import endpoints, health

    app.include_router(health.router, tags=["Health"])
    app.include_router(endpoints.router, tags=["Endpoints"])

    return app
