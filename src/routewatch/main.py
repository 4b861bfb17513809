"""Main entry point - runs the monitor loop and the dashboard API."""

import argparse
import asyncio
import logging
import signal
from typing import Optional

import uvicorn
from dotenv import load_dotenv

from routewatch.api.app import create_app
from routewatch.catalog import generate_endpoints
from routewatch.config import Settings, get_settings
from routewatch.monitor.runner import MonitorRunner
from routewatch.monitor.store import EndpointStore
from routewatch.notifications import create_notifier
from routewatch.onchain import BalancerOnChainVerifier
from routewatch.routing.factory import create_registry

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_runner(settings: Optional[Settings] = None) -> MonitorRunner:
    """Wire store, registry, notifier and verifier together."""
    settings = settings or get_settings()

    verifier = None
    if settings.onchain_verification:
        verifier = BalancerOnChainVerifier(
            rpc_url_lookup=settings.get_rpc_url,
            timeout=settings.onchain_timeout,
        )

    registry = create_registry(
        settings=settings,
        notifier=create_notifier(settings),
        verifier=verifier,
    )
    store = EndpointStore(generate_endpoints(settings))
    return MonitorRunner(store, registry, interval_hours=settings.check_interval_hours)


class Application:
    """Main application that runs both the monitor and the API."""

    def __init__(self):
        self.settings = get_settings()
        self.runner: Optional[MonitorRunner] = None
        self._shutdown_event = asyncio.Event()

    async def start(self):
        """Start all services."""
        logger.info("Starting RouteWatch...")
        logger.info(f"Environment: {self.settings.environment}")

        self.runner = create_runner(self.settings)

        tasks = [
            asyncio.create_task(self._run_monitor()),
            asyncio.create_task(self._run_api()),
        ]
        logger.info("Monitor and API tasks created")

        # Wait for shutdown signal
        await self._shutdown_event.wait()

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        await self._cleanup()

    async def _run_monitor(self):
        try:
            await self.runner.run()
        except asyncio.CancelledError:
            logger.info("Monitor cancelled")
        except Exception as e:
            logger.error(f"Monitor error: {e}")
            raise

    async def _run_api(self):
        """Run the FastAPI server."""
        try:
            app = create_app(self.runner)
            config = uvicorn.Config(
                app,
                host=self.settings.api_host,
                port=self.settings.api_port,
                log_level="debug" if self.settings.debug else "info",
            )
            server = uvicorn.Server(config)
            logger.info(f"Starting API server on {self.settings.api_host}:{self.settings.api_port}")
            await server.serve()
        except asyncio.CancelledError:
            logger.info("API server cancelled")
        except Exception as e:
            logger.error(f"API error: {e}")
            raise

    async def _cleanup(self):
        """Cleanup resources."""
        from routewatch.notifications.telegram import close_bot

        logger.info("Cleaning up...")
        await close_bot()
        logger.info("Cleanup complete")

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested")
        self._shutdown_event.set()


async def run_once(endpoint: Optional[str] = None) -> int:
    """Check one endpoint, or run a single full cycle, and exit."""
    runner = create_runner()

    if endpoint:
        if not await runner.check_endpoint(endpoint):
            logger.error(f"Unknown endpoint: {endpoint}")
            return 1
        checked = await runner.store.get(endpoint)
        print(f"{checked.name}: {checked.last_status.value} - {checked.message}")
        return 0

    statuses = await runner.check_all_endpoints()
    print(", ".join(f"{status}={count}" for status, count in sorted(statuses.items())))
    return 0


def main():
    """Main entry point."""
    # Provider API keys are read from the environment, so load .env first
    load_dotenv()

    parser = argparse.ArgumentParser(description="Monitor swap aggregator quotes")
    parser.add_argument("--once", action="store_true", help="Run a single check cycle and exit")
    parser.add_argument("--endpoint", help="Check a single endpoint by name and exit")
    args = parser.parse_args()

    configure_logging(get_settings())

    if args.once or args.endpoint:
        raise SystemExit(asyncio.run(run_once(args.endpoint)))

    app = Application()

    # Setup signal handlers
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
