#!/usr/bin/env python3
"""
Start script - runs the service under uvicorn with a bounded graceful shutdown.

On SIGINT/SIGTERM the poller is told to stop scheduling ticks first, then
uvicorn stops accepting connections and drains in-flight requests for at most
SHUTDOWN_TIMEOUT seconds before the lifespan closes the store.
"""
import math
import sys

import uvicorn

from core.config import settings


class GoldPriceServer(uvicorn.Server):
    """uvicorn.Server that halts the poller as soon as a stop signal arrives."""

    def handle_exit(self, sig, frame) -> None:
        poller = getattr(self.config.app.state, "poller", None)
        if poller is not None:
            poller.request_stop()
        super().handle_exit(sig, frame)


if __name__ == "__main__":
    from app.main import app

    config = uvicorn.Config(
        app,
        host=settings.app_host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        lifespan="on",
        timeout_keep_alive=5,
        timeout_graceful_shutdown=math.ceil(settings.shutdown_timeout),
    )
    server = GoldPriceServer(config)
    server.run()

    if not server.started:
        # Startup failed (missing BRS_API_KEY, unusable DB_PATH, ...)
        sys.exit(3)
