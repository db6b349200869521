"""Ingestion worker entry point: ``python -m techdocs.worker``.

Consumes scrape jobs from the Redis stream until SIGINT or SIGTERM, then
stops the pipeline and closes every connection.
"""

import asyncio
import logging
import signal

from techdocs.config import get_settings
from techdocs.infrastructure.container import ServiceContainer
from techdocs.infrastructure.logging.log_config import setup_logging

logger = logging.getLogger(__name__)


async def run() -> None:
    setup_logging()

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            pass

    container = ServiceContainer(get_settings())
    await container.open()
    try:
        pipeline = container.build_ingestion_pipeline()
        await pipeline.start()
        logger.info("Ingestion worker running, waiting for scrape jobs")
        await stop.wait()
        logger.info("Shutdown requested")
    finally:
        await container.close()


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
