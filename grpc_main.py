import asyncio
import signal
from typing import Optional

from core.config import settings
from core.logging_config import get_logger
from grpc_app.server import create_server
from infrastructure.database import MongoDatabase
from infrastructure.repositories.record_repository import MongoRecordRepository


logger = get_logger(__name__)


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # pragma: no cover - Windows
            pass


async def main(
    database: Optional[MongoDatabase] = None,
    stop: Optional[asyncio.Event] = None,
) -> None:
    """Serve until `stop` is set (SIGINT/SIGTERM by default).

    The server is stopped before the MongoDB client is closed.
    """
    database = database or MongoDatabase(settings.mongo)
    logger.info("mongo_connecting", database=settings.mongo.database)
    await database.connect()

    try:
        server, port = await create_server(MongoRecordRepository(database.collection))
        address = f"{settings.grpc.host}:{port}"
        logger.info("grpc_starting", address=address)
        await server.start()
        logger.info(
            "grpc_started",
            address=address,
            service=settings.PROJECT_NAME,
            version=settings.VERSION,
            environment=settings.ENVIRONMENT,
        )

        if stop is None:
            stop = asyncio.Event()
            _install_signal_handlers(stop)
        try:
            await stop.wait()
        except (KeyboardInterrupt, asyncio.CancelledError):
            pass
        logger.info("grpc_stopping")
        await server.stop(grace=settings.grpc.shutdown_grace)
        logger.info("grpc_stopped")
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
