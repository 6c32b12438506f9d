"""Server entry point for running the FastAPI application."""

import asyncio
import signal

import structlog
import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file before configuration is read
load_dotenv()

from . import config  # noqa: E402

logger = structlog.get_logger(__name__)


class Server:
    """Custom server wrapper with proper signal handling."""

    def __init__(self, config: uvicorn.Config):
        self.server = uvicorn.Server(config)

    def handle_exit(self, sig, _frame):
        """Handle exit signals."""
        logger.info("shutdown_signal_received", signal=signal.Signals(sig).name)
        self.server.should_exit = True

    async def serve(self):
        """Run the server with proper signal handling."""
        signal.signal(signal.SIGINT, self.handle_exit)
        signal.signal(signal.SIGTERM, self.handle_exit)

        await self.server.serve()


def run_server(host: str = config.HOST, port: int = config.PORT, reload: bool = False):
    """Run the FastAPI server."""
    if reload:
        # Ctrl-C handling may be degraded in reload mode due to subprocess
        uvicorn.run(
            "notehub.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level="info",
            access_log=False,
        )
    else:
        server = Server(
            uvicorn.Config(
                "notehub.app:app",
                host=host,
                port=port,
                log_level="info",
                access_log=False,
            )
        )
        asyncio.run(server.serve())


def main():
    """Console entry point."""
    run_server()


if __name__ == "__main__":
    run_server(reload=True)
