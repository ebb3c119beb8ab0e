"""Main entry point for the support query engine."""

import asyncio
import logging

from dotenv import load_dotenv

from deskquery.config import get_settings
from deskquery.engine import create_engine
from deskquery.web_server import WebServer

# Load environment variables
load_dotenv()

# Configure logging (use INFO as default)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting deskquery in {settings.environment.value} mode")
    logger.info(f"Using LLM provider: {settings.llm_provider.value}")

    try:
        settings.validate_provider_config()
    except ValueError as e:
        logger.warning(f"Configuration error: {e}; AI answers are disabled")

    engine = create_engine(settings)
    web_server = WebServer(engine, port=settings.port)
    web_runner = await web_server.start()

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down...")
        await web_server.stop(web_runner)


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
