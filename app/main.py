# =============================================================================
# app/main.py - Process Entry Point
# =============================================================================
# Runs the full bootstrap sequence, which ends by serving the application
# with uvicorn. A startup failure is logged and the process exits with
# status 1 without ever opening the listener.
#
# Usage:
#   python -m app.main
#   publicapi                       # console script
# =============================================================================

import asyncio
import logging
import sys

from app.bootstrap import build_sequence
from app.config import DEFAULT_CONFIG_FILE
from app.telemetry import LOG_FORMAT
from core.registry import StartupError
from core.sequencer import BootstrapContext

logger = logging.getLogger(__name__)


async def serve(config_file: str | None = DEFAULT_CONFIG_FILE) -> None:
    """Bootstrap and serve until shutdown."""
    context = BootstrapContext(options={"config_file": config_file})
    await build_sequence().run(context)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        asyncio.run(serve())
    except StartupError as e:
        logger.critical(f"Startup failed at step '{e.step}': {e}", exc_info=e.__cause__)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
