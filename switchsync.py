#!/usr/bin/env python3
"""Switch group synchronization over MQTT."""

import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from config import load_config
from switchsync_app import SwitchSync

logger = logging.getLogger(__name__)


async def main(config_file: Optional[str] = None) -> int:
    """Run until SIGINT/SIGTERM. Returns the process exit code."""
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 2

    app = SwitchSync(config)
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()

    def _shutdown():
        if task is not None and not task.done():
            logger.info("Shutting down...")
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown)
        except NotImplementedError:
            pass

    try:
        await app.start()
    except asyncio.CancelledError:
        pass
    except OSError as e:
        logger.error(f"MQTT broker unreachable: {e}")
        return 1
    finally:
        await app.stop()
    return 0


def run():
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
