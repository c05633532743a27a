from __future__ import annotations

import logging
from typing import Optional

from lob_sync.channel import EventChannel
from lob_sync.logging_config import setup_logging
from lob_sync.settings import SyncConfig, load_config
from lob_sync.synchronizer import SyncAborted, Synchronizer
from lob_sync.ws_stream import WooXWSStream


def run(config: SyncConfig) -> int:
    log = logging.getLogger("runner")
    log.info(
        "Config symbol=%s depth=%d ws=%s rest=%s buffer_delay_s=%.1f",
        config.symbol,
        config.depth,
        config.ws_url,
        config.rest_url,
        config.buffer_delay_s,
    )

    channel = EventChannel()
    stream = WooXWSStream(config, channel)
    stream.start()

    sync = Synchronizer(config, channel)
    try:
        sync.run()
    except SyncAborted as exc:
        log.error("Exiting: %s", exc)
        return 1
    except KeyboardInterrupt:
        log.info("Interrupted; shutting down")
        channel.close()
        stream.stop()
        return 130
    return 0


def main(config_path: Optional[str] = None) -> int:
    try:
        config = load_config(config_path)
    except (OSError, ValueError, TypeError) as exc:
        logging.basicConfig()
        logging.getLogger("runner").error("Invalid configuration: %s", exc)
        return 2

    log_path = setup_logging(
        config.log_level,
        component="sync",
        subdir=config.symbol,
        console_to_stderr=config.render,
    )
    logging.getLogger("runner").info("Logging to %s", log_path)
    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
