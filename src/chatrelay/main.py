"""Application entry point for the chat relay server."""

import structlog

from chatrelay.app import App
from chatrelay.config import Config
from chatrelay.logging import setup_logging
from chatrelay.web.runner import run_server

logger = structlog.get_logger(__name__)


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    logger.info("server_starting", host=config.host, port=config.port, uploads_path=config.uploads_path)
    run_server(app, config)


if __name__ == "__main__":
    main()
