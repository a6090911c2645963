#!/usr/bin/env python3
"""Main entry point for the process metrics exporter"""
import sys
import uvicorn
from config import Config
from app.server import MetricsServer
from logging_config import setup_structured_logging, get_logger, log_server_startup, log_error


def main():
    """Main application entry point"""
    logger = get_logger(__name__)
    try:
        config = Config()

        setup_structured_logging(config)
        log_server_startup(logger, config)

        server = MetricsServer(config)

        uvicorn.run(
            server.get_app(),
            host=config.metrics_host,
            port=config.metrics_port,
            log_config=None  # We handle logging ourselves
        )

    except Exception as e:
        log_error(logger, e, {"component": "main", "phase": "startup"})
        sys.exit(1)


if __name__ == '__main__':
    main()
