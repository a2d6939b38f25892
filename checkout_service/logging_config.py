"""
logging_config.py — Centralized Logging Configuration for the Checkout Service

This module configures unified logging behavior for the entire application.
It ensures that all modules log messages consistently to the console and,
when requested, to a file.

Features:
    • Console output (stdout) for serverless and container platforms
    • Optional file output via the CHECKOUT_LOG_FILE environment variable
    • Process ID tagging for multi-process visibility
    • Reduced verbosity for the HTTP client libraries (httpx, httpcore)
"""

import logging
import os
import sys


def setup_logging():
    """
    Configures the global logging system for the application.

    The configuration includes:
        - Log level: INFO (default), overridable through CHECKOUT_LOG_LEVEL
        - Log format: timestamp, log level, process ID, and message
        - Output destinations:
            1. Console (stdout): real-time logs
            2. File: only if CHECKOUT_LOG_FILE is set
        - Reduced verbosity for httpx/httpcore request logging
    """
    log_format = '%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s'

    handlers = [logging.StreamHandler(sys.stdout)]
    log_file = os.environ.get("CHECKOUT_LOG_FILE")
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=os.environ.get("CHECKOUT_LOG_LEVEL", "INFO").upper(),
        format=log_format,
        handlers=handlers,
    )

    # httpx logs every request at INFO, which includes the shop URL
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name):
    """
    Returns a logger instance for a given module or component name.

    Args:
        name (str): The logger name, typically the module's __name__.

    Returns:
        logging.Logger: A logger that follows the global format and handlers.
    """
    return logging.getLogger(name)
