"""
Runtime configuration for the HTTP and MCP layers.

Values are read from the environment once at import time.
"""

import logging
import os


HOST = os.environ.get("GROUPFLOW_HOST", "127.0.0.1")
PORT = int(os.environ.get("GROUPFLOW_PORT", "8765"))

# Base URL the MCP server uses to reach the HTTP layer
API_BASE = os.environ.get("GROUPFLOW_API_BASE", f"http://{HOST}:{PORT}/api")

# Comma-separated origins, or "*" for all (development only)
CORS_ORIGINS = os.environ.get(
    "GROUPFLOW_CORS_ORIGINS",
    "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"
).split(",")

MAX_HISTORY = int(os.environ.get("GROUPFLOW_MAX_HISTORY", "100"))

LOG_LEVEL = os.environ.get("GROUPFLOW_LOG_LEVEL", "INFO")


def configure_logging(level: str | None = None):
    """Configure root logging for the service entry points."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
