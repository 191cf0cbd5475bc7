"""Entry-point for the GitHub Issue Manager servers."""
import argparse
import logging
import sys

import uvicorn

from app.config import settings
from app.logger import setup_logging


def _run_mcp_stdio():
    from .server import mcp
    logging.info("Starting Issue MCP Server (stdio transport)")
    mcp.run(transport="stdio")


def _run_rest_api():
    from main import app as rest_app

    logging.info("Starting REST API on %s:%s", settings.server_host, settings.server_port)
    uvicorn.run(
        rest_app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


def main():
    parser = argparse.ArgumentParser(description="GitHub Issue Manager")
    parser.add_argument(
        "--mode",
        choices=["mcp-stdio", "rest"],
        default="rest",
        help="mcp-stdio | rest",
    )
    args = parser.parse_args()

    # stdout carries the MCP protocol in stdio mode
    stream = sys.stderr if args.mode == "mcp-stdio" else sys.stdout
    setup_logging(level=settings.log_level, log_file=settings.log_file or None, use_colors=False, stream=stream)

    if args.mode == "mcp-stdio":
        _run_mcp_stdio()
    else:
        _run_rest_api()


if __name__ == "__main__":
    main()
