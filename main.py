#!/usr/bin/env python3
"""
Bizledger - Entry point for running the application.

Usage:
    python main.py                  # Run web server on port 5000
    python main.py --reload         # Restart on code changes (development)
"""

import argparse
import logging

import uvicorn

from bizledger.logging_context import setup_correlation_logging

setup_correlation_logging(logging.INFO)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Bizledger finance tracker")
    parser.add_argument("--host", default="0.0.0.0", help="Web server host")
    parser.add_argument("--port", type=int, default=5000, help="Web server port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    # The database is opened by the app's lifespan, in the loop that serves requests.
    logger.info(f"Running web server on {args.host}:{args.port}")
    uvicorn.run("bizledger.app:app", host=args.host, port=args.port, reload=args.reload, log_level="info")


if __name__ == "__main__":
    main()
