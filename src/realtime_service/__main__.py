"""Entrypoint: python -m realtime_service [serve|init-db]"""
from __future__ import annotations

import argparse
import asyncio
import logging

import uvicorn

from realtime_service.api.middleware.correlation_id import CorrelationIdFilter
from realtime_service.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(prog="realtime_service")
    parser.add_argument("command", nargs="?", choices=("serve", "init-db"), default="serve")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(CorrelationIdFilter())

    if args.command == "init-db":
        from realtime_service.infrastructure.db.session import create_tables

        asyncio.run(create_tables())
        return

    uvicorn.run(
        "realtime_service.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
