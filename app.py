#!/usr/bin/env python3
"""Event management back end - API entry point.

Usage:
    python app.py

    # Custom port
    python app.py --port 8080

    # Custom database
    python app.py --db sqlite:///data/events.db

Environment (set in .env, generate it with python scripts/setup_env.py):
    DATABASE_URL      Database URL
    WEB_HOST          Listen address (default 0.0.0.0)
    WEB_PORT          Listen port (default 8080)
    WEB_USERNAME      Login username (default admin)
    WEB_PASSWORD      Login password (default admin123)
    AUTH_ENABLED      Require a login token (default true)
    TOKEN_TTL_HOURS   Token lifetime in hours (default 24)
    LOG_LEVEL         Log level (default INFO)
"""
import argparse
import sys

import uvicorn
from loguru import logger

from config.settings import settings


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main():
    parser = argparse.ArgumentParser(description="Event management API")
    parser.add_argument("--host", default=settings.web_host,
                        help=f"Listen address (default: {settings.web_host})")
    parser.add_argument("--port", type=int, default=settings.web_port,
                        help=f"Listen port (default: {settings.web_port})")
    parser.add_argument("--db", default=settings.database_url,
                        help="Database URL")
    parser.add_argument("--no-auth", action="store_true",
                        help="Disable token authentication (local use only)")
    args = parser.parse_args()

    configure_logging(settings.log_level)

    from database import DatabaseManager
    from interface.web.app import create_app

    db = DatabaseManager(args.db)
    try:
        db.create_tables()
        logger.info(f"Database connected: {db.database_url}")

        auth_enabled = settings.auth_enabled and not args.no_auth
        if not auth_enabled:
            logger.warning("Authentication disabled, every route is public")

        app = create_app(
            db,
            username=settings.web_username,
            password=settings.web_password,
            auth_enabled=auth_enabled,
            token_ttl_hours=settings.token_ttl_hours,
        )

        print()
        print("=" * 60)
        print("  Event management API started")
        print(f"  Address: http://localhost:{args.port}")
        print(f"  Database: {db.database_url}")
        print(f"  Auth: {'on' if auth_enabled else 'off'}")
        print("=" * 60)
        print("  Press Ctrl+C to stop")
        print()

        uvicorn.run(app, host=args.host, port=args.port,
                    log_level=settings.log_level.lower())
    finally:
        db.close()
        logger.info("Service stopped")


if __name__ == "__main__":
    main()
